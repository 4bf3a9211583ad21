"""Selection of which model states are persisted to the default state record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rtxconf.diagnostics import DiagnosticKind, Diagnostics
from rtxconf.errors import EntityConstructionError
from rtxconf.log_config import get_logger

if TYPE_CHECKING:
    from rtxconf.network.model import Model
    from rtxconf.records import PointRecord
    from rtxconf.settings import Setting

logger = get_logger(__name__)

SECTION = "save"

SAVE_ALL = "all"
SAVE_MEASURED = "measured"
SAVE_ZONE_DEMAND = "zone_demand"
SAVE_STATES = (SAVE_ALL, SAVE_MEASURED, SAVE_ZONE_DEMAND)


@dataclass
class PersistencePolicy:
    """Outcome of the ``save`` section.

    Attributes:
        default_record: Record receiving persisted states, or None.
        selections: Selection tokens that were applied, in document order.
    """

    default_record: PointRecord | None = None
    selections: list[str] = field(default_factory=list)


def save_measured(model: Model, record: PointRecord) -> int:
    """Persist only states that have a measured counterpart.

    Junction head and quality states are stored when the junction has a head
    or quality measurement bound; pipe flow states when the pipe has a flow
    measurement. Everything else is left as it was.

    Returns:
        Number of states that received ``record``.
    """
    count = 0
    for junction in model.junctions():
        if junction.has_head_measure:
            junction.head.record = record
            count += 1
        if junction.has_quality_measure:
            junction.quality.record = record
            count += 1
    for pipe in model.pipes():
        if pipe.has_flow_measure:
            pipe.flow.record = record
            count += 1
    return count


def apply_save_options(
    save: Setting | None,
    records: dict[str, PointRecord],
    model: Model | None,
    diagnostics: Diagnostics,
) -> PersistencePolicy:
    """Apply the persistence policy described by the ``save`` section.

    Args:
        save: The ``save`` group, or None when the document has none.
        records: Built point records by name.
        model: Loaded model, or None when no model was built.
        diagnostics: Receives warnings and skipped selections.

    Returns:
        The policy that was applied.
    """
    policy = PersistencePolicy()
    if save is None or not save.exists("staterecord"):
        diagnostics.report(
            DiagnosticKind.WARNING,
            SECTION,
            "no state record specified; model results will not be persisted",
        )
        return policy

    try:
        record_name = save.get("staterecord")
    except EntityConstructionError as exc:
        diagnostics.report(DiagnosticKind.ENTITY_CONSTRUCTION, SECTION, str(exc))
        return policy

    record = records.get(record_name)
    if record is None:
        diagnostics.report(
            DiagnosticKind.UNRESOLVED_REFERENCE,
            SECTION,
            f"could not retrieve point record by name: {record_name}",
            reference=record_name,
        )
        return policy
    policy.default_record = record

    if not save.exists("save_states"):
        return policy
    states = save.lookup("save_states")
    if not states.is_list:
        diagnostics.report(
            DiagnosticKind.ENTITY_CONSTRUCTION,
            SECTION,
            "save_states should be a list: check config format",
        )
        return policy

    if model is None:
        diagnostics.report(
            DiagnosticKind.WARNING,
            SECTION,
            "no model loaded; save_states ignored",
        )
        return policy

    for token in states.value:
        if token == SAVE_ALL:
            model.set_storage(record)
        elif token == SAVE_MEASURED:
            n = save_measured(model, record)
            logger.info(f"Persisting {n} measured states to {record.name}")
        elif token == SAVE_ZONE_DEMAND:
            for zone in model.zones():
                zone.set_record(record)
        else:
            diagnostics.report(
                DiagnosticKind.ENTITY_CONSTRUCTION,
                SECTION,
                f"unknown save state '{token}'; expected one of {list(SAVE_STATES)}",
            )
            continue
        policy.selections.append(token)
    return policy
