"""Binding configured time series to live model elements.

Each ``elements`` entry names a model element, the parameter to set, and the
time series to feed it. Entries are matched against the model's element list
by identifier; the parameter kind selects a :class:`ParameterBinder` from the
registry, which applies the series only when the element exposes the matching
capability. An entry that no element with its id accepts is skipped, not
escalated: the skip is recorded as a ``capability_mismatch`` diagnostic that is logged at debug level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from rtxconf.diagnostics import DiagnosticKind, Diagnostics
from rtxconf.errors import EntityConstructionError
from rtxconf.log_config import get_logger
from rtxconf.network.elements import Capability, Element

if TYPE_CHECKING:
    from rtxconf.network.model import Model
    from rtxconf.registry import TypeRegistry
    from rtxconf.settings import Setting
    from rtxconf.timeseries import TimeSeries

logger = get_logger(__name__)

SECTION = "elements"


@dataclass(frozen=True)
class ParameterBinder:
    """Applies a time series to elements that support ``capability``."""

    capability: Capability

    def accepts(self, element: Element) -> bool:
        return element.supports(self.capability)

    def bind(self, element: Element, series: TimeSeries) -> bool:
        """Set the parameter on ``element``.

        Returns:
            True if the element accepted the series, False if it lacks the
            capability (the element is left untouched).
        """
        if not self.accepts(element):
            return False
        element.set_parameter(self.capability, series)
        return True


def configure_elements(
    model: Model,
    entries: Iterable[Setting],
    table: dict[str, TimeSeries],
    registry: TypeRegistry,
    diagnostics: Diagnostics,
) -> int:
    """Apply every binding entry to the matching model elements.

    Args:
        model: Loaded model exposing its element list.
        entries: ``elements`` section entries.
        table: Completed time-series table.
        registry: Source of parameter binders.
        diagnostics: Receives one entry per skipped binding.

    Returns:
        Number of bindings applied.
    """
    elements = model.elements()
    applied = 0
    for entry in entries:
        try:
            model_id = entry.get("model_id")
        except EntityConstructionError as exc:
            diagnostics.report(
                DiagnosticKind.ENTITY_CONSTRUCTION,
                SECTION,
                f"skipping element entry {entry.path}: {exc}",
            )
            continue

        matches = [el for el in elements if el.name == model_id]
        if not matches:
            diagnostics.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                SECTION,
                f"no model element with id {model_id}",
                entity=model_id,
                reference=model_id,
            )
            continue

        try:
            parameter = entry.get("parameter")
            binder = registry.lookup("parameters", parameter)
            ts_name = entry.get("timeseries")
        except EntityConstructionError as exc:
            diagnostics.report(
                DiagnosticKind.ENTITY_CONSTRUCTION,
                SECTION,
                f"skipping element {model_id}: {exc}",
                entity=model_id,
            )
            continue

        series = table.get(ts_name)
        if series is None:
            diagnostics.report(
                DiagnosticKind.UNRESOLVED_REFERENCE,
                SECTION,
                f"could not find time series \"{ts_name}\" for element {model_id}",
                entity=model_id,
                reference=ts_name,
            )
            continue

        bound = [el for el in matches if binder.bind(el, series)]
        for element in bound:
            logger.debug(f"bound {ts_name} to {element!r} as {parameter}")
        applied += len(bound)
        # a node and a link may share an id; only a binding nobody accepts is skipped
        if not bound:
            diagnostics.report(
                DiagnosticKind.CAPABILITY_MISMATCH,
                SECTION,
                f"no element {model_id} accepts parameter {parameter}",
                entity=model_id,
            )
    logger.info(f"Applied {applied} element bindings")
    return applied
