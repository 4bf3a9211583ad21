"""Shared state handed to entity factories while a document is being built."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rtxconf.diagnostics import DiagnosticKind, Diagnostics
from rtxconf.links import LinkResolver

if TYPE_CHECKING:
    from rtxconf.clock import Clock
    from rtxconf.records import PointRecord
    from rtxconf.settings import ConfigDocument
    from rtxconf.timeseries import TimeSeries


@dataclass
class BuildContext:
    """Name tables and collaborators visible to every factory.

    The tables are filled section by section in document order, so a factory
    only sees entries from sections that have already been built. Time-series
    references are never looked up here; they go to ``links`` and are resolved
    once every series exists.
    """

    document: ConfigDocument
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    records: dict[str, PointRecord] = field(default_factory=dict)
    clocks: dict[str, Clock] = field(default_factory=dict)
    timeseries: dict[str, TimeSeries] = field(default_factory=dict)
    links: LinkResolver = field(default_factory=LinkResolver)

    def warn(
        self,
        section: str,
        message: str,
        *,
        entity: str | None = None,
        kind: DiagnosticKind = DiagnosticKind.ENTITY_CONSTRUCTION,
        reference: str | None = None,
    ) -> None:
        self.diagnostics.report(
            kind, section, message, entity=entity, reference=reference
        )
