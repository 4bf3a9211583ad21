"""Deferred resolution of named references between time series.

Time series may name their sources before those sources are declared, so the
builder never resolves a reference when it reads one. It records a pending
edge instead, and :meth:`LinkResolver.resolve` attaches every edge in a single
pass once the complete name table exists.

Resolution rules:

- A single-source edge attaches ``source`` when both names resolve.
- A multiplier edge attaches the basis series as ``multiplier``.
- An aggregation edge resolves its dependent once and then each weighted
  source on its own, so one missing source does not drop the others.
- A node may not reference itself.

Any edge that cannot be attached is reported and skipped. A dependent is never
partially modified by a failed edge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar, Union

import networkx as nx

from rtxconf.diagnostics import DiagnosticKind, Diagnostics
from rtxconf.errors import UnresolvedReferenceError
from rtxconf.log_config import get_logger
from rtxconf.timeseries import AggregatorTimeSeries, MultiplierTimeSeries, TimeSeries

logger = get_logger(__name__)

SECTION = "timeseries"

T = TypeVar("T", bound=TimeSeries)


@dataclass(frozen=True)
class SourceEdge:
    """``dependent`` reads from the series named ``source``."""

    dependent: str
    source: str


@dataclass(frozen=True, eq=False)
class MultiplierEdge:
    """``node`` is multiplied by the series named ``basis``."""

    node: MultiplierTimeSeries
    basis: str

    @property
    def dependent(self) -> str:
        return self.node.name


@dataclass(frozen=True)
class AggregationEdge:
    """``dependent`` sums the named sources with the given weights."""

    dependent: str
    sources: tuple[tuple[str, float], ...]


PendingEdge = Union[SourceEdge, MultiplierEdge, AggregationEdge]


class LinkResolver:
    """Append-only list of pending edges consumed by one resolution pass."""

    def __init__(self) -> None:
        self._edges: list[PendingEdge] = []

    def add(self, edge: PendingEdge) -> None:
        self._edges.append(edge)

    def discard(self, dependent: str) -> int:
        """Drop every pending edge recorded for ``dependent``.

        Used when a later declaration replaces a node of the same name.

        Returns:
            Number of edges dropped.
        """
        before = len(self._edges)
        self._edges = [e for e in self._edges if e.dependent != dependent]
        return before - len(self._edges)

    def mark(self) -> int:
        """Return a position that :meth:`rollback` can return to."""
        return len(self._edges)

    def rollback(self, mark: int) -> None:
        """Drop edges added after ``mark`` by an entity that failed to build."""
        del self._edges[mark:]

    @property
    def pending(self) -> tuple[PendingEdge, ...]:
        return tuple(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def resolve(
        self, table: dict[str, TimeSeries], diagnostics: Diagnostics
    ) -> int:
        """Attach every pending edge against the completed name table.

        Each edge is consumed exactly once; calling again resolves nothing.

        Args:
            table: Every constructed time series, by name.
            diagnostics: Receives one entry per reference left unattached.

        Returns:
            Number of references attached.
        """
        edges, self._edges = self._edges, []
        attached = 0
        for edge in edges:
            if isinstance(edge, SourceEdge):
                attached += _resolve_source(edge, table, diagnostics)
            elif isinstance(edge, MultiplierEdge):
                attached += _resolve_multiplier(edge, table, diagnostics)
            else:
                attached += _resolve_aggregation(edge, table, diagnostics)
        logger.info(f"Resolved {attached} time series references")
        return attached


def _dependent(name: str, table: dict[str, TimeSeries], kind: type[T]) -> T:
    ts = table.get(name)
    if not isinstance(ts, kind):
        raise UnresolvedReferenceError(
            f"cannot locate Timeseries {name}", entity=name, reference=name
        )
    return ts


def _referenced(dependent: str, name: str, table: dict[str, TimeSeries]) -> TimeSeries:
    if name == dependent:
        raise UnresolvedReferenceError(
            f"Timeseries {name} references itself; reference ignored",
            entity=dependent,
            reference=name,
        )
    source = table.get(name)
    if source is None:
        raise UnresolvedReferenceError(
            f"cannot locate source Timeseries {name} (specified by Timeseries {dependent})",
            entity=dependent,
            reference=name,
        )
    return source


def _report(exc: UnresolvedReferenceError, diagnostics: Diagnostics) -> None:
    diagnostics.report(
        DiagnosticKind.UNRESOLVED_REFERENCE,
        SECTION,
        str(exc),
        entity=exc.entity,
        reference=exc.reference,
    )


def _resolve_source(
    edge: SourceEdge, table: dict[str, TimeSeries], diagnostics: Diagnostics
) -> int:
    try:
        ts = _dependent(edge.dependent, table, TimeSeries)
        ts.source = _referenced(edge.dependent, edge.source, table)
    except UnresolvedReferenceError as exc:
        _report(exc, diagnostics)
        return 0
    return 1


def _resolve_multiplier(
    edge: MultiplierEdge, table: dict[str, TimeSeries], diagnostics: Diagnostics
) -> int:
    try:
        # the node may have been replaced by a later declaration of the same name
        if table.get(edge.node.name) is not edge.node:
            raise UnresolvedReferenceError(
                f"cannot locate Timeseries {edge.node.name}",
                entity=edge.node.name,
                reference=edge.node.name,
            )
        edge.node.multiplier = _referenced(edge.node.name, edge.basis, table)
    except UnresolvedReferenceError as exc:
        _report(exc, diagnostics)
        return 0
    return 1


def _resolve_aggregation(
    edge: AggregationEdge, table: dict[str, TimeSeries], diagnostics: Diagnostics
) -> int:
    try:
        ts = _dependent(edge.dependent, table, AggregatorTimeSeries)
    except UnresolvedReferenceError as exc:
        _report(exc, diagnostics)
        return 0
    attached = 0
    for source_name, weight in edge.sources:
        try:
            source = _referenced(edge.dependent, source_name, table)
        except UnresolvedReferenceError as exc:
            _report(exc, diagnostics)
            continue
        ts.add_source(source, weight)
        attached += 1
    return attached


def dependency_graph(table: dict[str, TimeSeries]) -> nx.DiGraph:
    """Build the directed graph of attached references.

    Nodes are series names with a ``kind`` attribute. Each edge points from a
    source to the series that reads it; aggregation edges carry ``weight`` and
    multiplier edges carry ``role="multiplier"``.
    """
    graph = nx.DiGraph()
    for name, ts in table.items():
        graph.add_node(name, kind=ts.kind, units=ts.units)
    for name, ts in table.items():
        if ts.source is not None and ts.source.name in graph:
            graph.add_edge(ts.source.name, name, role="source")
        if isinstance(ts, AggregatorTimeSeries):
            for source, weight in ts.sources:
                if source.name in graph:
                    graph.add_edge(source.name, name, role="aggregate", weight=weight)
        if isinstance(ts, MultiplierTimeSeries) and ts.multiplier is not None:
            if ts.multiplier.name in graph:
                graph.add_edge(ts.multiplier.name, name, role="multiplier")
    return graph


def find_cycles(table: dict[str, TimeSeries]) -> list[list[str]]:
    """Return every reference cycle among the attached series."""
    graph = dependency_graph(table)
    return [sorted(c) for c in nx.simple_cycles(graph)]
