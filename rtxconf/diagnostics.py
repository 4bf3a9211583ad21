"""Diagnostic channel for recoverable load problems.

Every entity, edge, or binding that a load skips is recorded here so that
callers can inspect what was dropped and, in strict mode, fail on it.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from rtxconf.log_config import get_logger

logger = get_logger(__name__)


class DiagnosticKind(str, Enum):
    """Category of a recorded load problem."""

    ENTITY_CONSTRUCTION = "entity_construction"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    CAPABILITY_MISMATCH = "capability_mismatch"
    DUPLICATE_NAME = "duplicate_name"
    CYCLE = "cycle"
    WARNING = "warning"


# Kinds that mean something configured was left out of the object graph.
SKIP_KINDS = frozenset(
    {
        DiagnosticKind.ENTITY_CONSTRUCTION,
        DiagnosticKind.UNRESOLVED_REFERENCE,
        DiagnosticKind.CAPABILITY_MISMATCH,
    }
)


@dataclass(frozen=True)
class Diagnostic:
    """A single recorded problem.

    Attributes:
        kind: Problem category.
        section: Document section that produced it.
        message: Human-readable description.
        entity: Name of the entity being built or wired, if any.
        reference: Name that failed to resolve, if any.
    """

    kind: DiagnosticKind
    section: str
    message: str
    entity: str | None = None
    reference: str | None = None

    def __str__(self) -> str:
        return f"[{self.section}] {self.message}"


class Diagnostics:
    """Ordered collection of diagnostics with logging on report."""

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def report(
        self,
        kind: DiagnosticKind,
        section: str,
        message: str,
        *,
        entity: str | None = None,
        reference: str | None = None,
    ) -> Diagnostic:
        """Record a diagnostic and log it.

        Capability mismatches are logged at debug level; everything else at
        warning level.
        """
        diag = Diagnostic(
            kind=kind,
            section=section,
            message=message,
            entity=entity,
            reference=reference,
        )
        self._items.append(diag)
        level = (
            logging.DEBUG
            if kind is DiagnosticKind.CAPABILITY_MISMATCH
            else logging.WARNING
        )
        logger.log(level, str(diag))
        return diag

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self._items if d.kind is kind]

    def referencing(self, name: str) -> list[Diagnostic]:
        """Return diagnostics whose unresolved reference is ``name``."""
        return [d for d in self._items if d.reference == name]

    def summary(self) -> dict[str, int]:
        """Return counts per diagnostic kind (kinds with no entries omitted)."""
        counts = Counter(d.kind.value for d in self._items)
        return dict(sorted(counts.items()))

    def skipped(self) -> int:
        """Number of entities, edges, and bindings left out of the graph."""
        return sum(1 for d in self._items if d.kind in SKIP_KINDS)

    def clear(self) -> None:
        self._items.clear()
