"""Exception types raised while loading a configuration document.

Only :class:`DocumentError` escapes a load. Every other error is raised at the
point where a single entity, edge, or binding fails and is caught by the stage
that owns it, which turns it into a diagnostic and moves on.
"""

from __future__ import annotations


class RtxConfigError(Exception):
    """Base class for all rtxconf errors."""


class DocumentError(RtxConfigError):
    """The configuration document is unreadable, malformed, or mis-shaped."""


class EntityConstructionError(RtxConfigError):
    """A single configured entity could not be built.

    Attributes:
        section: Document section the entity belongs to (e.g. "timeseries").
        entity: Entity name when known.
    """

    def __init__(
        self, message: str, *, section: str = "", entity: str | None = None
    ) -> None:
        super().__init__(message)
        self.section = section
        self.entity = entity


class UnknownTypeError(EntityConstructionError):
    """A discriminator is not registered in the requested namespace."""

    def __init__(self, namespace: str, discriminator: object, **kwargs) -> None:
        super().__init__(
            f"{namespace} type [{discriminator}] not supported", **kwargs
        )
        self.namespace = namespace
        self.discriminator = discriminator


class MissingFieldError(EntityConstructionError):
    """A required field is absent from a configuration entry."""

    def __init__(self, path: str, **kwargs) -> None:
        super().__init__(f"missing required field '{path}'", **kwargs)
        self.path = path


class SettingTypeError(EntityConstructionError):
    """A field is present but holds a value of the wrong type."""


class UnresolvedReferenceError(RtxConfigError):
    """A named dependency could not be found.

    Attributes:
        entity: Name of the entity holding the reference.
        reference: The name that did not resolve.
    """

    def __init__(
        self, message: str, *, entity: str | None = None, reference: str | None = None
    ) -> None:
        super().__init__(message)
        self.entity = entity
        self.reference = reference


class CapabilityMismatchError(RtxConfigError):
    """A binding targets an element that lacks the required capability."""


class StrictLoadError(RtxConfigError):
    """A strict-mode load finished with skipped entities, edges, or bindings."""

    def __init__(self, counts: dict[str, int]) -> None:
        detail = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()) if v)
        super().__init__(f"strict load failed: {detail}")
        self.counts = counts
