"""Document-level shape validation.

Checks only the skeleton of a configuration document: which sections are
mappings and which are lists. A section key left without a value is treated
as absent. Entry contents are left to the builders, which
report problems per entity instead of rejecting the whole document.
"""

from __future__ import annotations

from typing import Any

import jsonschema

from rtxconf.errors import DocumentError

LIST_SECTIONS = ("records", "clocks", "timeseries", "elements")
GROUP_SECTIONS = ("model", "simulation", "zones", "save")

DOCUMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "version": {"type": ["string", "number"]},
        "configuration": {
            "type": ["object", "null"],
            "properties": {
                **{name: {"type": ["array", "null"]} for name in LIST_SECTIONS},
                **{name: {"type": ["object", "null"]} for name in GROUP_SECTIONS},
            },
        },
    },
}


def validate_document(data: Any, source: str = "<string>") -> None:
    """Validate the document skeleton.

    Args:
        data: Parsed YAML document.
        source: Document location used in the error message.

    Raises:
        DocumentError: If the skeleton does not match ``DOCUMENT_SCHEMA``.
    """
    try:
        jsonschema.validate(data, DOCUMENT_SCHEMA)
    except jsonschema.ValidationError as exc:
        where = ".".join(str(p) for p in exc.absolute_path) or "<root>"
        raise DocumentError(
            f"Malformed configuration document {source} at '{where}': {exc.message}"
        ) from exc
