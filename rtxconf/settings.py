"""Configuration tree reader.

Thin wrapper over a parsed YAML document. A :class:`Setting` is one node of the
tree (a group, a list, or a scalar) and knows its dotted path so that errors
can name the field that failed. :class:`ConfigDocument` owns the root node and
the document location used to resolve relative paths.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Sequence

import yaml

from rtxconf.errors import DocumentError, MissingFieldError, SettingTypeError
from rtxconf.log_config import get_logger
from rtxconf.schema import validate_document

logger = get_logger(__name__)

_MISSING = object()


def _split(path: str) -> list[str]:
    return [p for p in str(path).split(".") if p != ""]


class SettingList(Sequence["Setting"]):
    """Ordered, finite view over the children of a list setting.

    Iterating twice yields the same children in the same order.
    """

    def __init__(self, items: list[Setting]) -> None:
        self._items = items

    def __getitem__(self, index):  # type: ignore[override]
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Setting]:
        return iter(self._items)


class Setting:
    """One node of the configuration tree."""

    def __init__(self, value: Any, path: str = "") -> None:
        self._value = value
        self.path = path

    def __repr__(self) -> str:
        return f"Setting({self.path or '<root>'!r})"

    @property
    def value(self) -> Any:
        return self._value

    @property
    def is_group(self) -> bool:
        return isinstance(self._value, dict)

    @property
    def is_list(self) -> bool:
        return isinstance(self._value, list)

    def _child_path(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def _find(self, path: str) -> Any:
        node = self._value
        for part in _split(path):
            if isinstance(node, dict):
                if part not in node:
                    return _MISSING
                node = node[part]
            elif isinstance(node, list):
                try:
                    idx = int(part)
                except ValueError:
                    return _MISSING
                if not 0 <= idx < len(node):
                    return _MISSING
                node = node[idx]
            else:
                return _MISSING
        return node

    def exists(self, path: str) -> bool:
        """Return True if ``path`` names an existing node below this one."""
        return self._find(path) is not _MISSING

    def lookup(self, path: str) -> Setting:
        """Return the node at ``path``.

        Raises:
            MissingFieldError: If the node does not exist.
        """
        found = self._find(path)
        if found is _MISSING:
            raise MissingFieldError(self._child_path(path))
        return Setting(found, self._child_path(path))

    def get(self, path: str, kind: type = str, default: Any = _MISSING) -> Any:
        """Return the scalar at ``path`` converted to ``kind``.

        A field read as ``float`` may be written as an integer in the document
        and is converted without loss. Booleans are never accepted as numbers.
        When the field is missing, ``default`` is returned if given; otherwise
        :class:`MissingFieldError` is raised.

        Raises:
            MissingFieldError: Required field absent.
            SettingTypeError: Field present with an incompatible type.
        """
        found = self._find(path)
        if found is _MISSING:
            if default is _MISSING:
                raise MissingFieldError(self._child_path(path))
            return default
        return _coerce(found, kind, self._child_path(path))

    def get_float(self, path: str, default: Any = _MISSING) -> float:
        return self.get(path, float, default)

    def get_list(self, path: str) -> SettingList:
        """Return the children of the list at ``path``.

        Raises:
            MissingFieldError: If the list does not exist.
            SettingTypeError: If the node is not a list.
        """
        node = self.lookup(path)
        return node.children()

    def children(self) -> SettingList:
        """Return the children of this list node."""
        if not self.is_list:
            raise SettingTypeError(f"'{self.path}' should be a list")
        return SettingList(
            [Setting(v, self._child_path(str(i))) for i, v in enumerate(self._value)]
        )


def _coerce(value: Any, kind: type, path: str) -> Any:
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SettingTypeError(f"'{path}' should be a number, got {value!r}")
        return float(value)
    if kind is int:
        if isinstance(value, bool):
            raise SettingTypeError(f"'{path}' should be an integer, got {value!r}")
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if not isinstance(value, int):
            raise SettingTypeError(f"'{path}' should be an integer, got {value!r}")
        return value
    if kind is bool:
        if not isinstance(value, bool):
            raise SettingTypeError(f"'{path}' should be true or false, got {value!r}")
        return value
    if kind is str:
        if isinstance(value, (dict, list)) or value is None:
            raise SettingTypeError(f"'{path}' should be a string, got {value!r}")
        return str(value)
    if not isinstance(value, kind):
        raise SettingTypeError(
            f"'{path}' should be {kind.__name__}, got {type(value).__name__}"
        )
    return value


class ConfigDocument:
    """A parsed configuration document and its location on disk.

    Attributes:
        path: Location of the document; relative references resolve against
            its parent directory.
        root: Root setting of the document.
    """

    def __init__(self, data: Any, path: Path | str) -> None:
        self.path = Path(path)
        validate_document(data, str(self.path))
        self.root = Setting(data)

    @classmethod
    def from_file(cls, path: Path | str) -> ConfigDocument:
        """Read and parse a configuration document.

        Raises:
            DocumentError: If the file cannot be read or parsed.
        """
        path = Path(path)
        logger.info(f"Loading configuration from: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error(f"I/O error while reading {path}: {exc}")
            raise DocumentError(f"Cannot read configuration file: {path}") from exc
        except UnicodeDecodeError as exc:
            logger.error(f"Configuration {path} is not valid UTF-8: {exc}")
            raise DocumentError(f"Cannot decode configuration file: {path}") from exc
        return cls.from_string(text, path)

    @classmethod
    def from_string(cls, text: str, path: Path | str = "config.yml") -> ConfigDocument:
        """Parse document text as if it had been read from ``path``.

        Raises:
            DocumentError: If the text is not valid YAML or is mis-shaped.
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            logger.error(f"Invalid YAML in configuration {path}: {exc}")
            raise DocumentError(f"Parse error in {path}: {exc}") from exc
        return cls(data if data is not None else {}, path)

    @property
    def directory(self) -> Path:
        return self.path.absolute().parent

    def exists(self, path: str) -> bool:
        return self.root.exists(path)

    def lookup(self, path: str) -> Setting:
        return self.root.lookup(path)

    def get(self, path: str, kind: type = str, default: Any = _MISSING) -> Any:
        return self.root.get(path, kind, default)

    def get_list(self, path: str) -> SettingList:
        return self.root.get_list(path)

    def section(self, name: str) -> Setting | None:
        """Return ``configuration.<name>``, or None if absent or left empty."""
        path = f"configuration.{name}"
        if not self.exists(path):
            return None
        node = self.lookup(path)
        return None if node.value is None else node

    def resolve_path(self, path: Path | str) -> Path:
        """Resolve ``path`` against the document's directory.

        Absolute paths are returned unchanged.
        """
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.directory / candidate
