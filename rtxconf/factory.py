"""Load a configuration document into a wired object graph.

:class:`ConfigFactory` runs the load stages in a fixed order. Every stage is
attempted even when an earlier one reported per-entity problems; only a
:class:`~rtxconf.errors.DocumentError` (unreadable or malformed document)
stops the load. Everything else ends up in :attr:`ConfigFactory.diagnostics`.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import networkx as nx

from rtxconf.binder import configure_elements
from rtxconf.builder import NodeBuilder
from rtxconf.context import BuildContext
from rtxconf.diagnostics import DiagnosticKind, Diagnostics
from rtxconf.errors import EntityConstructionError, StrictLoadError
from rtxconf.links import dependency_graph, find_cycles
from rtxconf.log_config import get_logger
from rtxconf.network.model import EpanetModel, Model, ModelLoadError, model_for_type
from rtxconf.persistence import PersistencePolicy, apply_save_options
from rtxconf.registry import TypeRegistry, default_registry
from rtxconf.settings import ConfigDocument, Setting

if TYPE_CHECKING:
    from rtxconf.clock import Clock
    from rtxconf.network.elements import Zone
    from rtxconf.records import PointRecord
    from rtxconf.timeseries import TimeSeries

logger = get_logger(__name__)

CONFIG_VERSION = "1.0"


class LoadStage(int, Enum):
    """Progress of a load, in execution order."""

    EMPTY = 0
    DOCUMENT_PARSED = 1
    RECORDS_BUILT = 2
    CLOCKS_BUILT = 3
    NODES_BUILT = 4
    EDGES_RESOLVED = 5
    MODEL_BUILT = 6
    ELEMENTS_BOUND = 7
    SIMULATION_DEFAULTS_APPLIED = 8
    ZONES_BUILT = 9
    PERSISTENCE_POLICY_APPLIED = 10
    READY = 11


class ConfigFactory:
    """Builds records, clocks, time series, and the model from a document.

    Args:
        registry: Discriminator tables; defaults to the built-in registry.
        strict: Raise :class:`StrictLoadError` after a load that skipped any
            entity, edge, or binding.
        reject_duplicate_names: Keep the first declaration of a repeated name
            instead of the last.

    Example:
        factory = ConfigFactory()
        factory.load_config_file("config.yml")
        avg = factory.timeseries()["avg"]
    """

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        *,
        strict: bool = False,
        reject_duplicate_names: bool = False,
    ) -> None:
        self.registry = registry or default_registry()
        self.strict = strict
        self.reject_duplicate_names = reject_duplicate_names
        self._reset()

    def _reset(self) -> None:
        self.stage = LoadStage.EMPTY
        self.document: ConfigDocument | None = None
        self.diagnostics = Diagnostics()
        self._ctx: BuildContext | None = None
        self._model: Model | None = None
        self.policy = PersistencePolicy()

    # -- loading --------------------------------------------------------------

    def load_config_file(self, path: Path | str) -> ConfigFactory:
        """Load the document at ``path``.

        Raises:
            DocumentError: If the document cannot be read or parsed.
            StrictLoadError: In strict mode, if anything was skipped.
        """
        self._reset()
        return self._load(ConfigDocument.from_file(path))

    def load_config_string(
        self, text: str, path: Path | str = "config.yml"
    ) -> ConfigFactory:
        """Load document text; relative paths resolve against ``path``'s directory."""
        self._reset()
        return self._load(ConfigDocument.from_string(text, path))

    def _load(self, document: ConfigDocument) -> ConfigFactory:
        self.document = document
        self._ctx = BuildContext(document=document, diagnostics=self.diagnostics)
        self.stage = LoadStage.DOCUMENT_PARSED
        self._check_version()

        builder = NodeBuilder(
            self.registry,
            self._ctx,
            reject_duplicate_names=self.reject_duplicate_names,
        )
        builder.build_records()
        self.stage = LoadStage.RECORDS_BUILT
        builder.build_clocks()
        self.stage = LoadStage.CLOCKS_BUILT
        builder.build_timeseries()
        self.stage = LoadStage.NODES_BUILT

        self._ctx.links.resolve(self._ctx.timeseries, self.diagnostics)
        for cycle in find_cycles(self._ctx.timeseries):
            self.diagnostics.report(
                DiagnosticKind.CYCLE,
                "timeseries",
                f"reference cycle between {', '.join(cycle)}",
                entity=cycle[0],
            )
        self.stage = LoadStage.EDGES_RESOLVED

        self._create_model()
        self.stage = LoadStage.MODEL_BUILT
        self._configure_elements()
        self.stage = LoadStage.ELEMENTS_BOUND
        self._create_simulation_defaults()
        self.stage = LoadStage.SIMULATION_DEFAULTS_APPLIED
        self._create_zones()
        self.stage = LoadStage.ZONES_BUILT
        self.policy = apply_save_options(
            self._section("save"), self._ctx.records, self._model, self.diagnostics
        )
        self.stage = LoadStage.PERSISTENCE_POLICY_APPLIED

        self.stage = LoadStage.READY
        logger.info(
            f"Configuration loaded: {len(self._ctx.records)} records, "
            f"{len(self._ctx.clocks)} clocks, {len(self._ctx.timeseries)} time series, "
            f"{self.diagnostics.skipped()} skipped"
        )
        if self.strict and self.diagnostics.skipped():
            raise StrictLoadError(self.diagnostics.summary())
        return self

    def _section(self, name: str) -> Setting | None:
        assert self.document is not None
        return self.document.section(name)

    def _check_version(self) -> None:
        assert self.document is not None
        if not self.document.exists("version"):
            logger.info("Configuration has no version")
            return
        version = str(self.document.root.lookup("version").value)
        if version != CONFIG_VERSION:
            logger.info(
                f"Configuration version {version} differs from supported {CONFIG_VERSION}"
            )

    def _create_model(self) -> None:
        section = self._section("model")
        if section is None:
            return
        assert self.document is not None
        try:
            model = model_for_type(section.get("type"))
            model_path = self.document.resolve_path(section.get("file"))
            model.load_model_from_file(model_path)
        except (EntityConstructionError, ModelLoadError) as exc:
            self.diagnostics.report(
                DiagnosticKind.ENTITY_CONSTRUCTION, "model", f"could not load model: {exc}"
            )
            return
        if isinstance(model, EpanetModel):
            model.override_controls()
        self._model = model

    def _configure_elements(self) -> None:
        section = self._section("elements")
        if section is None:
            return
        if self._model is None:
            self.diagnostics.report(
                DiagnosticKind.WARNING, "elements", "no model loaded; element bindings ignored"
            )
            return
        assert self._ctx is not None
        configure_elements(
            self._model,
            section.children(),
            self._ctx.timeseries,
            self.registry,
            self.diagnostics,
        )

    def _create_simulation_defaults(self) -> None:
        section = self._section("simulation")
        if section is None:
            return
        if self._model is None:
            self.diagnostics.report(
                DiagnosticKind.WARNING, "simulation", "no model loaded; simulation defaults ignored"
            )
            return
        try:
            hydraulic = section.get("time.hydraulic", int)
            quality = section.get("time.quality", int)
        except EntityConstructionError as exc:
            self.diagnostics.report(DiagnosticKind.ENTITY_CONSTRUCTION, "simulation", str(exc))
            return
        self._model.set_hydraulic_time_step(hydraulic)
        self._model.set_quality_time_step(quality)

    def _create_zones(self) -> None:
        section = self._section("zones")
        if section is None or not section.exists("auto_detect"):
            return
        if self._model is None:
            self.diagnostics.report(
                DiagnosticKind.WARNING, "zones", "no model loaded; zone detection skipped"
            )
            return
        try:
            auto_detect = section.get("auto_detect", bool)
            detect_closed = section.get("detect_closed_links", bool, False)
        except EntityConstructionError as exc:
            self.diagnostics.report(DiagnosticKind.ENTITY_CONSTRUCTION, "zones", str(exc))
            return
        if auto_detect:
            self._model.init_demand_zones(detect_closed)

    # -- accessors ------------------------------------------------------------

    def timeseries(self) -> dict[str, TimeSeries]:
        return dict(self._ctx.timeseries) if self._ctx else {}

    def point_records(self) -> dict[str, PointRecord]:
        return dict(self._ctx.records) if self._ctx else {}

    def clocks(self) -> dict[str, Clock]:
        return dict(self._ctx.clocks) if self._ctx else {}

    def default_record(self) -> PointRecord | None:
        return self.policy.default_record

    def model(self) -> Model | None:
        return self._model

    def zones(self) -> list[Zone]:
        return self._model.zones() if self._model else []

    def dependency_graph(self) -> nx.DiGraph:
        """Directed graph of resolved time-series references."""
        return dependency_graph(self._ctx.timeseries if self._ctx else {})

    def summary(self) -> str:
        """Generate a human-readable load summary."""
        lines = [
            "CONFIGURATION LOAD SUMMARY",
            "=" * 60,
            f"   Stage: {self.stage.name}",
            f"   Source: {self.document.path if self.document else '-'}",
            f"   Point records: {len(self.point_records())}",
            f"   Clocks: {len(self.clocks())}",
            f"   Time series: {len(self.timeseries())}",
            f"   Model: {self._model!r}" if self._model else "   Model: none",
            f"   Zones: {len(self.zones())}",
            f"   Default record: {self.default_record()!r}",
            f"   Skipped: {self.diagnostics.skipped()}",
        ]
        for kind, count in self.diagnostics.summary().items():
            lines.append(f"      {kind}: {count}")
        lines.append("=" * 60)
        return "\n".join(lines)


def load_config(path: Path | str, **kwargs) -> ConfigFactory:
    """Convenience wrapper: build a factory and load ``path`` with it."""
    return ConfigFactory(**kwargs).load_config_file(path)


__all__ = ["CONFIG_VERSION", "ConfigFactory", "LoadStage", "load_config"]
