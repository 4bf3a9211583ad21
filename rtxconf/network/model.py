"""Network model collaborator.

A :class:`Model` holds the element list of a water distribution network and
the simulation defaults the loader hands it. Hydraulic and water-quality
solving is done elsewhere; this class only exposes what configuration needs:
element lookup, storage assignment, step sizes, and demand zones.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import networkx as nx

from rtxconf.errors import RtxConfigError, UnknownTypeError
from rtxconf.log_config import get_logger
from rtxconf.network.elements import (
    Element,
    Junction,
    Pipe,
    Pump,
    Reservoir,
    Tank,
    Valve,
    Zone,
)

if TYPE_CHECKING:
    from rtxconf.records import PointRecord

logger = get_logger(__name__)


class ModelLoadError(RtxConfigError):
    """A model file could not be read."""


class Model:
    """Element container with simulation settings and zones."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._elements: list[Element] = []
        self._zones: list[Zone] = []
        self.hydraulic_time_step: int | None = None
        self.quality_time_step: int | None = None
        self.storage: PointRecord | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {len(self._elements)} elements)"

    def add_element(self, element: Element) -> Element:
        self._elements.append(element)
        return element

    def elements(self) -> list[Element]:
        return list(self._elements)

    def element(self, name: str) -> Element | None:
        """Return the first element named ``name``.

        Node and link names may collide; use :meth:`elements` to see all.
        """
        for el in self._elements:
            if el.name == name:
                return el
        return None

    def junctions(self) -> list[Junction]:
        """Every node element (junctions, reservoirs and tanks)."""
        return [e for e in self._elements if isinstance(e, Junction)]

    def tanks(self) -> list[Tank]:
        return [e for e in self._elements if isinstance(e, Tank)]

    def reservoirs(self) -> list[Reservoir]:
        return [e for e in self._elements if isinstance(e, Reservoir)]

    def pipes(self) -> list[Pipe]:
        """Every link element (pipes, pumps and valves)."""
        return [e for e in self._elements if isinstance(e, Pipe)]

    def zones(self) -> list[Zone]:
        return list(self._zones)

    def set_hydraulic_time_step(self, seconds: int) -> None:
        self.hydraulic_time_step = int(seconds)

    def set_quality_time_step(self, seconds: int) -> None:
        self.quality_time_step = int(seconds)

    def set_storage(self, record: PointRecord | None) -> None:
        """Persist every element state and zone demand in ``record``."""
        self.storage = record
        for el in self._elements:
            el.set_record(record)
        for zone in self._zones:
            zone.set_record(record)

    def topology(self, *, detect_closed_links: bool = False) -> nx.Graph:
        """Undirected node/link graph used for zone detection.

        Links carrying a flow measurement are zone boundaries and are left out.
        With ``detect_closed_links`` links that start closed are left out too.
        """
        graph = nx.Graph()
        for j in self.junctions():
            graph.add_node(j.name)
        for link in self.pipes():
            if link.has_flow_measure:
                continue
            if detect_closed_links and link.is_closed:
                continue
            if link.from_node in graph and link.to_node in graph:
                graph.add_edge(link.from_node, link.to_node, link=link.name)
        return graph

    def init_demand_zones(self, detect_closed_links: bool = False) -> list[Zone]:
        """Split the network into demand zones.

        A zone is a connected set of nodes. Zones made only of reservoirs and
        tanks are not demand zones and are dropped.
        """
        graph = self.topology(detect_closed_links=detect_closed_links)
        by_name = {j.name: j for j in self.junctions()}
        components = sorted(
            (sorted(c) for c in nx.connected_components(graph)),
            key=lambda names: names[0],
        )
        zones: list[Zone] = []
        for names in components:
            members = [by_name[n] for n in names]
            if all(isinstance(m, Reservoir) for m in members):
                continue
            zones.append(Zone(f"zone {len(zones) + 1}", members))
        self._zones = zones
        logger.info(f"Detected {len(zones)} demand zones")
        return self.zones()

    def load_model_from_file(self, path: Path | str) -> None:
        """Read the element list from an EPANET input file.

        Raises:
            ModelLoadError: If the file cannot be read.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ModelLoadError(f"Cannot read model file: {path}") from exc
        try:
            elements = parse_inp(text)
        except ValueError as exc:
            raise ModelLoadError(f"Malformed model file {path}: {exc}") from exc
        self.name = path.stem
        for element in elements:
            self.add_element(element)
        logger.info(f"Loaded model {self.name}: {len(self._elements)} elements")


class EpanetModel(Model):
    """EPANET network whose built-in controls are replaced by bound parameters."""

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self.controls_overridden = False

    def override_controls(self) -> None:
        self.controls_overridden = True


class EpanetSyntheticModel(Model):
    """EPANET network that keeps its own controls (synthetic data generation)."""


MODEL_TYPES: dict[str, type[Model]] = {
    "epanet": EpanetModel,
    "synthetic_epanet": EpanetSyntheticModel,
}


def model_for_type(name: str) -> Model:
    """Instantiate the model registered under ``name``.

    Raises:
        UnknownTypeError: If ``name`` is not a known model type.
    """
    cls = MODEL_TYPES.get(name)
    if cls is None:
        raise UnknownTypeError("model", name, section="model")
    return cls()


def _rows(text: str):
    """Yield (section, fields) for each data row of an .inp file."""
    section = ""
    for raw in text.splitlines():
        line = raw.split(";", 1)[0].strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip().upper()
            continue
        yield section, line.split()


def parse_inp(text: str) -> list[Element]:
    """Return the nodes and links declared in EPANET input text.

    Only the element sections are read; options, patterns, curves and controls
    are ignored.
    """
    elements: list[Element] = []
    for section, fields in _rows(text):
        if section == "JUNCTIONS":
            elev = float(fields[1]) if len(fields) > 1 else 0.0
            elements.append(Junction(fields[0], elev))
        elif section == "RESERVOIRS":
            elements.append(Reservoir(fields[0]))
        elif section == "TANKS":
            elev = float(fields[1]) if len(fields) > 1 else 0.0
            elements.append(Tank(fields[0], elev))
        elif section == "PIPES" and len(fields) >= 3:
            status = fields[7] if len(fields) > 7 else "open"
            elements.append(Pipe(fields[0], fields[1], fields[2], status))
        elif section == "PUMPS" and len(fields) >= 3:
            elements.append(Pump(fields[0], fields[1], fields[2]))
        elif section == "VALVES" and len(fields) >= 3:
            vtype = fields[4] if len(fields) > 4 else "PRV"
            elements.append(Valve(fields[0], fields[1], fields[2], vtype))
    return elements
