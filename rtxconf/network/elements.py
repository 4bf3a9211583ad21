"""Network model elements and the capabilities they expose.

Elements form a closed set of variants. Each variant declares a fixed set of
:class:`Capability` values naming the parameters it accepts, so callers can
check support before binding instead of guessing from the class.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from rtxconf.errors import CapabilityMismatchError
from rtxconf.timeseries import TimeSeries

if TYPE_CHECKING:
    from rtxconf.records import PointRecord


class Capability(str, Enum):
    """A parameter an element may accept from a time series."""

    QUALITY_SOURCE = "quality_source"
    QUALITY_MEASURE = "quality_measure"
    BOUNDARY_FLOW = "boundary_flow"
    HEAD_MEASURE = "head_measure"
    PRESSURE_MEASURE = "pressure_measure"
    LEVEL_MEASURE = "level_measure"
    BOUNDARY_HEAD = "boundary_head"
    STATUS = "status_parameter"
    FLOW_MEASURE = "flow_measure"
    CURVE = "curve_parameter"
    ENERGY_MEASURE = "energy_measure"
    SETTING = "setting_parameter"


class Element:
    """Base of every model element.

    Bound parameters are stored in ``parameters`` keyed by capability. Computed
    model states (head, flow, ...) are plain time series owned by the element.
    """

    capabilities: ClassVar[frozenset[Capability]] = frozenset()

    def __init__(self, name: str) -> None:
        self.name = name
        self.parameters: dict[Capability, TimeSeries] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def set_parameter(self, capability: Capability, series: TimeSeries) -> None:
        if not self.supports(capability):
            raise CapabilityMismatchError(f"{self!r} does not accept {capability.value}")
        self.parameters[capability] = series

    def parameter(self, capability: Capability) -> TimeSeries | None:
        return self.parameters.get(capability)

    def states(self) -> dict[str, TimeSeries]:
        """Return the element's computed states by state name."""
        return {}

    def set_record(self, record: PointRecord | None) -> None:
        """Store every state of this element in ``record``."""
        for state in self.states().values():
            state.record = record


class Junction(Element):
    """Network node with demand, head and quality states."""

    capabilities = frozenset(
        {
            Capability.QUALITY_SOURCE,
            Capability.QUALITY_MEASURE,
            Capability.BOUNDARY_FLOW,
            Capability.HEAD_MEASURE,
            Capability.PRESSURE_MEASURE,
        }
    )

    def __init__(self, name: str, elevation: float = 0.0) -> None:
        super().__init__(name)
        self.elevation = elevation
        self.head = TimeSeries(f"{name} head")
        self.quality = TimeSeries(f"{name} quality")
        self.demand = TimeSeries(f"{name} demand")

    def states(self) -> dict[str, TimeSeries]:
        return {"head": self.head, "quality": self.quality, "demand": self.demand}

    @property
    def has_head_measure(self) -> bool:
        return Capability.HEAD_MEASURE in self.parameters

    @property
    def has_quality_measure(self) -> bool:
        return Capability.QUALITY_MEASURE in self.parameters

    @property
    def has_pressure_measure(self) -> bool:
        return Capability.PRESSURE_MEASURE in self.parameters

    @property
    def has_boundary_flow(self) -> bool:
        return Capability.BOUNDARY_FLOW in self.parameters


class Reservoir(Junction):
    """Fixed-head node; accepts a boundary head series."""

    capabilities = Junction.capabilities | {Capability.BOUNDARY_HEAD}

    @property
    def has_boundary_head(self) -> bool:
        return Capability.BOUNDARY_HEAD in self.parameters


class Tank(Reservoir):
    """Storage node; accepts a level measurement."""

    capabilities = Reservoir.capabilities | {Capability.LEVEL_MEASURE}

    def __init__(self, name: str, elevation: float = 0.0) -> None:
        super().__init__(name, elevation)
        self.level = TimeSeries(f"{name} level")

    def states(self) -> dict[str, TimeSeries]:
        return {**super().states(), "level": self.level}

    @property
    def has_level_measure(self) -> bool:
        return Capability.LEVEL_MEASURE in self.parameters


class Pipe(Element):
    """Link between two nodes with a flow state."""

    capabilities = frozenset({Capability.STATUS, Capability.FLOW_MEASURE})

    def __init__(
        self, name: str, from_node: str, to_node: str, status: str = "open"
    ) -> None:
        super().__init__(name)
        self.from_node = from_node
        self.to_node = to_node
        self.status = status.lower()
        self.flow = TimeSeries(f"{name} flow")

    def states(self) -> dict[str, TimeSeries]:
        return {"flow": self.flow}

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    @property
    def has_flow_measure(self) -> bool:
        return Capability.FLOW_MEASURE in self.parameters


class Pump(Pipe):
    capabilities = Pipe.capabilities | {Capability.CURVE, Capability.ENERGY_MEASURE}

    def __init__(self, name: str, from_node: str, to_node: str) -> None:
        super().__init__(name, from_node, to_node)
        self.energy = TimeSeries(f"{name} energy")

    def states(self) -> dict[str, TimeSeries]:
        return {**super().states(), "energy": self.energy}


class Valve(Pipe):
    capabilities = Pipe.capabilities | {Capability.SETTING}

    def __init__(
        self, name: str, from_node: str, to_node: str, valve_type: str = "PRV"
    ) -> None:
        super().__init__(name, from_node, to_node)
        self.valve_type = valve_type


class Zone:
    """A group of junctions with an aggregate demand series."""

    def __init__(self, name: str, junctions: list[Junction] | None = None) -> None:
        self.name = name
        self.junctions: list[Junction] = list(junctions or [])
        self.demand = TimeSeries(f"{name} demand")

    def __repr__(self) -> str:
        return f"Zone({self.name!r}, {len(self.junctions)} junctions)"

    @property
    def record(self) -> PointRecord | None:
        return self.demand.record

    def set_record(self, record: PointRecord | None) -> None:
        self.demand.record = record
