"""Time-series node types.

These classes describe the configured shape of the processing pipeline: names,
units, clocks, storage, and the references between nodes. The numerical
behaviour of each transformation lives in the runtime that consumes them.

Nodes reference each other directly, so one source may feed any number of
dependents; the factory's name table is the owning collection.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from rtxconf.clock import Clock
    from rtxconf.records import PointRecord

DIMENSIONLESS = "dimensionless"


class TimeSeries:
    """Passthrough series and base class of every node.

    Attributes:
        name: Unique name within the time-series table.
        units: Unit of measure name.
        clock: Optional regular clock.
        record: Optional persistence backend.
        source: Optional single upstream series.
    """

    kind = "TimeSeries"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        self.name = name
        self.units = units
        self.clock: Clock | None = None
        self.record: PointRecord | None = None
        self.source: TimeSeries | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def upstream(self) -> list[TimeSeries]:
        """Return the series this node reads from."""
        return [self.source] if self.source is not None else []


class AggregatorTimeSeries(TimeSeries):
    """Weighted sum of several source series."""

    kind = "Aggregator"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.sources: list[tuple[TimeSeries, float]] = []

    def add_source(self, series: TimeSeries, weight: float = 1.0) -> None:
        self.sources.append((series, float(weight)))

    def upstream(self) -> list[TimeSeries]:
        return super().upstream() + [s for s, _ in self.sources]


class MovingAverage(TimeSeries):
    kind = "MovingAverage"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.window = 1


class Resampler(TimeSeries):
    kind = "Resampler"


class FirstDerivative(TimeSeries):
    kind = "FirstDerivative"


class OffsetTimeSeries(TimeSeries):
    kind = "Offset"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.offset = 0.0


class ThresholdTimeSeries(TimeSeries):
    kind = "Threshold"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.threshold = 0.0


class ConstantTimeSeries(TimeSeries):
    kind = "Constant"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.value = 0.0


class CurveFunction(TimeSeries):
    """Maps its source through a piecewise curve of (x, y) points.

    ``input_units`` are the units the x coordinates are expressed in.
    """

    kind = "CurveFunction"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.input_units = DIMENSIONLESS
        self.coordinates: list[tuple[float, float]] = []

    def add_curve_coordinate(self, x: float, y: float) -> None:
        self.coordinates.append((float(x), float(y)))

    @property
    def curve(self) -> np.ndarray:
        """Curve points as an ``(n, 2)`` array sorted by x."""
        if not self.coordinates:
            return np.empty((0, 2), dtype=float)
        arr = np.asarray(self.coordinates, dtype=float)
        return arr[np.argsort(arr[:, 0], kind="stable")]


class MultiplierTimeSeries(TimeSeries):
    """Product of its source and a basis series.

    ``multiplier`` stays ``None`` until a basis is attached.
    """

    kind = "Multiplier"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.multiplier: TimeSeries | None = None

    def upstream(self) -> list[TimeSeries]:
        extra = [self.multiplier] if self.multiplier is not None else []
        return super().upstream() + extra


class ValidRangeMode(str, Enum):
    """What a valid-range filter does with out-of-range values."""

    SATURATE = "saturate"
    DROP = "drop"


class ValidRangeTimeSeries(TimeSeries):
    """Clamps or drops source values outside ``range``."""

    kind = "ValidRange"

    def __init__(self, name: str = "", units: str = DIMENSIONLESS) -> None:
        super().__init__(name, units)
        self.range: tuple[float, float] = (float("-inf"), float("inf"))
        self.mode = ValidRangeMode.SATURATE
