"""Periodic clocks shared by time series."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False)
class Clock:
    """A regular clock ticking every ``period`` time-step units."""

    name: str
    period: int

    def __post_init__(self) -> None:
        if self.period <= 0:
            raise ValueError(f"clock period must be positive, got {self.period}")
