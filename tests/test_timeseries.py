"""Tests for time-series node types, records and clocks."""

import numpy as np
import pytest

from rtxconf.clock import Clock
from rtxconf.records import ConnectorType
from rtxconf.timeseries import (
    AggregatorTimeSeries,
    CurveFunction,
    MultiplierTimeSeries,
    TimeSeries,
)


def test_upstream_lists_direct_references():
    a, b, c = TimeSeries("a"), TimeSeries("b"), TimeSeries("c")
    total = AggregatorTimeSeries("total")
    total.add_source(a, 1)
    total.add_source(b, 2)
    assert total.upstream() == [a, b]
    assert total.sources[1] == (b, 2.0)

    m = MultiplierTimeSeries("m")
    m.source = a
    assert m.upstream() == [a]
    m.multiplier = c
    assert m.upstream() == [a, c]


def test_fan_out_shares_one_source():
    raw = TimeSeries("raw")
    first, second = TimeSeries("x"), TimeSeries("y")
    first.source = raw
    second.source = raw
    assert first.source is second.source


def test_empty_curve():
    assert CurveFunction("c").curve.shape == (0, 2)


def test_curve_sorted_by_x():
    curve = CurveFunction("c")
    curve.add_curve_coordinate(3, 30)
    curve.add_curve_coordinate(1, 10)
    np.testing.assert_array_equal(curve.curve[:, 0], [1.0, 3.0])


def test_clock_period_must_be_positive():
    assert Clock("1h", 3600).period == 3600
    with pytest.raises(ValueError):
        Clock("never", 0)


def test_connector_for_name():
    assert ConnectorType.for_name("oracle") is ConnectorType.ORACLE
    assert ConnectorType.for_name("db2") is ConnectorType.NO_CONNECTOR
