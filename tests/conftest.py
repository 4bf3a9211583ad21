"""Pytest configuration and shared fixtures for rtxconf tests."""

from pathlib import Path

import pytest
import yaml

NETWORK_INP = """\
[TITLE]
Small test network

[JUNCTIONS]
;ID   Elev   Demand
J1    10     1.0
J2    12     1.5
J3    8      0.5

[RESERVOIRS]
R1    50

[TANKS]
T1    30     3    0    6    20   0

[PIPES]
;ID  Node1  Node2  Length  Diam  Rough  Minor  Status
P1   R1     J1     100     12    100    0      Open
P2   J1     J2     100     12    100    0      Open
P3   J2     J3     100     12    100    0      Closed

[PUMPS]
PU1  J3     T1     HEAD 1

[VALVES]
V1   J2     T1     8    PRV   30    0

[CONTROLS]
LINK P3 OPEN IF NODE T1 BELOW 5

[END]
"""


@pytest.fixture
def write_config(tmp_path):
    """Return a helper writing a configuration document under ``tmp_path``.

    The helper accepts a mapping (dumped as YAML) or raw text and returns the
    path of the written file.
    """

    def _write(content, name: str = "config.yml") -> Path:
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content)
        else:
            with open(path, "w") as f:
                yaml.dump(content, f, default_flow_style=False, sort_keys=False)
        return path

    return _write


@pytest.fixture
def network_file(tmp_path):
    """EPANET input file with three junctions, a reservoir and a tank."""
    path = tmp_path / "network.inp"
    path.write_text(NETWORK_INP)
    return path


@pytest.fixture
def sample_config():
    """Configuration covering records, clocks, a small pipeline and a model."""
    return {
        "version": "1.0",
        "configuration": {
            "records": [
                {"name": "hist", "type": "CSV", "path": "./data"},
                {"name": "results", "type": "CSV", "path": "./out"},
            ],
            "clocks": [{"name": "5min", "period": 300}],
            "timeseries": [
                {
                    "name": "avg",
                    "type": "MovingAverage",
                    "source": "raw",
                    "window": 12,
                    "clock": "5min",
                },
                {
                    "name": "raw",
                    "type": "TimeSeries",
                    "units": "mgd",
                    "clock": "5min",
                    "pointRecord": "hist",
                },
                {"name": "j1_head", "type": "TimeSeries", "units": "ft"},
                {"name": "p2_flow", "type": "TimeSeries", "units": "gpm"},
            ],
            "model": {"type": "epanet", "file": "network.inp"},
            "simulation": {"time": {"hydraulic": 300, "quality": 60}},
            "zones": {"auto_detect": True, "detect_closed_links": False},
            "save": {"staterecord": "results", "save_states": ["measured"]},
            "elements": [
                {"model_id": "J1", "parameter": "headmeasure", "timeseries": "j1_head"},
                {"model_id": "P2", "parameter": "flow", "timeseries": "p2_flow"},
            ],
        },
    }


@pytest.fixture
def sample_config_file(write_config, network_file, sample_config):
    """Sample configuration written next to the test network."""
    return write_config(sample_config)


@pytest.fixture
def invalid_config_file(tmp_path):
    """Create an invalid YAML configuration file for testing."""
    config_file = tmp_path / "invalid_config.yml"
    config_file.write_text("invalid: yaml: content: [unclosed")
    return config_file
