"""CLI tests focused on argument parsing, dispatch and exit codes."""

from __future__ import annotations

import builtins as py_builtins
import importlib
import json
import logging
from argparse import Namespace
from io import StringIO
from types import SimpleNamespace
from unittest.mock import patch

import pytest


def _invoke_main(argv: list[str], *, stub_subcommand: bool = False):
    """Invoke rtxconf.cli.main with patches applied.

    Args:
        argv: Arguments excluding program name.
        stub_subcommand: If True, replaces subcommands (load/info/graph) with
            a function that records it was called.

    Returns:
        Namespace with: code (int), stdout (str), called (str|None), level (int|None).
    """
    import rtxconf.cli as cli

    importlib.reload(cli)

    called: dict[str, bool] = {"load": False, "info": False, "graph": False}
    level_holder: dict[str, int | None] = {"level": None}

    patchers = []

    # Capture configured log level
    patchers.append(
        patch(
            "rtxconf.log_config.set_global_log_level",
            side_effect=lambda lvl: level_holder.__setitem__("level", lvl),
        )
    )

    if stub_subcommand:
        patchers.extend(
            [
                patch.object(
                    cli,
                    "load_command",
                    side_effect=lambda a: called.__setitem__("load", True),
                ),
                patch.object(
                    cli,
                    "info_command",
                    side_effect=lambda a: called.__setitem__("info", True),
                ),
                patch.object(
                    cli,
                    "graph_command",
                    side_effect=lambda a: called.__setitem__("graph", True),
                ),
            ]
        )

    for p in patchers:
        p.start()

    out = SimpleNamespace(code=0, stdout="", called=None, level=None)
    saved_print = py_builtins.print
    try:
        with (
            patch("sys.stdout", new_callable=StringIO) as buf,
            patch("sys.argv", ["rtxconf"] + argv),
        ):
            try:
                cli.main()
            except SystemExit as e:
                out.code = int(getattr(e, "code", 0) or 0)
            out.stdout = buf.getvalue()
            out.level = level_holder["level"]
            for name, was_called in called.items():
                if was_called:
                    out.called = name
                    break
    finally:
        # Restore global print in case --quiet modified it
        py_builtins.print = saved_print
        for p in reversed(patchers):
            p.stop()

    return out


def test_no_args_shows_help_and_exits_nonzero():
    res = _invoke_main([])
    assert res.code == 1
    assert "Available commands" in res.stdout


def test_verbose_flag_sets_debug_level_and_dispatches_info():
    res = _invoke_main(["-v", "info", "config.yml"], stub_subcommand=True)
    assert res.called == "info"
    assert res.level == logging.DEBUG


def test_default_log_level_is_info():
    res = _invoke_main(["info", "config.yml"], stub_subcommand=True)
    assert res.level == logging.INFO


def test_quiet_suppresses_print_output(sample_config_file):
    res = _invoke_main(["--quiet", "load", str(sample_config_file)])
    assert res.code == 0
    assert res.stdout == ""


def test_subcommand_dispatch_load_info_graph():
    for cmd in ("load", "info", "graph"):
        res = _invoke_main([cmd], stub_subcommand=True)
        assert res.called == cmd


def test_timer_context_manager_success_and_error():
    from rtxconf.cli import Timer

    with patch("sys.stdout", new_callable=StringIO) as buf:
        with Timer("Unit test op"):
            pass
        s = buf.getvalue()
        assert "Unit test op" in s
        assert "✅" in s

    with patch("sys.stdout", new_callable=StringIO) as buf:
        with pytest.raises(RuntimeError):
            with Timer("Failing op"):
                raise RuntimeError("boom")
        assert "❌ Failing op" in buf.getvalue()


class TestLoadCommand:
    def test_success(self, sample_config_file):
        res = _invoke_main(["load", str(sample_config_file)])
        assert res.code == 0
        assert "CONFIGURATION LOAD SUMMARY" in res.stdout
        assert "SUCCESS" in res.stdout

    def test_missing_file_exits_with_code_2(self, tmp_path):
        res = _invoke_main(["load", str(tmp_path / "missing.yml")])
        assert res.code == 2
        assert "Configuration error" in res.stdout

    def test_invalid_yaml_exits_with_code_2(self, invalid_config_file):
        res = _invoke_main(["load", str(invalid_config_file)])
        assert res.code == 2

    def test_skips_are_listed(self, write_config):
        path = write_config(
            {"configuration": {"timeseries": [{"name": "a", "type": "Kalman"}]}}
        )
        res = _invoke_main(["load", str(path)])
        assert res.code == 0
        assert "entity_construction: [timeseries]" in res.stdout
        assert "1 configured items were skipped" in res.stdout

    def test_strict_failure_exits_with_code_3(self, write_config):
        path = write_config(
            {"configuration": {"timeseries": [{"name": "a", "type": "Kalman"}]}}
        )
        res = _invoke_main(["load", "--strict", str(path)])
        assert res.code == 3
        assert "strict load failed" in res.stdout

    def test_unexpected_error_exits_with_code_1(self, sample_config_file):
        import rtxconf.cli as cli

        with (
            patch.object(cli, "_load_config", side_effect=RuntimeError("boom")),
            patch("sys.stdout", new_callable=StringIO),
        ):
            with pytest.raises(SystemExit) as exc:
                cli.load_command(Namespace(config=str(sample_config_file), strict=False))
        assert exc.value.code == 1


class TestInfoCommand:
    def test_sections_listed(self, sample_config_file):
        res = _invoke_main(["info", str(sample_config_file)])
        assert res.code == 0
        assert "timeseries: 4 entries" in res.stdout
        assert "elements: 2 entries" in res.stdout
        assert "save: ✅" in res.stdout
        assert "Model file: ✅" in res.stdout

    def test_does_not_build(self, write_config):
        path = write_config(
            {"configuration": {"model": {"type": "epanet", "file": "absent.inp"}}}
        )
        res = _invoke_main(["info", str(path)])
        assert res.code == 0
        assert "Model file: ❌" in res.stdout
        assert "records: 0 entries" in res.stdout

    def test_bad_document_exits_with_code_2(self, invalid_config_file):
        res = _invoke_main(["info", str(invalid_config_file)])
        assert res.code == 2

    def test_undecodable_document_exits_with_code_2(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_bytes(b"configuration:\n  records:\n    - {name: \xff\xfe}\n")
        for command in ("info", "load"):
            res = _invoke_main([command, str(path)])
            assert res.code == 2
            assert "Configuration error" in res.stdout


class TestGraphCommand:
    def test_writes_node_link_json(self, sample_config_file, tmp_path):
        output = tmp_path / "out" / "graph.json"
        res = _invoke_main(["graph", str(sample_config_file), "-o", str(output)])
        assert res.code == 0
        data = json.loads(output.read_text())
        assert {n["id"] for n in data["nodes"]} == {"raw", "avg", "j1_head", "p2_flow"}
        assert [(e["source"], e["target"]) for e in data["edges"]] == [("raw", "avg")]
        assert data["directed"] is True

    def test_prints_to_stdout(self, sample_config_file):
        res = _invoke_main(["graph", str(sample_config_file)])
        assert res.code == 0
        assert json.loads(res.stdout)["edges"][0]["role"] == "source"

    def test_bad_document_exits_with_code_2(self, tmp_path):
        res = _invoke_main(["graph", str(tmp_path / "missing.yml")])
        assert res.code == 2
