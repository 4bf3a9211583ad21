"""Test the centralized logging functionality."""

import logging
from io import StringIO

from rtxconf.diagnostics import DiagnosticKind, Diagnostics
from rtxconf.log_config import get_logger, set_global_log_level


def test_set_global_log_level():
    """Test that set_global_log_level configures logging properly."""
    set_global_log_level(logging.WARNING)
    assert logging.getLogger("rtxconf").level == logging.WARNING

    set_global_log_level(logging.DEBUG)
    assert logging.getLogger("rtxconf").level == logging.DEBUG

    set_global_log_level(logging.INFO)
    assert logging.getLogger("rtxconf").level == logging.INFO


def test_logger_hierarchy():
    """Test that child loggers inherit from parent."""
    set_global_log_level(logging.WARNING)
    child_logger = get_logger("rtxconf.test.child")
    assert child_logger.getEffectiveLevel() == logging.WARNING


def test_logging_output():
    """Test that logging outputs at correct levels."""
    logger = get_logger("rtxconf.test.output")

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    logger.debug("Debug message")
    logger.info("Info message")
    logger.warning("Warning message")
    logger.error("Error message")

    log_output = log_capture.getvalue()
    assert "Debug message" in log_output
    assert "Info message" in log_output
    assert "Warning message" in log_output
    assert "Error message" in log_output
    logger.removeHandler(handler)


def test_diagnostics_log_levels(caplog):
    """Capability mismatches log at debug; other diagnostics at warning."""
    diags = Diagnostics()
    with caplog.at_level(logging.DEBUG, logger="rtxconf"):
        diags.report(DiagnosticKind.CAPABILITY_MISMATCH, "elements", "mismatch")
        diags.report(DiagnosticKind.UNRESOLVED_REFERENCE, "timeseries", "missing")
    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels == [
        (logging.DEBUG, "[elements] mismatch"),
        (logging.WARNING, "[timeseries] missing"),
    ]
