"""Tests for the diagnostic channel and error types."""

from rtxconf.diagnostics import SKIP_KINDS, Diagnostic, DiagnosticKind, Diagnostics
from rtxconf.errors import (
    EntityConstructionError,
    MissingFieldError,
    StrictLoadError,
    UnknownTypeError,
)


def _filled() -> Diagnostics:
    diags = Diagnostics()
    diags.report(DiagnosticKind.ENTITY_CONSTRUCTION, "records", "bad record", entity="r")
    diags.report(
        DiagnosticKind.UNRESOLVED_REFERENCE,
        "timeseries",
        "missing b",
        entity="total",
        reference="b",
    )
    diags.report(DiagnosticKind.WARNING, "save", "no state record")
    diags.report(DiagnosticKind.CAPABILITY_MISMATCH, "elements", "J1 vs level")
    return diags


def test_order_and_filters():
    diags = _filled()
    assert [d.section for d in diags] == ["records", "timeseries", "save", "elements"]
    assert len(diags) == 4
    assert diags.of_kind(DiagnosticKind.WARNING)[0].message == "no state record"
    [ref] = diags.referencing("b")
    assert ref.entity == "total"


def test_summary_and_skipped():
    diags = _filled()
    assert diags.summary() == {
        "capability_mismatch": 1,
        "entity_construction": 1,
        "unresolved_reference": 1,
        "warning": 1,
    }
    assert diags.skipped() == 3
    assert DiagnosticKind.DUPLICATE_NAME not in SKIP_KINDS


def test_clear():
    diags = _filled()
    diags.clear()
    assert len(diags) == 0
    assert diags.summary() == {}


def test_str():
    diag = Diagnostic(DiagnosticKind.CYCLE, "timeseries", "a -> b -> a")
    assert str(diag) == "[timeseries] a -> b -> a"


def test_error_hierarchy():
    err = UnknownTypeError("records", "Parquet", section="records", entity="p")
    assert isinstance(err, EntityConstructionError)
    assert str(err) == "records type [Parquet] not supported"
    assert err.entity == "p"
    missing = MissingFieldError("configuration.clocks.0.period")
    assert "configuration.clocks.0.period" in str(missing)


def test_strict_load_error_message():
    err = StrictLoadError({"unresolved_reference": 2, "entity_construction": 1, "cycle": 0})
    assert str(err) == "strict load failed: entity_construction=1, unresolved_reference=2"
    assert err.counts["unresolved_reference"] == 2
