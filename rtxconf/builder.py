"""Construction of named entities from the list sections of a document.

:class:`NodeBuilder` walks the ``records``, ``clocks`` and ``timeseries``
sections in that order. Each entry is built independently: an entry that fails
is reported and skipped, and the rest of the section carries on.

Time-series entries get their generic properties first (name, units, clock,
point record, source) and their kind-specific fields second. Names of other
time series are never resolved here; they become pending edges in
``ctx.links`` and are attached after the whole section exists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, TypeVar

from rtxconf.clock import Clock
from rtxconf.diagnostics import DiagnosticKind
from rtxconf.errors import EntityConstructionError, SettingTypeError
from rtxconf.links import AggregationEdge, MultiplierEdge, SourceEdge
from rtxconf.log_config import get_logger
from rtxconf.settings import Setting
from rtxconf.timeseries import (
    DIMENSIONLESS,
    AggregatorTimeSeries,
    ConstantTimeSeries,
    CurveFunction,
    FirstDerivative,
    MovingAverage,
    MultiplierTimeSeries,
    OffsetTimeSeries,
    Resampler,
    ThresholdTimeSeries,
    TimeSeries,
    ValidRangeMode,
    ValidRangeTimeSeries,
)

if TYPE_CHECKING:
    from rtxconf.context import BuildContext
    from rtxconf.registry import TypeRegistry

logger = get_logger(__name__)

T = TypeVar("T")


# -- generic and kind-specific time-series properties -------------------------


def set_generic_properties(ts: TimeSeries, setting: Setting, ctx: BuildContext) -> None:
    """Apply the properties shared by every time-series kind.

    A ``clock`` or ``pointRecord`` name that is not in the already-built tables
    is reported and left unset. A ``source`` name is recorded as a pending
    edge for later resolution.
    """
    ts.name = setting.get("name")
    ts.units = setting.get("units", str, DIMENSIONLESS)

    if setting.exists("clock"):
        clock_name = setting.get("clock")
        clock = ctx.clocks.get(clock_name)
        if clock is None:
            ctx.warn(
                "timeseries",
                f"clock {clock_name} not found (specified by Timeseries {ts.name})",
                entity=ts.name,
                kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                reference=clock_name,
            )
        ts.clock = clock

    if setting.exists("pointRecord"):
        record_name = setting.get("pointRecord")
        record = ctx.records.get(record_name)
        if record is None:
            ctx.warn(
                "timeseries",
                f"point record {record_name} not found (specified by Timeseries {ts.name})",
                entity=ts.name,
                kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                reference=record_name,
            )
        ts.record = record

    # forward declarations are fine: resolved after every series exists
    if setting.exists("source"):
        ctx.links.add(SourceEdge(dependent=ts.name, source=setting.get("source")))


def _simple(cls: Callable[[], T]) -> Callable[[Setting, BuildContext], T]:
    def create(setting: Setting, ctx: BuildContext) -> T:
        ts = cls()
        set_generic_properties(ts, setting, ctx)  # type: ignore[arg-type]
        return ts

    create.__name__ = f"create_{getattr(cls, 'kind', cls.__name__)}"
    return create


create_timeseries = _simple(TimeSeries)
create_resampler = _simple(Resampler)
create_derivative = _simple(FirstDerivative)


def create_moving_average(setting: Setting, ctx: BuildContext) -> TimeSeries:
    ts = MovingAverage()
    set_generic_properties(ts, setting, ctx)
    window = setting.get("window", int)
    if window <= 0:
        raise SettingTypeError(f"'window' must be positive, got {window}")
    ts.window = window
    return ts


def create_aggregator(setting: Setting, ctx: BuildContext) -> TimeSeries:
    """Aggregator with a weighted list of sources.

    Each entry is ``{source, multiplier}``; the multiplier defaults to 1.
    """
    ts = AggregatorTimeSeries()
    set_generic_properties(ts, setting, ctx)
    sources: list[tuple[str, float]] = []
    for entry in setting.get_list("sources"):
        if not entry.exists("source"):
            ctx.warn(
                "timeseries",
                f"aggregator {ts.name}: source entry {entry.path} has no 'source'",
                entity=ts.name,
            )
            continue
        sources.append((entry.get("source"), entry.get_float("multiplier", 1.0)))
    ctx.links.add(AggregationEdge(dependent=ts.name, sources=tuple(sources)))
    return ts


def create_offset(setting: Setting, ctx: BuildContext) -> TimeSeries:
    ts = OffsetTimeSeries()
    set_generic_properties(ts, setting, ctx)
    ts.offset = setting.get_float("offsetValue", ts.offset)
    return ts


def create_threshold(setting: Setting, ctx: BuildContext) -> TimeSeries:
    ts = ThresholdTimeSeries()
    set_generic_properties(ts, setting, ctx)
    ts.threshold = setting.get_float("thresholdValue", ts.threshold)
    return ts


def create_constant(setting: Setting, ctx: BuildContext) -> TimeSeries:
    ts = ConstantTimeSeries()
    set_generic_properties(ts, setting, ctx)
    ts.value = setting.get_float("value", ts.value)
    return ts


def create_curve_function(setting: Setting, ctx: BuildContext) -> TimeSeries:
    """Curve function; points without both ``x`` and ``y`` are ignored."""
    ts = CurveFunction()
    set_generic_properties(ts, setting, ctx)
    ts.input_units = setting.get("inputUnits", str, DIMENSIONLESS)
    for point in setting.get_list("function"):
        if point.exists("x") and point.exists("y"):
            ts.add_curve_coordinate(point.get_float("x"), point.get_float("y"))
        else:
            logger.debug(f"curve {ts.name}: skipping incomplete point {point.path}")
    return ts


def create_valid_range(setting: Setting, ctx: BuildContext) -> TimeSeries:
    ts = ValidRangeTimeSeries()
    set_generic_properties(ts, setting, ctx)
    low, high = ts.range
    low = setting.get_float("range_min", low)
    high = setting.get_float("range_max", high)
    if setting.exists("mode"):
        mode = setting.get("mode")
        try:
            ts.mode = ValidRangeMode(mode)
        except ValueError:
            ctx.warn(
                "timeseries",
                f"could not resolve mode: {mode} (Timeseries {ts.name})",
                entity=ts.name,
                kind=DiagnosticKind.WARNING,
            )
    ts.range = (low, high)
    return ts


def create_multiplier(setting: Setting, ctx: BuildContext) -> TimeSeries:
    ts = MultiplierTimeSeries()
    set_generic_properties(ts, setting, ctx)
    if setting.exists("multiplier"):
        ctx.links.add(MultiplierEdge(node=ts, basis=setting.get("multiplier")))
    return ts


# -- section builders ---------------------------------------------------------


class NodeBuilder:
    """Builds the records, clocks and time-series tables of a document.

    Args:
        registry: Discriminator lookup for records and time series.
        ctx: Build context whose tables are filled in place.
        reject_duplicate_names: Keep the first declaration of a name and skip
            later ones instead of letting the last declaration win.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        ctx: BuildContext,
        *,
        reject_duplicate_names: bool = False,
    ) -> None:
        self.registry = registry
        self.ctx = ctx
        self.reject_duplicate_names = reject_duplicate_names

    def _entries(self, section: str) -> list[Setting]:
        node = self.ctx.document.section(section)
        if node is None:
            return []
        return list(node.children())

    def _entry_name(self, entry: Setting) -> str | None:
        try:
            return entry.get("name")
        except EntityConstructionError:
            return None

    def _store(self, section: str, table: dict[str, T], name: str, obj: T) -> bool:
        if name in table:
            if self.reject_duplicate_names:
                self.ctx.warn(
                    section,
                    f"duplicate name {name}; keeping the first declaration",
                    entity=name,
                    kind=DiagnosticKind.DUPLICATE_NAME,
                )
                return False
            self.ctx.warn(
                section,
                f"duplicate name {name}; the later declaration replaces the earlier one",
                entity=name,
                kind=DiagnosticKind.DUPLICATE_NAME,
            )
        table[name] = obj
        return True

    def build_records(self) -> dict:
        """Build the persistence backends."""
        table = self.ctx.records
        for entry in self._entries("records"):
            name = self._entry_name(entry)
            try:
                if not entry.is_group:
                    raise SettingTypeError(f"'{entry.path}' should be a group")
                kind = entry.get("type")
                factory = self.registry.lookup("records", kind)
                record = factory(entry, self.ctx)
            except EntityConstructionError as exc:
                self.ctx.warn(
                    "records",
                    f"could not load point record {name or entry.path}: {exc}",
                    entity=name,
                )
                continue
            self._store("records", table, record.name, record)
        logger.info(f"Built {len(table)} point records")
        return table

    def build_clocks(self) -> dict:
        """Build the clocks; each entry needs a name and a positive period."""
        table = self.ctx.clocks
        for entry in self._entries("clocks"):
            name = self._entry_name(entry)
            try:
                if not entry.is_group:
                    raise SettingTypeError(f"'{entry.path}' should be a group")
                period = entry.get("period", int)
                try:
                    clock = Clock(name=entry.get("name"), period=period)
                except ValueError as exc:
                    raise SettingTypeError(str(exc)) from exc
            except EntityConstructionError as exc:
                self.ctx.warn(
                    "clocks",
                    f"could not create clock {name or entry.path}: {exc}",
                    entity=name,
                )
                continue
            self._store("clocks", table, clock.name, clock)
        logger.info(f"Built {len(table)} clocks")
        return table

    def build_timeseries(self) -> dict:
        """Build every time series and queue their references.

        References between series are left pending; call
        ``ctx.links.resolve`` afterwards to attach them.
        """
        table = self.ctx.timeseries
        links = self.ctx.links
        for entry in self._entries("timeseries"):
            name = self._entry_name(entry)
            mark = links.mark()
            try:
                if not entry.is_group:
                    raise SettingTypeError(f"'{entry.path}' should be a group")
                kind = entry.get("type")
                factory = self.registry.lookup("timeseries", kind)
                ts = factory(entry, self.ctx)
            except EntityConstructionError as exc:
                links.rollback(mark)
                self.ctx.warn(
                    "timeseries",
                    f"could not create time series {name or entry.path}: {exc}",
                    entity=name,
                )
                continue

            if ts.name in table and not self.reject_duplicate_names:
                # edges queued for the replaced declaration must not apply
                staged = links.pending[mark:]
                links.rollback(mark)
                links.discard(ts.name)
                for edge in staged:
                    links.add(edge)
            if not self._store("timeseries", table, ts.name, ts):
                links.rollback(mark)
        logger.info(f"Built {len(table)} time series, {len(links)} pending references")
        return table
