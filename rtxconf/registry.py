"""Discriminator registry for records, time series, and element parameters.

Maps the ``type`` (or ``parameter``) string of a configuration entry to the
factory or binder that handles it. The registry is filled once when it is
created and is read-only afterwards; an unknown discriminator is reported
through a single :class:`~rtxconf.errors.UnknownTypeError`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping

from rtxconf import builder, records
from rtxconf.binder import ParameterBinder
from rtxconf.errors import UnknownTypeError
from rtxconf.network.elements import Capability

NAMESPACES = ("records", "timeseries", "parameters")

_BUILTIN_RECORDS: dict[str, Callable[..., Any]] = {
    "CSV": records.create_csv_record,
    "SCADA": records.create_odbc_record,
    "ODBC": records.create_odbc_record,
    "MySQL": records.create_mysql_record,
}

_BUILTIN_TIMESERIES: dict[str, Callable[..., Any]] = {
    "TimeSeries": builder.create_timeseries,
    "MovingAverage": builder.create_moving_average,
    "Aggregator": builder.create_aggregator,
    "Resampler": builder.create_resampler,
    "Derivative": builder.create_derivative,
    "FirstDerivative": builder.create_derivative,
    "Offset": builder.create_offset,
    "Threshold": builder.create_threshold,
    "CurveFunction": builder.create_curve_function,
    "Multiplier": builder.create_multiplier,
    "ValidRange": builder.create_valid_range,
    "Constant": builder.create_constant,
}

_BUILTIN_PARAMETERS: dict[str, ParameterBinder] = {
    # junctions
    "qualitysource": ParameterBinder(Capability.QUALITY_SOURCE),
    "quality": ParameterBinder(Capability.QUALITY_MEASURE),
    "boundaryflow": ParameterBinder(Capability.BOUNDARY_FLOW),
    "headmeasure": ParameterBinder(Capability.HEAD_MEASURE),
    "pressuremeasure": ParameterBinder(Capability.PRESSURE_MEASURE),
    # tanks, reservoirs
    "levelmeasure": ParameterBinder(Capability.LEVEL_MEASURE),
    "boundaryhead": ParameterBinder(Capability.BOUNDARY_HEAD),
    # pipes
    "status": ParameterBinder(Capability.STATUS),
    "flow": ParameterBinder(Capability.FLOW_MEASURE),
    # pumps
    "curve": ParameterBinder(Capability.CURVE),
    "energy": ParameterBinder(Capability.ENERGY_MEASURE),
    # valves
    "setting": ParameterBinder(Capability.SETTING),
}


class TypeRegistry:
    """Read-only discriminator tables, one per namespace.

    Args:
        records: Discriminator -> record factory ``(setting, ctx)``.
        timeseries: Discriminator -> time-series factory ``(setting, ctx)``.
        parameters: Parameter kind -> :class:`ParameterBinder`.
    """

    def __init__(
        self,
        records: Mapping[str, Callable[..., Any]] | None = None,
        timeseries: Mapping[str, Callable[..., Any]] | None = None,
        parameters: Mapping[str, ParameterBinder] | None = None,
    ) -> None:
        self._tables: dict[str, Mapping[str, Any]] = {
            "records": MappingProxyType(dict(records or {})),
            "timeseries": MappingProxyType(dict(timeseries or {})),
            "parameters": MappingProxyType(dict(parameters or {})),
        }

    def lookup(self, namespace: str, discriminator: str) -> Any:
        """Return the factory or binder registered for ``discriminator``.

        Raises:
            KeyError: If ``namespace`` is not one of :data:`NAMESPACES`.
            UnknownTypeError: If nothing is registered under ``discriminator``.
        """
        table = self.table(namespace)
        try:
            return table[discriminator]
        except (KeyError, TypeError):
            raise UnknownTypeError(namespace, discriminator, section=namespace) from None

    def table(self, namespace: str) -> Mapping[str, Any]:
        if namespace not in self._tables:
            raise KeyError(
                f"Unknown namespace '{namespace}'. Available: {list(NAMESPACES)}"
            )
        return self._tables[namespace]

    def names(self, namespace: str) -> list[str]:
        return sorted(self.table(namespace).keys())

    def __contains__(self, item: tuple[str, str]) -> bool:
        namespace, discriminator = item
        return discriminator in self.table(namespace)


_DEFAULT = TypeRegistry(
    records=_BUILTIN_RECORDS,
    timeseries=_BUILTIN_TIMESERIES,
    parameters=_BUILTIN_PARAMETERS,
)


def default_registry() -> TypeRegistry:
    """Return the registry holding every built-in discriminator."""
    return _DEFAULT
