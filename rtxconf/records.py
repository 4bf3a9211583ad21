"""Persistence backends ("point records") and their factories.

The classes here carry connection and location descriptors only; reading and
writing values is the job of the storage drivers that consume them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from rtxconf.diagnostics import DiagnosticKind
from rtxconf.log_config import get_logger

if TYPE_CHECKING:
    from rtxconf.context import BuildContext
    from rtxconf.settings import Setting

logger = get_logger(__name__)


@dataclass(eq=False)
class PointRecord:
    """Base persistence backend referenced by name from time series."""

    name: str

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


@dataclass(eq=False, repr=False)
class CsvPointRecord(PointRecord):
    """Flat-file backend storing one CSV file per series under ``path``."""

    path: Path = Path(".")
    read_only: bool = False


class ConnectorType(str, Enum):
    """Pre-formatted SQL dialects understood by the ODBC backend."""

    NO_CONNECTOR = "no_connector"
    WONDERWARE_MSSQL = "wonderware_mssql"
    ORACLE = "oracle"

    @classmethod
    def for_name(cls, name: str) -> ConnectorType:
        """Return the connector named ``name`` or ``NO_CONNECTOR``."""
        for member in cls:
            if member.value == name:
                return member
        return cls.NO_CONNECTOR


@dataclass
class TableColumns:
    """Table and column names used to query an ODBC source."""

    table: str
    date_column: str
    tag_column: str
    value_column: str
    quality_column: str


@dataclass(eq=False, repr=False)
class OdbcPointRecord(PointRecord):
    """ODBC-style backend, typically a SCADA historian."""

    connection: str = ""
    connector_type: ConnectorType = ConnectorType.NO_CONNECTOR
    table_columns: TableColumns | None = None


@dataclass(eq=False, repr=False)
class MysqlPointRecord(PointRecord):
    """Database backend addressed by a connection string."""

    connection: str = ""


def create_csv_record(setting: Setting, ctx: BuildContext) -> PointRecord:
    """Build a flat-file record.

    ``path`` is relative to the directory holding the configuration document.
    """
    name = setting.get("name")
    rel_path = setting.get("path")
    read_only = setting.get("readonly", bool, False)
    return CsvPointRecord(
        name=name, path=ctx.document.resolve_path(rel_path), read_only=read_only
    )


def create_odbc_record(setting: Setting, ctx: BuildContext) -> PointRecord:
    """Build an ODBC record.

    A missing or unrecognized ``connectorType`` leaves the record without a
    connector; the record itself is still built.
    """
    name = setting.get("name")
    record = OdbcPointRecord(name=name, connection=setting.get("connection"))

    if setting.exists("querySyntax"):
        syntax = setting.lookup("querySyntax")
        record.table_columns = TableColumns(
            table=syntax.get("Table"),
            date_column=syntax.get("DateColumn"),
            tag_column=syntax.get("TagColumn"),
            value_column=syntax.get("ValueColumn"),
            quality_column=syntax.get("QualityColumn"),
        )

    if setting.exists("connectorType"):
        type_name = setting.get("connectorType")
        connector = ConnectorType.for_name(type_name)
        if connector is ConnectorType.NO_CONNECTOR:
            ctx.warn(
                "records",
                f"connector type {type_name} not set",
                entity=name,
                kind=DiagnosticKind.WARNING,
            )
        record.connector_type = connector
    else:
        logger.warning(f"ODBC record '{name}': connector type not specified")

    return record


def create_mysql_record(setting: Setting, ctx: BuildContext) -> PointRecord:
    """Build a database record from its connection string."""
    return MysqlPointRecord(
        name=setting.get("name"), connection=setting.get("connection")
    )
