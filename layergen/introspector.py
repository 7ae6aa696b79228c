# File: layergen/introspector.py
"""
layergen - Schema Introspector
==============================
Turns the rows of a metadata provider into frozen ``TableModel`` objects.

Providers:
    * ``SqlAlchemyMetadataProvider``: a live database, reflected through
      ``sqlalchemy.inspect``.
    * ``SnapshotMetadataProvider``: a YAML/JSON snapshot of the same rows,
      for offline generation and tests.

``SchemaIntrospector.introspect`` opens the provider once, walks every table
in provider order, and closes the provider before returning.  For each table
the columns are enumerated completely before the primary key is resolved,
because the key is linked by lookup into that column list.
"""

from __future__ import annotations

import abc
import logging
from pathlib import Path
from types import TracebackType
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

from sqlalchemy import create_engine, inspect, types as sqltypes
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.engine.reflection import Inspector
from sqlalchemy.exc import SQLAlchemyError

from layergen.exceptions import ConnectivityError
from layergen.models import ColumnModel, TableModel
from layergen.typemap import SqlTypeCode, parse_type_code
from layergen.utils import Timer, load_structured_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.introspector")


# ---------------------------------------------------------------------------
# Provider rows
# ---------------------------------------------------------------------------


class TableEntry(NamedTuple):
    name: str
    comment: Optional[str] = None


class ColumnEntry(NamedTuple):
    name: str
    type_code: Union[SqlTypeCode, int, None]
    comment: Optional[str] = None


# ---------------------------------------------------------------------------
# Provider interface
# ---------------------------------------------------------------------------


class MetadataProvider(abc.ABC):
    """
    Source of raw table/column/primary-key rows.

    Used as a context manager: ``open`` on enter, ``close`` on exit.
    """

    def open(self) -> None:
        """Acquire whatever connection the provider needs."""

    def close(self) -> None:
        """Release the connection.  Must be safe to call twice."""

    @abc.abstractmethod
    def list_tables(self) -> List[TableEntry]:
        """Tables in scope, in provider order."""

    @abc.abstractmethod
    def list_columns(self, table_name: str) -> List[ColumnEntry]:
        """Columns of *table_name*, in provider order."""

    @abc.abstractmethod
    def list_primary_key(self, table_name: str) -> List[str]:
        """Primary-key column names of *table_name*, possibly empty."""

    def __enter__(self) -> "MetadataProvider":
        self.open()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


# ---------------------------------------------------------------------------
# SQLAlchemy-backed provider
# ---------------------------------------------------------------------------

# Checked in order; subclasses must precede their bases
_SQLALCHEMY_TYPE_TABLE: Tuple[Tuple[type, SqlTypeCode], ...] = (
    (sqltypes.Boolean, SqlTypeCode.BOOLEAN),
    (sqltypes.BigInteger, SqlTypeCode.BIGINT),
    (sqltypes.SmallInteger, SqlTypeCode.SMALLINT),
    (sqltypes.Integer, SqlTypeCode.INTEGER),
    (sqltypes.Double, SqlTypeCode.DOUBLE),
    (sqltypes.REAL, SqlTypeCode.REAL),
    (sqltypes.Float, SqlTypeCode.FLOAT),
    (sqltypes.Numeric, SqlTypeCode.DECIMAL),
    (sqltypes.DateTime, SqlTypeCode.TIMESTAMP),
    (sqltypes.Date, SqlTypeCode.DATE),
    (sqltypes.Time, SqlTypeCode.TIME),
    (sqltypes.CHAR, SqlTypeCode.CHAR),
    (sqltypes.Text, SqlTypeCode.LONGVARCHAR),
    (sqltypes.String, SqlTypeCode.VARCHAR),
    (sqltypes.LargeBinary, SqlTypeCode.BLOB),
    (sqltypes.VARBINARY, SqlTypeCode.VARBINARY),
    (sqltypes.BINARY, SqlTypeCode.BINARY),
)


def sql_type_code_for(column_type: Any) -> SqlTypeCode:
    """Map a reflected SQLAlchemy type instance onto a SqlTypeCode."""
    for sa_type, code in _SQLALCHEMY_TYPE_TABLE:
        if isinstance(column_type, sa_type):
            return code
    return SqlTypeCode.OTHER


class SqlAlchemyMetadataProvider(MetadataProvider):
    """
    Reads metadata from a live database through SQLAlchemy reflection.

    Args:
        url: SQLAlchemy database URL (``mysql+pymysql://host/db``, ``sqlite:///x.db``).
        user: Overrides the URL's username when given.
        password: Overrides the URL's password when given.
        catalog: Schema to reflect; ``None`` means the connection default.
        engine: An already-built engine.  When given, ``url`` is ignored and
            the engine is not disposed on close.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        user: Optional[str] = None,
        password: Optional[str] = None,
        catalog: Optional[str] = None,
        engine: Optional[Engine] = None,
    ) -> None:
        if url is None and engine is None:
            raise ValueError("Either a database URL or an engine is required.")
        self._url: Optional[str] = url
        self._user: Optional[str] = user
        self._password: Optional[str] = password
        self._catalog: Optional[str] = catalog
        self._engine: Optional[Engine] = engine
        self._owns_engine: bool = engine is None
        self._inspector: Optional[Inspector] = None

    def open(self) -> None:
        if self._inspector is not None:
            return
        try:
            if self._engine is None:
                url = make_url(self._url)
                if self._user is not None:
                    url = url.set(username=self._user)
                if self._password is not None:
                    url = url.set(password=self._password)
                self._engine = create_engine(url)
            self._inspector = inspect(self._engine)
        except (SQLAlchemyError, ImportError) as exc:
            self.close()
            raise ConnectivityError(
                f"Cannot open metadata connection: {type(exc).__name__}: {exc}"
            ) from exc
        logger.info(
            "Connected to %s (dialect=%s, schema=%s).",
            self._engine.url.render_as_string(hide_password=True),
            self._engine.dialect.name,
            self._catalog or "<default>",
        )

    def close(self) -> None:
        self._inspector = None
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()
            self._engine = None

    @property
    def inspector(self) -> Inspector:
        if self._inspector is None:
            raise ConnectivityError("Metadata provider is not open.")
        return self._inspector

    def _call(self, what: str, fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except SQLAlchemyError as exc:
            raise ConnectivityError(f"Failed to read {what}: {exc}") from exc

    def _table_comment(self, table_name: str) -> Optional[str]:
        try:
            info: Dict[str, Any] = self.inspector.get_table_comment(
                table_name, schema=self._catalog
            )
        except NotImplementedError:
            return None
        return info.get("text")

    def list_tables(self) -> List[TableEntry]:
        names: List[str] = self._call(
            "table names",
            lambda: self.inspector.get_table_names(schema=self._catalog),
        )
        return [
            TableEntry(
                name,
                self._call(f"comment of '{name}'", lambda n=name: self._table_comment(n)),
            )
            for name in names
        ]

    def list_columns(self, table_name: str) -> List[ColumnEntry]:
        cols: List[Dict[str, Any]] = self._call(
            f"columns of '{table_name}'",
            lambda: self.inspector.get_columns(table_name, schema=self._catalog),
        )
        return [
            ColumnEntry(c["name"], sql_type_code_for(c["type"]), c.get("comment"))
            for c in cols
        ]

    def list_primary_key(self, table_name: str) -> List[str]:
        pk: Dict[str, Any] = self._call(
            f"primary key of '{table_name}'",
            lambda: self.inspector.get_pk_constraint(table_name, schema=self._catalog),
        )
        return list(pk.get("constrained_columns") or [])


def jdbc_url_from(database_url: Optional[str]) -> Optional[str]:
    """
    Best-effort JDBC URL for a SQLAlchemy URL, for the generated datasource.

    ``mysql+pymysql://u:p@db:3306/shop`` -> ``jdbc:mysql://db:3306/shop``.
    Returns None for unparseable URLs and unknown backends.
    """
    if not database_url:
        return None
    try:
        url = make_url(database_url)
    except SQLAlchemyError:
        return None

    backend: str = url.get_backend_name()
    host: str = url.host or "localhost"
    port: str = f":{url.port}" if url.port else ""
    database: str = url.database or ""

    if backend == "sqlite":
        return f"jdbc:sqlite:{database}" if database else None
    if backend in ("mysql", "mariadb", "postgresql"):
        suffix: str = f"/{database}" if database else ""
        return f"jdbc:{backend}://{host}{port}{suffix}"
    if backend == "mssql":
        suffix = f";databaseName={database}" if database else ""
        return f"jdbc:sqlserver://{host}{port}{suffix}"
    if backend == "oracle":
        return f"jdbc:oracle:thin:@{host}{port}/{database}"
    logger.debug("No JDBC URL mapping for backend '%s'.", backend)
    return None


def database_user_from(database_url: Optional[str]) -> Optional[str]:
    if not database_url:
        return None
    try:
        return make_url(database_url).username
    except SQLAlchemyError:
        return None


# ---------------------------------------------------------------------------
# Snapshot provider
# ---------------------------------------------------------------------------


class SnapshotMetadataProvider(MetadataProvider):
    """
    Serves metadata from a plain mapping, typically loaded from YAML or JSON::

        tables:
          - name: user_info
            comment: Registered users
            primary_key: id          # or a list; first entry wins
            columns:
              - {name: id, type: BIGINT}
              - {name: user_name, type: VARCHAR, comment: Login name}

    ``type`` is a SqlTypeCode name or an integer code.
    """

    def __init__(self, data: Mapping[str, Any], source: str = "<dict>") -> None:
        self._source: str = source
        self._tables: Dict[str, Mapping[str, Any]] = {}
        self._order: List[str] = []

        raw_tables: Any = data.get("tables")
        if not isinstance(raw_tables, list):
            raise ConnectivityError(f"Snapshot {source} has no 'tables' list.")
        for idx, raw in enumerate(raw_tables):
            if not isinstance(raw, Mapping) or not raw.get("name"):
                raise ConnectivityError(
                    f"Snapshot {source}: table entry #{idx} has no name."
                )
            name: str = str(raw["name"])
            if name in self._tables:
                raise ConnectivityError(
                    f"Snapshot {source}: table '{name}' is listed twice."
                )
            self._tables[name] = raw
            self._order.append(name)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SnapshotMetadataProvider":
        """Load a snapshot file; unreadable files raise ConnectivityError."""
        file_path: Path = Path(path)
        try:
            data: Dict[str, Any] = load_structured_file(file_path)
        except (FileNotFoundError, ValueError, OSError) as exc:
            raise ConnectivityError(f"Cannot load schema snapshot: {exc}") from exc
        return cls(data, source=str(file_path))

    def _table(self, table_name: str) -> Mapping[str, Any]:
        try:
            return self._tables[table_name]
        except KeyError:
            raise ConnectivityError(
                f"Snapshot {self._source} has no table '{table_name}'."
            ) from None

    def list_tables(self) -> List[TableEntry]:
        return [TableEntry(n, self._tables[n].get("comment")) for n in self._order]

    def list_columns(self, table_name: str) -> List[ColumnEntry]:
        entries: List[ColumnEntry] = []
        for position, raw in enumerate(self._table(table_name).get("columns") or []):
            if not isinstance(raw, Mapping) or not raw.get("name"):
                raise ConnectivityError(
                    f"Snapshot {self._source}, table '{table_name}': column "
                    f"#{position + 1} has no name."
                )
            type_value: Any = raw.get("type")
            try:
                code = None if type_value is None else parse_type_code(type_value)
            except ValueError as exc:
                raise ConnectivityError(
                    f"Snapshot {self._source}, table '{table_name}': {exc}"
                ) from exc
            entries.append(ColumnEntry(str(raw["name"]), code, raw.get("comment")))
        return entries

    def list_primary_key(self, table_name: str) -> List[str]:
        pk: Any = self._table(table_name).get("primary_key")
        if pk is None:
            return []
        if isinstance(pk, list):
            return [str(p) for p in pk]
        return [str(pk)]


# ---------------------------------------------------------------------------
# Introspector
# ---------------------------------------------------------------------------


class SchemaIntrospector:
    """
    Drains a metadata provider into an ordered list of ``TableModel``.

    Usage::

        provider = SqlAlchemyMetadataProvider("sqlite:///shop.db")
        tables = SchemaIntrospector(provider).introspect()
    """

    def __init__(
        self,
        provider: MetadataProvider,
        table_filter: Optional[Callable[[str], bool]] = None,
    ) -> None:
        self._provider: MetadataProvider = provider
        self._table_filter: Optional[Callable[[str], bool]] = table_filter

    def introspect(self) -> List[TableModel]:
        """
        Read every table in scope.

        Raises:
            ConnectivityError: If the provider cannot be opened or read.
            MalformedSchemaError: If a table's metadata is inconsistent.
        """
        tables: List[TableModel] = []
        with Timer("introspect") as timer, self._provider as provider:
            for entry in provider.list_tables():
                if self._table_filter is not None and not self._table_filter(entry.name):
                    logger.debug("Table '%s' filtered out.", entry.name)
                    continue
                tables.append(self._build_table(provider, entry))

        logger.info("Introspected %d table(s) in %.3fs.", len(tables), timer.elapsed)
        return tables

    @staticmethod
    def _build_table(provider: MetadataProvider, entry: TableEntry) -> TableModel:
        columns: Tuple[ColumnModel, ...] = tuple(
            ColumnModel.from_metadata(c.name, c.type_code, c.comment)
            for c in provider.list_columns(entry.name)
        )

        key_columns: Sequence[str] = provider.list_primary_key(entry.name)
        primary_key: Optional[str] = key_columns[0] if key_columns else None
        if len(key_columns) > 1:
            logger.warning(
                "Table '%s' has a composite key %s; only '%s' is used.",
                entry.name,
                list(key_columns),
                primary_key,
            )

        table: TableModel = TableModel(
            source_name=entry.name,
            comment=entry.comment,
            columns=columns,
            primary_key_column_name=primary_key,
        )
        logger.debug("Introspected %r.", table)
        return table


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TableEntry",
    "ColumnEntry",
    "MetadataProvider",
    "SqlAlchemyMetadataProvider",
    "SnapshotMetadataProvider",
    "SchemaIntrospector",
    "sql_type_code_for",
    "jdbc_url_from",
    "database_user_from",
]

logger.debug("layergen.introspector loaded — %d public symbols.", len(__all__))
