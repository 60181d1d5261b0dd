# File: gencode/introspect.py
"""
gencode - Schema Introspection
===============================
Reads table and column metadata through SQLAlchemy's ``Inspector`` and
turns it into ``Table`` / ``Field`` records.

The connection only lives for the duration of ``load_tables()``, and the
engine is disposed on every exit path.  Tables come back in the order the
inspector reports them, which is the order per-table templates are
rendered in.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL, Engine
from sqlalchemy.engine.reflection import Inspector
from sqlalchemy.exc import CompileError, SQLAlchemyError

from gencode.errors import SchemaIntrospectionError
from gencode.models import DatabaseDialect, DBConfig, Field, Table

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.introspect")


# driver_name -> (SQLAlchemy drivername, dialect used for type mapping)
_DRIVERS: Dict[str, tuple] = {
    "mysql": ("mysql+pymysql", DatabaseDialect.MYSQL.value),
    "postgresql": ("postgresql+psycopg2", DatabaseDialect.POSTGRESQL.value),
    "postgres": ("postgresql+psycopg2", DatabaseDialect.POSTGRESQL.value),
    "sqlite": ("sqlite", DatabaseDialect.SQLITE.value),
}


class SchemaSource(Protocol):
    """Anything that can hand the generator an ordered list of tables."""

    def load_tables(self) -> List[Table]:
        ...


def resolve_driver(driver_name: str) -> tuple:
    """Return ``(sqlalchemy_drivername, dialect)`` for a configured driver name."""
    try:
        return _DRIVERS[driver_name.strip().lower()]
    except KeyError:
        raise SchemaIntrospectionError(
            f"unsupported database driver {driver_name!r}; "
            f"expected one of {sorted(_DRIVERS)}"
        ) from None


def build_url(db_config: DBConfig) -> URL:
    """Build the SQLAlchemy connection URL for *db_config*."""
    drivername, dialect = resolve_driver(db_config.driver_name)
    if dialect == DatabaseDialect.SQLITE.value:
        return URL.create(drivername, database=db_config.database_name or None)
    return URL.create(
        drivername,
        username=db_config.username or None,
        password=db_config.password or None,
        host=db_config.host or None,
        port=db_config.port or None,
        database=db_config.database_name or None,
    )


class SchemaIntrospector:
    """
    Default schema source backed by a live database connection.

    Usage::

        tables = SchemaIntrospector(config.db_config).load_tables()
    """

    def __init__(self, db_config: DBConfig) -> None:
        self._db_config: DBConfig = db_config
        self._drivername, self._dialect = resolve_driver(db_config.driver_name)

    @property
    def dialect(self) -> str:
        return self._dialect

    def select_tables(self, table_names: List[str]) -> List[str]:
        """Apply ``include_tables`` / ``exclude_tables``, keeping the given order."""
        include = set(self._db_config.include_tables)
        exclude = set(self._db_config.exclude_tables)
        return [
            name
            for name in table_names
            if (not include or name in include) and name not in exclude
        ]

    def load_tables(self) -> List[Table]:
        """
        Connect, read every selected table and disconnect.

        Raises:
            SchemaIntrospectionError: connection, driver or reflection
                failure.  Failures while reading a table name that table.
        """
        url: URL = build_url(self._db_config)
        try:
            engine: Engine = create_engine(url)
        except (ImportError, SQLAlchemyError) as exc:
            raise SchemaIntrospectionError(
                f"cannot create database engine for {url.render_as_string(hide_password=True)}: {exc}"
            ) from exc

        try:
            with engine.connect() as conn:
                inspector: Inspector = inspect(conn)
                try:
                    names: List[str] = inspector.get_table_names()
                except SQLAlchemyError as exc:
                    raise SchemaIntrospectionError(f"cannot list tables: {exc}") from exc

                selected: List[str] = self.select_tables(names)
                logger.info(
                    "Introspecting %d of %d table(s) in %s.",
                    len(selected),
                    len(names),
                    url.render_as_string(hide_password=True),
                )
                return [self._read_table(inspector, name) for name in selected]
        except SQLAlchemyError as exc:
            raise SchemaIntrospectionError(
                f"cannot connect to {url.render_as_string(hide_password=True)}: {exc}"
            ) from exc
        finally:
            engine.dispose()

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _read_table(self, inspector: Inspector, table_name: str) -> Table:
        try:
            columns: List[Dict[str, Any]] = inspector.get_columns(table_name)
            pk: Dict[str, Any] = inspector.get_pk_constraint(table_name) or {}
            comment: str = self._table_comment(inspector, table_name)
        except SQLAlchemyError as exc:
            raise SchemaIntrospectionError(
                f"cannot read table metadata: {exc}", table_name=table_name
            ) from exc

        pk_columns: List[str] = list(pk.get("constrained_columns") or [])
        if len(pk_columns) > 1:
            logger.warning(
                "Table %s has a composite primary key %s; only %s is treated as the key.",
                table_name,
                pk_columns,
                pk_columns[0],
            )
        pk_column: Optional[str] = pk_columns[0] if pk_columns else None

        fields: List[Field] = []
        for col in columns:
            fields.append(
                Field.from_column(
                    col["name"],
                    self._column_type(inspector, col),
                    comment=col.get("comment") or "",
                    is_nullable=bool(col.get("nullable", True)),
                    is_primary_key=col["name"] == pk_column,
                    dialect=self._dialect,
                )
            )

        logger.debug("Read table %s (%d columns, pk=%s).", table_name, len(fields), pk_column)
        return Table(name=table_name, comment=comment, fields=fields)

    @staticmethod
    def _column_type(inspector: Inspector, column: Dict[str, Any]) -> str:
        try:
            return column["type"].compile(dialect=inspector.dialect)
        except CompileError:
            logger.debug("Column %s has a type that cannot be compiled.", column.get("name"))
            return ""

    @staticmethod
    def _table_comment(inspector: Inspector, table_name: str) -> str:
        try:
            return (inspector.get_table_comment(table_name) or {}).get("text") or ""
        except NotImplementedError:
            return ""


__all__: List[str] = [
    "SchemaIntrospector",
    "SchemaSource",
    "build_url",
    "resolve_driver",
]
