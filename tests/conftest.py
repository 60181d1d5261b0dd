"""
tests/conftest.py
Shared fixtures for the gencode test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixtures, and schema
introspection runs against throwaway SQLite files.
"""

from __future__ import annotations

import copy
import logging
import pathlib
import textwrap
from typing import Any, Callable, Dict, List

import pytest
from sqlalchemy import create_engine, text

from gencode.models import Config, Field, Table


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_gencode_logger():
    """Undo the CLI's logging setup so caplog sees records in every test."""
    yield
    root = logging.getLogger("gencode")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


# ---------------------------------------------------------------------------
# Schema fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def user_table() -> Table:
    """``user``: bigint PK, NOT NULL username, nullable email."""
    return Table(
        name="user",
        comment="User accounts",
        fields=[
            Field.from_column("id", "bigint", comment="Primary key", is_nullable=False, is_primary_key=True),
            Field.from_column("username", "varchar(64)", comment="Login name", is_nullable=False),
            Field.from_column("email", "varchar(128)", comment="Email address", is_nullable=True),
        ],
    )


@pytest.fixture()
def product_table() -> Table:
    return Table(
        name="product",
        comment="Products for sale",
        fields=[
            Field.from_column("id", "bigint", is_nullable=False, is_primary_key=True),
            Field.from_column("product_name", "varchar(255)", is_nullable=False),
            Field.from_column("price", "decimal(10,2)"),
            Field.from_column("created_time", "datetime"),
        ],
    )


@pytest.fixture()
def tables(user_table: Table, product_table: Table) -> List[Table]:
    return [user_table, product_table]


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Output root inside tmp_path (not created; the generator creates it)."""
    return tmp_path / "out"


@pytest.fixture()
def config_dict(output_dir: pathlib.Path) -> Dict[str, Any]:
    """Raw configuration mapping, as it would appear in config.json."""
    return copy.deepcopy(
        {
            "project_name": "demo",
            "db_config": {
                "driver_name": "mysql",
                "host": "localhost",
                "port": 3306,
                "username": "root",
                "password": "password",
                "database_name": "test_db",
                "table_prefix": "t_",
            },
            "gen_config": {
                "output_path": str(output_dir),
                "enable_lombok": True,
                "enable_swagger": True,
                "author": "tester",
                "date": "2024-01-01",
            },
            "package_config": {
                "base_package": "com.example",
                "entity_package": "com.example.entity",
                "mapper_package": "com.example.mapper",
                "service_package": "com.example.service",
                "controller_package": "com.example.controller",
            },
        }
    )


@pytest.fixture()
def config(config_dict: Dict[str, Any]) -> Config:
    return Config.model_validate(config_dict)


# ---------------------------------------------------------------------------
# Template fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def template_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "templates"
    path.mkdir()
    return path


@pytest.fixture()
def write_template(template_dir: pathlib.Path) -> Callable[[str, str], pathlib.Path]:
    """Factory: write a dedented template under template_dir and return its path."""

    def _write(relative: str, content: str) -> pathlib.Path:
        path = template_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sqlite_db(tmp_path: pathlib.Path) -> pathlib.Path:
    """A SQLite database holding ``user``, ``product`` and ``audit_log`` tables."""
    path = tmp_path / "schema.db"
    engine = create_engine(f"sqlite:///{path}")
    try:
        with engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE TABLE user ("
                    " id INTEGER PRIMARY KEY,"
                    " username VARCHAR(64) NOT NULL,"
                    " email VARCHAR(128))"
                )
            )
            conn.execute(
                text(
                    "CREATE TABLE product ("
                    " id INTEGER PRIMARY KEY,"
                    " product_name VARCHAR(255) NOT NULL,"
                    " price DECIMAL(10, 2),"
                    " created_time DATETIME)"
                )
            )
            conn.execute(
                text(
                    "CREATE TABLE audit_log ("
                    " tenant_id INTEGER NOT NULL,"
                    " entry_id INTEGER NOT NULL,"
                    " message TEXT,"
                    " PRIMARY KEY (tenant_id, entry_id))"
                )
            )
    finally:
        engine.dispose()
    return path
