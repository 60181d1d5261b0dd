# File: gencode/models.py
"""
gencode - Core Data Models
===========================
Pydantic V2 models for everything that flows through the generation
pipeline:

    Config ─┬─ DBConfig          (where the schema comes from)
            ├─ GenConfig         (output root, feature toggles, stamps)
            └─ PackageConfig     (Java package per artifact kind)

    Table ── Field               (one record per introspected table/column)

    TemplateDescriptor           (one per template file found on disk)
    RenderContext                (the only value bound into a render)

Configuration and schema records are frozen: they are loaded once per run
and only ever read afterwards.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field as PydanticField,
    field_validator,
    model_validator,
)

from gencode.utils import to_camel_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.models")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DatabaseDialect(str, Enum):
    """Database dialects the type map knows about."""

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Column type mapping
# ---------------------------------------------------------------------------

DEFAULT_MAPPED_TYPE: str = "String"
DEFAULT_OUTPUT_PATH: str = "./output"

_BASE_TYPE_MAP: Dict[str, str] = {
    # Integers
    "tinyint": "Integer",
    "smallint": "Integer",
    "mediumint": "Integer",
    "int": "Integer",
    "integer": "Integer",
    "bigint": "Long",
    # Booleans
    "bit": "Boolean",
    "bool": "Boolean",
    "boolean": "Boolean",
    # Decimals
    "decimal": "BigDecimal",
    "numeric": "BigDecimal",
    "float": "Float",
    "double": "Double",
    "real": "Double",
    # Strings
    "char": "String",
    "varchar": "String",
    "tinytext": "String",
    "text": "String",
    "mediumtext": "String",
    "longtext": "String",
    "json": "String",
    "enum": "String",
    "set": "String",
    # Temporal
    "date": "Date",
    "datetime": "Date",
    "timestamp": "Date",
    "time": "Date",
    "year": "Date",
    # Binary
    "binary": "byte[]",
    "varbinary": "byte[]",
    "tinyblob": "byte[]",
    "blob": "byte[]",
    "mediumblob": "byte[]",
    "longblob": "byte[]",
}

_DIALECT_TYPE_OVERRIDES: Dict[str, Dict[str, str]] = {
    DatabaseDialect.MYSQL.value: {},
    DatabaseDialect.POSTGRESQL.value: {
        "int2": "Integer",
        "int4": "Integer",
        "int8": "Long",
        "serial": "Integer",
        "bigserial": "Long",
        "float4": "Float",
        "float8": "Double",
        "double precision": "Double",
        "character varying": "String",
        "character": "String",
        "uuid": "String",
        "jsonb": "String",
        "bytea": "byte[]",
        "timestamptz": "Date",
        "timestamp with time zone": "Date",
        "timestamp without time zone": "Date",
        "time with time zone": "Date",
        "time without time zone": "Date",
    },
    DatabaseDialect.SQLITE.value: {
        # SQLite INTEGER columns are 64-bit.
        "integer": "Long",
        "int": "Long",
    },
}

_TYPE_ARGS_RE: re.Pattern[str] = re.compile(r"\([^)]*\)")
_WHITESPACE_RE: re.Pattern[str] = re.compile(r"\s+")
_TYPE_MODIFIERS: frozenset = frozenset({"unsigned", "zerofill", "signed"})


def normalize_column_type(column_type: str) -> str:
    """
    Normalise a raw column type for lookup.

        >>> normalize_column_type("VARCHAR(64)")
        'varchar'
        >>> normalize_column_type("bigint(20) unsigned")
        'bigint'
    """
    cleaned: str = _TYPE_ARGS_RE.sub("", column_type or "").lower()
    words: List[str] = [
        w for w in _WHITESPACE_RE.split(cleaned.strip()) if w and w not in _TYPE_MODIFIERS
    ]
    return " ".join(words)


def map_column_type(column_type: str, dialect: str = DatabaseDialect.MYSQL.value) -> str:
    """
    Map a database column type to the generated Java type name.

    Dialect overrides are consulted first, then the shared base table; the
    full normalised type is tried before its first word.  Unknown types map
    to ``String``.
    """
    normalized: str = normalize_column_type(column_type)
    if not normalized:
        return DEFAULT_MAPPED_TYPE

    overrides: Mapping[str, str] = _DIALECT_TYPE_OVERRIDES.get(str(dialect), {})
    first_word: str = normalized.split(" ", 1)[0]
    for key in (normalized, first_word):
        if key in overrides:
            return overrides[key]
        if key in _BASE_TYPE_MAP:
            return _BASE_TYPE_MAP[key]

    logger.debug("Unknown column type %r (%s), mapping to %s.", column_type, dialect, DEFAULT_MAPPED_TYPE)
    return DEFAULT_MAPPED_TYPE


# ---------------------------------------------------------------------------
# Schema records
# ---------------------------------------------------------------------------


class Field(BaseModel):
    """
    A single table column plus the names derived from it.

    ``field_name`` is always ``to_camel_case(column_name)`` and
    ``mapped_type_name`` is always ``map_column_type(column_type, dialect)``.
    Both may be passed (a dumped field validates again unchanged), but a
    value that disagrees with the derivation is rejected.
    """

    model_config = _SHARED_CONFIG

    column_name: str = PydanticField(..., min_length=1)
    column_type: str = ""
    comment: str = ""
    is_nullable: bool = True
    is_primary_key: bool = False
    dialect: DatabaseDialect = DatabaseDialect.MYSQL
    mapped_type_name: str = ""
    field_name: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derive_names(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        column_name: Any = data.get("column_name")
        column_type: Any = data.get("column_type") or ""
        if not isinstance(column_name, str) or not isinstance(column_type, str):
            return data

        dialect: str = DatabaseDialect(data.get("dialect", DatabaseDialect.MYSQL)).value
        derived: Dict[str, str] = {
            "field_name": to_camel_case(column_name),
            "mapped_type_name": map_column_type(column_type, dialect),
        }
        for key, value in derived.items():
            supplied: Any = data.get(key)
            if supplied and supplied != value:
                raise ValueError(
                    f"{key} {supplied!r} does not match {value!r} derived from "
                    f"column '{column_name}' ({column_type or 'no type'}, {dialect})"
                )
            data[key] = value
        return data

    @classmethod
    def from_column(
        cls,
        column_name: str,
        column_type: str,
        *,
        comment: str = "",
        is_nullable: bool = True,
        is_primary_key: bool = False,
        dialect: str = DatabaseDialect.MYSQL.value,
    ) -> "Field":
        """Build a field the way schema introspection does."""
        return cls(
            column_name=column_name,
            column_type=column_type,
            comment=comment,
            is_nullable=is_nullable,
            is_primary_key=is_primary_key,
            dialect=dialect,
        )

    def __repr__(self) -> str:
        pk: str = " PK" if self.is_primary_key else ""
        return f"<Field {self.column_name} {self.column_type} -> {self.mapped_type_name}{pk}>"


class Table(BaseModel):
    """
    A database table as seen by the generator.

    Invariant: at most one field is the primary key, and ``primary_key`` is
    a copy of that field.  It is filled in when omitted; a supplied value
    must equal the flagged field.
    """

    model_config = _SHARED_CONFIG

    name: str = PydanticField(..., min_length=1)
    comment: str = ""
    fields: List[Field] = PydanticField(default_factory=list)
    primary_key: Optional[Field] = None

    @model_validator(mode="after")
    def _check_primary_key(self) -> "Table":
        pk_fields: List[Field] = [f for f in self.fields if f.is_primary_key]
        if len(pk_fields) > 1:
            raise ValueError(
                f"Table '{self.name}' has {len(pk_fields)} primary key fields; "
                f"at most one is supported: {[f.column_name for f in pk_fields]}"
            )
        if self.primary_key is None:
            if pk_fields:
                object.__setattr__(self, "primary_key", pk_fields[0].model_copy())
            return self

        if not pk_fields:
            raise ValueError(
                f"Table '{self.name}' names primary key "
                f"'{self.primary_key.column_name}' but no field is flagged is_primary_key"
            )
        if self.primary_key.model_dump() != pk_fields[0].model_dump():
            raise ValueError(
                f"Table '{self.name}' primary key '{self.primary_key.column_name}' "
                f"does not match its primary key field '{pk_fields[0].column_name}'"
            )
        return self

    def __repr__(self) -> str:
        return f"<Table {self.name} ({len(self.fields)} fields)>"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class DBConfig(BaseModel):
    """Database connection and table selection."""

    model_config = _SHARED_CONFIG

    driver_name: str = "mysql"
    host: str = "localhost"
    port: int = PydanticField(default=3306, ge=0, le=65535)
    username: str = "root"
    password: str = ""
    database_name: str = ""
    table_prefix: str = ""
    include_tables: List[str] = PydanticField(default_factory=list)
    exclude_tables: List[str] = PydanticField(default_factory=list)


class GenConfig(BaseModel):
    """Output location, feature toggles and author/date stamps."""

    model_config = _SHARED_CONFIG

    output_path: str = DEFAULT_OUTPUT_PATH
    enable_lombok: bool = True
    enable_swagger: bool = True
    author: str = "admin"
    date: str = PydanticField(
        default="", description="Stamp for generated files; today's date when empty."
    )
    strip_table_prefix: bool = PydanticField(
        default=False,
        description="Strip db_config.table_prefix before deriving class names.",
    )
    template_path: Optional[str] = PydanticField(
        default=None, description="Template root; the bundled templates when unset."
    )
    template_suffix: str = PydanticField(default=".tpl", min_length=1)

    @field_validator("output_path", mode="before")
    @classmethod
    def _blank_output_path(cls, value: Any) -> Any:
        # A blank root would resolve to the working directory.
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_OUTPUT_PATH
        return value


class PackageConfig(BaseModel):
    """Java package names, one per generated artifact kind."""

    model_config = _SHARED_CONFIG

    base_package: str = "com.example"
    entity_package: str = "com.example.entity"
    mapper_package: str = "com.example.mapper"
    service_package: str = "com.example.service"
    controller_package: str = "com.example.controller"

    def all_packages(self) -> List[str]:
        return [
            self.entity_package,
            self.mapper_package,
            self.service_package,
            self.controller_package,
        ]


class Config(BaseModel):
    """Top-level configuration, as stored in ``config.json``."""

    model_config = _SHARED_CONFIG

    project_name: str = "demo"
    db_config: DBConfig = PydanticField(default_factory=DBConfig)
    gen_config: GenConfig = PydanticField(default_factory=GenConfig)
    package_config: PackageConfig = PydanticField(default_factory=PackageConfig)


# ---------------------------------------------------------------------------
# Template descriptors & render contexts
# ---------------------------------------------------------------------------


class TemplateDescriptor(BaseModel):
    """Routing metadata for one template file, fixed at discovery time."""

    model_config = _SHARED_CONFIG

    source_path: Path
    output_path_template: str
    is_per_table: bool = False


class RenderContext(BaseModel):
    """
    Everything a single render can see.

    For a global render only ``config`` is set; ``template_vars()`` then
    exposes nothing else to the template.
    """

    model_config = _SHARED_CONFIG

    config: Config
    table: Optional[Table] = None
    class_name: Optional[str] = None
    entity_package: str = ""
    mapper_package: str = ""
    service_package: str = ""
    controller_package: str = ""
    enable_lombok: bool = False
    enable_swagger: bool = False
    author: str = ""
    date: str = ""

    @property
    def is_per_table(self) -> bool:
        return self.table is not None

    @property
    def table_name(self) -> Optional[str]:
        return self.table.name if self.table is not None else None

    def template_vars(self) -> Dict[str, Any]:
        """Names bound into the template namespace for this render."""
        if not self.is_per_table:
            return {"config": self.config}
        return {name: getattr(self, name) for name in type(self).model_fields}


GLOBAL_CONTEXT_NAMES: frozenset = frozenset({"config"})
TABLE_CONTEXT_NAMES: frozenset = frozenset(RenderContext.model_fields)
PER_TABLE_BINDINGS: frozenset = frozenset({"table", "class_name"})


__all__: List[str] = [
    "Config",
    "DBConfig",
    "DEFAULT_MAPPED_TYPE",
    "DEFAULT_OUTPUT_PATH",
    "DatabaseDialect",
    "Field",
    "GLOBAL_CONTEXT_NAMES",
    "GenConfig",
    "PER_TABLE_BINDINGS",
    "PackageConfig",
    "RenderContext",
    "TABLE_CONTEXT_NAMES",
    "Table",
    "TemplateDescriptor",
    "map_column_type",
    "normalize_column_type",
]
