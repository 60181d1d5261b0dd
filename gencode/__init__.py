# File: gencode/__init__.py
"""
gencode — Database-driven Code Generator
=========================================

Reads table metadata from a relational database and renders a directory of
Jinja2 templates into a Spring Boot / MyBatis-Plus backend skeleton: one
entity, mapper, service and controller per table, plus the project files
that are generated once.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌─────────────────┐
    │ CLI / server │────▶│   Generator    │────▶│  RenderEngine   │
    │ (cli.py ...) │     │ (generator.py) │     │  (renderer.py)  │
    └──────────────┘     └───────┬────────┘     └─────────────────┘
                                 │
                ┌────────────────┼────────────────┐
                ▼                ▼                ▼
         ┌────────────┐   ┌────────────┐   ┌────────────┐
         │ introspect │   │ discovery  │   │  context   │
         │   (.py)    │   │ + metadata │   │   (.py)    │
         └────────────┘   └────────────┘   └────────────┘

Usage::

    # As a library
    from gencode import Generator, load_config
    with Generator(load_config("config.json")) as gen:
        report = gen.run()

    # From the command line
    gencode -config config.json -v
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from gencode.config import default_config, load_config, save_config
from gencode.context import build_global_context, build_table_context
from gencode.discovery import SourceRootRule, discover_templates
from gencode.errors import (
    BodyRenderError,
    ConfigError,
    DirectoryCreationError,
    FileCreationError,
    GenCodeError,
    GeneratorStateError,
    PathResolutionError,
    RenderError,
    SchemaIntrospectionError,
    TemplateDiscoveryError,
    TemplateLoadError,
)
from gencode.functions import DEFAULT_REGISTRY, FunctionRegistry
from gencode.generator import GenerationReport, Generator, GeneratorState
from gencode.introspect import SchemaIntrospector
from gencode.models import (
    Config,
    DBConfig,
    Field,
    GenConfig,
    PackageConfig,
    RenderContext,
    Table,
    TemplateDescriptor,
)
from gencode.renderer import GeneratedFile, RenderEngine
from gencode.utils import to_camel_case, to_pascal_case

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    "__license__",
    # Driver
    "Generator",
    "GeneratorState",
    "GenerationReport",
    # Models
    "Config",
    "DBConfig",
    "Field",
    "GenConfig",
    "PackageConfig",
    "RenderContext",
    "Table",
    "TemplateDescriptor",
    # Pipeline pieces
    "DEFAULT_REGISTRY",
    "FunctionRegistry",
    "GeneratedFile",
    "RenderEngine",
    "SchemaIntrospector",
    "SourceRootRule",
    "build_global_context",
    "build_table_context",
    "discover_templates",
    # Configuration
    "default_config",
    "load_config",
    "save_config",
    # Errors
    "BodyRenderError",
    "ConfigError",
    "DirectoryCreationError",
    "FileCreationError",
    "GenCodeError",
    "GeneratorStateError",
    "PathResolutionError",
    "RenderError",
    "SchemaIntrospectionError",
    "TemplateDiscoveryError",
    "TemplateLoadError",
    # Utilities
    "to_camel_case",
    "to_pascal_case",
]
