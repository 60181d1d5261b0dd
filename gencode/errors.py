# File: gencode/errors.py
"""
gencode - Exception hierarchy
==============================

Every failure in the pipeline is raised as a subclass of ``GenCodeError``
and chained to its original cause with ``raise ... from exc``.  Nothing is
retried or rolled back; the caller decides how to report the chain.

    GenCodeError
    ├── ConfigError
    ├── SchemaIntrospectionError
    ├── TemplateDiscoveryError
    ├── RenderError
    │   ├── TemplateLoadError
    │   ├── PathResolutionError
    │   ├── DirectoryCreationError
    │   ├── FileCreationError
    │   └── BodyRenderError
    └── GeneratorStateError
"""

from __future__ import annotations

from typing import Iterator, List, Optional


class GenCodeError(Exception):
    """Base class for all gencode errors."""


class ConfigError(GenCodeError):
    """Configuration file missing, unreadable or invalid."""


class SchemaIntrospectionError(GenCodeError):
    """Reading the database schema failed."""

    def __init__(self, message: str, *, table_name: Optional[str] = None) -> None:
        self.table_name: Optional[str] = table_name
        if table_name:
            message = f"{message} [table={table_name}]"
        super().__init__(message)


class TemplateDiscoveryError(GenCodeError):
    """The template tree could not be walked or a template is malformed."""

    def __init__(self, message: str, *, template_path: Optional[str] = None) -> None:
        self.template_path: Optional[str] = template_path
        if template_path:
            message = f"{message} [template={template_path}]"
        super().__init__(message)


class RenderError(GenCodeError):
    """
    A single template could not be rendered into its output file.

    ``template_path`` always identifies the template; ``table_name`` is set
    for per-table renders.
    """

    kind: str = "render"

    def __init__(
        self,
        message: str,
        *,
        template_path: str,
        table_name: Optional[str] = None,
    ) -> None:
        self.template_path: str = template_path
        self.table_name: Optional[str] = table_name
        self.detail: str = message
        location: str = f"template={template_path}"
        if table_name is not None:
            location += f", table={table_name}"
        super().__init__(f"{self.kind} error: {message} [{location}]")


class TemplateLoadError(RenderError):
    kind = "template load"


class PathResolutionError(RenderError):
    kind = "path resolution"


class DirectoryCreationError(RenderError):
    kind = "directory creation"


class FileCreationError(RenderError):
    kind = "file creation"


class BodyRenderError(RenderError):
    kind = "body render"


class GeneratorStateError(GenCodeError):
    """An operation was invoked in a state that does not allow it."""


def iter_error_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* followed by each ``__cause__`` / ``__context__`` below it."""
    seen: List[int] = []
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.append(id(current))
        yield current
        current = current.__cause__ or current.__context__


def format_error_chain(exc: BaseException) -> str:
    """Render an exception chain as ``outer: caused by: inner`` lines."""
    lines: List[str] = []
    for depth, err in enumerate(iter_error_chain(exc)):
        prefix: str = "" if depth == 0 else "  caused by: "
        lines.append(f"{prefix}{type(err).__name__}: {err}")
    return "\n".join(lines)


__all__: List[str] = [
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
    "format_error_chain",
    "iter_error_chain",
]
