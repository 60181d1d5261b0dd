# File: gencode/renderer.py
"""
gencode - Render Engine
========================

Turns one ``TemplateDescriptor`` plus one ``RenderContext`` into one file on
disk.  Each render goes through five steps, and each step has its own error
type:

    1. load        read, strip metadata, compile (cached), validate names
                   -> TemplateLoadError
    2. path        evaluate the output-path template, confine to root
                   -> PathResolutionError
    3. directories create missing parents
                   -> DirectoryCreationError
    4. file        open (create / truncate) the destination
                   -> FileCreationError
    5. body        stream the evaluated body into the file
                   -> BodyRenderError

Every error carries the template path and, for per-table renders, the table
name, and chains the original exception.

Templates run in a Jinja2 environment whose only globals are the functions
from ``gencode.functions``.  Undefined names are strict, so a typo in a
template is an error rather than an empty string.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set

from jinja2 import (
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateSyntaxError,
    meta,
    nodes,
)

from gencode.errors import (
    BodyRenderError,
    DirectoryCreationError,
    FileCreationError,
    PathResolutionError,
    TemplateLoadError,
)
from gencode.functions import DEFAULT_REGISTRY, FunctionRegistry
from gencode.metadata import strip_metadata
from gencode.models import (
    GLOBAL_CONTEXT_NAMES,
    TABLE_CONTEXT_NAMES,
    RenderContext,
    TemplateDescriptor,
)
from gencode.utils import count_lines, sha256_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.renderer")

# Errors raised by the registry functions themselves (e.g. ``add("x", 1)``).
_EVALUATION_ERRORS = (TemplateError, TypeError, ValueError, ArithmeticError)


# ---------------------------------------------------------------------------
# Render result
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    """Immutable record of one rendered file."""

    path: Path
    relative_path: str
    template: str
    table: Optional[str]
    size_bytes: int
    line_count: int
    sha256: str


# ---------------------------------------------------------------------------
# Environment & path helpers
# ---------------------------------------------------------------------------


def create_environment(registry: FunctionRegistry = DEFAULT_REGISTRY) -> Environment:
    """
    Jinja2 environment used for both body and output-path templates.

    Jinja's default globals (``range``, ``dict``, ``namespace``...) are
    removed so the registry is the complete set of callable names.
    """
    env = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals.clear()
    env.globals.update(registry)
    return env


def resolve_output_path(output_root: Path, rendered: str) -> Path:
    """
    Join a rendered output path onto *output_root*.

    A leading ``/`` (or ``\\``) only anchors the path at the output root.
    Raises ``ValueError`` for an empty result or one that leaves the root.
    """
    value: str = rendered.strip().replace("\\", "/")
    relative: str = value.lstrip("/")
    if not relative:
        raise ValueError(f"output path {rendered!r} is empty")

    root: str = os.path.abspath(output_root)
    candidate: str = os.path.normpath(os.path.join(root, relative))
    if candidate == root or not candidate.startswith(root + os.sep):
        raise ValueError(f"output path {rendered!r} escapes the output root {root}")
    return Path(candidate)


# ---------------------------------------------------------------------------
# RenderEngine
# ---------------------------------------------------------------------------


class RenderEngine:
    """
    Renders descriptors into files under one output root.

    Compiled body templates are cached by source path and compiled path
    templates by their text, so each distinct template is parsed once per
    engine no matter how many tables it is rendered for.

    Usage::

        engine = RenderEngine(Path("./output"))
        record = engine.render(descriptor, build_table_context(config, table))
    """

    def __init__(
        self,
        output_root: Path,
        registry: FunctionRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self._output_root: Path = Path(output_root)
        self._registry: FunctionRegistry = registry
        self._env: Environment = create_environment(registry)
        self._bodies: Dict[Path, Template] = {}
        self._paths: Dict[str, Template] = {}

    @property
    def output_root(self) -> Path:
        return self._output_root

    @property
    def cached_sources(self) -> FrozenSet[Path]:
        return frozenset(self._bodies)

    def clear_cache(self) -> None:
        self._bodies.clear()
        self._paths.clear()

    # -----------------------------------------------------------------
    # Step 1: load
    # -----------------------------------------------------------------

    def allowed_names(self, descriptor: TemplateDescriptor) -> FrozenSet[str]:
        """Names a template may reference: its context bindings plus the registry."""
        bound = TABLE_CONTEXT_NAMES if descriptor.is_per_table else GLOBAL_CONTEXT_NAMES
        return frozenset(bound) | self._registry.names()

    def load(
        self, descriptor: TemplateDescriptor, table_name: Optional[str] = None
    ) -> Template:
        """Compile the body of *descriptor*, reusing the cached template if present."""
        source_path: Path = descriptor.source_path
        cached: Optional[Template] = self._bodies.get(source_path)
        if cached is not None:
            return cached

        template_path: str = str(source_path)
        try:
            raw: str = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateLoadError(
                f"cannot read template: {exc}",
                template_path=template_path,
                table_name=table_name,
            ) from exc

        body: str = strip_metadata(raw)
        try:
            ast: nodes.Template = self._env.parse(body, filename=template_path)
        except TemplateSyntaxError as exc:
            raise TemplateLoadError(
                f"syntax error on line {exc.lineno}: {exc.message}",
                template_path=template_path,
                table_name=table_name,
            ) from exc

        self._check_names(ast, descriptor, table_name)
        template: Template = self._env.from_string(ast)
        self._bodies[source_path] = template
        logger.debug("Compiled template %s.", template_path)
        return template

    def _check_names(
        self,
        ast: nodes.Template,
        descriptor: TemplateDescriptor,
        table_name: Optional[str],
    ) -> None:
        allowed: FrozenSet[str] = self.allowed_names(descriptor)
        unknown: Set[str] = set(meta.find_undeclared_variables(ast)) - allowed
        if not unknown:
            return

        called: Set[str] = {
            call.node.name
            for call in ast.find_all(nodes.Call)
            if isinstance(call.node, nodes.Name) and call.node.name in unknown
        }
        template_path: str = str(descriptor.source_path)
        if called:
            raise TemplateLoadError(
                f"unknown function(s): {', '.join(sorted(called))}",
                template_path=template_path,
                table_name=table_name,
            )
        scope: str = "per-table" if descriptor.is_per_table else "global"
        raise TemplateLoadError(
            f"unknown variable(s) for a {scope} template: {', '.join(sorted(unknown))}",
            template_path=template_path,
            table_name=table_name,
        )

    # -----------------------------------------------------------------
    # Step 2: path
    # -----------------------------------------------------------------

    def resolve_path(
        self, descriptor: TemplateDescriptor, context: RenderContext
    ) -> Path:
        template_path: str = str(descriptor.source_path)
        source: str = descriptor.output_path_template
        try:
            compiled: Optional[Template] = self._paths.get(source)
            if compiled is None:
                compiled = self._env.from_string(source)
                self._paths[source] = compiled
            rendered: str = compiled.render(**context.template_vars())
        except _EVALUATION_ERRORS as exc:
            raise PathResolutionError(
                f"cannot evaluate output path {source!r}: {exc}",
                template_path=template_path,
                table_name=context.table_name,
            ) from exc

        try:
            return resolve_output_path(self._output_root, rendered)
        except ValueError as exc:
            raise PathResolutionError(
                str(exc),
                template_path=template_path,
                table_name=context.table_name,
            ) from exc

    # -----------------------------------------------------------------
    # Full render
    # -----------------------------------------------------------------

    def render(
        self, descriptor: TemplateDescriptor, context: RenderContext
    ) -> GeneratedFile:
        """
        Render *descriptor* with *context* and write the result.

        An existing file at the destination is overwritten.  When the body
        fails midway the partially written file is left in place.
        """
        template_path: str = str(descriptor.source_path)
        table_name: Optional[str] = context.table_name

        template: Template = self.load(descriptor, table_name)
        destination: Path = self.resolve_path(descriptor, context)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreationError(
                f"cannot create directory {destination.parent}: {exc}",
                template_path=template_path,
                table_name=table_name,
            ) from exc

        try:
            fh = open(destination, "w", encoding="utf-8", newline="")
        except OSError as exc:
            raise FileCreationError(
                f"cannot open {destination} for writing: {exc}",
                template_path=template_path,
                table_name=table_name,
            ) from exc

        with fh:
            try:
                template.stream(**context.template_vars()).dump(fh)
            except (OSError,) + _EVALUATION_ERRORS as exc:
                raise BodyRenderError(
                    f"cannot render body into {destination}: {exc}",
                    template_path=template_path,
                    table_name=table_name,
                ) from exc

        record = GeneratedFile(
            path=destination,
            relative_path=destination.relative_to(
                os.path.abspath(self._output_root)
            ).as_posix(),
            template=template_path,
            table=table_name,
            size_bytes=destination.stat().st_size,
            line_count=count_lines(destination.read_text(encoding="utf-8")),
            sha256=sha256_file(destination),
        )
        logger.debug(
            "Rendered %s -> %s (%d bytes, %d lines).",
            template_path,
            record.relative_path,
            record.size_bytes,
            record.line_count,
        )
        return record


__all__: List[str] = [
    "GeneratedFile",
    "RenderEngine",
    "create_environment",
    "resolve_output_path",
]

logger.debug("gencode.renderer loaded.")
