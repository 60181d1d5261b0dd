# File: gencode/generator.py
"""
gencode - Generation Driver
============================

Runs the whole pipeline:

    Config → init (output dirs, schema) → discover templates → render each
    descriptor (once per table, or once globally) → GenerationReport

The ``Generator`` is a small state machine::

    IDLE ──init()──> INITIALIZED ──generate()──> GENERATING ──> DONE
      ^                                              │
      └──────────────reset()──────── FAILED <────────┘

Error handling strategy:
    - The first error stops the run; the generator moves to FAILED and the
      error propagates unchanged to the caller.
    - Nothing is rolled back: files written before the failure stay on
      disk.  ``reset()`` is the only way back to IDLE for a retry.

Two variants share the same class:
    - *schema-aware*: no ``tables`` given; ``init()`` creates the Java
      source tree and reads tables from the database.
    - *injected tables*: ``tables`` given; ``init()`` only ensures the
      output root exists.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from gencode.context import build_global_context, build_table_context
from gencode.discovery import (
    DEFAULT_SOURCE_RULE,
    DEFAULT_TEMPLATE_ROOT,
    SourceRootRule,
    discover_templates,
)
from gencode.errors import GenCodeError, GeneratorStateError
from gencode.functions import DEFAULT_REGISTRY, FunctionRegistry
from gencode.introspect import SchemaIntrospector, SchemaSource
from gencode.models import Config, Table, TemplateDescriptor
from gencode.renderer import GeneratedFile, RenderEngine
from gencode.utils import Timer, ensure_directory, package_to_path

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.generator")

MAPPER_XML_DIRECTORY: str = "src/main/resources/mapper"
JAVA_SOURCE_DIRECTORY: str = "src/main/java"


class GeneratorState(str, Enum):
    IDLE = "idle"
    INITIALIZED = "initialized"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Outcome of one ``Generator.generate()`` call.

    A failed run is not returned but stays readable as ``Generator.report``,
    with the step that failed recorded last.
    """

    success: bool = False
    project_name: str = ""
    output_directory: str = ""
    template_root: str = ""

    total_templates: int = 0
    per_table_templates: int = 0
    total_tables_processed: int = 0
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    files: List[GeneratedFile] = field(default_factory=list)

    def add_file(self, record: GeneratedFile) -> None:
        self.files.append(record)
        self.total_files += 1
        self.total_bytes += record.size_bytes
        self.total_lines += record.line_count

    @property
    def failed_step(self) -> Optional[GenerationStepMetric]:
        return next((s for s in self.step_metrics if not s.success), None)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        rule: str = "=" * 60
        rows: List[Tuple[str, str]] = [
            ("Status", "✅ SUCCESS" if self.success else "❌ FAILED"),
            ("Project", self.project_name),
            ("Output", self.output_directory),
            ("Templates", f"{self.total_templates} ({self.per_table_templates} per-table)"),
            ("Tables", str(self.total_tables_processed)),
            ("Files", f"{self.total_files} ({self.total_lines:,} lines, {self.total_bytes:,} bytes)"),
            ("Elapsed", f"{self.total_elapsed_seconds:.3f}s"),
        ]
        lines: List[str] = [rule, "  gencode generation report", rule]
        lines.extend(f"  {label + ':':<11s} {value}" for label, value in rows)

        if self.step_metrics:
            lines.append("-" * 60)
        for step in self.step_metrics:
            mark: str = "✓" if step.success else "✗"
            lines.append(f"  {mark} {step.step_name:<24s} {step.elapsed_seconds:>7.3f}s  {step.detail}")

        lines.append(rule)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class Generator:
    """
    Drives one generation run over a configuration and a set of tables.

    Usage::

        with Generator(config) as gen:
            gen.init()
            report = gen.generate()
        print(report.summary())

    Thread-safety: NOT thread-safe.  Use one generator per run.
    """

    def __init__(
        self,
        config: Config,
        tables: Optional[Sequence[Table]] = None,
        template_root: Optional[Path] = None,
        schema_source: Optional[SchemaSource] = None,
        *,
        registry: FunctionRegistry = DEFAULT_REGISTRY,
        source_rule: Optional[SourceRootRule] = DEFAULT_SOURCE_RULE,
    ) -> None:
        """
        Args:
            config: Run configuration.  An empty ``gen_config.date`` is
                replaced by today's date (``YYYY-MM-DD``).
            tables: Tables to render.  When omitted the generator is
                schema-aware and reads them in ``init()``.
            template_root: Template directory.  Defaults to
                ``gen_config.template_path``, then the bundled templates.
            schema_source: Where a schema-aware generator reads tables
                from; a ``SchemaIntrospector`` over ``db_config`` when None.
            registry: Functions available to templates.
            source_rule: Re-rooting rule for directive-less templates.
        """
        if not config.gen_config.date:
            today: str = datetime.date.today().isoformat()
            config = config.model_copy(
                update={"gen_config": config.gen_config.model_copy(update={"date": today})}
            )
        self._config: Config = config
        self._injected_tables: Optional[List[Table]] = list(tables) if tables is not None else None
        self._tables: List[Table] = []
        self._schema_source: Optional[SchemaSource] = schema_source
        self._registry: FunctionRegistry = registry
        self._source_rule: Optional[SourceRootRule] = source_rule

        if template_root is not None:
            self._template_root: Path = Path(template_root)
        elif config.gen_config.template_path:
            self._template_root = Path(config.gen_config.template_path)
        else:
            self._template_root = DEFAULT_TEMPLATE_ROOT

        self._output_root: Path = Path(config.gen_config.output_path)
        self._engine: Optional[RenderEngine] = None
        self._state: GeneratorState = GeneratorState.IDLE
        self._closed: bool = False
        self._init_metric: Optional[GenerationStepMetric] = None
        self._report: Optional[GenerationReport] = None

        logger.debug(
            "Generator created: project=%s, templates=%s, output=%s, schema_aware=%s.",
            config.project_name,
            self._template_root,
            self._output_root,
            self.schema_aware,
        )

    # -----------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def config(self) -> Config:
        return self._config

    @property
    def tables(self) -> List[Table]:
        return list(self._tables)

    @property
    def template_root(self) -> Path:
        return self._template_root

    @property
    def output_root(self) -> Path:
        return self._output_root

    @property
    def schema_aware(self) -> bool:
        return self._injected_tables is None

    @property
    def report(self) -> Optional[GenerationReport]:
        """Report of the latest ``generate()`` call, including a failed one."""
        return self._report

    # -----------------------------------------------------------------
    # State machine
    # -----------------------------------------------------------------

    def _require(self, operation: str, *allowed: GeneratorState) -> None:
        if self._closed:
            raise GeneratorStateError(f"cannot {operation}: generator is closed")
        if self._state not in allowed:
            raise GeneratorStateError(
                f"cannot {operation} in state {self._state.value}; "
                f"expected {' or '.join(s.value for s in allowed)}"
            )

    def init(self) -> None:
        """
        Prepare the output tree and acquire tables.

        Raises:
            GeneratorStateError: not IDLE.
            GenCodeError: directory creation or schema introspection failed
                (the generator is then FAILED).
        """
        self._require("init", GeneratorState.IDLE)
        try:
            with Timer("init") as timer:
                self._create_output_tree()
                if self._injected_tables is not None:
                    self._tables = list(self._injected_tables)
                else:
                    source: SchemaSource = self._schema_source or SchemaIntrospector(
                        self._config.db_config
                    )
                    self._tables = list(source.load_tables())
        except Exception:
            self._state = GeneratorState.FAILED
            raise

        self._init_metric = GenerationStepMetric(
            step_name="Initialise",
            elapsed_seconds=timer.elapsed,
            detail=f"{len(self._tables)} table(s)",
        )
        self._state = GeneratorState.INITIALIZED
        logger.info(
            "Initialised generator for '%s' with %d table(s).",
            self._config.project_name,
            len(self._tables),
        )

    def _create_output_tree(self) -> None:
        directories: List[Path] = [self._output_root]
        if self.schema_aware:
            java_root: Path = self._output_root / JAVA_SOURCE_DIRECTORY
            directories.extend(
                java_root / package_to_path(package)
                for package in self._config.package_config.all_packages()
            )
            directories.append(self._output_root / MAPPER_XML_DIRECTORY)

        for directory in directories:
            try:
                ensure_directory(directory)
            except OSError as exc:
                raise GenCodeError(f"cannot create directory {directory}: {exc}") from exc

    def generate(self) -> GenerationReport:
        """
        Render every template.

        Per-table templates are rendered once per table, in table order;
        global templates exactly once, including when there are no tables.

        Raises:
            GeneratorStateError: not INITIALIZED.
            GenCodeError: the first discovery or render failure (the
                generator is then FAILED).
        """
        self._require("generate", GeneratorState.INITIALIZED)
        self._state = GeneratorState.GENERATING

        report = GenerationReport(
            project_name=self._config.project_name,
            output_directory=str(self._output_root.resolve()),
            template_root=str(self._template_root),
            total_tables_processed=len(self._tables),
        )
        if self._init_metric is not None:
            report.step_metrics.append(self._init_metric)
        self._report = report

        total = Timer("generate")
        step = Timer("Discover templates")
        try:
            with total:
                with step:
                    descriptors: List[TemplateDescriptor] = discover_templates(
                        self._template_root,
                        suffix=self._config.gen_config.template_suffix,
                        source_rule=self._source_rule,
                    )
                report.total_templates = len(descriptors)
                report.per_table_templates = sum(1 for d in descriptors if d.is_per_table)
                report.step_metrics.append(
                    GenerationStepMetric(
                        step_name=step.label,
                        elapsed_seconds=step.elapsed,
                        detail=f"{len(descriptors)} template(s)",
                    )
                )

                step = Timer("Render templates")
                with step:
                    engine: RenderEngine = self._get_engine()
                    for descriptor in descriptors:
                        self._render_descriptor(engine, descriptor, report)
                report.step_metrics.append(
                    GenerationStepMetric(
                        step_name=step.label,
                        elapsed_seconds=step.elapsed,
                        detail=f"{report.total_files} file(s)",
                    )
                )
        except Exception as exc:
            report.step_metrics.append(
                GenerationStepMetric(
                    step_name=step.label,
                    success=False,
                    elapsed_seconds=step.elapsed,
                    detail=type(exc).__name__,
                )
            )
            report.total_elapsed_seconds = total.elapsed
            self._state = GeneratorState.FAILED
            logger.error("Generation failed during '%s': %s", step.label, exc)
            raise

        report.total_elapsed_seconds = total.elapsed
        report.success = True
        self._state = GeneratorState.DONE
        logger.info(
            "Generated %d file(s) for %d table(s) in %.3fs.",
            report.total_files,
            len(self._tables),
            report.total_elapsed_seconds,
        )
        return report

    def _get_engine(self) -> RenderEngine:
        if self._engine is None:
            self._engine = RenderEngine(self._output_root, self._registry)
        return self._engine

    def _render_descriptor(
        self,
        engine: RenderEngine,
        descriptor: TemplateDescriptor,
        report: GenerationReport,
    ) -> None:
        if not descriptor.is_per_table:
            report.add_file(engine.render(descriptor, build_global_context(self._config)))
            return
        for table in self._tables:
            report.add_file(engine.render(descriptor, build_table_context(self._config, table)))

    def run(self) -> GenerationReport:
        """``init()`` followed by ``generate()``."""
        self.init()
        return self.generate()

    def reset(self) -> None:
        """Return to IDLE, dropping tables read from the schema and compiled templates."""
        self._require(
            "reset",
            GeneratorState.IDLE,
            GeneratorState.INITIALIZED,
            GeneratorState.DONE,
            GeneratorState.FAILED,
        )
        self._tables = []
        self._init_metric = None
        self._report = None
        if self._engine is not None:
            self._engine.clear_cache()
        self._state = GeneratorState.IDLE
        logger.debug("Generator reset.")

    def close(self) -> None:
        """Release compiled templates.  Safe to call more than once."""
        if self._closed:
            return
        if self._engine is not None:
            self._engine.clear_cache()
            self._engine = None
        self._tables = []
        self._closed = True
        logger.debug("Generator closed.")

    def __enter__(self) -> "Generator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Generator {self._config.project_name} state={self._state.value}>"


__all__: List[str] = [
    "GenerationReport",
    "GenerationStepMetric",
    "Generator",
    "GeneratorState",
]

logger.debug("gencode.generator loaded.")
