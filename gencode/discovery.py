# File: gencode/discovery.py
"""
gencode - Template Discovery
=============================

Walks a template root and turns every ``*.tpl`` file into a
``TemplateDescriptor``:

* the output path comes from an ``@@Meta.Output`` directive when present,
  otherwise it is derived from the template's location under the root;
* the per-table flag comes from whether the template mentions ``table`` or
  ``class_name`` anywhere in its text.

The walk is lexical and fails on the first problem; a broken template never
gets skipped quietly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional

from gencode.errors import TemplateDiscoveryError
from gencode.metadata import extract_output_directive, references_table_scope
from gencode.models import TemplateDescriptor

logger: logging.Logger = logging.getLogger("gencode.discovery")

DEFAULT_TEMPLATE_ROOT: Path = Path(__file__).resolve().parent / "templates"
DEFAULT_TEMPLATE_SUFFIX: str = ".tpl"


@dataclass(frozen=True)
class SourceRootRule:
    """
    Re-roots synthesized output paths for a source subtree.

    With the defaults, a template at ``java/Foo.java.tpl`` without a
    directive maps to ``/java/Foo.java``.  The renderer joins every path
    onto the output root, so the prefix only changes where the subtree
    lands when it is something other than ``/``.
    """

    marker: str = "java/"
    prefix: str = "/"

    def apply(self, relative_path: str) -> str:
        if self.marker and relative_path.startswith(self.marker):
            return self.prefix + relative_path
        return relative_path


DEFAULT_SOURCE_RULE: SourceRootRule = SourceRootRule()


def synthesize_output_path(
    template_path: Path,
    template_root: Path,
    *,
    suffix: str = DEFAULT_TEMPLATE_SUFFIX,
    source_rule: Optional[SourceRootRule] = DEFAULT_SOURCE_RULE,
) -> str:
    """Output path for a template that has no ``@@Meta.Output`` directive."""
    relative: str = PurePosixPath(*template_path.relative_to(template_root).parts).as_posix()
    if relative.endswith(suffix):
        relative = relative[: -len(suffix)]
    if source_rule is not None:
        relative = source_rule.apply(relative)
    return relative


def parse_template(
    template_path: Path,
    template_root: Path,
    *,
    suffix: str = DEFAULT_TEMPLATE_SUFFIX,
    source_rule: Optional[SourceRootRule] = DEFAULT_SOURCE_RULE,
) -> TemplateDescriptor:
    """Build the descriptor for a single template file."""
    try:
        text: str = template_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateDiscoveryError(
            f"cannot read template: {exc}", template_path=str(template_path)
        ) from exc

    output_path: Optional[str] = extract_output_directive(
        text, template_path=str(template_path)
    )
    if output_path is None:
        output_path = synthesize_output_path(
            template_path, template_root, suffix=suffix, source_rule=source_rule
        )

    return TemplateDescriptor(
        source_path=template_path,
        output_path_template=output_path,
        is_per_table=references_table_scope(text, template_path=str(template_path)),
    )


def _raise_walk_error(exc: OSError) -> None:
    raise TemplateDiscoveryError(
        f"cannot walk template directory: {exc}", template_path=exc.filename
    ) from exc


def discover_templates(
    template_root: Path,
    *,
    suffix: str = DEFAULT_TEMPLATE_SUFFIX,
    source_rule: Optional[SourceRootRule] = DEFAULT_SOURCE_RULE,
) -> List[TemplateDescriptor]:
    """
    Find every template under *template_root*, in lexical walk order.

    Raises:
        TemplateDiscoveryError: missing root, walk failure or a malformed
            template.  The first problem aborts discovery.
    """
    root: Path = Path(template_root)
    if not root.is_dir():
        raise TemplateDiscoveryError(
            "template root is not a directory", template_path=str(root)
        )

    descriptors: List[TemplateDescriptor] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if not filename.endswith(suffix):
                continue
            descriptor: TemplateDescriptor = parse_template(
                Path(dirpath) / filename, root, suffix=suffix, source_rule=source_rule
            )
            logger.debug(
                "Discovered %s -> %s (per_table=%s)",
                descriptor.source_path,
                descriptor.output_path_template,
                descriptor.is_per_table,
            )
            descriptors.append(descriptor)

    logger.info(
        "Discovered %d template(s) under %s (%d per-table).",
        len(descriptors),
        root,
        sum(1 for d in descriptors if d.is_per_table),
    )
    return descriptors


__all__: List[str] = [
    "DEFAULT_SOURCE_RULE",
    "DEFAULT_TEMPLATE_ROOT",
    "DEFAULT_TEMPLATE_SUFFIX",
    "SourceRootRule",
    "discover_templates",
    "parse_template",
    "synthesize_output_path",
]
