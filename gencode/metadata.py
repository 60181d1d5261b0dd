# File: gencode/metadata.py
"""
gencode - Template Metadata Parser
===================================

Templates may carry routing directives on their first lines::

    @@Meta.Output="src/main/java/{{ replace('.', '/', entity_package) }}/{{ class_name }}.java"
    package {{ entity_package }};
    ...

Three independent passes work on the raw template text:

1. ``extract_output_directive`` looks at a short prefix (10 lines) for an
   ``@@Meta.Output=`` directive.
2. ``references_table_scope`` parses the whole text and reports whether it
   uses one of the per-table bindings (``table`` / ``class_name``).
3. ``strip_metadata`` drops every ``@@Meta.`` line plus the blank lines
   left at the top, and leaves all other bytes untouched.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from jinja2 import Environment, TemplateSyntaxError, meta

from gencode.errors import TemplateDiscoveryError
from gencode.models import PER_TABLE_BINDINGS

logger: logging.Logger = logging.getLogger("gencode.metadata")

META_PREFIX: str = "@@Meta."
OUTPUT_DIRECTIVE: str = "@@Meta.Output="
DIRECTIVE_SCAN_LINES: int = 10

# Only used for parsing; syntax does not depend on globals or whitespace options.
_PARSE_ENV: Environment = Environment(autoescape=False)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def extract_output_directive(
    text: str,
    *,
    max_lines: int = DIRECTIVE_SCAN_LINES,
    template_path: Optional[str] = None,
) -> Optional[str]:
    """
    Return the ``@@Meta.Output`` value from the first *max_lines* lines.

    Returns ``None`` when no directive is present.  An empty value is
    malformed metadata and raises ``TemplateDiscoveryError``.
    """
    for lineno, line in enumerate(text.split("\n")[:max_lines], start=1):
        stripped: str = line.strip()
        if not stripped.startswith(OUTPUT_DIRECTIVE):
            continue
        value: str = _unquote(stripped[len(OUTPUT_DIRECTIVE):].strip())
        if not value.strip():
            raise TemplateDiscoveryError(
                f"empty {OUTPUT_DIRECTIVE} directive on line {lineno}",
                template_path=template_path,
            )
        return value
    return None


def referenced_names(text: str, *, template_path: Optional[str] = None) -> frozenset:
    """All free variable names a template refers to."""
    try:
        ast = _PARSE_ENV.parse(text)
    except TemplateSyntaxError as exc:
        raise TemplateDiscoveryError(
            f"template syntax error on line {exc.lineno}: {exc.message}",
            template_path=template_path,
        ) from exc
    return frozenset(meta.find_undeclared_variables(ast))


def references_table_scope(
    text: str,
    *,
    bindings: Iterable[str] = PER_TABLE_BINDINGS,
    template_path: Optional[str] = None,
) -> bool:
    """True when the template uses any of the per-table *bindings*."""
    return not referenced_names(text, template_path=template_path).isdisjoint(bindings)


def strip_metadata(text: str) -> str:
    """
    Remove metadata lines and the blank lines that lead the remainder.

    Interior blank lines, indentation and the trailing newline survive.
    """
    lines: List[str] = [
        line for line in text.split("\n") if not line.strip().startswith(META_PREFIX)
    ]
    start: int = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    return "\n".join(lines[start:])


__all__: List[str] = [
    "DIRECTIVE_SCAN_LINES",
    "META_PREFIX",
    "OUTPUT_DIRECTIVE",
    "extract_output_directive",
    "referenced_names",
    "references_table_scope",
    "strip_metadata",
]
