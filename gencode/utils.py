# File: gencode/utils.py
"""
gencode - Utility Functions & Helpers
======================================
Naming transforms, small file helpers and the ``Timer`` context manager used
throughout the generation pipeline.

The naming transforms are deliberately simple: they split on ``_`` only and
never try to detect word boundaries inside a segment.  Class and field names
derived from a schema must be reproducible from the column/table name alone,
so the same input always yields the same output across runs.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import time
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.utils")


# ---------------------------------------------------------------------------
# Naming transforms
# ---------------------------------------------------------------------------


def _capitalize_segment(segment: str) -> str:
    return segment[:1].upper() + segment[1:].lower()


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert a snake_case name to camelCase.

    The first segment is kept as-is; every following non-empty segment is
    capitalised.  Empty segments (``a__b``) are skipped.

    Examples:
        >>> to_camel_case("user_name")
        'userName'
        >>> to_camel_case("product_category_id")
        'productCategoryId'
        >>> to_camel_case("id")
        'id'
    """
    if not name:
        return ""
    parts: List[str] = name.split("_")
    return parts[0] + "".join(_capitalize_segment(p) for p in parts[1:] if p)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert a snake_case name to PascalCase.

    Examples:
        >>> to_pascal_case("user_info")
        'UserInfo'
        >>> to_pascal_case("user")
        'User'
    """
    if not name:
        return ""
    return "".join(_capitalize_segment(p) for p in name.split("_") if p)


def strip_table_prefix(table_name: str, prefix: str) -> str:
    """Remove *prefix* from the front of *table_name* if it is there."""
    if prefix and table_name.startswith(prefix):
        return table_name[len(prefix):]
    return table_name


def package_to_path(package: str) -> str:
    """``com.example.entity`` -> ``com/example/entity``."""
    return "/".join(part for part in package.split(".") if part)


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """
    Create directory (and parents) if it doesn't exist.

    Safe to call repeatedly for the same path.
    """
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def sha256_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file's bytes."""
    digest = hashlib.sha256()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Wall-clock timer for one pipeline step.

    ``elapsed`` is live while the block runs and frozen once it exits,
    whether it exits normally or by an exception::

        with Timer("render") as step:
            ...
        metric.elapsed_seconds = step.elapsed
    """

    __slots__ = ("label", "_started", "_stopped")

    def __init__(self, label: str) -> None:
        self.label: str = label
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started is not None and self._stopped is None

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        end: float = self._stopped if self._stopped is not None else time.monotonic()
        return end - self._started

    def __enter__(self) -> "Timer":
        self._started = time.monotonic()
        self._stopped = None
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self._stopped = time.monotonic()
        outcome: str = "failed" if exc_type is not None else "finished"
        logger.debug("Step '%s' %s after %.4fs.", self.label, outcome, self.elapsed)

    def __repr__(self) -> str:
        state: str = "running" if self.running else f"{self.elapsed:.4f}s"
        return f"<Timer {self.label} {state}>"


__all__: List[str] = [
    "Timer",
    "count_lines",
    "ensure_directory",
    "package_to_path",
    "sha256_file",
    "strip_table_prefix",
    "to_camel_case",
    "to_pascal_case",
]
