# File: gencode/functions.py
"""
gencode - Template Function Library
====================================

The fixed set of helper functions available inside every template:

    sub(a, b)              -> a - b          (integers)
    add(a, b)              -> a + b          (integers)
    replace(old, new, s)   -> s with every ``old`` replaced by ``new``
    title(s)               -> first character upper-cased, the rest lower

They are installed as the *only* globals of the template environment, so a
template calling anything else is rejected when it is loaded.  New helpers
are added by registering them here, next to a unit test.

Note that ``title`` is the single-word variant (``"hELLO wORLD"`` ->
``"Hello world"``), not Jinja's multi-word ``|title`` filter.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Mapping

logger: logging.Logger = logging.getLogger("gencode.functions")


def _check_integers(name: str, *values: object) -> None:
    for value in values:
        # bool is an int subclass; reject it explicitly.
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(
                f"{name}() takes integers, got {type(value).__name__} {value!r}"
            )


def sub(a: int, b: int) -> int:
    _check_integers("sub", a, b)
    return a - b


def add(a: int, b: int) -> int:
    _check_integers("add", a, b)
    return a + b


def replace(old: str, new: str, s: str) -> str:
    return str(s).replace(old, new)


def title(s: str) -> str:
    s = str(s)
    if not s:
        return s
    return s[:1].upper() + s[1:].lower()


class FunctionRegistry(Mapping[str, Callable[..., object]]):
    """
    Closed, read-only mapping of function name -> callable.

    The registry is built once and shared by every render; it cannot be
    mutated after construction.
    """

    def __init__(self, functions: Mapping[str, Callable[..., object]]) -> None:
        self._functions: Dict[str, Callable[..., object]] = dict(functions)

    def __getitem__(self, name: str) -> Callable[..., object]:
        return self._functions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._functions))

    def __len__(self) -> int:
        return len(self._functions)

    def names(self) -> frozenset:
        return frozenset(self._functions)

    def __repr__(self) -> str:
        return f"<FunctionRegistry {sorted(self._functions)}>"


DEFAULT_REGISTRY: FunctionRegistry = FunctionRegistry(
    {
        "sub": sub,
        "add": add,
        "replace": replace,
        "title": title,
    }
)


__all__: List[str] = [
    "DEFAULT_REGISTRY",
    "FunctionRegistry",
    "add",
    "replace",
    "sub",
    "title",
]
