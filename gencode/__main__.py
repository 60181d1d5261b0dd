# File: gencode/__main__.py
"""
gencode — Module entry point.

Allows running the generator directly via::

    python -m gencode -config config.json

This module simply delegates to the CLI entry point defined in ``gencode.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from gencode.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
