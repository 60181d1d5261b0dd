# File: gencode/cli.py
"""
gencode - Command-Line Interface
=================================

Thin ``argparse`` front end over ``Generator``.

Usage examples::

    # Generate with ./config.json (written with defaults if missing)
    gencode

    # Explicit configuration file, verbose logging
    gencode -config project.yaml -vv

    # Show version
    python -m gencode --version

Exit codes:
    0 — success
    1 — configuration error
    2 — initialisation / schema introspection error
    3 — generation error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Tuple

from gencode.config import DEFAULT_CONFIG_PATH, load_config
from gencode.errors import ConfigError, GenCodeError, format_error_chain
from gencode.generator import GenerationReport, Generator
from gencode.models import Config

# ---------------------------------------------------------------------------
# Logger (configured in setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_CONFIG_ERROR: int = 1
EXIT_INIT_ERROR: int = 2
EXIT_GENERATION_ERROR: int = 3


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


LOG_FORMAT: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
_VERBOSITY_LEVELS: Tuple[int, ...] = (logging.WARNING, logging.INFO, logging.DEBUG)


def setup_logging(verbosity: int) -> None:
    """
    Send ``gencode.*`` records to stderr.

    Args:
        verbosity: 0 or less = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    index: int = max(0, min(verbosity, len(_VERBOSITY_LEVELS) - 1))
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    package_logger: logging.Logger = logging.getLogger("gencode")
    for previous in list(package_logger.handlers):
        package_logger.removeHandler(previous)
    package_logger.addHandler(handler)
    package_logger.setLevel(_VERBOSITY_LEVELS[index])
    # Records end here; root handlers of a host application never see them.
    package_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    from gencode import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="gencode",
        description=(
            "gencode — database-driven code generator.\n\n"
            "Reads table metadata from a database and renders a Spring Boot /\n"
            "MyBatis-Plus project skeleton from a directory of templates."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s\n"
            "  %(prog)s -config project.yaml -v\n"
        ),
    )
    parser.add_argument(
        "-config",
        "--config",
        dest="config",
        default=DEFAULT_CONFIG_PATH,
        metavar="PATH",
        help="Configuration file, JSON or YAML (default: %(default)s). "
        "A default configuration is written here when the file is missing.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v INFO, -vv DEBUG).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all log output.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def _fail(stage: str, exc: GenCodeError, exit_code: int) -> int:
    print(f"gencode: {stage} failed:\n{format_error_chain(exc)}", file=sys.stderr)
    return exit_code


def run(config_path: Path) -> int:
    """Load *config_path*, run one generation and return the exit code."""
    try:
        config: Config = load_config(config_path)
    except ConfigError as exc:
        return _fail("configuration", exc, EXIT_CONFIG_ERROR)

    with Generator(config) as generator:
        try:
            generator.init()
        except GenCodeError as exc:
            return _fail("initialisation", exc, EXIT_INIT_ERROR)

        try:
            report: GenerationReport = generator.generate()
        except GenCodeError as exc:
            if generator.report is not None:
                logger.info("\n%s", generator.report.summary())
            return _fail("generation", exc, EXIT_GENERATION_ERROR)

    logger.info("\n%s", report.summary())
    print(
        f"Code generation completed: {report.total_files} file(s) "
        f"written to {report.output_directory}"
    )
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose
    setup_logging(verbosity)
    if args.quiet:
        logging.getLogger("gencode").setLevel(logging.CRITICAL + 1)

    config_path: Path = Path(args.config)
    logger.info("Config:  %s", config_path.resolve())

    sys.exit(run(config_path))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "run",
    "setup_logging",
    "EXIT_SUCCESS",
    "EXIT_CONFIG_ERROR",
    "EXIT_INIT_ERROR",
    "EXIT_GENERATION_ERROR",
]

logger.debug("gencode.cli loaded.")
