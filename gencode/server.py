# File: gencode/server.py
"""
gencode - Admin HTTP Server
============================

A small FastAPI application for triggering generation runs remotely.

Endpoints::

    GET  /healthz        liveness probe
    POST /v1/generate    run one generation, return the written files

Runs are serialised behind one process-wide lock, so two requests never
write under an output root at the same time.  When an API token is
configured every ``/v1`` request must carry ``Authorization: Bearer <token>``.

Start it with ``gencode-server --port 8080`` (token from ``--token`` or
``GENCODE_API_TOKEN``).
"""

from __future__ import annotations

import argparse
import logging
import os
import secrets
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field as PydanticField

from gencode.config import DEFAULT_CONFIG_PATH, load_config
from gencode.errors import (
    ConfigError,
    GenCodeError,
    RenderError,
    SchemaIntrospectionError,
    TemplateDiscoveryError,
    iter_error_chain,
)
from gencode.generator import GenerationReport, Generator
from gencode.models import Config, Table

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("gencode.server")

API_TOKEN_ENV: str = "GENCODE_API_TOKEN"
CONFIG_PATH_ENV: str = "GENCODE_CONFIG"

# Most specific first; the first matching class decides the status code.
_ERROR_STATUS: Sequence[tuple] = (
    (ConfigError, status.HTTP_400_BAD_REQUEST),
    (SchemaIntrospectionError, status.HTTP_502_BAD_GATEWAY),
    (TemplateDiscoveryError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (RenderError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (GenCodeError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

# One generation at a time per process.
_RUN_LOCK: threading.Lock = threading.Lock()


# ---------------------------------------------------------------------------
# Settings & payloads
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    api_token: Optional[str] = None
    default_config_path: str = DEFAULT_CONFIG_PATH

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls(
            api_token=os.getenv(API_TOKEN_ENV) or None,
            default_config_path=os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH),
        )


class GenerateRequest(BaseModel):
    """
    Body of ``POST /v1/generate``.

    ``config`` takes precedence over ``config_path``; with neither, the
    server's default configuration file is used.  ``tables`` skips schema
    introspection.
    """

    model_config = ConfigDict(extra="forbid")

    config: Optional[Config] = None
    config_path: Optional[str] = None
    tables: Optional[List[Table]] = None


class GenerateResponse(BaseModel):
    project_name: str
    output_directory: str
    tables: List[str] = PydanticField(default_factory=list)
    total_files: int = 0
    files: List[str] = PydanticField(default_factory=list)
    elapsed_seconds: float = 0.0


class ErrorResponse(BaseModel):
    error: str
    detail: str
    causes: List[str] = PydanticField(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _status_for(exc: GenCodeError) -> int:
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _resolve_config(request: GenerateRequest, settings: ServerSettings) -> Config:
    if request.config is not None:
        return request.config
    path = Path(request.config_path or settings.default_config_path)
    # Unlike the CLI, a missing file is an error here rather than a bootstrap.
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    return load_config(path)


def run_generation(config: Config, tables: Optional[List[Table]] = None) -> GenerationReport:
    """Run one generation while holding the process-wide lock."""
    with _RUN_LOCK:
        with Generator(config, tables=tables) as generator:
            generator.init()
            return generator.generate()


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    """Build the FastAPI application for *settings* (environment when None)."""
    settings = settings or ServerSettings.from_env()
    from gencode import __version__

    app = FastAPI(title="gencode", version=__version__)
    bearer = HTTPBearer(auto_error=False)

    def verify_token(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    ) -> None:
        if settings.api_token is None:
            return
        if credentials is None or not secrets.compare_digest(
            credentials.credentials, settings.api_token
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid API token",
                headers={"WWW-Authenticate": "Bearer"},
            )

    @app.exception_handler(GenCodeError)
    async def handle_gencode_error(request: Request, exc: GenCodeError) -> JSONResponse:
        code: int = _status_for(exc)
        logger.error("%s %s failed (%d): %s", request.method, request.url.path, code, exc)
        chain: List[BaseException] = list(iter_error_chain(exc))
        body = ErrorResponse(
            error=type(exc).__name__,
            detail=str(exc),
            causes=[f"{type(err).__name__}: {err}" for err in chain[1:]],
        )
        return JSONResponse(status_code=code, content=body.model_dump())

    @app.get("/healthz")
    def healthz() -> Dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post(
        "/v1/generate",
        response_model=GenerateResponse,
        dependencies=[Depends(verify_token)],
    )
    def generate(request: GenerateRequest) -> GenerateResponse:
        config: Config = _resolve_config(request, settings)
        logger.info("Generation requested for project '%s'.", config.project_name)
        report: GenerationReport = run_generation(config, request.tables)
        return GenerateResponse(
            project_name=report.project_name,
            output_directory=report.output_directory,
            tables=sorted({f.table for f in report.files if f.table is not None}),
            total_files=report.total_files,
            files=[f.relative_path for f in report.files],
            elapsed_seconds=report.total_elapsed_seconds,
        )

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[Sequence[str]] = None) -> None:
    from gencode.cli import setup_logging

    parser = argparse.ArgumentParser(
        prog="gencode-server", description="Admin HTTP server for gencode."
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument(
        "--config",
        default=os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH),
        help="Configuration used when a request names none (default: %(default)s).",
    )
    parser.add_argument(
        "--token",
        default=os.getenv(API_TOKEN_ENV),
        help=f"Bearer token required on /v1 requests (env: {API_TOKEN_ENV}).",
    )
    parser.add_argument("-v", "--verbose", action="count", default=1)
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    settings = ServerSettings(api_token=args.token or None, default_config_path=args.config)
    if settings.api_token is None:
        logger.warning("No API token configured; /v1 endpoints are unauthenticated.")
    uvicorn.run(create_app(settings), host=args.host, port=args.port)


__all__: List[str] = [
    "GenerateRequest",
    "GenerateResponse",
    "ServerSettings",
    "create_app",
    "main",
    "run_generation",
]

logger.debug("gencode.server loaded.")
