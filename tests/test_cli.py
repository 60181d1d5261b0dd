"""
tests/test_cli.py
Tests for gencode.cli: exit codes, output and the default-config bootstrap.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, List

import pytest

from gencode import __version__
from gencode.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_INIT_ERROR,
    EXIT_SUCCESS,
    cli_main,
)


def _run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as info:
        cli_main(argv)
    return info.value.code


def _write_config(tmp_path: pathlib.Path, data: Dict[str, Any]) -> pathlib.Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestCli:
    def test_success_with_sqlite(
        self,
        tmp_path: pathlib.Path,
        config_dict: Dict[str, Any],
        sqlite_db: pathlib.Path,
        output_dir: pathlib.Path,
        capsys: pytest.CaptureFixture,
    ) -> None:
        config_dict["db_config"] = {"driver_name": "sqlite", "database_name": str(sqlite_db)}
        path = _write_config(tmp_path, config_dict)

        assert _run(["-config", str(path)]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Code generation completed" in out
        assert (output_dir / "src/main/java/com/example/entity/User.java").is_file()

    def test_long_option(
        self, tmp_path: pathlib.Path, config_dict: Dict[str, Any], sqlite_db: pathlib.Path
    ) -> None:
        config_dict["db_config"] = {"driver_name": "sqlite", "database_name": str(sqlite_db)}
        path = _write_config(tmp_path, config_dict)
        assert _run(["--config", str(path), "-q"]) == EXIT_SUCCESS

    def test_invalid_config(self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:
        path = tmp_path / "config.json"
        path.write_text("{broken", encoding="utf-8")
        assert _run(["-config", str(path)]) == EXIT_CONFIG_ERROR
        assert "ConfigError" in capsys.readouterr().err

    def test_introspection_failure(
        self, tmp_path: pathlib.Path, config_dict: Dict[str, Any], capsys: pytest.CaptureFixture
    ) -> None:
        config_dict["db_config"] = {"driver_name": "oracle"}
        path = _write_config(tmp_path, config_dict)
        assert _run(["-config", str(path)]) == EXIT_INIT_ERROR
        assert "unsupported database driver" in capsys.readouterr().err

    def test_generation_failure_prints_chain(
        self,
        tmp_path: pathlib.Path,
        config_dict: Dict[str, Any],
        sqlite_db: pathlib.Path,
        template_dir: pathlib.Path,
        capsys: pytest.CaptureFixture,
    ) -> None:
        (template_dir / "bad.tpl").write_text("{{ table.nope }}\n", encoding="utf-8")
        config_dict["db_config"] = {"driver_name": "sqlite", "database_name": str(sqlite_db)}
        config_dict["gen_config"]["template_path"] = str(template_dir)
        path = _write_config(tmp_path, config_dict)

        assert _run(["-config", str(path)]) == EXIT_GENERATION_ERROR
        err = capsys.readouterr().err
        assert "BodyRenderError" in err
        assert "caused by: UndefinedError" in err

    def test_missing_config_bootstraps_default(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        # The default configuration points at a MySQL server that is not
        # there, so the run fails after the file has been written.
        code = _run([])
        assert (tmp_path / "config.json").is_file()
        assert code == EXIT_INIT_ERROR

    def test_version(self, capsys: pytest.CaptureFixture) -> None:
        assert _run(["--version"]) == 0
        assert __version__ in capsys.readouterr().out
