"""
tests/test_utils.py
Unit tests for gencode.utils (naming transforms and file helpers).
"""

from __future__ import annotations

import hashlib
import pathlib

import pytest

from gencode.utils import (
    Timer,
    count_lines,
    ensure_directory,
    package_to_path,
    sha256_file,
    strip_table_prefix,
    to_camel_case,
    to_pascal_case,
)


class TestCamelCase:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("user_name", "userName"),
            ("created_time", "createdTime"),
            ("id", "id"),
            ("", ""),
            ("product_category_id", "productCategoryId"),
            ("user__name", "userName"),
            ("user_NAME", "userName"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert to_camel_case(name) == expected

    def test_first_segment_kept_verbatim(self) -> None:
        assert to_camel_case("USER_id") == "USERId"


class TestPascalCase:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("user_info", "UserInfo"),
            ("user", "User"),
            ("", ""),
            ("t_user", "TUser"),
            ("_leading_underscore", "LeadingUnderscore"),
            ("ORDER_ITEM", "OrderItem"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert to_pascal_case(name) == expected

    def test_idempotent_on_single_word(self) -> None:
        once = to_pascal_case("user")
        assert to_pascal_case(once) == once


class TestStripTablePrefix:
    def test_removes_matching_prefix(self) -> None:
        assert strip_table_prefix("t_user", "t_") == "user"

    def test_keeps_name_without_prefix(self) -> None:
        assert strip_table_prefix("user", "t_") == "user"

    def test_empty_prefix_is_noop(self) -> None:
        assert strip_table_prefix("t_user", "") == "t_user"


class TestFileHelpers:
    def test_package_to_path(self) -> None:
        assert package_to_path("com.example.entity") == "com/example/entity"
        assert package_to_path("") == ""

    def test_ensure_directory_is_repeatable(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "a" / "b"
        ensure_directory(target)
        ensure_directory(target)
        assert target.is_dir()

    def test_sha256_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "data.txt"
        path.write_bytes(b"hello\n")
        assert sha256_file(path) == hashlib.sha256(b"hello\n").hexdigest()

    @pytest.mark.parametrize(
        "content, expected",
        [("", 0), ("one", 1), ("one\n", 1), ("one\ntwo", 2), ("one\ntwo\n", 2)],
    )
    def test_count_lines(self, content: str, expected: int) -> None:
        assert count_lines(content) == expected


class TestTimer:
    def test_records_elapsed_time(self) -> None:
        timer = Timer("noop")
        assert timer.elapsed == 0.0
        with timer:
            assert timer.running
        assert not timer.running
        frozen = timer.elapsed
        assert frozen >= 0.0
        assert timer.elapsed == frozen
        assert "noop" in repr(timer)

    def test_stops_on_exception(self) -> None:
        timer = Timer("boom")
        with pytest.raises(RuntimeError):
            with timer:
                raise RuntimeError("boom")
        assert not timer.running
        frozen = timer.elapsed
        assert timer.elapsed == frozen
