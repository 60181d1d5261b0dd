"""
tests/test_discovery.py
Unit tests for gencode.discovery: template walking, output-path synthesis
and per-table classification.
"""

from __future__ import annotations

import pathlib
from typing import Callable, Dict

import pytest

from gencode.discovery import (
    DEFAULT_TEMPLATE_ROOT,
    SourceRootRule,
    discover_templates,
    synthesize_output_path,
)
from gencode.errors import TemplateDiscoveryError


WriteTemplate = Callable[[str, str], pathlib.Path]


class TestSynthesizeOutputPath:
    def test_strips_suffix(self, template_dir: pathlib.Path) -> None:
        path = template_dir / "conf" / "app.yml.tpl"
        assert synthesize_output_path(path, template_dir) == "conf/app.yml"

    def test_java_subtree_is_rerooted(self, template_dir: pathlib.Path) -> None:
        path = template_dir / "java" / "Foo.java.tpl"
        assert synthesize_output_path(path, template_dir) == "/java/Foo.java"

    def test_custom_rule(self, template_dir: pathlib.Path) -> None:
        path = template_dir / "java" / "Foo.java.tpl"
        rule = SourceRootRule(marker="java/", prefix="src/main/")
        assert synthesize_output_path(path, template_dir, source_rule=rule) == "src/main/java/Foo.java"

    def test_rule_disabled(self, template_dir: pathlib.Path) -> None:
        path = template_dir / "java" / "Foo.java.tpl"
        assert synthesize_output_path(path, template_dir, source_rule=None) == "java/Foo.java"

    def test_marker_must_prefix_path(self, template_dir: pathlib.Path) -> None:
        path = template_dir / "docs" / "java" / "notes.md.tpl"
        assert synthesize_output_path(path, template_dir) == "docs/java/notes.md"


class TestDiscoverTemplates:
    def test_descriptors(self, template_dir: pathlib.Path, write_template: WriteTemplate) -> None:
        write_template("pom.xml.tpl", "<artifactId>{{ config.project_name }}</artifactId>\n")
        write_template(
            "java/entity/Entity.java.tpl",
            '@@Meta.Output="src/{{ class_name }}.java"\nclass {{ class_name }} {}\n',
        )
        write_template("notes.txt", "not a template\n")

        descriptors = discover_templates(template_dir)
        by_name: Dict[str, object] = {d.source_path.name: d for d in descriptors}

        assert set(by_name) == {"pom.xml.tpl", "Entity.java.tpl"}
        pom = by_name["pom.xml.tpl"]
        assert pom.output_path_template == "pom.xml"
        assert pom.is_per_table is False
        entity = by_name["Entity.java.tpl"]
        assert entity.output_path_template == "src/{{ class_name }}.java"
        assert entity.is_per_table is True

    def test_lexical_order(self, template_dir: pathlib.Path, write_template: WriteTemplate) -> None:
        for name in ("b/z.tpl", "a.tpl", "b/a.tpl", "c.tpl", "a/y.tpl"):
            write_template(name, "x\n")
        relative = [
            d.source_path.relative_to(template_dir).as_posix() for d in discover_templates(template_dir)
        ]
        assert relative == ["a.tpl", "c.tpl", "a/y.tpl", "b/a.tpl", "b/z.tpl"]

    def test_custom_suffix(self, template_dir: pathlib.Path, write_template: WriteTemplate) -> None:
        write_template("a.j2", "x\n")
        write_template("b.tpl", "y\n")
        descriptors = discover_templates(template_dir, suffix=".j2")
        assert [d.output_path_template for d in descriptors] == ["a"]

    def test_empty_root(self, template_dir: pathlib.Path) -> None:
        assert discover_templates(template_dir) == []

    def test_missing_root(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(TemplateDiscoveryError, match="not a directory"):
            discover_templates(tmp_path / "missing")

    def test_malformed_directive_aborts(self, template_dir: pathlib.Path, write_template: WriteTemplate) -> None:
        write_template("bad.tpl", '@@Meta.Output=""\n')
        with pytest.raises(TemplateDiscoveryError) as info:
            discover_templates(template_dir)
        assert info.value.template_path.endswith("bad.tpl")

    def test_syntax_error_aborts(self, template_dir: pathlib.Path, write_template: WriteTemplate) -> None:
        write_template("bad.tpl", "{% for x in table.fields %}\n")
        with pytest.raises(TemplateDiscoveryError, match="syntax error"):
            discover_templates(template_dir)

    def test_undecodable_file(self, template_dir: pathlib.Path) -> None:
        (template_dir / "binary.tpl").write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(TemplateDiscoveryError, match="cannot read"):
            discover_templates(template_dir)


class TestBundledTemplates:
    def test_bundled_set(self) -> None:
        descriptors = discover_templates(DEFAULT_TEMPLATE_ROOT)
        per_table = sorted(d.source_path.name for d in descriptors if d.is_per_table)
        global_ = sorted(d.source_path.name for d in descriptors if not d.is_per_table)

        assert per_table == [
            "Controller.java.tpl",
            "Entity.java.tpl",
            "IService.java.tpl",
            "Mapper.java.tpl",
            "Mapper.xml.tpl",
            "ServiceImpl.java.tpl",
        ]
        assert global_ == [
            "Application.java.tpl",
            "README.md.tpl",
            "application.yml.tpl",
            "pom.xml.tpl",
        ]
