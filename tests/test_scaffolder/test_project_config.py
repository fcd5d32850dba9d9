"""Tests for source-template resolution and recording."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scaffoldkit.scaffolder.project_config import (
    ProjectConfigError,
    record_source_template,
    resolve_project_config,
    resolve_source_template,
)


pytestmark = pytest.mark.unit


class TestResolveProjectConfig:
    def test_project_json(self, tmp_path: Path):
        (tmp_path / "project.json").write_text(
            json.dumps({"name": "web", "sourceTemplate": "nextjs"}), encoding="utf-8"
        )

        config = resolve_project_config(tmp_path)

        assert config.source_template == "nextjs"
        assert config.config_source == "project.json"

    def test_toolkit_yaml(self, tmp_path: Path):
        (tmp_path / "toolkit.yaml").write_text("sourceTemplate: vite\n", encoding="utf-8")

        config = resolve_project_config(tmp_path)

        assert config.source_template == "vite"
        assert config.config_source == "toolkit.yaml"

    def test_project_json_wins(self, tmp_path: Path):
        (tmp_path / "project.json").write_text('{"sourceTemplate": "a"}', encoding="utf-8")
        (tmp_path / "toolkit.yaml").write_text("sourceTemplate: b\n", encoding="utf-8")

        assert resolve_source_template(tmp_path) == "a"

    def test_project_json_without_source_falls_through(self, tmp_path: Path):
        (tmp_path / "project.json").write_text('{"name": "web"}', encoding="utf-8")
        (tmp_path / "toolkit.yaml").write_text("sourceTemplate: b\n", encoding="utf-8")

        assert resolve_source_template(tmp_path) == "b"

    def test_nothing_found(self, tmp_path: Path):
        with pytest.raises(ProjectConfigError) as exc_info:
            resolve_project_config(tmp_path)

        assert "sourceTemplate: your-template-name" in str(exc_info.value)

    def test_invalid_project_json(self, tmp_path: Path):
        (tmp_path / "project.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ProjectConfigError, match="Failed to read"):
            resolve_project_config(tmp_path)


class TestRecordSourceTemplate:
    async def test_creates_minimal_project_json(self, tmp_path: Path):
        (tmp_path / "apps" / "web").mkdir(parents=True)

        path = await record_source_template(tmp_path / "apps", "web", "nextjs")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["name"] == "web"
        assert data["projectType"] == "application"
        assert data["sourceTemplate"] == "nextjs"

    async def test_updates_existing_project_json(self, tmp_path: Path):
        project = tmp_path / "apps" / "web"
        project.mkdir(parents=True)
        (project / "project.json").write_text(
            json.dumps({"name": "custom", "targets": {"build": {}}}), encoding="utf-8"
        )

        await record_source_template(tmp_path / "apps", "web", "nextjs")

        data = json.loads((project / "project.json").read_text(encoding="utf-8"))
        assert data == {"name": "custom", "targets": {"build": {}}, "sourceTemplate": "nextjs"}

    async def test_output_is_pretty_printed(self, tmp_path: Path):
        path = await record_source_template(tmp_path, "web", "nextjs")

        content = path.read_text(encoding="utf-8")
        assert content.endswith("}\n")
        assert '\n  "sourceTemplate": "nextjs"' in content
