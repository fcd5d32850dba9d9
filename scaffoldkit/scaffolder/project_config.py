"""Resolve which template a scaffolded project came from.

Projects record their source template either in ``project.json`` (one
project inside a monorepo) or in ``toolkit.yaml`` (a single-project
workspace).  ``project.json`` wins when both exist.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel

from scaffoldkit.config import TOOLKIT_CONFIG_FILE
from scaffoldkit.utils import load_json, load_yaml, save_json

PROJECT_JSON = "project.json"


class ProjectConfigError(Exception):
    """Raised when a project's source template cannot be determined."""


class ProjectConfig(BaseModel):
    source_template: str
    config_source: Literal["project.json", "toolkit.yaml"]


def resolve_project_config(project_path: str | Path) -> ProjectConfig:
    """Return the source template recorded for *project_path*.

    Raises:
        ProjectConfigError: If neither ``project.json`` nor ``toolkit.yaml``
            names a ``sourceTemplate``, or a config file is unreadable.
    """
    root = Path(project_path).resolve()

    project_json = root / PROJECT_JSON
    if project_json.is_file():
        try:
            data = load_json(project_json)
        except (OSError, ValueError) as exc:
            raise ProjectConfigError(f"Failed to read {project_json}: {exc}") from exc
        if data.get("sourceTemplate"):
            return ProjectConfig(source_template=data["sourceTemplate"], config_source=PROJECT_JSON)

    toolkit = root / TOOLKIT_CONFIG_FILE
    if toolkit.is_file():
        try:
            data = load_yaml(toolkit) or {}
        except Exception as exc:
            raise ProjectConfigError(f"Failed to read {toolkit}: {exc}") from exc
        if isinstance(data, dict) and data.get("sourceTemplate"):
            return ProjectConfig(
                source_template=data["sourceTemplate"], config_source=TOOLKIT_CONFIG_FILE
            )

    raise ProjectConfigError(
        f"No project configuration found at {root}.\n\n"
        f"For monorepo projects, ensure {PROJECT_JSON} exists with a sourceTemplate field.\n"
        f"For single-project workspaces, create {TOOLKIT_CONFIG_FILE}:\n\n"
        "    sourceTemplate: your-template-name\n"
    )


async def record_source_template(
    target_folder: str | Path,
    project_name: str,
    source_template: str,
) -> Path:
    """Write ``sourceTemplate`` into the project's ``project.json``.

    An existing ``project.json`` is updated in place; otherwise a minimal one
    is created.
    """
    project_json = Path(target_folder) / project_name / PROJECT_JSON
    data: dict[str, Any]
    if project_json.is_file():
        data = load_json(project_json)
    else:
        data = {
            "name": project_name,
            "sourceRoot": f"{target_folder}/{project_name}",
            "projectType": "application",
        }
    data["sourceTemplate"] = source_template
    await save_json(data, project_json)
    return project_json


def resolve_source_template(project_path: str | Path) -> str:
    """Shortcut for ``resolve_project_config(project_path).source_template``."""
    return resolve_project_config(project_path).source_template
