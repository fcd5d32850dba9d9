"""Feature ("scaffolding method") catalogue for existing projects.

A project remembers the template it was created from (see
:mod:`scaffoldkit.scaffolder.project_config`); the features declared in that
template's ``scaffold.yaml`` are the methods that can be applied to it.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from scaffoldkit.config import Settings
from scaffoldkit.utils import print_debug, print_warning

from .config_loader import ScaffoldConfigError, discover_template_dirs
from .models import FeatureOptions, ScaffoldEntry, ScaffoldResult, VariablesSchema
from .project_config import resolve_source_template
from .service import ScaffoldService, build_scaffold_service


class ScaffoldMethodError(Exception):
    """Raised when a method or its template cannot be found."""


class ScaffoldMethod(BaseModel):
    name: str
    description: Optional[str] = None
    instruction: Optional[str] = None
    variables_schema: VariablesSchema = Field(default_factory=VariablesSchema)
    generator: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: ScaffoldEntry) -> "ScaffoldMethod":
        return cls(
            name=entry.name,
            description=entry.description,
            instruction=entry.instruction,
            variables_schema=entry.variables_schema,
            generator=entry.generator,
        )


class ScaffoldingMethodsService:
    """Lists and applies the features available to a project."""

    def __init__(
        self,
        templates_root: str | Path,
        settings: Optional[Settings] = None,
        scaffold_service: Optional[ScaffoldService] = None,
    ) -> None:
        self.templates_root = Path(templates_root)
        self.settings = settings or Settings()
        self.scaffold_service = scaffold_service or build_scaffold_service(
            self.templates_root, self.settings
        )
        self.config_loader = self.scaffold_service.config_loader

    async def find_template_dir(self, template: str) -> str | None:
        """Map a ``sourceTemplate`` value to a template directory.

        An exact directory match (``nextjs`` or ``apps/nextjs``) wins;
        otherwise the first template whose boilerplate name contains
        *template* is used.
        """
        template_dirs = await asyncio.to_thread(discover_template_dirs, self.templates_root)

        for template_dir in template_dirs:
            if template_dir == template or template_dir.rsplit("/", 1)[-1] == template:
                return template_dir

        for template_dir in template_dirs:
            try:
                config = await self.config_loader.load(self.templates_root / template_dir)
            except ScaffoldConfigError as exc:
                print_warning(f"Failed to load scaffold.yaml for {template_dir}: {exc}")
                continue
            if config is None:
                continue
            if any(template in entry.name for entry in config.entries("boilerplate")):
                return template_dir

        return None

    async def list_methods_by_template(self, template: str) -> list[ScaffoldMethod]:
        """Return the features declared by *template*.

        Raises:
            ScaffoldMethodError: If no template directory matches.
            ScaffoldConfigError: If the template's ``scaffold.yaml`` is invalid.
        """
        template_dir = await self.find_template_dir(template)
        if template_dir is None:
            raise ScaffoldMethodError(
                f"Template not found for sourceTemplate: {template}"
            )
        return await self._load_methods(template_dir)

    async def list_methods(self, project_path: str | Path) -> list[ScaffoldMethod]:
        """Return the features available to the project at *project_path*."""
        source_template = resolve_source_template(project_path)
        return await self.list_methods_by_template(source_template)

    async def use_method(
        self,
        project_path: str | Path,
        feature_name: str,
        variables: dict[str, Any],
    ) -> ScaffoldResult:
        """Apply feature *feature_name* to the project at *project_path*.

        Raises:
            ScaffoldMethodError: If the template or the feature is unknown.
        """
        project_path = Path(project_path).resolve()
        source_template = resolve_source_template(project_path)
        template_dir = await self.find_template_dir(source_template)
        if template_dir is None:
            raise ScaffoldMethodError(
                f"Template not found for sourceTemplate: {source_template}"
            )

        methods = await self._load_methods(template_dir)
        method = next((m for m in methods if m.name == feature_name), None)
        if method is None:
            available = ", ".join(m.name for m in methods) or "none"
            raise ScaffoldMethodError(
                f"Scaffold method '{feature_name}' not found. Available methods: {available}"
            )

        print_debug(f"Applying '{feature_name}' from {template_dir} to {project_path}")
        result = await self.scaffold_service.use_feature(
            FeatureOptions(
                project_path=str(project_path),
                template_folder=template_dir,
                feature_name=feature_name,
                variables=variables,
            )
        )

        if result.success and method.instruction:
            instruction = method.instruction
            renderer = self.config_loader.renderer
            if renderer.contains_placeholders(instruction):
                instruction = renderer.render_string(instruction, variables)
            result.message = f"{result.message}\n\n{instruction}"
        return result

    async def _load_methods(self, template_dir: str) -> list[ScaffoldMethod]:
        config = await self.config_loader.load(self.templates_root / template_dir)
        if config is None:
            return []
        return [ScaffoldMethod.from_entry(e) for e in config.entries("features")]
