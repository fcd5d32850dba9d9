"""Scaffold orchestrator.

``ScaffoldService`` applies one scaffold entry of a template to a target
directory, either as a brand-new project (boilerplate mode) or into an
existing one (feature mode).  Both modes share :meth:`_process_scaffold`:

1. delegate to the entry's custom generator, if it declares one;
2. otherwise walk the include directives in order, skipping excluded ones,
   preserving destinations that already exist, and copying + rendering the
   rest.

Pre-flight checks are fail-closed (nothing is written when they fail);
per-file problems during rendering are fail-open warnings.  Every public
method returns a :class:`ScaffoldResult` instead of raising.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from scaffoldkit.config import Settings
from scaffoldkit.utils import print_debug, print_warning

from .config_loader import ScaffoldConfigCache, ScaffoldConfigLoader
from .filesystem import FileSystemService
from .generators import load_generator, run_generator
from .models import (
    BoilerplateOptions,
    FeatureOptions,
    GeneratorContext,
    ScaffoldEntry,
    ScaffoldResult,
)
from .processing import FileTracker, ScaffoldProcessor
from .replacement import VariableReplacer
from .templates import TemplateRenderer

ScaffoldType = Literal["boilerplate", "feature"]

_SECTIONS: dict[str, str] = {
    "boilerplate": "boilerplate",
    "feature": "features",
}


class ScaffoldService:
    """Applies boilerplate and feature entries from a templates root."""

    def __init__(
        self,
        file_system: FileSystemService,
        config_loader: ScaffoldConfigLoader,
        variable_replacer: VariableReplacer,
        templates_root: str | Path,
        settings: Optional[Settings] = None,
    ) -> None:
        self.file_system = file_system
        self.config_loader = config_loader
        self.variable_replacer = variable_replacer
        self.templates_root = Path(templates_root)
        self.settings = settings or Settings()
        self.processor = ScaffoldProcessor(
            file_system, variable_replacer, self.settings.template_suffix
        )

    # -- Public API --------------------------------------------------------

    async def use_boilerplate(self, options: BoilerplateOptions) -> ScaffoldResult:
        """Scaffold a new project; the target directory must not exist yet."""
        try:
            target_folder = Path(options.target_folder)
            if not target_folder.is_absolute():
                target_folder = Path.cwd() / target_folder
            target_path = target_folder / options.project_name
            template_path = self.templates_root / options.template_folder

            validation = await self.config_loader.validate_template(
                template_path, _SECTIONS["boilerplate"], options.boilerplate_name
            )
            if not validation.is_valid:
                return ScaffoldResult.failure(
                    f"Template validation failed: {validation.describe()}"
                )

            if await self.file_system.path_exists(target_path):
                return ScaffoldResult.failure(f"Directory {target_path} already exists")

            entry = await self._find_entry(template_path, "boilerplate", options.boilerplate_name)
            if isinstance(entry, ScaffoldResult):
                return entry

            all_variables: dict[str, Any] = {
                **options.variables,
                "projectName": options.project_name,
                "packageName": options.package_name,
            }
            return await self._process_scaffold(
                entry, target_path, template_path, all_variables, "boilerplate"
            )
        except Exception as exc:
            return ScaffoldResult.failure(f"Error scaffolding boilerplate: {exc}")

    async def use_feature(self, options: FeatureOptions) -> ScaffoldResult:
        """Scaffold a feature into an existing project directory."""
        try:
            target_path = Path(options.project_path).resolve()
            template_path = self.templates_root / options.template_folder
            project_name = target_path.name

            validation = await self.config_loader.validate_template(
                template_path, _SECTIONS["feature"], options.feature_name
            )
            if not validation.is_valid:
                return ScaffoldResult.failure(
                    f"Template validation failed: {validation.describe()}"
                )

            if not await self.file_system.path_exists(target_path):
                return ScaffoldResult.failure(
                    f"Target directory {target_path} does not exist. "
                    "Please create the parent directory first."
                )

            entry = await self._find_entry(template_path, "feature", options.feature_name)
            if isinstance(entry, ScaffoldResult):
                return entry

            all_variables: dict[str, Any] = {
                **options.variables,
                "projectName": project_name,
                "appPath": str(target_path),
                "appName": project_name,
            }
            return await self._process_scaffold(
                entry, target_path, template_path, all_variables, "feature"
            )
        except Exception as exc:
            return ScaffoldResult.failure(f"Error scaffolding feature: {exc}")

    # -- Shared processing -------------------------------------------------

    async def _find_entry(
        self, template_path: Path, scaffold_type: ScaffoldType, name: str
    ) -> ScaffoldEntry | ScaffoldResult:
        section = _SECTIONS[scaffold_type]
        config = await self.config_loader.load(template_path)
        if config is None or not config.entries(section):
            return ScaffoldResult.failure(
                f"Invalid scaffold configuration: missing '{section}' section in scaffold.yaml"
            )
        entry = config.find(section, name)
        if entry is None:
            label = "Boilerplate" if scaffold_type == "boilerplate" else "Feature"
            return ScaffoldResult.failure(f"{label} '{name}' not found in scaffold configuration")
        return entry

    async def _process_scaffold(
        self,
        entry: ScaffoldEntry,
        target_path: Path,
        template_path: Path,
        variables: dict[str, Any],
        scaffold_type: ScaffoldType,
    ) -> ScaffoldResult:
        if entry.generator:
            return await self._run_generator(entry, target_path, template_path, variables)

        await self.file_system.ensure_dir(target_path)
        tracker = FileTracker()

        for include in entry.includes:
            parsed = self.config_loader.parse_include_entry(include, variables)
            if not self.config_loader.should_include_file(parsed.conditions, variables):
                print_debug(f"Skipping '{include}': conditions not met")
                continue
            tracker.warnings.extend(parsed.warnings)

            created = await self.processor.copy_and_process(
                template_path / parsed.source_path,
                target_path / parsed.target_path,
                variables,
                tracker,
            )
            if not created:
                message = f"File/folder {parsed.target_path} already exists and will be preserved"
                print_warning(message)
                tracker.warnings.append(message)

        message = f"Successfully scaffolded {scaffold_type} at {target_path}"
        if tracker.existing:
            message += f". {len(tracker.existing)} existing file(s) were preserved"
        message += f". Run '{self.settings.install_command}' to install dependencies."

        return ScaffoldResult(
            success=True,
            message=message,
            warnings=tracker.warnings,
            created_files=tracker.created,
            existing_files=tracker.existing,
        )

    async def _run_generator(
        self,
        entry: ScaffoldEntry,
        target_path: Path,
        template_path: Path,
        variables: dict[str, Any],
    ) -> ScaffoldResult:
        generator_name = entry.generator or ""
        print_debug(f"Using custom generator: {generator_name}")
        try:
            func = load_generator(template_path, generator_name)
        except Exception as exc:
            return ScaffoldResult.failure(f"Error loading generator {generator_name}: {exc}")

        context = GeneratorContext(
            variables=variables,
            config=entry,
            target_path=target_path,
            template_path=template_path,
            file_system=self.file_system,
            config_loader=self.config_loader,
            variable_replacer=self.variable_replacer,
            renderer=self.config_loader.renderer,
            processor=self.processor,
        )
        try:
            return await run_generator(func, context)
        except Exception as exc:
            return ScaffoldResult.failure(
                f"Error loading or executing generator {generator_name}: {exc}"
            )


def build_scaffold_service(
    templates_root: str | Path,
    settings: Optional[Settings] = None,
) -> ScaffoldService:
    """Wire a ``ScaffoldService`` with its default collaborators."""
    settings = settings or Settings()
    file_system = FileSystemService()
    renderer = TemplateRenderer()
    config_loader = ScaffoldConfigLoader(
        file_system, renderer, ScaffoldConfigCache(), settings.template_suffix
    )
    replacer = VariableReplacer(file_system, renderer)
    return ScaffoldService(file_system, config_loader, replacer, templates_root, settings)

