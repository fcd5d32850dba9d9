"""Loading and validation of a template's ``scaffold.yaml``.

The loader parses the YAML with PyYAML, validates it into
:class:`~scaffoldkit.scaffolder.models.ScaffoldYaml`, and caches the result
per template directory in an explicit :class:`ScaffoldConfigCache` owned by
the caller.  It also runs the pre-flight template check, which is fail-closed:
any problem is reported before a single file is written.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from scaffoldkit.config import DEFAULT_TEMPLATE_SUFFIX, SCAFFOLD_CONFIG_FILE
from scaffoldkit.utils import print_warning

from .filesystem import FileSystemService
from .includes import parse_include_entry, should_include_file
from .models import ParsedInclude, ScaffoldYaml, TemplateValidationResult
from .templates import TemplateRenderer


class ScaffoldConfigError(Exception):
    """Raised when ``scaffold.yaml`` cannot be parsed or fails validation."""


class ScaffoldConfigCache:
    """Parsed configurations keyed by resolved template directory."""

    def __init__(self) -> None:
        self._entries: dict[Path, ScaffoldYaml] = {}

    def get(self, template_path: str | Path) -> ScaffoldYaml | None:
        return self._entries.get(Path(template_path).resolve())

    def put(self, template_path: str | Path, config: ScaffoldYaml) -> None:
        self._entries[Path(template_path).resolve()] = config

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ScaffoldConfigLoader:
    """Reads scaffold entries and validates template directories."""

    def __init__(
        self,
        file_system: FileSystemService,
        renderer: TemplateRenderer,
        cache: Optional[ScaffoldConfigCache] = None,
        template_suffix: str = DEFAULT_TEMPLATE_SUFFIX,
    ) -> None:
        self.file_system = file_system
        self.renderer = renderer
        self.cache = cache if cache is not None else ScaffoldConfigCache()
        self.template_suffix = template_suffix

    # -- Loading -----------------------------------------------------------

    async def load(self, template_path: str | Path) -> ScaffoldYaml | None:
        """Return the validated ``scaffold.yaml`` of *template_path*.

        Returns ``None`` when the file does not exist.

        Raises:
            ScaffoldConfigError: If the YAML is malformed or fails validation.
        """
        cached = self.cache.get(template_path)
        if cached is not None:
            return cached

        config_path = Path(template_path) / SCAFFOLD_CONFIG_FILE
        if not await self.file_system.path_exists(config_path):
            return None

        try:
            content = await self.file_system.read_file(config_path)
            raw = yaml.safe_load(content)
            config = ScaffoldYaml.from_raw(raw)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ScaffoldConfigError(f"{SCAFFOLD_CONFIG_FILE} validation failed: {details}") from exc
        except (yaml.YAMLError, ValueError, OSError) as exc:
            raise ScaffoldConfigError(f"Failed to parse {SCAFFOLD_CONFIG_FILE}: {exc}") from exc

        self.cache.put(template_path, config)
        return config

    # -- Directives --------------------------------------------------------

    def parse_include_entry(self, raw: str, variables: Mapping[str, Any]) -> ParsedInclude:
        return parse_include_entry(raw, variables, self.renderer)

    def should_include_file(
        self,
        conditions: Optional[Mapping[str, str]],
        variables: Mapping[str, Any],
    ) -> bool:
        return should_include_file(conditions, variables)

    def replace_variables_in_path(self, path: str, variables: Mapping[str, Any]) -> str:
        return self.renderer.render_string(path, dict(variables))

    # -- Validation --------------------------------------------------------

    async def validate_template(
        self,
        template_path: str | Path,
        scaffold_type: str,
        entry_name: Optional[str] = None,
    ) -> TemplateValidationResult:
        """Check that a template can be applied without touching the target.

        Verifies the template directory, its ``scaffold.yaml``, the requested
        section and entry, and that every include source exists either
        literally or with the template suffix appended.
        """
        template_path = Path(template_path)
        errors: list[str] = []
        missing_files: list[str] = []

        if not await self.file_system.path_exists(template_path):
            errors.append(f"Template directory {template_path} does not exist")
            return TemplateValidationResult(is_valid=False, errors=errors)

        try:
            config = await self.load(template_path)
        except ScaffoldConfigError as exc:
            errors.append(str(exc))
            return TemplateValidationResult(is_valid=False, errors=errors)

        if config is None:
            errors.append(f"{SCAFFOLD_CONFIG_FILE} not found in template directory")
            return TemplateValidationResult(is_valid=False, errors=errors)

        entries = config.entries(scaffold_type)
        if not entries:
            available = ", ".join(config.section_names()) or "none"
            errors.append(
                f"Scaffold type '{scaffold_type}' not found in {SCAFFOLD_CONFIG_FILE}. "
                f"Available types: {available}"
            )
            return TemplateValidationResult(is_valid=False, errors=errors)

        if entry_name is not None:
            entry = config.find(scaffold_type, entry_name)
            if entry is None:
                available = ", ".join(e.name for e in entries)
                errors.append(
                    f"'{entry_name}' not found in '{scaffold_type}'. Available: {available}"
                )
                return TemplateValidationResult(is_valid=False, errors=errors)
            entries = [entry]

        for entry in entries:
            for include in entry.includes:
                parsed = self.parse_include_entry(include, {})
                if not await self.source_exists(template_path, parsed.source_path):
                    # Report the original directive so the author can find it
                    missing_files.append(include)

        return TemplateValidationResult(
            is_valid=not errors and not missing_files,
            errors=errors,
            missing_files=missing_files,
        )

    async def source_exists(self, template_path: Path, source_path: str) -> bool:
        source = template_path / source_path
        if await self.file_system.path_exists(source):
            return True
        return await self.file_system.path_exists(f"{source}{self.template_suffix}")


# ---------------------------------------------------------------------------
# Template discovery
# ---------------------------------------------------------------------------

_SKIPPED_DIRS = {"node_modules"}


def discover_template_dirs(templates_root: str | Path) -> list[str]:
    """Return template directories (relative to *templates_root*) holding a ``scaffold.yaml``.

    Both flat (``templates/nextjs``) and nested (``templates/apps/nextjs``)
    layouts are found.  Hidden directories and ``node_modules`` are skipped,
    and the search does not descend into a template once one is found.
    """
    root = Path(templates_root)
    found: list[str] = []

    def _walk(directory: Path) -> None:
        try:
            children = sorted(p for p in directory.iterdir() if p.is_dir())
        except OSError as exc:
            print_warning(f"Failed to read templates directory {directory}: {exc}")
            return
        for child in children:
            if child.name.startswith(".") or child.name in _SKIPPED_DIRS:
                continue
            if (child / SCAFFOLD_CONFIG_FILE).is_file():
                found.append(child.relative_to(root).as_posix())
            else:
                _walk(child)

    if root.is_dir():
        _walk(root)
    return found
