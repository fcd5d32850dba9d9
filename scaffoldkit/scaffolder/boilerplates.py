"""Boilerplate catalogue: discover, describe, validate and apply.

``BoilerplateService`` scans the templates root for ``scaffold.yaml`` files,
lists their boilerplate entries, validates caller variables against each
entry's ``variables_schema`` (applying schema defaults), and hands the
result to :class:`~scaffoldkit.scaffolder.service.ScaffoldService`.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from scaffoldkit.config import Settings
from scaffoldkit.utils import print_warning, strip_package_scope

from .config_loader import ScaffoldConfigError, discover_template_dirs
from .models import BoilerplateOptions, ScaffoldResult, VariablesSchema
from .project_config import record_source_template
from .service import ScaffoldService, build_scaffold_service


class BoilerplateInfo(BaseModel):
    """A boilerplate entry together with the template it lives in."""
    name: str
    description: Optional[str] = None
    instruction: Optional[str] = None
    variables_schema: VariablesSchema = Field(default_factory=VariablesSchema)
    template_path: str = Field(..., description="Template directory relative to the root")
    target_folder: str
    includes: list[str] = Field(default_factory=list)


class ValidationOutcome(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    variables: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Variable schema -> pydantic model
# ---------------------------------------------------------------------------

_JSON_TYPES: dict[str, Any] = {
    "string": str,
    "number": float,
    "integer": int,
    "boolean": bool,
    "array": list,
    "object": dict,
}


def _python_type(prop: dict[str, Any]) -> Any:
    if prop.get("enum"):
        return Literal[tuple(prop["enum"])]
    json_type = prop.get("type")
    if isinstance(json_type, str):
        return _JSON_TYPES.get(json_type, Any)
    return Any


def build_variables_model(schema: VariablesSchema) -> type[BaseModel]:
    """Create a pydantic model that validates variables against *schema*.

    Field names are positional and aliased to the variable names, so names
    that are not Python identifiers (or clash with ``BaseModel`` attributes)
    still validate.
    """
    fields: dict[str, Any] = {}
    for index, (name, raw_prop) in enumerate(schema.properties.items()):
        prop = raw_prop if isinstance(raw_prop, dict) else {}
        py_type = _python_type(prop)
        description = prop.get("description")
        if name in schema.required:
            fields[f"var_{index}"] = (py_type, Field(..., alias=name, description=description))
        else:
            default = prop.get("default")
            fields[f"var_{index}"] = (
                Optional[py_type],
                Field(default=default, alias=name, description=description),
            )

    # Required names without a declared property still have to be present
    offset = len(fields)
    for index, name in enumerate(n for n in schema.required if n not in schema.properties):
        fields[f"var_{offset + index}"] = (Any, Field(..., alias=name))

    extra = "allow" if schema.additional_properties else "forbid"
    return create_model(
        "TemplateVariables",
        __config__=ConfigDict(extra=extra, populate_by_name=False),
        **fields,
    )


# ---------------------------------------------------------------------------
# BoilerplateService
# ---------------------------------------------------------------------------


class BoilerplateService:
    """Lists and applies boilerplates found under a templates root."""

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
        self.renderer = self.config_loader.renderer

    async def list_boilerplates(self) -> list[BoilerplateInfo]:
        """Return every boilerplate (with a ``targetFolder``) under the root."""
        boilerplates: list[BoilerplateInfo] = []
        template_dirs = await asyncio.to_thread(discover_template_dirs, self.templates_root)

        for template_dir in template_dirs:
            try:
                config = await self.config_loader.load(self.templates_root / template_dir)
            except ScaffoldConfigError as exc:
                print_warning(f"Failed to load scaffold.yaml for {template_dir}: {exc}")
                continue
            if config is None:
                continue

            for entry in config.entries("boilerplate"):
                if not entry.target_folder:
                    print_warning(
                        f"Skipping boilerplate '{entry.name}' in {template_dir}: "
                        "targetFolder is required in scaffold.yaml"
                    )
                    continue
                boilerplates.append(
                    BoilerplateInfo(
                        name=entry.name,
                        description=entry.description,
                        instruction=entry.instruction,
                        variables_schema=entry.variables_schema,
                        template_path=template_dir,
                        target_folder=entry.target_folder,
                        includes=list(entry.includes),
                    )
                )

        return boilerplates

    async def get_boilerplate(
        self, name: str, variables: Optional[dict[str, Any]] = None
    ) -> BoilerplateInfo | None:
        """Return boilerplate *name*, with its instruction rendered if *variables* are given."""
        for boilerplate in await self.list_boilerplates():
            if boilerplate.name != name:
                continue
            if variables is not None and boilerplate.instruction:
                return boilerplate.model_copy(
                    update={"instruction": self.process_instruction(boilerplate.instruction, variables)}
                )
            return boilerplate
        return None

    def process_instruction(self, instruction: str, variables: dict[str, Any]) -> str:
        if self.renderer.contains_placeholders(instruction):
            return self.renderer.render_string(instruction, variables)
        return instruction

    @staticmethod
    def validate_variables(
        boilerplate: BoilerplateInfo, variables: dict[str, Any]
    ) -> ValidationOutcome:
        """Validate *variables* against the boilerplate's schema.

        On success the returned variables include schema defaults for any
        optional variable the caller left out.
        """
        model = build_variables_model(boilerplate.variables_schema)
        try:
            instance = model.model_validate(variables)
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}"
                for err in exc.errors()
            ]
            return ValidationOutcome(is_valid=False, errors=errors)

        dumped = instance.model_dump(by_alias=True)
        resolved = dict(variables)
        for name, prop in boilerplate.variables_schema.properties.items():
            if name not in resolved and isinstance(prop, dict) and "default" in prop:
                resolved[name] = dumped.get(name, prop["default"])
        return ValidationOutcome(is_valid=True, variables=resolved)

    async def use_boilerplate(self, name: str, variables: dict[str, Any]) -> ScaffoldResult:
        """Validate variables and scaffold boilerplate *name* as a new project."""
        boilerplates = await self.list_boilerplates()
        boilerplate = next((b for b in boilerplates if b.name == name), None)
        if boilerplate is None:
            available = ", ".join(b.name for b in boilerplates)
            return ScaffoldResult.failure(
                f"Boilerplate '{name}' not found. Available boilerplates: {available}"
            )

        validation = self.validate_variables(boilerplate, variables)
        if not validation.is_valid:
            return ScaffoldResult.failure(f"Validation failed: {', '.join(validation.errors)}")
        resolved = validation.variables

        package_name = resolved.get("packageName") or resolved.get("appName")
        if not package_name:
            return ScaffoldResult.failure("Missing required parameter: packageName or appName")
        folder_name = strip_package_scope(str(package_name))

        options = BoilerplateOptions(
            project_name=folder_name,
            package_name=str(package_name),
            target_folder=boilerplate.target_folder,
            template_folder=boilerplate.template_path,
            boilerplate_name=name,
            variables={
                **resolved,
                "packageName": str(package_name),
                "appName": folder_name,
                "sourceTemplate": boilerplate.template_path,
            },
        )
        result = await self.scaffold_service.use_boilerplate(options)
        if not result.success:
            return result

        try:
            await record_source_template(
                boilerplate.target_folder, folder_name, boilerplate.template_path
            )
        except (OSError, ValueError) as exc:
            message = f"Failed to update project.json with sourceTemplate: {exc}"
            print_warning(message)
            result.warnings.append(message)

        return result
