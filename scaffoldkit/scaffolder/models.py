"""Pydantic v2 models for the scaffolding engine.

Defines the validated shape of ``scaffold.yaml`` (scaffold entries and their
variable schemas), the per-directive parse result, the operation options and
the result record returned by every scaffold operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from .config_loader import ScaffoldConfigLoader
    from .filesystem import FileSystemService
    from .processing import ScaffoldProcessor
    from .replacement import VariableReplacer
    from .templates import TemplateRenderer


# ---------------------------------------------------------------------------
# scaffold.yaml
# ---------------------------------------------------------------------------

class VariablesSchema(BaseModel):
    """JSON-schema-like description of the variables an entry accepts."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["object"] = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    additional_properties: bool = Field(default=False, alias="additionalProperties")


class ScaffoldEntry(BaseModel):
    """One boilerplate or feature definition inside ``scaffold.yaml``."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Entry name, unique within its section")
    description: Optional[str] = Field(default=None, description="What the entry scaffolds")
    instruction: Optional[str] = Field(
        default=None, description="Follow-up instruction text, may contain placeholders"
    )
    target_folder: Optional[str] = Field(
        default=None, alias="targetFolder", description="Where boilerplates land"
    )
    variables_schema: VariablesSchema = Field(default_factory=VariablesSchema)
    includes: list[str] = Field(default_factory=list, description="Include directives")
    generator: Optional[str] = Field(default=None, description="Custom generator module")
    patterns: Optional[list[str]] = Field(default=None)


EntryOrList = Union[ScaffoldEntry, list[ScaffoldEntry]]


class ScaffoldYaml(BaseModel):
    """The complete ``scaffold.yaml`` of one template directory.

    ``boilerplate`` and ``features`` are the well-known sections; any other
    top-level key must also hold an entry or a list of entries.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    boilerplate: Optional[EntryOrList] = None
    features: Optional[EntryOrList] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ScaffoldYaml":
        """Validate a raw YAML payload, including the extra sections."""
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError("scaffold.yaml must contain a mapping at the top level")
        sections = {}
        for key, value in raw.items():
            if key in ("boilerplate", "features"):
                sections[key] = value
                continue
            if isinstance(value, list):
                sections[key] = [ScaffoldEntry.model_validate(v) for v in value]
            else:
                sections[key] = ScaffoldEntry.model_validate(value)
        return cls.model_validate(sections)

    def section_names(self) -> list[str]:
        names = [n for n in ("boilerplate", "features") if getattr(self, n) is not None]
        names.extend((self.model_extra or {}).keys())
        return names

    def entries(self, section: str) -> list[ScaffoldEntry]:
        """Return *section* normalised to a list (empty when absent)."""
        if section in ("boilerplate", "features"):
            value = getattr(self, section)
        else:
            value = (self.model_extra or {}).get(section)
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return [value]

    def find(self, section: str, name: str | None = None) -> ScaffoldEntry | None:
        """Return the entry called *name* in *section*.

        When *name* is ``None`` and the section holds a single (non-list)
        entry, that entry is returned.
        """
        entries = self.entries(section)
        if name is None:
            return entries[0] if len(entries) == 1 else None
        for entry in entries:
            if entry.name == name:
                return entry
        return None


# ---------------------------------------------------------------------------
# Include directives
# ---------------------------------------------------------------------------

class ParsedInclude(BaseModel):
    """A single include directive after parsing.

    ``source_path`` is the literal template path (never rendered);
    ``target_path`` has already been rendered with the operation's variables;
    ``warnings`` is non-empty when that render fell back to the literal text.
    """
    source_path: str
    target_path: str
    conditions: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class ScaffoldResult(BaseModel):
    """Outcome of a scaffold operation."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    warnings: list[str] = Field(default_factory=list)
    created_files: list[str] = Field(default_factory=list, alias="createdFiles")
    existing_files: list[str] = Field(default_factory=list, alias="existingFiles")

    @classmethod
    def failure(cls, message: str, warnings: list[str] | None = None) -> "ScaffoldResult":
        return cls(success=False, message=message, warnings=warnings or [])

    def to_wire(self) -> dict[str, Any]:
        """Camel-cased dict with empty lists omitted."""
        data: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.warnings:
            data["warnings"] = list(self.warnings)
        if self.created_files:
            data["createdFiles"] = list(self.created_files)
        if self.existing_files:
            data["existingFiles"] = list(self.existing_files)
        return data


class TemplateValidationResult(BaseModel):
    """Result of the pre-flight template check."""
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    missing_files: list[str] = Field(default_factory=list)

    def describe(self) -> str:
        """Join errors and missing files into one human-readable line."""
        parts = list(self.errors)
        parts.extend(f"Template file not found: {f}" for f in self.missing_files)
        return "; ".join(parts)


# ---------------------------------------------------------------------------
# Operation options
# ---------------------------------------------------------------------------

class BoilerplateOptions(BaseModel):
    """Arguments for scaffolding a brand-new project."""
    project_name: str = Field(..., min_length=1, description="Folder created under target_folder")
    package_name: str = Field(..., min_length=1)
    target_folder: str = Field(..., min_length=1)
    template_folder: str = Field(..., min_length=1, description="Relative to the templates root")
    boilerplate_name: str = Field(..., min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)

    @field_validator("project_name")
    @classmethod
    def _no_path_separators(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            raise ValueError("project_name must be a single folder name")
        return value


class FeatureOptions(BaseModel):
    """Arguments for scaffolding a feature into an existing project."""
    project_path: str = Field(..., min_length=1)
    template_folder: str = Field(..., min_length=1)
    feature_name: str = Field(..., min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Generator context
# ---------------------------------------------------------------------------

@dataclass
class GeneratorContext:
    """Everything a custom generator receives.

    The service handles let a generator reuse the engine's own primitives
    (directive parsing, rendering, copy-and-track) instead of importing them.
    """
    variables: dict[str, Any]
    config: ScaffoldEntry
    target_path: Path
    template_path: Path
    file_system: "FileSystemService"
    config_loader: "ScaffoldConfigLoader"
    variable_replacer: "VariableReplacer"
    renderer: "TemplateRenderer"
    processor: "ScaffoldProcessor"
