"""scaffoldkit configuration.

Typed settings for the scaffolding engine plus discovery of the templates
root directory.  Settings use a Pydantic v2 model so they can be validated at
construction time and built from environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from scaffoldkit.utils import load_yaml

TEMPLATES_FOLDER = "templates"
TOOLKIT_CONFIG_FILE = "toolkit.yaml"
SCAFFOLD_CONFIG_FILE = "scaffold.yaml"
DEFAULT_TEMPLATE_SUFFIX = ".j2"


class TemplatesNotFoundError(Exception):
    """Raised when no templates root directory can be located."""


class Settings(BaseModel):
    """Global scaffoldkit settings.

    Instances are typically created once by the CLI entry point (or by the
    embedding application) and passed to the services that need them.
    """

    templates_path: Optional[Path] = Field(
        default=None,
        description="Explicit templates root; discovered from the workspace when unset",
    )
    template_suffix: str = Field(
        default=DEFAULT_TEMPLATE_SUFFIX,
        min_length=1,
        description="Marker suffix identifying template source files",
    )
    install_command: str = Field(
        default="pnpm install",
        description="Command suggested to the user after a successful scaffold",
    )
    verbose: bool = Field(default=False, description="Print debug output")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SCAFFOLD_TEMPLATES_PATH, SCAFFOLD_TEMPLATE_SUFFIX,
            SCAFFOLD_INSTALL_COMMAND, SCAFFOLD_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SCAFFOLD_TEMPLATES_PATH"):
            kwargs["templates_path"] = Path(os.environ["SCAFFOLD_TEMPLATES_PATH"])
        if os.environ.get("SCAFFOLD_TEMPLATE_SUFFIX"):
            kwargs["template_suffix"] = os.environ["SCAFFOLD_TEMPLATE_SUFFIX"]
        if os.environ.get("SCAFFOLD_INSTALL_COMMAND"):
            kwargs["install_command"] = os.environ["SCAFFOLD_INSTALL_COMMAND"]
        verbose = os.environ.get("SCAFFOLD_VERBOSE", "")
        kwargs["verbose"] = verbose.lower() in ("1", "true", "yes")
        return cls(**kwargs)

    def resolve_templates_path(self, start: str | Path | None = None) -> Path:
        """Return the explicit templates path, or discover one from *start*."""
        if self.templates_path is not None:
            path = Path(self.templates_path).resolve()
            if not path.is_dir():
                raise TemplatesNotFoundError(f"Templates path does not exist: {path}")
            return path
        return find_templates_path(start)


# ---------------------------------------------------------------------------
# Templates root discovery
# ---------------------------------------------------------------------------


def find_workspace_root(start: str | Path | None = None) -> Path:
    """Walk upwards from *start* to the first directory containing ``.git``.

    Falls back to the filesystem root when no repository is found.
    """
    current = Path(start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return Path(current.anchor)


def read_toolkit_config(workspace_root: Path) -> dict[str, Any] | None:
    """Read ``toolkit.yaml`` at the workspace root, if present."""
    config_path = workspace_root / TOOLKIT_CONFIG_FILE
    if not config_path.is_file():
        return None
    data = load_yaml(config_path)
    return data if isinstance(data, dict) else None


def find_templates_path(start: str | Path | None = None) -> Path:
    """Locate the templates root directory.

    1. Find the workspace root (nearest ``.git`` above *start*).
    2. If ``toolkit.yaml`` there declares ``templatesPath``, use it (relative
       paths resolve against the workspace root); it must exist.
    3. Otherwise use ``<workspace>/templates``.

    Raises:
        TemplatesNotFoundError: If the resolved directory does not exist.
    """
    workspace_root = find_workspace_root(start)
    toolkit = read_toolkit_config(workspace_root)

    if toolkit and toolkit.get("templatesPath"):
        configured = Path(toolkit["templatesPath"])
        templates_path = configured if configured.is_absolute() else workspace_root / configured
        if not templates_path.is_dir():
            raise TemplatesNotFoundError(
                f"Templates path specified in {TOOLKIT_CONFIG_FILE} does not exist: "
                f"{templates_path}"
            )
        return templates_path

    templates_path = workspace_root / TEMPLATES_FOLDER
    if templates_path.is_dir():
        return templates_path

    raise TemplatesNotFoundError(
        f"Templates folder not found at {templates_path}.\n"
        f"Either create a '{TEMPLATES_FOLDER}' folder or specify templatesPath "
        f"in {TOOLKIT_CONFIG_FILE}"
    )
