"""Copy-render-track step shared by every scaffold operation.

``ScaffoldProcessor`` applies one resolved include: it never overwrites an
existing destination, falls back to the ``.j2``-suffixed source when the
literal one is absent, renders what it copied, and records every resulting
file (directories are expanded file by file).
"""

from __future__ import annotations

import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from scaffoldkit.config import DEFAULT_TEMPLATE_SUFFIX
from scaffoldkit.utils import print_warning

from .filesystem import FileSystemService
from .replacement import VariableReplacer


@dataclass
class FileTracker:
    """Ordered record of destinations created or preserved by one operation."""
    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ScaffoldProcessor:
    """Applies resolved includes to a destination tree."""

    def __init__(
        self,
        file_system: FileSystemService,
        variable_replacer: VariableReplacer,
        template_suffix: str = DEFAULT_TEMPLATE_SUFFIX,
    ) -> None:
        self.file_system = file_system
        self.variable_replacer = variable_replacer
        self.template_suffix = template_suffix

    async def resolve_source(self, source_path: str | Path) -> Path:
        """Return the literal source, or its suffixed template variant.

        Raises:
            FileNotFoundError: If neither exists.
        """
        source = Path(source_path)
        if await self.file_system.path_exists(source):
            return source
        suffixed = Path(f"{source}{self.template_suffix}")
        if await self.file_system.path_exists(suffixed):
            return suffixed
        raise FileNotFoundError(f"Source file not found: {source} (also tried {suffixed})")

    async def copy_and_process(
        self,
        source_path: str | Path,
        target_path: str | Path,
        variables: Mapping[str, Any],
        tracker: FileTracker,
    ) -> bool:
        """Copy *source_path* to *target_path*, render it and track the files.

        Returns:
            ``True`` if the destination was created, ``False`` if it already
            existed and was preserved untouched.
        """
        target = Path(target_path)
        await self.file_system.ensure_dir(target.parent)

        if await self.file_system.path_exists(target):
            await self.track_files(target, tracker.existing)
            return False

        source = await self.resolve_source(source_path)
        await self.file_system.copy(source, target)
        tracker.warnings.extend(await self.process_target(target, variables))
        await self.track_files(target, tracker.created)
        return True

    async def process_target(self, target_path: str | Path, variables: Mapping[str, Any]) -> list[str]:
        """Render a copied file, or every file of a copied directory."""
        if await self.file_system.is_dir(target_path):
            return await self.variable_replacer.replace_in_tree(target_path, variables)
        return await self.variable_replacer.replace_in_file(target_path, variables)

    async def track_files(self, target_path: str | Path, files: list[str]) -> None:
        """Append *target_path* to *files*, expanding directories recursively."""
        if await self.file_system.is_dir(target_path):
            await self._track_recursive(Path(target_path), files)
        else:
            files.append(str(target_path))

    async def _track_recursive(self, dir_path: Path, files: list[str]) -> None:
        try:
            names = await self.file_system.readdir(dir_path)
        except OSError as exc:
            print_warning(f"Cannot read directory {dir_path}: {exc}")
            return

        for name in names:
            item = dir_path / name
            try:
                mode = (await self.file_system.stat(item)).st_mode
            except OSError as exc:
                print_warning(f"Cannot stat {item}: {exc}")
                continue

            if stat.S_ISDIR(mode):
                await self._track_recursive(item, files)
            elif stat.S_ISREG(mode):
                files.append(str(item))
