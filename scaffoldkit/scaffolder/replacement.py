"""In-place variable rendering for copied files and directory trees.

Template sources often contain files the process cannot (or should not)
rewrite, so every failure here is local: the file or subtree is skipped, a
warning is printed and recorded, and the walk continues.
"""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Any, Mapping

from scaffoldkit.utils import print_warning

from .filesystem import FileSystemService
from .templates import TemplateRenderer

BINARY_EXTENSIONS: frozenset[str] = frozenset({
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".ico",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".pdf",
    ".zip",
    ".tar",
    ".gz",
    ".exe",
    ".dll",
    ".so",
    ".dylib",
})


class VariableReplacer:
    """Renders variables into files that already sit at their destination."""

    def __init__(self, file_system: FileSystemService, renderer: TemplateRenderer) -> None:
        self.file_system = file_system
        self.renderer = renderer

    @staticmethod
    def is_binary_file(path: str | Path) -> bool:
        return Path(path).suffix.lower() in BINARY_EXTENSIONS

    async def replace_in_file(self, path: str | Path, variables: Mapping[str, Any]) -> list[str]:
        """Render *path* in place.

        Binary files, and text files without placeholders, are left
        byte-for-byte untouched.

        Returns:
            Warnings produced while processing the file.
        """
        if self.is_binary_file(path):
            return []

        try:
            content = await self.file_system.read_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            return [_warn(f"Skipping file {path}: {exc}")]

        if not self.renderer.contains_placeholders(content):
            return []

        result = self.renderer.render_with_status(content, dict(variables))
        warnings: list[str] = []
        if result.fallback:
            warnings.append(f"File {path} was left unrendered: {result.error}")

        try:
            await self.file_system.write_file(path, result.content)
        except OSError as exc:
            warnings.append(_warn(f"Skipping file {path}: {exc}"))
        return warnings

    async def replace_in_tree(self, dir_path: str | Path, variables: Mapping[str, Any]) -> list[str]:
        """Render every file below *dir_path*, depth-first in name order."""
        try:
            names = await self.file_system.readdir(dir_path)
        except OSError as exc:
            return [_warn(f"Skipping directory {dir_path}: {exc}")]

        warnings: list[str] = []
        for name in names:
            item = Path(dir_path) / name
            try:
                mode = (await self.file_system.stat(item)).st_mode
            except OSError as exc:
                warnings.append(_warn(f"Skipping item {item}: {exc}"))
                continue

            if stat.S_ISDIR(mode):
                warnings.extend(await self.replace_in_tree(item, variables))
            elif stat.S_ISREG(mode):
                warnings.extend(await self.replace_in_file(item, variables))

        return warnings


def _warn(message: str) -> str:
    print_warning(message)
    return message
