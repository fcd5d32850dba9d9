"""Async filesystem service used by the scaffolding engine.

Every blocking call runs through ``asyncio.to_thread`` so scaffold operations
compose with ``await`` without stalling the event loop.  Errors propagate
unchanged; callers decide which ones are fatal.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path
from typing import Any

from scaffoldkit.utils import load_json


class FileSystemService:
    """Thin async facade over :mod:`pathlib` and :mod:`shutil`."""

    async def path_exists(self, path: str | Path) -> bool:
        return await asyncio.to_thread(os.path.lexists, path)

    async def is_dir(self, path: str | Path) -> bool:
        return await asyncio.to_thread(Path(path).is_dir)

    async def is_file(self, path: str | Path) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    async def read_file(self, path: str | Path, encoding: str = "utf-8") -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding=encoding)

    async def read_json(self, path: str | Path) -> dict[str, Any]:
        return await asyncio.to_thread(load_json, path)

    async def write_file(self, path: str | Path, content: str, encoding: str = "utf-8") -> None:
        await asyncio.to_thread(_write_file, Path(path), content, encoding)

    async def ensure_dir(self, path: str | Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def copy(self, src: str | Path, dest: str | Path) -> None:
        """Copy a file or a whole directory tree from *src* to *dest*."""
        await asyncio.to_thread(_copy, Path(src), Path(dest))

    async def readdir(self, path: str | Path) -> list[str]:
        """Return the entry names of *path*, sorted for a stable walk order."""
        names = await asyncio.to_thread(os.listdir, path)
        return sorted(names)

    async def stat(self, path: str | Path) -> os.stat_result:
        return await asyncio.to_thread(os.stat, path)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str, encoding: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding=encoding)


def _copy(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    if src.is_dir():
        shutil.copytree(src, dest, dirs_exist_ok=True)
    else:
        shutil.copy2(src, dest)
