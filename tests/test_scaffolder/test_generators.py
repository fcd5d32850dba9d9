"""Tests for custom generator resolution, loading and invocation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from scaffoldkit.scaffolder.generators import (
    GeneratorLoadError,
    load_generator,
    resolve_generator_path,
    run_generator,
)
from scaffoldkit.scaffolder.models import ScaffoldResult


pytestmark = pytest.mark.unit


class TestResolveGeneratorPath:
    def test_bare_name_resolves_to_py(self, template_path: Path):
        path = resolve_generator_path(template_path, "async_gen")
        assert path == template_path / "generators" / "async_gen.py"

    def test_explicit_py(self, template_path: Path):
        path = resolve_generator_path(template_path, "sync_gen.py")
        assert path == template_path / "generators" / "sync_gen.py"

    def test_package_directory(self, template_path: Path, make_tree):
        make_tree(template_path, {"generators/pkg_gen/__init__.py": "def generate(c):\n    pass\n"})
        path = resolve_generator_path(template_path, "pkg_gen")
        assert path == template_path / "generators" / "pkg_gen" / "__init__.py"

    def test_missing(self, template_path: Path):
        with pytest.raises(GeneratorLoadError, match="not found"):
            resolve_generator_path(template_path, "does_not_exist")


class TestLoadGenerator:
    def test_returns_callable(self, template_path: Path):
        func = load_generator(template_path, "sync_gen")
        assert callable(func)
        assert func.__name__ == "generate"

    def test_missing_entry_point(self, template_path: Path):
        with pytest.raises(GeneratorLoadError, match="does not export a callable 'generate'"):
            load_generator(template_path, "no_entry")

    def test_import_error_propagates(self, template_path: Path, make_tree):
        make_tree(template_path, {"generators/syntax_gen.py": "def generate(:\n"})
        with pytest.raises(SyntaxError):
            load_generator(template_path, "syntax_gen")


class TestRunGenerator:
    async def test_sync_mapping_result_validated(self):
        def generate(context):
            return {"success": True, "message": "ok", "createdFiles": ["a.txt"]}

        result = await run_generator(generate, MagicMock())

        assert isinstance(result, ScaffoldResult)
        assert result.created_files == ["a.txt"]

    async def test_async_result_passed_through(self):
        expected = ScaffoldResult(success=False, message="nope")

        async def generate(context):
            return expected

        assert await run_generator(generate, MagicMock()) is expected

    async def test_generator_receives_context(self):
        context = MagicMock()
        seen = []

        def generate(ctx):
            seen.append(ctx)
            return ScaffoldResult(success=True, message="ok")

        await run_generator(generate, context)
        assert seen == [context]

    async def test_errors_propagate(self):
        def generate(context):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await run_generator(generate, MagicMock())
