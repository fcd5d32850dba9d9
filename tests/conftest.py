"""Shared pytest fixtures for the scaffoldkit test suite.

Provides reusable fixtures for:
- A real templates root with one template (boilerplate + features)
- Custom generator modules inside that template
- A workspace directory with an already-scaffolded project
- Pre-wired engine services
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any

import pytest

from scaffoldkit.config import Settings
from scaffoldkit.scaffolder.config_loader import ScaffoldConfigCache, ScaffoldConfigLoader
from scaffoldkit.scaffolder.filesystem import FileSystemService
from scaffoldkit.scaffolder.replacement import VariableReplacer
from scaffoldkit.scaffolder.service import ScaffoldService
from scaffoldkit.scaffolder.templates import TemplateRenderer
from scaffoldkit.utils import set_verbose


PNG_BYTES = b"\x89PNG\r\n\x1a\n{{ appName }}\x00\x01"


def write_tree(root: Path, files: dict[str, Any]) -> Path:
    """Create *files* (relative path -> str or bytes) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# Template tree
# ---------------------------------------------------------------------------

SCAFFOLD_YAML = textwrap.dedent("""\
    boilerplate:
      - name: scaffold-nextjs-app
        description: Next.js application
        instruction: "cd apps/{{ appName }} && pnpm dev"
        targetFolder: apps
        variables_schema:
          type: object
          properties:
            appName:
              type: string
            packageName:
              type: string
            withLayout:
              type: boolean
              default: false
            router:
              type: string
              enum: [app, pages]
              default: app
          required: [packageName]
          additionalProperties: false
        includes:
          - package.json
          - README.md
          - src/app/layout.tsx?withLayout=true
          - src/pages/index.tsx?router=pages
          - public

    features:
      - name: add-page
        description: Add an app-router page
        instruction: "Page {{ pageName }} created"
        variables_schema:
          type: object
          properties:
            pageName:
              type: string
            withTests:
              type: boolean
          required: [pageName]
        includes:
          - page/page.tsx->src/app/{{ pageName | kebabCase }}/page.tsx
          - page/page.test.tsx->src/app/{{ pageName | kebabCase }}/page.test.tsx?withTests=true
      - name: add-async-generated
        description: Generated by an async generator
        generator: async_gen
      - name: add-sync-generated
        generator: sync_gen.py
      - name: add-broken-generator
        generator: no_entry
      - name: add-failing-generator
        generator: failing_gen
      - name: add-missing-generator
        generator: does_not_exist
""")

TEMPLATE_FILES: dict[str, Any] = {
    "scaffold.yaml": SCAFFOLD_YAML,
    "package.json.j2": '{"name": "{{ packageName }}", "private": true}\n',
    "README.md": "# {{ projectName }}\n\nPackage: {{ packageName }}\n",
    "src/app/layout.tsx": "export const title = '{{ appName | pascalCase }}';\n",
    "src/pages/index.tsx": "export default function Index() {}\n",
    "public/logo.png": PNG_BYTES,
    "public/robots.txt": "# {{ appName }}\nUser-agent: *\n",
    "public/static/plain.txt": "no placeholders here\n",
    "page/page.tsx": "export default function {{ pageName | pascalCase }}Page() {}\n",
    "page/page.test.tsx": "test('{{ pageName }}', () => {});\n",
    "generators/async_gen.py": textwrap.dedent("""\
        from scaffoldkit.scaffolder.models import ScaffoldResult


        async def generate(context):
            target = context.target_path / "GENERATED.md"
            await context.file_system.write_file(
                target, f"generated for {context.variables['appName']}\\n"
            )
            return ScaffoldResult(
                success=True,
                message=f"async generator ran for {context.config.name}",
                created_files=[str(target)],
            )
    """),
    "generators/sync_gen.py": textwrap.dedent("""\
        def generate(context):
            return {"success": True, "message": "sync generator ran", "createdFiles": []}
    """),
    "generators/no_entry.py": "VALUE = 1\n",
    "generators/failing_gen.py": textwrap.dedent("""\
        def generate(context):
            raise RuntimeError("generator exploded")
    """),
}


@pytest.fixture(autouse=True)
def _quiet_debug():
    """Reset verbose output between tests."""
    set_verbose(False)
    yield
    set_verbose(False)


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    """A templates root holding the ``nextjs`` template."""
    root = tmp_path / "templates"
    write_tree(root / "nextjs", TEMPLATE_FILES)
    return root


@pytest.fixture
def template_path(templates_root: Path) -> Path:
    return templates_root / "nextjs"


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty workspace directory that is also the current directory."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    (ws / ".git").mkdir()
    monkeypatch.chdir(ws)
    return ws


@pytest.fixture
def project_dir(workspace: Path) -> Path:
    """An existing project created from the ``nextjs`` template."""
    project = workspace / "apps" / "web"
    project.mkdir(parents=True)
    (project / "project.json").write_text(
        json.dumps({"name": "web", "sourceTemplate": "nextjs"}), encoding="utf-8"
    )
    return project


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@pytest.fixture
def file_system() -> FileSystemService:
    return FileSystemService()


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def config_loader(file_system: FileSystemService, renderer: TemplateRenderer) -> ScaffoldConfigLoader:
    return ScaffoldConfigLoader(file_system, renderer, ScaffoldConfigCache())


@pytest.fixture
def replacer(file_system: FileSystemService, renderer: TemplateRenderer) -> VariableReplacer:
    return VariableReplacer(file_system, renderer)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def scaffold_service(
    file_system: FileSystemService,
    config_loader: ScaffoldConfigLoader,
    replacer: VariableReplacer,
    templates_root: Path,
    settings: Settings,
) -> ScaffoldService:
    return ScaffoldService(file_system, config_loader, replacer, templates_root, settings)


@pytest.fixture
def make_tree():
    """Factory fixture wrapping :func:`write_tree`."""
    return write_tree


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES
