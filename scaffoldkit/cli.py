"""scaffoldkit command-line interface.

Usage::

    scaffoldkit list
    scaffoldkit boilerplate scaffold-nextjs-app --var packageName=@acme/web
    scaffoldkit feature add-page --project apps/web --var pageName=settings
    scaffoldkit methods --project apps/web
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from rich.table import Table

from scaffoldkit.config import Settings, TemplatesNotFoundError
from scaffoldkit.scaffolder import (
    BoilerplateService,
    ProjectConfigError,
    ScaffoldConfigError,
    ScaffoldingMethodsService,
    ScaffoldMethodError,
    ScaffoldResult,
)
from scaffoldkit.utils import (
    console,
    print_error,
    print_file_table,
    print_success,
    print_warning,
    set_verbose,
)

# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def parse_var(raw: str) -> tuple[str, Any]:
    """Parse a ``key=value`` pair; the value is read as a YAML scalar.

    ``count=3`` gives ``3`` and ``withTests=true`` gives ``True``; values
    YAML cannot parse (``@acme/web``) stay strings.
    """
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got: {raw}")
    try:
        parsed = yaml.safe_load(value) if value else ""
    except yaml.YAMLError:
        parsed = value
    if parsed is None or isinstance(parsed, (dict, list)):
        parsed = value
    return key, parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaffoldkit",
        description="scaffoldkit -- scaffold projects and features from templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  scaffoldkit list\n"
            "  scaffoldkit boilerplate scaffold-nextjs-app --var packageName=@acme/web\n"
            "  scaffoldkit feature add-page --project apps/web --var pageName=settings\n"
        ),
    )
    parser.add_argument(
        "--templates", "-t",
        default=None,
        help="Templates root (default: discovered from the workspace)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print debug output",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List available boilerplates")

    boilerplate = sub.add_parser("boilerplate", help="Create a new project from a boilerplate")
    boilerplate.add_argument("name", help="Boilerplate name")
    boilerplate.add_argument(
        "--var", dest="variables", action="append", type=parse_var, default=[],
        metavar="KEY=VALUE", help="Template variable (repeatable)",
    )

    feature = sub.add_parser("feature", help="Add a feature to an existing project")
    feature.add_argument("name", help="Feature name")
    feature.add_argument("--project", "-p", required=True, help="Project directory")
    feature.add_argument(
        "--var", dest="variables", action="append", type=parse_var, default=[],
        metavar="KEY=VALUE", help="Template variable (repeatable)",
    )

    methods = sub.add_parser("methods", help="List features available to a project")
    target = methods.add_mutually_exclusive_group(required=True)
    target.add_argument("--project", "-p", help="Project directory")
    target.add_argument("--template", help="Template name instead of a project")

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _report(result: ScaffoldResult) -> bool:
    # warnings are already printed where the engine raises them
    if not result.success:
        print_error(result.message)
        return False
    if result.created_files or result.existing_files:
        print_file_table(result.created_files, result.existing_files)
    print_success(result.message)
    return True


async def _list(templates_root: Path, settings: Settings) -> bool:
    boilerplates = await BoilerplateService(templates_root, settings).list_boilerplates()
    if not boilerplates:
        print_warning(f"No boilerplates found under {templates_root}")
        return True

    table = Table(title="Boilerplates", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Template")
    table.add_column("Target")
    table.add_column("Description")
    for info in boilerplates:
        table.add_row(info.name, info.template_path, info.target_folder, info.description or "")
    console.print(table)
    return True


async def _methods(
    templates_root: Path,
    settings: Settings,
    project: Optional[str],
    template: Optional[str],
) -> bool:
    service = ScaffoldingMethodsService(templates_root, settings)
    if project is not None:
        methods = await service.list_methods(project)
    else:
        methods = await service.list_methods_by_template(template or "")

    if not methods:
        print_warning("No scaffolding methods available")
        return True

    table = Table(title="Scaffolding methods", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Variables")
    table.add_column("Description")
    for method in methods:
        required = set(method.variables_schema.required)
        names = [
            f"{name}*" if name in required else name
            for name in method.variables_schema.properties
        ]
        table.add_row(method.name, ", ".join(names), method.description or "")
    console.print(table)
    return True


async def _dispatch(args: argparse.Namespace, settings: Settings) -> bool:
    templates_root = settings.resolve_templates_path()

    if args.command == "list":
        return await _list(templates_root, settings)
    if args.command == "methods":
        return await _methods(templates_root, settings, args.project, args.template)
    if args.command == "boilerplate":
        service = BoilerplateService(templates_root, settings)
        return _report(await service.use_boilerplate(args.name, dict(args.variables)))
    if args.command == "feature":
        methods = ScaffoldingMethodsService(templates_root, settings)
        result = await methods.use_method(args.project, args.name, dict(args.variables))
        return _report(result)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``scaffoldkit`` / ``python -m scaffoldkit.cli``."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.templates:
        settings = settings.model_copy(update={"templates_path": Path(args.templates)})
    if args.verbose:
        settings = settings.model_copy(update={"verbose": True})
    set_verbose(settings.verbose)

    try:
        ok = asyncio.run(_dispatch(args, settings))
    except (
        TemplatesNotFoundError,
        ProjectConfigError,
        ScaffoldConfigError,
        ScaffoldMethodError,
    ) as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
