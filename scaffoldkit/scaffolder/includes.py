"""Include-directive parsing and condition evaluation.

A directive names one template source, optionally remaps it to a different
target, and optionally restricts it with conditions::

    src/index.ts
    layout.tsx?withLayout=true
    page.tsx->src/app/{{ pagePath }}/page.tsx?withPage=true&router=app

Parsing never fails.  Condition fragments missing a key or a value are
dropped, so a malformed directive degrades to "always included".
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .models import ParsedInclude
from .templates import TemplateRenderer

ARROW = "->"
_BOOLEAN_LITERALS = {"true": True, "false": False}


def parse_conditions(raw: str) -> dict[str, str]:
    """Parse ``key=value&key2=value2`` into a dict, skipping bad pairs."""
    conditions: dict[str, str] = {}
    for pair in raw.split("&"):
        key, _, value = pair.partition("=")
        key, value = key.strip(), value.strip()
        if key and value:
            conditions[key] = value
    return conditions


def parse_include_entry(
    raw: str,
    variables: Mapping[str, Any],
    renderer: TemplateRenderer,
) -> ParsedInclude:
    """Split a directive into source path, rendered target path and conditions.

    Without ``->`` the source and target are the same literal path; the
    target is still rendered while the source stays literal for the template
    lookup.  Only the first ``->`` splits, so anything after it belongs to the
    target.
    """
    path_part, _, conditions_part = raw.partition("?")
    conditions = parse_conditions(conditions_part) if conditions_part else {}

    if ARROW in path_part:
        source, _, target = path_part.partition(ARROW)
        source, target = source.strip(), target.strip()
    else:
        source = target = path_part.strip()

    rendered = renderer.render_with_status(target, dict(variables))
    warnings = []
    if rendered.fallback:
        warnings.append(f"Target path '{target}' was left unrendered: {rendered.error}")

    return ParsedInclude(
        source_path=source,
        target_path=rendered.content,
        conditions=conditions,
        warnings=warnings,
    )


def should_include_file(
    conditions: Optional[Mapping[str, str]],
    variables: Mapping[str, Any],
) -> bool:
    """Return True when every condition holds for *variables*.

    ``true``/``false`` literals compare against the variable's truthiness;
    anything else is an exact match against ``str(variable)``.
    """
    if not conditions:
        return True

    for key, expected in conditions.items():
        actual = variables.get(key)
        if expected in _BOOLEAN_LITERALS:
            if bool(actual) is not _BOOLEAN_LITERALS[expected]:
                return False
        elif str(actual) != expected:
            return False

    return True
