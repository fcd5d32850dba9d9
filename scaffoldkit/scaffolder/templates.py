"""Jinja2 rendering of placeholders in template strings.

Provides the TemplateRenderer class used for both file paths and file
contents.  Placeholders (``{{ name }}``), conditionals
(``{% if %}``/``{% elif %}``/``{% else %}``) and the case/plural filters below
are supported.  Rendering is fail-open: a template that cannot be rendered is
returned unchanged and a warning is printed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from jinja2 import Environment

from scaffoldkit.utils import print_warning


_PLACEHOLDER_PATTERNS = (
    re.compile(r"\{\{.*?\}\}", re.DOTALL),
    re.compile(r"\{%.*?%\}", re.DOTALL),
)


@dataclass
class RenderResult:
    """Rendered text plus whether the fail-open fallback was used."""
    content: str
    fallback: bool = False
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template strings against a variable map.

    Unknown variables render as empty strings, mirroring a lenient template
    language; filters applied to them receive an empty string.
    """

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
        )
        # Register custom filters
        self.env.filters["camelCase"] = camel_case
        self.env.filters["pascalCase"] = pascal_case
        self.env.filters["titleCase"] = pascal_case
        self.env.filters["kebabCase"] = kebab_case
        self.env.filters["snakeCase"] = snake_case
        self.env.filters["upperCase"] = upper_snake_case
        self.env.filters["lower"] = lambda value: str(value).lower()
        self.env.filters["upper"] = lambda value: str(value).upper()
        self.env.filters["pluralize"] = pluralize
        self.env.filters["singularize"] = singularize
        self.env.filters["slugify"] = slugify

    def render_with_status(self, template: str, variables: dict[str, Any]) -> RenderResult:
        """Render *template* and report whether the fallback was taken."""
        try:
            compiled = self.env.from_string(template)
            return RenderResult(content=compiled.render(variables))
        except Exception as exc:
            message = f"Template rendering error: {exc}"
            print_warning(message)
            return RenderResult(content=template, fallback=True, error=message)

    def render_string(self, template: str, variables: dict[str, Any]) -> str:
        """Render *template*, returning it unchanged if rendering fails."""
        return self.render_with_status(template, variables).content

    @staticmethod
    def contains_placeholders(text: str) -> bool:
        """Cheap syntactic check for ``{{ ... }}`` or ``{% ... %}``."""
        return any(pattern.search(text) for pattern in _PLACEHOLDER_PATTERNS)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def camel_case(value: Any) -> str:
    """Convert ``some-thing`` / ``some_thing`` / ``some thing`` to ``someThing``.

    The first character is left as-is, so ``SomeThing`` stays ``SomeThing``.
    """
    return re.sub(
        r"[-_\s]+(.)?",
        lambda m: m.group(1).upper() if m.group(1) else "",
        str(value),
    )


def pascal_case(value: Any) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    camel = camel_case(value)
    return camel[:1].upper() + camel[1:]


def kebab_case(value: Any) -> str:
    """Convert ``someThing`` or ``some_thing`` to ``some-thing``."""
    text = re.sub(r"([a-z])([A-Z])", r"\1-\2", str(value))
    return re.sub(r"[\s_]+", "-", text).lower()


def snake_case(value: Any) -> str:
    """Convert ``someThing`` or ``some-thing`` to ``some_thing``."""
    text = re.sub(r"([a-z])([A-Z])", r"\1_\2", str(value))
    return re.sub(r"[\s-]+", "_", text).lower()


def upper_snake_case(value: Any) -> str:
    """Convert ``someThing`` or ``some-thing`` to ``SOME_THING``."""
    return snake_case(value).upper()


def pluralize(value: Any) -> str:
    """Naive English plural: ``y`` -> ``ies``, sibilants get ``es``."""
    word = str(value)
    if word.endswith("y"):
        return word[:-1] + "ies"
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    return word + "s"


def singularize(value: Any) -> str:
    """Naive inverse of :func:`pluralize`."""
    word = str(value)
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith(("ses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def slugify(value: Any) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", str(value).lower().strip())
    return slug.strip("-")
