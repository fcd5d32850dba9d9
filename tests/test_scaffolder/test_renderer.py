"""Tests for the Jinja2 template renderer and its filters.

Covers:
- Placeholder substitution and conditionals (if / elif / else)
- Lenient handling of unknown variables
- Fail-open fallback on malformed templates
- Case, plural and slug filters
- Placeholder detection
"""

from __future__ import annotations

import pytest

from scaffoldkit.scaffolder.templates import (
    TemplateRenderer,
    camel_case,
    kebab_case,
    pascal_case,
    pluralize,
    singularize,
    slugify,
    snake_case,
    upper_snake_case,
)


pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderString:
    def test_simple_placeholder(self, renderer):
        assert renderer.render_string("Hello {{ name }}", {"name": "World"}) == "Hello World"

    def test_filter_in_placeholder(self, renderer):
        result = renderer.render_string("{{ name | pascalCase }}Page", {"name": "user-profile"})
        assert result == "UserProfilePage"

    def test_unknown_variable_renders_empty(self, renderer):
        assert renderer.render_string("a{{ missing }}b", {}) == "ab"

    def test_unknown_variable_through_filter(self, renderer):
        assert renderer.render_string("[{{ missing | kebabCase }}]", {}) == "[]"

    def test_trailing_newline_kept(self, renderer):
        assert renderer.render_string("{{ x }}\n", {"x": 1}) == "1\n"

    def test_no_html_escaping(self, renderer):
        result = renderer.render_string("{{ markup }}", {"markup": "<div class=\"a\">&</div>"})
        assert result == "<div class=\"a\">&</div>"

    def test_code_operators_not_escaped(self, renderer):
        result = renderer.render_string(
            "const t: {{ t }} = x && y;", {"t": "Map<string, number>"}
        )
        assert result == "const t: Map<string, number> = x && y;"

    def test_if_elif_else(self, renderer):
        template = (
            "{% if router == 'app' %}app{% elif router == 'pages' %}pages"
            "{% else %}none{% endif %}"
        )
        assert renderer.render_string(template, {"router": "app"}) == "app"
        assert renderer.render_string(template, {"router": "pages"}) == "pages"
        assert renderer.render_string(template, {"router": "other"}) == "none"

    def test_text_without_placeholders_unchanged(self, renderer):
        text = "const a = 1;\n"
        assert renderer.render_string(text, {"a": 2}) == text


class TestFallback:
    def test_malformed_template_returned_unchanged(self, renderer):
        template = "broken {{ name "
        assert renderer.render_string(template, {"name": "x"}) == template

    def test_render_with_status_flags_fallback(self, renderer):
        result = renderer.render_with_status("{% if %}", {})
        assert result.fallback is True
        assert result.content == "{% if %}"
        assert result.error.startswith("Template rendering error")

    def test_render_with_status_success(self, renderer):
        result = renderer.render_with_status("{{ a }}", {"a": "b"})
        assert result.fallback is False
        assert result.error is None
        assert result.content == "b"

    def test_unknown_filter_falls_back(self, renderer):
        template = "{{ name | noSuchFilter }}"
        assert renderer.render_string(template, {"name": "x"}) == template


class TestContainsPlaceholders:
    @pytest.mark.parametrize("text", [
        "{{ name }}",
        "prefix {{name}} suffix",
        "{% if x %}y{% endif %}",
        "multi\n{{\n  name\n}}\n",
    ])
    def test_detects(self, text):
        assert TemplateRenderer.contains_placeholders(text) is True

    @pytest.mark.parametrize("text", [
        "",
        "plain text",
        "{ single }",
        "{{ unclosed",
    ])
    def test_ignores(self, text):
        assert TemplateRenderer.contains_placeholders(text) is False


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestCaseFilters:
    def test_camel_case(self):
        assert camel_case("user-profile") == "userProfile"
        assert camel_case("user_profile") == "userProfile"
        assert camel_case("user profile") == "userProfile"

    def test_pascal_case(self):
        assert pascal_case("user-profile") == "UserProfile"
        assert pascal_case("userProfile") == "UserProfile"

    def test_kebab_case(self):
        assert kebab_case("userProfile") == "user-profile"
        assert kebab_case("user_profile") == "user-profile"

    def test_snake_case(self):
        assert snake_case("userProfile") == "user_profile"
        assert snake_case("user-profile") == "user_profile"

    def test_upper_snake_case(self):
        assert upper_snake_case("userProfile") == "USER_PROFILE"

    def test_non_string_input(self):
        assert pascal_case(42) == "42"

    def test_title_case_alias(self, renderer):
        assert renderer.render_string("{{ v | titleCase }}", {"v": "my-app"}) == "MyApp"


class TestPluralFilters:
    @pytest.mark.parametrize("word, plural", [
        ("page", "pages"),
        ("category", "categories"),
        ("box", "boxes"),
        ("class", "classes"),
    ])
    def test_pluralize(self, word, plural):
        assert pluralize(word) == plural

    @pytest.mark.parametrize("plural, word", [
        ("pages", "page"),
        ("categories", "category"),
        ("boxes", "box"),
        ("class", "class"),
    ])
    def test_singularize(self, plural, word):
        assert singularize(plural) == word


class TestSlugify:
    def test_basic(self):
        assert slugify("Hello World!") == "hello-world"

    def test_strips_edges(self):
        assert slugify("  --Task  Management-- ") == "task-management"

    def test_empty(self):
        assert slugify("") == ""
