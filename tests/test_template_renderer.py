"""Tests for Jinja2 rendering and the report filters."""

import pytest

from src.stage2_narrator import PromptNotFoundError, TemplateNotFoundError, TemplateRenderer
from src.stage2_narrator.template_renderer import sort_filter


@pytest.fixture
def renderer():
    return TemplateRenderer()


@pytest.mark.parametrize("template, context, expected", [
    ("{{ value | format_number }}", {"value": 1234567.891}, "1,234,567.89"),
    ("{{ value | format_number }}", {"value": 8650.0}, "8,650"),
    ("{{ value | format_number }}", {"value": "n/a"}, "n/a"),
    ("{{ value | round }}", {"value": 3.14159}, "3.14"),
    ("{{ value | round(1) }}", {"value": 2.25}, "2.2"),
    ("{{ value | percent }}", {"value": 0.1234}, "12.3%"),
    ("{{ value | date }}", {"value": "2025-01-15"}, "1/15/2025"),
    ("{{ value | date('long') }}", {"value": "2025-01-15"}, "January 15, 2025"),
    ("{{ value | date }}", {"value": "soon"}, "soon"),
    ("{{ value | truncate(5) }}", {"value": "hello world"}, "hello..."),
    ("{{ value | capitalize }}", {"value": "hELLO"}, "Hello"),
    ("{{ value | join }}", {"value": [1, 2]}, "1, 2"),
    ("{{ value | join(' / ') }}", {"value": ["a", "b"]}, "a / b"),
    ("{{ value | first(2) | join }}", {"value": [3, 1, 2]}, "3, 1"),
    ("{{ value | dump(0) }}", {"value": {"a": 1}}, '{\n"a": 1\n}'),
])
def test_filters(renderer, template, context, expected):
    assert renderer.render_string(template, context) == expected


def test_none_renders_empty(renderer):
    assert renderer.render_string("[{{ value }}]", {"value": None}) == "[]"
    assert renderer.render_string("[{{ missing }}]", {}) == "[]"


def test_markdown_is_not_escaped(renderer):
    assert renderer.render_string("{{ value }}", {"value": "<b>x</b> & y"}) == "<b>x</b> & y"


def test_sort_filter_puts_none_last():
    rows = [{"n": 2}, {"n": None}, {"n": 1}]

    assert sort_filter(rows, key="n") == [{"n": 1}, {"n": 2}, {"n": None}]
    assert sort_filter([3, 1, 2], reverse=True) == [3, 2, 1]
    assert sort_filter([1, "a"]) == [1, "a"]


def test_render_file(renderer, tmp_path):
    template = tmp_path / "report.md.j2"
    template.write_text("# {{ title }}\n")

    assert renderer.render_file(str(template), {"title": "Q1"}) == "# Q1\n"


def test_missing_files(renderer, tmp_path):
    with pytest.raises(TemplateNotFoundError):
        renderer.render_file(str(tmp_path / "absent.md.j2"), {})
    with pytest.raises(PromptNotFoundError):
        TemplateRenderer.load_prompt_file(str(tmp_path / "absent.prompt.md"))
