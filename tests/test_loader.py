"""Loading YAML/JSON template sources and rendering blocks."""

from __future__ import annotations

import pytest

from treebark.errors import TemplateSourceError
from treebark.loader import ERROR_BANNER, load_file, load_input, parse_source, render_block
from treebark.options import TreebarkInput

from .conftest import RecordingLogger

CARD = """\
div:
  class: card
  $children:
    - h2: "{{title}}"
    - p: "{{body}}"
"""


class TestParseSource:
    def test_yaml(self) -> None:
        assert parse_source(CARD) == {
            "div": {"class": "card", "$children": [{"h2": "{{title}}"}, {"p": "{{body}}"}]}
        }

    def test_json(self) -> None:
        assert parse_source('{"p": {"class": "x", "$children": ["Hi"]}}') == {
            "p": {"class": "x", "$children": ["Hi"]}
        }

    def test_scalar_types_preserved(self) -> None:
        assert parse_source("$if:\n  $check: age\n  $>=: 18\n") == {"$if": {"$check": "age", "$>=": 18}}

    @pytest.mark.parametrize("text", ["", "   \n", "~", "null", '""'])
    def test_empty(self, text: str) -> None:
        with pytest.raises(TemplateSourceError, match="Empty or invalid template"):
            parse_source(text)

    def test_invalid(self) -> None:
        with pytest.raises(TemplateSourceError, match="Failed to parse as YAML or JSON"):
            parse_source("div: [unclosed")


class TestLoadInput:
    def test_bare_template(self) -> None:
        assert load_input("p: Hi", {"a": 1}) == TreebarkInput({"p": "Hi"}, {"a": 1})

    def test_self_contained_block(self) -> None:
        source = load_input("template:\n  p: '{{x}}'\ndata:\n  x: 1\n")
        assert source == TreebarkInput({"p": "{{x}}"}, {"x": 1})

    def test_block_data_merged_over_defaults(self) -> None:
        source = load_input("template:\n  p: x\ndata:\n  a: own\n", {"a": "default", "b": "kept"})
        assert source.data == {"a": "own", "b": "kept"}

    def test_block_without_data_uses_defaults(self) -> None:
        assert load_input("template:\n  p: x\n", {"a": 1}).data == {"a": 1}

    def test_non_mapping_block_data_replaces(self) -> None:
        assert load_input("template:\n  li: x\ndata: [1, 2]\n", {"a": 1}).data == [1, 2]


class TestLoadFile:
    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "card.yaml"
        path.write_text(CARD, encoding="utf-8")
        assert load_file(path).template["div"]["class"] == "card"

    def test_json_file(self, tmp_path) -> None:
        path = tmp_path / "card.json"
        path.write_text('{"template": {"p": "{{x}}"}, "data": {"x": "y"}}', encoding="utf-8")
        assert load_file(str(path)) == TreebarkInput({"p": "{{x}}"}, {"x": "y"})

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(TemplateSourceError, match="Cannot read template file"):
            load_file(tmp_path / "missing.yaml")


class TestRenderBlock:
    def test_renders(self) -> None:
        text = "template:\n  p: Hello {{name}}\ndata:\n  name: Ada\n"
        assert render_block(text, logger=RecordingLogger()) == "<p>Hello Ada</p>"

    def test_default_data(self) -> None:
        html = render_block(CARD, {"title": "T", "body": "B"}, logger=RecordingLogger())
        assert html == '<div class="card"><h2>T</h2><p>B</p></div>'

    def test_indent_override(self) -> None:
        html = render_block("div:\n  - p: a\n  - p: b\n", indent=2, logger=RecordingLogger())
        assert html == "<div>\n  <p>a</p>\n  <p>b</p>\n</div>"

    def test_options_mapping(self) -> None:
        html = render_block("p: x", options={"use_block_container": True, "logger": RecordingLogger()})
        assert html.startswith('<div style="contain: content; isolation: isolate;"')

    def test_empty_banner(self) -> None:
        assert render_block("  ") == ERROR_BANNER.format(message="Empty or invalid template")

    def test_parse_error_banner(self) -> None:
        html = render_block("div: [unclosed")
        assert html.startswith('<div class="treebark-error"><strong>Treebark Error:</strong> Failed to parse')

    def test_render_problems_do_not_banner(self) -> None:
        logger = RecordingLogger()
        assert render_block("script: alert(1)", logger=logger) == ""
        assert logger.has('Tag "script" is not allowed')


class TestRenderBlockUnusualData:
    def test_complex_yaml_key(self) -> None:
        """A YAML sequence key loads as a tuple and still renders."""
        text = "template:\n  p: '{{obj}}'\ndata:\n  obj:\n    ? [a, b]\n    : 1\n"
        html = render_block(text, logger=RecordingLogger())
        assert "treebark-error" not in html
        assert html == "<p>{&quot;[\\&quot;a\\&quot;,\\&quot;b\\&quot;]&quot;:1}</p>"
