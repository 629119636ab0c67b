"""$bind, $filter, $if and root-array rendering."""

from __future__ import annotations

import pytest


class TestListBinding:
    """$bind to a list repeats $children per item."""

    def test_repeat_children(self, render) -> None:
        template = {"ul": {"$bind": "items", "$children": [{"li": "{{name}}"}]}}
        data = {"items": [{"name": "A"}, {"name": "B"}]}
        assert render(template, data) == "<ul><li>A</li><li>B</li></ul>"

    def test_attributes_use_outer_data(self, render) -> None:
        template = {"ul": {"$bind": "items", "class": "{{kind}}", "$children": [{"li": "{{.}}"}]}}
        assert render(template, {"kind": "k", "items": ["x", "y"]}) == '<ul class="k"><li>x</li><li>y</li></ul>'

    def test_bind_current_list(self, render) -> None:
        """$bind: "." binds the list itself instead of repeating the root."""
        template = {"ul": {"$bind": ".", "$children": [{"li": "{{.}}"}]}}
        assert render(template, ["a", "b"]) == "<ul><li>a</li><li>b</li></ul>"

    def test_empty_list_renders_empty_container(self, render) -> None:
        template = {"ul": {"$bind": "items", "$children": [{"li": "{{.}}"}]}}
        assert render(template, {"items": []}) == "<ul></ul>"

    def test_several_children_per_item(self, render) -> None:
        template = {"div": {"$bind": "rows", "$children": [{"h3": "{{t}}"}, {"p": "{{d}}"}]}}
        data = {"rows": [{"t": "1", "d": "one"}, {"t": "2", "d": "two"}]}
        assert render(template, data) == "<div><h3>1</h3><p>one</p><h3>2</h3><p>two</p></div>"

    def test_parent_access(self, render) -> None:
        template = {"ul": {"$bind": "employees", "$children": [{"li": "{{name}} - {{..company}}"}]}}
        data = {"company": "ACME", "employees": [{"name": "Ann"}, {"name": "Bo"}]}
        assert render(template, data) == "<ul><li>Ann - ACME</li><li>Bo - ACME</li></ul>"

    def test_parent_overflow_is_empty(self, render) -> None:
        template = {"ul": {"$bind": "employees", "$children": [{"li": "{{name}}|{{../..company}}"}]}}
        data = {"company": "ACME", "employees": [{"name": "Ann"}]}
        assert render(template, data) == "<ul><li>Ann|</li></ul>"

    def test_two_level_parent_access(self, render) -> None:
        template = {
            "div": {
                "$bind": "departments",
                "$children": [
                    {"ul": {"$bind": "staff", "$children": [{"li": "{{name}} @ {{..title}} / {{../..org}}"}]}}
                ],
            }
        }
        data = {"org": "ACME", "departments": [{"title": "R&D", "staff": [{"name": "Ann"}]}]}
        assert render(template, data) == "<div><ul><li>Ann @ R&amp;D / ACME</li></ul></div>"

    def test_large_list(self, render) -> None:
        template = {"ul": {"$bind": "items", "$children": [{"li": "{{.}}"}]}}
        result = render(template, {"items": list(range(1000))})
        assert result.count("<li>") == 1000
        assert result.endswith("<li>999</li></ul>")


class TestObjectBinding:
    """$bind to a mapping or scalar changes the data context."""

    def test_mapping(self, render) -> None:
        template = {
            "div": {
                "$bind": "user",
                "class": "{{role}}",
                "$children": [{"h2": "{{name}}"}, {"p": "{{..site}}"}],
            }
        }
        data = {"site": "S", "user": {"name": "Ada", "role": "admin"}}
        assert render(template, data) == '<div class="admin"><h2>Ada</h2><p>S</p></div>'

    def test_scalar(self, render) -> None:
        template = {"span": {"$bind": "count", "$children": ["{{.}}"]}}
        assert render(template, {"count": 0}) == "<span>0</span>"

    def test_missing(self, render) -> None:
        template = {"div": {"$bind": "nothing", "$children": ["x{{.}}"]}}
        assert render(template, {}) == "<div>x</div>"

    def test_nested_path(self, render) -> None:
        template = {"p": {"$bind": "a.b", "$children": ["{{c}}"]}}
        assert render(template, {"a": {"b": {"c": "deep"}}}) == "<p>deep</p>"


class TestInvalidBinding:
    @pytest.mark.parametrize(
        ("path", "message"),
        [
            ("..items", "does not support parent context access"),
            ("{{items}}", "does not support interpolation"),
            ("", "non-empty property path"),
        ],
    )
    def test_invalid_path_drops_node(self, render, logger, path: str, message: str) -> None:
        template = [{"ul": {"$bind": path, "$children": [{"li": "x"}]}}, {"p": "ok"}]
        assert render(template, {"items": [1]}) == "<p>ok</p>"
        assert logger.has(message)


class TestFilter:
    """$filter keeps list items that satisfy a condition."""

    PRODUCTS = {
        "products": [
            {"name": "Laptop", "price": 999, "inStock": True},
            {"name": "Mouse", "price": 25, "inStock": False},
            {"name": "Keyboard", "price": 75, "inStock": True},
        ]
    }

    def _template(self, condition: dict) -> dict:
        return {
            "ul": {
                "$bind": "products",
                "$filter": condition,
                "$children": [{"li": "{{name}} - ${{price}}"}],
            }
        }

    def test_operator_filter(self, render) -> None:
        result = render(self._template({"$check": "price", "$<": 500}), self.PRODUCTS)
        assert result == "<ul><li>Mouse - $25</li><li>Keyboard - $75</li></ul>"

    def test_truthiness_filter(self, render) -> None:
        result = render(self._template({"$check": "inStock"}), self.PRODUCTS)
        assert result == "<ul><li>Laptop - $999</li><li>Keyboard - $75</li></ul>"

    def test_not_filter(self, render) -> None:
        result = render(self._template({"$check": "inStock", "$not": True}), self.PRODUCTS)
        assert result == "<ul><li>Mouse - $25</li></ul>"

    def test_in_filter(self, render) -> None:
        result = render(self._template({"$check": "name", "$in": ["Mouse", "Laptop"]}), self.PRODUCTS)
        assert result == "<ul><li>Laptop - $999</li><li>Mouse - $25</li></ul>"

    def test_or_filter(self, render) -> None:
        condition = {"$check": "price", "$<": 50, "$>": 500, "$join": "OR"}
        result = render(self._template(condition), self.PRODUCTS)
        assert result == "<ul><li>Laptop - $999</li><li>Mouse - $25</li></ul>"

    def test_nothing_matches(self, render) -> None:
        assert render(self._template({"$check": "price", "$>": 5000}), self.PRODUCTS) == "<ul></ul>"

    def test_invalid_filter_drops_node(self, render, logger) -> None:
        assert render(self._template("inStock"), self.PRODUCTS) == ""
        assert logger.has('"$filter" must be a conditional')

    def test_filter_without_bind_ignored(self, render, logger) -> None:
        template = {"ul": {"$filter": {"$check": "x"}, "$children": [{"li": "a"}]}}
        assert render(template, {}) == "<ul><li>a</li></ul>"
        assert logger.has('"$filter" is ignored without "$bind"')
        assert not logger.errors

    def test_filter_on_non_list_ignored(self, render, logger) -> None:
        template = {"div": {"$bind": "user", "$filter": {"$check": "x"}, "$children": ["{{name}}"]}}
        assert render(template, {"user": {"name": "Ada"}}) == "<div>Ada</div>"
        assert logger.has("is not a list")


class TestIf:
    """$if renders one branch and never an element of its own."""

    TEMPLATE = {"$if": {"$check": "loggedIn", "$then": {"p": "Welcome"}, "$else": {"p": "Login"}}}

    def test_then(self, render) -> None:
        assert render(self.TEMPLATE, {"loggedIn": True}) == "<p>Welcome</p>"

    def test_else(self, render) -> None:
        assert render(self.TEMPLATE, {"loggedIn": False}) == "<p>Login</p>"

    def test_no_else(self, render) -> None:
        assert render({"$if": {"$check": "x", "$then": {"p": "A"}}}, {}) == ""

    def test_text_branch(self, render) -> None:
        assert render({"$if": {"$check": "name", "$then": "Hi {{name}}"}}, {"name": "Ada"}) == "Hi Ada"

    def test_operators(self, render) -> None:
        template = {
            "$if": {"$check": "age", "$>=": 18, "$then": {"p": "Adult"}, "$else": {"p": "Minor"}}
        }
        assert render(template, {"age": 21}) == "<p>Adult</p>"
        assert render(template, {"age": 12}) == "<p>Minor</p>"

    def test_branch_keeps_depth(self, render) -> None:
        """The chosen branch is indented like a sibling."""
        template = {"div": [{"$if": {"$check": "a", "$then": {"span": "A"}}}, {"p": "B"}]}
        assert render(template, {"a": True}, indent=2) == "<div>\n  <span>A</span>\n  <p>B</p>\n</div>"

    def test_inside_binding(self, render) -> None:
        template = {
            "ul": {
                "$bind": "users",
                "$children": [
                    {"$if": {"$check": "admin", "$then": {"li": "{{name}} (admin)"}, "$else": {"li": "{{name}}"}}}
                ],
            }
        }
        data = {"users": [{"name": "A", "admin": True}, {"name": "B"}]}
        assert render(template, data) == "<ul><li>A (admin)</li><li>B</li></ul>"

    def test_missing_check(self, render, logger) -> None:
        assert render([{"$if": {"$then": {"p": "x"}}}, {"p": "ok"}]) == "<p>ok</p>"
        assert logger.has('"$if" tag requires $check')

    def test_list_branch_is_fatal(self, render, logger) -> None:
        template = {"$if": {"$check": "a", "$then": [{"p": "1"}, {"p": "2"}]}}
        assert render(template, {"a": True}) == ""
        assert logger.has('"$then" must be a single node')

    def test_extra_keys_warn(self, render, logger) -> None:
        template = {"$if": {"$check": "a", "class": "x", "$then": {"p": "A"}}}
        assert render(template, {"a": True}) == "<p>A</p>"
        assert logger.has('"$if" ignores "class"')
        assert not logger.errors

    def test_children_warn(self, render, logger) -> None:
        template = {"$if": {"$check": "a", "$children": [{"p": "old"}], "$then": {"p": "new"}}}
        assert render(template, {"a": True}) == "<p>new</p>"
        assert logger.has('"$if" ignores "$children"')

    def test_parent_access_in_check_rejected(self, render, logger) -> None:
        assert render({"$if": {"$check": "..a", "$then": {"p": "A"}}}, {"a": True}) == ""
        assert logger.has("$check does not support parent context access")


class TestRootArray:
    """A single root tag against list data renders once per item."""

    def test_repeat(self, render) -> None:
        assert render({"li": "{{name}}"}, [{"name": "A"}, {"name": "B"}]) == "<li>A</li><li>B</li>"

    def test_repeat_with_indent(self, render) -> None:
        assert render({"li": "{{name}}"}, [{"name": "A"}, {"name": "B"}], indent=2) == "<li>A</li>\n<li>B</li>"

    def test_fragment_template_not_repeated(self, render) -> None:
        """List templates see the whole list as data."""
        assert render(["{{0}}", "{{1}}"], ["a", "b"]) == "ab"

    def test_large_root_array(self, render) -> None:
        result = render({"p": "{{.}}"}, list(range(10000)))
        assert result.count("<p>") == 10000


class TestDepthLimit:
    """Templates nested beyond max_depth lose the too-deep subtree."""

    @staticmethod
    def _nested(levels: int) -> dict:
        node: object = "leaf"
        for _ in range(levels):
            node = {"div": [node]}
        return node  # type: ignore[return-value]

    def test_default_limit(self, render, logger) -> None:
        result = render(self._nested(200))
        assert result == "<div>" * 129 + "</div>" * 129
        assert logger.has("Maximum template depth exceeded (128)")

    def test_custom_limit(self, render, logger) -> None:
        assert render(self._nested(20), max_depth=10) == "<div>" * 11 + "</div>" * 11

    def test_within_limit(self, render, logger) -> None:
        result = render(self._nested(50))
        assert result == "<div>" * 50 + "leaf" + "</div>" * 50
        assert not logger.errors
