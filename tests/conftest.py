"""Pytest configuration and fixtures for Treebark tests."""

from __future__ import annotations

from typing import Any

import pytest

from treebark import render_to_dom, render_to_string, to_html


class RecordingLogger:
    """Logger that keeps every message, split by method."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.logs: list[str] = []

    def error(self, message: str) -> None:
        self.errors.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def log(self, message: str) -> None:
        self.logs.append(message)

    @property
    def messages(self) -> list[str]:
        return self.errors + self.warnings

    def has(self, fragment: str) -> bool:
        """True if any error or warning contains ``fragment``."""
        return any(fragment in message for message in self.messages)


class ErrorOnlyLogger:
    """Logger exposing only ``error``, like a bare console."""

    def __init__(self) -> None:
        self.errors: list[str] = []

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def logger() -> RecordingLogger:
    """A fresh recording logger."""
    return RecordingLogger()


@pytest.fixture
def render(logger: RecordingLogger):
    """Render ``template`` with ``data`` to a string, logging to ``logger``."""

    def _render(template: Any, data: Any = None, **options: Any) -> str:
        return render_to_string({"template": template, "data": data}, logger=logger, **options)

    return _render


@pytest.fixture
def render_dom(logger: RecordingLogger):
    """Render ``template`` with ``data`` to a minidom fragment."""

    def _render(template: Any, data: Any = None, **options: Any):
        return render_to_dom({"template": template, "data": data}, logger=logger, **options)

    return _render


def assert_backends_agree(template: Any, data: Any = None, **options: Any) -> str:
    """Assert string output equals the serialized DOM output; return the HTML.

    Args:
        template: Template to render.
        data: Data context.
        options: Render option overrides (indent is not applied to the DOM).
    """
    quiet = ErrorOnlyLogger()
    html = render_to_string({"template": template, "data": data}, logger=quiet, **options)
    dom = to_html(render_to_dom({"template": template, "data": data}, logger=quiet, **options))
    assert html == dom, (
        f"Backend output mismatch:\n"
        f"  String: {html!r}\n"
        f"  DOM:    {dom!r}"
    )
    return html
