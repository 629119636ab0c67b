"""Loading templates from YAML/JSON source text.

This is the boundary used by embedders such as Markdown fence renderers
and the command line: source text is parsed with ruamel.yaml's safe loader
(JSON is tried as a fallback), optionally carries its own data, and is
rendered with errors turned into a visible banner instead of exceptions.

Source forms:
    A bare template::

        div:
          class: greeting
          $children:
            - "Hello {{name}}"

    A self-contained block with its own data (merged over the defaults)::

        template:
          p: "Hello {{name}}"
        data:
          name: Ada
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from treebark.api import render_to_string
from treebark.errors import TemplateSourceError, TreebarkError
from treebark.options import TreebarkInput
from treebark.utils.html import html_escape

_yaml = YAML(typ="safe")

ERROR_BANNER = '<div class="treebark-error"><strong>Treebark Error:</strong> {message}</div>'


def parse_source(text: str) -> Any:
    """Parse template source as YAML, falling back to JSON.

    Raises:
        TemplateSourceError: If the text is empty, parses to nothing, or is
            neither valid YAML nor valid JSON
    """
    if not text or not text.strip():
        raise TemplateSourceError("Empty or invalid template")
    try:
        value = _yaml.load(text)
    except YAMLError as yaml_error:
        try:
            value = json.loads(text)
        except ValueError as json_error:
            raise TemplateSourceError(
                f"Failed to parse as YAML or JSON. YAML error: {yaml_error}"
            ) from json_error
    if value is None or value == "":
        raise TemplateSourceError("Empty or invalid template")
    return value


def _merge_data(defaults: Any, own: Any) -> Any:
    if own is None:
        return defaults
    if isinstance(defaults, Mapping) and isinstance(own, Mapping):
        return {**defaults, **own}
    return own


def load_input(text: str, data: Any = None) -> TreebarkInput:
    """Parse source text into a ``TreebarkInput``.

    A top-level mapping with a ``template`` key is a self-contained block;
    its ``data`` is merged over ``data``. Anything else is the template.
    """
    value = parse_source(text)
    if isinstance(value, Mapping) and "template" in value:
        return TreebarkInput(value["template"], _merge_data(data, value.get("data")))
    return TreebarkInput(value, data)


def load_file(path: str | Path, data: Any = None) -> TreebarkInput:
    """Read a ``.yaml`` / ``.yml`` / ``.json`` file into a ``TreebarkInput``.

    Raises:
        TemplateSourceError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateSourceError(f"Cannot read template file {path}: {exc}") from exc
    return load_input(text, data)


def render_block(text: str, data: Any = None, options: Any = None, **overrides: Any) -> str:
    """Load and render a source block, returning an error banner on failure.

    Example:
        >>> render_block("")
        '<div class="treebark-error"><strong>Treebark Error:</strong> Empty or invalid template</div>'
    """
    try:
        source = load_input(text, data)
    except TreebarkError as exc:
        return ERROR_BANNER.format(message=html_escape(exc.message))
    return render_to_string(source, options, **overrides)
