from __future__ import annotations

import argparse
import logging
import sys

from treebark import __version__
from treebark.api import render_to_dom, render_to_string
from treebark.errors import TemplateSourceError
from treebark.formatters.dom import to_html
from treebark.loader import load_file, parse_source


def _indent(value: str) -> str | int:
    if value == "tab":
        return "\t"
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number of spaces or 'tab', got {value!r}")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="treebark",
        description="Render a Treebark YAML/JSON template to HTML",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("template", help="template file (.yaml, .yml or .json)")
    p.add_argument(
        "--data",
        metavar="FILE",
        help="YAML/JSON data file; merged under the template's own data",
    )
    p.add_argument(
        "--indent",
        type=_indent,
        metavar="N|tab",
        help="indent output with N spaces or a tab",
    )
    p.add_argument(
        "--block-container",
        action="store_true",
        help="wrap output in a CSS containment <div>",
    )
    p.add_argument(
        "--shadow-dom",
        action="store_true",
        help="wrap output in a declarative shadow root",
    )
    p.add_argument(
        "--dom",
        action="store_true",
        help="render through the DOM backend (ignores --indent)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="log debug diagnostics")
    return p


def _load_data(path: str | None) -> object:
    if path is None:
        return None
    try:
        with open(path, encoding="utf-8") as fh:
            text = fh.read()
    except OSError as exc:
        raise TemplateSourceError(f"Cannot read data file {path}: {exc}") from exc
    return parse_source(text)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        source = load_file(ns.template, _load_data(ns.data))
    except TemplateSourceError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 1

    options = {
        "use_block_container": ns.block_container,
        "use_shadow_dom": ns.shadow_dom,
    }
    if ns.dom:
        html = to_html(render_to_dom(source, options))
    else:
        html = render_to_string(source, options, indent=ns.indent)
    sys.stdout.write(html + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
