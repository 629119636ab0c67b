"""Output formatters: turn render events into an HTML string or a DOM fragment."""

from treebark.formatters.dom import DomFormatter, to_html
from treebark.formatters.string import StringFormatter

__all__ = ["DomFormatter", "StringFormatter", "to_html"]
