"""Exceptions for the Treebark renderer.

Exception Hierarchy:
TreebarkError (base, fatal to the offending node)
├── TemplateStructureError     # Malformed template node
├── TemplateSourceError        # YAML/JSON source could not be loaded
├── TagNotAllowedError         # Tag outside the allowlist
├── NestedCommentError         # $comment inside $comment
├── ConditionalError           # Malformed $if / $check / $filter
├── BindingError               # Invalid $bind path
├── StyleTypeError             # style is not a mapping
├── DepthLimitError            # Template nested too deeply
├── PropertyFallbackError      # property_fallback raised
└── RenderWarning (recoverable, only the value is dropped)
    ├── AttributeNotAllowedError
    ├── UnsafeUrlError
    ├── UnsafeStyleError
    ├── BlockedPropertyError
    └── IgnoredContentError

Severity:
Fatal errors empty the node that raised them; siblings and ancestors keep
rendering. Warnings drop a single attribute, style property or ignored key
and the element still renders. Neither escapes the public render functions:
both are routed to the caller's logger by `treebark.diagnostics.Diagnostics`.

Example:
    ```
    TB-SEC-001: Tag "script" is not allowed
      Hint: Allowed tags are listed in treebark.tags.ALLOWED_TAGS
    ```

"""

from __future__ import annotations

from enum import Enum


class Severity(Enum):
    """How much of the output an error removes."""

    FATAL = "fatal"
    WARNING = "warning"


class ErrorCode(Enum):
    """Searchable error codes for Treebark diagnostics.

    Format: TB-{CATEGORY}-{NUMBER}
    Categories: TPL (template), SEC (security), CND (conditional),
    BND (binding), STY (style), RUN (runtime)
    """

    # Template errors (TB-TPL-xxx)
    INVALID_NODE = "TB-TPL-001"
    SOURCE_ERROR = "TB-TPL-002"
    NESTED_COMMENT = "TB-TPL-003"
    IGNORED_CONTENT = "TB-TPL-004"

    # Security errors (TB-SEC-xxx)
    TAG_NOT_ALLOWED = "TB-SEC-001"
    ATTRIBUTE_NOT_ALLOWED = "TB-SEC-002"
    UNSAFE_URL = "TB-SEC-003"
    BLOCKED_PROPERTY = "TB-SEC-004"

    # Conditional and binding errors
    INVALID_CONDITIONAL = "TB-CND-001"
    INVALID_BINDING = "TB-BND-001"

    # Style errors (TB-STY-xxx)
    INVALID_STYLE = "TB-STY-001"
    UNSAFE_STYLE = "TB-STY-002"

    # Runtime errors (TB-RUN-xxx)
    DEPTH_LIMIT = "TB-RUN-001"
    FALLBACK_ERROR = "TB-RUN-002"

    @property
    def category(self) -> str:
        """Error category (e.g., 'template', 'security', 'style')."""
        prefix = self.value.split("-")[1]
        return {
            "TPL": "template",
            "SEC": "security",
            "CND": "conditional",
            "BND": "binding",
            "STY": "style",
            "RUN": "runtime",
        }.get(prefix, "unknown")


class TreebarkError(Exception):
    """Base exception for all Treebark errors.

    Subclasses set ``code`` and ``severity`` as class attributes, so handlers
    can decide whether to drop a whole node or a single value:

        >>> from treebark.security import validate_tag
        >>> try:
        ...     validate_tag("script")
        ... except TreebarkError as e:
        ...     e.severity
        <Severity.FATAL: 'fatal'>

    Attributes:
        message: Error description (also the ``str()`` of the exception).
        suggestion: Optional actionable hint shown by ``format_compact()``.
    """

    code: ErrorCode = ErrorCode.INVALID_NODE
    severity: Severity = Severity.FATAL

    def __init__(self, message: str, *, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.FATAL

    def format_compact(self) -> str:
        """Format error as a short, human-readable diagnostic.

        Format::

            TB-SEC-002: Attribute "onclick" is not allowed on tag "div"
              Hint: Use data-* attributes for custom values

        Returns:
            One line with code and message, plus a hint line when a
            suggestion is available.
        """
        parts = [f"{self.code.value}: {self.message}"]
        if self.suggestion:
            parts.append(f"  Hint: {self.suggestion}")
        return "\n".join(parts)


class TemplateStructureError(TreebarkError):
    """Template node has an invalid shape.

    Raised for tag objects with zero or several keys, unsupported node types,
    or a ``$children`` value that is not a list.
    """

    code = ErrorCode.INVALID_NODE


class TemplateSourceError(TreebarkError):
    """YAML/JSON template source is empty or cannot be parsed."""

    code = ErrorCode.SOURCE_ERROR


class TagNotAllowedError(TreebarkError):
    """Tag is not in the allowlist.

    This is the XSS perimeter: ``script``, ``style``, ``iframe`` and every
    other tag outside ``ALLOWED_TAGS`` are refused.
    """

    code = ErrorCode.TAG_NOT_ALLOWED

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(
            f'Tag "{tag}" is not allowed',
            suggestion="Allowed tags are listed in treebark.tags.ALLOWED_TAGS",
        )


class NestedCommentError(TreebarkError):
    """A $comment appears inside another $comment."""

    code = ErrorCode.NESTED_COMMENT

    def __init__(self) -> None:
        super().__init__("Nested comments are not allowed")


class ConditionalError(TreebarkError):
    """Malformed conditional: $if without $check, list branches, bad $check path."""

    code = ErrorCode.INVALID_CONDITIONAL


class BindingError(TreebarkError):
    """Invalid $bind path (parent access or interpolation markers)."""

    code = ErrorCode.INVALID_BINDING


class StyleTypeError(TreebarkError):
    """The style attribute is not a mapping of CSS properties."""

    code = ErrorCode.INVALID_STYLE

    def __init__(self, value: object):
        self.value = value
        type_name = type(value).__name__
        super().__init__(
            f'"style" must be a mapping of CSS properties, got {type_name}',
            suggestion='Write style as {"color": "red", "font-size": "14px"}',
        )


class DepthLimitError(TreebarkError):
    """Template nesting exceeded the configured maximum depth."""

    code = ErrorCode.DEPTH_LIMIT

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(
            f"Maximum template depth exceeded ({max_depth})",
            suggestion="Flatten the template or raise RenderOptions.max_depth",
        )


class PropertyFallbackError(TreebarkError):
    """The caller-supplied property fallback raised an exception."""

    code = ErrorCode.FALLBACK_ERROR

    def __init__(self, path: str, original: BaseException):
        self.path = path
        self.original = original
        super().__init__(
            f'Property fallback failed for "{path}": {original}',
        )


class RenderWarning(TreebarkError):
    """Base class for recoverable problems.

    The offending attribute, style property or key is dropped and the
    element keeps rendering.
    """

    severity = Severity.WARNING


class AttributeNotAllowedError(RenderWarning):
    """Attribute is neither global nor allowed on this tag."""

    code = ErrorCode.ATTRIBUTE_NOT_ALLOWED

    def __init__(self, name: str, tag: str):
        self.name = name
        self.tag = tag
        super().__init__(
            f'Attribute "{name}" is not allowed on tag "{tag}"',
            suggestion="Use a data-* attribute for custom values",
        )


class UnsafeUrlError(RenderWarning):
    """URL attribute uses a blocked protocol."""

    code = ErrorCode.UNSAFE_URL

    def __init__(self, name: str, scheme: str):
        self.name = name
        self.scheme = scheme
        super().__init__(
            f'Attribute "{name}" uses blocked protocol "{scheme}:"',
            suggestion="Only http, https, mailto, tel and relative URLs are allowed",
        )


class UnsafeStyleError(RenderWarning):
    """CSS property name or value rejected by the style sanitizer."""

    code = ErrorCode.UNSAFE_STYLE


class BlockedPropertyError(RenderWarning):
    """Path segment names a reflection / prototype-pollution vector."""

    code = ErrorCode.BLOCKED_PROPERTY

    def __init__(self, segment: str, path: str):
        self.segment = segment
        self.path = path
        super().__init__(f'Access to property "{segment}" is blocked (in "{path}")')


class IgnoredContentError(RenderWarning):
    """Template content that is ignored: void children, stray $if keys, misplaced $filter."""

    code = ErrorCode.IGNORED_CONTENT
