"""Exception hierarchy for dataknobs_schema.

Two very different failures share the same root:

- Validation-time failures (``ValidationError``) describe why an *input*
  did not conform to a schema. They carry one or more ``Issue`` objects and
  are only ever raised by ``parse``-style entry points.
- Construction-time failures (``SchemaDefinitionError``) describe a
  *schema* that was misconfigured: an invalid default, a duplicate
  discriminator value, a key collision in ``safe_extend``. They are raised
  immediately when the schema is built, never while parsing.

Example:
    ```python
    from dataknobs_schema import s, SchemaError, ValidationError

    try:
        s.string().parse(42)
    except ValidationError as e:
        print(e.issues[0].kind)
    except SchemaError as e:
        print(e.context)
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .issues import Issue


class SchemaError(Exception):
    """Base exception for all dataknobs_schema errors.

    Attributes:
        context: Dictionary containing contextual information about the error

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
    """

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class SchemaDefinitionError(SchemaError):
    """Raised when a schema is misconfigured at construction time.

    Example:
        ```python
        raise SchemaDefinitionError(
            "Duplicate discriminator value 'a'",
            context={"discriminator": "type", "value": "a"}
        )
        ```
    """


class LocaleNotFoundError(SchemaError):
    """Raised when a message locale is requested that was never registered."""

    def __init__(self, locale: str, available: list[str]):
        super().__init__(
            f"Locale not registered: {locale}",
            context={"locale": locale, "available_locales": available},
        )
        self.locale = locale


class ConfigurationError(SchemaError):
    """Raised when settings cannot be loaded."""


class ValidationError(SchemaError):
    """Raised by ``parse`` when an input does not conform to a schema.

    A ValidationError always holds at least one issue. The human-readable
    message is the single issue's message, or a count when there are several.

    Attributes:
        issues: Ordered tuple of issues (never empty)
    """

    def __init__(self, issues: "list[Issue] | tuple[Issue, ...]"):
        issues = tuple(issues)
        if not issues:
            raise ValueError("ValidationError requires at least one issue")
        message = (
            issues[0].message if len(issues) == 1
            else f"{len(issues)} validation errors"
        )
        super().__init__(message, context={"issue_count": len(issues)})
        self.issues: tuple[Issue, ...] = issues

    @property
    def first_issue(self) -> Issue:
        """The first issue reported."""
        return self.issues[0]

    @property
    def messages(self) -> list[str]:
        """Flat list of issue messages, in report order."""
        return [issue.message for issue in self.issues]

    def treeify(self):
        """Nested view of the issues keyed by path (see ``formatting.treeify_error``)."""
        from .formatting import treeify_error
        return treeify_error(self)

    def flatten(self):
        """Form/field view of the issues (see ``formatting.flatten_error``)."""
        from .formatting import flatten_error
        return flatten_error(self)

    def prettify(self, color: bool | None = None) -> str:
        """Human-readable rendering (see ``formatting.prettify_error``)."""
        from .formatting import prettify_error
        return prettify_error(self, color=color)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation of this error."""
        return {
            "message": str(self),
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def to_json(self, **kwargs: Any) -> str:
        """JSON representation of ``to_dict()``."""
        from .formatting import error_to_json
        return error_to_json(self, **kwargs)

    def __repr__(self) -> str:
        return f"ValidationError(issues={list(self.issues)!r})"


__all__ = [
    "SchemaError",
    "SchemaDefinitionError",
    "LocaleNotFoundError",
    "ConfigurationError",
    "ValidationError",
]
