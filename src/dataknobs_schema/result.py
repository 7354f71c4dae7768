"""Parse result and parse context types.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .exceptions import ValidationError
from .issues import ErrorKind, Issue, Path
from .messages import MessageResolver, get_message_resolver, resolve_message
from .utils import type_name

T = TypeVar("T")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of ``safe_parse``: either data or a ValidationError, never both.

    ``data`` is only meaningful when ``success`` is True; ``error`` is only
    set when it is False.
    """

    success: bool
    data: Any = None
    error: ValidationError | None = None

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check success."""
        return self.success

    @property
    def issues(self) -> tuple[Issue, ...]:
        """Issues of a failed result; empty on success."""
        return self.error.issues if self.error is not None else ()

    def unwrap(self) -> T:
        """Return the data, or raise the contained ValidationError."""
        if self.error is not None:
            raise self.error
        return self.data

    @classmethod
    def ok(cls, data: Any) -> ParseResult[Any]:
        """Create a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, issues: Iterable[Issue] | ValidationError) -> ParseResult[Any]:
        """Create a failed result from issues (must be non-empty) or an error."""
        error = issues if isinstance(issues, ValidationError) else ValidationError(list(issues))
        return cls(success=False, error=error)


@dataclass(frozen=True)
class ParseContext:
    """Per-call state threaded through a validator tree.

    Holds only the message resolver chosen for this call; validators never
    store per-call state on themselves.
    """

    messages: MessageResolver

    @classmethod
    def create(cls, messages: MessageResolver | None = None) -> ParseContext:
        """Build a context, reading the process-wide resolver if none is given."""
        return cls(messages=messages if messages is not None else get_message_resolver())

    def issue(
        self,
        kind: ErrorKind,
        message: str | None = None,
        path: Path = (),
        **context: Any,
    ) -> Issue:
        """Create an issue, resolving its message unless one is supplied."""
        if message is None:
            message = resolve_message(self.messages, kind, context)
        return Issue(kind=kind, path=tuple(path), message=message, context=context)

    def fail(
        self,
        kind: ErrorKind,
        message: str | None = None,
        path: Path = (),
        **context: Any,
    ) -> ParseResult[Any]:
        """Create a failed result holding a single issue."""
        return ParseResult.fail([self.issue(kind, message, path, **context)])

    def type_issue(self, expected: str, value: Any, message: str | None = None) -> Issue:
        return self.issue(
            ErrorKind.INVALID_TYPE, message, expected=expected, received=type_name(value)
        )

