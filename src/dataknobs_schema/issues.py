"""The vocabulary of validation failures.

An ``Issue`` is one atomic failure: a kind, a path from the root input to the
offending value, a message, and kind-specific context (expected/received
types, bounds, offending keys, ...). Issues are immutable; aggregates
re-home a child's issues under their own path with ``Issue.prefixed``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

PathSegment = str | int
Path = tuple[PathSegment, ...]


class ErrorKind(str, Enum):
    """Kinds of validation failure.

    Leaf validators may report any of these; the set is open in the sense
    that ``CUSTOM`` carries user-defined failures with a ``code`` in context.
    """

    INVALID_TYPE = "invalid_type"
    TOO_SMALL = "too_small"
    TOO_BIG = "too_big"
    NOT_MULTIPLE_OF = "not_multiple_of"
    NOT_FINITE = "not_finite"
    INVALID_FORMAT = "invalid_format"
    NOT_UNIQUE = "not_unique"
    UNRECOGNIZED_KEYS = "unrecognized_keys"
    INVALID_UNION = "invalid_union"
    INVALID_LITERAL = "invalid_literal"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    INVALID_INTERSECTION = "invalid_intersection"
    INVALID_DISCRIMINATOR = "invalid_discriminator"
    CUSTOM = "custom"
    TRANSFORM_FAILED = "transform_failed"
    PREPROCESS_FAILED = "preprocess_failed"
    DECODE_FAILED = "decode_failed"
    ENCODE_FAILED = "encode_failed"
    ASYNC_NOT_SUPPORTED = "async_not_supported"

    def __str__(self) -> str:
        return self.value


def _freeze(context: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(context or {}))


@dataclass(frozen=True)
class Issue:
    """One atomic validation failure.

    Attributes:
        kind: What went wrong
        path: Segments from the root input (str for keys, int for indexes)
        message: Human-readable text, resolved when the issue was created
        context: Kind-specific data (expected, received, minimum, keys, ...)
    """

    kind: ErrorKind
    path: Path = ()
    message: str = ""
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))
        object.__setattr__(self, "context", _freeze(self.context))

    def prefixed(self, *segments: PathSegment) -> Issue:
        """Return a copy of this issue re-homed under ``segments``."""
        if not segments:
            return self
        return Issue(self.kind, tuple(segments) + self.path, self.message, self.context)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "path": list(self.path),
            "message": self.message,
        }
        if self.context:
            data["context"] = {
                key: _serializable(value) for key, value in self.context.items()
            }
        return data

    def __repr__(self) -> str:
        return f"Issue({self.kind.value!r}, path={list(self.path)!r}, message={self.message!r})"


def _serializable(value: Any) -> Any:
    if isinstance(value, Issue):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_serializable(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _serializable(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value


def prefix_issues(issues: tuple[Issue, ...] | list[Issue], *segments: PathSegment) -> list[Issue]:
    """Re-home every issue under ``segments``."""
    return [issue.prefixed(*segments) for issue in issues]


def format_path(path: Path) -> str:
    """Render a path as ``items[0].name``.

    String segments are joined with dots, integer segments become
    bracketed indexes with no leading dot.
    """
    parts: list[str] = []
    for index, segment in enumerate(path):
        if isinstance(segment, int) and not isinstance(segment, bool):
            parts.append(f"[{segment}]")
        elif index == 0:
            parts.append(str(segment))
        else:
            parts.append(f".{segment}")
    return "".join(parts)
