"""Intersection validator: input must satisfy both sides."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, NamedTuple

from .base import CompositeValidator, Steps, Validator, ValidatorKind
from .exceptions import SchemaDefinitionError
from .issues import ErrorKind, Path, format_path
from .result import ParseContext, ParseResult
from .utils import is_array, is_dangerous_key, is_number


class MergeResult(NamedTuple):
    valid: bool
    data: Any = None
    path: Path = ()


def merge_values(left: Any, right: Any, path: Path = ()) -> MergeResult:
    """Deep-merge two outputs of the same input.

    Mappings are merged key by key (dangerous keys skipped), arrays of
    equal length item by item; anything else must be equal.
    """
    if left is right:
        return MergeResult(True, left)
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        merged = {}
        for key in list(left) + [k for k in right if k not in left]:
            if is_dangerous_key(key):
                continue
            if key in left and key in right:
                outcome = merge_values(left[key], right[key], path + (key,))
                if not outcome.valid:
                    return outcome
                merged[key] = outcome.data
            else:
                merged[key] = left[key] if key in left else right[key]
        return MergeResult(True, merged)
    if is_array(left) and is_array(right):
        if len(left) != len(right):
            return MergeResult(False, path=path)
        items = []
        for index, (a, b) in enumerate(zip(left, right)):
            outcome = merge_values(a, b, path + (index,))
            if not outcome.valid:
                return outcome
            items.append(outcome.data)
        return MergeResult(True, type(left)(items) if isinstance(left, tuple) else items)
    if is_number(left) and is_number(right):
        return MergeResult(left == right, left, path)
    if isinstance(left, date) and isinstance(right, date):
        return MergeResult(type(left) is type(right) and left == right, left, path)
    if type(left) is type(right) and left == right:
        return MergeResult(True, left)
    return MergeResult(False, path=path)


class IntersectionValidator(CompositeValidator[Any]):
    """Runs both validators and merges their outputs.

    Issues from both sides are reported together. When both succeed but the
    outputs cannot be merged, an ``invalid_intersection`` issue is reported
    at the conflicting path.
    """

    kind = ValidatorKind.INTERSECTION

    def __init__(self, left: Validator[Any], right: Validator[Any]):
        for side in (left, right):
            if not isinstance(side, Validator):
                raise SchemaDefinitionError(
                    f"intersection() requires validators, got {type(side).__name__}"
                )
        self.left = left
        self.right = right

    def accepts_type(self, value: Any) -> bool:
        return self.left.accepts_type(value) and self.right.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        left = yield self.left, value
        right = yield self.right, value
        if not (left.success and right.success):
            return ParseResult.fail(left.issues + right.issues)
        merged = merge_values(left.data, right.data)
        if not merged.valid:
            where = format_path(merged.path) or "root"
            return ctx.fail(
                ErrorKind.INVALID_INTERSECTION,
                path=merged.path,
                reason=f"incompatible values at {where}",
            )
        return ParseResult.ok(merged.data)

    def __repr__(self) -> str:
        return f"IntersectionValidator({self.left!r}, {self.right!r})"
