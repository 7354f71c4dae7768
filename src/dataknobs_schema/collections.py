"""Array, set, tuple and record validators."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

from .base import CompositeValidator, Steps, Validator, ValidatorKind
from .checks import Length, Unique
from .exceptions import SchemaDefinitionError
from .issues import ErrorKind, Issue
from .result import ParseContext, ParseResult
from .utils import MISSING, is_array, is_dangerous_key, is_record, is_set

T = TypeVar("T")

# Kinds that accept an absent value, so trailing tuple positions of these kinds may be left out.
ABSENT_TOLERANT_KINDS = frozenset({
    ValidatorKind.OPTIONAL,
    ValidatorKind.NULLISH,
    ValidatorKind.DEFAULT,
    ValidatorKind.PREFAULT,
})


def _require_validator(value: Any, role: str) -> Validator[Any]:
    if not isinstance(value, Validator):
        raise SchemaDefinitionError(f"{role} must be a validator, got {type(value).__name__}")
    return value


class ArrayValidator(CompositeValidator[list]):
    """List or tuple input whose every item matches ``element``.

    Item failures are aggregated across all items and prefixed with the
    item index. The output is always a list. ``unique()`` checks the
    item outputs for duplicates once every item is valid.
    """

    kind = ValidatorKind.ARRAY

    def __init__(
        self,
        element: Validator[T],
        checks: Iterable[Length] = (),
        message: str | None = None,
        unique: Unique | None = None,
    ):
        self.element = _require_validator(element, "array() element")
        self._checks = tuple(checks)
        self._message = message
        self._unique = unique

    def unwrap(self) -> Validator[T]:
        return self.element

    def accepts_type(self, value: Any) -> bool:
        return is_array(value)

    def with_element(self, element: Validator[Any]) -> ArrayValidator:
        return ArrayValidator(element, self._checks, self._message, self._unique)

    def _with_check(self, check: Length) -> ArrayValidator:
        return ArrayValidator(self.element, self._checks + (check,), self._message, self._unique)

    def min(self, length: int, message: str | None = None) -> ArrayValidator:
        return self._with_check(Length(min=length, origin="array", message=message))

    def max(self, length: int, message: str | None = None) -> ArrayValidator:
        return self._with_check(Length(max=length, origin="array", message=message))

    def length(self, length: int, message: str | None = None) -> ArrayValidator:
        return self._with_check(Length(min=length, max=length, origin="array", message=message))

    def nonempty(self, message: str | None = None) -> ArrayValidator:
        return self.min(1, message)

    def unique(self, message: str | None = None) -> ArrayValidator:
        """Require distinct items; mappings are compared regardless of key order."""
        return ArrayValidator(self.element, self._checks, self._message, Unique(message))

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if not is_array(value):
            return ParseResult.fail([ctx.type_issue("array", value, self._message)])
        issues: list[Issue] = [
            issue for check in self._checks if (issue := check.check(value, ctx)) is not None
        ]
        output = []
        for index, item in enumerate(value):
            result = yield self.element, item
            if result.success:
                output.append(result.data)
            else:
                issues.extend(issue.prefixed(index) for issue in result.issues)
        if not issues and self._unique is not None:
            duplicate = self._unique.check(output, ctx)
            if duplicate is not None:
                issues.append(duplicate)
        if issues:
            return ParseResult.fail(issues)
        return ParseResult.ok(output)

    def __repr__(self) -> str:
        return f"ArrayValidator({self.element!r})"


class SetValidator(CompositeValidator[set]):
    """Set or frozenset input whose every item matches ``element``.

    Sets have no stable order, so item issues carry no index. The output
    is always a ``set``.
    """

    kind = ValidatorKind.SET

    def __init__(self, element: Validator[T], checks: Iterable[Length] = (), message: str | None = None):
        self.element = _require_validator(element, "set() element")
        self._checks = tuple(checks)
        self._message = message

    def unwrap(self) -> Validator[T]:
        return self.element

    def accepts_type(self, value: Any) -> bool:
        return is_set(value)

    def with_element(self, element: Validator[Any]) -> SetValidator:
        return SetValidator(element, self._checks, self._message)

    def _with_check(self, check: Length) -> SetValidator:
        return SetValidator(self.element, self._checks + (check,), self._message)

    def min(self, size: int, message: str | None = None) -> SetValidator:
        return self._with_check(Length(min=size, origin="set", message=message))

    def max(self, size: int, message: str | None = None) -> SetValidator:
        return self._with_check(Length(max=size, origin="set", message=message))

    def size(self, size: int, message: str | None = None) -> SetValidator:
        return self._with_check(Length(min=size, max=size, origin="set", message=message))

    def nonempty(self, message: str | None = None) -> SetValidator:
        return self.min(1, message)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if not is_set(value):
            return ParseResult.fail([ctx.type_issue("set", value, self._message)])
        issues: list[Issue] = [
            issue for check in self._checks if (issue := check.check(value, ctx)) is not None
        ]
        output = set()
        for item in value:
            result = yield self.element, item
            if not result.success:
                issues.extend(result.issues)
                continue
            try:
                output.add(result.data)
            except TypeError:
                issues.append(ctx.issue(
                    ErrorKind.CUSTOM, f"Set item is not hashable: {type(result.data).__name__}",
                ))
        if issues:
            return ParseResult.fail(issues)
        return ParseResult.ok(output)

    def __repr__(self) -> str:
        return f"SetValidator({self.element!r})"


class TupleValidator(CompositeValidator[tuple]):
    """Fixed-position validators plus an optional ``rest`` validator for extra items.

    Trailing positions that tolerate absence (optional, default, ...) may
    be left out of the input. The output is a tuple.
    """

    kind = ValidatorKind.TUPLE

    def __init__(self, items: Iterable[Validator[Any]], rest: Validator[Any] | None = None, message: str | None = None):
        self.items = tuple(_require_validator(item, "tuple() item") for item in items)
        self.rest = _require_validator(rest, "tuple() rest") if rest is not None else None
        self._message = message
        required = len(self.items)
        while required and self.items[required - 1].kind in ABSENT_TOLERANT_KINDS:
            required -= 1
        self._required = required

    def accepts_type(self, value: Any) -> bool:
        return is_array(value)

    def with_rest(self, rest: Validator[Any]) -> TupleValidator:
        return TupleValidator(self.items, rest, self._message)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if not is_array(value):
            return ParseResult.fail([ctx.type_issue("array", value, self._message)])
        size = len(value)
        if size < self._required:
            return ctx.fail(
                ErrorKind.TOO_SMALL, self._message,
                origin="array", minimum=self._required, inclusive=True,
                exact=self.rest is None and self._required == len(self.items),
            )
        if self.rest is None and size > len(self.items):
            return ctx.fail(
                ErrorKind.TOO_BIG, self._message,
                origin="array", maximum=len(self.items), inclusive=True,
                exact=self._required == len(self.items),
            )

        issues: list[Issue] = []
        output = []
        for index, item in enumerate(self.items):
            present = index < size
            result = yield item, value[index] if present else MISSING
            if not result.success:
                issues.extend(issue.prefixed(index) for issue in result.issues)
            elif present or result.data is not MISSING:
                output.append(result.data)
        if self.rest is not None:
            for index in range(len(self.items), size):
                result = yield self.rest, value[index]
                if result.success:
                    output.append(result.data)
                else:
                    issues.extend(issue.prefixed(index) for issue in result.issues)
        if issues:
            return ParseResult.fail(issues)
        return ParseResult.ok(tuple(output))

    def __repr__(self) -> str:
        return f"TupleValidator({list(self.items)!r}, rest={self.rest!r})"


class RecordMode(str, Enum):
    STRICT = "strict"
    PARTIAL = "partial"
    LOOSE = "loose"


class RecordValidator(CompositeValidator[dict]):
    """Mapping with uniformly validated keys and values.

    Modes:

    - ``strict``: every failing key or value is an issue; with a literal or
      enum key validator, every allowed key must be present
    - ``partial``: like strict, but enumerated keys may be absent
    - ``loose``: entries with an invalid key or value are dropped silently

    Dangerous keys are skipped in every mode.
    """

    kind = ValidatorKind.RECORD

    def __init__(
        self,
        value: Validator[Any],
        key: Validator[Any] | None = None,
        mode: RecordMode | str = RecordMode.STRICT,
        message: str | None = None,
    ):
        self.value_validator = _require_validator(value, "record() value")
        self.key_validator = _require_validator(key, "record() key") if key is not None else None
        self.mode = RecordMode(mode)
        self._message = message
        self._required_keys: tuple[Any, ...] = ()
        if (
            self.key_validator is not None
            and self.mode is RecordMode.STRICT
            and self.key_validator.kind in (ValidatorKind.LITERAL, ValidatorKind.ENUM)
        ):
            self._required_keys = tuple(self.key_validator.discriminator_values())

    def accepts_type(self, value: Any) -> bool:
        return is_record(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if not is_record(value):
            return ParseResult.fail([ctx.type_issue("object", value, self._message)])
        loose = self.mode is RecordMode.LOOSE
        issues: list[Issue] = []
        output: dict[Any, Any] = {}
        seen: set[Any] = set()
        for key, item in value.items():
            if is_dangerous_key(key):
                continue
            out_key = key
            if self.key_validator is not None:
                key_result = yield self.key_validator, key
                if not key_result.success:
                    if not loose:
                        issues.extend(issue.prefixed(key) for issue in key_result.issues)
                    continue
                out_key = key_result.data
            seen.add(out_key)
            result = yield self.value_validator, item
            if result.success:
                if result.data is not MISSING:
                    output[out_key] = result.data
            elif not loose:
                issues.extend(issue.prefixed(key) for issue in result.issues)
        for key in self._required_keys:
            # Absent keys take the same output form as present ones
            key_result = yield self.key_validator, key
            out_key = key_result.data if key_result.success else key
            if out_key in seen:
                continue
            result = yield self.value_validator, MISSING
            if result.success:
                if result.data is not MISSING:
                    output[out_key] = result.data
            else:
                issues.extend(issue.prefixed(key) for issue in result.issues)
        if issues:
            return ParseResult.fail(issues)
        return ParseResult.ok(output)

    def __repr__(self) -> str:
        return f"RecordValidator({self.value_validator!r}, key={self.key_validator!r}, mode={self.mode.value!r})"
