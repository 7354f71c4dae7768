"""Leaf validators: primitive type checks plus optional leaf checks.

The engine only needs each leaf to honor the validator contract; the
format checks here are small. Leaves also expose their bare
type predicate (``fast_check``) so object validators can inline it.
"""

from __future__ import annotations

import copy
import math
import re
import uuid as uuid_module
from abc import abstractmethod
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, ClassVar, TypeVar
from urllib.parse import urlparse

from .base import FAST_PATH_KINDS, CompositeValidator, Steps, Validator, ValidatorKind, call_user
from .checks import Check, DateRange, Finite, Integral, Length, MultipleOf, Pattern, Predicate, Range
from .exceptions import SchemaDefinitionError, ValidationError
from .issues import ErrorKind, Issue
from .result import ParseContext, ParseResult
from .utils import MISSING, is_number

T = TypeVar("T")

EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Za-z0-9_'+\-.]*[A-Za-z0-9_+\-]@"
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?\.)+[A-Za-z]{2,}$"
)


class LeafValidator(Validator[T]):
    """Type check followed by an immutable tuple of leaf checks.

    All failing checks are reported, not only the first.
    """

    expected: ClassVar[str] = "value"
    _coerce: Callable[[Any], Any] | None = None

    def __init__(self, checks: Iterable[Check] = (), message: str | None = None):
        self._checks: tuple[Check, ...] = tuple(checks)
        self._message = message

    @property
    def checks(self) -> tuple[Check, ...]:
        return self._checks

    @abstractmethod
    def _accepts(self, value: Any) -> bool:
        """Type check applied after any coercion."""

    def _output(self, value: Any) -> Any:
        return value

    def accepts_type(self, value: Any) -> bool:
        return self._coerce is not None or self._accepts(value)

    @property
    def fast_check(self) -> Callable[[Any], bool] | None:
        if self.kind in FAST_PATH_KINDS and not self._checks and self._coerce is None:
            return self._accepts
        return None

    def type_issue(self, value: Any, ctx: ParseContext) -> Issue:
        """Issue reported when ``value`` fails the type check."""
        return ctx.type_issue(self.expected, value, self._message)

    def with_check(self, check: Check) -> LeafValidator[T]:
        clone = copy.copy(self)
        clone._checks = self._checks + (check,)
        return clone

    def with_coercion(self, coerce: Callable[[Any], Any]) -> LeafValidator[T]:
        """Copy that converts raw input with ``coerce`` before the type check."""
        clone = copy.copy(self)
        clone._coerce = coerce
        return clone

    def _parse(self, value: Any, ctx: ParseContext) -> ParseResult[T]:
        if self._coerce is not None:
            value = self._coerce(value)
        if not self._accepts(value):
            return ParseResult.fail([self.type_issue(value, ctx)])
        if self._checks:
            issues = [issue for check in self._checks if (issue := check.check(value, ctx)) is not None]
            if issues:
                return ParseResult.fail(issues)
        return ParseResult.ok(self._output(value))


class StringValidator(LeafValidator[str]):
    kind = ValidatorKind.STRING
    expected = "string"

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, str)

    def min(self, length: int, message: str | None = None) -> StringValidator:
        return self.with_check(Length(min=length, origin="string", message=message))

    def max(self, length: int, message: str | None = None) -> StringValidator:
        return self.with_check(Length(max=length, origin="string", message=message))

    def length(self, length: int, message: str | None = None) -> StringValidator:
        return self.with_check(Length(min=length, max=length, origin="string", message=message))

    def nonempty(self, message: str | None = None) -> StringValidator:
        return self.min(1, message)

    def regex(self, pattern: str | re.Pattern, message: str | None = None) -> StringValidator:
        return self.with_check(Pattern(pattern, message=message))

    def startswith(self, prefix: str, message: str | None = None) -> StringValidator:
        return self.with_check(
            Predicate(lambda v: v.startswith(prefix), "starts_with", message, prefix=prefix)
        )

    def endswith(self, suffix: str, message: str | None = None) -> StringValidator:
        return self.with_check(
            Predicate(lambda v: v.endswith(suffix), "ends_with", message, suffix=suffix)
        )

    def includes(self, substring: str, message: str | None = None) -> StringValidator:
        return self.with_check(
            Predicate(lambda v: substring in v, "includes", message, includes=substring)
        )

    def email(self, message: str | None = None) -> StringValidator:
        return self.with_check(Pattern(EMAIL_PATTERN, format="email", message=message))

    def url(self, message: str | None = None) -> StringValidator:
        return self.with_check(Predicate(_is_url, "url", message))

    def uuid(self, message: str | None = None) -> StringValidator:
        return self.with_check(Predicate(_is_uuid, "uuid", message))


def _is_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _is_uuid(value: str) -> bool:
    try:
        uuid_module.UUID(value)
    except ValueError:
        return False
    return len(value) == 36


class NumberValidator(LeafValidator[float]):
    """Real number; ``bool`` and NaN are rejected, infinities are allowed unless ``finite()``."""

    kind = ValidatorKind.NUMBER
    expected = "number"

    def _accepts(self, value: Any) -> bool:
        return is_number(value)

    def min(self, value: float, message: str | None = None) -> NumberValidator:
        return self.with_check(Range(min=value, message=message))

    gte = min

    def max(self, value: float, message: str | None = None) -> NumberValidator:
        return self.with_check(Range(max=value, message=message))

    lte = max

    def gt(self, value: float, message: str | None = None) -> NumberValidator:
        return self.with_check(Range(min=value, min_exclusive=True, message=message))

    def lt(self, value: float, message: str | None = None) -> NumberValidator:
        return self.with_check(Range(max=value, max_exclusive=True, message=message))

    def positive(self, message: str | None = None) -> NumberValidator:
        return self.gt(0, message)

    def negative(self, message: str | None = None) -> NumberValidator:
        return self.lt(0, message)

    def nonnegative(self, message: str | None = None) -> NumberValidator:
        return self.min(0, message)

    def nonpositive(self, message: str | None = None) -> NumberValidator:
        return self.max(0, message)

    def int(self, message: str | None = None) -> NumberValidator:
        return self.with_check(Integral(message))

    def finite(self, message: str | None = None) -> NumberValidator:
        return self.with_check(Finite(message))

    def multiple_of(self, step: float, message: str | None = None) -> NumberValidator:
        return self.with_check(MultipleOf(step, message))

    step = multiple_of


class IntegerValidator(NumberValidator):
    """Whole number: ``int`` (not ``bool``) or an integral ``float``."""

    kind = ValidatorKind.INTEGER
    expected = "integer"

    def _accepts(self, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        return isinstance(value, float) and math.isfinite(value) and value.is_integer()


class BooleanValidator(LeafValidator[bool]):
    kind = ValidatorKind.BOOLEAN
    expected = "boolean"

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, bool)


DEFAULT_TRUTHY = ("true", "1", "yes", "on", "y", "enabled")
DEFAULT_FALSY = ("false", "0", "no", "off", "n", "disabled")


class StringBoolValidator(LeafValidator[bool]):
    """Boolean written as a word (``"yes"``, ``"off"``, ...); real bools pass unchanged.

    Matching is case-insensitive unless ``case_sensitive()`` is applied.

    Example:
        ```python
        flag = s.stringbool().with_truthy(["si"]).with_falsy(["no"])
        flag.parse("SI")   # True
        ```
    """

    kind = ValidatorKind.STRINGBOOL
    expected = "string"

    def __init__(
        self,
        truthy: Iterable[str] = DEFAULT_TRUTHY,
        falsy: Iterable[str] = DEFAULT_FALSY,
        case_sensitive: bool = False,
        message: str | None = None,
    ):
        super().__init__((), message)
        self.truthy = tuple(truthy)
        self.falsy = tuple(falsy)
        self.is_case_sensitive = case_sensitive
        self._words = {self._normalize(word): True for word in self.truthy}
        for word in self.falsy:
            self._words.setdefault(self._normalize(word), False)

    def _normalize(self, word: str) -> str:
        return word if self.is_case_sensitive else word.lower()

    def _accepts(self, value: Any) -> bool:
        if isinstance(value, bool):
            return True
        return isinstance(value, str) and self._normalize(value) in self._words

    def _output(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return self._words[self._normalize(value)]

    def type_issue(self, value: Any, ctx: ParseContext) -> Issue:
        if not isinstance(value, str):
            return super().type_issue(value, ctx)
        return ctx.issue(
            ErrorKind.INVALID_FORMAT, self._message,
            format="stringbool", values=list(self.truthy + self.falsy), received=value,
        )

    def _derive(self, **changes: Any) -> StringBoolValidator:
        options = {
            "truthy": self.truthy,
            "falsy": self.falsy,
            "case_sensitive": self.is_case_sensitive,
            "message": self._message,
        }
        options.update(changes)
        derived = StringBoolValidator(**options)
        derived._checks = self._checks
        derived.description = self.description
        return derived

    def with_truthy(self, words: Iterable[str]) -> StringBoolValidator:
        return self._derive(truthy=tuple(words))

    def with_falsy(self, words: Iterable[str]) -> StringBoolValidator:
        return self._derive(falsy=tuple(words))

    def case_sensitive(self) -> StringBoolValidator:
        return self._derive(case_sensitive=True)

    def case_insensitive(self) -> StringBoolValidator:
        return self._derive(case_sensitive=False)


class DateValidator(LeafValidator[date]):
    """``datetime.date`` or ``datetime.datetime`` instance."""

    kind = ValidatorKind.DATE
    expected = "date"

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, date)

    def min(self, value: date, message: str | None = None) -> DateValidator:
        return self.with_check(DateRange(min=value, message=message))

    def max(self, value: date, message: str | None = None) -> DateValidator:
        return self.with_check(DateRange(max=value, message=message))

    def past(self, message: str | None = None) -> DateValidator:
        """Strictly before the moment this schema is built."""
        return self.with_check(DateRange(max=datetime.now(timezone.utc), max_exclusive=True, message=message))

    def future(self, message: str | None = None) -> DateValidator:
        """Strictly after the moment this schema is built."""
        return self.with_check(DateRange(min=datetime.now(timezone.utc), min_exclusive=True, message=message))


def _same(value: Any, literal: Any) -> bool:
    # Type-strict equality: True must not match 1, nor 1.0 match 1
    if literal is None:
        return value is None
    return type(value) is type(literal) and value == literal


class LiteralValidator(LeafValidator[Any]):
    """Exactly one of the given literal values."""

    kind = ValidatorKind.LITERAL

    def __init__(self, *values: Any, message: str | None = None):
        if not values:
            raise SchemaDefinitionError("literal() requires at least one value")
        super().__init__((), message)
        self.values: tuple[Any, ...] = values

    @property
    def value(self) -> Any:
        """The literal value (the first one, for multi-value literals)."""
        return self.values[0]

    def discriminator_values(self) -> tuple[Any, ...]:
        return self.values

    def _accepts(self, value: Any) -> bool:
        return any(_same(value, literal) for literal in self.values)

    def type_issue(self, value: Any, ctx: ParseContext) -> Issue:
        expected = (
            repr(self.values[0]) if len(self.values) == 1
            else "one of " + ", ".join(map(repr, self.values))
        )
        return ctx.issue(
            ErrorKind.INVALID_LITERAL, self._message,
            expected=expected, received=repr(value) if value is not MISSING else "missing",
            values=list(self.values),
        )

    def __repr__(self) -> str:
        return f"LiteralValidator({', '.join(map(repr, self.values))})"


class EnumValidator(LeafValidator[Any]):
    """One of a fixed set of values, or a member of a Python ``Enum``.

    With an ``Enum`` class, both members and raw member values are accepted
    and the member is returned.
    """

    kind = ValidatorKind.ENUM

    def __init__(self, values: Iterable[Any] | type[Enum], message: str | None = None):
        super().__init__((), message)
        if isinstance(values, type) and issubclass(values, Enum):
            self.enum_class: type[Enum] | None = values
            members = list(values)
            self.values: tuple[Any, ...] = tuple(member.value for member in members)
            self._lookup = {(type(m.value), m.value): m for m in members}
        else:
            self.enum_class = None
            self.values = tuple(values)
            self._lookup = {(type(v), v): v for v in self.values}
        if not self.values:
            raise SchemaDefinitionError("enum() requires at least one allowed value")

    @property
    def options(self) -> list[Any]:
        return list(self.values)

    def discriminator_values(self) -> tuple[Any, ...]:
        return self.values

    def _key(self, value: Any) -> tuple[type, Any] | None:
        if self.enum_class is not None and isinstance(value, self.enum_class):
            value = value.value
        try:
            hash(value)
        except TypeError:
            return None
        return (type(value), value)

    def _accepts(self, value: Any) -> bool:
        key = self._key(value)
        return key is not None and key in self._lookup

    def _output(self, value: Any) -> Any:
        return self._lookup[self._key(value)]

    def type_issue(self, value: Any, ctx: ParseContext) -> Issue:
        return ctx.issue(
            ErrorKind.INVALID_ENUM_VALUE, self._message,
            options=list(self.values), received=value if value is not MISSING else "missing",
        )

    def extract(self, *values: Any) -> EnumValidator:
        """New enum limited to ``values``."""
        unknown = [v for v in values if v not in self.values]
        if unknown:
            raise SchemaDefinitionError(f"Values not in enum: {unknown}", context={"values": unknown})
        return EnumValidator([v for v in self.values if v in values], self._message)

    def exclude(self, *values: Any) -> EnumValidator:
        """New enum without ``values``."""
        return EnumValidator([v for v in self.values if v not in values], self._message)

    def __repr__(self) -> str:
        return f"EnumValidator({list(self.values)!r})"


class NoneValidator(LeafValidator[None]):
    kind = ValidatorKind.NONE
    expected = "null"

    def _accepts(self, value: Any) -> bool:
        return value is None


class MissingValidator(LeafValidator[Any]):
    kind = ValidatorKind.MISSING
    expected = "missing"

    def _accepts(self, value: Any) -> bool:
        return value is MISSING


class AnyValidator(LeafValidator[Any]):
    kind = ValidatorKind.ANY

    def _accepts(self, value: Any) -> bool:
        return True


class UnknownValidator(AnyValidator):
    kind = ValidatorKind.UNKNOWN


class NeverValidator(LeafValidator[Any]):
    kind = ValidatorKind.NEVER
    expected = "never"

    def _accepts(self, value: Any) -> bool:
        return False


class NanValidator(LeafValidator[float]):
    kind = ValidatorKind.NAN
    expected = "nan"

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, float) and math.isnan(value)


class CustomValidator(CompositeValidator[T]):
    """User-defined leaf from a predicate.

    The predicate may be sync or async. Exceptions become ``custom`` issues.
    """

    kind = ValidatorKind.CUSTOM

    def __init__(self, predicate: Callable[[Any], Any] | None = None, message: str | None = None):
        self.predicate = predicate
        self.message = message

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if self.predicate is None:
            return ParseResult.ok(value)
        try:
            passed = yield from call_user(self.predicate, value, operation="custom validator")
        except Exception as e:
            return ctx.fail(ErrorKind.CUSTOM, self.message or f"Custom validation error: {e}", error=repr(e))
        if passed:
            return ParseResult.ok(value)
        return ctx.fail(ErrorKind.CUSTOM, self.message)


class ExternalValidator(CompositeValidator[Any]):
    """Adapter for a foreign leaf exposing ``safe_parse``/``safeParse`` or ``parse``.

    Results are read structurally (``success``/``data``/``error``); foreign
    errors that are not ``ValidationError`` become a single ``custom`` issue.
    """

    kind = ValidatorKind.EXTERNAL

    def __init__(self, leaf: Any):
        safe = getattr(leaf, "safe_parse", None) or getattr(leaf, "safeParse", None)
        parse = getattr(leaf, "parse", None)
        if not callable(safe) and not callable(parse):
            raise SchemaDefinitionError(
                "external() requires an object with safe_parse or parse",
                context={"type": type(leaf).__name__},
            )
        self.leaf = leaf
        self._safe = safe if callable(safe) else None
        self._parse_fn = parse

    def _foreign_failure(self, error: Any, ctx: ParseContext) -> ParseResult[Any]:
        if isinstance(error, ValidationError):
            return ParseResult.fail(error.issues)
        return ctx.fail(ErrorKind.CUSTOM, str(error) or None, error=repr(error))

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if self._safe is not None:
            try:
                outcome = yield from call_user(self._safe, value, operation="external validator")
            except Exception as e:
                return self._foreign_failure(e, ctx)
            if getattr(outcome, "success", False):
                return ParseResult.ok(outcome.data)
            return self._foreign_failure(getattr(outcome, "error", None) or "Invalid input", ctx)
        try:
            data = yield from call_user(self._parse_fn, value, operation="external validator")
        except Exception as e:
            return self._foreign_failure(e, ctx)
        return ParseResult.ok(data)

    def __repr__(self) -> str:
        return f"ExternalValidator({type(self.leaf).__name__})"
