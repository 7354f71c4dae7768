"""Leaf checks: small constraint objects applied after a leaf's type check.

Each check inspects an already type-correct value and reports at most one
issue. Leaf validators hold an immutable tuple of checks; adding a check
returns a new validator sharing the previous ones.
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from fractions import Fraction
from re import Pattern as RegexPattern
from typing import Any

from .exceptions import SchemaDefinitionError
from .issues import ErrorKind, Issue
from .result import ParseContext


class Check(ABC):
    """Base class for all leaf checks."""

    def __init__(self, message: str | None = None):
        self.message = message

    @abstractmethod
    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        """Return an issue if ``value`` violates this check, else None."""


class Length(Check):
    """String/array length must be in the specified range."""

    def __init__(
        self,
        min: int | None = None,
        max: int | None = None,
        origin: str = "string",
        message: str | None = None,
    ):
        super().__init__(message)
        if min is not None and min < 0:
            raise SchemaDefinitionError(f"min length cannot be negative: {min}")
        if max is not None and max < 0:
            raise SchemaDefinitionError(f"max length cannot be negative: {max}")
        if min is not None and max is not None and min > max:
            raise SchemaDefinitionError(f"min length ({min}) cannot be greater than max ({max})")
        self.min = min
        self.max = max
        self.origin = origin

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        length = len(value)
        if self.min is not None and length < self.min:
            return ctx.issue(
                ErrorKind.TOO_SMALL, self.message,
                origin=self.origin, minimum=self.min, inclusive=True, exact=self.min == self.max,
            )
        if self.max is not None and length > self.max:
            return ctx.issue(
                ErrorKind.TOO_BIG, self.message,
                origin=self.origin, maximum=self.max, inclusive=True, exact=self.min == self.max,
            )
        return None


class Range(Check):
    """Numeric value must be in the specified range."""

    def __init__(
        self,
        min: float | None = None,
        max: float | None = None,
        min_exclusive: bool = False,
        max_exclusive: bool = False,
        message: str | None = None,
    ):
        super().__init__(message)
        if min is not None and max is not None and float(min) > float(max):
            raise SchemaDefinitionError(f"min ({min}) cannot be greater than max ({max})")
        self.min = min
        self.max = max
        self.min_exclusive = min_exclusive
        self.max_exclusive = max_exclusive

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if self.min is not None:
            too_small = value <= self.min if self.min_exclusive else value < self.min
            if too_small:
                return ctx.issue(
                    ErrorKind.TOO_SMALL, self.message,
                    origin="number", minimum=self.min, inclusive=not self.min_exclusive,
                )
        if self.max is not None:
            too_big = value >= self.max if self.max_exclusive else value > self.max
            if too_big:
                return ctx.issue(
                    ErrorKind.TOO_BIG, self.message,
                    origin="number", maximum=self.max, inclusive=not self.max_exclusive,
                )
        return None


class MultipleOf(Check):
    """Number must be an exact multiple of ``step``."""

    def __init__(self, step: float, message: str | None = None):
        super().__init__(message)
        if step == 0:
            raise SchemaDefinitionError("multiple_of step cannot be zero")
        if not math.isfinite(step):
            raise SchemaDefinitionError(f"multiple_of step must be finite: {step}")
        self.step = step

    def _is_multiple(self, value: Any) -> bool:
        if not (isinstance(value, int) or math.isfinite(value)):
            return False
        step = abs(Fraction(self.step))
        remainder = Fraction(value) % step
        if isinstance(self.step, int):
            return remainder == 0
        # Float steps are inexact; allow a tiny drift relative to the step
        return min(remainder, step - remainder) <= step * Fraction(1, 10**9)

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if self._is_multiple(value):
            return None
        return ctx.issue(ErrorKind.NOT_MULTIPLE_OF, self.message, multiple_of=self.step)


class Integral(Check):
    """Number must have no fractional part."""

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if isinstance(value, int) or (math.isfinite(value) and float(value).is_integer()):
            return None
        return ctx.issue(
            ErrorKind.INVALID_TYPE, self.message, expected="integer", received="number"
        )


class Finite(Check):
    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if isinstance(value, int) or math.isfinite(value):
            return None
        return ctx.issue(ErrorKind.NOT_FINITE, self.message)


class Pattern(Check):
    """String value must match a regex pattern."""

    def __init__(self, pattern: str | RegexPattern, format: str = "regex", message: str | None = None):
        super().__init__(message)
        self.regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.format = format

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if self.regex.search(value):
            return None
        return ctx.issue(
            ErrorKind.INVALID_FORMAT, self.message, format=self.format, pattern=self.regex.pattern
        )


class Predicate(Check):
    """String value must satisfy a named format predicate."""

    def __init__(self, predicate: Callable[[Any], bool], format: str, message: str | None = None, **details: Any):
        super().__init__(message)
        self.predicate = predicate
        self.format = format
        self.details = details

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if self.predicate(value):
            return None
        return ctx.issue(ErrorKind.INVALID_FORMAT, self.message, format=self.format, **self.details)


def _comparable(value: date, bound: date) -> tuple[Any, Any]:
    """Bring a date/datetime pair to a form Python can order."""
    if isinstance(bound, datetime) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day, tzinfo=bound.tzinfo)
    elif isinstance(value, datetime) and not isinstance(bound, datetime):
        value = value.date()
    if isinstance(value, datetime) and isinstance(bound, datetime):
        # Naive datetimes are taken to be UTC when compared with aware ones
        if (value.tzinfo is None) != (bound.tzinfo is None):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            else:
                bound = bound.replace(tzinfo=timezone.utc)
    return value, bound


class DateRange(Check):
    """Date must fall within the given bounds.

    Bounds are fixed when the check is built, so ``past()``/``future()``
    compare against the instant the schema was constructed.
    """

    def __init__(
        self,
        min: date | None = None,
        max: date | None = None,
        min_exclusive: bool = False,
        max_exclusive: bool = False,
        message: str | None = None,
    ):
        super().__init__(message)
        self.min = min
        self.max = max
        self.min_exclusive = min_exclusive
        self.max_exclusive = max_exclusive

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        if self.min is not None:
            left, bound = _comparable(value, self.min)
            if left <= bound if self.min_exclusive else left < bound:
                return ctx.issue(
                    ErrorKind.TOO_SMALL, self.message,
                    origin="date", minimum=self.min.isoformat(), inclusive=not self.min_exclusive,
                )
        if self.max is not None:
            left, bound = _comparable(value, self.max)
            if left >= bound if self.max_exclusive else left > bound:
                return ctx.issue(
                    ErrorKind.TOO_BIG, self.message,
                    origin="date", maximum=self.max.isoformat(), inclusive=not self.max_exclusive,
                )
        return None


def _identity(value: Any) -> Any:
    """Hashable stand-in for ``value`` that is equal for structurally equal values.

    Mappings compare regardless of key order; ``True`` and ``1`` stay distinct.
    """
    if isinstance(value, Mapping):
        return ("mapping", frozenset((_identity(key), _identity(item)) for key, item in value.items()))
    if isinstance(value, (list, tuple)):
        return ("sequence", tuple(_identity(item) for item in value))
    if isinstance(value, (set, frozenset)):
        return ("set", frozenset(_identity(item) for item in value))
    try:
        hash(value)
    except TypeError:
        return ("object", id(value))
    return (type(value), value)


class Unique(Check):
    """Array items must be pairwise distinct."""

    def check(self, value: Any, ctx: ParseContext) -> Issue | None:
        seen: set[Any] = set()
        duplicates = []
        for index, item in enumerate(value):
            key = _identity(item)
            if key in seen:
                duplicates.append(index)
            else:
                seen.add(key)
        if not duplicates:
            return None
        return ctx.issue(ErrorKind.NOT_UNIQUE, self.message, duplicates=duplicates)
