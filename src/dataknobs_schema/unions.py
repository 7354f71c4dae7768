"""Union, discriminated union and exclusive union validators."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from .base import CompositeValidator, Steps, Validator, ValidatorKind
from .exceptions import SchemaDefinitionError
from .issues import ErrorKind, Issue, format_path
from .result import ParseContext, ParseResult
from .utils import MISSING, is_record

logger = logging.getLogger(__name__)


def _check_options(options: Iterable[Validator[Any]], name: str) -> tuple[Validator[Any], ...]:
    options = tuple(options)
    if not options:
        raise SchemaDefinitionError(f"{name}() requires at least one option")
    for option in options:
        if not isinstance(option, Validator):
            raise SchemaDefinitionError(
                f"{name}() options must be validators, got {type(option).__name__}"
            )
    return options


def failure_reason(issues: Sequence[Issue]) -> str:
    """One-line summary of an option's failure."""
    return ", ".join(
        f"{issue.message} at {format_path(issue.path)}" if issue.path else issue.message
        for issue in issues
    )


def union_failure(ctx: ParseContext, failures: Sequence[Sequence[Issue]], message: str | None = None) -> ParseResult[Any]:
    """Single ``invalid_union`` issue carrying every option's failure."""
    return ctx.fail(
        ErrorKind.INVALID_UNION,
        message,
        reasons=[failure_reason(issues) for issues in failures],
        errors=[tuple(issues) for issues in failures],
    )


class UnionValidator(CompositeValidator[Any]):
    """First option, in declaration order, that accepts the input wins.

    Options whose ``accepts_type`` rules the input out are not run unless
    every other option fails, in which case they run for the diagnostic.
    """

    kind = ValidatorKind.UNION

    def __init__(self, options: Iterable[Validator[Any]], message: str | None = None):
        self.options = _check_options(options, "union")
        self._message = message

    def accepts_type(self, value: Any) -> bool:
        return any(option.accepts_type(value) for option in self.options)

    def __or__(self, other: Validator[Any]) -> UnionValidator:
        return UnionValidator(self.options + (other,), self._message)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        failures: dict[int, tuple[Issue, ...]] = {}
        skipped = []
        for index, option in enumerate(self.options):
            if not option.accepts_type(value):
                skipped.append(index)
                continue
            result = yield option, value
            if result.success:
                return result
            failures[index] = result.issues
        # All candidates that could match failed, so the first skipped one
        # to succeed is still the first success in declaration order.
        for index in skipped:
            result = yield self.options[index], value
            if result.success:
                return result
            failures[index] = result.issues
        return union_failure(ctx, [failures[i] for i in sorted(failures)], self._message)

    def __repr__(self) -> str:
        return f"UnionValidator({list(self.options)!r})"


def _index_key(value: Any) -> tuple[type, Any] | None:
    try:
        hash(value)
    except TypeError:
        return None
    return (type(value), value)


class DiscriminatedUnionValidator(CompositeValidator[Any]):
    """Union of object options selected by a literal/enum discriminator field.

    The option lookup is a dict built once here, so dispatch does not
    depend on the number of options.

    Raises:
        SchemaDefinitionError: If an option is not an object, lacks the
            discriminator, declares it with something other than a literal
            or enum, or repeats a discriminator value
    """

    kind = ValidatorKind.DISCRIMINATED_UNION

    def __init__(self, discriminator: str, options: Iterable[Validator[Any]], message: str | None = None):
        self.discriminator = discriminator
        self.options = _check_options(options, "discriminated_union")
        self._message = message
        self._index: dict[tuple[type, Any], Validator[Any]] = {}
        self._values: list[Any] = []
        for position, option in enumerate(self.options):
            for value in self._option_values(position, option):
                key = _index_key(value)
                if key is None:
                    raise SchemaDefinitionError(
                        f"Discriminator value {value!r} is not hashable",
                        context={"discriminator": discriminator, "value": value},
                    )
                if key in self._index:
                    raise SchemaDefinitionError(
                        f"Duplicate discriminator value {value!r} for key '{discriminator}'",
                        context={"discriminator": discriminator, "value": value},
                    )
                self._index[key] = option
                self._values.append(value)
        logger.debug(
            "Built discriminator index on '%s' with %d values", discriminator, len(self._values)
        )

    def _option_values(self, position: int, option: Validator[Any]) -> tuple[Any, ...]:
        context = {"discriminator": self.discriminator, "option": position}
        if option.kind is not ValidatorKind.OBJECT:
            raise SchemaDefinitionError(
                f"Discriminated union option {position} is not an object validator",
                context=context,
            )
        field = option.field(self.discriminator)
        if field is None:
            raise SchemaDefinitionError(
                f"Discriminated union option {position} has no '{self.discriminator}' field",
                context=context,
            )
        if field.kind not in (ValidatorKind.LITERAL, ValidatorKind.ENUM):
            raise SchemaDefinitionError(
                f"Discriminator '{self.discriminator}' of option {position} must be a literal or enum",
                context=context,
            )
        return field.discriminator_values()

    @property
    def discriminator_values(self) -> list[Any]:
        return list(self._values)

    def option_for(self, discriminator_value: Any) -> Validator[Any] | None:
        """The option handling ``discriminator_value``, if any."""
        key = _index_key(discriminator_value)
        option = self._index.get(key) if key is not None else None
        if option is None and isinstance(discriminator_value, Enum):
            key = _index_key(discriminator_value.value)
            option = self._index.get(key) if key is not None else None
        return option

    def accepts_type(self, value: Any) -> bool:
        return is_record(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if not is_record(value):
            return ParseResult.fail([ctx.type_issue("object", value, self._message)])
        received = value.get(self.discriminator, MISSING)
        option = self.option_for(received)
        if option is None:
            return ctx.fail(
                ErrorKind.INVALID_DISCRIMINATOR,
                self._message,
                (self.discriminator,),
                discriminator=self.discriminator,
                options=list(self._values),
                received=received,
            )
        return (yield option, value)

    def __repr__(self) -> str:
        return f"DiscriminatedUnionValidator({self.discriminator!r}, {self._values!r})"


class XorValidator(CompositeValidator[Any]):
    """Exclusive union: exactly one option must accept the input."""

    kind = ValidatorKind.XOR

    def __init__(self, options: Iterable[Validator[Any]], message: str | None = None):
        self.options = _check_options(options, "xor")
        self._message = message

    def accepts_type(self, value: Any) -> bool:
        return any(option.accepts_type(value) for option in self.options)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        matched = []
        failures = []
        for option in self.options:
            result = yield option, value
            if result.success:
                matched.append(result)
            else:
                failures.append(result.issues)
        if len(matched) == 1:
            return matched[0]
        if matched:
            return ctx.fail(ErrorKind.INVALID_UNION, self._message, matches=len(matched), exclusive=True)
        return union_failure(ctx, failures, self._message)
