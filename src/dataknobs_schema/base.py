"""The validator contract.

Every validator is immutable: chain methods (``optional()``, ``refine()``,
``strict()``, ...) return a *new* validator that holds references to the
previous configuration and never modify the receiver. A validator can
therefore be shared freely between threads and tasks.

Two entry points with a fixed relationship:

- ``safe_parse(value)`` never raises for invalid input; it returns a
  ``ParseResult`` holding either ``data`` or a ``ValidationError``.
- ``parse(value)`` is exactly ``safe_parse(value).unwrap()``: it returns the
  data or raises the aggregated ``ValidationError``.

Subclasses implement ``_parse(value, ctx)``. Validators that delegate to
children or call user callbacks implement ``_evaluate`` instead: a
generator that yields ``(child, value)`` requests and ``Awaiting`` objects,
and that ``CompositeValidator`` drives either synchronously or
asynchronously. This keeps a single description of each aggregate's
semantics for both ``parse`` and ``parse_async``.
"""

from __future__ import annotations

import copy
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Generator
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, Union

from .exceptions import SchemaDefinitionError, ValidationError
from .issues import ErrorKind
from .messages import MessageResolver
from .result import ParseContext, ParseResult
from .utils import MISSING

if TYPE_CHECKING:
    from .collections import ArrayValidator
    from .intersection import IntersectionValidator
    from .unions import UnionValidator
    from .wrappers import (
        BrandValidator,
        CatchValidator,
        DefaultValidator,
        NullableValidator,
        NullishValidator,
        OptionalValidator,
        PipeValidator,
        PrefaultValidator,
        ReadonlyValidator,
        RefineValidator,
        SuperRefineValidator,
        TransformValidator,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class ValidatorKind(str, Enum):
    """Capability tag carried by every validator.

    Aggregates recognize their children through this tag (never through
    class names), e.g. the object fast path and discriminated-union setup.
    """

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRINGBOOL = "stringbool"
    DATE = "date"
    LITERAL = "literal"
    ENUM = "enum"
    NONE = "none"
    MISSING = "missing"
    ANY = "any"
    UNKNOWN = "unknown"
    NEVER = "never"
    NAN = "nan"
    CUSTOM = "custom"
    EXTERNAL = "external"
    OBJECT = "object"
    ARRAY = "array"
    SET = "set"
    TUPLE = "tuple"
    RECORD = "record"
    UNION = "union"
    DISCRIMINATED_UNION = "discriminated_union"
    XOR = "xor"
    INTERSECTION = "intersection"
    OPTIONAL = "optional"
    NULLABLE = "nullable"
    NULLISH = "nullish"
    DEFAULT = "default"
    PREFAULT = "prefault"
    CATCH = "catch"
    REFINE = "refine"
    SUPER_REFINE = "super_refine"
    TRANSFORM = "transform"
    PREPROCESS = "preprocess"
    PIPE = "pipe"
    BRAND = "brand"
    READONLY = "readonly"
    LAZY = "lazy"
    CODEC = "codec"


# Leaf kinds eligible for the inline object-field check.
FAST_PATH_KINDS = frozenset({
    ValidatorKind.STRING,
    ValidatorKind.NUMBER,
    ValidatorKind.INTEGER,
    ValidatorKind.BOOLEAN,
    ValidatorKind.DATE,
})


class Validator(ABC, Generic[T]):
    """Base class for all validators with composable combinators."""

    kind: ClassVar[ValidatorKind] = ValidatorKind.CUSTOM
    description: str | None = None

    @abstractmethod
    def _parse(self, value: Any, ctx: ParseContext) -> ParseResult[T]:
        """Validate ``value``, returning a result with paths relative to it."""

    async def _parse_async(self, value: Any, ctx: ParseContext) -> ParseResult[T]:
        return self._parse(value, ctx)

    # -- entry points ----------------------------------------------------

    def safe_parse(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> ParseResult[T]:
        """Validate a value, returning a ParseResult instead of raising.

        Args:
            value: Raw input; omit it to validate an absent value
            messages: Optional resolver used for this call's issue messages

        Returns:
            ParseResult with either data or error
        """
        ctx = ParseContext.create(messages)
        try:
            return self._parse(value, ctx)
        except ValidationError as e:
            # A hand-written _parse that delegated to a child's parse()
            return ParseResult.fail(e)

    def parse(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> T:
        """Validate a value, returning the output or raising ValidationError."""
        return self.safe_parse(value, messages=messages).unwrap()

    async def safe_parse_async(
        self, value: Any = MISSING, *, messages: MessageResolver | None = None
    ) -> ParseResult[T]:
        """Async variant of ``safe_parse``; awaits async callbacks."""
        ctx = ParseContext.create(messages)
        try:
            return await self._parse_async(value, ctx)
        except ValidationError as e:
            return ParseResult.fail(e)

    async def parse_async(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> T:
        """Async variant of ``parse``."""
        return (await self.safe_parse_async(value, messages=messages)).unwrap()

    def is_valid(self, value: Any = MISSING) -> bool:
        return self.safe_parse(value).success

    def parse_or_default(self, value: Any, default: T) -> T:
        """Parse ``value``, returning ``default`` if it is invalid.

        Raises:
            SchemaDefinitionError: If ``default`` itself does not validate
        """
        result = self.safe_parse(value)
        if result.success:
            return result.data
        default_result = self.safe_parse(default)
        if not default_result.success:
            raise SchemaDefinitionError(
                f"Invalid default value provided: {default_result.error}",
                context={"issues": default_result.issues},
            )
        return default_result.data

    # -- capabilities ----------------------------------------------------

    def accepts_type(self, value: Any) -> bool:
        """Cheap pre-check: False only if this validator can never accept ``value``."""
        return True

    @property
    def fast_check(self) -> Callable[[Any], bool] | None:
        """Inline type predicate when the whole validator reduces to it."""
        return None

    # -- combinators -----------------------------------------------------

    def optional(self) -> OptionalValidator[T]:
        from .wrappers import OptionalValidator
        return OptionalValidator(self)

    def nullable(self) -> NullableValidator[T]:
        from .wrappers import NullableValidator
        return NullableValidator(self)

    def nullish(self) -> NullishValidator[T]:
        from .wrappers import NullishValidator
        return NullishValidator(self)

    def default(self, value: T) -> DefaultValidator[T]:
        """Return ``value`` for absent input, without re-validating it per call.

        Raises:
            SchemaDefinitionError: If ``value`` does not validate against this schema
        """
        from .wrappers import DefaultValidator
        return DefaultValidator(self, value)

    def prefault(self, value: Any) -> PrefaultValidator[T]:
        """Parse ``value`` through this schema whenever input is absent."""
        from .wrappers import PrefaultValidator
        return PrefaultValidator(self, value)

    def catch(self, fallback: T) -> CatchValidator[T]:
        from .wrappers import CatchValidator
        return CatchValidator(self, fallback)

    def refine(
        self,
        predicate: Callable[[T], bool | Awaitable[bool]],
        message: str | None = None,
        *,
        path: tuple | list = (),
        code: str | None = None,
    ) -> RefineValidator[T]:
        from .wrappers import RefineValidator
        return RefineValidator(self, predicate, message, path=tuple(path), code=code)

    def super_refine(self, refinement: Callable[..., Any]) -> SuperRefineValidator[T]:
        from .wrappers import SuperRefineValidator
        return SuperRefineValidator(self, refinement)

    def transform(self, transformer: Callable[[T], U | Awaitable[U]]) -> TransformValidator[U]:
        from .wrappers import TransformValidator
        return TransformValidator(self, transformer)

    def pipe(self, next_validator: Validator[U]) -> PipeValidator[U]:
        from .wrappers import PipeValidator
        return PipeValidator(self, next_validator)

    def brand(self, name: str = "") -> BrandValidator[T]:
        from .wrappers import BrandValidator
        return BrandValidator(self, name)

    def readonly(self) -> ReadonlyValidator[T]:
        from .wrappers import ReadonlyValidator
        return ReadonlyValidator(self)

    def apply(self, fn: Callable[[Validator[T]], Validator[U]]) -> Validator[U]:
        """Hand this validator to ``fn`` and return whatever validator it builds."""
        return fn(self)

    def array(self) -> ArrayValidator[T]:
        from .collections import ArrayValidator
        return ArrayValidator(self)

    def describe(self, description: str) -> Validator[T]:
        """Return a copy carrying a human-readable description."""
        clone = copy.copy(self)
        clone.description = description
        return clone

    def __or__(self, other: Validator[Any]) -> UnionValidator[Any]:
        from .unions import UnionValidator
        return UnionValidator([self, other])

    def __and__(self, other: Validator[Any]) -> IntersectionValidator[Any]:
        from .intersection import IntersectionValidator
        return IntersectionValidator(self, other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Awaiting:
    """Request from an ``_evaluate`` generator to await a callback's result."""

    __slots__ = ("awaitable", "operation")

    def __init__(self, awaitable: Awaitable[Any], operation: str):
        self.awaitable = awaitable
        self.operation = operation

    def discard(self) -> None:
        """Release an awaitable that will never be awaited."""
        close = getattr(self.awaitable, "close", None)
        if close is not None:
            close()


Request = Union["tuple[Validator[Any], Any]", Awaiting]
Steps = Generator[Request, Any, ParseResult[Any]]


class CompositeValidator(Validator[T]):
    """Validator whose semantics are written once as an ``_evaluate`` generator.

    The generator yields ``(child, value)`` to have a child validate a value
    (receiving the child's ParseResult) and ``Awaiting(obj, operation)`` when
    a user callback returned an awaitable (receiving the awaited value, or
    having the callback's exception thrown in). In synchronous parsing an
    ``Awaiting`` request ends evaluation with an ``async_not_supported``
    issue instead of leaking an unresolved awaitable as data.
    """

    @abstractmethod
    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        """Yield child requests; return the final ParseResult."""

    def _parse(self, value: Any, ctx: ParseContext) -> ParseResult[T]:
        return run_steps(self._evaluate(value, ctx), ctx)

    async def _parse_async(self, value: Any, ctx: ParseContext) -> ParseResult[T]:
        return await run_steps_async(self._evaluate(value, ctx), ctx)


def run_steps(steps: Steps, ctx: ParseContext) -> ParseResult[Any]:
    """Drive an ``_evaluate`` generator synchronously."""
    try:
        request = next(steps)
        while True:
            if isinstance(request, Awaiting):
                request.discard()
                steps.close()
                return ctx.fail(ErrorKind.ASYNC_NOT_SUPPORTED, operation=request.operation)
            child, child_value = request
            request = steps.send(child._parse(child_value, ctx))
    except StopIteration as done:
        return done.value


async def run_steps_async(steps: Steps, ctx: ParseContext) -> ParseResult[Any]:
    """Drive an ``_evaluate`` generator, awaiting children and callbacks."""
    try:
        request = next(steps)
        while True:
            if isinstance(request, Awaiting):
                try:
                    outcome = await request.awaitable
                except Exception as e:
                    request = steps.throw(e)
                    continue
                request = steps.send(outcome)
            else:
                child, child_value = request
                request = steps.send(await child._parse_async(child_value, ctx))
    except StopIteration as done:
        return done.value


def call_user(fn: Callable[..., Any], *args: Any, operation: str) -> Generator[Awaiting, Any, Any]:
    """Call a user callback from inside ``_evaluate``.

    Use as ``outcome = yield from call_user(fn, data, operation="transform")``.
    Exceptions (including those of an awaited coroutine) propagate to the
    caller's ``try`` block.
    """
    outcome = fn(*args)
    if inspect.isawaitable(outcome):
        outcome = yield Awaiting(outcome, operation)
    return outcome
