"""Wrapper combinators: validators that wrap exactly one other validator.

Each wrapper adds one behavior (absent/null handling, fallbacks, user
refinements, transforms) and otherwise delegates to the wrapped validator.
User callbacks may be sync or async; in synchronous parsing an async
callback is reported as an ``async_not_supported`` issue.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable
from types import MappingProxyType
from typing import Any, TypeVar

from .base import CompositeValidator, Steps, Validator, ValidatorKind, call_user
from .exceptions import SchemaDefinitionError
from .issues import ErrorKind, Issue, PathSegment
from .result import ParseContext, ParseResult
from .utils import MISSING

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _describe_error(e: Exception) -> str:
    return str(e) or type(e).__name__


def _only_async_issues(result: ParseResult[Any]) -> bool:
    return all(issue.kind is ErrorKind.ASYNC_NOT_SUPPORTED for issue in result.issues)


def validate_configured_value(inner: Validator[Any], value: Any, role: str) -> None:
    """Reject a default/fallback value the wrapped validator would reject.

    Values that can only be checked by awaiting an async callback are
    accepted here; they are checked on use where that applies.

    Raises:
        SchemaDefinitionError: If ``value`` does not validate
    """
    result = inner.safe_parse(copy.deepcopy(value))
    if result.success:
        return
    if _only_async_issues(result):
        logger.debug("Skipping construction check of %s value: schema is asynchronous", role)
        return
    raise SchemaDefinitionError(
        f"Invalid {role} value {value!r}: {result.error}",
        context={"role": role, "value": value, "issues": [i.to_dict() for i in result.issues]},
    )


class WrapperValidator(CompositeValidator[T]):
    """Base for validators wrapping a single inner validator."""

    def __init__(self, inner: Validator[Any]):
        if not isinstance(inner, Validator):
            raise SchemaDefinitionError(
                f"{type(self).__name__} requires a validator, got {type(inner).__name__}"
            )
        self.inner = inner

    def unwrap(self) -> Validator[Any]:
        """The wrapped validator."""
        return self.inner

    def accepts_type(self, value: Any) -> bool:
        return self.inner.accepts_type(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.inner!r})"


class OptionalValidator(WrapperValidator[T]):
    """Passes ``MISSING`` through; anything else goes to the inner validator."""

    kind = ValidatorKind.OPTIONAL

    def accepts_type(self, value: Any) -> bool:
        return value is MISSING or self.inner.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if value is MISSING:
            return ParseResult.ok(MISSING)
        return (yield self.inner, value)


class NullableValidator(WrapperValidator[T]):
    """Passes ``None`` through; anything else goes to the inner validator."""

    kind = ValidatorKind.NULLABLE

    def accepts_type(self, value: Any) -> bool:
        return value is None or self.inner.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if value is None:
            return ParseResult.ok(None)
        return (yield self.inner, value)


class NullishValidator(WrapperValidator[T]):
    kind = ValidatorKind.NULLISH

    def accepts_type(self, value: Any) -> bool:
        return value is None or value is MISSING or self.inner.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if value is None or value is MISSING:
            return ParseResult.ok(value)
        return (yield self.inner, value)


class DefaultValidator(WrapperValidator[T]):
    """Substitutes a value for absent input without re-validating it.

    The value is checked once, here, so an invalid default can never be
    built. Each absent input receives its own deep copy.
    """

    kind = ValidatorKind.DEFAULT

    def __init__(self, inner: Validator[Any], value: Any):
        super().__init__(inner)
        validate_configured_value(inner, value, "default")
        self.default_value = copy.deepcopy(value)

    def accepts_type(self, value: Any) -> bool:
        return value is MISSING or self.inner.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if value is MISSING:
            return ParseResult.ok(copy.deepcopy(self.default_value))
        return (yield self.inner, value)

    def remove_default(self) -> Validator[Any]:
        return self.inner


class PrefaultValidator(WrapperValidator[T]):
    """Parses a configured value through the inner validator whenever input is absent."""

    kind = ValidatorKind.PREFAULT

    def __init__(self, inner: Validator[Any], value: Any):
        super().__init__(inner)
        validate_configured_value(inner, value, "prefault")
        self.prefault_value = copy.deepcopy(value)

    def accepts_type(self, value: Any) -> bool:
        return value is MISSING or self.inner.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if value is MISSING:
            value = copy.deepcopy(self.prefault_value)
        return (yield self.inner, value)


class CatchValidator(WrapperValidator[T]):
    """Returns a fallback instead of failing.

    An ``async_not_supported`` failure is passed through, so synchronous
    parsing still reports an async inner validator.
    """

    kind = ValidatorKind.CATCH

    def __init__(self, inner: Validator[Any], fallback: Any):
        super().__init__(inner)
        validate_configured_value(inner, fallback, "catch")
        self.fallback = copy.deepcopy(fallback)

    def accepts_type(self, value: Any) -> bool:
        return True

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.inner, value
        if result.success or _only_async_issues(result):
            return result
        logger.debug("Caught %d issue(s); using fallback", len(result.issues))
        return ParseResult.ok(copy.deepcopy(self.fallback))

    def remove_catch(self) -> Validator[Any]:
        return self.inner


class RefineValidator(WrapperValidator[T]):
    """Runs a predicate on the inner validator's output.

    A false result (or an exception raised by the predicate) becomes a
    ``custom`` issue carrying ``message``.
    """

    kind = ValidatorKind.REFINE

    def __init__(
        self,
        inner: Validator[Any],
        predicate: Callable[[Any], Any],
        message: str | None = None,
        path: tuple[PathSegment, ...] = (),
        code: str | None = None,
    ):
        super().__init__(inner)
        if not callable(predicate):
            raise SchemaDefinitionError("refine() requires a callable predicate")
        self.predicate = predicate
        self.message = message
        self.path = tuple(path)
        self.code = code

    def _issue(self, ctx: ParseContext, **extra: Any) -> ParseResult[Any]:
        context = dict(extra)
        if self.code is not None:
            context["code"] = self.code
        return ctx.fail(ErrorKind.CUSTOM, self.message, self.path, **context)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.inner, value
        if not result.success:
            return result
        try:
            passed = yield from call_user(self.predicate, result.data, operation="refinement")
        except Exception as e:
            logger.debug("Refinement predicate raised: %r", e)
            return self._issue(ctx, error=_describe_error(e))
        if not passed:
            return self._issue(ctx)
        return result


class RefinementContext:
    """Issue collector handed to ``super_refine`` callbacks.

    Example:
        ```python
        def check_passwords(data, ctx):
            if data["password"] != data["confirm"]:
                ctx.add_issue("Passwords do not match", path=["confirm"])

        schema = s.object({...}).super_refine(check_passwords)
        ```
    """

    def __init__(self, value: Any, parse_context: ParseContext):
        self.value = value
        self._ctx = parse_context
        self.issues: list[Issue] = []

    def add_issue(
        self,
        message: str | None = None,
        *,
        path: tuple | list = (),
        kind: ErrorKind = ErrorKind.CUSTOM,
        **context: Any,
    ) -> None:
        self.issues.append(self._ctx.issue(kind, message, tuple(path), **context))


class SuperRefineValidator(WrapperValidator[T]):
    """Runs ``refinement(data, ctx)``, which may add any number of issues."""

    kind = ValidatorKind.SUPER_REFINE

    def __init__(self, inner: Validator[Any], refinement: Callable[..., Any]):
        super().__init__(inner)
        if not callable(refinement):
            raise SchemaDefinitionError("super_refine() requires a callable")
        self.refinement = refinement

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.inner, value
        if not result.success:
            return result
        collector = RefinementContext(result.data, ctx)
        try:
            yield from call_user(self.refinement, result.data, collector, operation="refinement")
        except Exception as e:
            logger.debug("super_refine callback raised: %r", e)
            collector.add_issue(f"Refinement failed: {_describe_error(e)}", error=_describe_error(e))
        if collector.issues:
            return ParseResult.fail(collector.issues)
        return result


class TransformValidator(WrapperValidator[Any]):
    """Maps the inner validator's output through ``transformer``."""

    kind = ValidatorKind.TRANSFORM

    def __init__(self, inner: Validator[Any], transformer: Callable[[Any], Any]):
        super().__init__(inner)
        if not callable(transformer):
            raise SchemaDefinitionError("transform() requires a callable")
        self.transformer = transformer

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.inner, value
        if not result.success:
            return result
        try:
            output = yield from call_user(self.transformer, result.data, operation="transform")
        except Exception as e:
            logger.debug("Transform raised: %r", e)
            return ctx.fail(ErrorKind.TRANSFORM_FAILED, reason=_describe_error(e))
        return ParseResult.ok(output)


class PreprocessValidator(WrapperValidator[Any]):
    """Maps the raw input through ``fn`` before the inner validator sees it."""

    kind = ValidatorKind.PREPROCESS

    def __init__(self, fn: Callable[[Any], Any], inner: Validator[Any]):
        super().__init__(inner)
        if not callable(fn):
            raise SchemaDefinitionError("preprocess() requires a callable")
        self.fn = fn

    def accepts_type(self, value: Any) -> bool:
        return True

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        try:
            prepared = yield from call_user(self.fn, value, operation="preprocess")
        except Exception as e:
            logger.debug("Preprocess raised: %r", e)
            return ctx.fail(ErrorKind.PREPROCESS_FAILED, reason=_describe_error(e))
        return (yield self.inner, prepared)


class PipeValidator(CompositeValidator[Any]):
    """Feeds the output of ``first`` into ``second``."""

    kind = ValidatorKind.PIPE

    def __init__(self, first: Validator[Any], second: Validator[Any]):
        self.first = first
        self.second = second

    def accepts_type(self, value: Any) -> bool:
        return self.first.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.first, value
        if not result.success:
            return result
        return (yield self.second, result.data)

    def __repr__(self) -> str:
        return f"PipeValidator({self.first!r}, {self.second!r})"


class BrandValidator(WrapperValidator[T]):
    """Nominal marker for type checkers; a pass-through at runtime."""

    kind = ValidatorKind.BRAND

    def __init__(self, inner: Validator[Any], name: str = ""):
        super().__init__(inner)
        self.brand_name = name

    @property
    def fast_check(self) -> Callable[[Any], bool] | None:
        return self.inner.fast_check

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        return (yield self.inner, value)


def freeze(value: Any) -> Any:
    """Shallow read-only view of a container output."""
    if isinstance(value, dict):
        return MappingProxyType(value)
    if isinstance(value, list):
        return tuple(value)
    if isinstance(value, set):
        return frozenset(value)
    return value


class ReadonlyValidator(WrapperValidator[T]):
    """Returns container outputs as read-only views (mapping proxy, tuple, frozenset).

    Validation itself is unchanged.
    """

    kind = ValidatorKind.READONLY

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.inner, value
        if not result.success:
            return result
        return ParseResult.ok(freeze(result.data))


class LazyValidator(CompositeValidator[Any]):
    """Defers building a validator until first use, for recursive schemas.

    Example:
        ```python
        category = s.object({
            "name": s.string(),
            "children": s.lazy(lambda: category).array(),
        })
        ```
    """

    kind = ValidatorKind.LAZY

    def __init__(self, thunk: Callable[[], Validator[Any]]):
        if not callable(thunk):
            raise SchemaDefinitionError("lazy() requires a callable returning a validator")
        self._thunk = thunk
        self._resolved: Validator[Any] | None = None
        self._lock = threading.Lock()

    @property
    def schema(self) -> Validator[Any]:
        """The resolved validator (built once, then memoized)."""
        resolved = self._resolved
        if resolved is not None:
            return resolved
        with self._lock:
            if self._resolved is None:
                built = self._thunk()
                if not isinstance(built, Validator):
                    raise SchemaDefinitionError(
                        f"lazy() thunk must return a validator, got {type(built).__name__}"
                    )
                self._resolved = built
                logger.debug("Resolved lazy schema to %s", type(built).__name__)
            return self._resolved

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        try:
            schema = self.schema
        except Exception as e:
            logger.debug("Lazy schema could not be resolved: %r", e)
            return ctx.fail(
                ErrorKind.CUSTOM,
                f"Lazy schema could not be resolved: {_describe_error(e)}",
                error=_describe_error(e),
            )
        return (yield schema, value)

    def __repr__(self) -> str:
        return "LazyValidator(resolved)" if self._resolved is not None else "LazyValidator(pending)"
