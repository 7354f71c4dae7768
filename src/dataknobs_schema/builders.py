"""The ``s`` namespace: builder functions for every validator.

Example:
    ```python
    from dataknobs_schema import s

    shape = s.discriminated_union(
        "type",
        s.object({"type": s.literal("circle"), "radius": s.number().positive()}),
        s.object({"type": s.literal("square"), "side": s.number().positive()}),
    )
    shape.parse({"type": "circle", "radius": 2})
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from . import codecs
from .base import Validator
from .codec import CodecValidator
from .coercion import Coercer, default_coercer
from .collections import ArrayValidator, RecordMode, RecordValidator, SetValidator, TupleValidator
from .intersection import IntersectionValidator
from .leaves import (
    DEFAULT_FALSY,
    DEFAULT_TRUTHY,
    AnyValidator,
    BooleanValidator,
    CustomValidator,
    DateValidator,
    EnumValidator,
    ExternalValidator,
    IntegerValidator,
    LiteralValidator,
    MissingValidator,
    NanValidator,
    NeverValidator,
    NoneValidator,
    NumberValidator,
    StringBoolValidator,
    StringValidator,
    UnknownValidator,
)
from .objects import ObjectValidator, UnknownKeys
from .unions import DiscriminatedUnionValidator, UnionValidator, XorValidator
from .wrappers import LazyValidator, PipeValidator, PreprocessValidator


def _options(options: tuple[Any, ...]) -> Iterable[Validator[Any]]:
    # Accept both union(a, b) and union([a, b])
    if len(options) == 1 and isinstance(options[0], (list, tuple)):
        return options[0]
    return options


class CoerceBuilders:
    """Leaves that coerce raw input before their type check (``s.coerce.*``)."""

    def __init__(self, coercer: Coercer = default_coercer):
        self._coercer = coercer

    def string(self, message: str | None = None) -> StringValidator:
        return StringValidator(message=message).with_coercion(self._coercer.for_target("string"))

    def number(self, message: str | None = None) -> NumberValidator:
        return NumberValidator(message=message).with_coercion(self._coercer.for_target("number"))

    def integer(self, message: str | None = None) -> IntegerValidator:
        return IntegerValidator(message=message).with_coercion(self._coercer.for_target("integer"))

    def boolean(self, message: str | None = None) -> BooleanValidator:
        return BooleanValidator(message=message).with_coercion(self._coercer.for_target("boolean"))

    def date(self, message: str | None = None) -> DateValidator:
        return DateValidator(message=message).with_coercion(self._coercer.for_target("date"))


class SchemaBuilders:
    """Entry point for building validators."""

    def __init__(self) -> None:
        self.coerce = CoerceBuilders()

    # -- leaves --------------------------------------------------------------

    def string(self, message: str | None = None) -> StringValidator:
        return StringValidator(message=message)

    def number(self, message: str | None = None) -> NumberValidator:
        return NumberValidator(message=message)

    def integer(self, message: str | None = None) -> IntegerValidator:
        return IntegerValidator(message=message)

    def boolean(self, message: str | None = None) -> BooleanValidator:
        return BooleanValidator(message=message)

    def date(self, message: str | None = None) -> DateValidator:
        return DateValidator(message=message)

    def stringbool(
        self,
        truthy: Iterable[str] | None = None,
        falsy: Iterable[str] | None = None,
        case_sensitive: bool = False,
        message: str | None = None,
    ) -> StringBoolValidator:
        """Boolean from words such as "yes"/"no"; see ``DEFAULT_TRUTHY`` and ``DEFAULT_FALSY``."""
        return StringBoolValidator(
            DEFAULT_TRUTHY if truthy is None else truthy,
            DEFAULT_FALSY if falsy is None else falsy,
            case_sensitive,
            message,
        )

    def literal(self, *values: Any, message: str | None = None) -> LiteralValidator:
        return LiteralValidator(*values, message=message)

    def enum(self, values: Iterable[Any] | type[Enum], message: str | None = None) -> EnumValidator:
        return EnumValidator(values, message)

    def none(self, message: str | None = None) -> NoneValidator:
        return NoneValidator(message=message)

    def missing(self, message: str | None = None) -> MissingValidator:
        return MissingValidator(message=message)

    def any(self) -> AnyValidator:
        return AnyValidator()

    def unknown(self) -> UnknownValidator:
        return UnknownValidator()

    def never(self, message: str | None = None) -> NeverValidator:
        return NeverValidator(message=message)

    def nan(self, message: str | None = None) -> NanValidator:
        return NanValidator(message=message)

    def custom(self, predicate: Callable[[Any], Any] | None = None, message: str | None = None) -> CustomValidator:
        return CustomValidator(predicate, message)

    def external(self, leaf: Any) -> ExternalValidator:
        """Wrap a foreign object exposing ``safe_parse``/``safeParse`` or ``parse``."""
        return ExternalValidator(leaf)

    # -- aggregates ----------------------------------------------------------

    def object(self, shape: Mapping[str, Validator[Any]] | None = None, message: str | None = None) -> ObjectValidator:
        return ObjectValidator(shape, message=message)

    def strict_object(self, shape: Mapping[str, Validator[Any]] | None = None) -> ObjectValidator:
        return ObjectValidator(shape, UnknownKeys.STRICT)

    def loose_object(self, shape: Mapping[str, Validator[Any]] | None = None) -> ObjectValidator:
        return ObjectValidator(shape, UnknownKeys.PASSTHROUGH)

    def array(self, element: Validator[Any], message: str | None = None) -> ArrayValidator:
        return ArrayValidator(element, message=message)

    def set(self, element: Validator[Any], message: str | None = None) -> SetValidator:
        return SetValidator(element, message=message)

    def tuple(self, *items: Validator[Any], rest: Validator[Any] | None = None) -> TupleValidator:
        return TupleValidator(_options(items), rest)

    def record(self, value: Validator[Any], key: Validator[Any] | None = None) -> RecordValidator:
        return RecordValidator(value, key)

    def partial_record(self, value: Validator[Any], key: Validator[Any] | None = None) -> RecordValidator:
        return RecordValidator(value, key, RecordMode.PARTIAL)

    def loose_record(self, value: Validator[Any], key: Validator[Any] | None = None) -> RecordValidator:
        return RecordValidator(value, key, RecordMode.LOOSE)

    def map(self, key: Validator[Any], value: Validator[Any]) -> RecordValidator:
        """Mapping with validated keys and values; enumerated keys need not all be present."""
        return RecordValidator(value, key, RecordMode.PARTIAL)

    def union(self, *options: Validator[Any], message: str | None = None) -> UnionValidator:
        return UnionValidator(_options(options), message)

    def discriminated_union(
        self, discriminator: str, *options: Validator[Any], message: str | None = None
    ) -> DiscriminatedUnionValidator:
        return DiscriminatedUnionValidator(discriminator, _options(options), message)

    def xor(self, *options: Validator[Any], message: str | None = None) -> XorValidator:
        return XorValidator(_options(options), message)

    def intersection(self, left: Validator[Any], right: Validator[Any]) -> IntersectionValidator:
        return IntersectionValidator(left, right)

    # -- wrappers ------------------------------------------------------------

    def optional(self, validator: Validator[Any]) -> Validator[Any]:
        return validator.optional()

    def nullable(self, validator: Validator[Any]) -> Validator[Any]:
        return validator.nullable()

    def nullish(self, validator: Validator[Any]) -> Validator[Any]:
        return validator.nullish()

    def lazy(self, thunk: Callable[[], Validator[Any]]) -> LazyValidator:
        return LazyValidator(thunk)

    def preprocess(self, fn: Callable[[Any], Any], validator: Validator[Any]) -> PreprocessValidator:
        return PreprocessValidator(fn, validator)

    def pipe(self, first: Validator[Any], second: Validator[Any]) -> PipeValidator:
        return PipeValidator(first, second)

    # -- codecs --------------------------------------------------------------

    def codec(
        self,
        input_schema: Validator[Any],
        output_schema: Validator[Any],
        decode: Callable[[Any], Any],
        encode: Callable[[Any], Any],
    ) -> CodecValidator:
        return CodecValidator(input_schema, output_schema, decode, encode)

    string_to_number = staticmethod(codecs.string_to_number)
    string_to_int = staticmethod(codecs.string_to_int)
    string_to_boolean = staticmethod(codecs.string_to_boolean)
    iso_datetime_to_date = staticmethod(codecs.iso_datetime_to_date)
    epoch_seconds_to_date = staticmethod(codecs.epoch_seconds_to_date)
    epoch_millis_to_date = staticmethod(codecs.epoch_millis_to_date)
    json_codec = staticmethod(codecs.json_codec)


s = SchemaBuilders()
