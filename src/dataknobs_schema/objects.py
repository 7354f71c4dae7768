"""Object validator: field-by-field validation of mapping inputs.

Field failures are aggregated across every field, each path-prefixed with
its field name. Unknown keys are handled per mode:

- ``strip`` (default): dropped from the output
- ``strict``: one ``unrecognized_keys`` issue naming all of them
- ``passthrough`` (alias ``loose``): copied to the output verbatim
- ``catchall(validator)``: each validated by ``validator``

Keys in ``DANGEROUS_KEYS`` are never copied from the input in any mode.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from .base import CompositeValidator, Steps, Validator, ValidatorKind
from .exceptions import SchemaDefinitionError
from .issues import ErrorKind
from .result import ParseContext, ParseResult
from .utils import MISSING, is_dangerous_key, is_record


class UnknownKeys(str, Enum):
    STRIP = "strip"
    STRICT = "strict"
    PASSTHROUGH = "passthrough"


Shape = Mapping[str, Validator[Any]]


def _check_shape(shape: Shape) -> dict[str, Validator[Any]]:
    checked: dict[str, Validator[Any]] = {}
    for key, child in shape.items():
        if not isinstance(key, str):
            raise SchemaDefinitionError(
                f"Object field names must be strings, got {type(key).__name__}",
                context={"key": key},
            )
        if not isinstance(child, Validator):
            raise SchemaDefinitionError(
                f"Field '{key}' must be a validator, got {type(child).__name__}",
                context={"key": key},
            )
        checked[key] = child
    return checked


class ObjectValidator(CompositeValidator[dict]):
    """Validates a mapping against a shape of named field validators.

    Example:
        ```python
        user = s.object({"name": s.string(), "age": s.number().optional()})
        user.parse({"name": "Ada"})          # {'name': 'Ada'}
        user.strict().safe_parse({"name": "Ada", "x": 1}).success  # False
        ```
    """

    kind = ValidatorKind.OBJECT

    def __init__(
        self,
        shape: Shape | None = None,
        unknown_keys: UnknownKeys | str = UnknownKeys.STRIP,
        catchall: Validator[Any] | None = None,
        message: str | None = None,
    ):
        self._shape = _check_shape(shape or {})
        self.unknown_keys = UnknownKeys(unknown_keys)
        if catchall is not None and not isinstance(catchall, Validator):
            raise SchemaDefinitionError("catchall() requires a validator")
        self._catchall = catchall
        self._message = message
        # (key, validator, inline type predicate or None), in shape order
        self._fields = tuple(
            (key, child, child.fast_check) for key, child in self._shape.items()
        )

    @property
    def shape(self) -> Mapping[str, Validator[Any]]:
        """Read-only view of the field validators, in declaration order."""
        return MappingProxyType(self._shape)

    def field(self, key: str) -> Validator[Any] | None:
        return self._shape.get(key)

    def accepts_type(self, value: Any) -> bool:
        return is_record(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        if not is_record(value):
            return ParseResult.fail([ctx.type_issue("object", value, self._message)])

        output: dict[Any, Any] = {}
        issues = []
        for key, child, fast in self._fields:
            field_value = value.get(key, MISSING)
            if fast is not None and fast(field_value):
                output[key] = field_value
                continue
            result = yield child, field_value
            if result.success:
                if result.data is not MISSING:
                    output[key] = result.data
            else:
                issues.extend(issue.prefixed(key) for issue in result.issues)

        if self._catchall is not None or self.unknown_keys is not UnknownKeys.STRIP:
            unknown = [key for key in value if key not in self._shape]
            if unknown:
                if self._catchall is not None:
                    for key in unknown:
                        if is_dangerous_key(key):
                            continue
                        result = yield self._catchall, value[key]
                        if result.success:
                            if result.data is not MISSING:
                                output[key] = result.data
                        else:
                            issues.extend(issue.prefixed(key) for issue in result.issues)
                elif self.unknown_keys is UnknownKeys.STRICT:
                    issues.append(ctx.issue(ErrorKind.UNRECOGNIZED_KEYS, keys=unknown))
                elif self.unknown_keys is UnknownKeys.PASSTHROUGH:
                    for key in unknown:
                        if not is_dangerous_key(key):
                            output[key] = value[key]

        if issues:
            return ParseResult.fail(issues)
        return ParseResult.ok(output)

    # -- derivation --------------------------------------------------------

    def _derive(
        self,
        shape: Shape | None = None,
        unknown_keys: UnknownKeys | None = None,
        catchall: Validator[Any] | None | object = MISSING,
    ) -> ObjectValidator:
        derived = ObjectValidator(
            self._shape if shape is None else shape,
            self.unknown_keys if unknown_keys is None else unknown_keys,
            self._catchall if catchall is MISSING else catchall,
            self._message,
        )
        derived.description = self.description
        return derived

    def strict(self) -> ObjectValidator:
        return self._derive(unknown_keys=UnknownKeys.STRICT, catchall=None)

    def strip(self) -> ObjectValidator:
        return self._derive(unknown_keys=UnknownKeys.STRIP, catchall=None)

    def passthrough(self) -> ObjectValidator:
        return self._derive(unknown_keys=UnknownKeys.PASSTHROUGH, catchall=None)

    loose = passthrough

    def catchall(self, validator: Validator[Any]) -> ObjectValidator:
        """Validate every unknown key's value with ``validator``."""
        return self._derive(catchall=validator)

    def _require_keys(self, keys: Iterable[str], operation: str) -> list[str]:
        keys = list(keys)
        unknown = [key for key in keys if key not in self._shape]
        if unknown:
            raise SchemaDefinitionError(
                f"{operation}() got keys not in the shape: {unknown}",
                context={"keys": unknown, "shape": list(self._shape)},
            )
        return keys

    def partial(self, *keys: str) -> ObjectValidator:
        """Make every field (or only ``keys``) optional."""
        selected = set(self._require_keys(keys, "partial")) if keys else set(self._shape)
        return self._derive(shape={
            key: _make_optional(child) if key in selected else child
            for key, child in self._shape.items()
        })

    def deep_partial(self) -> ObjectValidator:
        """Make every field optional, recursing into nested objects and arrays."""
        return self._derive(shape={
            key: _make_optional(_deep_partial(child)) for key, child in self._shape.items()
        })

    def required(self, *keys: str) -> ObjectValidator:
        """Remove the ``optional`` wrapper from every field (or only ``keys``)."""
        selected = set(self._require_keys(keys, "required")) if keys else set(self._shape)
        return self._derive(shape={
            key: _strip_optional(child) if key in selected else child
            for key, child in self._shape.items()
        })

    def extend(self, fields: Shape) -> ObjectValidator:
        """New object with ``fields`` added; colliding keys take the new validator."""
        return self._derive(shape={**self._shape, **_check_shape(fields)})

    def safe_extend(self, fields: Shape) -> ObjectValidator:
        """Like ``extend`` but refuses to shadow existing fields.

        Raises:
            SchemaDefinitionError: If any key in ``fields`` already exists
        """
        collisions = [key for key in fields if key in self._shape]
        if collisions:
            raise SchemaDefinitionError(
                f"safe_extend() would overwrite existing fields: {collisions}",
                context={"keys": collisions},
            )
        return self.extend(fields)

    def merge(self, other: ObjectValidator) -> ObjectValidator:
        """Combine two objects; ``other`` wins on key collisions and for unknown-key mode."""
        if not isinstance(other, ObjectValidator):
            raise SchemaDefinitionError("merge() requires an object validator")
        return self._derive(
            shape={**self._shape, **other._shape},
            unknown_keys=other.unknown_keys,
            catchall=other._catchall,
        )

    def pick(self, *keys: str) -> ObjectValidator:
        selected = set(self._require_keys(keys, "pick"))
        return self._derive(shape={k: v for k, v in self._shape.items() if k in selected})

    def omit(self, *keys: str) -> ObjectValidator:
        selected = set(self._require_keys(keys, "omit"))
        return self._derive(shape={k: v for k, v in self._shape.items() if k not in selected})

    def keyof(self) -> Validator[str]:
        """Enum validator over this object's field names."""
        from .leaves import EnumValidator
        return EnumValidator(list(self._shape))

    def __repr__(self) -> str:
        return f"ObjectValidator({list(self._shape)!r}, unknown_keys={self.unknown_keys.value!r})"


def _make_optional(child: Validator[Any]) -> Validator[Any]:
    if child.kind is ValidatorKind.OPTIONAL:
        return child
    return child.optional()


def _strip_optional(child: Validator[Any]) -> Validator[Any]:
    while child.kind is ValidatorKind.OPTIONAL:
        child = child.unwrap()
    return child


def _deep_partial(child: Validator[Any]) -> Validator[Any]:
    """Partial version of nested object/array/optional/nullable structures."""
    handlers: dict[ValidatorKind, Callable[[Any], Validator[Any]]] = {
        ValidatorKind.OBJECT: lambda v: v.deep_partial(),
        ValidatorKind.OPTIONAL: lambda v: _deep_partial(v.unwrap()).optional(),
        ValidatorKind.NULLABLE: lambda v: _deep_partial(v.unwrap()).nullable(),
        ValidatorKind.ARRAY: lambda v: v.with_element(_deep_partial(v.element)),
    }
    handler = handlers.get(child.kind)
    return handler(child) if handler is not None else child
