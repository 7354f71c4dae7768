"""Runtime validation and transformation of untyped input.

Build a schema from composable validators, then ``parse`` (raises
``ValidationError``) or ``safe_parse`` (returns a ``ParseResult``).

Example:
    ```python
    from dataknobs_schema import s

    user = s.object({
        "name": s.string().min(1),
        "age": s.integer().nonnegative().optional(),
        "tags": s.string().array().default([]),
    })

    result = user.safe_parse({"name": "", "age": -1})
    if not result:
        print(result.error.prettify())
    ```
"""

from .base import FAST_PATH_KINDS, CompositeValidator, Validator, ValidatorKind
from .builders import CoerceBuilders, SchemaBuilders, s
from .codec import CodecValidator
from .coercion import Coercer
from .collections import ArrayValidator, RecordMode, RecordValidator, SetValidator, TupleValidator
from .exceptions import (
    ConfigurationError,
    LocaleNotFoundError,
    SchemaDefinitionError,
    SchemaError,
    ValidationError,
)
from .formatting import ErrorTree, FlattenedError, flatten_error, prettify_error, treeify_error
from .intersection import IntersectionValidator
from .issues import ErrorKind, Issue, format_path
from .leaves import (
    AnyValidator,
    BooleanValidator,
    CustomValidator,
    DateValidator,
    EnumValidator,
    ExternalValidator,
    IntegerValidator,
    LeafValidator,
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
from .messages import (
    ENGLISH,
    LocaleRegistry,
    MessageCatalog,
    MessageResolver,
    get_locale,
    get_message_resolver,
    register_locale,
    set_locale,
    set_message_resolver,
)
from .objects import ObjectValidator, UnknownKeys
from .result import ParseContext, ParseResult
from .settings import SchemaSettings, configure, get_settings
from .unions import DiscriminatedUnionValidator, UnionValidator, XorValidator
from .utils import MISSING
from .wrappers import (
    BrandValidator,
    CatchValidator,
    DefaultValidator,
    LazyValidator,
    NullableValidator,
    NullishValidator,
    OptionalValidator,
    PipeValidator,
    PrefaultValidator,
    PreprocessValidator,
    ReadonlyValidator,
    RefinementContext,
    RefineValidator,
    SuperRefineValidator,
    TransformValidator,
)

__version__ = "0.1.0"

__all__ = [
    "s",
    "MISSING",
    # Contract
    "Validator",
    "CompositeValidator",
    "ValidatorKind",
    "FAST_PATH_KINDS",
    "ParseResult",
    "ParseContext",
    "SchemaBuilders",
    "CoerceBuilders",
    "Coercer",
    # Leaves
    "LeafValidator",
    "StringValidator",
    "StringBoolValidator",
    "NumberValidator",
    "IntegerValidator",
    "BooleanValidator",
    "DateValidator",
    "LiteralValidator",
    "EnumValidator",
    "NoneValidator",
    "MissingValidator",
    "AnyValidator",
    "UnknownValidator",
    "NeverValidator",
    "NanValidator",
    "CustomValidator",
    "ExternalValidator",
    # Wrappers
    "OptionalValidator",
    "NullableValidator",
    "NullishValidator",
    "DefaultValidator",
    "PrefaultValidator",
    "CatchValidator",
    "RefineValidator",
    "RefinementContext",
    "SuperRefineValidator",
    "TransformValidator",
    "PreprocessValidator",
    "PipeValidator",
    "BrandValidator",
    "ReadonlyValidator",
    "LazyValidator",
    # Aggregates
    "ObjectValidator",
    "UnknownKeys",
    "ArrayValidator",
    "SetValidator",
    "TupleValidator",
    "RecordValidator",
    "RecordMode",
    "UnionValidator",
    "DiscriminatedUnionValidator",
    "XorValidator",
    "IntersectionValidator",
    "CodecValidator",
    # Errors
    "ErrorKind",
    "Issue",
    "format_path",
    "SchemaError",
    "SchemaDefinitionError",
    "LocaleNotFoundError",
    "ConfigurationError",
    "ValidationError",
    "ErrorTree",
    "FlattenedError",
    "treeify_error",
    "flatten_error",
    "prettify_error",
    # Messages and settings
    "MessageResolver",
    "MessageCatalog",
    "LocaleRegistry",
    "ENGLISH",
    "register_locale",
    "set_locale",
    "get_locale",
    "set_message_resolver",
    "get_message_resolver",
    "SchemaSettings",
    "configure",
    "get_settings",
]
