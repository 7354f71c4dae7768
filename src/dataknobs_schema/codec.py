"""Bidirectional validators.

A codec pairs an input-side validator with an output-side validator and a
``decode``/``encode`` function pair. Decoding (``parse``) validates the raw
input, decodes it and validates the decoded value; encoding runs the mirror
path. Failures on either side, and exceptions from either function, end up
as issues in the same ``ValidationError``.

Example:
    ```python
    from dataknobs_schema import s

    cents = s.codec(
        s.string(), s.integer(),
        decode=lambda text: int(text.replace(".", "")),
        encode=lambda value: f"{value // 100}.{value % 100:02d}",
    )
    cents.parse("12.50")   # 1250
    cents.encode(1250)     # '12.50'
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .base import CompositeValidator, Steps, Validator, ValidatorKind, call_user, run_steps, run_steps_async
from .exceptions import SchemaDefinitionError, ValidationError
from .issues import ErrorKind
from .messages import MessageResolver
from .result import ParseContext, ParseResult
from .utils import MISSING

logger = logging.getLogger(__name__)


class CodecValidator(CompositeValidator[Any]):
    """Validator that also supports the inverse (``encode``) direction."""

    kind = ValidatorKind.CODEC

    def __init__(
        self,
        input_schema: Validator[Any],
        output_schema: Validator[Any],
        decode: Callable[[Any], Any],
        encode: Callable[[Any], Any],
    ):
        if not isinstance(input_schema, Validator) or not isinstance(output_schema, Validator):
            raise SchemaDefinitionError("codec() requires input and output validators")
        if not callable(decode) or not callable(encode):
            raise SchemaDefinitionError("codec() requires callable decode and encode functions")
        self.input_schema = input_schema
        self.output_schema = output_schema
        self._decode = decode
        self._encode = encode

    def accepts_type(self, value: Any) -> bool:
        return self.input_schema.accepts_type(value)

    def _evaluate(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.input_schema, value
        if not result.success:
            return result
        try:
            decoded = yield from call_user(self._decode, result.data, operation="decode")
        except Exception as e:
            logger.debug("Codec decode raised: %r", e)
            return ctx.fail(ErrorKind.DECODE_FAILED, reason=str(e) or type(e).__name__)
        return (yield self.output_schema, decoded)

    def _evaluate_encode(self, value: Any, ctx: ParseContext) -> Steps:
        result = yield self.output_schema, value
        if not result.success:
            return result
        try:
            encoded = yield from call_user(self._encode, result.data, operation="encode")
        except Exception as e:
            logger.debug("Codec encode raised: %r", e)
            return ctx.fail(ErrorKind.ENCODE_FAILED, reason=str(e) or type(e).__name__)
        return (yield self.input_schema, encoded)

    # -- decode direction (aliases of the parse entry points) --------------

    def decode(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> Any:
        return self.parse(value, messages=messages)

    def safe_decode(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> ParseResult[Any]:
        return self.safe_parse(value, messages=messages)

    async def decode_async(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> Any:
        return await self.parse_async(value, messages=messages)

    async def safe_decode_async(
        self, value: Any = MISSING, *, messages: MessageResolver | None = None
    ) -> ParseResult[Any]:
        return await self.safe_parse_async(value, messages=messages)

    # -- encode direction ----------------------------------------------------

    def safe_encode(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> ParseResult[Any]:
        """Validate ``value`` as output, encode it and validate the encoded value.

        An async ``encode`` function yields an ``async_not_supported`` issue here;
        use ``safe_encode_async`` for those.
        """
        ctx = ParseContext.create(messages)
        try:
            return run_steps(self._evaluate_encode(value, ctx), ctx)
        except ValidationError as e:
            return ParseResult.fail(e)

    def encode(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> Any:
        return self.safe_encode(value, messages=messages).unwrap()

    async def safe_encode_async(
        self, value: Any = MISSING, *, messages: MessageResolver | None = None
    ) -> ParseResult[Any]:
        ctx = ParseContext.create(messages)
        try:
            return await run_steps_async(self._evaluate_encode(value, ctx), ctx)
        except ValidationError as e:
            return ParseResult.fail(e)

    async def encode_async(self, value: Any = MISSING, *, messages: MessageResolver | None = None) -> Any:
        return (await self.safe_encode_async(value, messages=messages)).unwrap()

    def __repr__(self) -> str:
        return f"CodecValidator({self.input_schema!r} <-> {self.output_schema!r})"
