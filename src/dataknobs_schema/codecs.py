"""Ready-made codecs for common string/number/date conversions.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any

from .base import Validator
from .codec import CodecValidator
from .leaves import BooleanValidator, DateValidator, IntegerValidator, NumberValidator, StringValidator, UnknownValidator

TRUE_WORDS = frozenset({"true", "1", "yes", "y", "on"})
FALSE_WORDS = frozenset({"false", "0", "no", "n", "off"})


def _text_to_number(text: str) -> float:
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _text_to_int(text: str) -> int:
    return int(text.strip())


def _text_to_bool(text: str) -> bool:
    word = text.strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise ValueError(f"'{text}' is not a recognized boolean")


def _parse_iso(text: str) -> datetime:
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _as_utc(value: date) -> datetime:
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def string_to_number() -> CodecValidator:
    """``"3.5"`` <-> ``3.5``."""
    return CodecValidator(StringValidator(), NumberValidator(), _text_to_number, str)


def string_to_int() -> CodecValidator:
    return CodecValidator(StringValidator(), IntegerValidator(), _text_to_int, str)


def string_to_boolean() -> CodecValidator:
    """``"yes"``/``"no"`` (and friends) <-> ``True``/``False``; encodes as ``"true"``/``"false"``."""
    return CodecValidator(
        StringValidator(),
        BooleanValidator(),
        _text_to_bool,
        lambda value: "true" if value else "false",
    )


def iso_datetime_to_date() -> CodecValidator:
    """ISO 8601 text <-> ``datetime``. A trailing ``Z`` is read as UTC."""
    return CodecValidator(
        StringValidator(),
        DateValidator(),
        _parse_iso,
        lambda value: value.isoformat(),
    )


def epoch_seconds_to_date() -> CodecValidator:
    """Unix seconds <-> aware UTC ``datetime``. Naive datetimes encode as UTC."""
    return CodecValidator(
        NumberValidator().finite(),
        DateValidator(),
        lambda seconds: datetime.fromtimestamp(seconds, tz=timezone.utc),
        lambda value: _as_utc(value).timestamp(),
    )


def epoch_millis_to_date() -> CodecValidator:
    return CodecValidator(
        NumberValidator().finite(),
        DateValidator(),
        lambda millis: datetime.fromtimestamp(millis / 1000, tz=timezone.utc),
        lambda value: round(_as_utc(value).timestamp() * 1000),
    )


def json_codec(schema: Validator[Any] | None = None) -> CodecValidator:
    """JSON text <-> parsed value, optionally validated by ``schema``."""
    return CodecValidator(
        StringValidator(),
        schema if schema is not None else UnknownValidator(),
        json.loads,
        json.dumps,
    )
