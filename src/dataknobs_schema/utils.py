"""Value helpers shared by the validators."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any


class _MissingType:
    """Type of the ``MISSING`` sentinel (an absent value)."""

    _instance: _MissingType | None = None

    def __new__(cls) -> _MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _MissingType:
        return self

    def __deepcopy__(self, memo: dict) -> _MissingType:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _MissingType()
"""Marks an absent value: a key not present in a mapping, or no input at all.

``None`` is a present value (JSON ``null``); ``MISSING`` is the absence of one.
"""

# Keys never copied onto an output mapping, whatever the object mode.
DANGEROUS_KEYS = frozenset({"__proto__", "constructor", "prototype"})


def is_dangerous_key(key: Any) -> bool:
    return isinstance(key, str) and key in DANGEROUS_KEYS


def is_record(value: Any) -> bool:
    """True for mapping inputs accepted by object and record validators."""
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_set(value: Any) -> bool:
    return isinstance(value, (set, frozenset))


def is_number(value: Any) -> bool:
    """True for real ints and floats, excluding bools and NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def type_name(value: Any) -> str:
    """Short name of a value's runtime type, as used in issue messages."""
    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "nan" if math.isnan(value) else "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (datetime, date)):
        return "date"
    if isinstance(value, (set, frozenset)):
        return "set"
    if isinstance(value, bytes):
        return "bytes"
    return type(value).__name__
