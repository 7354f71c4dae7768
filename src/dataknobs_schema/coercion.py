"""Input coercion for ``s.coerce.*`` leaves.

Coercion runs on the raw input before a leaf's type check. It is best
effort: a value that cannot be converted is returned unchanged so the
leaf reports its usual ``invalid_type`` issue.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable

from .utils import MISSING

logger = logging.getLogger(__name__)

DATETIME_FORMATS = (
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%S.%f',
    '%Y/%m/%d %H:%M:%S',
    '%Y/%m/%d',
    '%Y-%m-%d',
    '%d/%m/%Y',
    '%m/%d/%Y',
)

TRUE_STRINGS = ('true', '1', 'yes', 'y', 'on')
FALSE_STRINGS = ('false', '0', 'no', 'n', 'off')


class Coercer:
    """Type coercion with predictable results.

    Never raises for unconvertible input; the value comes back as-is.
    ``None`` and ``MISSING`` are never coerced.
    """

    def coerce(self, value: Any, target: str) -> Any:
        """Coerce a value toward the target leaf type.

        Args:
            value: Raw input value
            target: One of ``string``, ``number``, ``integer``, ``boolean``, ``date``

        Returns:
            The coerced value, or ``value`` unchanged if it cannot be converted
        """
        if value is None or value is MISSING:
            return value
        try:
            return self._coerce_value(value, target)
        except (ValueError, TypeError, OverflowError) as e:
            logger.debug("Cannot coerce %s to %s: %s", type(value).__name__, target, e)
            return value

    def for_target(self, target: str) -> Callable[[Any], Any]:
        """Single-argument coercion function for ``target``."""
        if target not in ("string", "number", "integer", "boolean", "date"):
            raise ValueError(f"Unknown coercion target: {target}")
        return lambda value: self.coerce(value, target)

    def _coerce_value(self, value: Any, target: str) -> Any:
        """Perform the actual coercion.

        Raises:
            ValueError: If the value cannot be represented as ``target``
        """
        # String coercion
        if target == 'string':
            if isinstance(value, str):
                return value
            if isinstance(value, bool):
                return 'true' if value else 'false'
            if isinstance(value, date):
                return value.isoformat()
            return str(value)

        # Number coercion
        elif target == 'number':
            if isinstance(value, bool):
                return 1 if value else 0
            if isinstance(value, (int, float)):
                return value
            if isinstance(value, str):
                text = value.strip()
                if not text:
                    raise ValueError("empty string is not a number")
                if text.lower() in ('true', 'false'):
                    return 1 if text.lower() == 'true' else 0
                try:
                    return int(text)
                except ValueError:
                    return float(text)
            return float(value)

        # Integer coercion
        elif target == 'integer':
            if isinstance(value, bool):
                return 1 if value else 0
            if isinstance(value, str):
                text = value.strip()
                if text.lower() in ('true', 'false'):
                    return 1 if text.lower() == 'true' else 0
                # Handle hex, octal, binary
                if text[:2].lower() == '0x':
                    return int(text, 16)
                if text[:2].lower() == '0o':
                    return int(text, 8)
                if text[:2].lower() == '0b':
                    return int(text, 2)
                try:
                    return int(text)
                except ValueError:
                    value = float(text)
            if isinstance(value, float):
                if value != int(value):
                    raise ValueError(f"Float {value} cannot be losslessly converted to int")
                return int(value)
            return int(value)

        # Boolean coercion
        elif target == 'boolean':
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                word = value.strip().lower()
                if word in TRUE_STRINGS:
                    return True
                if word in FALSE_STRINGS:
                    return False
                raise ValueError(f"String '{value}' is not a valid boolean")
            if isinstance(value, (int, float)):
                return bool(value)
            raise TypeError(f"Cannot coerce {type(value).__name__} to boolean")

        # Date coercion
        elif target == 'date':
            if isinstance(value, date):
                return value
            if isinstance(value, str):
                text = value.strip()
                try:
                    return datetime.fromisoformat(
                        text[:-1] + '+00:00' if text.endswith(('Z', 'z')) else text
                    )
                except ValueError:
                    pass
                for fmt in DATETIME_FORMATS:
                    try:
                        return datetime.strptime(text, fmt)
                    except ValueError:
                        continue
                raise ValueError(f"Could not parse datetime from '{value}'")
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                # Unix timestamp in seconds
                return datetime.fromtimestamp(value, tz=timezone.utc)
            raise TypeError(f"Cannot coerce {type(value).__name__} to date")

        raise ValueError(f"Unknown coercion target: {target}")


default_coercer = Coercer()
