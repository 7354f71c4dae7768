"""Message resolution for validation issues.

Validators never hardcode user-facing text. Each issue's message comes from
a *resolver*: any callable ``(ErrorKind, context) -> str``. The default
resolver looks up the active locale's ``MessageCatalog`` in a process-wide
``LocaleRegistry``.

The active resolver is read at the start of every top-level ``parse`` call,
so changing the locale while validations are running on other threads
affects calls that start afterwards (the latest value wins; nothing is
snapshotted when the schema is built). A single call can bypass the global
entirely by passing ``messages=`` to ``parse``/``safe_parse``.

Example:
    ```python
    from dataknobs_schema import ErrorKind
    from dataknobs_schema.messages import MessageCatalog, register_locale, set_locale

    register_locale("pirate", MessageCatalog(
        {ErrorKind.INVALID_TYPE: "Arr, {expected} be wanted, not {received}"},
        name="pirate",
    ))
    set_locale("pirate")
    ```
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Dict

from .exceptions import LocaleNotFoundError
from .issues import ErrorKind

logger = logging.getLogger(__name__)

MessageResolver = Callable[[ErrorKind, Mapping[str, Any]], str]
MessageTemplate = str | Callable[[Mapping[str, Any]], str]

# Last-resort text per kind, used when a catalog has no entry or a
# template cannot be rendered with the issue's context.
FALLBACK_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.INVALID_TYPE: "Invalid input",
    ErrorKind.TOO_SMALL: "Value is too small",
    ErrorKind.TOO_BIG: "Value is too big",
    ErrorKind.NOT_MULTIPLE_OF: "Number is not a valid multiple",
    ErrorKind.NOT_FINITE: "Number must be finite",
    ErrorKind.INVALID_FORMAT: "Invalid format",
    ErrorKind.NOT_UNIQUE: "Items must be unique",
    ErrorKind.UNRECOGNIZED_KEYS: "Unrecognized keys",
    ErrorKind.INVALID_UNION: "Invalid input",
    ErrorKind.INVALID_LITERAL: "Invalid literal value",
    ErrorKind.INVALID_ENUM_VALUE: "Invalid enum value",
    ErrorKind.INVALID_INTERSECTION: "Intersection results could not be merged",
    ErrorKind.INVALID_DISCRIMINATOR: "Invalid discriminator value",
    ErrorKind.CUSTOM: "Invalid input",
    ErrorKind.TRANSFORM_FAILED: "Transform failed",
    ErrorKind.PREPROCESS_FAILED: "Preprocess failed",
    ErrorKind.DECODE_FAILED: "Codec decode failed",
    ErrorKind.ENCODE_FAILED: "Codec encode failed",
    ErrorKind.ASYNC_NOT_SUPPORTED: "Asynchronous operation encountered during synchronous parse",
}


def _too_small(ctx: Mapping[str, Any]) -> str:
    origin = ctx.get("origin", "value")
    minimum = ctx.get("minimum")
    inclusive = ctx.get("inclusive", True)
    if origin == "string":
        return f"String must be at least {minimum} characters"
    if origin == "array":
        return f"Array must have at least {minimum} items"
    if origin == "set":
        return f"Set must have at least {minimum} items"
    if origin == "date":
        return f"Date must be after {minimum}" if not inclusive else f"Date must be on or after {minimum}"
    if not inclusive:
        return f"Number must be greater than {minimum}"
    return f"Number must be at least {minimum}"


def _too_big(ctx: Mapping[str, Any]) -> str:
    origin = ctx.get("origin", "value")
    maximum = ctx.get("maximum")
    inclusive = ctx.get("inclusive", True)
    if origin == "string":
        return f"String must be at most {maximum} characters"
    if origin == "array":
        return f"Array must have at most {maximum} items"
    if origin == "set":
        return f"Set must have at most {maximum} items"
    if origin == "date":
        return f"Date must be before {maximum}" if not inclusive else f"Date must be on or before {maximum}"
    if not inclusive:
        return f"Number must be less than {maximum}"
    return f"Number must be at most {maximum}"


def _union(ctx: Mapping[str, Any]) -> str:
    if ctx.get("matches", 0) > 1:
        return f"Input matched {ctx['matches']} options, expected exactly one"
    reasons = ctx.get("reasons") or []
    if not reasons:
        return "No union member matched"
    return "No union member matched: " + "; ".join(reasons)


ENGLISH_MESSAGES: Dict[ErrorKind, MessageTemplate] = {
    ErrorKind.INVALID_TYPE: "Expected {expected}, received {received}",
    ErrorKind.TOO_SMALL: _too_small,
    ErrorKind.TOO_BIG: _too_big,
    ErrorKind.NOT_MULTIPLE_OF: "Number must be a multiple of {multiple_of}",
    ErrorKind.NOT_FINITE: "Number must be finite",
    ErrorKind.INVALID_FORMAT: "Invalid {format}",
    ErrorKind.NOT_UNIQUE: "Array must contain unique items",
    ErrorKind.UNRECOGNIZED_KEYS: lambda ctx: "Unexpected keys: " + ", ".join(map(str, ctx.get("keys", ()))),
    ErrorKind.INVALID_UNION: _union,
    ErrorKind.INVALID_LITERAL: "Expected {expected}, received {received}",
    ErrorKind.INVALID_ENUM_VALUE: lambda ctx: (
        "Expected one of [" + ", ".join(map(repr, ctx.get("options", ()))) + f"], received {ctx.get('received')!r}"
    ),
    ErrorKind.INVALID_INTERSECTION: "Intersection results could not be merged: {reason}",
    ErrorKind.INVALID_DISCRIMINATOR: lambda ctx: (
        f"Invalid discriminator value for \"{ctx.get('discriminator')}\". Expected one of: "
        + ", ".join(map(repr, ctx.get("options", ())))
        + f", received: {ctx.get('received')!r}"
    ),
    ErrorKind.CUSTOM: "Invalid input",
    ErrorKind.TRANSFORM_FAILED: "Transform failed: {reason}",
    ErrorKind.PREPROCESS_FAILED: "Preprocess failed: {reason}",
    ErrorKind.DECODE_FAILED: "Codec decode failed: {reason}",
    ErrorKind.ENCODE_FAILED: "Codec encode failed: {reason}",
    ErrorKind.ASYNC_NOT_SUPPORTED: "Async {operation} encountered during synchronous parse; use the async entry point",
}


class MessageCatalog:
    """Kind-to-template table for one locale.

    A template is either a ``str.format`` pattern rendered against the
    issue context, or a callable receiving the context. Missing kinds fall
    back to ``fallback`` (another catalog) and finally to
    ``FALLBACK_MESSAGES``.

    Instances are callable and therefore usable directly as resolvers.
    """

    def __init__(
        self,
        templates: Mapping[ErrorKind, MessageTemplate],
        name: str = "custom",
        fallback: MessageCatalog | None = None,
    ):
        self.name = name
        self._templates = dict(templates)
        self._fallback = fallback

    def template_for(self, kind: ErrorKind) -> MessageTemplate | None:
        if kind in self._templates:
            return self._templates[kind]
        if self._fallback is not None:
            return self._fallback.template_for(kind)
        return None

    def __call__(self, kind: ErrorKind, context: Mapping[str, Any]) -> str:
        template = self.template_for(kind)
        if template is None:
            return FALLBACK_MESSAGES.get(kind, "Invalid input")
        try:
            if callable(template):
                return template(context)
            return template.format_map(context)
        except (KeyError, IndexError, ValueError, TypeError) as e:
            logger.debug("Message template for %s could not be rendered: %s", kind.value, e)
            return FALLBACK_MESSAGES.get(kind, "Invalid input")

    def __repr__(self) -> str:
        return f"MessageCatalog(name={self.name!r}, kinds={len(self._templates)})"


ENGLISH = MessageCatalog(ENGLISH_MESSAGES, name="en")


class LocaleRegistry:
    """Thread-safe registry of message catalogs keyed by locale name.

    Tracks the active locale and an optional resolver override. Reads take
    the lock so a caller always observes a consistent (locale, resolver)
    pair.
    """

    def __init__(self, default_locale: str = "en"):
        self._catalogs: Dict[str, MessageCatalog] = {"en": ENGLISH}
        self._active = default_locale
        self._override: MessageResolver | None = None
        self._lock = threading.RLock()

    def register(self, locale: str, catalog: MessageCatalog, allow_overwrite: bool = True) -> None:
        """Register a catalog under ``locale``.

        Raises:
            ValueError: If the locale exists and ``allow_overwrite`` is False
        """
        with self._lock:
            if not allow_overwrite and locale in self._catalogs:
                raise ValueError(f"Locale '{locale}' already registered")
            self._catalogs[locale] = catalog
        logger.debug("Registered message locale %s", locale)

    def get(self, locale: str) -> MessageCatalog:
        with self._lock:
            if locale not in self._catalogs:
                raise LocaleNotFoundError(locale, sorted(self._catalogs))
            return self._catalogs[locale]

    def locales(self) -> list[str]:
        with self._lock:
            return sorted(self._catalogs)

    @property
    def active(self) -> str:
        with self._lock:
            return self._active

    def activate(self, locale: str) -> None:
        """Make ``locale`` the active locale.

        Raises:
            LocaleNotFoundError: If the locale is not registered
        """
        with self._lock:
            if locale not in self._catalogs:
                raise LocaleNotFoundError(locale, sorted(self._catalogs))
            self._active = locale
        logger.debug("Active message locale is now %s", locale)

    def set_resolver(self, resolver: MessageResolver | None) -> None:
        with self._lock:
            self._override = resolver

    def resolver(self) -> MessageResolver:
        """The resolver in effect right now."""
        with self._lock:
            if self._override is not None:
                return self._override
            return self._catalogs[self._active]


_registry = LocaleRegistry()


def get_locale_registry() -> LocaleRegistry:
    return _registry


def register_locale(locale: str, catalog: MessageCatalog) -> None:
    _registry.register(locale, catalog)


def set_locale(locale: str) -> None:
    _registry.activate(locale)


def get_locale() -> str:
    return _registry.active


def set_message_resolver(resolver: MessageResolver | None) -> None:
    """Install a process-wide resolver; ``None`` restores the locale catalogs."""
    _registry.set_resolver(resolver)


def get_message_resolver() -> MessageResolver:
    return _registry.resolver()


def resolve_message(
    resolver: MessageResolver,
    kind: ErrorKind,
    context: Mapping[str, Any],
) -> str:
    """Ask ``resolver`` for text, falling back to the per-kind constant."""
    try:
        message = resolver(kind, context)
    except Exception as e:
        logger.debug("Message resolver failed for %s: %s", kind.value, e)
        message = None
    if not message:
        return FALLBACK_MESSAGES.get(kind, "Invalid input")
    return str(message)
