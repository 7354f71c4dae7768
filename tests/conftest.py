"""Shared fixtures for dataknobs_schema tests."""

import pytest

from dataknobs_schema import s
from dataknobs_schema import settings as settings_module
from dataknobs_schema.messages import get_locale_registry


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore the locale, resolver and settings changed by a test."""
    registry = get_locale_registry()
    locale = registry.active
    current = settings_module.get_settings()
    yield
    registry.set_resolver(None)
    registry.activate(locale)
    settings_module._current = current


@pytest.fixture
def user_schema():
    """Object with a required string and a required number."""
    return s.object({"name": s.string(), "age": s.number()})


@pytest.fixture
def shape_schema():
    """Discriminated union of two shapes keyed by ``type``."""
    return s.discriminated_union(
        "type",
        s.object({"type": s.literal("circle"), "radius": s.number().positive()}),
        s.object({"type": s.literal("square"), "side": s.number().positive()}),
    )
