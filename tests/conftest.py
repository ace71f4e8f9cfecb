"""
Shared pytest fixtures and configuration for spine-variants tests.

This module provides:
- Settings cache isolation (every test sees fresh environment-driven settings)
- A small two-variant ``VariantSchema`` used across schema tests
- A representative ``Model`` entity used across model and CLI tests
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Ensure spine_variants package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spine_variants.core.settings import clear_settings_cache
from spine_variants.schema import VariantSchema


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear cached settings and any SPINE_VARIANTS_* overrides around each test."""
    for key in [k for k in os.environ if k.startswith("SPINE_VARIANTS_")]:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def api() -> VariantSchema:
    """Two variants: storage shape (default) and wire shape."""
    return VariantSchema(variants=("database", "api"), default="database", name="Api")


@pytest.fixture
def user_entity():
    """A Model entity exercising every common preset."""
    from spine_variants.model import (
        BooleanFromNumber,
        Class,
        DateTimeInsert,
        DateTimeUpdate,
        FieldOption,
        Generated,
        JsonFromString,
        Sensitive,
    )
    from spine_variants.schema import Array, Integer, String

    return Class("User")({
        "id": Generated(Integer),
        "name": String,
        "password": Sensitive(String),
        "tags": JsonFromString(Array(String)),
        "active": BooleanFromNumber,
        "nickname": FieldOption(String),
        "created_at": DateTimeInsert,
        "updated_at": DateTimeUpdate,
    })
