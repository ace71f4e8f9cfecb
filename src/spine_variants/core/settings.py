"""Runtime settings for spine-variants.

Decode behaviour that legitimately differs between deployments (how strictly
primitive values are checked, whether unknown payload keys are tolerated,
timestamp precision) is configured here rather than hard-coded in the engine.

All fields can be set via ``SPINE_VARIANTS_*`` environment variables (e.g.
``SPINE_VARIANTS_EXCESS_KEYS=error``) or a ``.env`` file.

Examples:
    >>> from spine_variants.core.settings import get_settings
    >>> get_settings().excess_keys
    'ignore'

Tags:
    settings, configuration, pydantic, environment, spine-variants

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VariantSettings(BaseSettings):
    """spine-variants configuration.

    Fields
    ──────
    log_level            : Structlog log level
    log_format           : ``json`` for aggregation, ``console`` for terminals
    strict_types         : pydantic strict mode for adapter descriptors
    excess_keys          : ``ignore`` or ``error`` on unknown payload keys
    eager_extraction     : precompute every variant's schema when a struct is built
    timestamp_precision  : precision of auto-managed timestamps
    """

    model_config = SettingsConfigDict(
        env_prefix="SPINE_VARIANTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")

    # ── Decoding ─────────────────────────────────────────────────
    strict_types: bool = Field(
        default=True,
        description="Reject lax coercions such as '1' -> 1 in primitive descriptors",
    )
    excess_keys: Literal["ignore", "error"] = Field(
        default="ignore",
        description="What to do with payload keys no field maps to",
    )

    # ── Definition ───────────────────────────────────────────────
    eager_extraction: bool = Field(
        default=True,
        description="Compute every variant's extraction at struct construction",
    )

    # ── Timestamps ───────────────────────────────────────────────
    timestamp_precision: Literal["seconds", "milliseconds", "microseconds"] = Field(
        default="milliseconds"
    )


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, VariantSettings] = {}


def get_settings(*, _force_reload: bool = False) -> VariantSettings:
    """Load, validate, and cache a :class:`VariantSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = VariantSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["VariantSettings", "clear_settings_cache", "get_settings"]
