"""Registry of named value transforms.

Storage-facing presets (``JsonFromString``, ``BooleanFromNumber``, the ISO
timestamp fields) attach a named decode/encode pair to their descriptors.
Keeping the pairs in one registry means the CLI can list them and custom
presets can reuse them by name instead of re-implementing the conversion.

Tags:
    spine-variants, schema, registry, transforms

Doc-Types:
    api-reference
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from spine_variants.core.logging import get_logger
from spine_variants.core.timestamps import ensure_utc, from_iso8601, to_iso8601

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValueTransform:
    """A named pair of functions converting between two representations.

    ``decode`` maps the external representation to the canonical one and
    ``encode`` maps it back. Either may raise ``ValueError``/``TypeError``;
    the descriptor wrapping the transform turns that into an Issue.
    """

    name: str
    decode: Callable[[Any], Any]
    encode: Callable[[Any], Any]
    description: str = ""


_registry: dict[str, ValueTransform] = {}


def register_transform(
    name: str,
    decode: Callable[[Any], Any],
    encode: Callable[[Any], Any],
    description: str = "",
) -> ValueTransform:
    """Register a transform under ``name``."""
    if name in _registry:
        raise ValueError(f"Transform '{name}' is already registered")
    transform = ValueTransform(name=name, decode=decode, encode=encode, description=description)
    _registry[name] = transform
    logger.debug("transform_registered", name=name)
    return transform


def get_transform(name: str) -> ValueTransform:
    """Get a transform by name."""
    if name not in _registry:
        available = ", ".join(sorted(_registry))
        raise KeyError(f"Transform '{name}' not found. Available: {available}")
    return _registry[name]


def list_transforms() -> list[str]:
    """List all registered transform names."""
    return sorted(_registry)


def unregister_transform(name: str) -> None:
    """Remove a transform (for testing)."""
    _registry.pop(name, None)


def _decode_json(text: str) -> Any:
    return json.loads(text)


def _encode_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _decode_flag(number: int) -> bool:
    return number == 1


def _encode_flag(flag: bool) -> int:
    return 1 if flag else 0


register_transform(
    "json_string",
    _decode_json,
    _encode_json,
    "JSON document stored as text",
)
register_transform(
    "boolean_number",
    _decode_flag,
    _encode_flag,
    "Boolean stored as integer 0/1",
)
register_transform(
    "iso_datetime",
    from_iso8601,
    to_iso8601,
    "UTC datetime stored as an ISO 8601 string",
)
register_transform(
    "utc_datetime",
    ensure_utc,
    ensure_utc,
    "Native datetime normalized to UTC",
)
register_transform(
    "uuid_string",
    uuid.UUID,
    str,
    "UUID stored as its canonical string form",
)


__all__ = [
    "ValueTransform",
    "get_transform",
    "list_transforms",
    "register_transform",
    "unregister_transform",
]
