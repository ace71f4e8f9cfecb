"""
Extraction: project a StructSpec onto one variant.

Manifesto:
    A StructSpec is a declaration; an ExtractedSchema is the concrete record
    shape one context actually sees. Extraction is a pure projection:
    declaration order is kept, absent fields are skipped, renamed fields are
    published under their output key. The result is computed once per
    ``(struct, variant)`` pair and shared.

Architecture:
    ::

        StructSpec ── extract(struct, "insert") ──► ExtractedSchema
            │                                           │
            │  _extractions (publish-once cache)        ├── decode(mapping) -> Result[dict]
            └──────────────────────────────────────────►├── encode(value)   -> Result[dict]
                                                        └── validate(value) -> bool

    An ExtractedSchema satisfies the TypeDescriptor protocol, so it can be
    used as the descriptor of a field in another struct.

Features:
    - **Memoized:** ``dict.setdefault`` publishes the first computed schema;
      a racing second computation is discarded
    - **All-or-nothing decode:** every issue is collected, no partial record
    - **Auto values:** applied explicitly during decode, not by caller sentinel

Tags:
    spine-variants, schema, extraction, codec

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from spine_variants.core.errors import DecodeError, EncodeError, Issue, UnknownVariantError
from spine_variants.core.logging import get_logger
from spine_variants.core.protocols import TypeDescriptor
from spine_variants.core.result import Err, Ok, Result
from spine_variants.core.settings import get_settings
from spine_variants.schema.descriptors import prefixed_issues

if TYPE_CHECKING:
    from spine_variants.schema.struct import StructSpec

logger = get_logger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class SchemaField:
    """One field of an extracted schema."""

    name: str
    key: str
    descriptor: TypeDescriptor

    @property
    def is_optional(self) -> bool:
        return bool(getattr(self.descriptor, "is_optional", False))

    @property
    def auto(self) -> Any:
        return getattr(self.descriptor, "auto", None)

    @property
    def lossy(self) -> bool:
        return bool(getattr(self.descriptor, "lossy", False))


@dataclass(frozen=True)
class ExtractedSchema:
    """The concrete record schema of one struct in one variant."""

    struct_name: str
    variant: str
    entries: tuple[SchemaField, ...]

    is_optional = False

    @property
    def name(self) -> str:
        return f"{self.struct_name}.{self.variant}"

    @property
    def fields(self) -> Mapping[str, TypeDescriptor]:
        """Output key -> descriptor, in declaration order."""
        return MappingProxyType({entry.key: entry.descriptor for entry in self.entries})

    def keys(self) -> list[str]:
        return [entry.key for entry in self.entries]

    def field_names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    @property
    def lossy_fields(self) -> frozenset[str]:
        """Field names whose decode does not restore the encoded value."""
        return frozenset(entry.name for entry in self.entries if entry.lossy)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self.entries)

    # ── Decode ───────────────────────────────────────────────────

    def decode(self, external: Any) -> Result[dict[str, Any]]:
        """
        Decode an output-key keyed mapping into a field-name keyed dict.

        Missing optional keys decode to ``None``. Auto-managed fields are
        generated here: ``mode="always"`` replaces any supplied value,
        ``mode="absent"`` only fills a missing one.
        """
        if not isinstance(external, Mapping):
            issue = Issue(path=(), message="Expected a mapping", value=external)
            return self._decode_failed([issue])

        values: dict[str, Any] = {}
        issues: list[Issue] = []
        for entry in self.entries:
            raw = external.get(entry.key, _MISSING)
            auto = entry.auto

            if auto is not None and (auto.mode == "always" or raw is _MISSING or raw is None):
                if raw is not _MISSING and raw is not None:
                    logger.debug(
                        "auto_value_overrode_input",
                        schema=self.name,
                        field=entry.name,
                    )
                values[entry.name] = auto.generate()
                continue

            if raw is _MISSING:
                if entry.is_optional:
                    values[entry.name] = None
                else:
                    issues.append(Issue(path=(entry.key,), message="Missing required key"))
                continue

            result = entry.descriptor.decode(raw)
            if result.is_err():
                issues.extend(prefixed_issues(result.error, entry.key))
            else:
                values[entry.name] = result.value

        if get_settings().excess_keys == "error":
            known = {entry.key for entry in self.entries}
            for key in external:
                if key not in known:
                    issues.append(Issue(path=(str(key),), message="Unexpected key", value=external[key]))

        if issues:
            return self._decode_failed(issues)
        return Ok(values)

    def _decode_failed(self, issues: list[Issue]) -> Err:
        logger.debug("decode_failed", schema=self.name, issues=len(issues))
        return Err(DecodeError.from_issues(issues, schema=self.struct_name, variant=self.variant))

    # ── Encode ───────────────────────────────────────────────────

    def encode(self, value: Any) -> Result[dict[str, Any]]:
        """
        Encode a canonical value (mapping by field name, or any object with
        matching attributes) into an output-key keyed dict.

        ``None`` in an optional field omits the key.
        """
        output: dict[str, Any] = {}
        issues: list[Issue] = []
        for entry in self.entries:
            current = _lookup(value, entry.name)

            if current is _MISSING or current is None:
                auto = entry.auto
                if auto is not None:
                    current = auto.generate()
                elif entry.is_optional:
                    continue
                elif current is _MISSING:
                    issues.append(Issue(path=(entry.name,), message="Missing field"))
                    continue

            result = entry.descriptor.encode(current)
            if result.is_err():
                issues.extend(prefixed_issues(result.error, entry.name))
            else:
                output[entry.key] = result.value

        if issues:
            return Err(EncodeError.from_issues(issues, schema=self.struct_name, variant=self.variant))
        return Ok(output)

    # ── Validate ─────────────────────────────────────────────────

    def check(self, value: Any) -> list[Issue]:
        """Issues with a canonical value; empty when it is valid."""
        issues: list[Issue] = []
        for entry in self.entries:
            current = _lookup(value, entry.name)
            if current is _MISSING or current is None:
                if entry.is_optional or (current is None and entry.descriptor.validate(None)):
                    continue
                issues.append(Issue(path=(entry.name,), message="Missing field"))
                continue
            if not entry.descriptor.validate(current):
                issues.append(
                    Issue(path=(entry.name,), message=f"Expected {entry.descriptor.name}", value=current)
                )
        return issues

    def validate(self, value: Any) -> bool:
        if value is None:
            return False
        return not self.check(value)


def _lookup(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name, _MISSING)
    return getattr(value, name, _MISSING)


def extract(struct: StructSpec, variant: str) -> ExtractedSchema:
    """
    The schema of ``struct`` in ``variant``.

    Raises:
        UnknownVariantError: ``variant`` is not declared on ``struct``.
    """
    if variant not in struct.variants:
        raise UnknownVariantError(variant, struct.variants).with_context(schema=struct.name)
    cached = struct._extractions.get(variant)
    if cached is not None:
        return cached

    entries = tuple(
        SchemaField(name, spec.output_key(variant, name), spec.descriptor(variant))
        for name, spec in struct.items
        if spec.is_present(variant)
    )
    schema = ExtractedSchema(struct.label, variant, entries)
    published = struct._extractions.setdefault(variant, schema)
    if published is schema:
        logger.debug("extraction_cached", struct=struct.label, variant=variant, fields=len(entries))
    return published


__all__ = ["ExtractedSchema", "SchemaField", "extract"]
