"""
Canonical protocol definitions for spine-variants.

The composition engine never inspects how a value is validated. It depends on
one structural contract, ``TypeDescriptor``, and treats every implementation
as a black box. The pydantic-backed descriptors in
``spine_variants.schema.descriptors`` satisfy it, and so does every
``ExtractedSchema`` (which is how nested structs compose).

Features:
    - **TypeDescriptor:** validate / decode / encode contract
    - **Optional attributes:** ``is_optional``, ``auto``, ``lossy`` are read with
      ``getattr`` defaults so minimal third-party descriptors still work

Guardrails:
    ❌ DON'T: Raise from ``decode``/``encode`` for bad data
    ✅ DO: Return ``Err(DecodeError)`` / ``Err(EncodeError)``

    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts; implementations live in schema/

Performance:
    - Protocol overhead: Zero at runtime (structural subtyping)
    - isinstance() checks: Enabled via @runtime_checkable

Tags:
    protocols, type-descriptor, structural-typing, spine-variants
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from spine_variants.core.result import Result


@runtime_checkable
class TypeDescriptor(Protocol):
    """
    Validate/decode/encode capability for a single value type.

    ``decode`` maps an external (wire or storage) representation to the
    canonical value; ``encode`` maps it back; ``validate`` checks a value that
    is already canonical.

    Example:
        >>> def decode_all(d: TypeDescriptor, values: list) -> list[Result]:
        ...     return [d.decode(v) for v in values]
    """

    @property
    def name(self) -> str:
        """Human-readable descriptor name (used in CLI output and errors)."""
        ...

    def validate(self, value: Any) -> bool:
        """Return True if ``value`` is a valid canonical value."""
        ...

    def decode(self, external: Any) -> Result[Any]:
        """Decode an external representation into the canonical value."""
        ...

    def encode(self, value: Any) -> Result[Any]:
        """Encode a canonical value into its external representation."""
        ...


__all__ = ["TypeDescriptor"]
