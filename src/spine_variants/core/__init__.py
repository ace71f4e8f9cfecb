"""Spine Variants Core -- errors, results, logging and settings.

Manifesto:
    The schema engine is pure and synchronous, but it still needs the same
    cross-cutting pieces every spine project carries: a structured error
    hierarchy, an explicit Result envelope, structlog logging and
    environment-driven settings. They live here so ``spine_variants.schema``
    depends on nothing but this layer, pydantic and structlog.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (VariantError, DecodeError)
        result.py          Result[T] envelope (Ok / Err / try_result_with)
        protocols.py       TypeDescriptor protocol
        timestamps.py      UTC + ISO 8601 helpers (stdlib-only)

    Layer 2 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        VariantSettings (pydantic-settings)

Tags:
    spine-variants, foundation, errors, result, logging, settings

Doc-Types:
    package-overview, module-index
"""

from spine_variants.core.errors import (
    DecodeError,
    DefinitionError,
    EmptySchemaError,
    EncodeError,
    ErrorCategory,
    ErrorContext,
    Issue,
    OutputKeyCollisionError,
    ReservedNameError,
    UnknownVariantError,
    UnreachableFieldError,
    VariantError,
    is_definition_error,
)
from spine_variants.core.logging import (
    LogContext,
    bind_context,
    configure_logging,
    get_logger,
)
from spine_variants.core.protocols import TypeDescriptor
from spine_variants.core.result import (
    Err,
    Ok,
    Result,
    partition_results,
    try_result_with,
)
from spine_variants.core.settings import VariantSettings, clear_settings_cache, get_settings
from spine_variants.core.timestamps import from_iso8601, to_iso8601, utc_now

__all__ = [
    # Errors
    "DecodeError",
    "DefinitionError",
    "EmptySchemaError",
    "EncodeError",
    "ErrorCategory",
    "ErrorContext",
    "Issue",
    "OutputKeyCollisionError",
    "ReservedNameError",
    "UnknownVariantError",
    "UnreachableFieldError",
    "VariantError",
    "is_definition_error",
    # Result
    "Err",
    "Ok",
    "Result",
    "partition_results",
    "try_result_with",
    # Protocols
    "TypeDescriptor",
    # Logging
    "LogContext",
    "bind_context",
    "configure_logging",
    "get_logger",
    # Settings
    "VariantSettings",
    "clear_settings_cache",
    "get_settings",
    # Timestamps
    "from_iso8601",
    "to_iso8601",
    "utc_now",
]
