"""
Spine Variants - declare a record once, derive a schema per variant.

Layout:
- spine_variants.core: errors, Result, logging, settings
- spine_variants.schema: descriptors, FieldSpec, StructSpec, extraction, entities
- spine_variants.model: the select/insert/update/json variant set and presets
- spine_variants.cli: developer CLI
"""

__version__ = "0.1.0"

from spine_variants.core import *  # noqa
from spine_variants.schema import *  # noqa
