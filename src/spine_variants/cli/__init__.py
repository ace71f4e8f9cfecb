"""
CLI layer for spine-variants.

Provides a Typer application for looking at what a model declaration
derives: per-variant schemas, and decode results for sample documents.
All engine logic lives in ``spine_variants.schema``; this package handles
only terminal transport.

Entry point::

    spine-variants --help
"""

from spine_variants.cli.app import app

__all__ = ["app"]
