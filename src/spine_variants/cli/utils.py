"""
CLI utility helpers -- target loading and output formatting.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from spine_variants.core.errors import DecodeError, VariantError
from spine_variants.schema.extract import ExtractedSchema
from spine_variants.schema.struct import StructSpec

console = Console()
err_console = Console(stderr=True)

EXIT_DECODE_FAILED = 1
EXIT_BAD_TARGET = 2


# ── Target loading ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Target:
    """A struct to inspect, and the entity class built from it if there is one."""

    label: str
    struct: StructSpec
    entity: type | None = None

    def schema(self, variant: str) -> ExtractedSchema:
        return self.struct.extract(variant)

    def decode(self, variant: str, payload: Any):
        if self.entity is not None:
            return self.entity.variant(variant).decode(payload)
        return self.schema(variant).decode(payload)


def fail(message: str, code: int = EXIT_BAD_TARGET) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    return typer.Exit(code=code)


def load_target(spec: str) -> Target:
    """Import ``module:attribute`` and wrap the StructSpec or entity class it names."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise fail(f"Target must look like 'package.module:Name', got {spec!r}")

    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        obj: Any = importlib.import_module(module_name)
    except VariantError as e:
        raise fail(f"{type(e).__name__}: {e.message}") from e
    except ImportError as e:
        raise fail(f"Cannot import {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise fail(f"{module_name!r} has no attribute {attr_path!r}") from e

    if isinstance(obj, StructSpec):
        return Target(obj.label, obj)
    struct = getattr(obj, "struct", None)
    if isinstance(obj, type) and isinstance(struct, StructSpec):
        return Target(obj.__name__, struct, obj)
    raise fail(f"{spec!r} is neither a StructSpec nor an entity class")


# ── Output helpers ───────────────────────────────────────────────────────


def descriptor_flags(entry: Any) -> list[str]:
    flags = []
    if entry.is_optional:
        flags.append("optional")
    auto = entry.auto
    if auto is not None:
        flags.append(f"auto:{auto.mode}")
    if entry.lossy:
        flags.append("lossy")
    return flags


def schema_to_dict(schema: ExtractedSchema) -> list[dict[str, Any]]:
    return [
        {
            "field": entry.name,
            "key": entry.key,
            "descriptor": entry.descriptor.name,
            "flags": descriptor_flags(entry),
        }
        for entry in schema.entries
    ]


def schema_table(schema: ExtractedSchema, *, default: bool = False) -> Table:
    title = f"{schema.name} (default)" if default else schema.name
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Key")
    table.add_column("Descriptor", style="green")
    table.add_column("Flags", style="dim")
    for row in schema_to_dict(schema):
        table.add_row(row["field"], row["key"], row["descriptor"], ", ".join(row["flags"]))
    return table


def to_jsonable(value: Any) -> Any:
    """Canonical value -> JSON-compatible structure (datetimes as ISO, UUIDs as str)."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if value is None or isinstance(value, bool | int | float | str):
        return value
    return str(value)


def echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def issues_table(error: DecodeError) -> Table:
    table = Table(title="Decode failed")
    table.add_column("Path", style="cyan")
    table.add_column("Message", style="red")
    for issue in error.issues:
        table.add_row(issue.path_str, issue.message)
    return table
