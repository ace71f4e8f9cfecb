"""
Root Typer application for the spine-variants CLI.

Commands:
    inspect      Show the schema every variant of a struct or entity derives
    decode       Decode a JSON document against one variant
    transforms   List registered value transforms
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from typer import Typer

from spine_variants.cli.utils import (
    EXIT_BAD_TARGET,
    EXIT_DECODE_FAILED,
    console,
    echo_json,
    err_console,
    fail,
    issues_table,
    load_target,
    schema_table,
    schema_to_dict,
    to_jsonable,
)
from spine_variants.core.errors import DecodeError, UnknownVariantError
from spine_variants.core.logging import LogContext, configure_from_settings, configure_logging
from spine_variants.core.result import Err, Ok, Result, partition_results, try_result_with
from spine_variants.schema.descriptors import prefixed_issues
from spine_variants.schema.transforms import get_transform, list_transforms

app = Typer(
    name="spine-variants",
    help="spine-variants -- declare a record once, derive a schema per variant.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from spine_variants import __version__

        try:
            v = pkg_version("spine-variants")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"spine-variants {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine events at DEBUG."),
) -> None:
    """spine-variants CLI -- inspect and exercise variant schemas."""
    if verbose:
        configure_logging(level="DEBUG", json_format=False)
    else:
        configure_from_settings()


# ── Commands ─────────────────────────────────────────────────────────────


def _variants_for(target, variant: str | None) -> list[str]:
    if variant is None:
        return list(target.struct.variants)
    if variant not in target.struct.variants:
        raise fail(str(UnknownVariantError(variant, target.struct.variants)))
    return [variant]


def _document_error(file: str, exc: Exception) -> Exception:
    if isinstance(exc, json.JSONDecodeError):
        return ValueError(f"{file!r} is not valid JSON: {exc}")
    return ValueError(f"Cannot read {file!r}: {exc}")


def _read_document(file: str) -> Result[Any]:
    def read() -> Any:
        text = sys.stdin.read() if file == "-" else Path(file).read_text(encoding="utf-8")
        return json.loads(text)

    return try_result_with(read, lambda exc: _document_error(file, exc))


def _decode_batch(target, variant: str, items: list[Any]) -> Result[list[Any]]:
    results = [
        target.decode(variant, item).map_err(
            lambda exc, index=index: DecodeError.from_issues(prefixed_issues(exc, index))
        )
        for index, item in enumerate(items)
    ]
    values, errors = partition_results(results)
    if errors:
        issues = [issue for error in errors for issue in error.issues]
        return Err(DecodeError.from_issues(issues, schema=target.label, variant=variant))
    return Ok(values)


@app.command("inspect")
def inspect_target(
    target: str = typer.Argument(..., help="Struct or entity as 'package.module:Name'"),
    variant: str | None = typer.Option(None, "--variant", "-n", help="Only this variant"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the fields, output keys and descriptors of each variant."""
    loaded = load_target(target)
    variants = _variants_for(loaded, variant)

    if as_json:
        echo_json({
            "name": loaded.label,
            "default": loaded.struct.default,
            "variants": {v: schema_to_dict(loaded.schema(v)) for v in variants},
        })
        return

    for v in variants:
        console.print(schema_table(loaded.schema(v), default=v == loaded.struct.default))


@app.command("decode")
def decode_document(
    target: str = typer.Argument(..., help="Struct or entity as 'package.module:Name'"),
    file: str = typer.Argument(..., help="JSON document to decode, or '-' for stdin"),
    variant: str = typer.Option(..., "--variant", "-n", help="Variant the document is shaped as"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Decode a JSON document and print the canonical value or the issues.

    A top-level JSON array is decoded element by element; issues are reported
    under the element index.
    """
    loaded = load_target(target)
    _variants_for(loaded, variant)

    document = _read_document(file)
    if document.is_err():
        raise fail(str(document.error))

    with LogContext(target=target, variant=variant):
        if isinstance(document.value, list):
            result = _decode_batch(loaded, variant, document.value)
        else:
            result = loaded.decode(variant, document.value)

    if result.is_err():
        error = result.error
        if as_json:
            echo_json(error.to_dict())
        else:
            err_console.print(issues_table(error))
        raise typer.Exit(code=EXIT_DECODE_FAILED)

    value = to_jsonable(result.value)
    if as_json:
        echo_json(value)
    else:
        console.print_json(data=value)


@app.command("transforms")
def show_transforms() -> None:
    """List registered value transforms."""
    from rich.table import Table

    table = Table(title="Value transforms")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name in list_transforms():
        table.add_row(name, get_transform(name).description)
    console.print(table)


__all__ = ["EXIT_BAD_TARGET", "EXIT_DECODE_FAILED", "app"]
