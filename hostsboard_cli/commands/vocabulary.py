"""Category and type vocabulary commands."""

from __future__ import annotations

from typing import Callable

import typer

from hostsboard.db import get_store, vocabulary
from hostsboard.db.errors import HostsboardError


def _print_values(values: list[str]) -> None:
    if not values:
        typer.echo("(empty)")
        return
    for value in values:
        typer.echo(f"  {value}")


def _run(fn: Callable[..., list[str]], *args: str) -> None:
    try:
        values = fn(get_store(), *args)
    except HostsboardError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1)
    _print_values(values)


def _build_app(noun: str, list_fn, add_fn, update_fn, delete_fn) -> typer.Typer:
    app = typer.Typer(help=f"Manage the {noun} vocabulary.", no_args_is_help=True)

    @app.command("list")
    def list_cmd() -> None:
        """List every value in order."""
        _run(list_fn)

    @app.command("add")
    def add_cmd(value: str = typer.Argument(..., help="Value to add.")) -> None:
        """Add a value (no-op if it already exists)."""
        _run(add_fn, value)

    @app.command("rename")
    def rename_cmd(
        old: str = typer.Argument(..., help="Current value."),
        new: str = typer.Argument(..., help="New value."),
    ) -> None:
        """Rename a value and update every host record that uses it."""
        _run(update_fn, old, new)

    @app.command("delete")
    def delete_cmd(value: str = typer.Argument(..., help="Value to delete.")) -> None:
        """Delete a value. Host records that use it are left unchanged."""
        _run(delete_fn, value)

    return app


category_app = _build_app(
    "category",
    vocabulary.list_categories,
    vocabulary.add_category,
    vocabulary.update_category,
    vocabulary.delete_category,
)
type_app = _build_app(
    "type",
    vocabulary.list_types,
    vocabulary.add_type,
    vocabulary.update_type,
    vocabulary.delete_type,
)
