"""Host group and entry commands."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from hostsboard.db import get_store, hosts
from hostsboard.db.errors import HostsboardError
from hostsboard.db.export import render_hosts_file
from hostsboard.db.models import HostEntryPatch, HostGroupPatch, entry_patch_from_dict
from hostsboard_cli.rendering import render_entry, render_tree

group_app = typer.Typer(help="Manage host groups.", no_args_is_help=True)
host_app = typer.Typer(help="Manage host entries.", no_args_is_help=True)


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"❌ {exc}")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

@group_app.command("list")
def group_list() -> None:
    """Show every group and its entries."""
    groups = hosts.list_groups(get_store())
    if not groups:
        typer.echo("No host groups found.")
        return
    typer.echo(render_tree(groups))


@group_app.command("add")
def group_add(category: str = typer.Argument(..., help="Category of the new group.")) -> None:
    """Create an empty group."""
    try:
        hosts.create_group(get_store(), HostGroupPatch(category=category, children=[]))
    except HostsboardError as exc:
        _fail(exc)
    typer.echo(f"✅ Group created: {category}")


@group_app.command("rename")
def group_rename(
    category: str = typer.Argument(..., help="Current category of the group."),
    new: str = typer.Argument(..., help="New category."),
) -> None:
    """Change a group's category (its entries keep their own category field)."""
    store = get_store()
    if not any(g.category == category for g in hosts.list_groups(store)):
        typer.echo(f"No group {category!r}; nothing changed.")
        return
    hosts.update_group(store, category, HostGroupPatch(category=new))
    typer.echo(f"✅ Group renamed: {category} → {new}")


@group_app.command("delete")
def group_delete(
    category: str = typer.Argument(..., help="Category of the group to delete."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete a group and all of its entries."""
    if not yes:
        typer.confirm(f"Delete group {category!r} and all its entries?", abort=True)
    hosts.delete_group(get_store(), category)
    typer.echo(f"🗑  Group deleted: {category}")


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

@host_app.command("add")
def host_add(
    category: str = typer.Argument(..., help="Category (group) to add the entry to."),
    content: Optional[str] = typer.Option(
        None, "--content", "-c", help="Hosts text. Opens $EDITOR when omitted."
    ),
    title: Optional[str] = typer.Option(None, help="Display title."),
    type_: Optional[str] = typer.Option(None, "--type", help="Service type."),
    description: Optional[str] = typer.Option(None, help="Free-form description."),
    comment: bool = typer.Option(False, "--comment", help="Store as a comment entry."),
) -> None:
    """Add an entry; the group is created if it does not exist."""
    if content is None:
        content = typer.edit("# one or more hosts lines\n")
        if content is None:
            typer.echo("Aborted: no content entered.")
            raise typer.Exit(code=1)

    patch = HostEntryPatch(
        host_content="" if comment else content,
        category=category,
        title=title,
        type=type_,
        description=description,
        is_comment=comment or None,
        comment_text=content if comment else None,
    )
    try:
        groups = hosts.add_entry(get_store(), category, patch)
    except HostsboardError as exc:
        _fail(exc)
    entry = next(g for g in groups if g.category == category).children[-1]
    typer.echo(f"✅ Entry added: {entry.id}  category={category!r}")


@host_app.command("show")
def host_show(
    category: str = typer.Argument(...),
    entry_id: str = typer.Argument(...),
) -> None:
    """Print one entry."""
    entry = hosts.find_entry(hosts.list_groups(get_store()), category, entry_id)
    if entry is None:
        typer.echo(f"❌ Entry {entry_id!r} not found in group {category!r}.")
        raise typer.Exit(code=1)
    typer.echo(render_entry(entry))


@host_app.command("update")
def host_update(
    category: str = typer.Argument(..., help="Current category of the entry."),
    entry_id: str = typer.Argument(..., help="Entry id."),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New hosts text."),
    new_category: Optional[str] = typer.Option(
        None, "--category", help="Move the entry to this category."
    ),
    title: Optional[str] = typer.Option(None),
    type_: Optional[str] = typer.Option(None, "--type"),
    description: Optional[str] = typer.Option(None),
) -> None:
    """Update an entry; ``--category`` moves it to another group."""
    patch = HostEntryPatch(
        host_content=content,
        category=new_category,
        title=title,
        type=type_,
        description=description,
    )
    if not patch.changes():
        typer.echo("Nothing to update.")
        raise typer.Exit(code=1)
    try:
        groups = hosts.update_entry(get_store(), category, entry_id, patch)
    except HostsboardError as exc:
        _fail(exc)

    target = new_category or category
    entry = hosts.find_entry(groups, target, entry_id)
    typer.echo(f"✅ Entry updated: {entry_id}  category={target!r}")
    if entry is not None:
        typer.echo(render_entry(entry))


@host_app.command("delete")
def host_delete(
    category: str = typer.Argument(...),
    entry_id: str = typer.Argument(...),
) -> None:
    """Delete an entry (the group is kept even if it becomes empty)."""
    hosts.delete_entry(get_store(), category, entry_id)
    typer.echo(f"🗑  Entry deleted: {entry_id}")


def _read_json_rows(path: Path) -> list[dict[str, Any]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        _fail(ValueError(f"{path} is not valid JSON: {exc}"))
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        _fail(ValueError(f"{path} must contain a JSON array of objects"))
    return raw


def _read_csv_rows(path: Path) -> list[dict[str, Any]]:
    """Rows keyed by the header line, which uses the same names as JSON keys.

    Empty cells are treated as absent; ``isComment`` accepts true/1/yes.
    """
    rows = []
    with path.open(newline="", encoding="utf-8") as fh:
        for row in csv.DictReader(fh):
            item: dict[str, Any] = {
                key.strip(): value.strip()
                for key, value in row.items()
                if key and value and value.strip()
            }
            if "isComment" in item:
                item["isComment"] = item["isComment"].lower() in ("true", "1", "yes")
            rows.append(item)
    return rows


@host_app.command("import")
def host_import(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or CSV file."),
) -> None:
    """Import entries from a JSON array or a CSV file, each carrying its ``category``.

    A ``.csv`` suffix selects CSV; anything else is read as JSON.
    """
    if path.suffix.lower() == ".csv":
        raw = _read_csv_rows(path)
    else:
        raw = _read_json_rows(path)

    try:
        hosts.import_entries(get_store(), [entry_patch_from_dict(item) for item in raw])
    except HostsboardError as exc:
        _fail(exc)
    typer.echo(f"✅ Imported {len(raw)} entries from {path}")


def export(
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout."
    ),
) -> None:
    """Render every group as hosts-file text."""
    text = render_hosts_file(hosts.list_groups(get_store()))
    if output is None:
        typer.echo(text, nl=False)
        return
    output.write_text(text, encoding="utf-8")
    typer.echo(f"✅ Exported to {output.absolute()}")
