"""Utilities for rendering host groups in the CLI."""

from __future__ import annotations

from typing import Iterable

from hostsboard.db.models import HostEntry, HostGroup


def _first_line(text: str, width: int = 60) -> str:
    line = text.strip().splitlines()[0] if text.strip() else ""
    return line if len(line) <= width else line[: width - 1] + "…"


def describe_entry(entry: HostEntry) -> str:
    """One-line summary: id prefix, type, title, and first content line."""
    kind = "comment" if entry.is_comment else (entry.type or "-")
    label = entry.title or _first_line(entry.comment_text or entry.host_content)
    return f"{entry.id[:8]}  [{kind}]  {label}"


def render_tree(groups: Iterable[HostGroup]) -> str:
    """Render groups and their entries as an ASCII tree.

    Example::

        A  (2 entries, updated 2024-05-01T12:00:00.000Z)
        ├── 1b2c3d4e  [frontend]  web
        └── 9f8e7d6c  [comment]  staging block
    """
    lines: list[str] = []
    for group in groups:
        count = len(group.children)
        noun = "entry" if count == 1 else "entries"
        lines.append(f"{group.category}  ({count} {noun}, updated {group.last_updated})")
        for i, entry in enumerate(group.children):
            connector = "└── " if i == count - 1 else "├── "
            lines.append(connector + describe_entry(entry))
    return "\n".join(lines)


def render_entry(entry: HostEntry) -> str:
    """Multi-line detail view of a single entry."""
    rows = [
        ("ID", entry.id),
        ("Title", entry.title or ""),
        ("Category", entry.category),
        ("Type", entry.type or ""),
        ("Description", entry.description or ""),
        ("Updated", entry.last_updated),
    ]
    lines = [f"{name:<12}: {value}" for name, value in rows]
    lines.append("-" * 40)
    lines.append((entry.comment_text or "") if entry.is_comment else entry.host_content)
    return "\n".join(lines)
