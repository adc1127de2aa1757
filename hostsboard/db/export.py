"""Render the group collection as plain hosts-file text.

Entry content is copied verbatim; nothing is parsed or validated.
"""

from __future__ import annotations

from typing import Iterable

from hostsboard.db.models import HostEntry, HostGroup


def _entry_text(entry: HostEntry) -> str:
    if entry.is_comment:
        text = entry.comment_text or entry.host_content
        return "\n".join(
            line if line.startswith("#") else f"# {line}" for line in text.splitlines()
        )
    return entry.host_content.rstrip("\n")


def render_hosts_file(groups: Iterable[HostGroup]) -> str:
    """Concatenate every entry under a ``# ==== <category> ====`` header."""
    blocks: list[str] = []
    for group in groups:
        lines = [f"# ==== {group.category} ===="]
        for entry in group.children:
            if entry.title:
                lines.append(f"# {entry.title}")
            text = _entry_text(entry)
            if text:
                lines.append(text)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n" if blocks else ""
