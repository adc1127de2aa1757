"""Dataclass models representing the persisted JSON document.

These are plain Python objects – not ORM models.  The store serialises /
deserialises to and from these types using the document's camelCase keys.

Patch types carry an optional value per field: ``None`` means "leave the
field unchanged".  There is no way to clear a field through a patch.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any

DEFAULT_CATEGORIES: tuple[str, ...] = ("A", "B")
DEFAULT_TYPES: tuple[str, ...] = ("frontend", "backend", "database", "cache", "other")

# Stand-ins for records stored without an id or timestamp.  Both are
# derived from the stored record so every read of the same file agrees.
EPOCH = "1970-01-01T00:00:00.000Z"
_RECORD_NAMESPACE = uuid.UUID("5b0f7a52-6a8e-4c57-9d1e-3f1c2b7d9a10")


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string, e.g. ``2024-05-01T12:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _stored_id(raw: dict[str, Any], position: str) -> str:
    """Return the stored id, or one derived from *position* and the record."""
    if raw.get("id"):
        return str(raw["id"])
    body = json.dumps(raw, sort_keys=True, default=str)
    return str(uuid.uuid5(_RECORD_NAMESPACE, f"{position}:{body}"))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class HostEntry:
    id: str
    host_content: str
    category: str
    last_updated: str
    title: str | None = None
    type: str | None = None
    description: str | None = None
    is_comment: bool = False
    comment_text: str | None = None
    image: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "hostContent": self.host_content,
            "category": self.category,
            "lastUpdated": self.last_updated,
        }
        optional = {
            "title": self.title,
            "type": self.type,
            "description": self.description,
            "commentText": self.comment_text,
            "image": self.image,
            "color": self.color,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.is_comment:
            data["isComment"] = True
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any], position: str = "") -> HostEntry:
        return cls(
            id=_stored_id(raw, position),
            host_content=str(raw.get("hostContent") or ""),
            category=str(raw.get("category") or ""),
            last_updated=str(raw.get("lastUpdated") or EPOCH),
            title=_opt_str(raw.get("title")),
            type=_opt_str(raw.get("type")),
            description=_opt_str(raw.get("description")),
            is_comment=bool(raw.get("isComment", False)),
            comment_text=_opt_str(raw.get("commentText")),
            image=_opt_str(raw.get("image")),
            color=_opt_str(raw.get("color")),
        )


@dataclass
class HostGroup:
    id: str
    category: str
    last_updated: str
    children: list[HostEntry] = field(default_factory=list)
    is_group: bool = True

    def find_child(self, entry_id: str) -> HostEntry | None:
        for child in self.children:
            if child.id == entry_id:
                return child
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "lastUpdated": self.last_updated,
            "isGroup": self.is_group,
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any], position: str = "") -> HostGroup:
        children = raw.get("children")
        if not isinstance(children, list):
            children = []
        return cls(
            id=_stored_id(raw, position),
            category=str(raw.get("category") or ""),
            last_updated=str(raw.get("lastUpdated") or EPOCH),
            children=[
                HostEntry.from_dict(c, f"{position}/{i}")
                for i, c in enumerate(children)
                if isinstance(c, dict)
            ],
            is_group=bool(raw.get("isGroup", True)),
        )


@dataclass
class Document:
    hosts: list[HostGroup] = field(default_factory=list)
    categories: list[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    types: list[str] = field(default_factory=lambda: list(DEFAULT_TYPES))

    def find_group(self, category: str) -> HostGroup | None:
        """Return the first group keyed by *category*, or ``None``."""
        for group in self.hosts:
            if group.category == category:
                return group
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hosts": [g.to_dict() for g in self.hosts],
            "categories": list(self.categories),
            "types": list(self.types),
        }


# ---------------------------------------------------------------------------
# Patches
# ---------------------------------------------------------------------------

@dataclass
class HostEntryPatch:
    host_content: str | None = None
    category: str | None = None
    title: str | None = None
    type: str | None = None
    description: str | None = None
    is_comment: bool | None = None
    comment_text: str | None = None
    image: str | None = None
    color: str | None = None

    def changes(self) -> dict[str, Any]:
        """Fields present in the patch, keyed by attribute name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass
class HostGroupPatch:
    category: str | None = None
    children: list[HostEntry] | None = None
    is_group: bool | None = None

    def changes(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


def new_entry(patch: HostEntryPatch, category: str) -> HostEntry:
    """Build a fresh entry from *patch* with a new id and timestamp.

    The entry's ``category`` defaults to the owning group's *category*
    when the patch does not name one.
    """
    entry = HostEntry(id=new_id(), host_content="", category=category, last_updated=utc_now())
    return replace(entry, **patch.changes())


def new_group(category: str, children: list[HostEntry] | None = None) -> HostGroup:
    return HostGroup(
        id=new_id(),
        category=category,
        last_updated=utc_now(),
        children=list(children or []),
    )


def apply_entry_patch(entry: HostEntry, patch: HostEntryPatch) -> HostEntry:
    """Return *entry* with *patch* merged over it and ``last_updated`` refreshed."""
    return replace(entry, **patch.changes(), last_updated=utc_now())


def apply_group_patch(group: HostGroup, patch: HostGroupPatch) -> HostGroup:
    """Return *group* with *patch* merged over it and ``last_updated`` refreshed."""
    return replace(group, **patch.changes(), last_updated=utc_now())


_ENTRY_KEYS = {
    "hostContent": "host_content",
    "category": "category",
    "title": "title",
    "type": "type",
    "description": "description",
    "isComment": "is_comment",
    "commentText": "comment_text",
    "image": "image",
    "color": "color",
}


def entry_patch_from_dict(raw: dict[str, Any]) -> HostEntryPatch:
    """Build a patch from a camelCase mapping, ignoring unknown keys and ``id``."""
    return HostEntryPatch(
        **{attr: raw[key] for key, attr in _ENTRY_KEYS.items() if raw.get(key) is not None}
    )
