"""CRUD operations for host groups and their child entries.

Groups are addressed by their ``category`` value, not by id; the first
group whose ``category`` matches is the one operated on.  Every mutating
operation returns the full, updated group collection.

Lookup policy
-------------
Only :func:`update_entry` signals a missing group or entry (it has nothing
to merge the patch into).  Every other lookup by key is a silent no-op that
returns the unchanged collection and writes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from hostsboard.db.errors import EntryNotFoundError, GroupNotFoundError, ValidationError
from hostsboard.db.models import (
    Document,
    HostEntry,
    HostEntryPatch,
    HostGroup,
    HostGroupPatch,
    apply_entry_patch,
    apply_group_patch,
    new_entry,
    new_group,
    new_id,
    utc_now,
)
from hostsboard.db.store import Store

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _require_category(category: Optional[str]) -> str:
    if not category or not category.strip():
        raise ValidationError("Category must not be empty")
    return category


def _group_or_create(doc: Document, category: str) -> HostGroup:
    group = doc.find_group(category)
    if group is None:
        group = new_group(category)
        doc.hosts.append(group)
        logger.info("Created host group %r", category)
    return group


def _touch(group: HostGroup) -> None:
    group.last_updated = utc_now()


def _claim_ids(
    doc: Document,
    children: list[HostEntry],
    owner: Optional[HostGroup],
) -> list[HostEntry]:
    """Keep each child's id unless another group or an earlier sibling holds it."""
    taken = {c.id for g in doc.hosts if g is not owner for c in g.children}
    claimed = []
    for child in children:
        if child.id in taken:
            child = replace(child, id=new_id())
        taken.add(child.id)
        claimed.append(child)
    return claimed


# ---------------------------------------------------------------------------
# Read projection
# ---------------------------------------------------------------------------

def list_groups(store: Store) -> list[HostGroup]:
    """Return every host group with its children, in insertion order."""
    return store.read().hosts


def find_entry(
    groups: Iterable[HostGroup],
    category: str,
    entry_id: str,
) -> Optional[HostEntry]:
    """Locate an entry inside a returned group collection.

    Used after :func:`update_entry` to re-find an entry that may have moved
    to another group.  Returns ``None`` if absent.
    """
    for group in groups:
        if group.category == category:
            return group.find_child(entry_id)
    return None


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

def create_group(store: Store, patch: HostGroupPatch) -> list[HostGroup]:
    """Append a new group with a fresh id and timestamp.

    Raises:
        ValidationError: The patch does not name a category.
    """
    category = _require_category(patch.category)
    with store.session():
        doc = store.read()
        group = new_group(category, _claim_ids(doc, patch.children or [], None))
        if patch.is_group is not None:
            group.is_group = patch.is_group
        doc.hosts.append(group)
        store.write(doc)
        logger.info("Created host group %r (%d entries)", category, len(group.children))
        return doc.hosts


def update_group(store: Store, category: str, patch: HostGroupPatch) -> list[HostGroup]:
    """Merge *patch* over the group keyed by *category*.

    Renaming a group through ``patch.category`` does not rewrite its
    children's ``category`` fields.  Replacement children keep the ids they
    arrive with; an id already used by another group, or repeated in the
    list, is swapped for a fresh one.
    """
    with store.session():
        doc = store.read()
        for index, group in enumerate(doc.hosts):
            if group.category == category:
                if patch.children is not None:
                    patch = replace(patch, children=_claim_ids(doc, patch.children, group))
                doc.hosts[index] = apply_group_patch(group, patch)
                store.write(doc)
                logger.info("Updated host group %r", category)
                return doc.hosts
        logger.debug("No host group %r; nothing to update", category)
        return doc.hosts


def delete_group(store: Store, category: str) -> list[HostGroup]:
    """Remove every group keyed by *category*, children included."""
    with store.session():
        doc = store.read()
        kept = [g for g in doc.hosts if g.category != category]
        if len(kept) == len(doc.hosts):
            logger.debug("No host group %r; nothing to delete", category)
            return doc.hosts
        removed = len(doc.hosts) - len(kept)
        doc.hosts = kept
        store.write(doc)
        logger.info("Deleted %d host group(s) %r", removed, category)
        return doc.hosts


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

def add_entry(store: Store, category: str, patch: HostEntryPatch) -> list[HostGroup]:
    """Append a new entry under *category*, creating the group if needed.

    Every call creates a new entry with a fresh id; it is not idempotent.
    """
    _require_category(category)
    with store.session():
        doc = store.read()
        group = _group_or_create(doc, category)
        entry = new_entry(patch, category)
        group.children.append(entry)
        _touch(group)
        store.write(doc)
        logger.info("Added entry %s to host group %r", entry.id, category)
        return doc.hosts


def update_entry(
    store: Store,
    category: str,
    entry_id: str,
    patch: HostEntryPatch,
) -> list[HostGroup]:
    """Merge *patch* over an entry, moving it if its category changes.

    When ``patch.category`` names a different category the merged entry is
    appended to that group (created on demand) and removed from the source
    group; its id is preserved.  Emptied source groups are kept.

    Raises:
        GroupNotFoundError: No group is keyed by *category*.
        EntryNotFoundError: The group has no entry with *entry_id*.
        ValidationError: ``patch.category`` is given but blank.
    """
    if patch.category is not None:
        _require_category(patch.category)
    with store.session():
        doc = store.read()
        source = doc.find_group(category)
        if source is None:
            raise GroupNotFoundError(category)

        index = next(
            (i for i, child in enumerate(source.children) if child.id == entry_id),
            None,
        )
        if index is None:
            raise EntryNotFoundError(category, entry_id)

        updated = apply_entry_patch(source.children[index], patch)

        if patch.category is None or patch.category == category:
            source.children[index] = updated
            _touch(source)
            logger.info("Updated entry %s in host group %r", entry_id, category)
        else:
            target = _group_or_create(doc, patch.category)
            target.children.append(updated)
            source.children = [c for c in source.children if c.id != entry_id]
            _touch(source)
            _touch(target)
            logger.info(
                "Moved entry %s from host group %r to %r", entry_id, category, patch.category
            )

        store.write(doc)
        return doc.hosts


def delete_entry(store: Store, category: str, entry_id: str) -> list[HostGroup]:
    """Remove an entry from the group keyed by *category*.

    No-op if either the group or the entry is absent.  The group is kept
    even when it becomes empty.
    """
    with store.session():
        doc = store.read()
        group = doc.find_group(category)
        if group is None:
            logger.debug("No host group %r; nothing to delete", category)
            return doc.hosts
        kept = [c for c in group.children if c.id != entry_id]
        if len(kept) == len(group.children):
            logger.debug("No entry %s in host group %r; nothing to delete", entry_id, category)
            return doc.hosts
        group.children = kept
        _touch(group)
        store.write(doc)
        logger.info("Deleted entry %s from host group %r", entry_id, category)
        return doc.hosts


def import_entries(store: Store, patches: Iterable[HostEntryPatch]) -> list[HostGroup]:
    """Add many entries in one write, each under its own ``category``.

    Raises:
        ValidationError: A patch has no category; nothing is written.
    """
    patches = list(patches)
    for position, patch in enumerate(patches):
        if not patch.category or not patch.category.strip():
            raise ValidationError(f"Imported entry #{position} has no category")

    with store.session():
        doc = store.read()
        if not patches:
            return doc.hosts
        for patch in patches:
            group = _group_or_create(doc, patch.category)  # type: ignore[arg-type]
            group.children.append(new_entry(patch, group.category))
            _touch(group)
        store.write(doc)
        logger.info("Imported %d entries", len(patches))
        return doc.hosts
