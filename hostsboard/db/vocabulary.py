"""Controlled vocabularies: the ``categories`` and ``types`` lists.

Both lists behave the same way:

- ``add`` appends a value unless it is already present (duplicate add is a
  no-op).
- ``update`` renames a value in place and cascades the rename into every
  group / entry that referenced the old value.
- ``delete`` removes a value and leaves referencing records untouched.

Values are matched by exact string equality.  Renaming or deleting a value
that is not present is a no-op and returns the unchanged list.
"""

from __future__ import annotations

import logging
from typing import Callable

from hostsboard.db.errors import ValidationError
from hostsboard.db.models import Document
from hostsboard.db.store import Store

logger = logging.getLogger(__name__)

# A cascade rewrites references to ``old`` in the document's host groups.
Cascade = Callable[[Document, str, str], None]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _require_value(value: str, what: str) -> None:
    if not value or not value.strip():
        raise ValidationError(f"{what} must not be empty")


def _cascade_category(doc: Document, old: str, new: str) -> None:
    for group in doc.hosts:
        if group.category == old:
            group.category = new
        for entry in group.children:
            if entry.category == old:
                entry.category = new


def _cascade_type(doc: Document, old: str, new: str) -> None:
    for group in doc.hosts:
        for entry in group.children:
            if entry.type == old:
                entry.type = new


def _values(doc: Document, field: str) -> list[str]:
    return getattr(doc, field)


def _add(store: Store, field: str, value: str) -> list[str]:
    with store.session():
        doc = store.read()
        values = _values(doc, field)
        if value in values:
            logger.debug("%s: %r already present", field, value)
            return list(values)
        values.append(value)
        store.write(doc)
        logger.info("%s: added %r", field, value)
        return list(values)


def _update(store: Store, field: str, old: str, new: str, cascade: Cascade) -> list[str]:
    with store.session():
        doc = store.read()
        values = _values(doc, field)
        try:
            index = values.index(old)
        except ValueError:
            logger.debug("%s: %r not present; nothing to rename", field, old)
            return list(values)
        values[index] = new
        cascade(doc, old, new)
        store.write(doc)
        logger.info("%s: renamed %r -> %r", field, old, new)
        return list(values)


def _delete(store: Store, field: str, value: str) -> list[str]:
    with store.session():
        doc = store.read()
        values = _values(doc, field)
        if value not in values:
            logger.debug("%s: %r not present; nothing to delete", field, value)
            return list(values)
        values.remove(value)
        store.write(doc)
        logger.info("%s: deleted %r (referencing records left as-is)", field, value)
        return list(values)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def list_categories(store: Store) -> list[str]:
    """Return every category in insertion order."""
    return store.read().categories


def add_category(store: Store, value: str) -> list[str]:
    """Append *value* unless it is already present.

    Raises:
        ValidationError: *value* is empty or blank.
    """
    _require_value(value, "Category")
    return _add(store, "categories", value)


def update_category(store: Store, old: str, new: str) -> list[str]:
    """Rename category *old* to *new* in place.

    The rename is applied to the vocabulary, to every group keyed by *old*
    and to every entry whose ``category`` is *old*, then persisted once.
    Renaming onto an existing value yields a duplicate in the list.

    Raises:
        ValidationError: *new* is empty or blank.
    """
    _require_value(new, "Category")
    return _update(store, "categories", old, new, _cascade_category)


def delete_category(store: Store, value: str) -> list[str]:
    """Remove *value*; groups and entries that use it are not touched."""
    return _delete(store, "categories", value)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

def list_types(store: Store) -> list[str]:
    """Return every type in insertion order."""
    return store.read().types


def add_type(store: Store, value: str) -> list[str]:
    """Append *value* unless it is already present.

    Raises:
        ValidationError: *value* is empty or blank.
    """
    _require_value(value, "Type")
    return _add(store, "types", value)


def update_type(store: Store, old: str, new: str) -> list[str]:
    """Rename type *old* to *new* and rewrite every entry's ``type`` field."""
    _require_value(new, "Type")
    return _update(store, "types", old, new, _cascade_type)


def delete_type(store: Store, value: str) -> list[str]:
    """Remove *value*; entries that use it are not touched."""
    return _delete(store, "types", value)
