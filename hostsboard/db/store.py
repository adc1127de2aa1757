"""Single-document JSON store.

Usage::

    from hostsboard.db.store import get_store

    store = get_store()
    with store.session():
        doc = store.read()
        doc.categories.append("ops")
        store.write(doc)

Every ``read()`` re-loads the file; nothing is cached between calls.  A
``session()`` only serialises callers when the store was built with
``serialize_writes=True`` — by default two overlapping read-modify-write
cycles can interleave and the later ``write()`` wins.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Any, Callable, ContextManager, Iterator, Optional, Union

from hostsboard.config import settings
from hostsboard.db.errors import StoreError
from hostsboard.db.models import DEFAULT_CATEGORIES, DEFAULT_TYPES, Document, HostGroup

logger = logging.getLogger(__name__)

WriteHook = Callable[[], None]

# One writer lock per resolved document path, shared by every JsonStore
# that opts into serialisation.
_PATH_LOCKS: dict[Path, threading.RLock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = _PATH_LOCKS[key] = threading.RLock()
        return lock


def document_from_dict(raw: Any) -> Document:
    """Build a :class:`Document`, resetting any malformed top-level field.

    Never raises for a missing or wrongly-shaped field; each of ``hosts``,
    ``categories`` and ``types`` is healed independently.
    """
    if not isinstance(raw, dict):
        logger.warning("Document is not a JSON object; starting from defaults")
        return Document()

    doc = Document()

    hosts = raw.get("hosts")
    if isinstance(hosts, list):
        doc.hosts = [
            HostGroup.from_dict(g, str(i)) for i, g in enumerate(hosts) if isinstance(g, dict)
        ]
    else:
        logger.warning("Document field 'hosts' missing or malformed; reset to []")

    categories = raw.get("categories")
    if isinstance(categories, list):
        doc.categories = [str(c) for c in categories]
    else:
        logger.warning("Document field 'categories' missing or malformed; reset to defaults")
        doc.categories = list(DEFAULT_CATEGORIES)

    types = raw.get("types")
    if isinstance(types, list):
        doc.types = [str(t) for t in types]
    else:
        logger.warning("Document field 'types' missing or malformed; reset to defaults")
        doc.types = list(DEFAULT_TYPES)

    return doc


class JsonStore:
    """Store backed by one JSON file on disk."""

    def __init__(
        self,
        path: Path,
        on_write: Optional[WriteHook] = None,
        serialize_writes: bool = False,
    ) -> None:
        self.path = Path(path)
        self.on_write = on_write
        self.serialize_writes = serialize_writes
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create {self.path.parent}: {exc}") from exc

    def __repr__(self) -> str:
        return f"JsonStore({str(self.path)!r})"

    def session(self) -> ContextManager[None]:
        """Scope one read-modify-write cycle.

        Holds the per-path writer lock when ``serialize_writes`` is enabled,
        otherwise a no-op.
        """
        if self.serialize_writes:
            return _lock_for(self.path)
        return nullcontext()

    def read(self) -> Document:
        """Load the document, seeding defaults if the file does not exist yet.

        Raises:
            StoreError: The file exists but could not be read.
        """
        if not self.path.exists():
            logger.debug("No document at %s; using defaults", self.path)
            return Document()
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot read {self.path}: {exc}") from exc

        try:
            raw = json.loads(text) if text.strip() else None
        except json.JSONDecodeError:
            logger.warning("Document at %s is not valid JSON; starting from defaults", self.path)
            raw = None
        logger.debug("Read document from %s", self.path)
        return document_from_dict(raw)

    def write(self, doc: Document) -> None:
        """Serialise *doc* to disk, then fire the ``on_write`` hook.

        Raises:
            StoreError: The file could not be written.
        """
        payload = json.dumps(doc.to_dict(), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write {self.path}: {exc}") from exc
        logger.debug("Wrote document to %s", self.path)
        if self.on_write is not None:
            self.on_write()


class MemoryStore:
    """In-memory stand-in for :class:`JsonStore`, used by tests.

    Reads hand out deep copies so mutating a loaded document never touches
    the stored one until it is written back.
    """

    def __init__(
        self,
        document: Optional[Union[Document, dict[str, Any]]] = None,
        on_write: Optional[WriteHook] = None,
    ) -> None:
        if isinstance(document, dict):
            document = document_from_dict(document)
        self._doc = document if document is not None else Document()
        self.on_write = on_write
        self._lock = threading.RLock()
        self.write_count = 0

    def __repr__(self) -> str:
        return "MemoryStore()"

    @contextmanager
    def session(self) -> Iterator[None]:
        with self._lock:
            yield

    def read(self) -> Document:
        return copy.deepcopy(self._doc)

    def write(self, doc: Document) -> None:
        self._doc = copy.deepcopy(doc)
        self.write_count += 1
        if self.on_write is not None:
            self.on_write()


Store = Union[JsonStore, MemoryStore]


def get_store(
    path: Optional[Union[Path, str]] = None,
    on_write: Optional[WriteHook] = None,
    serialize_writes: Optional[bool] = None,
) -> Store:
    """Open a store.

    Args:
        path: Override the document path.  Defaults to ``settings.db_path``.
            The special value ``":memory:"`` returns a :class:`MemoryStore`.
        on_write: Hook fired after every successful write.
        serialize_writes: Opt into the per-path writer lock.  Defaults to
            ``settings.serialize_writes``.
    """
    if str(path) == ":memory:":
        return MemoryStore(on_write=on_write)

    if path is None:
        settings.ensure_data_dir()
        path = settings.db_path
    if serialize_writes is None:
        serialize_writes = settings.serialize_writes
    return JsonStore(Path(path), on_write=on_write, serialize_writes=serialize_writes)
