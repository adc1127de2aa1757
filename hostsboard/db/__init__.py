"""Data-store layer package.

Public re-exports so callers can write::

    from hostsboard.db import get_store
    from hostsboard.db import hosts, vocabulary
"""

from hostsboard.db.store import JsonStore, MemoryStore, get_store
from hostsboard.db import hosts, vocabulary

__all__ = ["JsonStore", "MemoryStore", "get_store", "hosts", "vocabulary"]
