"""Exception types raised by the data-store layer."""

from __future__ import annotations


class HostsboardError(Exception):
    """Base class for every error raised by hostsboard."""


class StoreError(HostsboardError):
    """Reading or writing the backing document failed."""


class ValidationError(HostsboardError):
    """An argument was rejected before touching the store."""


class NotFoundError(HostsboardError):
    """A record addressed by key does not exist."""


class GroupNotFoundError(NotFoundError):
    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Host group not found: {category!r}")


class EntryNotFoundError(NotFoundError):
    def __init__(self, category: str, entry_id: str) -> None:
        self.category = category
        self.entry_id = entry_id
        super().__init__(f"Entry {entry_id!r} not found in host group {category!r}")
