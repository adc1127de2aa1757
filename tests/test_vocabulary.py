"""Tests for the category / type vocabularies and their rename cascade."""

from __future__ import annotations

import pytest

from hostsboard.db import hosts
from hostsboard.db.errors import ValidationError
from hostsboard.db.models import HostEntryPatch
from hostsboard.db.store import MemoryStore
from hostsboard.db.vocabulary import (
    add_category,
    add_type,
    delete_category,
    delete_type,
    list_categories,
    list_types,
    update_category,
    update_type,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore({"hosts": [], "categories": ["A", "ops"], "types": ["web", "db"]})


@pytest.fixture()
def populated(store: MemoryStore) -> MemoryStore:
    """Group "A" with two entries, plus group "ops" with one."""
    hosts.add_entry(store, "A", HostEntryPatch(host_content="1.1.1.1 a", type="web"))
    hosts.add_entry(store, "A", HostEntryPatch(host_content="2.2.2.2 b", type="db"))
    hosts.add_entry(store, "ops", HostEntryPatch(host_content="3.3.3.3 c", type="web"))
    return store


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class TestListCategories:
    def test_returns_in_insertion_order(self, store: MemoryStore) -> None:
        assert list_categories(store) == ["A", "ops"]

    def test_defaults_on_fresh_store(self) -> None:
        assert list_categories(MemoryStore()) == ["A", "B"]


class TestAddCategory:
    def test_appends_and_persists(self, store: MemoryStore) -> None:
        assert add_category(store, "dev") == ["A", "ops", "dev"]
        assert list_categories(store) == ["A", "ops", "dev"]

    def test_duplicate_add_is_noop(self, store: MemoryStore) -> None:
        add_category(store, "dev")
        writes = store.write_count
        assert add_category(store, "dev") == ["A", "ops", "dev"]
        assert list_categories(store).count("dev") == 1
        assert store.write_count == writes

    def test_rejects_blank_value(self, store: MemoryStore) -> None:
        with pytest.raises(ValidationError):
            add_category(store, "   ")
        assert list_categories(store) == ["A", "ops"]

    def test_values_are_not_trimmed_or_folded(self, store: MemoryStore) -> None:
        assert add_category(store, "a") == ["A", "ops", "a"]
        assert add_category(store, " ops") == ["A", "ops", "a", " ops"]


class TestUpdateCategory:
    def test_rename_cascades_into_groups_and_entries(self, populated: MemoryStore) -> None:
        result = update_category(populated, "A", "B")

        assert result == ["B", "ops"]
        groups = hosts.list_groups(populated)
        assert [g.category for g in groups] == ["B", "ops"]
        assert [e.category for e in groups[0].children] == ["B", "B"]
        assert groups[1].children[0].category == "ops"

    def test_entry_with_diverged_category_is_renamed_too(self, populated: MemoryStore) -> None:
        hosts.add_entry(populated, "ops", HostEntryPatch(host_content="x", category="A"))
        update_category(populated, "A", "B")
        ops = hosts.list_groups(populated)[1]
        assert ops.category == "ops"
        assert ops.children[-1].category == "B"

    def test_absent_old_value_is_noop(self, populated: MemoryStore) -> None:
        writes = populated.write_count
        assert update_category(populated, "missing", "B") == ["A", "ops"]
        assert populated.write_count == writes
        assert hosts.list_groups(populated)[0].category == "A"

    def test_rename_onto_existing_value_duplicates(self, store: MemoryStore) -> None:
        assert update_category(store, "A", "ops") == ["ops", "ops"]

    def test_match_is_case_sensitive(self, store: MemoryStore) -> None:
        assert update_category(store, "a", "B") == ["A", "ops"]

    def test_persists_once(self, populated: MemoryStore) -> None:
        writes = populated.write_count
        update_category(populated, "A", "B")
        assert populated.write_count == writes + 1

    def test_rejects_blank_new_value(self, populated: MemoryStore) -> None:
        with pytest.raises(ValidationError):
            update_category(populated, "A", "")
        assert list_categories(populated) == ["A", "ops"]


class TestDeleteCategory:
    def test_removes_value(self, store: MemoryStore) -> None:
        assert delete_category(store, "ops") == ["A"]

    def test_absent_value_is_noop(self, store: MemoryStore) -> None:
        writes = store.write_count
        assert delete_category(store, "nope") == ["A", "ops"]
        assert store.write_count == writes

    def test_referencing_group_is_left_untouched(self, populated: MemoryStore) -> None:
        before = hosts.list_groups(populated)
        assert delete_category(populated, "A") == ["ops"]
        after = hosts.list_groups(populated)
        assert after == before
        assert after[0].category == "A"
        assert len(after[0].children) == 2


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

class TestTypes:
    def test_list_and_default(self, store: MemoryStore) -> None:
        assert list_types(store) == ["web", "db"]
        assert list_types(MemoryStore()) == ["frontend", "backend", "database", "cache", "other"]

    def test_add_is_idempotent(self, store: MemoryStore) -> None:
        add_type(store, "cache")
        assert add_type(store, "cache") == ["web", "db", "cache"]

    def test_rename_cascades_into_entries_only(self, populated: MemoryStore) -> None:
        assert update_type(populated, "web", "frontend") == ["frontend", "db"]
        groups = hosts.list_groups(populated)
        assert [e.type for e in groups[0].children] == ["frontend", "db"]
        assert groups[1].children[0].type == "frontend"
        assert [g.category for g in groups] == ["A", "ops"]

    def test_rename_absent_is_noop(self, populated: MemoryStore) -> None:
        assert update_type(populated, "queue", "mq") == ["web", "db"]

    def test_delete_leaves_entries(self, populated: MemoryStore) -> None:
        assert delete_type(populated, "web") == ["db"]
        assert hosts.list_groups(populated)[0].children[0].type == "web"
