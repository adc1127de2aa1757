"""Tests for the HTTP API.

All tests use an in-memory store via the FastAPI TestClient, so nothing is
written to the configured data directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from hostsboard.api.app import create_app
from hostsboard.db import hosts
from hostsboard.db.models import HostEntryPatch
from hostsboard.db.store import JsonStore, MemoryStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore({"hosts": [], "categories": ["A", "B"], "types": ["web"]})


@pytest.fixture()
def client(store: MemoryStore) -> Generator[TestClient, None, None]:
    """TestClient backed by an isolated in-memory store."""
    app = create_app(store=store)
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


def _add_host(client: TestClient, category: str, **body) -> list[dict]:
    resp = client.post(f"/hosts/groups/{category}/entries", json=body)
    assert resp.status_code == 201
    return resp.json()


def _group(groups: list[dict], category: str) -> dict:
    return next(g for g in groups if g["category"] == category)


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

class TestCategories:
    def test_list(self, client: TestClient) -> None:
        resp = client.get("/categories")
        assert resp.status_code == 200
        assert resp.json() == ["A", "B"]

    def test_add_twice(self, client: TestClient) -> None:
        assert client.post("/categories", json={"value": "ops"}).json() == ["A", "B", "ops"]
        resp = client.post("/categories", json={"value": "ops"})
        assert resp.status_code == 201
        assert resp.json() == ["A", "B", "ops"]

    def test_add_blank_is_422(self, client: TestClient) -> None:
        resp = client.post("/categories", json={"value": " "})
        assert resp.status_code == 422

    def test_rename_cascades(self, client: TestClient) -> None:
        _add_host(client, "A", hostContent="1.1.1.1 a")
        resp = client.put("/categories/A", json={"value": "Z"})
        assert resp.status_code == 200
        assert resp.json() == ["Z", "B"]
        groups = client.get("/hosts").json()
        assert groups[0]["category"] == "Z"
        assert groups[0]["children"][0]["category"] == "Z"

    def test_delete_leaves_groups(self, client: TestClient) -> None:
        _add_host(client, "A", hostContent="1.1.1.1 a")
        assert client.delete("/categories/A").json() == ["B"]
        assert client.get("/hosts").json()[0]["category"] == "A"


class TestTypes:
    def test_crud(self, client: TestClient) -> None:
        assert client.get("/types").json() == ["web"]
        assert client.post("/types", json={"value": "db"}).json() == ["web", "db"]
        assert client.put("/types/db", json={"value": "database"}).json() == ["web", "database"]
        assert client.delete("/types/web").json() == ["database"]


# ---------------------------------------------------------------------------
# Host groups
# ---------------------------------------------------------------------------

class TestGroups:
    def test_empty_list(self, client: TestClient) -> None:
        resp = client.get("/hosts")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_create_with_children(self, client: TestClient) -> None:
        resp = client.post(
            "/hosts/groups",
            json={"category": "ops", "children": [{"hostContent": "1.2.3.4 a", "title": "a"}]},
        )
        assert resp.status_code == 201
        group = resp.json()[0]
        assert group["category"] == "ops"
        assert group["isGroup"] is True
        child = group["children"][0]
        assert child["hostContent"] == "1.2.3.4 a"
        assert child["category"] == "ops"
        assert len(child["id"]) == 36

    def test_create_without_category_is_422(self, client: TestClient) -> None:
        assert client.post("/hosts/groups", json={}).status_code == 422

    def test_update(self, client: TestClient) -> None:
        client.post("/hosts/groups", json={"category": "ops"})
        resp = client.put("/hosts/groups/ops", json={"category": "platform"})
        assert resp.status_code == 200
        assert resp.json()[0]["category"] == "platform"

    def test_update_unknown_returns_unchanged(self, client: TestClient) -> None:
        client.post("/hosts/groups", json={"category": "ops"})
        resp = client.put("/hosts/groups/nope", json={"category": "x"})
        assert resp.status_code == 200
        assert [g["category"] for g in resp.json()] == ["ops"]

    def test_put_back_children_keeps_entry_ids(self, client: TestClient) -> None:
        _add_host(client, "ops", hostContent="1.1.1.1 a", title="a")
        group = _group(_add_host(client, "ops", hostContent="2.2.2.2 b"), "ops")
        ids = [c["id"] for c in group["children"]]

        resp = client.put("/hosts/groups/ops", json={"children": group["children"]})
        assert resp.status_code == 200
        assert [c["id"] for c in _group(resp.json(), "ops")["children"]] == ids

        updated = client.put(f"/hosts/groups/ops/entries/{ids[0]}", json={"title": "renamed"})
        assert updated.status_code == 200

    def test_delete(self, client: TestClient) -> None:
        client.post("/hosts/groups", json={"category": "ops"})
        assert client.delete("/hosts/groups/ops").json() == []


# ---------------------------------------------------------------------------
# Host entries
# ---------------------------------------------------------------------------

class TestEntries:
    def test_add_creates_group(self, client: TestClient) -> None:
        groups = _add_host(client, "NewDept", hostContent="1.2.3.4 x.com")
        group = _group(groups, "NewDept")
        assert len(group["children"]) == 1
        assert group["children"][0]["hostContent"] == "1.2.3.4 x.com"

    def test_update_moves_entry(self, client: TestClient) -> None:
        groups = _add_host(client, "A", hostContent="1.1.1.1 a", title="a")
        entry_id = groups[0]["children"][0]["id"]

        resp = client.put(
            f"/hosts/groups/A/entries/{entry_id}",
            json={"category": "B", "hostContent": "2.2.2.2 b"},
        )
        assert resp.status_code == 200
        groups = resp.json()
        assert _group(groups, "A")["children"] == []
        moved = _group(groups, "B")["children"][0]
        assert moved["id"] == entry_id
        assert moved["hostContent"] == "2.2.2.2 b"
        assert moved["title"] == "a"

    def test_update_unknown_group_is_404(self, client: TestClient, store: MemoryStore) -> None:
        resp = client.put("/hosts/groups/NoSuchCategory/entries/x", json={"title": "t"})
        assert resp.status_code == 404
        assert "NoSuchCategory" in resp.json()["detail"]
        assert store.write_count == 0

    def test_update_unknown_entry_is_404(self, client: TestClient) -> None:
        _add_host(client, "A", hostContent="1.1.1.1 a")
        resp = client.put("/hosts/groups/A/entries/no-such-id", json={"title": "t"})
        assert resp.status_code == 404
        assert "no-such-id" in resp.json()["detail"]

    def test_delete(self, client: TestClient) -> None:
        groups = _add_host(client, "A", hostContent="1.1.1.1 a")
        entry_id = groups[0]["children"][0]["id"]
        resp = client.delete(f"/hosts/groups/A/entries/{entry_id}")
        assert resp.status_code == 200
        assert resp.json()[0]["children"] == []

    def test_import(self, client: TestClient) -> None:
        resp = client.post(
            "/hosts/import",
            json=[
                {"category": "A", "hostContent": "1.1.1.1 a"},
                {"category": "C", "isComment": True, "commentText": "todo"},
            ],
        )
        assert resp.status_code == 201
        assert [g["category"] for g in resp.json()] == ["A", "C"]

    def test_import_without_category_is_422(self, client: TestClient) -> None:
        resp = client.post("/hosts/import", json=[{"hostContent": "1.1.1.1 a"}])
        assert resp.status_code == 422

    def test_export(self, client: TestClient) -> None:
        _add_host(client, "A", hostContent="1.1.1.1 a")
        resp = client.get("/hosts/export")
        assert resp.status_code == 200
        assert resp.text == "# ==== A ====\n1.1.1.1 a\n"


# ---------------------------------------------------------------------------
# View invalidation
# ---------------------------------------------------------------------------

class TestInvalidation:
    def test_etag_round_trip(self, client: TestClient) -> None:
        first = client.get("/hosts")
        etag = first.headers["etag"]
        cached = client.get("/hosts", headers={"If-None-Match": etag})
        assert cached.status_code == 304

    def test_write_invalidates_etag(self, client: TestClient) -> None:
        etag = client.get("/hosts").headers["etag"]
        _add_host(client, "A", hostContent="1.1.1.1 a")
        resp = client.get("/hosts", headers={"If-None-Match": etag})
        assert resp.status_code == 200
        assert resp.headers["etag"] != etag

    def test_noop_keeps_etag(self, client: TestClient) -> None:
        etag = client.get("/hosts").headers["etag"]
        client.delete("/categories/missing")
        assert client.get("/hosts").headers["etag"] == etag

    def test_write_through_another_store_invalidates_etag(self, tmp_path: Path) -> None:
        path = tmp_path / "db.json"
        app = create_app(store=JsonStore(path))
        with TestClient(app) as c:
            etag = c.get("/hosts").headers["etag"]
            hosts.add_entry(JsonStore(path), "A", HostEntryPatch(host_content="1.1.1.1 a"))
            resp = c.get("/hosts", headers={"If-None-Match": etag})
        assert resp.status_code == 200
        assert resp.headers["etag"] != etag
        assert resp.json()[0]["children"][0]["hostContent"] == "1.1.1.1 a"

    def test_write_fires_invalidation_hook(self, client: TestClient) -> None:
        before = client.app.state.revision
        _add_host(client, "A", hostContent="1.1.1.1 a")
        assert client.app.state.revision == before + 1


# ---------------------------------------------------------------------------
# Store failures
# ---------------------------------------------------------------------------

def test_store_failure_is_500(tmp_path: Path) -> None:
    path = tmp_path / "db.json"
    path.mkdir()
    app = create_app(store=JsonStore(path))
    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/categories")
    assert resp.status_code == 500
    assert "Cannot read" in resp.json()["detail"]
