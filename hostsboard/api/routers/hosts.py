"""Host group and entry endpoints.

Routes
------
GET    /hosts                                       Full group collection (ETag aware)
GET    /hosts/export                                Collection as hosts-file text
POST   /hosts/import                                Bulk add entries
POST   /hosts/groups                                Create a group
PUT    /hosts/groups/{category}                     Update a group
DELETE /hosts/groups/{category}                     Delete a group
POST   /hosts/groups/{category}/entries             Add an entry
PUT    /hosts/groups/{category}/entries/{entry_id}  Update / move an entry
DELETE /hosts/groups/{category}/entries/{entry_id}  Delete an entry

Every mutating route answers with the full updated collection.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from typing import Any, Optional

from fastapi import APIRouter, Header, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from hostsboard.db import hosts
from hostsboard.db.errors import NotFoundError, ValidationError
from hostsboard.db.export import render_hosts_file
from hostsboard.db.models import HostEntry, HostEntryPatch, HostGroup, HostGroupPatch, new_entry

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class EntryBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Only read when the entry is sent as a group child; entry routes take
    # the id from the path.
    id: Optional[str] = None
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")
    host_content: Optional[str] = Field(default=None, alias="hostContent")
    category: Optional[str] = None
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    is_comment: Optional[bool] = Field(default=None, alias="isComment")
    comment_text: Optional[str] = Field(default=None, alias="commentText")
    image: Optional[str] = None
    color: Optional[str] = None

    def to_patch(self) -> HostEntryPatch:
        return HostEntryPatch(
            **self.model_dump(exclude_none=True, exclude={"id", "last_updated"})
        )

    def to_child(self, owner: str) -> HostEntry:
        """Build a group child, keeping the client's id and timestamp if sent."""
        entry = new_entry(self.to_patch(), owner)
        if self.id:
            entry = replace(entry, id=self.id)
        if self.last_updated:
            entry = replace(entry, last_updated=self.last_updated)
        return entry


class GroupBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = None
    children: Optional[list[EntryBody]] = None
    is_group: Optional[bool] = Field(default=None, alias="isGroup")

    def to_patch(self, default_category: str = "") -> HostGroupPatch:
        children = None
        if self.children is not None:
            owner = self.category or default_category
            children = [c.to_child(owner) for c in self.children]
        return HostGroupPatch(category=self.category, children=children, is_group=self.is_group)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _collection(groups: list[HostGroup]) -> list[dict[str, Any]]:
    return [g.to_dict() for g in groups]


def _etag(collection: list[dict[str, Any]]) -> str:
    """Content hash of the serialised collection, so writes made through any
    store handle on the same file change it."""
    body = json.dumps(collection, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return f'"{hashlib.sha1(body).hexdigest()}"'


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=list[dict[str, Any]])
def list_groups_endpoint(
    request: Request,
    response: Response,
    if_none_match: Optional[str] = Header(default=None),
) -> Any:
    """Return every group with its entries."""
    collection = _collection(hosts.list_groups(request.app.state.store))
    etag = _etag(collection)
    if if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})
    response.headers["ETag"] = etag
    return collection


@router.get("/export", response_class=PlainTextResponse)
def export_endpoint(request: Request) -> str:
    """Return the collection as hosts-file text."""
    return render_hosts_file(hosts.list_groups(request.app.state.store))


@router.post("/import", status_code=201, response_model=list[dict[str, Any]])
def import_endpoint(body: list[EntryBody], request: Request) -> list[dict[str, Any]]:
    """Add many entries at once; each must carry its ``category``."""
    try:
        groups = hosts.import_entries(request.app.state.store, [e.to_patch() for e in body])
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _collection(groups)


@router.post("/groups", status_code=201, response_model=list[dict[str, Any]])
def create_group_endpoint(body: GroupBody, request: Request) -> list[dict[str, Any]]:
    """Create a new group."""
    try:
        groups = hosts.create_group(request.app.state.store, body.to_patch())
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _collection(groups)


@router.put("/groups/{category}", response_model=list[dict[str, Any]])
def update_group_endpoint(
    category: str,
    body: GroupBody,
    request: Request,
) -> list[dict[str, Any]]:
    """Merge the body over the group keyed by *category*."""
    groups = hosts.update_group(request.app.state.store, category, body.to_patch(category))
    return _collection(groups)


@router.delete("/groups/{category}", response_model=list[dict[str, Any]])
def delete_group_endpoint(category: str, request: Request) -> list[dict[str, Any]]:
    """Delete the group keyed by *category* and its entries."""
    return _collection(hosts.delete_group(request.app.state.store, category))


@router.post(
    "/groups/{category}/entries",
    status_code=201,
    response_model=list[dict[str, Any]],
)
def add_entry_endpoint(
    category: str,
    body: EntryBody,
    request: Request,
) -> list[dict[str, Any]]:
    """Add an entry, creating the group if it does not exist."""
    try:
        groups = hosts.add_entry(request.app.state.store, category, body.to_patch())
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _collection(groups)


@router.put("/groups/{category}/entries/{entry_id}", response_model=list[dict[str, Any]])
def update_entry_endpoint(
    category: str,
    entry_id: str,
    body: EntryBody,
    request: Request,
) -> list[dict[str, Any]]:
    """Update an entry; a changed ``category`` moves it to that group."""
    try:
        groups = hosts.update_entry(
            request.app.state.store, category, entry_id, body.to_patch()
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _collection(groups)


@router.delete("/groups/{category}/entries/{entry_id}", response_model=list[dict[str, Any]])
def delete_entry_endpoint(
    category: str,
    entry_id: str,
    request: Request,
) -> list[dict[str, Any]]:
    """Delete an entry."""
    return _collection(hosts.delete_entry(request.app.state.store, category, entry_id))
