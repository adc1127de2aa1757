"""Vocabulary endpoints, mounted once for categories and once for types.

Routes (same shape under ``/categories`` and ``/types``)
------
GET    /               List values
POST   /               Add a value (no-op if present)
PUT    /{old}          Rename a value, cascading into host records
DELETE /{value}        Remove a value (host records untouched)
"""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from hostsboard.db import vocabulary
from hostsboard.db.errors import ValidationError


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class ValueBody(BaseModel):
    value: str


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------

def _build_router(
    list_fn: Callable,
    add_fn: Callable,
    update_fn: Callable,
    delete_fn: Callable,
) -> APIRouter:
    router = APIRouter()

    @router.get("", response_model=list[str])
    def list_values(request: Request) -> list[str]:
        """Return every value in insertion order."""
        return list_fn(request.app.state.store)

    @router.post("", status_code=201, response_model=list[str])
    def add_value(body: ValueBody, request: Request) -> list[str]:
        """Append a value unless already present."""
        try:
            return add_fn(request.app.state.store, body.value)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @router.put("/{old}", response_model=list[str])
    def update_value(old: str, body: ValueBody, request: Request) -> list[str]:
        """Rename *old* to ``body.value``."""
        try:
            return update_fn(request.app.state.store, old, body.value)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @router.delete("/{value}", response_model=list[str])
    def delete_value(value: str, request: Request) -> list[str]:
        """Remove a value."""
        return delete_fn(request.app.state.store, value)

    return router


categories_router = _build_router(
    vocabulary.list_categories,
    vocabulary.add_category,
    vocabulary.update_category,
    vocabulary.delete_category,
)
types_router = _build_router(
    vocabulary.list_types,
    vocabulary.add_type,
    vocabulary.update_type,
    vocabulary.delete_type,
)
