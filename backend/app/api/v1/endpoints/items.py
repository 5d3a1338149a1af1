# backend/app/api/v1/endpoints/items.py
from typing import List

from fastapi import APIRouter, Depends, Path, status

from backend.app.api import deps
from backend.app.core.errors import CatalogServiceError
from backend.app.db.base import MAX_ROW_ID
from backend.app.schemas.item import (
    ItemCreate,
    ItemCreated,
    ItemResponse,
    ItemTagsUpdate,
    ItemTagsUpdated,
)
from backend.app.services.items import ItemStore

router = APIRouter()


@router.get("/", response_model=List[ItemResponse])
async def read_items(
        catalog_id: int = Depends(deps.get_current_catalog_id),
        store: ItemStore = Depends(deps.get_item_store),
):
    try:
        return await store.list_items(catalog_id)
    except CatalogServiceError as exc:
        raise deps.as_http_error(exc)


@router.post("/", response_model=ItemCreated, status_code=status.HTTP_201_CREATED)
async def create_item(
        item_in: ItemCreate,
        catalog_id: int = Depends(deps.get_current_catalog_id),
        store: ItemStore = Depends(deps.get_item_store),
):
    try:
        item_id = await store.create_item(
            catalog_id,
            name=item_in.name,
            fingerprint=item_in.fingerprint,
            photo_url=item_in.photo_url,
            tag_ids=item_in.tags,
        )
    except CatalogServiceError as exc:
        raise deps.as_http_error(exc)
    return {"id": item_id}


@router.put("/{item_id}", response_model=ItemTagsUpdated)
async def replace_item_tags(
        payload: ItemTagsUpdate,
        item_id: int = Path(..., ge=1, le=MAX_ROW_ID),
        catalog_id: int = Depends(deps.get_current_catalog_id),
        store: ItemStore = Depends(deps.get_item_store),
):
    try:
        await store.replace_item_tags(catalog_id, item_id, payload.tags)
        tags = await store.get_item_tags(catalog_id, item_id)
    except CatalogServiceError as exc:
        raise deps.as_http_error(exc)
    return {"status": "ok", "tags": tags}
