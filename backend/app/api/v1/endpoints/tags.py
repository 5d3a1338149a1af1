# backend/app/api/v1/endpoints/tags.py
from typing import List

from fastapi import APIRouter, Depends, Query, status

from backend.app.api import deps
from backend.app.core.errors import CatalogServiceError
from backend.app.schemas.tag import TagCreate, TagResponse
from backend.app.services.items import ItemStore

router = APIRouter()


@router.get("/", response_model=List[TagResponse])
async def search_tags(
        q: str = Query("", description="Part of the tag name, case-insensitive"),
        catalog_id: int = Depends(deps.get_current_catalog_id),
        store: ItemStore = Depends(deps.get_item_store),
):
    try:
        return await store.search_tags(catalog_id, q)
    except CatalogServiceError as exc:
        raise deps.as_http_error(exc)


@router.post("/", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
        tag_in: TagCreate,
        catalog_id: int = Depends(deps.get_current_catalog_id),
        store: ItemStore = Depends(deps.get_item_store),
):
    try:
        tag_id = await store.find_or_create_tag(catalog_id, tag_in.name)
    except CatalogServiceError as exc:
        raise deps.as_http_error(exc)
    return {"id": tag_id, "name": tag_in.name.strip()}
