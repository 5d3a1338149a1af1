# backend/app/services/items.py
"""
Items and tags of one catalog.

Every query is scoped by catalog_id in the statement itself; there is no
unscoped read followed by an ownership check. Every operation runs in a
single transaction through run_in_transaction(), so a failure at any step
leaves nothing behind.
"""
import logging
from itertools import groupby
from typing import Iterable, List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.errors import NotFoundError, TagOwnershipError, ValidationError
from backend.app.db.base import MAX_ROW_ID
from backend.app.db.session import run_in_transaction
from backend.app.models.item import Item
from backend.app.models.tag import Tag, items_tags
from backend.app.schemas.item import ItemResponse
from backend.app.schemas.tag import TagResponse
from backend.app.services import fingerprint as fingerprint_codec

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10

# ON CONFLICT DO NOTHING support, keyed by dialect name
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _unique(ids: Iterable[int]) -> List[int]:
    return list(dict.fromkeys(ids))


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_row_id(value: int) -> bool:
    return 1 <= value <= MAX_ROW_ID


class ItemStore:
    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.db = db
        self.timeout = timeout

    # ── items ────────────────────────────────────────────────────────────

    async def list_items(self, catalog_id: int) -> List[ItemResponse]:
        """
        All items of the catalog with their tags, ordered by item id and
        then tag name.

        One LEFT JOIN query; consecutive rows of the same item are folded
        into one ItemResponse.
        """
        stmt = (
            select(
                Item.id,
                Item.name,
                Item.fingerprint,
                Item.photo_url,
                Item.created_at,
                Tag.id.label("tag_id"),
                Tag.name.label("tag_name"),
            )
            .select_from(Item)
            .outerjoin(items_tags, items_tags.c.item_id == Item.id)
            .outerjoin(Tag, Tag.id == items_tags.c.tag_id)
            .where(Item.catalog_id == catalog_id)
            .order_by(Item.id, Tag.name)
        )

        async def _list() -> List[ItemResponse]:
            result = await self.db.execute(stmt)
            items = []
            for _, rows in groupby(result, key=lambda row: row.id):
                rows = list(rows)
                first = rows[0]
                items.append(
                    ItemResponse(
                        id=first.id,
                        name=first.name,
                        fingerprint=first.fingerprint,
                        photo_url=first.photo_url,
                        created_at=first.created_at,
                        tags=[
                            TagResponse(id=row.tag_id, name=row.tag_name)
                            for row in rows
                            if row.tag_id is not None
                        ],
                    )
                )
            return items

        return await run_in_transaction(self.db, _list, self.timeout, "list_items")

    async def create_item(
        self,
        catalog_id: int,
        name: str,
        fingerprint: str,
        photo_url: Optional[str] = None,
        tag_ids: Iterable[int] = (),
    ) -> int:
        # Fails before anything touches the database
        fingerprint_int = fingerprint_codec.encode(fingerprint)
        tag_ids = _unique(tag_ids)

        async def _create() -> int:
            item = Item(
                catalog_id=catalog_id,
                name=name,
                fingerprint=fingerprint,
                fingerprint_int=fingerprint_int,
                photo_url=photo_url,
            )
            self.db.add(item)
            await self.db.flush()
            await self._attach_tags(catalog_id, item.id, tag_ids)
            return item.id

        item_id = await run_in_transaction(self.db, _create, self.timeout, "create_item")
        logger.info("Catalog %s created item %s with %d tag(s)", catalog_id, item_id, len(tag_ids))
        return item_id

    async def replace_item_tags(self, catalog_id: int, item_id: int, tag_ids: Iterable[int]) -> None:
        """
        Swap the item's tag set for ``tag_ids`` in one transaction.

        This is a full replace: tags missing from ``tag_ids`` are dropped.
        The item row itself is left alone.
        """
        tag_ids = _unique(tag_ids)

        async def _replace() -> None:
            if not _is_row_id(item_id):
                raise NotFoundError(f"item {item_id} not found")
            owned = await self.db.execute(
                select(Item.id).where(Item.id == item_id, Item.catalog_id == catalog_id)
            )
            if owned.scalar_one_or_none() is None:
                raise NotFoundError(f"item {item_id} not found")

            await self.db.execute(delete(items_tags).where(items_tags.c.item_id == item_id))
            await self._attach_tags(catalog_id, item_id, tag_ids)

        await run_in_transaction(self.db, _replace, self.timeout, "replace_item_tags")
        logger.info("Catalog %s replaced tags of item %s: %s", catalog_id, item_id, tag_ids)

    async def get_item_tags(self, catalog_id: int, item_id: int) -> List[TagResponse]:
        if not _is_row_id(item_id):
            return []

        stmt = (
            select(Tag.id, Tag.name)
            .join(items_tags, items_tags.c.tag_id == Tag.id)
            .join(Item, Item.id == items_tags.c.item_id)
            .where(Item.id == item_id, Item.catalog_id == catalog_id)
            .order_by(Tag.name)
        )

        async def _get() -> List[TagResponse]:
            result = await self.db.execute(stmt)
            return [TagResponse(id=row.id, name=row.name) for row in result]

        return await run_in_transaction(self.db, _get, self.timeout, "get_item_tags")

    async def _attach_tags(self, catalog_id: int, item_id: int, tag_ids: List[int]) -> None:
        for tag_id in tag_ids:
            if not _is_row_id(tag_id):
                raise TagOwnershipError(tag_id)

            owned = await self.db.execute(
                select(Tag.id).where(Tag.id == tag_id, Tag.catalog_id == catalog_id)
            )
            if owned.scalar_one_or_none() is None:
                raise TagOwnershipError(tag_id)

            await self.db.execute(insert(items_tags).values(item_id=item_id, tag_id=tag_id))

    # ── tags ─────────────────────────────────────────────────────────────

    async def find_or_create_tag(self, catalog_id: int, name: str) -> int:
        """
        Id of the tag called ``name`` in the catalog, created if missing.

        Safe under concurrent calls: the insert is ON CONFLICT DO NOTHING
        against the (catalog_id, name) unique constraint, and the id is
        read back afterwards, so racing callers all get the same row.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("tag name must not be empty")

        async def _find_or_create() -> int:
            tag_id = await self._tag_id_by_name(catalog_id, name)
            if tag_id is not None:
                return tag_id

            await self.db.execute(self._insert_tag_ignoring_conflict(catalog_id, name))
            tag_id = await self._tag_id_by_name(catalog_id, name)
            logger.info("Catalog %s tag %r -> id %s", catalog_id, name, tag_id)
            return tag_id

        return await run_in_transaction(self.db, _find_or_create, self.timeout, "find_or_create_tag")

    async def search_tags(self, catalog_id: int, query: str) -> List[TagResponse]:
        """Case-insensitive substring search, alphabetical, at most 10 tags."""
        query = (query or "").strip()
        if not query:
            raise ValidationError("search query must not be empty")

        stmt = (
            select(Tag.id, Tag.name)
            .where(
                Tag.catalog_id == catalog_id,
                Tag.name.ilike(f"%{_escape_like(query)}%", escape="\\"),
            )
            .order_by(Tag.name)
            .limit(SEARCH_LIMIT)
        )

        async def _search() -> List[TagResponse]:
            result = await self.db.execute(stmt)
            return [TagResponse(id=row.id, name=row.name) for row in result]

        return await run_in_transaction(self.db, _search, self.timeout, "search_tags")

    async def _tag_id_by_name(self, catalog_id: int, name: str) -> Optional[int]:
        result = await self.db.execute(
            select(Tag.id).where(Tag.catalog_id == catalog_id, Tag.name == name)
        )
        return result.scalar_one_or_none()

    def _insert_tag_ignoring_conflict(self, catalog_id: int, name: str):
        dialect = self.db.get_bind().dialect.name
        try:
            stmt = _UPSERT_INSERTS[dialect](Tag)
        except KeyError:
            raise RuntimeError(f"unsupported database dialect {dialect!r}") from None

        return stmt.values(catalog_id=catalog_id, name=name).on_conflict_do_nothing(
            index_elements=["catalog_id", "name"]
        )
