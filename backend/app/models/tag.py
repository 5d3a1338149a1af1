# backend/app/models/tag.py
from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint

from backend.app.db.base import Base

# Many-to-many between items and tags, no payload
items_tags = Table(
    "items_tags",
    Base.metadata,
    Column("item_id", Integer, ForeignKey("items.id"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    catalog_id = Column(Integer, ForeignKey("catalogs.id"), nullable=False, index=True)

    # One name per catalog. find_or_create_tag relies on this for its
    # insert-or-ignore.
    __table_args__ = (
        UniqueConstraint("catalog_id", "name", name="uq_tags_catalog_name"),
    )

    def __repr__(self) -> str:
        return f"<Tag {self.id} {self.name!r}>"
