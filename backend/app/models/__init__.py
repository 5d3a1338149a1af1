from backend.app.models.catalog import Catalog
from backend.app.models.item import Item
from backend.app.models.tag import Tag, items_tags

__all__ = ["Catalog", "Item", "Tag", "items_tags"]
