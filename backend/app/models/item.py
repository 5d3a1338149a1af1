# backend/app/models/item.py
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from backend.app.db.base import Base


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    catalog_id = Column(Integer, ForeignKey("catalogs.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)

    # Perceptual hash as submitted: 16 hex chars = 64 bits (8x8 comparisons)
    fingerprint = Column(String(16), nullable=False)

    # Same 64 bits as a signed integer, for numeric range queries
    fingerprint_int = Column("fingerprint_bigint", BigInteger, nullable=False, index=True)

    photo_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
