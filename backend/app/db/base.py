# backend/app/db/base.py
"""
SQLAlchemy declarative base and re-exports of the session components.

Models import Base from here; endpoints import get_db from here.
"""
from sqlalchemy.orm import DeclarativeBase

# Largest id a row can have: BIGINT on PostgreSQL, INTEGER on SQLite
MAX_ROW_ID = (1 << 63) - 1


# ─────────────────────────────────────────────────────────────────────────────
# Declarative Base for ORM Models
# All models inherit from this class
# ─────────────────────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Usage:
        class Tag(Base):
            __tablename__ = "tags"
            id = Column(Integer, primary_key=True)
            ...
    """
    pass


from backend.app.db.session import (  # noqa: E402
    engine,
    AsyncSessionLocal,
    get_db,
    run_in_transaction,
)

__all__ = [
    "Base",
    "MAX_ROW_ID",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "run_in_transaction",
]
