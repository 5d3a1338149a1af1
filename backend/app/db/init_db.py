# backend/app/db/init_db.py
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from backend.app.db.base import Base, engine

# Imported for their side effect: registering tables on Base.metadata
from backend.app.models import catalog, item, tag  # noqa: F401

logger = logging.getLogger(__name__)


async def init_models(bind: Optional[AsyncEngine] = None, drop: bool = False) -> None:
    """Create every table that does not exist yet (drop first if asked)."""
    target = bind or engine
    async with target.begin() as conn:
        if drop:
            logger.warning("Dropping all tables")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables are ready")
