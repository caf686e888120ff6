"""
Active collection pointer: the single collection shown to anonymous readers.
Stored as one row (id = 1) created lazily on the first set.
"""
import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from eventmap.config import get_settings
from eventmap.database import transaction
from eventmap.errors import ValidationError
from eventmap.models import ActiveCollection, ACTIVE_COLLECTION_ROW_ID
from eventmap.utils.metrics import record_collection_operation

logger = logging.getLogger(__name__)


class ActiveCollectionPointer:
    def __init__(self, db: AsyncSession, default_name: str = None):
        self.db = db
        self.default_name = default_name or get_settings().default_collection

    async def get(self) -> str:
        """Current active name, or the default sentinel when never set."""
        result = await self.db.execute(
            select(ActiveCollection.collection_name).where(
                ActiveCollection.id == ACTIVE_COLLECTION_ROW_ID
            )
        )
        name = result.scalar_one_or_none()
        return name or self.default_name

    def _insert(self):
        if self.db.get_bind().dialect.name == "sqlite":
            return sqlite_insert(ActiveCollection)
        return pg_insert(ActiveCollection)

    async def set(self, name: str) -> str:
        """
        Point readers at `name`. Idempotent upsert; the name is not required
        to exist as a collection yet.
        """
        if not name or not name.strip():
            raise ValidationError("collection required", fields=["collection"])

        # Single statement so concurrent first activations cannot both insert row 1
        stmt = self._insert().values(id=ACTIVE_COLLECTION_ROW_ID, collection_name=name)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ActiveCollection.id],
            set_={"collection_name": name, "updated_at": func.now()},
        )
        async with transaction(self.db):
            await self.db.execute(stmt)

        record_collection_operation("activate")
        logger.info(f"Active collection set to '{name}'")
        return name
