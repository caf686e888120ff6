"""
Collection registry: identity and lifecycle of collections.
Deleting a collection deletes its events.
"""
import logging
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventmap.database import transaction
from eventmap.errors import Conflict, NotFound, ValidationError
from eventmap.models import Collection, Event
from eventmap.services.active_collection import ActiveCollectionPointer
from eventmap.utils.metrics import record_collection_operation

logger = logging.getLogger(__name__)


class CollectionRegistry:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> List[str]:
        """All collection names, sorted."""
        result = await self.db.execute(select(Collection.name).order_by(Collection.name))
        return list(result.scalars().all())

    async def find(self, name: str, lock: bool = False):
        """Collection by name, or None. `lock` takes a row lock for the rest of the transaction."""
        query = select(Collection).where(Collection.name == name)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get(self, name: str, lock: bool = False) -> Collection:
        collection = await self.find(name, lock=lock)
        if collection is None:
            raise NotFound(f"Collection '{name}' not found")
        return collection

    async def create(self, name: str) -> Collection:
        if not name or not name.strip():
            raise ValidationError("name required", fields=["name"])

        if await self.find(name) is not None:
            record_collection_operation("create", "conflict")
            raise Conflict(f"Collection '{name}' already exists")

        collection = Collection(name=name)
        try:
            async with transaction(self.db):
                self.db.add(collection)
                await self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent create of the same name
            record_collection_operation("create", "conflict")
            raise Conflict(f"Collection '{name}' already exists") from e

        record_collection_operation("create")
        logger.info(f"Created collection '{name}' (id={collection.id})")
        return collection

    async def delete(self, name: str) -> int:
        """
        Delete the collection and all of its events. Returns the number of
        events removed. The active pointer is left untouched.
        """
        async with transaction(self.db):
            collection = await self.get(name, lock=True)
            result = await self.db.execute(
                delete(Event)
                .where(Event.collection_id == collection.id)
                .execution_options(synchronize_session=False)
            )
            removed = result.rowcount or 0
            await self.db.delete(collection)

        record_collection_operation("delete")
        logger.info(f"Deleted collection '{name}' and {removed} events")

        active = await ActiveCollectionPointer(self.db).get()
        if active == name:
            logger.warning(
                f"Deleted collection '{name}' is still the active collection; "
                "readers will see an empty list until another one is activated"
            )
        return removed
