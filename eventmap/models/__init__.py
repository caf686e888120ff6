"""SQLAlchemy Models"""
from eventmap.models.collection import Collection
from eventmap.models.event import Event
from eventmap.models.active_collection import ActiveCollection, ACTIVE_COLLECTION_ROW_ID

__all__ = [
    "Collection",
    "Event",
    "ActiveCollection",
    "ACTIVE_COLLECTION_ROW_ID",
]
