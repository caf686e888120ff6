"""Event collection engine"""
from eventmap.services.active_collection import ActiveCollectionPointer
from eventmap.services.collection_registry import CollectionRegistry
from eventmap.services.event_store import EventStore, BulkResult, BulkItemResult
from eventmap.services.geocoder import Coordinate, NominatimGeocoder
from eventmap.services.routing import OSRMRouter, Route, TRAVEL_MODES

__all__ = [
    "ActiveCollectionPointer",
    "CollectionRegistry",
    "EventStore",
    "BulkResult",
    "BulkItemResult",
    "Coordinate",
    "NominatimGeocoder",
    "OSRMRouter",
    "Route",
    "TRAVEL_MODES",
]
