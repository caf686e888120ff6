"""FastAPI dependencies wiring the engine to a request"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventmap.config import Settings, get_settings
from eventmap.database import get_db
from eventmap.services import (
    ActiveCollectionPointer,
    CollectionRegistry,
    EventStore,
    NominatimGeocoder,
    OSRMRouter,
)


def get_geocoder(request: Request) -> NominatimGeocoder:
    """Process-wide geocoder created at startup"""
    geocoder = getattr(request.app.state, "geocoder", None)
    if geocoder is None:
        geocoder = NominatimGeocoder.from_settings()
        request.app.state.geocoder = geocoder
    return geocoder


def get_route_provider(request: Request) -> OSRMRouter:
    """Process-wide routing client created at startup"""
    router = getattr(request.app.state, "router", None)
    if router is None:
        router = OSRMRouter.from_settings()
        request.app.state.router = router
    return router


def get_event_store(
    db: AsyncSession = Depends(get_db),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
    settings: Settings = Depends(get_settings),
) -> EventStore:
    return EventStore(db, geocoder=geocoder, tolerance_m=settings.proximity_tolerance_meters)


def get_collection_registry(db: AsyncSession = Depends(get_db)) -> CollectionRegistry:
    return CollectionRegistry(db)


def get_active_pointer(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ActiveCollectionPointer:
    return ActiveCollectionPointer(db, default_name=settings.default_collection)
