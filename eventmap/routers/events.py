"""
Events API Routes
Reads are public and default to the active collection; writes require an admin token
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from eventmap.auth import require_admin
from eventmap.config import Settings, get_settings
from eventmap.dependencies import get_active_pointer, get_event_store, get_route_provider
from eventmap.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDeleteResponse,
    FavoriteResponse,
    EventBulkCreate,
    EventBulkResponse,
    BulkItemResponse,
    ReorderRequest,
    ReorderResponse
)
from eventmap.schemas.route import RouteResponse
from eventmap.services import ActiveCollectionPointer, EventStore, OSRMRouter, TRAVEL_MODES
from eventmap.services.event_store import BULK_SKIPPED
from eventmap.services.geocoder import Coordinate

router = APIRouter()


async def _read_collection(collection: Optional[str], pointer: ActiveCollectionPointer) -> str:
    """Explicit collection, else the active one"""
    return collection or await pointer.get()


@router.get("/", response_model=List[EventResponse])
async def list_events(
    collection: Optional[str] = Query(None, description="Collection name; defaults to the active collection"),
    store: EventStore = Depends(get_event_store),
    pointer: ActiveCollectionPointer = Depends(get_active_pointer)
):
    """List events in display order"""
    name = await _read_collection(collection, pointer)
    return await store.list(name)


@router.post("/", response_model=EventResponse, dependencies=[Depends(require_admin)])
async def create_event(
    payload: EventCreate,
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings)
):
    """Create an event, geocoding the address when coordinates are missing"""
    fields = payload.model_dump(exclude={"collection"})
    return await store.create(payload.collection or settings.default_collection, fields)


@router.post("/bulk", response_model=EventBulkResponse, dependencies=[Depends(require_admin)])
async def bulk_create_events(
    request: EventBulkCreate,
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings)
):
    """
    Import events one by one. Items that succeeded stay imported even when a
    later one fails; check `items` for the outcome of each entry.
    """
    name = request.collection or settings.default_collection
    result = await store.bulk_create(
        name,
        [item.model_dump() for item in request.events],
        stop_on_error=request.stop_on_error
    )

    items = [
        BulkItemResponse(
            index=item.index,
            status=item.status,
            event=EventResponse.model_validate(item.event) if item.event is not None else None,
            error=item.error,
            detail=item.detail
        )
        for item in result.items
    ]
    return EventBulkResponse(
        collection=name,
        created=len(result.created),
        failed=len(result.failed),
        skipped=sum(1 for item in result.items if item.status == BULK_SKIPPED),
        items=items
    )


@router.patch("/reorder", response_model=ReorderResponse, dependencies=[Depends(require_admin)])
async def reorder_events(
    request: ReorderRequest,
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings)
):
    """Re-sequence events to 1..N in the given order (all or nothing)"""
    name = request.collection or settings.default_collection
    count = await store.reorder(name, request.ordered_ids)
    return ReorderResponse(collection=name, reordered=count)


@router.get("/route", response_model=RouteResponse)
async def get_route(
    collection: Optional[str] = Query(None, description="Collection name; defaults to the active collection"),
    mode: str = Query("driving", description=f"Travel mode: {', '.join(TRAVEL_MODES)}"),
    store: EventStore = Depends(get_event_store),
    pointer: ActiveCollectionPointer = Depends(get_active_pointer),
    route_provider: OSRMRouter = Depends(get_route_provider)
):
    """Route through the favorite events of a collection, in display order"""
    name = await _read_collection(collection, pointer)
    favorites = await store.list_favorites(name)
    coordinates = [Coordinate(latitude=e.latitude, longitude=e.longitude) for e in favorites]

    route = await route_provider.route(coordinates, mode)
    return RouteResponse(
        collection=name,
        mode=mode,
        distance=route.distance,
        duration=route.duration,
        geometry=route.geometry
    )


@router.put("/{event_id}", response_model=EventResponse, dependencies=[Depends(require_admin)])
async def update_event(
    event_id: int,
    payload: EventUpdate,
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings)
):
    """Update an event; favorite and position are kept when omitted"""
    fields = payload.model_dump(exclude={"collection"}, exclude_unset=True)
    return await store.update(payload.collection or settings.default_collection, event_id, fields)


@router.delete("/{event_id}", response_model=EventDeleteResponse, dependencies=[Depends(require_admin)])
async def delete_event(
    event_id: int,
    collection: Optional[str] = Query(None, description="Collection name; defaults to the default collection, not the active one"),
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings)
):
    """
    Delete an event (no error when it is already gone).
    Without `collection` the default collection is searched, so an event of
    another collection is reported as `deleted: false` and kept.
    """
    removed = await store.delete(collection or settings.default_collection, event_id)
    return EventDeleteResponse(deleted=removed)


@router.patch("/{event_id}/favorite", response_model=FavoriteResponse, dependencies=[Depends(require_admin)])
async def toggle_favorite(
    event_id: int,
    collection: Optional[str] = Query(None, description="Collection name; defaults to the default collection, not the active one"),
    store: EventStore = Depends(get_event_store),
    settings: Settings = Depends(get_settings)
):
    """Flip the favorite flag of an event"""
    favorite = await store.toggle_favorite(collection or settings.default_collection, event_id)
    return FavoriteResponse(id=event_id, favorite=favorite)
