"""Pydantic Schemas"""
from eventmap.schemas.collection import (
    CollectionCreate,
    CollectionResponse,
    CollectionDeleteResponse,
    ActivateRequest,
    ActivateResponse,
    ActiveCollectionResponse
)
from eventmap.schemas.event import (
    EventFields,
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

__all__ = [
    "CollectionCreate",
    "CollectionResponse",
    "CollectionDeleteResponse",
    "ActivateRequest",
    "ActivateResponse",
    "ActiveCollectionResponse",
    "EventFields",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventDeleteResponse",
    "FavoriteResponse",
    "EventBulkCreate",
    "EventBulkResponse",
    "BulkItemResponse",
    "ReorderRequest",
    "ReorderResponse",
    "RouteResponse"
]
