"""
Event Schemas
Required fields are optional at the schema level so that the engine can
report every missing one at once.
"""
from datetime import date as date_type, datetime
from pydantic import BaseModel, Field
from typing import Optional, List, Union


class EventFields(BaseModel):
    """Fields accepted on create and update"""
    title: Optional[str] = None
    type: Optional[str] = Field(None, description="Free-text category used for marker colors and filters")
    date: Optional[Union[date_type, datetime, str]] = Field(None, description="Calendar date; any time of day is dropped")
    description: Optional[str] = Field(None, description="Rich text, stored as-is")
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude in decimal degrees")
    position: Optional[int] = Field(None, ge=1, description="Display order; appended at the end when omitted")
    favorite: Optional[bool] = None


class EventCreate(EventFields):
    """Schema for creating an event"""
    collection: Optional[str] = Field(None, description="Target collection; defaults to the default collection")


class EventUpdate(EventFields):
    """Schema for updating an event; favorite/position keep their value when omitted"""
    collection: Optional[str] = None


class EventResponse(BaseModel):
    """Schema for event response"""
    id: int
    title: str
    type: str
    date: date_type
    description: Optional[str] = None
    address: str
    latitude: float
    longitude: float
    position: Optional[int] = None
    favorite: bool
    collection: str = Field(..., validation_alias="collection_name")

    class Config:
        from_attributes = True


class EventDeleteResponse(BaseModel):
    success: bool = True
    deleted: bool


class FavoriteResponse(BaseModel):
    id: int
    favorite: bool


class EventBulkCreate(BaseModel):
    """Schema for bulk importing events"""
    collection: Optional[str] = None
    events: List[EventFields]
    stop_on_error: bool = Field(True, description="Stop at the first failing item and skip the rest")


class BulkItemResponse(BaseModel):
    index: int
    status: str  # created, failed, skipped
    event: Optional[EventResponse] = None
    error: Optional[str] = None
    detail: Optional[str] = None

    class Config:
        from_attributes = True


class EventBulkResponse(BaseModel):
    collection: str
    created: int
    failed: int
    skipped: int
    items: List[BulkItemResponse]


class ReorderRequest(BaseModel):
    collection: Optional[str] = None
    ordered_ids: List[int] = Field(..., alias="orderedIds")

    class Config:
        populate_by_name = True


class ReorderResponse(BaseModel):
    success: bool = True
    collection: str
    reordered: int
