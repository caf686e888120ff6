"""
Collection Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional


class CollectionCreate(BaseModel):
    """Schema for creating a collection"""
    name: str = Field(..., description="Unique, case-sensitive collection name")


class CollectionResponse(BaseModel):
    """Schema for collection response"""
    id: int
    name: str

    class Config:
        from_attributes = True


class CollectionDeleteResponse(BaseModel):
    success: bool = True
    name: str
    events_deleted: int


class ActivateRequest(BaseModel):
    """Accepts `collection` or `name`"""
    collection: Optional[str] = None
    name: Optional[str] = None


class ActiveCollectionResponse(BaseModel):
    active_collection: str = Field(..., serialization_alias="activeCollection")


class ActivateResponse(ActiveCollectionResponse):
    success: bool = True
