"""
Collections API Routes
Collection lifecycle and the active collection shown to anonymous readers
"""
from fastapi import APIRouter, Depends
from typing import List

from eventmap.auth import require_admin
from eventmap.dependencies import get_active_pointer, get_collection_registry
from eventmap.schemas.collection import (
    CollectionCreate,
    CollectionResponse,
    CollectionDeleteResponse,
    ActivateRequest,
    ActivateResponse,
    ActiveCollectionResponse
)
from eventmap.services import ActiveCollectionPointer, CollectionRegistry

router = APIRouter()


@router.get("/", response_model=List[str], dependencies=[Depends(require_admin)])
async def list_collections(registry: CollectionRegistry = Depends(get_collection_registry)):
    """List all collection names"""
    return await registry.list()


@router.post("/", response_model=CollectionResponse, dependencies=[Depends(require_admin)])
async def create_collection(
    payload: CollectionCreate,
    registry: CollectionRegistry = Depends(get_collection_registry)
):
    """Create an empty collection"""
    return await registry.create(payload.name)


@router.get("/active", response_model=ActiveCollectionResponse)
async def get_active_collection(pointer: ActiveCollectionPointer = Depends(get_active_pointer)):
    """Get the collection shown to anonymous readers"""
    return ActiveCollectionResponse(active_collection=await pointer.get())


@router.post("/activate", response_model=ActivateResponse, dependencies=[Depends(require_admin)])
async def activate_collection(
    payload: ActivateRequest,
    pointer: ActiveCollectionPointer = Depends(get_active_pointer)
):
    """Set the active collection (the collection does not have to exist yet)"""
    name = await pointer.set(payload.collection or payload.name)
    return ActivateResponse(active_collection=name)


@router.delete("/{name:path}", response_model=CollectionDeleteResponse, dependencies=[Depends(require_admin)])
async def delete_collection(
    name: str,
    registry: CollectionRegistry = Depends(get_collection_registry)
):
    """Delete a collection and all of its events; the name may contain "/" (send it as %2F)"""
    removed = await registry.delete(name)
    return CollectionDeleteResponse(name=name, events_deleted=removed)
