"""
Route Schemas
"""
from pydantic import BaseModel, Field
from typing import Any, Dict


class RouteResponse(BaseModel):
    collection: str
    mode: str
    distance: float = Field(..., description="Meters")
    duration: float = Field(..., description="Seconds")
    geometry: Dict[str, Any] = Field(..., description="GeoJSON LineString")
