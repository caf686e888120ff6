"""
Error taxonomy for the event map engine.
Every error carries the HTTP status the API answers with.
"""
from typing import Any, Dict, List, Optional


class EventMapError(Exception):
    """Base class for all engine errors"""

    status_code = 500
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "detail": self.message}


class ValidationError(EventMapError):
    """Missing or malformed required field"""

    status_code = 400
    kind = "validation_error"

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.fields:
            data["fields"] = self.fields
        return data


class NotFound(EventMapError):
    """Referenced collection or event does not exist"""

    status_code = 404
    kind = "not_found"


class Conflict(EventMapError):
    """Collection name already taken"""

    status_code = 409
    kind = "conflict"


class DuplicateLocation(EventMapError):
    """An event already occupies this location in the collection"""

    status_code = 409
    kind = "duplicate_location"

    def __init__(self, message: str, latitude: float, longitude: float):
        super().__init__(message)
        self.latitude = latitude
        self.longitude = longitude

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["latitude"] = self.latitude
        data["longitude"] = self.longitude
        return data


class GeocodeError(EventMapError):
    """Address could not be resolved to a coordinate"""

    status_code = 422
    kind = "geocode_error"

    def __init__(self, message: str, address: str):
        super().__init__(message)
        self.address = address

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["address"] = self.address
        return data


class InsufficientPoints(EventMapError):
    """A route needs at least two coordinates"""

    status_code = 400
    kind = "insufficient_points"


class UpstreamError(EventMapError):
    """External routing service failed or returned no route"""

    status_code = 502
    kind = "upstream_error"
