"""
Event store: events of a collection.

Write pipeline for create/update:
    validate -> geocode (outside any transaction) -> one transaction
    (proximity guard on create, position assignment, persist)
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventmap.config import get_settings
from eventmap.database import transaction
from eventmap.errors import EventMapError, DuplicateLocation, GeocodeError, NotFound, ValidationError
from eventmap.models import Collection, Event
from eventmap.services.collection_registry import CollectionRegistry
from eventmap.services.positions import display_order, next_position, resequence, validate_order
from eventmap.services.proximity import collection_coordinates, find_neighbor
from eventmap.utils.date_utils import normalize_event_date
from eventmap.utils.metrics import record_event_operation, record_reorder

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "type", "date", "address")

BULK_CREATED = "created"
BULK_FAILED = "failed"
BULK_SKIPPED = "skipped"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_event_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check required fields and normalize values for persistence.
    Raises ValidationError naming every missing or malformed field.
    """
    missing = [name for name in REQUIRED_FIELDS if _is_blank(fields.get(name))]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required", fields=missing)

    try:
        event_date = normalize_event_date(fields["date"])
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"invalid date: {fields['date']!r}", fields=["date"]) from e

    latitude = fields.get("latitude")
    longitude = fields.get("longitude")
    if latitude is not None and not -90 <= latitude <= 90:
        raise ValidationError("latitude must be between -90 and 90", fields=["latitude"])
    if longitude is not None and not -180 <= longitude <= 180:
        raise ValidationError("longitude must be between -180 and 180", fields=["longitude"])

    return {
        "title": fields["title"],
        "type": fields["type"],
        "date": event_date,
        "description": fields.get("description"),
        "address": fields["address"],
        "latitude": latitude,
        "longitude": longitude,
    }


@dataclass
class BulkItemResult:
    """Outcome of one bulk import item."""
    index: int
    status: str  # created, failed, skipped
    event: Optional[Event] = None
    error: Optional[str] = None
    detail: Optional[str] = None


@dataclass
class BulkResult:
    items: List[BulkItemResult]

    @property
    def created(self) -> List[Event]:
        return [item.event for item in self.items if item.status == BULK_CREATED]

    @property
    def failed(self) -> List[BulkItemResult]:
        return [item for item in self.items if item.status == BULK_FAILED]


class EventStore:
    def __init__(self, db: AsyncSession, geocoder=None, tolerance_m: float = None):
        self.db = db
        self.geocoder = geocoder
        self.tolerance_m = (
            get_settings().proximity_tolerance_meters if tolerance_m is None else tolerance_m
        )
        self.registry = CollectionRegistry(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _collection_id(self, collection_name: str):
        return select(Collection.id).where(Collection.name == collection_name).scalar_subquery()

    async def list(self, collection_name: str) -> List[Event]:
        """Events in display order. Unknown or empty collection -> []."""
        result = await self.db.execute(
            select(Event)
            .where(Event.collection_id == self._collection_id(collection_name))
            .order_by(*display_order())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_favorites(self, collection_name: str) -> List[Event]:
        """Favorite events in display order."""
        result = await self.db.execute(
            select(Event)
            .where(
                Event.collection_id == self._collection_id(collection_name),
                Event.favorite.is_(True),
            )
            .order_by(*display_order())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _get_event(self, collection_id: int, event_id: int) -> Event:
        result = await self.db.execute(
            select(Event).where(Event.id == event_id, Event.collection_id == collection_id)
            .execution_options(populate_existing=True)
        )
        event = result.scalar_one_or_none()
        if event is None:
            raise NotFound(f"Event {event_id} not found")
        return event

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _ensure_coordinates(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Fill latitude/longitude from the address when either is missing."""
        if values["latitude"] is not None and values["longitude"] is not None:
            return values
        if self.geocoder is None:
            raise GeocodeError("No geocoder configured", address=values["address"])

        coordinate = await self.geocoder.resolve(values["address"])
        values["latitude"] = coordinate.latitude
        values["longitude"] = coordinate.longitude
        return values

    async def create(self, collection_name: str, fields: Mapping[str, Any]) -> Event:
        """
        Create an event.

        Raises:
            ValidationError: a required field is missing or malformed
            GeocodeError: no coordinates given and the address did not resolve
            NotFound: unknown collection
            DuplicateLocation: an event already sits at this coordinate
        """
        try:
            values = validate_event_fields(fields)
            values = await self._ensure_coordinates(values)
            candidate = (values["latitude"], values["longitude"])

            async with transaction(self.db):
                collection = await self.registry.get(collection_name, lock=True)

                existing = await collection_coordinates(self.db, collection.id)
                if find_neighbor(existing, candidate, self.tolerance_m) is not None:
                    raise DuplicateLocation(
                        "Event already exists at this location",
                        latitude=candidate[0],
                        longitude=candidate[1],
                    )

                position = fields.get("position")
                if position is None:
                    position = await next_position(self.db, collection.id)

                event = Event(
                    collection=collection,
                    position=position,
                    favorite=bool(fields.get("favorite") or False),
                    **values,
                )
                self.db.add(event)
                await self.db.flush()
        except EventMapError as e:
            record_event_operation("create", e.kind)
            logger.warning(f"Create event in '{collection_name}' rejected: {e.message}")
            raise

        record_event_operation("create")
        logger.info(
            f"Created event {event.id} '{event.title}' in '{collection_name}' at position {event.position}"
        )
        return event

    async def update(self, collection_name: str, event_id: int, fields: Mapping[str, Any]) -> Event:
        """
        Replace an event's fields. `favorite` and `position` keep their
        current values when omitted. The proximity guard is not applied.
        """
        try:
            values = validate_event_fields(fields)
            values = await self._ensure_coordinates(values)

            async with transaction(self.db):
                collection = await self.registry.get(collection_name)
                event = await self._get_event(collection.id, event_id)

                for name, value in values.items():
                    setattr(event, name, value)
                if fields.get("position") is not None:
                    event.position = fields["position"]
                if fields.get("favorite") is not None:
                    event.favorite = fields["favorite"]
        except EventMapError as e:
            record_event_operation("update", e.kind)
            logger.warning(f"Update event {event_id} in '{collection_name}' rejected: {e.message}")
            raise

        record_event_operation("update")
        logger.info(f"Updated event {event_id} in '{collection_name}'")
        return event

    async def delete(self, collection_name: str, event_id: int) -> bool:
        """Ensure the event is absent. Returns True if a row was removed."""
        async with transaction(self.db):
            result = await self.db.execute(
                delete(Event)
                .where(
                    Event.id == event_id,
                    Event.collection_id == self._collection_id(collection_name),
                )
                .execution_options(synchronize_session=False)
            )
        removed = (result.rowcount or 0) > 0

        record_event_operation("delete", "ok" if removed else "absent")
        if removed:
            logger.info(f"Deleted event {event_id} from '{collection_name}'")
        return removed

    async def toggle_favorite(self, collection_name: str, event_id: int) -> bool:
        """Flip the favorite flag and return the new value."""
        async with transaction(self.db):
            collection = await self.registry.get(collection_name)
            event = await self._get_event(collection.id, event_id)
            event.favorite = not event.favorite
            favorite = event.favorite

        record_event_operation("favorite")
        logger.info(f"Event {event_id} in '{collection_name}' favorite={favorite}")
        return favorite

    async def bulk_create(
        self,
        collection_name: str,
        items: Sequence[Mapping[str, Any]],
        stop_on_error: bool = True,
    ) -> BulkResult:
        """
        Import events one by one without the proximity guard. Imported events
        have no position and list after the positioned ones, in import order.

        Each item commits on its own; nothing already imported is rolled back
        when a later item fails. With stop_on_error the remaining items are
        reported as skipped, so the created events are a prefix of the input.
        """
        if not items:
            raise ValidationError("events array required", fields=["events"])

        await self.registry.get(collection_name)
        # Close the read transaction before the first geocoding call
        await self.db.commit()

        results: List[BulkItemResult] = []
        stopped = False
        for index, item in enumerate(items):
            if stopped:
                results.append(BulkItemResult(index=index, status=BULK_SKIPPED))
                continue

            try:
                values = validate_event_fields(item)
                values = await self._ensure_coordinates(values)
                async with transaction(self.db):
                    collection = await self.registry.get(collection_name)
                    event = Event(collection=collection, position=None, favorite=False, **values)
                    self.db.add(event)
                    await self.db.flush()
            except EventMapError as e:
                record_event_operation("bulk_item", e.kind)
                logger.warning(f"Bulk import into '{collection_name}': item {index} failed: {e.message}")
                results.append(BulkItemResult(index=index, status=BULK_FAILED, error=e.kind, detail=e.message))
                stopped = stop_on_error
                continue
            except SQLAlchemyError as e:
                record_event_operation("bulk_item", "database_error")
                logger.exception(f"Bulk import into '{collection_name}': item {index} could not be stored")
                results.append(
                    BulkItemResult(index=index, status=BULK_FAILED, error="database_error", detail=str(e))
                )
                stopped = stop_on_error
                continue

            # A later failing item rolls back and expires everything still in
            # the session; keep the imported rows readable for the result
            self.db.expunge(event)
            self.db.expunge(collection)

            record_event_operation("bulk_item")
            results.append(BulkItemResult(index=index, status=BULK_CREATED, event=event))

        bulk = BulkResult(items=results)
        logger.info(
            f"Bulk import into '{collection_name}': {len(bulk.created)} created, "
            f"{len(bulk.failed)} failed, {len(items)} submitted"
        )
        return bulk

    async def reorder(self, collection_name: str, ordered_ids: Sequence[int]) -> int:
        """
        Set position = index + 1 for each id as one all-or-nothing unit.
        Events not listed keep their position.
        """
        try:
            ids = validate_order(ordered_ids)
            async with transaction(self.db):
                collection = await self.registry.get(collection_name, lock=True)
                count = await resequence(self.db, collection.id, ids)
        except EventMapError as e:
            record_event_operation("reorder", e.kind)
            logger.warning(f"Reorder of '{collection_name}' rejected: {e.message}")
            raise

        record_event_operation("reorder")
        record_reorder(count)
        logger.info(f"Reordered {count} events in '{collection_name}'")
        return count
