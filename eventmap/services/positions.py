"""
Position sequencer: display order of events inside a collection.

New events go after the current maximum; an explicit reorder rewrites the
given events to 1..N. Positions are advisory: duplicates and NULLs (bulk
imports) are tolerated and ties are broken by id when listing.
"""
import logging
from typing import Sequence

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from eventmap.errors import NotFound, ValidationError
from eventmap.models import Event

logger = logging.getLogger(__name__)


def display_order():
    """ORDER BY clause for listing events: position ascending, unpositioned last, then id."""
    return (Event.position.asc().nullslast(), Event.id.asc())


async def next_position(db: AsyncSession, collection_id: int) -> int:
    """max(position) + 1 within the collection, 1 when it has no positioned events."""
    result = await db.execute(
        select(func.max(Event.position)).where(Event.collection_id == collection_id)
    )
    current = result.scalar()
    return (current or 0) + 1


def validate_order(ordered_ids: Sequence[int]) -> list[int]:
    """Check a requested order before touching the database."""
    if not ordered_ids:
        raise ValidationError("ordered_ids must not be empty", fields=["ordered_ids"])

    ids = [int(event_id) for event_id in ordered_ids]
    seen = set()
    duplicates = []
    for event_id in ids:
        if event_id in seen and event_id not in duplicates:
            duplicates.append(event_id)
        seen.add(event_id)
    if duplicates:
        raise ValidationError(
            f"ordered_ids contains duplicates: {duplicates}", fields=["ordered_ids"]
        )
    return ids


async def resequence(db: AsyncSession, collection_id: int, ordered_ids: Sequence[int]) -> int:
    """
    Assign position = index + 1 to each id, in the caller's transaction.

    Every id must belong to the collection; otherwise NotFound is raised
    before any row is written. Events not listed keep their position.
    Returns the number of events updated.
    """
    ids = validate_order(ordered_ids)

    result = await db.execute(
        select(Event.id).where(Event.collection_id == collection_id, Event.id.in_(ids))
    )
    known = set(result.scalars().all())
    missing = [event_id for event_id in ids if event_id not in known]
    if missing:
        raise NotFound(f"Events not found in collection: {missing}")

    for index, event_id in enumerate(ids):
        await db.execute(
            update(Event)
            .where(Event.id == event_id, Event.collection_id == collection_id)
            .values(position=index + 1)
        )

    logger.debug(f"Resequenced {len(ids)} events in collection {collection_id}")
    return len(ids)
