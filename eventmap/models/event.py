"""Event Model"""
from sqlalchemy import Column, Integer, Float, String, Text, Date, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false
from eventmap.database import Base


class Event(Base):
    """Geo-located event owned by exactly one collection"""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    collection_id = Column(
        Integer,
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title = Column(Text, nullable=False)
    type = Column(String(255), nullable=False)  # Free-text category, not an enum
    date = Column(Date, nullable=False)
    description = Column(Text)  # Opaque rich text
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    position = Column(Integer)  # Advisory display order; NULL for bulk imports
    favorite = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    collection = relationship("Collection", lazy="joined", innerjoin=True)

    __table_args__ = (
        Index("ix_events_collection_position", "collection_id", "position"),
    )

    @property
    def collection_name(self) -> str:
        return self.collection.name
