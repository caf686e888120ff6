"""Active Collection pointer Model"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from eventmap.database import Base

ACTIVE_COLLECTION_ROW_ID = 1


class ActiveCollection(Base):
    """Single-row table naming the collection shown to anonymous readers"""
    __tablename__ = "active_collection"

    id = Column(Integer, primary_key=True, default=ACTIVE_COLLECTION_ROW_ID)
    # Plain name, not a foreign key: the pointer may be set before the collection exists
    collection_name = Column(String(255), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
