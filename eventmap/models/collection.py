"""Collection Model"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from eventmap.database import Base


class Collection(Base):
    """Named, independently managed group of events"""
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)  # Case-sensitive, no charset rules
    created_at = Column(DateTime(timezone=True), server_default=func.now())
