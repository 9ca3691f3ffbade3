"""Database models for persisted application state."""
from sqlalchemy import Column, String, Text

from hskvocab.models.base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    """Key-value entry holding one serialized state document."""

    __tablename__ = "storage_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
