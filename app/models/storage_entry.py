from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime, timezone
from app.database import Base


def _utc_now():
    return datetime.now(timezone.utc)


class StorageEntry(Base):
    """Key/value row holding one serialized collection"""
    __tablename__ = "storage_entries"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)  # JSON blob
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now)

    def __repr__(self):
        return f"<StorageEntry(key='{self.key}', size={len(self.value or '')})>"
