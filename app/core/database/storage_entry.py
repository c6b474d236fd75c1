"""
Key/value storage table.

One row per storage key, holding an opaque serialized string. This is the
server-side counterpart of the browser's local storage the SPA used to write to.
"""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    __tablename__ = "storage_entries"
    
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    
    def __repr__(self) -> str:
        return f"<StorageEntry(key={self.key!r}, size={len(self.value)})>"
