"""Local key/value rows for client preferences such as the auto-refresh record."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from social_client.database import Base


class ClientSetting(Base):
    __tablename__ = "client_settings"

    key = Column(String(64), primary_key=True)
    # JSON document; the owning store decodes and validates it.
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"ClientSetting(key={self.key!r})"


__all__ = ["ClientSetting"]
