"""Installed-store sessions holding Admin API access tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDMixin


class ShopSession(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "shop_session"

    shop: Mapped[str] = mapped_column(String(255), index=True)
    access_token: Mapped[str] = mapped_column(String(255))
    is_online: Mapped[bool] = mapped_column(Boolean, default=False)
    scope: Mapped[str | None] = mapped_column(Text, default=None)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    def __repr__(self) -> str:
        kind = "online" if self.is_online else "offline"
        return f"<ShopSession {self.shop!r} ({kind})>"
