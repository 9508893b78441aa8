# change_relay/models.py
from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .extensions import db


class WebhookHook(db.Model):
    __tablename__ = "hooks"

    event: Mapped[str] = mapped_column(String(128), primary_key=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self):
        return f"<WebhookHook event={self.event} url={self.url}>"


class PollCursor(db.Model):
    __tablename__ = "cursors"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    cursor: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self):
        return f"<PollCursor name={self.name} cursor={self.cursor}>"


class DeliveryRecord(db.Model):
    __tablename__ = "deliveries"

    idempotency_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    delivered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<DeliveryRecord key={self.idempotency_key} at={self.delivered_at}>"
