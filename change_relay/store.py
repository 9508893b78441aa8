# change_relay/store.py
from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from .extensions import db
from .models import WebhookHook, PollCursor, DeliveryRecord

logger = logging.getLogger(__name__)


class StateStore:
    """
    Narrow get/set contract over the three persisted relations: webhook hooks,
    polling cursors and the delivery ledger.

    Every call is a single-record operation that commits before returning, and
    must run inside a Flask app context (the session is ``db.session``).
    """

    def __init__(self, database=db):
        self._db = database

    @property
    def session(self):
        return self._db.session

    def get_hook(self, event: str) -> Optional[str]:
        row = self.session.get(WebhookHook, event)
        return row.url if row else None

    def _upsert(self, model, **values) -> None:
        try:
            self.session.merge(model(**values))
            self.session.commit()
        except IntegrityError:
            # another writer inserted the key between our read and our insert
            self.session.rollback()
            self.session.merge(model(**values))
            self.session.commit()

    def set_hook(self, event: str, url: str) -> None:
        self._upsert(WebhookHook, event=event, url=url)
        logger.info("Registered hook for %s", event)

    def get_cursor(self, name: str, fallback: str) -> str:
        row = self.session.get(PollCursor, name)
        return row.cursor if row and row.cursor else fallback

    def set_cursor(self, name: str, value: str) -> None:
        self._upsert(PollCursor, name=name, cursor=value)

    def is_delivered(self, key: str) -> bool:
        return self.session.get(DeliveryRecord, key) is not None

    def mark_delivered(self, key: str, delivered_at: datetime) -> bool:
        """
        Insert ``key`` into the ledger.

        Returns True if the key was newly recorded, False if it was already
        present. A duplicate is never an error.
        """
        if self.is_delivered(key):
            return False
        self.session.add(DeliveryRecord(idempotency_key=key, delivered_at=delivered_at))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.debug("Delivery key %s recorded concurrently", key)
            return False
        return True
