# change_relay/relay.py
from __future__ import annotations
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from .normalizer import ChangeRecord, normalize_records, parse_timestamp

logger = logging.getLogger(__name__)

SOURCE = "current-rms"
RESOURCE = "opportunities"
EVENT_NAME = "opportunity.updated"
KEY_PREFIX = "opportunity"
CURSOR_NAME = "opportunities.updated_at"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_idempotency_key(prefix: str, record_id: Any, occurred_at: str) -> str:
    return f"{prefix}:{record_id}:{occurred_at}"


@dataclass(frozen=True)
class ChangeEvent:
    source: str
    event_name: str
    occurred_at: str
    idempotency_key: str
    data: dict

    def to_payload(self) -> dict:
        return {
            "source": self.source,
            "event": self.event_name,
            "occurred_at": self.occurred_at,
            "idempotency_key": self.idempotency_key,
            "data": self.data,
        }


class CursorAdvancer:
    """Tracks the newest update timestamp seen during one cycle."""

    def __init__(self, start: str):
        self.value = start
        self._newest = parse_timestamp(start)

    def observe(self, change: ChangeRecord) -> None:
        if change.updated is None:
            return
        if self._newest is None or change.updated > self._newest:
            self._newest = change.updated
            self.value = change.occurred_at


class DeliveryEngine:
    """
    Dedups normalized changes against the delivery ledger and relays the
    unseen ones through the sink, one at a time.
    """

    def __init__(
        self,
        store,
        sink,
        *,
        source: str = SOURCE,
        event_name: str = EVENT_NAME,
        key_prefix: str = KEY_PREFIX,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.sink = sink
        self.source = source
        self.event_name = event_name
        self.key_prefix = key_prefix
        self._clock = clock

    def build_event(self, change: ChangeRecord) -> ChangeEvent:
        return ChangeEvent(
            source=self.source,
            event_name=self.event_name,
            occurred_at=change.occurred_at,
            idempotency_key=build_idempotency_key(self.key_prefix, change.record_id, change.occurred_at),
            data=change.data,
        )

    def process(self, change: ChangeRecord) -> str:
        """
        Relay one change. Returns ``"skipped"`` for an already-delivered key,
        ``"delivered"`` when posted, ``"dropped"`` when nobody is registered.
        Sink errors propagate and leave the key unmarked.
        """
        event = self.build_event(change)
        if self.store.is_delivered(event.idempotency_key):
            return "skipped"

        posted = self.sink.deliver(event)
        self.store.mark_delivered(event.idempotency_key, self._clock())
        return "delivered" if posted else "dropped"


@dataclass
class CycleResult:
    since: str
    cursor: str
    fetched: int = 0
    counts: dict = field(default_factory=lambda: {"delivered": 0, "skipped": 0, "dropped": 0})

    @property
    def delivered(self) -> int:
        return self.counts["delivered"]

    @property
    def skipped(self) -> int:
        return self.counts["skipped"]

    @property
    def dropped(self) -> int:
        return self.counts["dropped"]


class Relay:
    """
    One poll → normalize → dedup/deliver → advance-cursor cycle. At most one
    cycle runs at a time; an overlapping call is skipped.
    """

    def __init__(
        self,
        store,
        poller,
        engine: DeliveryEngine,
        *,
        resource: str = RESOURCE,
        cursor_name: str = CURSOR_NAME,
        fallback_minutes: int = 5,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.poller = poller
        self.engine = engine
        self.resource = resource
        self.cursor_name = cursor_name
        self.fallback_minutes = fallback_minutes
        self._clock = clock
        self._lock = threading.Lock()

    def default_cursor(self) -> str:
        start = self._clock() - timedelta(minutes=self.fallback_minutes)
        return start.isoformat().replace("+00:00", "Z")

    def run_cycle(self) -> Optional[CycleResult]:
        if not self._lock.acquire(blocking=False):
            logger.warning("Previous polling cycle still running, skipping this tick")
            return None
        try:
            return self._poll_once()
        finally:
            self._lock.release()

    def _poll_once(self) -> CycleResult:
        since = self.store.get_cursor(self.cursor_name, self.default_cursor())
        records = self.poller.fetch_updated_since(self.resource, since)

        result = CycleResult(since=since, cursor=since, fetched=len(records))
        advancer = CursorAdvancer(since)
        for change in normalize_records(records):
            advancer.observe(change)
            outcome = self.engine.process(change)
            result.counts[outcome] += 1

        # only reached when every record above was handled
        self.store.set_cursor(self.cursor_name, advancer.value)
        result.cursor = advancer.value
        logger.info(
            "Polled %s: fetched=%d delivered=%d skipped=%d dropped=%d cursor=%s",
            self.resource, result.fetched, result.delivered, result.skipped, result.dropped, result.cursor,
        )
        return result
