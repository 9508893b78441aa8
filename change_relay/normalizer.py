# change_relay/normalizer.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Optional

# Checked in order; the upstream has used all three spellings.
TIMESTAMP_FIELDS = ("updated_at", "updatedAt", "updated")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string into an aware datetime (naive values are taken as
    UTC). Returns None for anything that does not parse.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class ChangeRecord:
    record_id: Any
    occurred_at: str
    updated: Optional[datetime]
    data: dict


def _raw_timestamp(record: dict) -> Optional[str]:
    for field in TIMESTAMP_FIELDS:
        value = record.get(field)
        if value:
            return str(value)
    return None


def normalize_record(record: dict) -> ChangeRecord:
    raw = _raw_timestamp(record)
    # no timestamp: fall back to wall-clock time, which cannot dedup across retries
    occurred_at = raw if raw is not None else utc_now_iso()
    return ChangeRecord(
        record_id=record.get("id"),
        occurred_at=occurred_at,
        updated=parse_timestamp(raw),
        data=record,
    )


def normalize_records(records: Iterable[dict]) -> Iterator[ChangeRecord]:
    """Yield one ChangeRecord per raw record, in the order the poller returned them."""
    for record in records:
        yield normalize_record(record)
