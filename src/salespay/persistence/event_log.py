"""Payroll audit trail — an append-only log of what the payroll service did.

Each registration, plan change, recorded sale and salary calculation is
written as an immutable PayrollEvent. Payloads carry money as Decimal;
they are normalised on creation so that amounts are stored as exact
decimal strings and the event hash is stable across reloads.

Write ordering: when the log is file-backed, an event is written to the
JSONL file before it becomes visible in memory. A failed write leaves
the log exactly as it was.
"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional


class EventKind(str, enum.Enum):
    """Classification of payroll events."""
    SELLER_REGISTERED = "seller_registered"
    COMMISSION_ASSIGNED = "commission_assigned"
    SALE_RECORDED = "sale_recorded"
    SALARY_CALCULATED = "salary_calculated"


def normalise_payload(value: Any) -> Any:
    """Convert a payload to JSON-native values.

    Decimal becomes its exact string, enums their value, dates ISO 8601,
    tuples lists. Floats are refused: an amount must never be stored
    with binary rounding.

    Raises:
        ValueError: If the payload holds a float or an unsupported type.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, enum.Enum):
        return normalise_payload(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): normalise_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalise_payload(v) for v in value]
    raise ValueError(
        f"Audit payload value of type {type(value).__name__} is not allowed"
    )


def _digest(fields: dict[str, Any]) -> str:
    canonical = json.dumps(fields, sort_keys=True, ensure_ascii=False)
    return "sha256:" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class PayrollEvent:
    """One audited payroll action.

    seller_id identifies the seller the action concerns. event_hash
    covers every other field.
    """
    event_id: str
    event_kind: EventKind
    seller_id: int
    timestamp_utc: str
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        seller_id: int,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> PayrollEvent:
        ts = (timestamp_utc or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")
        unsigned = PayrollEvent(
            event_id=event_id,
            event_kind=event_kind,
            seller_id=seller_id,
            timestamp_utc=ts,
            payload=normalise_payload(payload),
            event_hash="",
        )
        return dataclasses.replace(
            unsigned, event_hash=_digest(unsigned._hashed_fields()),
        )

    def _hashed_fields(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_kind": self.event_kind.value,
            "seller_id": self.seller_id,
            "timestamp_utc": self.timestamp_utc,
            "payload": self.payload,
        }

    def to_json(self) -> str:
        return json.dumps(
            {**self._hashed_fields(), "event_hash": self.event_hash},
            sort_keys=True,
            ensure_ascii=False,
        )

    @staticmethod
    def from_json(line: str) -> PayrollEvent:
        """Parse one stored line, verifying its hash.

        Raises:
            ValueError: If the stored hash does not match the content.
        """
        data = json.loads(line)
        event = PayrollEvent(
            event_id=data["event_id"],
            event_kind=EventKind(data["event_kind"]),
            seller_id=data["seller_id"],
            timestamp_utc=data["timestamp_utc"],
            payload=data["payload"],
            event_hash=data["event_hash"],
        )
        expected = _digest(event._hashed_fields())
        if event.event_hash != expected:
            raise ValueError(
                f"Event {event.event_id} has been altered: "
                f"stored {event.event_hash}, content hashes to {expected}"
            )
        return event

    def amount(self, key: str) -> Decimal:
        """Read a monetary payload field back as Decimal."""
        return Decimal(self.payload[key])


class EventLog:
    """Append-only payroll audit log, in memory or backed by a JSONL file."""

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._storage_path = storage_path
        self._events: list[PayrollEvent] = []
        self._ids: set[str] = set()

        if storage_path is not None and storage_path.exists():
            self._replay(storage_path)

    def append(self, event: PayrollEvent) -> None:
        """Record an event.

        Raises:
            ValueError: If the event id is already in the log.
            OSError: If the backing file cannot be written. The log is
                unchanged in that case.
        """
        if event.event_id in self._ids:
            raise ValueError(f"Event {event.event_id} is already recorded")
        if self._storage_path is not None:
            with self._storage_path.open("a", encoding="utf-8") as f:
                f.write(event.to_json() + "\n")
        self._commit(event)

    def _commit(self, event: PayrollEvent) -> None:
        self._events.append(event)
        self._ids.add(event.event_id)

    def _replay(self, path: Path) -> None:
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    event = PayrollEvent.from_json(line)
                except ValueError as e:
                    raise ValueError(f"{path}:{line_num}: {e}") from None
                if event.event_id in self._ids:
                    raise ValueError(
                        f"{path}:{line_num}: event {event.event_id} appears twice"
                    )
                self._commit(event)

    def events(self, kind: Optional[EventKind] = None) -> list[PayrollEvent]:
        """Return events in append order, optionally of one kind."""
        return [e for e in self._events if kind is None or e.event_kind == kind]

    def events_for_seller(
        self, seller_id: int, kind: Optional[EventKind] = None,
    ) -> list[PayrollEvent]:
        return [e for e in self.events(kind) if e.seller_id == seller_id]

    def salary_history(self, seller_id: int) -> list[Decimal]:
        """Every salary calculated for a seller, oldest first."""
        return [
            e.amount("total")
            for e in self.events_for_seller(seller_id, EventKind.SALARY_CALCULATED)
        ]

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[PayrollEvent]:
        return self._events[-1] if self._events else None
