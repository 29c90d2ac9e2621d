"""Abnormality events ranked by severity, most severe first.

Insertion is a linear scan: a new event goes before the first entry with
strictly lower severity, so events of equal severity keep arrival order.
A heap would not keep that tie order.

Minimal deps: none (stdlib only).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional


class AbnormalityType(str, Enum):
    WHEEZING = "wheezing"
    IRREGULAR = "irregular"
    SHORTNESS = "shortness"
    NOISE = "noise"


@dataclass(frozen=True)
class AbnormalityEvent:
    """A detected abnormality; `percentage` is the displayed, clamped score."""

    type: AbnormalityType
    description: str
    percentage: int


class RankedEvent(NamedTuple):
    event: AbnormalityEvent
    severity: float


class SeverityQueue:
    """Ordered collection of abnormality events, descending severity.

    Interface:
      queue = SeverityQueue()
      queue.enqueue(event, severity)
      queue.peek()       # most severe, or None
      queue.to_records() # plain dicts with "severity"
    """

    def __init__(self) -> None:
        self._items: List[RankedEvent] = []

    def enqueue(self, event: AbnormalityEvent, severity: float) -> None:
        item = RankedEvent(event, float(severity))
        for i, existing in enumerate(self._items):
            if item.severity > existing.severity:
                self._items.insert(i, item)
                return
        self._items.append(item)

    def dequeue(self) -> Optional[RankedEvent]:
        """Remove and return the most severe entry (None when empty)."""
        if not self._items:
            return None
        return self._items.pop(0)

    def peek(self) -> Optional[RankedEvent]:
        return self._items[0] if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def to_records(self) -> List[Dict[str, Any]]:
        """Plain records: event fields plus the numeric severity."""
        records = []
        for item in self._items:
            record = asdict(item.event)
            record["type"] = item.event.type.value
            record["severity"] = item.severity
            records.append(record)
        return records
