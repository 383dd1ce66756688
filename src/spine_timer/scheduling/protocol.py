"""Scheduled entry states and read-only status records.

┌──────────────────────────────────────────────────────────────────────────────┐
│  ENTRY STATE MACHINE                                                          │
│                                                                               │
│            source yields next instant                                         │
│   ┌─────────────────────────────────────────────────────────┐                 │
│   ▼                                                         │                 │
│  PENDING ──(clock reaches due)──► DUE ──► EXECUTING ────────┘                 │
│   │                                          │                                │
│   │ source depleted                          │ task raised                    │
│   ▼                                          ▼                                │
│  EXHAUSTED                                  FAILED                            │
│                                                                               │
│  PENDING ──(cancel() during the wait)──► CANCELLED                            │
│                                                                               │
│  Terminal states: EXHAUSTED, CANCELLED, FAILED — the entry's thread ends.    │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class EntryState(str, Enum):
    """Lifecycle state of one scheduled entry."""

    PENDING = "PENDING"
    DUE = "DUE"
    EXECUTING = "EXECUTING"
    EXHAUSTED = "EXHAUSTED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (EntryState.EXHAUSTED, EntryState.CANCELLED, EntryState.FAILED)


@dataclass(frozen=True)
class EntrySnapshot:
    """Point-in-time view of a scheduled entry."""

    id: int
    name: str
    source: str
    state: EntryState
    next_due: datetime | None = None
    run_count: int = 0
    last_run: datetime | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "state": self.state.value,
            "next_due": self.next_due.isoformat() if self.next_due else None,
            "run_count": self.run_count,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "error": self.error,
        }


@dataclass
class SchedulerStats:
    """Statistics for the scheduler, aggregated from its entries."""

    registered: int = 0
    active: int = 0
    executions: int = 0
    exhausted: int = 0
    cancelled: int = 0
    failures: int = 0
    by_state: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "registered": self.registered,
            "active": self.active,
            "executions": self.executions,
            "exhausted": self.exhausted,
            "cancelled": self.cancelled,
            "failures": self.failures,
            "by_state": dict(self.by_state),
        }


__all__ = ["EntryState", "EntrySnapshot", "SchedulerStats"]
