# conversation_engine/activity_log.py
"""
ActivityLog

Append-only audit trail of what happened in a session (choices made,
responses generated, resets). Independent of the transcript: it is cleared
and reseeded whenever the session is (re)initialized.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .session_context import display_time


@dataclass(frozen=True)
class LogEntry:
    timestamp: Optional[datetime]
    title: str
    detail: str
    payload: Any = None
    # precomputed playback logs carry a display label instead of a timestamp
    time_label: Optional[str] = None

    @property
    def time(self) -> str:
        if self.time_label is not None:
            return self.time_label
        return display_time(self.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "time": self.time,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "title": self.title,
            "detail": self.detail,
        }
        if self.payload is not None:
            data["payload"] = self.payload
        return data


class ActivityLog:
    """
    Ordered list of LogEntry. Only whole-log clear() is supported.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.now
        self._entries: List[LogEntry] = []

    def append(self, title: str, detail: str, payload: Any = None) -> LogEntry:
        entry = LogEntry(timestamp=self._clock(), title=title, detail=detail, payload=payload)
        self._entries.append(entry)
        return entry

    def extend(self, entries: Iterable[LogEntry]) -> None:
        """
        Reseed from precomputed entries (playback mode).
        """
        self._entries.extend(entries)

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
