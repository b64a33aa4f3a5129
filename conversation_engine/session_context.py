# conversation_engine/session_context.py
"""
Session context types

Plain dataclasses describing the live state of a conversation:
- Option / Message (transcript entries).
- SessionConfig (scenario selection, interaction mode, active panel).
- SessionPhase (derived state exposed to the host UI).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple


Role = Literal["user", "agent"]
OptionTag = Literal["positive", "neutral", "negative"]


class InteractionMode(str, Enum):
    INTERACTIVE = "interactive"
    PLAYBACK = "playback"


class SessionPhase(str, Enum):
    IDLE = "idle"
    AWAITING_OPTION = "awaiting_option"
    RESPONDING = "responding"
    FREEFORM_OPEN = "freeform_open"


def display_time(ts: Optional[datetime]) -> str:
    """
    Render a timestamp the way the chat shows it (hour:minute).
    """
    if ts is None:
        return ""
    return ts.strftime("%H:%M")


@dataclass(frozen=True)
class Option:
    """
    A selectable reply. The tag only drives styling.
    """
    text: str
    tag: OptionTag = "neutral"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        # scenario files use "type" for the tag
        return cls(text=str(data["text"]), tag=data.get("tag") or data.get("type") or "neutral")

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "tag": self.tag}


@dataclass(frozen=True)
class Message:
    """
    One transcript entry. Frozen: once appended it never changes.
    """
    role: Role
    content: str
    options: Optional[Tuple[Option, ...]] = None
    timestamp: Optional[datetime] = None

    @property
    def has_options(self) -> bool:
        return bool(self.options)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "options": [o.to_dict() for o in self.options] if self.options is not None else None,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "time": display_time(self.timestamp),
        }


@dataclass
class SessionConfig:
    """
    Everything the host UI chooses about a session, in one place.
    """
    scenario_index: int = 0
    mode: InteractionMode = InteractionMode.INTERACTIVE
    active_panel: str = "profile"
