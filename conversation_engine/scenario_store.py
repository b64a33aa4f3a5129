# conversation_engine/scenario_store.py
"""
ScenarioStore

Read-only store of the scripted dialogues, loaded once at startup.

Each scenario is:
- name / title
- steps: the ordered script (index == position)
- messages: canned transcript shown in playback mode (optional)
- logs: precomputed activity log for playback mode (optional)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .activity_log import LogEntry
from .session_context import Message, Option, Role


class ScenarioNotFound(LookupError):
    """
    Raised when a scenario index is outside the store.
    """

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Scenario {index} not found (store holds {size})")
        self.index = index
        self.size = size


def _parse_options(raw: Any) -> Optional[Tuple[Option, ...]]:
    if raw is None:
        return None
    return tuple(Option.from_dict(o) for o in raw)


def _parse_role(raw: Any) -> Role:
    # older scenario files name the agent after the persona
    role = str(raw or "agent").lower()
    return "user" if role == "user" else "agent"


@dataclass(frozen=True)
class Step:
    """
    One scripted turn. `trigger` is the option text that unlocks it;
    a step without a trigger is a default continuation.
    """
    role: Role
    content: str
    options: Optional[Tuple[Option, ...]] = None
    trigger: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        return cls(
            role=_parse_role(data.get("role") or data.get("type")),
            content=str(data.get("content", "")),
            options=_parse_options(data.get("options")),
            trigger=data.get("trigger") or None,
        )

    def to_message(self, timestamp: Optional[datetime] = None) -> Message:
        return Message(
            role=self.role,
            content=self.content,
            options=self.options,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class Scenario:
    name: str
    title: str
    steps: Tuple[Step, ...]
    messages: Tuple[Message, ...] = ()
    logs: Tuple[LogEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenario":
        steps = tuple(Step.from_dict(s) for s in data.get("steps") or [])
        if not steps:
            raise ValueError(f"Scenario {data.get('name')!r} has no steps")

        messages = tuple(
            Message(
                role=_parse_role(m.get("role") or m.get("type")),
                content=str(m.get("content", "")),
                options=_parse_options(m.get("options")),
            )
            for m in data.get("messages") or []
        )
        logs = tuple(
            LogEntry(
                timestamp=None,
                title=str(entry.get("title", "")),
                detail=str(entry.get("detail", "")),
                payload=entry.get("payload", entry.get("code")),
                time_label=entry.get("time"),
            )
            for entry in data.get("logs") or []
        )
        return cls(
            name=str(data["name"]),
            title=str(data.get("title", "")),
            steps=steps,
            messages=messages,
            logs=logs,
        )


class ScenarioStore:
    """
    Ordered, immutable collection of scenarios.
    """

    def __init__(self, scenarios: Sequence[Scenario]) -> None:
        self._scenarios: Tuple[Scenario, ...] = tuple(scenarios)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ScenarioStore":
        """
        Load scenarios from a JSON document: either a list or {"scenarios": [...]}.
        """
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if isinstance(data, dict):
            data = data.get("scenarios") or []
        return cls([Scenario.from_dict(item) for item in data])

    def __len__(self) -> int:
        return len(self._scenarios)

    def get_scenario(self, index: int) -> Scenario:
        if not 0 <= index < len(self._scenarios):
            raise ScenarioNotFound(index, len(self._scenarios))
        return self._scenarios[index]

    def list_scenarios(self) -> List[Scenario]:
        return list(self._scenarios)
