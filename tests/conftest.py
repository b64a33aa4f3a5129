"""Test bootstrap for the conversation engine."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

APP_ROOT = Path(__file__).resolve().parents[1]
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

from conversation_engine.activity_log import ActivityLog  # noqa: E402
from conversation_engine.conversation_session import ConversationSession  # noqa: E402
from conversation_engine.scenario_store import Scenario  # noqa: E402
from conversation_engine.scheduler import ManualScheduler  # noqa: E402


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 12, 15, 9, 30)

    def __call__(self) -> datetime:
        return self.now

    def tick(self, minutes: int = 1) -> None:
        self.now += timedelta(minutes=minutes)


def make_scenario(steps, name="Test", title="Test journey", messages=None, logs=None) -> Scenario:
    return Scenario.from_dict(
        {
            "name": name,
            "title": title,
            "steps": steps,
            "messages": messages or [],
            "logs": logs or [],
        }
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session(scheduler, clock) -> ConversationSession:
    return ConversationSession(
        scheduler=scheduler,
        log=ActivityLog(clock=clock),
        clock=clock,
        option_delay=1.0,
        freeform_delay=1.2,
    )
