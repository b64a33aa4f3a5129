# conversation_engine/meeting_links.py
"""
Meeting links

Builds a Zoom-style meeting link plus a Google Calendar "add event" URL for
an event. Pure value generation; pass `rng` for reproducible output.
"""

from __future__ import annotations

import random
import string
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlencode

CALENDAR_BASE_URL = "https://calendar.google.com/calendar/render?action=TEMPLATE"

# Example event windows (UTC), as used in the demo scenarios
EVENT_DATES: Dict[str, str] = {
    "Final Sprint Momentum Clinic": "20251215T180000Z/20251215T193000Z",
    "Clarity Call": "20251216T140000Z/20251216T141500Z",
    "Strategy Session": "20251217T150000Z/20251217T160000Z",
}

_CAL_FORMAT = "%Y%m%dT%H%M%SZ"


@dataclass(frozen=True)
class MeetingInvite:
    meeting_url: str
    meeting_id: int
    passcode: str
    calendar_url: str
    display_text: str = "🔗 Zoom Meeting Link"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calendar_dates(start: datetime, duration_minutes: int = 90) -> str:
    """
    Format a start time + duration as the calendar `dates` range.
    """
    if start.tzinfo is not None:
        start = start.astimezone(timezone.utc)
    end = start + timedelta(minutes=duration_minutes)
    return f"{start.strftime(_CAL_FORMAT)}/{end.strftime(_CAL_FORMAT)}"


def create_meeting_invite(
    title: str,
    dates: Optional[str] = None,
    start: Optional[datetime] = None,
    duration_minutes: int = 90,
    rng: Optional[random.Random] = None,
) -> MeetingInvite:
    """
    `dates` is a preformatted range; otherwise it is built from `start`
    (or looked up in EVENT_DATES by title).
    """
    rng = rng or random.Random()

    if dates is None:
        if start is not None:
            dates = calendar_dates(start, duration_minutes)
        else:
            dates = EVENT_DATES.get(title, "")

    meeting_id = rng.randint(100_000_000, 999_999_999)
    passcode = "".join(rng.choice(string.ascii_uppercase + string.digits) for _ in range(6))
    meeting_url = f"https://zoom.us/j/{meeting_id}?pwd={passcode}"

    params = {
        "text": title,
        "dates": dates,
        "details": f"Join Zoom Meeting: {meeting_url}\n\nMeeting ID: {meeting_id}\nPasscode: {passcode}",
        "location": meeting_url,
        "sf": "true",
        "output": "xml",
    }
    calendar_url = f"{CALENDAR_BASE_URL}&{urlencode(params)}"

    return MeetingInvite(
        meeting_url=meeting_url,
        meeting_id=meeting_id,
        passcode=passcode,
        calendar_url=calendar_url,
    )
