"""
Eligibility Service - may the caller act on a test right now?

Only the test-taking role is checked; admins and teachers bypass every
rule. Checks, in order:
1. not_yet_open: the window has an opening time and now is before it
2. expired: the window has a due time and now is after it
3. max_attempts: the test caps attempts and the caller has used them all

`check_eligibility` is a pure function of its arguments.
`enforce` turns a denial into a PolicyError for the routes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from edutest.errors import PolicyError
from edutest.services.records import DeadlineRecord, Window

NOT_YET_OPEN = "not_yet_open"
EXPIRED = "expired"
MAX_ATTEMPTS = "max_attempts"

MESSAGES = {
    NOT_YET_OPEN: "Test is not open yet.",
    EXPIRED: "Test has expired.",
    MAX_ATTEMPTS: "Maximum attempts reached for the test.",
}

# max-attempts is a permanent refusal; time-window denials are 400
STATUS_CODES = {
    NOT_YET_OPEN: 400,
    EXPIRED: 400,
    MAX_ATTEMPTS: 403,
}


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    reason: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        return MESSAGES.get(self.reason)


ALLOWED = Eligibility(allowed=True)


def check_eligibility(window: Window, role: str, now: datetime,
                      attempt_count: int = 0, max_attempts: Optional[int] = None,
                      student_role: str = "student") -> Eligibility:
    """Evaluate the time window and attempt cap for one caller."""
    if role != student_role:
        return ALLOWED
    if window.opens is not None and now < window.opens:
        return Eligibility(allowed=False, reason=NOT_YET_OPEN)
    if window.due is not None and now > window.due:
        return Eligibility(allowed=False, reason=EXPIRED)
    if max_attempts is not None and attempt_count >= max_attempts:
        return Eligibility(allowed=False, reason=MAX_ATTEMPTS)
    return ALLOWED


def enforce(eligibility: Eligibility) -> None:
    """Raise PolicyError when the gate denied the action."""
    if not eligibility.allowed:
        raise PolicyError(eligibility.message, reason=eligibility.reason,
                          status_code=STATUS_CODES[eligibility.reason])


def resolve_window(default: Window, deadlines: Sequence[DeadlineRecord], now: datetime) -> Window:
    """
    Pick the window that governs a SAT test for one caller.

    `deadlines` are the test's deadlines for the caller's groups. Without any,
    the test's own window applies. Otherwise a window containing `now` wins;
    failing that the nearest upcoming window (so the caller is told "not yet
    open"), and failing that the one that ended last ("expired").
    """
    if not deadlines:
        return default

    for d in sorted(deadlines, key=lambda d: d.open):
        if d.open <= now <= d.due:
            return Window(opens=d.open, due=d.due)

    upcoming = [d for d in deadlines if d.open > now]
    if upcoming:
        d = min(upcoming, key=lambda d: d.open)
    else:
        d = max(deadlines, key=lambda d: d.due)
    return Window(opens=d.open, due=d.due)


def is_overtime(start_time: datetime, now: datetime, duration_minutes: Optional[int]) -> bool:
    """True when more than the allotted minutes passed since the attempt started."""
    if duration_minutes is None:
        return False
    return now - start_time > timedelta(minutes=duration_minutes)
