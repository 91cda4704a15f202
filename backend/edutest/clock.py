"""Server clock. Routes take it as a dependency so tests can freeze time."""

from datetime import datetime, timezone
from typing import Callable


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Callable[[], datetime]:
    return utcnow
