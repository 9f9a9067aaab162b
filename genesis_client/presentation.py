"""
Render-time helpers for project cards and detail views.

Expiry depends on the clock, so it is derived here at render time and never
stored on the Project snapshot.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from decimal import Decimal

from genesis_client.ledger.models import Project, ProjectStatus

EXPIRED_LABEL = "Expired"
_SECONDS_PER_DAY = 86400


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def is_expired(project: Project, now: datetime | None = None) -> bool:
    return _now(now) > project.expires_at


def days_remaining(expires_at: datetime, now: datetime | None = None) -> str:
    """'3 days' / '1 day' until expires_at, rounded up; '0 days' once passed."""
    seconds = (expires_at - _now(now)).total_seconds()
    days = max(0, math.ceil(seconds / _SECONDS_PER_DAY))
    return f"{days} day" if days == 1 else f"{days} days"


def status_label(project: Project, now: datetime | None = None) -> str:
    """Ledger status, except that an open project past its deadline reads 'Expired'."""
    if project.status is ProjectStatus.OPEN and is_expired(project, now):
        return EXPIRED_LABEL
    return project.status.value


def funding_progress(project: Project) -> Decimal:
    """Percent of the goal raised, capped at 100."""
    if project.cost <= 0:
        return Decimal(100) if project.raised > 0 else Decimal(0)
    return min(Decimal(100), project.raised / project.cost * 100)


def backer_label(count: int) -> str:
    return f"{count} Backer" if count == 1 else f"{count} Backers"


def truncate(text: str, start: int, end: int, max_length: int) -> str:
    """
    Shorten long text to its first `start` and last `end` characters joined by '...'.

    truncate("0x5fbdb2315678afecb367f032d93f642f64180aa3", 4, 4, 11) -> "0x5f...0aa3"
    """
    if len(text) <= max_length:
        return text
    head = text[:start]
    tail = text[len(text) - end :] if end > 0 else ""
    return f"{head}...{tail}"


def today_label(today: date | None = None) -> str:
    """YYYY-MM-DD for today; the earliest expiry the create form accepts."""
    d = today or date.today()
    return d.isoformat()
