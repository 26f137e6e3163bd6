"""Staleness cutoff calculation.

Local branches are compared on zero-padded ``YYYY-MM-DD`` strings, which
sort the same way the dates do. Remote branches carry full ISO-8601
timestamps from the GitHub API and are compared as aware instants.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from deadwood.errors import StalenessError


@dataclass(frozen=True)
class Cutoff:
    """The instant before which a branch counts as stale."""

    instant: datetime

    @property
    def day(self) -> str:
        return self.instant.date().isoformat()


def compute_cutoff(stale_days: int, now: Optional[datetime] = None) -> Cutoff:
    """Return ``now - stale_days`` as a UTC cutoff.

    Raises:
        StalenessError: If the threshold is negative or the result is out of range
    """
    if isinstance(stale_days, bool) or not isinstance(stale_days, int):
        raise StalenessError(f"Stale threshold must be an integer number of days, got {stale_days!r}")
    if stale_days < 0:
        raise StalenessError(f"Stale threshold must not be negative, got {stale_days}")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        return Cutoff(now.astimezone(timezone.utc) - timedelta(days=stale_days))
    except OverflowError as err:
        raise StalenessError(f"Cannot compute a cutoff {stale_days} days in the past") from err


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by GitHub into an aware UTC datetime.

    Raises:
        ValueError: If the value is not a timestamp
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Not a timestamp: {value!r}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_stale_instant(moment: datetime, cutoff: Cutoff) -> bool:
    """Strictly earlier than the cutoff is stale; equal is not."""
    return moment < cutoff.instant


def is_stale_day(day: str, cutoff: Cutoff) -> bool:
    """Day-granularity comparison for ``YYYY-MM-DD`` strings."""
    return day < cutoff.day


def to_day(value: str) -> date:
    """Convert a ``YYYY-MM-DD`` string into a date."""
    return date.fromisoformat(value)
