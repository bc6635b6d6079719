"""
Calendar-month windows in the reporting timezone.

All month arithmetic for the metrics lives here so the aggregator can
treat a month as a plain half-open interval [start, end).

Design Decisions:
- Windows are computed in the reporting timezone, then compared against
  timezone-aware timestamps (comparison of aware datetimes is tz-agnostic)
- Month labels use fixed English abbreviations, independent of locale
- Naive datetimes are treated as UTC
"""

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def ensure_aware(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes; aware ones are returned unchanged."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class MonthWindow:
    """
    One calendar month as a half-open interval.

    `start` is midnight on the 1st in the reporting timezone, `end` is
    midnight on the 1st of the following month.
    """
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        """Short month name and 4-digit year, e.g. 'Jan 2024'."""
        return f"{MONTH_ABBREVIATIONS[self.start.month - 1]} {self.start.year:04d}"

    def contains(self, moment: datetime) -> bool:
        """True if the instant falls within this month."""
        return self.start <= ensure_aware(moment) < self.end


def _first_of_month(year: int, month: int, tz: tzinfo) -> datetime:
    # Normalise month overflow in either direction
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1, tzinfo=tz)


def month_window(now: datetime, tz: tzinfo, offset: int = 0) -> MonthWindow:
    """
    Get the calendar month containing `now`, shifted by `offset` months.

    Args:
        now: Evaluation instant
        tz: Reporting timezone that defines month boundaries
        offset: Months to shift (negative for the past)

    Returns:
        MonthWindow for the requested month
    """
    local = ensure_aware(now).astimezone(tz)
    month = local.month + offset
    return MonthWindow(
        start=_first_of_month(local.year, month, tz),
        end=_first_of_month(local.year, month + 1, tz),
    )


def trailing_months(now: datetime, tz: tzinfo, count: int = 6) -> list[MonthWindow]:
    """
    Get `count` consecutive months ending with the month containing `now`.

    Example:
        >>> [w.label for w in trailing_months(datetime(2024, 3, 15, tzinfo=timezone.utc), timezone.utc, 3)]
        ['Jan 2024', 'Feb 2024', 'Mar 2024']
    """
    if count < 1:
        raise ValueError(f"count must be positive, got {count}")
    return [month_window(now, tz, offset) for offset in range(-(count - 1), 1)]
