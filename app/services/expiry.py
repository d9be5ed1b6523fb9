"""Expiry-date arithmetic and classification.

Everything here is pure: the current date is passed in (or resolved from the
configured timezone) and nothing is persisted. Status is recomputed on every
read.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.config import settings

WARNING_DAYS = 30
CAUTION_DAYS = 90

# Fixed table so display never depends on the process locale
_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


class ExpiryBucket(enum.Enum):
    expired = "expired"
    warning = "warning"
    caution = "caution"
    safe = "safe"


@dataclass(frozen=True)
class ExpiryStatus:
    bucket: ExpiryBucket
    days: int
    message: str


@dataclass(frozen=True)
class StatusDisplay:
    color: str
    label: str


STATUS_DISPLAY: dict[ExpiryBucket, StatusDisplay] = {
    ExpiryBucket.expired: StatusDisplay(color="red", label="Expired"),
    ExpiryBucket.warning: StatusDisplay(color="yellow", label="Expiring Soon"),
    ExpiryBucket.caution: StatusDisplay(color="orange", label="Expiring"),
    ExpiryBucket.safe: StatusDisplay(color="green", label="Safe"),
}


def today(tz: str | None = None) -> date:
    return datetime.now(ZoneInfo(tz or settings.app_timezone)).date()


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def days_until(
    expiry_date: date | datetime | str, now: date | datetime | None = None
) -> int:
    """Signed whole calendar days from ``now`` to ``expiry_date``.

    Time of day is ignored on both sides; a negative result means the date
    has already passed.
    """
    reference = _as_date(now) if now is not None else today()
    return (_as_date(expiry_date) - reference).days


def classify(days: int) -> ExpiryStatus:
    if days < 0:
        return ExpiryStatus(
            ExpiryBucket.expired, days, f"Expired {abs(days)} days ago"
        )
    message = f"Expires in {days} days"
    if days <= WARNING_DAYS:
        return ExpiryStatus(ExpiryBucket.warning, days, message)
    if days <= CAUTION_DAYS:
        return ExpiryStatus(ExpiryBucket.caution, days, message)
    return ExpiryStatus(ExpiryBucket.safe, days, message)


def expiry_status(
    expiry_date: date | datetime | str, now: date | datetime | None = None
) -> ExpiryStatus:
    return classify(days_until(expiry_date, now))


def status_display(bucket: ExpiryBucket | str) -> StatusDisplay:
    return STATUS_DISPLAY[ExpiryBucket(bucket)]


def format_for_display(value: date | datetime | str) -> str:
    """Short display form, e.g. ``Jan 05, 2025``. Not for comparison."""
    day = _as_date(value)
    return f"{_MONTHS[day.month - 1]} {day.day:02d}, {day.year}"
