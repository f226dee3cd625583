"""
Date-range filtering for leaderboard inputs.

Works on raw API records (dotted fallback paths) and on normalized records
(attribute names) alike, so callers can filter before or after normalizing.
"""
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..models.leaderboard import DateRange
from ..utils.exceptions import ValidationError
from ..utils.fields import parse_timestamp, resolve_path
from .normalizer import MEMBERSHIP_FIELDS, PAYMENT_FIELDS

# Date paths used when filtering raw records
PAYMENT_DATE_FIELDS = PAYMENT_FIELDS['created_at']
MEMBERSHIP_DATE_FIELDS = MEMBERSHIP_FIELDS['last_activity_at']

RANGE_DAYS = {
    DateRange.TODAY: 0,
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
}

DateField = Union[str, Sequence[str]]


def parse_range(value: Optional[str]) -> DateRange:
    """Map a query-string value to a DateRange; None means all time."""
    if value is None or value == '':
        return DateRange.ALL
    try:
        return DateRange(value)
    except ValueError:
        allowed = ', '.join(r.value for r in DateRange)
        raise ValidationError(f"Invalid range '{value}'. Expected one of: {allowed}", field='range')


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Look up a timezone by name, falling back to UTC."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def range_cutoff(date_range: DateRange, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Earliest instant kept by ``date_range``: local midnight N days back.

    Returns None for DateRange.ALL.
    """
    date_range = DateRange(date_range)
    if date_range is DateRange.ALL:
        return None

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    local_now = now.astimezone(tz or timezone.utc)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=RANGE_DAYS[date_range])


def record_date(record: Any, date_field: DateField) -> Optional[datetime]:
    """Resolve a record's date through one or more fields; None if none parse."""
    names = (date_field,) if isinstance(date_field, str) else tuple(date_field)
    for name in names:
        if isinstance(record, Mapping):
            value = resolve_path(record, name)
        else:
            value = getattr(record, name, None)
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
    return None


def filter_by_range(
    records: Iterable[Any],
    date_range: DateRange,
    date_field: DateField,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> List[Any]:
    """
    Keep the records whose date is on or after the range cutoff.

    Records without a resolvable date are excluded unless the range is ALL,
    which returns every record unchanged.
    """
    date_range = DateRange(date_range)
    records = list(records or ())

    cutoff = range_cutoff(date_range, now=now, tz=tz)
    if cutoff is None:
        return records

    kept = []
    for record in records:
        when = record_date(record, date_field)
        if when is not None and when >= cutoff:
            kept.append(record)
    return kept
