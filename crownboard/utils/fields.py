"""
Loose-record field helpers.

Whop responses differ between API versions: the same value may live at
``user.id``, ``user_id`` or not at all. Everything that reads a raw record goes
through ``first_present`` with an ordered tuple of dotted paths, so adding a
fallback is a change to a table, never to a branch.
"""
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

_MISSING = object()

# Epoch values above this are milliseconds (year 2286 in seconds)
_EPOCH_MS_THRESHOLD = 10_000_000_000


def resolve_path(record: Mapping, path: str) -> Any:
    """
    Walk a dotted path (``'user.id'``) through nested mappings.

    Returns None when any segment is missing or a non-mapping is hit.
    """
    current = record
    for segment in path.split('.'):
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment, _MISSING)
        if current is _MISSING:
            return None
    return current


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def first_present(record: Mapping, paths: Iterable[str]) -> Any:
    """Return the first present, non-null, non-blank value among ``paths``."""
    for path in paths:
        value = resolve_path(record, path)
        if _is_present(value):
            return value
    return None


def to_identifier(value: Any) -> Optional[str]:
    """Coerce an id-like value to a non-empty string, or None."""
    if not _is_present(value) or isinstance(value, (bool, Mapping, list, tuple)):
        return None
    text = str(value).strip()
    return text or None


def to_text(value: Any) -> Optional[str]:
    if not _is_present(value) or isinstance(value, (Mapping, list, tuple)):
        return None
    return str(value).strip()


def parse_decimal(value: Any, default: Decimal = Decimal('0')) -> Decimal:
    """
    Locale-agnostic decimal parsing.

    Accepts ints, floats and numeric strings ("12.50", "1e2"). Booleans,
    NaN, infinities and anything unparseable give ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return default
        return parsed if parsed.is_finite() else default
    return default


def parse_int(value: Any, default: int = 0) -> int:
    """Parse an integer count; fractional values truncate toward zero."""
    parsed = parse_decimal(value, default=None)
    if parsed is None:
        return default
    return int(parsed)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into an aware UTC datetime.

    Supports ISO-8601 strings (``Z`` suffix or offsets), epoch seconds or
    milliseconds (int, float or digit strings) and datetime objects. Naive
    values are taken as UTC. Returns None when nothing parses.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = _from_epoch(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.isascii() and text.lstrip('-').replace('.', '', 1).isdigit():
            parsed = _from_epoch(float(text))
        else:
            if text.endswith('Z') or text.endswith('z'):
                text = text[:-1] + '+00:00'
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                return None
    else:
        return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offset pushes the instant outside datetime's range
        return None


def _from_epoch(value: float) -> Optional[datetime]:
    if not math.isfinite(value):
        return None
    if abs(value) >= _EPOCH_MS_THRESHOLD:
        value = value / 1000
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
