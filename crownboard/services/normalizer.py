"""
Record Normalizer for Crownboard.

Maps loosely-typed Whop API records onto the canonical payment, membership and
affiliate shapes. Each target field has an ordered tuple of candidate source
paths; the first present value wins. Missing optional fields fall back to
defaults, a missing actor id yields the NO_ACTOR sentinel and the caller drops
the record.

Usage:
    result = normalize_batch(raw_payments, RecordKind.PAYMENT)
    for payment in result.records:
        ...
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..models.records import (
    RecordKind,
    MembershipStatus,
    NormalizedPayment,
    NormalizedMembership,
    NormalizedAffiliate,
)
from ..utils.exceptions import MalformedRecordError
from ..utils.fields import (
    first_present,
    parse_decimal,
    parse_int,
    parse_timestamp,
    to_identifier,
    to_text,
)

logger = logging.getLogger(__name__)


class _NoActor:
    """Sentinel returned when a record has no resolvable actor identity."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'NO_ACTOR'

    def __bool__(self):
        return False


NO_ACTOR = _NoActor()


# ==================== FIELD PATH TABLES ====================

PAYMENT_FIELDS: Dict[str, Tuple[str, ...]] = {
    'id': ('id', 'payment_id'),
    'actor_id': ('user.id', 'user_id', 'member.id', 'member_id', 'customer_id', 'buyer_id'),
    'actor_name': ('user.username', 'user.name', 'user.email', 'member.username', 'member.name', 'username'),
    'amount': ('amount', 'total_amount', 'price', 'total', 'final_amount', 'subtotal'),
    'currency': ('currency', 'currency_code'),
    'product_id': ('product.id', 'product_id', 'plan.product_id'),
    'product_name': ('product.name', 'product.title', 'product_name'),
    'affiliate_id': ('affiliate.id', 'affiliate_id'),
    'affiliate_name': ('affiliate.username', 'affiliate.name', 'affiliate_name'),
    'created_at': ('date', 'created_at', 'createdAt', 'paid_at'),
}

MEMBERSHIP_FIELDS: Dict[str, Tuple[str, ...]] = {
    'id': ('id', 'membership_id'),
    'actor_id': ('user.id', 'user_id', 'member.id', 'member_id'),
    'actor_name': ('user.username', 'user.name', 'user.email', 'member.username', 'member.name',
                   'username', 'display_name'),
    'product_id': ('product.id', 'product_id'),
    'product_name': ('product.name', 'product.title', 'product_name'),
    'status': ('status', 'state'),
    'last_activity_at': ('last_activity_at', 'lastActivityAt', 'last_active_at', 'last_seen_at',
                         'joined_at', 'created_at'),
    'activity_count': ('activity_count', 'activityCount', 'activity.count'),
}

AFFILIATE_FIELDS: Dict[str, Tuple[str, ...]] = {
    'id': ('id',),
    'actor_id': ('affiliate.id', 'affiliate_id', 'user.id', 'user_id', 'id'),
    'actor_name': ('affiliate.username', 'affiliate.name', 'user.username', 'user.name',
                   'username', 'name'),
}

DEFAULT_CURRENCY = 'USD'
UNKNOWN_PRODUCT = 'Unknown Product'


@dataclass
class NormalizationResult:
    """Outcome of normalizing one batch."""
    records: List[Any] = field(default_factory=list)
    dropped: int = 0
    malformed: int = 0

    @property
    def total(self) -> int:
        return len(self.records) + self.dropped + self.malformed


# ==================== NORMALIZERS ====================

def _value(raw: Mapping, fields: Dict[str, Tuple[str, ...]], name: str) -> Any:
    return first_present(raw, fields[name])


def _timestamp(raw: Mapping, paths: Iterable[str], now: datetime) -> datetime:
    # First candidate that actually parses; "now" when none does
    for path in paths:
        parsed = parse_timestamp(first_present(raw, (path,)))
        if parsed is not None:
            return parsed
    return now


def _normalize_payment(raw: Mapping, now: datetime):
    actor_id = to_identifier(_value(raw, PAYMENT_FIELDS, 'actor_id'))
    if actor_id is None:
        return NO_ACTOR

    amount = parse_decimal(_value(raw, PAYMENT_FIELDS, 'amount'))
    if amount < 0:
        amount = Decimal('0')

    affiliate_id = to_identifier(_value(raw, PAYMENT_FIELDS, 'affiliate_id'))
    affiliate_name = to_text(_value(raw, PAYMENT_FIELDS, 'affiliate_name')) if affiliate_id else None

    return NormalizedPayment(
        id=to_identifier(_value(raw, PAYMENT_FIELDS, 'id')),
        actor_id=actor_id,
        actor_name=to_text(_value(raw, PAYMENT_FIELDS, 'actor_name')),
        amount=amount,
        currency=(to_text(_value(raw, PAYMENT_FIELDS, 'currency')) or DEFAULT_CURRENCY).upper(),
        product_id=to_identifier(_value(raw, PAYMENT_FIELDS, 'product_id')),
        product_name=to_text(_value(raw, PAYMENT_FIELDS, 'product_name')) or UNKNOWN_PRODUCT,
        created_at=_timestamp(raw, PAYMENT_FIELDS['created_at'], now),
        affiliate_id=affiliate_id,
        affiliate_name=affiliate_name,
    )


def _normalize_membership(raw: Mapping, now: datetime):
    actor_id = to_identifier(_value(raw, MEMBERSHIP_FIELDS, 'actor_id'))
    if actor_id is None:
        return NO_ACTOR

    return NormalizedMembership(
        id=to_identifier(_value(raw, MEMBERSHIP_FIELDS, 'id')),
        actor_id=actor_id,
        actor_name=to_text(_value(raw, MEMBERSHIP_FIELDS, 'actor_name')),
        product_id=to_identifier(_value(raw, MEMBERSHIP_FIELDS, 'product_id')),
        product_name=to_text(_value(raw, MEMBERSHIP_FIELDS, 'product_name')) or UNKNOWN_PRODUCT,
        status=MembershipStatus.from_raw(_value(raw, MEMBERSHIP_FIELDS, 'status')),
        last_activity_at=_timestamp(raw, MEMBERSHIP_FIELDS['last_activity_at'], now),
        activity_count=max(parse_int(_value(raw, MEMBERSHIP_FIELDS, 'activity_count')), 0),
    )


def _normalize_affiliate(raw: Mapping, now: datetime):
    actor_id = to_identifier(_value(raw, AFFILIATE_FIELDS, 'actor_id'))
    if actor_id is None:
        return NO_ACTOR

    return NormalizedAffiliate(
        id=to_identifier(_value(raw, AFFILIATE_FIELDS, 'id')),
        actor_id=actor_id,
        actor_name=to_text(_value(raw, AFFILIATE_FIELDS, 'actor_name')),
    )


_NORMALIZERS = {
    RecordKind.PAYMENT: _normalize_payment,
    RecordKind.MEMBERSHIP: _normalize_membership,
    RecordKind.AFFILIATE: _normalize_affiliate,
}


def normalize(raw: Any, kind: RecordKind, now: Optional[datetime] = None):
    """
    Normalize one raw record.

    Args:
        raw: Record as returned by the API
        kind: Which canonical shape to produce
        now: Reference time used when no timestamp field resolves

    Returns:
        A normalized record, or NO_ACTOR when the actor id is missing

    Raises:
        MalformedRecordError: If ``raw`` is not a mapping
    """
    kind = RecordKind(kind)
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(kind.value, raw)
    return _NORMALIZERS[kind](raw, now or datetime.now(timezone.utc))


def normalize_batch(
    records: Iterable[Any],
    kind: RecordKind,
    now: Optional[datetime] = None
) -> NormalizationResult:
    """
    Normalize a batch, skipping records that cannot be used.

    Malformed records are logged and counted; records without an actor are
    dropped silently (counted, logged at debug). Input order is preserved.
    """
    kind = RecordKind(kind)
    now = now or datetime.now(timezone.utc)
    result = NormalizationResult()

    for raw in records or ():
        try:
            normalized = normalize(raw, kind, now=now)
        except MalformedRecordError as e:
            logger.warning('Skipping record: %s', e.message)
            result.malformed += 1
            continue

        if normalized is NO_ACTOR:
            result.dropped += 1
            continue

        result.records.append(normalized)

    if result.dropped:
        logger.debug('Dropped %d %s records without an actor id', result.dropped, kind.value)

    return result
