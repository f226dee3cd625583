"""
Normalized record models.
Canonical shapes for payments, memberships and affiliates read from Whop.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class RecordKind(str, Enum):
    """Raw resource kinds returned by the Whop API."""
    PAYMENT = 'payment'
    MEMBERSHIP = 'membership'
    AFFILIATE = 'affiliate'


class MembershipStatus(str, Enum):
    """Only active memberships count toward activity."""
    ACTIVE = 'active'
    OTHER = 'other'

    @classmethod
    def from_raw(cls, value) -> 'MembershipStatus':
        if isinstance(value, str) and value.strip().lower() == cls.ACTIVE.value:
            return cls.ACTIVE
        return cls.OTHER


@dataclass(frozen=True)
class NormalizedPayment:
    """
    One payment.

    ``amount`` is never negative and defaults to 0 when the source amount is
    missing or unparseable. ``actor_name`` is None when no name field resolved.
    """
    id: Optional[str]
    actor_id: str
    actor_name: Optional[str]
    amount: Decimal
    currency: str
    product_id: Optional[str]
    product_name: str
    created_at: datetime
    affiliate_id: Optional[str] = None
    affiliate_name: Optional[str] = None


@dataclass(frozen=True)
class NormalizedMembership:
    """One membership with its activity counter."""
    id: Optional[str]
    actor_id: str
    actor_name: Optional[str]
    product_id: Optional[str]
    product_name: str
    status: MembershipStatus
    last_activity_at: datetime
    activity_count: int

    @property
    def is_active(self) -> bool:
        return self.status is MembershipStatus.ACTIVE


@dataclass(frozen=True)
class NormalizedAffiliate:
    """
    Entry from a dedicated affiliate resource.

    Only used as a name directory; earnings are always derived from payments.
    """
    id: Optional[str]
    actor_id: str
    actor_name: Optional[str]
