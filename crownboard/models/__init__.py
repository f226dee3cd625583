"""
Crownboard models.

All models are plain dataclasses rebuilt on every request; nothing is persisted.
"""
from .records import (
    RecordKind,
    MembershipStatus,
    NormalizedPayment,
    NormalizedMembership,
    NormalizedAffiliate,
)
from .leaderboard import (
    DateRange,
    MetricKind,
    LeaderboardTab,
    AggregatedActor,
    LeaderboardEntry,
)
from .session import WhopSession

__all__ = [
    'RecordKind',
    'MembershipStatus',
    'NormalizedPayment',
    'NormalizedMembership',
    'NormalizedAffiliate',
    'DateRange',
    'MetricKind',
    'LeaderboardTab',
    'AggregatedActor',
    'LeaderboardEntry',
    'WhopSession',
]
