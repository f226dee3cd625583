"""
Leaderboard models.
Aggregated per-actor totals and their ranked projection.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class DateRange(str, Enum):
    """Date windows offered by the dashboard."""
    TODAY = 'today'
    LAST_7_DAYS = '7d'
    LAST_30_DAYS = '30d'
    ALL = 'all'


class MetricKind(str, Enum):
    """What a leaderboard sums per actor."""
    SPEND = 'spend'
    ACTIVITY = 'activity'
    AFFILIATE_EARNINGS = 'affiliate_earnings'

    @property
    def is_monetary(self) -> bool:
        return self is not MetricKind.ACTIVITY


class LeaderboardTab(str, Enum):
    """Dashboard tabs, each backed by one metric."""
    SPENDERS = 'spenders'
    AFFILIATES = 'affiliates'
    ACTIVE = 'active'

    @property
    def metric(self) -> MetricKind:
        return _TAB_METRICS[self]


_TAB_METRICS = {
    LeaderboardTab.SPENDERS: MetricKind.SPEND,
    LeaderboardTab.AFFILIATES: MetricKind.AFFILIATE_EARNINGS,
    LeaderboardTab.ACTIVE: MetricKind.ACTIVITY,
}


@dataclass
class AggregatedActor:
    """
    Running totals for one actor.

    ``metric_total`` is None on the activity leaderboard, which has no
    monetary metric. ``secondary_count`` is the purchase count, referral count
    or summed activity count depending on the metric.
    """
    actor_id: str
    display_name: Optional[str]
    metric_total: Optional[Decimal]
    secondary_count: int = 0


@dataclass(frozen=True)
class LeaderboardEntry:
    """A ranked, user-facing row."""
    rank: int
    actor_id: str
    name: str
    metric_total: Optional[Decimal]
    secondary_count: int

    def to_dict(self):
        return {
            'rank': self.rank,
            'actor_id': self.actor_id,
            'name': self.name,
            'amount': float(self.metric_total) if self.metric_total is not None else None,
            'count': self.secondary_count,
        }
