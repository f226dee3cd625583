"""
Leaderboard Service for Crownboard.

Runs the full pipeline for one company and one request:
- fetch payments, memberships and affiliates in parallel
- filter raw records by date range
- normalize, aggregate per actor, rank
- build the random-winner pool

A resource that fails to load becomes an empty collection and is listed in
``failed_sources``; whether that is acceptable is decided by the caller.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Optional

from ..models.leaderboard import DateRange, LeaderboardEntry, LeaderboardTab, MetricKind
from ..models.records import RecordKind
from ..utils.exceptions import CrownboardError, ValidationError
from .aggregator import aggregate
from .date_filter import MEMBERSHIP_DATE_FIELDS, PAYMENT_DATE_FIELDS, filter_by_range
from .normalizer import normalize_batch
from .ranker import rank
from .whop_client import WhopClient
from .winner_service import DEFAULT_POOL_SIZE, build_winner_pool

logger = logging.getLogger(__name__)

SOURCES = ('payments', 'memberships', 'affiliates')


@dataclass
class CompanyDataset:
    """Raw records for one company, plus which sources failed to load."""
    company_id: str
    payments: List[Dict[str, Any]] = field(default_factory=list)
    memberships: List[Dict[str, Any]] = field(default_factory=list)
    affiliates: List[Dict[str, Any]] = field(default_factory=list)
    failed_sources: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.failed_sources)


def _safe_fetch(name: str, fetch: Callable[[str], List[Dict[str, Any]]], company_id: str):
    try:
        return fetch(company_id), None
    except CrownboardError as e:
        logger.error('Failed to fetch %s for company %s: %s', name, company_id, e.message)
        return [], name


def fetch_company_dataset(client: WhopClient, company_id: str) -> CompanyDataset:
    """
    Fetch all three resources concurrently.

    A failure in one fetch never blocks the others; the failed resource is
    returned empty and recorded in ``failed_sources``.
    """
    fetchers = {
        'payments': client.list_payments,
        'memberships': client.list_memberships,
        'affiliates': client.list_affiliates,
    }

    with ThreadPoolExecutor(max_workers=len(fetchers)) as executor:
        futures = {
            name: executor.submit(_safe_fetch, name, fetch, company_id)
            for name, fetch in fetchers.items()
        }
        results = {name: future.result() for name, future in futures.items()}

    dataset = CompanyDataset(company_id=company_id)
    for name in SOURCES:
        records, failed = results[name]
        setattr(dataset, name, records)
        if failed:
            dataset.failed_sources.append(failed)

    logger.info(
        'Loaded company %s: %d payments, %d memberships, %d affiliates%s',
        company_id, len(dataset.payments), len(dataset.memberships), len(dataset.affiliates),
        f" (failed: {', '.join(dataset.failed_sources)})" if dataset.degraded else '',
    )
    return dataset


@dataclass
class LeaderboardResult:
    """One ranked leaderboard, ready for the presentation layer."""
    tab: LeaderboardTab
    date_range: DateRange
    entries: List[LeaderboardEntry]
    generated_at: datetime
    failed_sources: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.failed_sources)

    def to_dict(self):
        return {
            'tab': self.tab.value,
            'range': self.date_range.value,
            'generated_at': self.generated_at.isoformat(),
            'entries': [entry.to_dict() for entry in self.entries],
            'degraded': self.degraded,
            'failed_sources': list(self.failed_sources),
        }


class LeaderboardService:
    """
    Leaderboard pipeline over one company's dataset.

    Usage:
        service = LeaderboardService.for_company(client, company_id)
        spenders = service.get_leaderboard(LeaderboardTab.SPENDERS, DateRange.LAST_7_DAYS, limit=25)
        pool = service.get_winner_pool(DateRange.ALL, limit=25)
    """

    def __init__(self, dataset: CompanyDataset, tz: Optional[tzinfo] = None, now: Optional[datetime] = None):
        self.dataset = dataset
        self.tz = tz or timezone.utc
        # Frozen once per request so every tab uses the same cutoff
        self.now = now or datetime.now(timezone.utc)
        self._member_names = None
        self._affiliate_names = None

    @classmethod
    def for_company(cls, client: WhopClient, company_id: str, **kwargs) -> 'LeaderboardService':
        return cls(fetch_company_dataset(client, company_id), **kwargs)

    # ==================== NAME DIRECTORIES ====================

    @property
    def member_names(self) -> Dict[str, str]:
        """Actor id -> name from every membership, regardless of range."""
        if self._member_names is None:
            result = normalize_batch(self.dataset.memberships, RecordKind.MEMBERSHIP, now=self.now)
            self._member_names = {m.actor_id: m.actor_name for m in result.records if m.actor_name}
        return self._member_names

    @property
    def affiliate_names(self) -> Dict[str, str]:
        """Affiliate id -> name from the dedicated affiliate resource, if any."""
        if self._affiliate_names is None:
            result = normalize_batch(self.dataset.affiliates, RecordKind.AFFILIATE, now=self.now)
            self._affiliate_names = {a.actor_id: a.actor_name for a in result.records if a.actor_name}
        return self._affiliate_names

    # ==================== PIPELINE ====================

    def _payments(self, date_range: DateRange):
        raw = filter_by_range(self.dataset.payments, date_range, PAYMENT_DATE_FIELDS, now=self.now, tz=self.tz)
        return normalize_batch(raw, RecordKind.PAYMENT, now=self.now).records

    def _memberships(self, date_range: DateRange):
        raw = filter_by_range(self.dataset.memberships, date_range, MEMBERSHIP_DATE_FIELDS, now=self.now, tz=self.tz)
        return normalize_batch(raw, RecordKind.MEMBERSHIP, now=self.now).records

    def rank_tab(self, tab: LeaderboardTab, date_range: DateRange, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        """Run filter -> normalize -> aggregate -> rank for one tab."""
        tab = LeaderboardTab(tab)
        date_range = DateRange(date_range)
        metric = tab.metric

        if metric is MetricKind.SPEND:
            actors = aggregate(self._payments(date_range), metric, name_directory=self.member_names)
        elif metric is MetricKind.AFFILIATE_EARNINGS:
            actors = aggregate(self._payments(date_range), metric, name_directory=self.affiliate_names)
        else:
            actors = aggregate(self._memberships(date_range), metric)

        return rank(actors, metric, limit=limit)

    def get_leaderboard(self, tab: LeaderboardTab, date_range: DateRange, limit: Optional[int] = None) -> LeaderboardResult:
        """Ranked leaderboard for one tab, with degraded-source metadata."""
        tab = LeaderboardTab(tab)
        return LeaderboardResult(
            tab=tab,
            date_range=DateRange(date_range),
            entries=self.rank_tab(tab, date_range, limit=limit),
            generated_at=self.now,
            failed_sources=list(self.dataset.failed_sources),
        )

    def get_all_leaderboards(self, date_range: DateRange, limit: Optional[int] = None) -> Dict[LeaderboardTab, LeaderboardResult]:
        return {tab: self.get_leaderboard(tab, date_range, limit=limit) for tab in LeaderboardTab}

    def get_winner_pool(
        self,
        date_range: DateRange,
        limit: Optional[int] = None,
        tab: Optional[LeaderboardTab] = None,
        max_size: int = DEFAULT_POOL_SIZE
    ) -> List[LeaderboardEntry]:
        """
        Candidates for a random draw.

        Without ``tab`` the pool is the union of the spenders and most-active
        leaderboards; with ``tab`` it is that leaderboard alone.
        """
        if tab is not None:
            return build_winner_pool(self.rank_tab(tab, date_range, limit=limit), max_size=max_size)

        return build_winner_pool(
            self.rank_tab(LeaderboardTab.SPENDERS, date_range, limit=limit),
            self.rank_tab(LeaderboardTab.ACTIVE, date_range, limit=limit),
            max_size=max_size,
        )


def parse_tab(value: Optional[str]) -> LeaderboardTab:
    """Map a query-string value to a tab; None means spenders."""
    if value is None or value == '':
        return LeaderboardTab.SPENDERS
    try:
        return LeaderboardTab(value)
    except ValueError:
        allowed = ', '.join(t.value for t in LeaderboardTab)
        raise ValidationError(f"Invalid tab '{value}'. Expected one of: {allowed}", field='tab')
