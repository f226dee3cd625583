"""
Leaderboard pipeline services for Crownboard.
"""
from .normalizer import NO_ACTOR, normalize, normalize_batch
from .date_filter import filter_by_range, parse_range
from .aggregator import aggregate
from .ranker import rank
from .winner_service import build_winner_pool, pick_winner
from .whop_client import WhopClient, get_whop_client
from .leaderboard_service import LeaderboardService, CompanyDataset, fetch_company_dataset, parse_tab

__all__ = [
    'NO_ACTOR',
    'normalize',
    'normalize_batch',
    'filter_by_range',
    'parse_range',
    'aggregate',
    'rank',
    'build_winner_pool',
    'pick_winner',
    'WhopClient',
    'get_whop_client',
    'LeaderboardService',
    'CompanyDataset',
    'fetch_company_dataset',
    'parse_tab',
]
