"""
Per-actor aggregation for leaderboards.

One pass over the normalized records, grouping into an insertion-ordered dict
so the ranker's stable sort falls back to first-appearance order.
"""
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Optional

from ..models.leaderboard import AggregatedActor, MetricKind


def _placeholder_name(metric: MetricKind, actor_id: str) -> str:
    if metric is MetricKind.AFFILIATE_EARNINGS:
        return f'Affiliate {actor_id}'
    return f'Member {actor_id}'


def _key_and_name(record, metric: MetricKind):
    """Grouping key, display name and contribution for one record, or None to skip."""
    if metric is MetricKind.SPEND:
        return record.actor_id, record.actor_name, record.amount, 1

    if metric is MetricKind.AFFILIATE_EARNINGS:
        if not record.affiliate_id:
            return None
        return record.affiliate_id, record.affiliate_name, record.amount, 1

    if not record.is_active:
        return None
    return record.actor_id, record.actor_name, None, record.activity_count


def aggregate(
    records: Iterable,
    metric: MetricKind,
    name_directory: Optional[Mapping[str, str]] = None
) -> Dict[str, AggregatedActor]:
    """
    Group normalized records by actor and total them.

    Args:
        records: NormalizedPayment (spend, affiliate) or NormalizedMembership
            (activity) records, in processing order
        metric: Which total to build
        name_directory: Optional actor id -> name lookup for actors whose
            records never carried a name

    Returns:
        Dict of actor id -> AggregatedActor, ordered by first appearance
    """
    metric = MetricKind(metric)
    totals: Dict[str, AggregatedActor] = {}

    for record in records:
        contribution = _key_and_name(record, metric)
        if contribution is None:
            continue
        key, name, amount, count = contribution

        actor = totals.get(key)
        if actor is None:
            actor = AggregatedActor(
                actor_id=key,
                display_name=None,
                metric_total=Decimal('0') if metric.is_monetary else None,
            )
            totals[key] = actor

        # Last seen name wins
        if name:
            actor.display_name = name
        if amount is not None:
            actor.metric_total += amount
        actor.secondary_count += count

    for key, actor in totals.items():
        if not actor.display_name:
            actor.display_name = (name_directory or {}).get(key) or _placeholder_name(metric, key)

    return totals
