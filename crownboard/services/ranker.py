"""
Leaderboard ranking.

Ranks are positional: 1..k by sorted position, so equal totals still get
distinct ranks ordered by first appearance.
"""
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Union

from ..models.leaderboard import AggregatedActor, LeaderboardEntry, MetricKind
from ..utils.exceptions import ValidationError


def _sort_value(actor: AggregatedActor, metric: MetricKind):
    if metric.is_monetary:
        return actor.metric_total if actor.metric_total is not None else Decimal('0')
    return actor.secondary_count


def validate_limit(limit) -> Optional[int]:
    """Accept None or a positive integer (ints or digit strings)."""
    if limit is None:
        return None
    if isinstance(limit, float) and not limit.is_integer():
        raise ValidationError(f"Invalid limit '{limit}'", field='limit')
    try:
        value = int(limit)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Invalid limit '{limit}'", field='limit')
    if isinstance(limit, bool) or value < 1:
        raise ValidationError('Limit must be a positive integer', field='limit')
    return value


def rank(
    actors: Union[Mapping[str, AggregatedActor], Iterable[AggregatedActor]],
    metric: MetricKind,
    limit: Optional[int] = None
) -> List[LeaderboardEntry]:
    """
    Sort aggregated actors descending by metric and assign ranks.

    Args:
        actors: Output of ``aggregate`` (dict) or any iterable of actors
        metric: Spend and affiliate boards sort by metric_total, activity by
            secondary_count
        limit: Optional explicit cap on the number of entries

    Returns:
        Ranked entries, rank 1 first
    """
    metric = MetricKind(metric)
    limit = validate_limit(limit)

    if isinstance(actors, Mapping):
        actors = actors.values()

    # sorted() is stable with reverse=True, ties keep input order
    ordered = sorted(actors, key=lambda actor: _sort_value(actor, metric), reverse=True)
    if limit is not None:
        ordered = ordered[:limit]

    return [
        LeaderboardEntry(
            rank=position,
            actor_id=actor.actor_id,
            name=actor.display_name,
            metric_total=actor.metric_total if metric.is_monetary else None,
            secondary_count=actor.secondary_count,
        )
        for position, actor in enumerate(ordered, start=1)
    ]
