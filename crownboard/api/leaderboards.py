"""
Leaderboard API endpoints for Crownboard.

Serves ranked leaderboards (top spenders, top affiliates, most active members)
for the company in the caller's Whop session, plus CSV export and random
winner draws. Every request recomputes from fresh Whop data.
"""
import csv
import io
import logging
from typing import Optional

from flask import Blueprint, Response, current_app, g, jsonify, request

from ..middleware.whop_auth import require_whop_auth
from ..services.date_filter import parse_range, resolve_timezone
from ..services.leaderboard_service import LeaderboardService, parse_tab
from ..services.ranker import validate_limit
from ..services.whop_client import get_whop_client
from ..services.winner_service import pick_winner
from ..utils.errors import bad_gateway, bad_request

logger = logging.getLogger(__name__)

leaderboards_bp = Blueprint('leaderboards', __name__)


def _load_service() -> LeaderboardService:
    """Fetch the session company's data and wrap it in a service."""
    client = get_whop_client(current_app.config)
    tz = resolve_timezone(current_app.config.get('CROWNBOARD_TIMEZONE'))
    return LeaderboardService.for_company(client, g.company_id, tz=tz)


def _degraded_error(service: LeaderboardService) -> Optional[tuple]:
    """
    Apply DEGRADED_DATA_POLICY.

    Returns an error response under the 'error' policy when any Whop
    resource failed; None means serve what loaded.
    """
    dataset = service.dataset
    if dataset.degraded and current_app.config.get('DEGRADED_DATA_POLICY') == 'error':
        return bad_gateway(
            'Whop data is temporarily unavailable',
            details={'company_id': dataset.company_id, 'failed_sources': dataset.failed_sources},
        )
    return None


def _limit_arg(source, default):
    value = source.get('limit')
    if value is None or value == '':
        return default
    return validate_limit(value)


# ==================== LEADERBOARD ENDPOINTS ====================

@leaderboards_bp.route('', methods=['GET'])
@require_whop_auth
def get_leaderboard():
    """
    One ranked leaderboard.

    Query params:
        tab: 'spenders', 'affiliates', 'active' (default: 'spenders')
        range: 'today', '7d', '30d', 'all' (default: 'all')
        limit: max entries (default: LEADERBOARD_LIMIT)
    """
    tab = parse_tab(request.args.get('tab'))
    date_range = parse_range(request.args.get('range'))
    limit = _limit_arg(request.args, current_app.config['LEADERBOARD_LIMIT'])

    service = _load_service()
    error = _degraded_error(service)
    if error:
        return error

    result = service.get_leaderboard(tab, date_range, limit=limit)
    return jsonify(result.to_dict())


@leaderboards_bp.route('/summary', methods=['GET'])
@require_whop_auth
def get_summary():
    """
    All three leaderboards for one range, plus the winner pool size.

    Query params:
        range: 'today', '7d', '30d', 'all' (default: 'all')
        limit: max entries per leaderboard (default: LEADERBOARD_LIMIT)
    """
    date_range = parse_range(request.args.get('range'))
    limit = _limit_arg(request.args, current_app.config['LEADERBOARD_LIMIT'])

    service = _load_service()
    error = _degraded_error(service)
    if error:
        return error

    boards = service.get_all_leaderboards(date_range, limit=limit)
    pool = service.get_winner_pool(
        date_range,
        limit=limit,
        max_size=current_app.config['WINNER_POOL_SIZE'],
    )

    return jsonify({
        'company_id': g.company_id,
        'range': date_range.value,
        'generated_at': service.now.isoformat(),
        'leaderboards': {
            tab.value: [entry.to_dict() for entry in result.entries]
            for tab, result in boards.items()
        },
        'winner_pool_size': len(pool),
        'degraded': service.dataset.degraded,
        'failed_sources': list(service.dataset.failed_sources),
    })


@leaderboards_bp.route('/winner', methods=['POST'])
@require_whop_auth
def draw_winner():
    """
    Pick a random winner.

    Body (JSON, all optional):
        range: date range (default: 'all')
        tab: draw from this leaderboard only; otherwise the pool is the union
             of top spenders and most active members
        limit: entries per source leaderboard (default: LEADERBOARD_LIMIT)
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return bad_request('Request body must be a JSON object')

    date_range = parse_range(data.get('range'))
    tab = parse_tab(data['tab']) if data.get('tab') else None
    limit = _limit_arg(data, current_app.config['LEADERBOARD_LIMIT'])

    service = _load_service()
    error = _degraded_error(service)
    if error:
        return error

    pool = service.get_winner_pool(
        date_range,
        limit=limit,
        tab=tab,
        max_size=current_app.config['WINNER_POOL_SIZE'],
    )
    winner = pick_winner(pool)

    logger.info(f"Winner drawn for company {g.company_id} by {g.actor_id}: {winner.actor_id}")

    return jsonify({
        'winner': winner.to_dict(),
        'pool_size': len(pool),
        'range': date_range.value,
        'tab': tab.value if tab else None,
        'degraded': service.dataset.degraded,
        'failed_sources': list(service.dataset.failed_sources),
    })


# ==================== EXPORT ====================

@leaderboards_bp.route('/export', methods=['GET'])
@require_whop_auth
def export_leaderboard():
    """
    Export one leaderboard as CSV.

    Query params:
        tab: leaderboard tab (default: 'spenders')
        range: date range (default: 'all')
        limit: optional cap; the full leaderboard is exported by default
    """
    tab = parse_tab(request.args.get('tab'))
    date_range = parse_range(request.args.get('range'))
    limit = _limit_arg(request.args, None)

    service = _load_service()
    error = _degraded_error(service)
    if error:
        return error

    entries = service.rank_tab(tab, date_range, limit=limit)

    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(['Rank', 'Name', 'Amount', 'Count'])
    for entry in entries:
        amount = f'{entry.metric_total:.2f}' if entry.metric_total is not None else ''
        writer.writerow([entry.rank, entry.name, amount, entry.secondary_count])

    filename = f'crownboard-leaderboard-{tab.value}-{date_range.value}.csv'
    return Response(
        output.getvalue(),
        mimetype='text/csv',
        headers={
            'Content-Disposition': f'attachment; filename={filename}',
            'Content-Type': 'text/csv; charset=utf-8'
        }
    )
