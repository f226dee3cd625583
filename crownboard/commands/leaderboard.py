"""
CLI Commands for Leaderboards.

Useful for checking a company's leaderboards or running a draw from a
terminal or cron job:

# Weekly giveaway among the top spenders and most active members
0 18 * * 5 cd /app && flask leaderboard pick-winner --company-id=biz_123 --range=7d
"""
import random

import click
from flask import current_app
from flask.cli import with_appcontext

from ..models.leaderboard import DateRange, LeaderboardTab
from ..services.date_filter import resolve_timezone
from ..services.leaderboard_service import LeaderboardService
from ..services.whop_client import get_whop_client
from ..services.winner_service import pick_winner
from ..utils.exceptions import CrownboardError

TAB_CHOICES = [tab.value for tab in LeaderboardTab]
RANGE_CHOICES = [date_range.value for date_range in DateRange]


@click.group('leaderboard')
def leaderboard_cli():
    """Leaderboard commands."""
    pass


def _load_service(company_id):
    client = get_whop_client(current_app.config)
    tz = resolve_timezone(current_app.config.get('CROWNBOARD_TIMEZONE'))
    service = LeaderboardService.for_company(client, company_id, tz=tz)
    if service.dataset.degraded:
        click.echo(f"Warning: failed to load {', '.join(service.dataset.failed_sources)}", err=True)
    return service


def _format_entry(entry):
    if entry.metric_total is not None:
        return f"  #{entry.rank:<3} {entry.name:<30} ${entry.metric_total:,.2f}  ({entry.secondary_count})"
    return f"  #{entry.rank:<3} {entry.name:<30} {entry.secondary_count} activity"


@leaderboard_cli.command('show')
@click.option('--company-id', required=True, help='Whop company ID')
@click.option('--tab', type=click.Choice(TAB_CHOICES), default='spenders', show_default=True)
@click.option('--range', 'date_range', type=click.Choice(RANGE_CHOICES), default='all', show_default=True)
@click.option('--limit', type=click.IntRange(min=1), help='Max entries (default: LEADERBOARD_LIMIT)')
@with_appcontext
def show_leaderboard(company_id, tab, date_range, limit):
    """Print one leaderboard."""
    if limit is None:
        limit = current_app.config['LEADERBOARD_LIMIT']

    try:
        service = _load_service(company_id)
        entries = service.rank_tab(LeaderboardTab(tab), DateRange(date_range), limit=limit)
    except CrownboardError as e:
        raise click.ClickException(e.message)

    click.echo(f"\n{tab} leaderboard for {company_id} ({date_range})")
    if not entries:
        click.echo("  No entries")
        return

    for entry in entries:
        click.echo(_format_entry(entry))


@leaderboard_cli.command('pick-winner')
@click.option('--company-id', required=True, help='Whop company ID')
@click.option('--range', 'date_range', type=click.Choice(RANGE_CHOICES), default='all', show_default=True)
@click.option('--tab', type=click.Choice(TAB_CHOICES), help='Draw from one leaderboard only')
@click.option('--limit', type=click.IntRange(min=1), help='Entries per source leaderboard')
@click.option('--seed', type=int, help='Seed for a reproducible draw')
@with_appcontext
def pick_winner_command(company_id, date_range, tab, limit, seed):
    """
    Draw a random winner.

    Without --tab the pool is the top spenders plus the most active members.
    """
    if limit is None:
        limit = current_app.config['LEADERBOARD_LIMIT']
    rng = random.Random(seed) if seed is not None else None

    try:
        service = _load_service(company_id)
        pool = service.get_winner_pool(
            DateRange(date_range),
            limit=limit,
            tab=LeaderboardTab(tab) if tab else None,
            max_size=current_app.config['WINNER_POOL_SIZE'],
        )
        winner = pick_winner(pool, rng=rng)
    except CrownboardError as e:
        raise click.ClickException(e.message)

    click.echo(f"Pool: {len(pool)} candidates")
    click.echo(f"Winner: {winner.name} ({winner.actor_id})")


def init_app(app):
    """Register leaderboard commands with Flask app."""
    app.cli.add_command(leaderboard_cli)
