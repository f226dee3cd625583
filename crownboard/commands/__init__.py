"""
CLI Commands for Crownboard.

Provides Flask CLI commands for inspecting leaderboards outside the iframe.

Usage:
    flask leaderboard show --company-id biz_123 --tab spenders --range 7d
    flask leaderboard pick-winner --company-id biz_123 --range 30d --seed 42
"""
from .leaderboard import init_app as init_leaderboard_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_leaderboard_commands(app)
