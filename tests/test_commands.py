"""
Tests for the leaderboard CLI commands.
"""
from unittest.mock import patch

import pytest


@pytest.fixture
def cli_whop(whop_client):
    with patch('crownboard.commands.leaderboard.get_whop_client', return_value=whop_client):
        yield whop_client


class TestShowCommand:
    """Tests for flask leaderboard show."""

    def test_spenders(self, runner, cli_whop):
        result = runner.invoke(args=['leaderboard', 'show', '--company-id', 'biz_123'])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert any('bob' in line and '$120.00' in line for line in lines)
        assert result.output.index('bob') < result.output.index('alice')

    def test_active(self, runner, cli_whop):
        result = runner.invoke(args=['leaderboard', 'show', '--company-id', 'biz_123', '--tab', 'active'])
        assert result.exit_code == 0
        assert '12 activity' in result.output

    def test_no_entries(self, runner, cli_whop):
        result = runner.invoke(args=['leaderboard', 'show', '--company-id', 'biz_123', '--range', 'today',
                                     '--tab', 'active'])
        assert result.exit_code == 0
        assert 'No entries' in result.output

    def test_rejects_unknown_tab(self, runner, cli_whop):
        result = runner.invoke(args=['leaderboard', 'show', '--company-id', 'biz_123', '--tab', 'whales'])
        assert result.exit_code != 0


class TestPickWinnerCommand:
    """Tests for flask leaderboard pick-winner."""

    def test_seeded_draw_is_reproducible(self, runner, cli_whop):
        args = ['leaderboard', 'pick-winner', '--company-id', 'biz_123', '--seed', '42']
        first = runner.invoke(args=args)
        second = runner.invoke(args=args)
        assert first.exit_code == 0
        assert 'Pool: 4 candidates' in first.output
        assert first.output == second.output

    def test_empty_pool_fails(self, runner, cli_whop):
        result = runner.invoke(args=['leaderboard', 'pick-winner', '--company-id', 'biz_123', '--range', 'today'])
        assert result.exit_code == 1
        assert 'No eligible entries' in result.output
