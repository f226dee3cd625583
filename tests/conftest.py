"""
Shared fixtures for Crownboard tests.
"""
from unittest.mock import patch

import jwt
import pytest

from crownboard import create_app
from crownboard.utils.exceptions import WhopAPIError

TOKEN_SECRET = 'crownboard-test-signing-secret-0123456789'


def make_token(payload):
    """Sign a session payload the way the Whop iframe would send it."""
    return jwt.encode(payload, TOKEN_SECRET, algorithm='HS256')


class FakeWhopClient:
    """In-memory stand-in for WhopClient."""

    def __init__(self, payments=None, memberships=None, affiliates=None, failing=()):
        self.payments = list(payments or [])
        self.memberships = list(memberships or [])
        self.affiliates = list(affiliates or [])
        self.failing = set(failing)
        self.calls = []

    def _fetch(self, name, company_id):
        self.calls.append((name, company_id))
        if name in self.failing:
            raise WhopAPIError(f'{name} unavailable', status=503)
        return list(getattr(self, name))

    def list_payments(self, company_id):
        return self._fetch('payments', company_id)

    def list_memberships(self, company_id):
        return self._fetch('memberships', company_id)

    def list_affiliates(self, company_id):
        return self._fetch('affiliates', company_id)


@pytest.fixture
def app():
    """Create application for testing."""
    app = create_app('testing')
    yield app


@pytest.fixture
def client(app):
    """Test client."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture
def session_payload():
    return {'user_id': 'user_admin', 'company_id': 'biz_123', 'email': 'owner@example.com'}


@pytest.fixture
def auth_headers(session_payload):
    """Headers carrying a valid Whop session token."""
    return {'x-whop-user-token': make_token(session_payload)}


@pytest.fixture
def sample_payments():
    """
    Raw payments in mixed shapes.

    Totals: bob 120, alice 80 (2 payments), carol 0 (missing amount).
    One record has no actor and is dropped.
    """
    return [
        {
            'id': 'pay_1',
            'user': {'id': 'user_alice', 'username': 'alice'},
            'amount': '50.00',
            'currency': 'usd',
            'created_at': '2024-01-05T10:00:00Z',
            'affiliate': {'id': 'aff_1', 'username': 'ref_one'},
        },
        {
            'id': 'pay_2',
            'user_id': 'user_bob',
            'username': 'bob',
            'total_amount': 120,
            'created_at': 1704708000,
        },
        {
            'id': 'pay_3',
            'member': {'id': 'user_alice'},
            'price': 30,
            'createdAt': '2024-01-09T12:00:00+00:00',
            'affiliate_id': 'aff_1',
        },
        {
            'id': 'pay_4',
            'amount': 999,
            'created_at': '2024-01-09T12:00:00Z',
        },
        {
            'id': 'pay_5',
            'customer_id': 'user_carol',
            'created_at': '2024-01-10T08:00:00Z',
        },
    ]


@pytest.fixture
def sample_memberships():
    """
    Raw memberships.

    Active counts: bob 12, alice 5, dana 3. Carol is inactive.
    """
    return [
        {
            'id': 'mem_1',
            'user': {'id': 'user_alice', 'username': 'alice'},
            'status': 'active',
            'activity_count': 5,
            'last_activity_at': '2024-01-08T09:00:00Z',
        },
        {
            'id': 'mem_2',
            'user_id': 'user_bob',
            'username': 'bob',
            'status': 'ACTIVE',
            'activityCount': '12',
            'last_activity_at': '2024-01-09T09:00:00Z',
        },
        {
            'id': 'mem_3',
            'user': {'id': 'user_carol', 'name': 'carol'},
            'status': 'inactive',
            'activity_count': 99,
            'last_activity_at': '2024-01-09T09:00:00Z',
        },
        {
            'id': 'mem_4',
            'member': {'id': 'user_dana', 'username': 'dana'},
            'state': 'active',
            'activity': {'count': 3},
            'joined_at': '2024-01-02T09:00:00Z',
        },
    ]


@pytest.fixture
def sample_affiliates():
    return [{'id': 'aff_1', 'username': 'Ref One'}]


@pytest.fixture
def fake_whop(sample_payments, sample_memberships, sample_affiliates):
    """Patch the API layer to read from an in-memory Whop client."""
    fake = FakeWhopClient(sample_payments, sample_memberships, sample_affiliates)
    with patch('crownboard.api.leaderboards.get_whop_client', return_value=fake):
        yield fake


@pytest.fixture
def whop_client(sample_payments, sample_memberships, sample_affiliates):
    """Unpatched in-memory client for service-level tests."""
    return FakeWhopClient(sample_payments, sample_memberships, sample_affiliates)


@pytest.fixture
def token_factory():
    """Build session tokens from arbitrary payloads."""
    return make_token
