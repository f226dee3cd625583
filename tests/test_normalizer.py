"""
Tests for the record normalizer.

Tests cover:
- Field-path fallbacks for actor, amount and timestamps
- Defaults for missing optional fields
- NO_ACTOR for records without identity
- Batch behavior with malformed records
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from crownboard.models.records import MembershipStatus, NormalizedPayment, RecordKind
from crownboard.services.normalizer import NO_ACTOR, normalize, normalize_batch
from crownboard.utils.exceptions import MalformedRecordError

NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


class TestNormalizePayment:
    """Tests for payment normalization."""

    def test_nested_user(self):
        payment = normalize(
            {'id': 'p1', 'user': {'id': 'u1', 'username': 'alice'}, 'amount': '25.5',
             'created_at': '2024-01-05T10:00:00Z'},
            RecordKind.PAYMENT, now=NOW,
        )
        assert isinstance(payment, NormalizedPayment)
        assert payment.actor_id == 'u1'
        assert payment.actor_name == 'alice'
        assert payment.amount == Decimal('25.5')
        assert payment.created_at == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize('raw', [
        {'user_id': 'u1'},
        {'member': {'id': 'u1'}},
        {'member_id': 'u1'},
        {'customer_id': 'u1'},
        {'buyer_id': 'u1'},
    ])
    def test_actor_fallback_paths(self, raw):
        assert normalize(raw, RecordKind.PAYMENT, now=NOW).actor_id == 'u1'

    @pytest.mark.parametrize('field', ['amount', 'total_amount', 'price', 'total', 'final_amount', 'subtotal'])
    def test_amount_fallback_paths(self, field):
        payment = normalize({'user_id': 'u1', field: 10}, RecordKind.PAYMENT, now=NOW)
        assert payment.amount == Decimal('10')

    def test_missing_actor_is_no_actor(self):
        assert normalize({'id': 'p1', 'amount': 10}, RecordKind.PAYMENT, now=NOW) is NO_ACTOR

    def test_blank_actor_is_no_actor(self):
        assert normalize({'user_id': '   ', 'amount': 10}, RecordKind.PAYMENT, now=NOW) is NO_ACTOR

    def test_missing_amount_is_zero(self):
        payment = normalize({'user_id': 'u1'}, RecordKind.PAYMENT, now=NOW)
        assert payment.amount == Decimal('0')

    def test_unparseable_amount_is_zero(self):
        payment = normalize({'user_id': 'u1', 'amount': 'free'}, RecordKind.PAYMENT, now=NOW)
        assert payment.amount == Decimal('0')

    def test_negative_amount_clamps_to_zero(self):
        payment = normalize({'user_id': 'u1', 'amount': -40}, RecordKind.PAYMENT, now=NOW)
        assert payment.amount == Decimal('0')

    def test_defaults(self):
        payment = normalize({'user_id': 'u1'}, RecordKind.PAYMENT, now=NOW)
        assert payment.currency == 'USD'
        assert payment.product_name == 'Unknown Product'
        assert payment.actor_name is None
        assert payment.affiliate_id is None

    def test_missing_timestamp_uses_now(self):
        payment = normalize({'user_id': 'u1', 'created_at': 'soon'}, RecordKind.PAYMENT, now=NOW)
        assert payment.created_at == NOW

    def test_timestamp_skips_unparseable_candidate(self):
        payment = normalize(
            {'user_id': 'u1', 'date': 'not a date', 'created_at': '2024-01-05T10:00:00Z'},
            RecordKind.PAYMENT, now=NOW,
        )
        assert payment.created_at == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_affiliate_attribution(self):
        payment = normalize(
            {'user_id': 'u1', 'amount': 10, 'affiliate': {'id': 'a1', 'name': 'Ref'}},
            RecordKind.PAYMENT, now=NOW,
        )
        assert payment.affiliate_id == 'a1'
        assert payment.affiliate_name == 'Ref'

    def test_currency_upper_cased(self):
        payment = normalize({'user_id': 'u1', 'currency': 'eur'}, RecordKind.PAYMENT, now=NOW)
        assert payment.currency == 'EUR'

    def test_same_record_normalizes_identically(self):
        raw = {'user_id': 'u1', 'amount': '9.99', 'created_at': '2024-01-05T10:00:00Z'}
        assert normalize(raw, RecordKind.PAYMENT, now=NOW) == normalize(raw, RecordKind.PAYMENT, now=NOW)


class TestNormalizeMembership:
    """Tests for membership normalization."""

    def test_active_membership(self):
        membership = normalize(
            {'id': 'm1', 'user': {'id': 'u1', 'username': 'alice'}, 'status': 'Active',
             'activity_count': 7, 'last_activity_at': '2024-01-08T09:00:00Z'},
            RecordKind.MEMBERSHIP, now=NOW,
        )
        assert membership.actor_id == 'u1'
        assert membership.status is MembershipStatus.ACTIVE
        assert membership.is_active
        assert membership.activity_count == 7

    def test_other_status(self):
        membership = normalize({'user_id': 'u1', 'status': 'expired'}, RecordKind.MEMBERSHIP, now=NOW)
        assert membership.status is MembershipStatus.OTHER
        assert not membership.is_active

    def test_membership_id_is_not_an_actor(self):
        assert normalize({'id': 'mem_1', 'status': 'active'}, RecordKind.MEMBERSHIP, now=NOW) is NO_ACTOR

    def test_activity_count_fallbacks(self):
        membership = normalize({'user_id': 'u1', 'activity': {'count': '4'}}, RecordKind.MEMBERSHIP, now=NOW)
        assert membership.activity_count == 4

    def test_negative_activity_count_is_zero(self):
        membership = normalize({'user_id': 'u1', 'activity_count': -3}, RecordKind.MEMBERSHIP, now=NOW)
        assert membership.activity_count == 0

    def test_last_activity_falls_back_to_joined(self):
        membership = normalize(
            {'user_id': 'u1', 'joined_at': '2024-01-02T00:00:00Z'},
            RecordKind.MEMBERSHIP, now=NOW,
        )
        assert membership.last_activity_at == datetime(2024, 1, 2, tzinfo=timezone.utc)


class TestNormalizeAffiliate:

    def test_affiliate_directory_entry(self):
        affiliate = normalize({'id': 'aff_1', 'username': 'Ref One'}, RecordKind.AFFILIATE, now=NOW)
        assert affiliate.actor_id == 'aff_1'
        assert affiliate.actor_name == 'Ref One'


class TestMalformedRecords:
    """Tests for records that are not keyed structures."""

    def test_non_mapping_raises(self):
        with pytest.raises(MalformedRecordError) as exc_info:
            normalize(['u1', 10], RecordKind.PAYMENT)
        assert exc_info.value.code == 'MALFORMED_RECORD'

    def test_batch_skips_malformed_and_dropped(self):
        result = normalize_batch(
            [{'user_id': 'u1', 'amount': 1}, 'garbage', None, {'amount': 5}, {'user_id': 'u2'}],
            RecordKind.PAYMENT,
            now=NOW,
        )
        assert [p.actor_id for p in result.records] == ['u1', 'u2']
        assert result.malformed == 2
        assert result.dropped == 1
        assert result.total == 5

    def test_batch_handles_none(self):
        result = normalize_batch(None, RecordKind.MEMBERSHIP)
        assert result.records == []

    def test_batch_survives_unusable_dates(self):
        result = normalize_batch(
            [
                {'user_id': 'A', 'amount': 1, 'created_at': '²'},
                {'user_id': 'B', 'amount': 2, 'created_at': '0001-01-01T00:00:00+05:00'},
                {'user_id': 'C', 'amount': 3, 'created_at': '2024-01-05T10:00:00Z'},
            ],
            RecordKind.PAYMENT,
            now=NOW,
        )
        assert [p.actor_id for p in result.records] == ['A', 'B', 'C']
        assert result.records[0].created_at == NOW
        assert result.records[1].created_at == NOW
