"""
Tests for Whop session middleware.
"""
import pytest

from crownboard.middleware.whop_auth import DEV_SESSION, decode_session_token, session_from_payload
from crownboard.models.session import WhopSession
from crownboard.utils.exceptions import InvalidSessionError


class TestSessionFromPayload:
    """Tests for resolving ids out of a decoded token."""

    def test_primary_fields(self):
        session = session_from_payload({'user_id': 'u1', 'company_id': 'biz_1', 'email': 'a@b.com'})
        assert session.actor_id == 'u1'
        assert session.company_id == 'biz_1'
        assert session.email == 'a@b.com'

    def test_only_identity_is_kept(self):
        session = session_from_payload({'user_id': 'u1', 'company_id': 'biz_1', 'iat': 1700000000, 'scope': 'admin'})
        assert session == WhopSession(actor_id='u1', company_id='biz_1')
        assert session.to_dict() == {'actor_id': 'u1', 'company_id': 'biz_1', 'email': None}

    @pytest.mark.parametrize('payload', [
        {'id': 'u1', 'install': {'company_id': 'biz_1'}},
        {'userId': 'u1', 'companyId': 'biz_1'},
        {'sub': 'u1', 'tenantId': 'biz_1'},
    ])
    def test_fallback_fields(self, payload):
        session = session_from_payload(payload)
        assert (session.actor_id, session.company_id) == ('u1', 'biz_1')

    def test_missing_actor(self):
        with pytest.raises(InvalidSessionError):
            session_from_payload({'company_id': 'biz_1'})

    def test_missing_company(self):
        with pytest.raises(InvalidSessionError) as exc_info:
            session_from_payload({'user_id': 'u1'})
        assert exc_info.value.code == 'MISSING_COMPANY'


class TestDecodeSessionToken:

    def test_decodes_without_verifying_signature(self, token_factory):
        payload = decode_session_token(token_factory({'user_id': 'u1', 'company_id': 'biz_1'}))
        assert payload['user_id'] == 'u1'

    def test_empty_token(self):
        with pytest.raises(InvalidSessionError) as exc_info:
            decode_session_token('')
        assert exc_info.value.code == 'AUTH_REQUIRED'

    def test_garbage_token(self):
        with pytest.raises(InvalidSessionError):
            decode_session_token('not-a-jwt')


class TestRequireWhopAuth:
    """Tests for the decorator via GET /api/session."""

    def test_header_token(self, client, auth_headers):
        response = client.get('/api/session', headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json() == {
            'actor_id': 'user_admin',
            'company_id': 'biz_123',
            'email': 'owner@example.com',
        }

    def test_bearer_token(self, client, token_factory):
        token = token_factory({'sub': 'u9', 'company_id': 'biz_9'})
        response = client.get('/api/session', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 200
        assert response.get_json()['actor_id'] == 'u9'

    def test_missing_token(self, client):
        response = client.get('/api/session')
        assert response.status_code == 401
        assert response.get_json()['error']['code'] == 'AUTH_REQUIRED'

    def test_session_without_company(self, client, token_factory):
        headers = {'x-whop-user-token': token_factory({'user_id': 'u1'})}
        response = client.get('/api/session', headers=headers)
        assert response.status_code == 401
        assert response.get_json()['error']['code'] == 'MISSING_COMPANY'

    def test_dev_mode_session(self, app, client):
        app.config['WHOP_AUTH_DEV_MODE'] = True
        response = client.get('/api/session')
        assert response.status_code == 200
        assert response.get_json()['company_id'] == DEV_SESSION.company_id

    def test_dev_mode_still_rejects_bad_tokens(self, app, client):
        app.config['WHOP_AUTH_DEV_MODE'] = True
        response = client.get('/api/session', headers={'x-whop-user-token': 'garbage'})
        assert response.status_code == 401
