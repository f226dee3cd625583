"""
Whop Session Token Middleware.

Whop renders the app inside an iframe and forwards the viewer's session as a
JWT in the ``x-whop-user-token`` header. The payload carries:
- user_id (or id / userId / sub): the viewing user
- company_id (or install.company_id / companyId / tenantId): the company whose
  dashboard is open
- email (optional)

The token is decoded without signature verification. Both ids are required;
a session missing either never reaches the leaderboard pipeline.
"""
import logging
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, g, request

from ..models.session import WhopSession
from ..utils.errors import from_exception
from ..utils.exceptions import InvalidSessionError
from ..utils.fields import first_present, to_identifier, to_text

logger = logging.getLogger(__name__)

TOKEN_HEADER = 'x-whop-user-token'

ACTOR_ID_PATHS = ('user_id', 'id', 'userId', 'sub')
COMPANY_ID_PATHS = ('company_id', 'install.company_id', 'companyId', 'tenantId')
EMAIL_PATHS = ('email',)

DEV_SESSION = WhopSession(
    actor_id='local-dev-user',
    company_id='local-dev-company',
    email='local@test.com',
)


def decode_session_token(token: str) -> dict:
    """
    Decode a Whop session token payload.

    Args:
        token: JWT from the iframe request

    Returns:
        Decoded payload

    Raises:
        InvalidSessionError: If the token is empty or not a decodable JWT
    """
    if not token:
        raise InvalidSessionError('Missing Whop user token', code='AUTH_REQUIRED')

    try:
        payload = jwt.decode(
            token,
            options={'verify_signature': False},
            algorithms=['HS256', 'RS256', 'ES256'],
        )
    except jwt.InvalidTokenError as e:
        logger.warning('Could not decode Whop token: %s', type(e).__name__)
        raise InvalidSessionError('Invalid Whop session token')

    if not isinstance(payload, dict):
        raise InvalidSessionError('Invalid Whop session token')
    return payload


def session_from_payload(payload: dict) -> WhopSession:
    """
    Resolve actor and company ids from a decoded payload.

    Raises:
        InvalidSessionError: If either id is missing
    """
    actor_id = to_identifier(first_present(payload, ACTOR_ID_PATHS))
    if not actor_id:
        raise InvalidSessionError('Whop session is missing a user id')

    company_id = to_identifier(first_present(payload, COMPANY_ID_PATHS))
    if not company_id:
        raise InvalidSessionError('Whop session is missing a company id', code='MISSING_COMPANY')

    return WhopSession(
        actor_id=actor_id,
        company_id=company_id,
        email=to_text(first_present(payload, EMAIL_PATHS)),
    )


def get_token_from_request() -> Optional[str]:
    """
    Get the session token from the request.
    Priority:
    1. x-whop-user-token header (set by the Whop iframe)
    2. Authorization: Bearer header
    """
    token = request.headers.get(TOKEN_HEADER)
    if token:
        return token.strip()

    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1].strip()

    return None


def get_session_from_request() -> WhopSession:
    """
    Resolve the Whop session for the current request.

    In dev mode a request without any token gets the local dev session.

    Raises:
        InvalidSessionError: If no valid session can be resolved
    """
    token = get_token_from_request()

    if not token and current_app.config.get('WHOP_AUTH_DEV_MODE'):
        logger.debug('No Whop token, using local dev session')
        return DEV_SESSION

    return session_from_payload(decode_session_token(token))


def require_whop_auth(f):
    """
    Decorator to require a valid Whop session.

    Sets g.whop_session, g.company_id and g.actor_id.

    Usage:
        @require_whop_auth
        def my_endpoint():
            company_id = g.company_id
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            session = get_session_from_request()
        except InvalidSessionError as e:
            return from_exception(e)

        g.whop_session = session
        g.company_id = session.company_id
        g.actor_id = session.actor_id

        return f(*args, **kwargs)

    return decorated_function
