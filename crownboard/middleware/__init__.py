"""
Middleware package for Crownboard.
"""
from .whop_auth import (
    require_whop_auth,
    get_session_from_request,
    decode_session_token,
    session_from_payload,
)
