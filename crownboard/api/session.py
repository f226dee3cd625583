"""
Session API for Crownboard.

Lets the iframe frontend confirm which Whop user and company it is viewing.
"""
from flask import Blueprint, g, jsonify

from ..middleware.whop_auth import require_whop_auth

session_bp = Blueprint('session', __name__)


@session_bp.route('', methods=['GET'])
@require_whop_auth
def get_session():
    """Return the resolved Whop session."""
    return jsonify(g.whop_session.to_dict())
