"""
Token diagnostics routes (guarded by debug_key_middleware).
"""

from flask import Blueprint, jsonify

from walkerrx.services.medication_service import get_medication_service

debug_bp = Blueprint("debug", __name__)


@debug_bp.route("/token-status", methods=["GET"])
def token_status():
    return jsonify(get_medication_service().token_status()), 200


@debug_bp.route("/token-refresh", methods=["POST"])
def token_refresh():
    """Force a new client-credentials exchange and report the result."""
    return jsonify(get_medication_service().refresh_token()), 200
