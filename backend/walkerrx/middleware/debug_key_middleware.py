"""
Debug-key middleware – guards the /api/debug/* diagnostics routes.
Requests must carry an ``X-Debug-Key`` header matching API_DEBUG_KEY.
With no key configured the debug routes do not exist.
"""

import hmac
import logging

from flask import current_app, jsonify, request

logger = logging.getLogger("walkerrx.debug")

DEBUG_PREFIX = "/api/debug"


def debug_key_middleware():
    """Before-request hook: validates the debug key header."""
    if request.method == "OPTIONS":
        return None

    if not request.path.startswith(DEBUG_PREFIX):
        return None

    expected = current_app.config.get("API_DEBUG_KEY") or ""
    if not expected:
        return jsonify({"error": "Not found."}), 404

    provided = request.headers.get("X-Debug-Key", "")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning("Rejected debug request to %s from %s", request.path, request.remote_addr)
        return jsonify({"error": "Missing or invalid debug key."}), 401

    return None
