"""
Request logger – after-request hook that logs every API interaction
with its status and latency. Secret-looking body fields are redacted.
"""

import json
import logging
import time

from flask import g, request

logger = logging.getLogger("walkerrx.requests")

REDACTED_KEYS = ("password", "token", "secret", "client_secret", "access_token")
MAX_BODY_CHARS = 2000


def start_timer():
    """Before-request hook: remember when the request started."""
    g.request_started_at = time.perf_counter()


def log_after_request(response):
    """Log every API request/response pair."""
    if not request.path.startswith("/api/"):
        return response

    # Skip status checks from filling the log
    if request.path == "/api/public/status":
        return response

    started = getattr(g, "request_started_at", None)
    elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0

    req_body = None
    if request.is_json:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            safe_body = {k: v for k, v in body.items() if k.lower() not in REDACTED_KEYS}
            req_body = json.dumps(safe_body)[:MAX_BODY_CHARS]

    mock_flag = ""
    if response.is_json:
        data = response.get_json(silent=True)
        if isinstance(data, dict) and data.get("usingMockData"):
            mock_flag = " [mock]"

    level = logging.WARNING if response.status_code >= 400 else logging.INFO
    logger.log(
        level,
        "%s %s -> %s in %.1fms%s%s",
        request.method,
        request.path,
        response.status_code,
        elapsed_ms,
        mock_flag,
        f" body={req_body}" if req_body else "",
    )
    return response
