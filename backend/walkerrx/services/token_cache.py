"""
OAuth2 client-credentials token cache for the America's Pharmacy API.

Holds at most one bearer token. A cached token is served until
``expires_at``, which is set five minutes before the real expiry reported
by the authorization server. A failed exchange is fatal for the caller;
the previous token is discarded rather than reused.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import requests

from walkerrx.errors import AuthenticationError

logger = logging.getLogger("walkerrx.auth")

DEFAULT_EXPIRES_IN = 3600
DEFAULT_TOKEN_TYPE = "Bearer"
HISTORY_LIMIT = 20


@dataclass(frozen=True)
class CachedToken:
    value: str
    token_type: str
    issued_at: float    # epoch seconds
    expires_at: float   # epoch seconds, safety margin already subtracted

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


def _iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class TokenCache:
    """Single shared bearer token with expiry-based invalidation."""

    def __init__(
        self,
        auth_url: str,
        client_id: str,
        client_secret: str,
        scope: str = "ccds.read",
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        safety_margin: int = 300,
        timeout: float = 10,
    ):
        self.auth_url = auth_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self.session = session or requests.Session()
        self.clock = clock
        self.safety_margin = safety_margin
        self.timeout = timeout

        self._token: Optional[CachedToken] = None
        self._lock = threading.Lock()
        self._request_count = 0
        self._refresh_count = 0
        self._last_error: Optional[str] = None
        self._history: deque = deque(maxlen=HISTORY_LIMIT)

    # ── Public API ──

    def get_token(self) -> str:
        """Return a valid access token, exchanging credentials if needed."""
        token = self._token
        if token and token.is_valid(self.clock()):
            return token.value

        with self._lock:
            # Another thread may have refreshed while we waited
            token = self._token
            if token and token.is_valid(self.clock()):
                return token.value
            return self._exchange("fetch").value

    def force_refresh(self) -> str:
        """Discard the cached token and run a new exchange unconditionally."""
        with self._lock:
            self._token = None
            self._refresh_count += 1
            return self._exchange("refresh").value

    def get_status(self) -> dict:
        """Diagnostic snapshot. Never includes the token value itself."""
        now = self.clock()
        token = self._token
        return {
            "hasToken": token is not None,
            "tokenType": token.token_type if token else None,
            "issuedAt": _iso(token.issued_at) if token else None,
            "expiresAt": _iso(token.expires_at) if token else None,
            "currentTime": _iso(now),
            "isExpired": not token.is_valid(now) if token else True,
            "secondsUntilExpiry": max(0, int(token.expires_at - now)) if token else 0,
            "requestCount": self._request_count,
            "refreshCount": self._refresh_count,
            "lastError": self._last_error,
            "history": list(self._history),
        }

    # ── Internals ──

    def _exchange(self, action: str) -> CachedToken:
        """Run the client-credentials grant. Caller must hold the lock."""
        self._request_count += 1
        now = self.clock()

        if not (self.auth_url and self.client_id and self.client_secret):
            self._token = None
            return self._fail(action, now, "Missing authorization URL or client credentials.")

        try:
            resp = self.session.post(
                self.auth_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "scope": self.scope,
                },
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            self._token = None
            return self._fail(action, now, f"Token request failed: {exc}")

        if not 200 <= resp.status_code < 300:
            self._token = None
            return self._fail(
                action, now, f"Token request failed {resp.status_code}: {resp.text[:200]}"
            )

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not data.get("access_token"):
            self._token = None
            return self._fail(action, now, "Token response did not contain an access_token.")

        expires_in = int(data.get("expires_in") or DEFAULT_EXPIRES_IN)
        token = CachedToken(
            value=data["access_token"],
            token_type=data.get("token_type") or DEFAULT_TOKEN_TYPE,
            issued_at=now,
            expires_at=now + expires_in - self.safety_margin,
        )
        self._token = token
        self._last_error = None
        self._history.append({
            "timestamp": _iso(now),
            "action": action,
            "success": True,
            "expiresAt": _iso(token.expires_at),
        })
        logger.info("Obtained %s token, valid for %ds", token.token_type, expires_in)
        return token

    def _fail(self, action: str, now: float, message: str):
        self._last_error = message
        self._history.append({
            "timestamp": _iso(now),
            "action": action,
            "success": False,
            "error": message,
        })
        logger.error("Token %s failed: %s", action, message)
        raise AuthenticationError(message)
