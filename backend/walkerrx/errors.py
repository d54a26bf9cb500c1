"""
Error taxonomy shared by the services and the HTTP layer.
Validation problems map to 400 and empty lookups to 404. Anything else is a 500.
"""

from typing import Optional


class PricingError(Exception):
    """Base class for every error raised by the pricing backend."""

    status_code = 500


class ValidationError(PricingError):
    """Missing or malformed request input."""

    status_code = 400


class NotFoundError(PricingError):
    """The lookup succeeded but matched nothing."""

    status_code = 404


class AuthenticationError(PricingError):
    """The client-credentials token exchange failed."""


class UpstreamError(PricingError):
    """The pricing API could not produce a usable response."""


class UpstreamAPIError(UpstreamError):
    """Non-2xx (or unparseable) response from the pricing API."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class UpstreamUnavailableError(UpstreamError):
    """Network failure or timeout talking to the pricing API."""
