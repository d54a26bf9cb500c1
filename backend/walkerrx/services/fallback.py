"""
Fallback orchestrator – the single place that decides live vs. mock data.

Per request the state goes NORMAL -> MOCK_SUBSTITUTED at most once:
either the feature is configured to prefer mock data, or the one live
attempt failed with an upstream error and a mock substitute exists.
There is no retry. Authentication and validation errors always propagate.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from walkerrx.errors import UpstreamError

logger = logging.getLogger("walkerrx.fallback")

FEATURES = ("drug_search", "drug_info", "pharmacy_prices", "pharmacies")


@dataclass(frozen=True)
class FallbackPolicy:
    prefer_mock: bool = False
    fallback_on_error: bool = True


@dataclass
class FallbackResult:
    data: Any
    using_mock_data: bool = False
    error: Optional[str] = None

    def annotate(self, payload: dict) -> dict:
        """Add the ``usingMockData`` / ``error`` markers to a response body."""
        if self.using_mock_data:
            payload["usingMockData"] = True
        if self.error:
            payload["error"] = self.error
        return payload


class FallbackOrchestrator:
    """Wraps live calls with a per-feature mock-data policy."""

    def __init__(self, policies: dict[str, FallbackPolicy]):
        self.policies = dict(policies)

    @classmethod
    def from_config(cls, config) -> "FallbackOrchestrator":
        fallback = config.should_fallback_to_mock()
        return cls({
            feature: FallbackPolicy(
                prefer_mock=config.use_mock_data_for(feature),
                fallback_on_error=fallback,
            )
            for feature in FEATURES
        })

    def policy_for(self, feature: str) -> FallbackPolicy:
        return self.policies.get(feature, FallbackPolicy())

    def run(
        self,
        feature: str,
        live: Callable[[], Any],
        mock: Callable[[], Any],
    ) -> FallbackResult:
        """Run ``live`` or substitute ``mock()``.

        ``mock`` returns None when no substitute exists for the request; in
        that case a failed live call re-raises the original upstream error.
        """
        policy = self.policy_for(feature)

        if policy.prefer_mock:
            substitute = mock()
            if substitute is not None:
                logger.info("Using mock data for %s (configured)", feature)
                return FallbackResult(data=substitute, using_mock_data=True)
            logger.info("No mock data for this %s request, trying live API", feature)

        try:
            return FallbackResult(data=live())
        except UpstreamError as exc:
            if not policy.fallback_on_error:
                logger.warning("%s failed, mock fallback disabled: %s", feature, exc)
                raise
            substitute = mock()
            if substitute is None:
                logger.warning("%s failed and no mock data is available: %s", feature, exc)
                raise
            logger.warning("%s failed, falling back to mock data: %s", feature, exc)
            return FallbackResult(data=substitute, using_mock_data=True, error=str(exc))
