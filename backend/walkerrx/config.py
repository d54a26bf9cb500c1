"""
WalkerRx – settings for the America's Pharmacy integration.
Upstream URLs, OAuth client credentials and mock-data switches are read from
the process environment, with a local .env file filling in anything unset.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Feature name -> env var holding its mock-data flag
MOCK_FEATURE_FLAGS = {
    "drug_search": "NEXT_PUBLIC_USE_MOCK_DRUG_SEARCH",
    "drug_info": "NEXT_PUBLIC_USE_MOCK_DRUG_INFO",
    "pharmacy_prices": "NEXT_PUBLIC_USE_MOCK_PHARMACY_PRICES",
    "pharmacies": "NEXT_PUBLIC_USE_MOCK_PHARMACIES",
}


class Config:
    """Base configuration – values sourced exclusively from environment."""

    # --- Upstream pricing API ---
    API_BASE_URL: str = os.environ.get(
        "AMERICAS_PHARMACY_API_URL", "https://api.americaspharmacy.com/pricing/v1"
    )
    AUTH_URL: str = os.environ.get(
        "AMERICAS_PHARMACY_AUTH_URL",
        "https://medimpact.okta.com/oauth2/aus107c5yrHDu55K8297/v1/token",
    )
    HQ_MAPPING_NAME: str = os.environ.get("AMERICAS_PHARMACY_HQ_MAPPING", "walkerrx")
    AUTH_SCOPE: str = os.environ.get("AMERICAS_PHARMACY_SCOPE", "ccds.read")
    API_TIMEOUT_SECONDS: float = float(os.environ.get("AMERICAS_PHARMACY_TIMEOUT", "10"))
    TOKEN_SAFETY_MARGIN_SECONDS: int = 5 * 60

    # --- Secrets ---
    CLIENT_ID: str = os.environ.get("AMERICAS_PHARMACY_CLIENT_ID", "")
    CLIENT_SECRET: str = os.environ.get("AMERICAS_PHARMACY_CLIENT_SECRET", "")
    API_DEBUG_KEY: str = os.environ.get("API_DEBUG_KEY", "")

    # --- Mock data ---
    USE_MOCK_DATA: bool = _env_flag("NEXT_PUBLIC_USE_MOCK_DATA")
    MOCK_FEATURES: dict = {
        feature: _env_flag(env_name) for feature, env_name in MOCK_FEATURE_FLAGS.items()
    }
    FALLBACK_TO_MOCK: bool = _env_flag("NEXT_PUBLIC_FALLBACK_TO_MOCK", default=True)

    # --- App ---
    APP_ENV: str = os.environ.get("APP_ENV", "development")
    DEBUG: bool = APP_ENV == "development"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # --- Rate limiting ---
    RATE_LIMIT_DEFAULT: str = os.environ.get("RATE_LIMIT_DEFAULT", "120/minute")
    RATELIMIT_ENABLED: bool = True

    @classmethod
    def use_mock_data_for(cls, feature: str) -> bool:
        """True when mock data is forced globally or for this feature."""
        return cls.USE_MOCK_DATA or bool(cls.MOCK_FEATURES.get(feature, False))

    @classmethod
    def should_fallback_to_mock(cls) -> bool:
        return cls.FALLBACK_TO_MOCK

    # --- Validation ---
    @classmethod
    def validate(cls) -> None:
        """Raise on missing upstream credentials when live data is required."""
        if cls.APP_ENV != "production" or cls.USE_MOCK_DATA:
            return
        required = ["API_BASE_URL", "AUTH_URL", "CLIENT_ID", "CLIENT_SECRET"]
        missing = [k for k in required if not getattr(cls, k)]
        if missing:
            raise EnvironmentError(
                f"Cannot reach America's Pharmacy without {', '.join(missing)}. "
                "Set the AMERICAS_PHARMACY_* credentials or enable NEXT_PUBLIC_USE_MOCK_DATA."
            )
