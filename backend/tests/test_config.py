"""
Configuration tests – mock flags and startup validation.
"""

import pytest

from conftest import UnitTestConfig


class TestMockFlags:
    def test_global_flag_covers_every_feature(self):
        class AllMock(UnitTestConfig):
            USE_MOCK_DATA = True

        assert AllMock.use_mock_data_for("drug_search") is True
        assert AllMock.use_mock_data_for("pharmacies") is True

    def test_feature_flag_is_scoped(self):
        class PricesOnly(UnitTestConfig):
            MOCK_FEATURES = {"pharmacy_prices": True}

        assert PricesOnly.use_mock_data_for("pharmacy_prices") is True
        assert PricesOnly.use_mock_data_for("drug_info") is False

    def test_fallback_flag(self):
        assert UnitTestConfig.should_fallback_to_mock() is True


class TestValidate:
    def test_production_requires_credentials(self):
        class Prod(UnitTestConfig):
            APP_ENV = "production"
            CLIENT_SECRET = ""

        with pytest.raises(EnvironmentError, match="CLIENT_SECRET") as excinfo:
            Prod.validate()
        assert "NEXT_PUBLIC_USE_MOCK_DATA" in str(excinfo.value)

    def test_production_in_mock_mode_needs_no_credentials(self):
        class ProdMock(UnitTestConfig):
            APP_ENV = "production"
            USE_MOCK_DATA = True
            CLIENT_ID = ""
            CLIENT_SECRET = ""

        ProdMock.validate()

    def test_development_skips_validation(self):
        class Dev(UnitTestConfig):
            APP_ENV = "development"
            CLIENT_ID = ""

        Dev.validate()
