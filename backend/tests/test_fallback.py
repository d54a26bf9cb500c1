"""
Fallback orchestrator & mock dataset tests.
"""

import pytest

from conftest import MockModeConfig, NoFallbackConfig, UnitTestConfig
from walkerrx.errors import (
    AuthenticationError,
    UpstreamAPIError,
    UpstreamUnavailableError,
    ValidationError,
)
from walkerrx.services import gsn_mapping, mock_data
from walkerrx.services.fallback import FallbackOrchestrator, FallbackPolicy


def _raise(exc):
    def _call():
        raise exc
    return _call


# ═══════════════════════════════════════════
# ORCHESTRATOR
# ═══════════════════════════════════════════

class TestFallbackOrchestrator:
    def test_live_success_is_untagged(self):
        orch = FallbackOrchestrator({"drug_info": FallbackPolicy()})
        result = orch.run("drug_info", live=lambda: {"live": True}, mock=lambda: {"mock": True})
        assert result.data == {"live": True}
        assert result.using_mock_data is False
        assert result.annotate({}) == {}

    def test_upstream_error_substitutes_mock(self):
        orch = FallbackOrchestrator({"drug_info": FallbackPolicy()})
        result = orch.run("drug_info", live=_raise(UpstreamAPIError("API Error 500", status=500)),
                          mock=lambda: {"mock": True})
        assert result.data == {"mock": True}
        assert result.annotate({}) == {"usingMockData": True, "error": "API Error 500"}

    def test_network_error_substitutes_mock(self):
        orch = FallbackOrchestrator({})
        result = orch.run("pharmacies", live=_raise(UpstreamUnavailableError("timeout")), mock=lambda: [])
        assert result.using_mock_data is True
        assert result.data == []

    def test_missing_mock_reraises_original(self):
        orch = FallbackOrchestrator({"drug_info": FallbackPolicy()})
        error = UpstreamAPIError("not found", status=404)
        with pytest.raises(UpstreamAPIError) as info:
            orch.run("drug_info", live=_raise(error), mock=lambda: None)
        assert info.value is error

    def test_fallback_disabled_reraises(self):
        orch = FallbackOrchestrator({"drug_info": FallbackPolicy(fallback_on_error=False)})
        with pytest.raises(UpstreamAPIError):
            orch.run("drug_info", live=_raise(UpstreamAPIError("boom")), mock=lambda: {"mock": True})

    @pytest.mark.parametrize("error", [AuthenticationError("bad creds"), ValidationError("bad input")])
    def test_auth_and_validation_errors_never_substituted(self, error):
        orch = FallbackOrchestrator({"drug_info": FallbackPolicy()})
        with pytest.raises(type(error)):
            orch.run("drug_info", live=_raise(error), mock=lambda: {"mock": True})

    def test_prefer_mock_skips_live(self):
        calls = []
        orch = FallbackOrchestrator({"drug_search": FallbackPolicy(prefer_mock=True)})
        result = orch.run("drug_search", live=lambda: calls.append("live"), mock=lambda: ["hit"])
        assert result.data == ["hit"]
        assert result.annotate({}) == {"usingMockData": True}
        assert calls == []

    def test_prefer_mock_without_data_goes_live(self):
        orch = FallbackOrchestrator({"drug_info": FallbackPolicy(prefer_mock=True)})
        result = orch.run("drug_info", live=lambda: {"live": True}, mock=lambda: None)
        assert result.data == {"live": True}
        assert result.using_mock_data is False


class TestPolicyFromConfig:
    def test_defaults(self):
        orch = FallbackOrchestrator.from_config(UnitTestConfig)
        policy = orch.policy_for("pharmacy_prices")
        assert policy == FallbackPolicy(prefer_mock=False, fallback_on_error=True)

    def test_global_mock_flag(self):
        orch = FallbackOrchestrator.from_config(MockModeConfig)
        assert all(p.prefer_mock for p in orch.policies.values())

    def test_per_feature_flag(self):
        class DrugInfoOnly(UnitTestConfig):
            MOCK_FEATURES = {"drug_info": True}

        orch = FallbackOrchestrator.from_config(DrugInfoOnly)
        assert orch.policy_for("drug_info").prefer_mock is True
        assert orch.policy_for("drug_search").prefer_mock is False

    def test_fallback_disabled(self):
        orch = FallbackOrchestrator.from_config(NoFallbackConfig)
        assert orch.policy_for("drug_info").fallback_on_error is False


# ═══════════════════════════════════════════
# MOCK DATASETS
# ═══════════════════════════════════════════

class TestMockData:
    def test_known_drug_lookup_is_case_insensitive(self):
        assert mock_data.get_mock_drug_info("Amoxicillin")["brandName"] == "Amoxil"

    def test_unknown_drug_has_no_mock(self):
        assert mock_data.get_mock_drug_info("unobtainium") is None
        assert mock_data.get_mock_drug_info_by_gsn(999999) is None

    def test_gsn_lookup_tags_gsn(self):
        details = mock_data.get_mock_drug_info_by_gsn(6578)
        assert details["genericName"] == "Lisdexamfetamine"
        assert details["gsn"] == 6578

    def test_accessors_return_copies(self):
        mock_data.get_mock_drug_info("lisinopril")["brandName"] = "changed"
        mock_data.get_mock_pharmacy_prices()[0]["price"] = 0
        assert mock_data.MOCK_DRUG_DATA["lisinopril"]["brandName"] == "Prinivil, Zestril"
        assert mock_data.MOCK_PHARMACY_PRICES[0]["price"] == 12.99

    def test_search_substring_match(self):
        names = [h["drugName"] for h in mock_data.get_mock_search_results("AM")]
        assert "Amoxicillin" in names
        assert "Ambien" in names
        assert all("am" in n.lower() for n in names)


class TestGsnMapping:
    def test_brand_and_generic_lookup(self):
        assert gsn_mapping.find_gsn_by_drug_name("lipitor") == 62733
        assert gsn_mapping.find_gsn_by_drug_name("ATORVASTATIN") == 62733

    def test_reverse_lookup(self):
        assert gsn_mapping.find_drug_by_gsn(77288).brand_name == "Vyvanse"

    def test_enrich_only_fills_missing(self):
        hits = [{"drugName": "Zestril"}, {"drugName": "Lipitor", "gsn": 1}, {"drugName": "Mystery"}]
        enriched = gsn_mapping.enrich_with_gsn(hits)
        assert enriched == [
            {"drugName": "Zestril", "gsn": 19675},
            {"drugName": "Lipitor", "gsn": 1},
            {"drugName": "Mystery"},
        ]
        assert "gsn" not in hits[0]
