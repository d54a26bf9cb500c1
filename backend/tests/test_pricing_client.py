"""
Pricing API client tests – request shaping, response normalization
and error mapping. The token cache and HTTP session are faked.
"""

import pytest
import requests

from conftest import FakeResponse
from walkerrx.errors import (
    AuthenticationError,
    UpstreamAPIError,
    UpstreamUnavailableError,
    ValidationError,
)
from walkerrx.services.pricing_client import (
    AmericasPharmacyClient,
    parse_pharmacy_price,
    parse_search_hit,
)
from walkerrx.services.request_normalizer import build_price_request
from walkerrx.services.token_cache import TokenCache


@pytest.fixture
def pricing_client(session, clock):
    cache = TokenCache("https://auth.test/token", "cid", "secret", session=session, clock=clock)
    return AmericasPharmacyClient(cache, "https://pricing.test/v1/", session=session)


NESTED_RECORD = {
    "pharmacy": {
        "name": "WALGREENS #1234",
        "chainCode": "226",
        "npi": "1234567890",
        "streetAddress": "9600 Great Hills Trl",
        "city": "Austin",
        "state": "TX",
        "zipCode": "78759",
        "phone": "5125550101",
        "distance": "0.84",
        "latitude": 30.39,
        "longitude": -97.75,
    },
    "price": {"price": "12.34", "ucPrice": 20.5, "priceBasis": "MAC"},
}


# ═══════════════════════════════════════════
# PARSING
# ═══════════════════════════════════════════

class TestParsing:
    def test_search_hit_from_all_caps_string(self):
        assert parse_search_hit("AMOXICILLIN") == {"drugName": "Amoxicillin"}

    def test_search_hit_from_object(self):
        hit = parse_search_hit({"drugName": "LIPITOR", "gsn": "62733", "brandGenericFlag": "B"})
        assert hit == {"drugName": "Lipitor", "gsn": 62733, "brandGenericFlag": "B"}

    def test_blank_hits_dropped(self):
        assert parse_search_hit("  ") is None
        assert parse_search_hit({"gsn": 1}) is None

    def test_nested_price_record(self):
        row = parse_pharmacy_price(NESTED_RECORD)
        assert row["name"] == "WALGREENS #1234"
        assert row["address"] == "9600 Great Hills Trl"
        assert row["distance"] == 0.84
        assert row["price"] == 12.34
        assert row["usualAndCustomaryPrice"] == 20.5

    def test_flat_price_record(self):
        row = parse_pharmacy_price({"name": "CVS", "price": 9.5, "distance": 1})
        assert row["name"] == "CVS"
        assert row["price"] == 9.5
        assert row["latitude"] is None


# ═══════════════════════════════════════════
# REQUESTS
# ═══════════════════════════════════════════

class TestClientRequests:
    def test_search_names_lowercases_and_formats(self, pricing_client, session):
        session.request.return_value = FakeResponse(200, ["AMOXICILLIN", "AMOXIL"])
        hits = pricing_client.search_drug_names("AMOX")
        assert hits == [{"drugName": "Amoxicillin"}, {"drugName": "Amoxil"}]

        args, kwargs = session.request.call_args
        assert args == ("POST", "https://pricing.test/v1/drugs/names")
        assert kwargs["json"] == {"hqMappingName": "walkerrx", "prefixText": "amox"}
        assert kwargs["headers"]["Authorization"] == "Bearer tok-1"
        assert kwargs["timeout"] == 10

    def test_prefix_too_short_never_calls_upstream(self, pricing_client, session):
        with pytest.raises(ValidationError):
            pricing_client.search_drugs_by_prefix("am")
        session.request.assert_not_called()
        session.post.assert_not_called()

    def test_prefix_query_params(self, pricing_client, session):
        session.request.return_value = FakeResponse(200, [{"drugName": "ADVIL", "gsn": 1780}])
        hits = pricing_client.search_drugs_by_prefix("Adv", count=5)
        assert hits == [{"drugName": "Advil", "gsn": 1780}]
        args, kwargs = session.request.call_args
        assert args == ("GET", "https://pricing.test/v1/drugs/adv")
        assert kwargs["params"] == {"count": 5, "hqAlias": "walkerrx"}

    @pytest.mark.parametrize("params, path", [
        ({"drugName": "Lipitor"}, "/drugprices/byName"),
        ({"gsn": 62733}, "/drugprices/byGSN"),
        ({"ndcCode": "00071015523"}, "/drugprices/byNdcCode"),
    ])
    def test_price_endpoint_follows_identifier(self, pricing_client, session, params, path):
        session.request.return_value = FakeResponse(200, {"pharmacyPrices": [NESTED_RECORD]})
        req = build_price_request(dict(params, latitude=30.4, longitude=-97.7))
        pharmacies = pricing_client.get_drug_prices(req)
        assert len(pharmacies) == 1
        assert session.request.call_args.args[1].endswith(path)

    def test_empty_price_payload_gives_empty_list(self, pricing_client, session):
        session.request.return_value = FakeResponse(200, {"pharmacyPrices": []})
        req = build_price_request({"drugName": "rare", "latitude": 30, "longitude": -97})
        assert pricing_client.get_drug_prices(req) == []

    def test_pharmacies_params_and_no_price_fields(self, pricing_client, session):
        session.request.return_value = FakeResponse(200, [NESTED_RECORD["pharmacy"]])
        pharmacies = pricing_client.get_pharmacies(30.4, -97.7, count=3)
        assert "price" not in pharmacies[0]
        assert session.request.call_args.kwargs["params"] == {
            "lat": 30.4, "long": -97.7, "hqmappingName": "walkerrx", "pharmacyCount": 3,
        }

    def test_compare_prices_in_input_order(self, pricing_client, session):
        session.request.return_value = FakeResponse(200, [NESTED_RECORD])
        results = pricing_client.compare_prices([("gsn", 1983), ("name", "Lipitor")], 30.4, -97.7, 5)
        assert len(results) == 2
        paths = [c.args[1] for c in session.request.call_args_list]
        assert paths[0].endswith("/drugprices/byGSN")
        assert paths[1].endswith("/drugprices/byName")

    def test_info_by_name_follows_gsn(self, pricing_client, session):
        session.request.side_effect = [
            FakeResponse(200, [{"drugName": "AMOXICILLIN", "gsn": 1983}]),
            FakeResponse(200, {"brandName": "Amoxil", "genericName": "Amoxicillin"}),
        ]
        details = pricing_client.get_drug_info_by_name("amoxicillin")
        assert details["brandName"] == "Amoxil"
        assert details["gsn"] == 1983
        assert session.request.call_args.args[1].endswith("/druginfo/1983")


# ═══════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════

class TestClientErrors:
    def test_non_2xx_raises_api_error_with_details(self, pricing_client, session):
        session.request.return_value = FakeResponse(502, None, text="bad gateway")
        with pytest.raises(UpstreamAPIError) as info:
            pricing_client.search_drug_names("amox")
        assert info.value.status == 502
        assert info.value.body == "bad gateway"

    def test_timeout_raises_unavailable(self, pricing_client, session):
        session.request.side_effect = requests.Timeout("read timed out")
        with pytest.raises(UpstreamUnavailableError):
            pricing_client.get_pharmacies(30.4, -97.7)

    def test_invalid_json_raises_api_error(self, pricing_client, session):
        session.request.return_value = FakeResponse(200, None, text="<html>")
        with pytest.raises(UpstreamAPIError):
            pricing_client.get_drug_details_by_gsn(1983)

    def test_auth_failure_propagates_before_request(self, pricing_client, session):
        session.post.return_value = FakeResponse(401, None, text="denied")
        with pytest.raises(AuthenticationError):
            pricing_client.search_drug_names("amox")
        session.request.assert_not_called()

    def test_single_attempt_only(self, pricing_client, session):
        session.request.return_value = FakeResponse(500, None, text="oops")
        with pytest.raises(UpstreamAPIError):
            pricing_client.get_pharmacies(30.4, -97.7)
        assert session.request.call_count == 1
