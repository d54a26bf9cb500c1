"""
Central medication service – single entry point for every route.

Routes never talk to the pricing client directly. Each operation here:

  1. Normalizes the raw request (ValidationError surfaces as 400).
  2. Runs the live call through the FallbackOrchestrator, which may
     substitute static mock data.
  3. Shapes the result into the JSON body the route returns, tagging it
     with ``usingMockData`` / ``error`` when mock data was used.
"""

import logging
import math
import re
import time
from typing import Optional

import requests
from flask import current_app

from walkerrx.errors import NotFoundError, ValidationError
from walkerrx.services import gsn_mapping, mock_data
from walkerrx.services.fallback import FallbackOrchestrator, FallbackResult
from walkerrx.services.pricing_client import MIN_PREFIX_LENGTH, AmericasPharmacyClient
from walkerrx.services.request_normalizer import (
    PriceRequest,
    build_price_request,
    coerce_bool,
    coerce_float,
    coerce_int,
    resolve_coordinates,
    select_identifier,
)
from walkerrx.services.token_cache import TokenCache

logger = logging.getLogger("walkerrx.medications")

MIN_SEARCH_LENGTH = 2
DEFAULT_SEARCH_COUNT = 10
DEFAULT_PHARMACY_COUNT = 10
# "LIPITOR 10MG (GSN: 62733)"
GSN_IN_NAME = re.compile(r"\(GSN:\s*(\d+)\)", re.IGNORECASE)
# Roughly 500 m around the search point
COORDINATE_OFFSET = 0.005


# ═══════════════════════════════════════════
# Pure helpers
# ═══════════════════════════════════════════

def fill_missing_coordinates(pharmacies: list[dict], latitude: float, longitude: float) -> list[dict]:
    """Place pharmacies lacking coordinates on a ring around the search point.

    The position depends only on the list index, so identical inputs always
    produce identical output.
    """
    placed = []
    for index, pharmacy in enumerate(pharmacies):
        pharmacy = dict(pharmacy)
        if pharmacy.get("latitude") is None or pharmacy.get("longitude") is None:
            angle = math.radians(index * 72)
            pharmacy["latitude"] = round(latitude + COORDINATE_OFFSET * math.sin(angle), 6)
            pharmacy["longitude"] = round(longitude + COORDINATE_OFFSET * math.cos(angle), 6)
        placed.append(pharmacy)
    return placed


def group_by_chain(pharmacies: list[dict]) -> list[dict]:
    """Group price results by pharmacy chain, keeping first-seen order."""
    groups: dict[str, dict] = {}
    for pharmacy in pharmacies:
        name = pharmacy.get("name") or ""
        chain = pharmacy.get("chainName") or (name.split()[0] if name.split() else "Unknown")
        group = groups.setdefault(chain, {"chainName": chain, "pharmacies": []})
        group["pharmacies"].append(pharmacy)

    result = []
    for group in groups.values():
        prices = [p["price"] for p in group["pharmacies"] if p.get("price") is not None]
        result.append({
            "chainName": group["chainName"],
            "pharmacyCount": len(group["pharmacies"]),
            "lowestPrice": min(prices) if prices else None,
            "highestPrice": max(prices) if prices else None,
            "pharmacies": group["pharmacies"],
        })
    return result


def _positive_count(raw, default: int) -> int:
    count = coerce_int(raw, "count")
    if count is None:
        return default
    if count <= 0:
        raise ValidationError("count must be positive.")
    return count


def _gsn_from_hits(hits: list[dict], drug_name: str) -> Optional[int]:
    """GSN of the first hit containing ``drug_name``, else of the first hit."""
    if not hits:
        return None
    needle = drug_name.lower()
    match = next((h for h in hits if needle in h["drugName"].lower()), hits[0])
    if match.get("gsn"):
        return match["gsn"]
    found = GSN_IN_NAME.search(match["drugName"])
    return int(found.group(1)) if found else None


def _lowest_price(pharmacies: list[dict]) -> Optional[float]:
    prices = [p["price"] for p in pharmacies if p.get("price") is not None]
    return min(prices) if prices else None


def _mock_info_for_name(name: str) -> Optional[dict]:
    """Mock details by name, also trying the generic name of a known brand."""
    details = mock_data.get_mock_drug_info(name)
    if details:
        return details
    mapping = gsn_mapping.find_mapping_by_name(name)
    if mapping:
        return mock_data.get_mock_drug_info(mapping.generic_name)
    return None


def _mock_info_for_gsn(gsn: int) -> Optional[dict]:
    details = mock_data.get_mock_drug_info_by_gsn(gsn)
    if details:
        return details
    mapping = gsn_mapping.find_drug_by_gsn(gsn)
    if mapping:
        details = mock_data.get_mock_drug_info(mapping.generic_name)
        if details:
            details["gsn"] = gsn
        return details
    return None


# ═══════════════════════════════════════════
# Service
# ═══════════════════════════════════════════

class MedicationService:
    """Wires the normalizer, pricing client and fallback orchestrator."""

    def __init__(self, client: AmericasPharmacyClient, orchestrator: FallbackOrchestrator, config):
        self.client = client
        self.orchestrator = orchestrator
        self.config = config

    @property
    def token_cache(self) -> TokenCache:
        return self.client.token_cache

    # ── Search ──

    def search_drugs(self, query: str) -> FallbackResult:
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_LENGTH:
            raise ValidationError(f"Query must be at least {MIN_SEARCH_LENGTH} characters long.")
        logger.info("Searching drugs for %r", query)
        return self.orchestrator.run(
            "drug_search",
            live=lambda: gsn_mapping.enrich_with_gsn(self.client.search_drug_names(query)),
            mock=lambda: mock_data.get_mock_search_results(query),
        )

    def search_by_prefix(self, prefix: str, count=None, hq_alias: Optional[str] = None) -> FallbackResult:
        prefix = (prefix or "").strip()
        if len(prefix) < MIN_PREFIX_LENGTH:
            raise ValidationError(f"Prefix must be at least {MIN_PREFIX_LENGTH} characters long.")
        count = _positive_count(count, DEFAULT_SEARCH_COUNT)

        def mock():
            hits = [h for h in mock_data.get_mock_search_results(prefix)
                    if h["drugName"].lower().startswith(prefix.lower())]
            return hits[:count]

        return self.orchestrator.run(
            "drug_search",
            live=lambda: gsn_mapping.enrich_with_gsn(
                self.client.search_drugs_by_prefix(prefix, count=count, hq_alias=hq_alias)
            ),
            mock=mock,
        )

    def autocomplete(self, query: str, count=None) -> FallbackResult:
        """Name search trimmed to the first ``count`` hits."""
        count = _positive_count(count, DEFAULT_SEARCH_COUNT)
        result = self.search_drugs(query)
        result.data = result.data[:count]
        return result

    def resolve_gsn(self, drug_name: str) -> FallbackResult:
        """Look up a drug name in the pricing catalog and return its GSN."""
        drug_name = (drug_name or "").strip()
        if not drug_name:
            raise ValidationError("Missing required parameter: drugName")

        def live():
            hits = gsn_mapping.enrich_with_gsn(
                self.client.search_drugs_by_prefix(drug_name, count=DEFAULT_SEARCH_COUNT)
            )
            return _gsn_from_hits(hits, drug_name)

        result = self.orchestrator.run(
            "drug_search",
            live=live,
            mock=lambda: gsn_mapping.find_gsn_by_drug_name(drug_name),
        )
        if result.data is None:
            raise NotFoundError(f'No GSN found for drug "{drug_name}"')
        return result

    # ── Drug details ──

    def drug_info_by_gsn(self, gsn, language_code: str = "en") -> FallbackResult:
        gsn = coerce_int(gsn, "gsn")
        if gsn is None:
            raise ValidationError("Missing required parameter: gsn")
        return self.orchestrator.run(
            "drug_info",
            live=lambda: self.client.get_drug_details_by_gsn(gsn, language_code=language_code or "en"),
            mock=lambda: _mock_info_for_gsn(gsn),
        )

    def drug_info_by_name(self, name: str) -> FallbackResult:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Missing required parameter: name")
        return self.orchestrator.run(
            "drug_info",
            live=lambda: self.client.get_drug_info_by_name(name),
            mock=lambda: _mock_info_for_name(name),
        )

    # ── Prices ──

    def _price_lookup(self, req: PriceRequest, live) -> FallbackResult:
        result = self.orchestrator.run(
            "pharmacy_prices",
            live=live,
            mock=mock_data.get_mock_pharmacy_prices,
        )
        result.data = fill_missing_coordinates(result.data, req.latitude, req.longitude)
        return result

    def drug_prices(self, params: dict, endpoint: str = "prices") -> dict:
        req = build_price_request(params, endpoint)
        logger.info("Price lookup by %s=%r near %.4f,%.4f",
                    req.identifier_kind, req.primary_identifier, req.latitude, req.longitude)
        result = self._price_lookup(req, lambda: self.client.get_drug_prices(req))
        return result.annotate({"pharmacies": result.data})

    def ndc_prices(self, params: dict) -> dict:
        return self.drug_prices(params, endpoint="prices_ndc")

    def group_prices(self, params: dict) -> dict:
        req = build_price_request(params, "group_prices")
        result = self._price_lookup(req, lambda: self.client.get_group_drug_prices(req))
        return result.annotate({
            "pharmacies": result.data,
            "groupedPharmacies": group_by_chain(result.data),
        })

    def compare(self, body: dict) -> dict:
        """Price several medications at one location."""
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.")
        medications = body.get("medications")
        if not isinstance(medications, list) or not medications:
            raise ValidationError("Missing or invalid required parameter: medications")
        if not all(isinstance(m, dict) for m in medications):
            raise ValidationError("Each medication must have either a name or gsn property")

        try:
            identifiers = [select_identifier(m, "compare") for m in medications]
        except ValidationError:
            raise ValidationError("Each medication must have either a name or gsn property")

        lat, lon = resolve_coordinates(body.get("latitude"), body.get("longitude"), body.get("zipCode"))
        radius = coerce_float(body.get("radius"), "radius")
        if radius is not None and radius <= 0:
            raise ValidationError("radius must be positive.")
        logger.info("Comparing %d medications near %.4f,%.4f", len(identifiers), lat, lon)

        result = self.orchestrator.run(
            "pharmacy_prices",
            live=lambda: self.client.compare_prices(identifiers, lat, lon, radius),
            mock=lambda: [mock_data.get_mock_pharmacy_prices() for _ in identifiers],
        )

        compared = []
        for (kind, value), pharmacies in zip(identifiers, result.data):
            pharmacies = fill_missing_coordinates(pharmacies, lat, lon)
            entry = {"name": value} if kind == "name" else {"gsn": value}
            entry.update({
                "pharmacies": pharmacies,
                "pharmacyCount": len(pharmacies),
                "lowestPrice": _lowest_price(pharmacies),
            })
            compared.append(entry)

        return result.annotate({
            "medications": compared,
            "latitude": lat,
            "longitude": lon,
            "radius": radius,
        })

    def compare_list(self, body: dict, kind: str) -> dict:
        """``compare`` for a flat ``gsns`` or ``drugNames`` list."""
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.")
        key = "gsns" if kind == "gsn" else "drugNames"
        values = body.get(key)
        if not isinstance(values, list) or not values:
            raise ValidationError(f"Missing or invalid required parameter: {key}")
        return self.compare({**body, "medications": [{kind: value} for value in values]})

    # ── Alternatives ──

    def alternatives(self, body: dict) -> list[dict]:
        """Generic and/or therapeutic alternatives, each with embedded prices."""
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.")
        drug_name = str(body.get("drugName") or "").strip()
        if not drug_name:
            raise ValidationError("Missing required parameter: drugName")
        lat, lon = resolve_coordinates(body.get("latitude"), body.get("longitude"), body.get("zipCode"))
        include_generics = coerce_bool(body.get("includeGenerics", True))
        include_therapeutic = coerce_bool(body.get("includeTherapeutic", False))

        mapping = gsn_mapping.find_mapping_by_name(drug_name)
        generic_name = mapping.generic_name if mapping else drug_name

        candidates = []
        if include_generics and generic_name.lower() != drug_name.lower():
            candidates.append(("generic", generic_name))
        if include_therapeutic:
            for alt in mock_data.get_therapeutic_alternatives(generic_name):
                candidates.append(("therapeutic", alt))

        alternatives = []
        for alt_type, name in candidates:
            info = self._alternative_info(name, drug_name, alt_type)
            req = PriceRequest(identifier_kind="name", latitude=lat, longitude=lon,
                               drug_name=name, radius=10.0, maximum_pharmacies=50)
            prices = self._price_lookup(req, lambda req=req: self.client.get_drug_prices(req))
            info["prices"] = prices.data
            if prices.using_mock_data:
                info["usingMockData"] = True
            alternatives.append(info)
        return alternatives

    @staticmethod
    def _alternative_info(name: str, original: str, alt_type: str) -> dict:
        details = _mock_info_for_name(name)
        if not details:
            if alt_type == "generic":
                description = f"Generic version of {original}"
            else:
                description = f"Therapeutic alternative to {original}"
            details = {
                "brandName": name,
                "genericName": name,
                "description": description,
                "sideEffects": "Please consult with your healthcare provider for information about side effects.",
                "dosage": "Various strengths available",
                "storage": "Store at room temperature",
                "contraindications": "Please consult with your healthcare provider for contraindication information.",
            }
        details["gsn"] = gsn_mapping.find_gsn_by_drug_name(name)
        details["alternativeType"] = alt_type
        return details

    # ── Pharmacies ──

    def pharmacies(self, args: dict) -> FallbackResult:
        lat, lon = resolve_coordinates(args.get("latitude"), args.get("longitude"), args.get("zipCode"))
        count = _positive_count(args.get("count"), DEFAULT_PHARMACY_COUNT)
        logger.info("Fetching %d pharmacies near %.4f,%.4f", count, lat, lon)
        result = self.orchestrator.run(
            "pharmacies",
            live=lambda: self.client.get_pharmacies(lat, lon, count),
            mock=lambda: mock_data.get_mock_pharmacies(count),
        )
        result.data = fill_missing_coordinates(result.data, lat, lon)
        return result

    # ── Diagnostics ──

    def token_status(self) -> dict:
        return self.token_cache.get_status()

    def refresh_token(self) -> dict:
        self.token_cache.force_refresh()
        return self.token_cache.get_status()

    def mock_status(self) -> dict:
        return {
            "useMockData": self.config.USE_MOCK_DATA,
            "fallbackToMock": self.config.should_fallback_to_mock(),
            "features": {
                feature: policy.prefer_mock for feature, policy in self.orchestrator.policies.items()
            },
        }


def build_medication_service(config, session: Optional[requests.Session] = None, clock=time.time) -> MedicationService:
    """Assemble the service graph from a Config class."""
    session = session or requests.Session()
    token_cache = TokenCache(
        auth_url=config.AUTH_URL,
        client_id=config.CLIENT_ID,
        client_secret=config.CLIENT_SECRET,
        scope=config.AUTH_SCOPE,
        session=session,
        clock=clock,
        safety_margin=config.TOKEN_SAFETY_MARGIN_SECONDS,
        timeout=config.API_TIMEOUT_SECONDS,
    )
    client = AmericasPharmacyClient(
        token_cache=token_cache,
        base_url=config.API_BASE_URL,
        hq_mapping_name=config.HQ_MAPPING_NAME,
        timeout=config.API_TIMEOUT_SECONDS,
        session=session,
    )
    return MedicationService(client, FallbackOrchestrator.from_config(config), config)


def get_medication_service() -> MedicationService:
    """The service instance attached to the running app."""
    return current_app.extensions["walkerrx"]
