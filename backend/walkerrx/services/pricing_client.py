"""
America's Pharmacy pricing API client.
Docs: partner portal only (OAuth2 client-credentials, scope ``ccds.read``).

Every call obtains a bearer token from the TokenCache, makes exactly one
attempt with an explicit timeout, and normalizes the JSON response into
the shapes the HTTP layer returns. Failures are raised, never swallowed:
deciding whether to substitute mock data is the fallback layer's job.
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests

from walkerrx.errors import UpstreamAPIError, UpstreamUnavailableError, ValidationError
from walkerrx.services.request_normalizer import DEFAULT_LOCATION, PriceRequest
from walkerrx.services.token_cache import TokenCache

logger = logging.getLogger("walkerrx.upstream")

MIN_PREFIX_LENGTH = 3

PRICE_ENDPOINTS = {
    "name": "/drugprices/byName",
    "gsn": "/drugprices/byGSN",
    "ndc": "/drugprices/byNdcCode",
}


# ── Response normalization ──

def _format_drug_name(name: str) -> str:
    """Upstream returns names in ALL CAPS; show them as 'Amoxicillin'."""
    name = name.strip()
    return name[:1].upper() + name[1:].lower()


def _as_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value) -> Optional[int]:
    number = _as_float(value)
    return int(number) if number is not None else None


def parse_search_hit(raw) -> Optional[dict]:
    """Normalize a search entry (bare string or object) to a DrugSearchHit."""
    if isinstance(raw, str):
        return {"drugName": _format_drug_name(raw)} if raw.strip() else None
    if not isinstance(raw, dict):
        return None
    name = raw.get("drugName") or raw.get("name") or raw.get("brandName")
    if not name:
        return None
    hit = {"drugName": _format_drug_name(str(name))}
    gsn = _as_int(raw.get("gsn"))
    if gsn is not None:
        hit["gsn"] = gsn
    if raw.get("ndcCode"):
        hit["ndcCode"] = str(raw["ndcCode"])
    if raw.get("brandGenericFlag"):
        hit["brandGenericFlag"] = raw["brandGenericFlag"]
    return hit


def parse_pharmacy_price(raw: dict) -> dict:
    """Flatten a nested ``{pharmacy, price}`` or flat record into one dict."""
    pharmacy = raw.get("pharmacy") if isinstance(raw.get("pharmacy"), dict) else raw
    price = raw.get("price") if isinstance(raw.get("price"), dict) else raw

    return {
        "name": pharmacy.get("name") or pharmacy.get("pharmacyName") or "",
        "chainCode": pharmacy.get("chainCode"),
        "npi": pharmacy.get("npi"),
        "address": pharmacy.get("streetAddress") or pharmacy.get("address") or "",
        "city": pharmacy.get("city") or "",
        "state": pharmacy.get("state") or "",
        "zipCode": pharmacy.get("zipCode") or "",
        "phone": pharmacy.get("phone") or "",
        "latitude": _as_float(pharmacy.get("latitude")),
        "longitude": _as_float(pharmacy.get("longitude")),
        "distance": _as_float(pharmacy.get("distance")),
        "price": _as_float(price.get("price")),
        "usualAndCustomaryPrice": _as_float(price.get("ucPrice") or price.get("usualAndCustomaryPrice")),
    }


def _extract_records(data) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("pharmacyPrices", "pharmacies", "prices", "results"):
            if isinstance(data.get(key), list):
                return data[key]
    return []


def parse_drug_details(data: dict, gsn: Optional[int] = None) -> dict:
    """Map an upstream drug-info payload onto DrugDetails."""
    details = {
        "brandName": data.get("brandName") or "",
        "genericName": data.get("genericName") or "",
        "description": data.get("description") or "",
        "sideEffects": data.get("sideEffects") or "",
        "dosage": data.get("dosage") or "",
        "storage": data.get("storage") or "",
        "contraindications": data.get("contraindications") or "",
    }
    for optional in ("administration", "interactions", "monitoring"):
        if data.get(optional):
            details[optional] = data[optional]
    gsn = _as_int(data.get("gsn")) or gsn
    if gsn is not None:
        details["gsn"] = gsn
    return details


class AmericasPharmacyClient:
    """Authenticated client for the pricing API. One attempt per call."""

    def __init__(
        self,
        token_cache: TokenCache,
        base_url: str,
        hq_mapping_name: str = "walkerrx",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.token_cache = token_cache
        self.base_url = base_url.rstrip("/")
        self.hq_mapping_name = hq_mapping_name
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, params: dict = None, json_body: dict = None):
        """Authenticated request; returns decoded JSON or raises."""
        if not self.base_url:
            raise UpstreamUnavailableError("Pricing API URL is not configured.")

        token = self.token_cache.get_token()
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Pricing API request to %s failed: %s", path, exc)
            raise UpstreamUnavailableError(f"Pricing API unavailable: {exc}")

        if not 200 <= resp.status_code < 300:
            body = resp.text[:2000]
            logger.error("Pricing API error %s on %s: %s", resp.status_code, path, body[:200])
            raise UpstreamAPIError(
                f"API Error {resp.status_code}: {body[:200]}", status=resp.status_code, body=body
            )

        try:
            return resp.json()
        except ValueError:
            raise UpstreamAPIError(
                f"Pricing API returned invalid JSON for {path}",
                status=resp.status_code,
                body=resp.text[:2000],
            )

    # ── Drug search ──

    def search_drug_names(self, query: str) -> list[dict]:
        """Name search (``POST /drugs/names``)."""
        data = self._request("POST", "/drugs/names", json_body={
            "hqMappingName": self.hq_mapping_name,
            "prefixText": query.strip().lower(),
        })
        hits = [parse_search_hit(item) for item in _extract_records(data)]
        return [h for h in hits if h]

    def search_drugs_by_prefix(self, prefix: str, count: int = 10, hq_alias: Optional[str] = None) -> list[dict]:
        """Prefix search (``GET /drugs/{prefix}``). Prefix must be 3+ characters."""
        prefix = (prefix or "").strip()
        if len(prefix) < MIN_PREFIX_LENGTH:
            raise ValidationError(f"Prefix must be at least {MIN_PREFIX_LENGTH} characters long.")
        data = self._request(
            "GET",
            f"/drugs/{quote(prefix.lower(), safe='')}",
            params={"count": count, "hqAlias": hq_alias or self.hq_mapping_name},
        )
        hits = [parse_search_hit(item) for item in _extract_records(data)]
        return [h for h in hits if h]

    # ── Drug details ──

    def get_drug_details_by_gsn(self, gsn: int, language_code: str = "en") -> dict:
        data = self._request("GET", f"/druginfo/{gsn}", params={"languageCode": language_code})
        if not isinstance(data, dict):
            raise UpstreamAPIError(f"Unexpected drug info payload for GSN {gsn}")
        return parse_drug_details(data, gsn=gsn)

    def get_drug_info_by_name(self, name: str) -> dict:
        """Resolve a name to a GSN via search, then fetch its details.

        Without a GSN, falls back to a by-name price lookup at the default
        location and builds details from whatever that payload carries.
        """
        normalized = name.strip().lower()
        hits = self.search_drug_names(normalized)
        if not hits:
            raise UpstreamAPIError(f"Drug not found: {name}", status=404)

        match = next((h for h in hits if h["drugName"].lower() == normalized), hits[0])
        if match.get("gsn"):
            return self.get_drug_details_by_gsn(match["gsn"])

        lat, lon = DEFAULT_LOCATION
        data = self._request("POST", PRICE_ENDPOINTS["name"], json_body={
            "hqMappingName": self.hq_mapping_name,
            "drugName": match["drugName"].lower(),
            "latitude": lat,
            "longitude": lon,
        })
        data = data if isinstance(data, dict) else {}
        drug = data.get("drug") if isinstance(data.get("drug"), dict) else data
        label = match["drugName"]
        return {
            "brandName": drug.get("brandName") or label,
            "genericName": drug.get("genericName") or label,
            "description": drug.get("description") or f"Information about {label}",
            "sideEffects": drug.get("sideEffects")
            or "Please consult with your healthcare provider for information about side effects.",
            "dosage": drug.get("dosage") or "Various strengths available",
            "storage": drug.get("storage") or "Store according to package instructions.",
            "contraindications": drug.get("contraindications")
            or "Please consult with your healthcare provider for contraindication information.",
        }

    # ── Prices ──

    def get_drug_prices(self, request: PriceRequest) -> list[dict]:
        path = PRICE_ENDPOINTS[request.identifier_kind]
        data = self._request("POST", path, json_body=request.to_upstream_body(self.hq_mapping_name))
        return [parse_pharmacy_price(r) for r in _extract_records(data) if isinstance(r, dict)]

    def get_group_drug_prices(self, request: PriceRequest) -> list[dict]:
        data = self._request(
            "POST", "/drugprices/groupdrugprices",
            json_body=request.to_upstream_body(self.hq_mapping_name),
        )
        return [parse_pharmacy_price(r) for r in _extract_records(data) if isinstance(r, dict)]

    def compare_prices(
        self, identifiers: list[tuple], latitude: float, longitude: float, radius: Optional[float] = None
    ) -> list[list[dict]]:
        """Price each ``(kind, value)`` identifier at one location.

        Results come back in input order. The first failure aborts the
        whole comparison.
        """
        results = []
        for kind, value in identifiers:
            req = PriceRequest(
                identifier_kind=kind,
                latitude=latitude,
                longitude=longitude,
                drug_name=value if kind == "name" else None,
                gsn=value if kind == "gsn" else None,
                ndc_code=value if kind == "ndc" else None,
                radius=radius,
            )
            results.append(self.get_drug_prices(req))
        return results

    # ── Pharmacies ──

    def get_pharmacies(self, latitude: float, longitude: float, count: int = 10) -> list[dict]:
        data = self._request("GET", "/pharmacies", params={
            "lat": latitude,
            "long": longitude,
            "hqmappingName": self.hq_mapping_name,
            "pharmacyCount": count,
        })
        pharmacies = []
        for record in _extract_records(data):
            if not isinstance(record, dict):
                continue
            parsed = parse_pharmacy_price(record)
            parsed.pop("price")
            parsed.pop("usualAndCustomaryPrice")
            pharmacies.append(parsed)
        return pharmacies
