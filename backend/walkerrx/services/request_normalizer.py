"""
Request normalizer – turns raw query params / JSON bodies into typed requests.

Inputs arrive as strings (query params) or loosely typed JSON. Everything
is coerced here so the client and services only ever see well-formed values.
Any problem raises ValidationError, which the HTTP layer maps to 400.
"""

import math
from dataclasses import dataclass
from typing import Optional

from walkerrx.errors import ValidationError

# Austin, TX
DEFAULT_LOCATION = (30.4014, -97.7525)

ZIP_COORDINATES = {
    "78759": (30.4014, -97.7525),   # Austin, TX
    "90210": (34.0901, -118.4065),  # Beverly Hills, CA
    "10001": (40.7501, -73.9996),   # New York, NY
    "60601": (41.8855, -87.6217),   # Chicago, IL
    "33101": (25.7751, -80.2105),   # Miami, FL
    "98101": (47.6101, -122.3344),  # Seattle, WA
    "02108": (42.3588, -71.0707),   # Boston, MA
    "75201": (32.7864, -96.7970),   # Dallas, TX
    "94102": (37.7790, -122.4194),  # San Francisco, CA
}

# Accepted inbound keys for each identifier kind
IDENTIFIER_FIELDS = {
    "name": ("drugName", "name"),
    "gsn": ("gsn",),
    "ndc": ("ndcCode", "ndc"),
}

# Which identifier wins when a request carries several. Endpoints disagree,
# so this is kept per endpoint rather than unified.
IDENTIFIER_PRECEDENCE = {
    "prices": ("name", "gsn", "ndc"),
    "group_prices": ("name", "gsn", "ndc"),
    "prices_ndc": ("ndc",),
    "compare": ("gsn", "name"),
}

ENDPOINT_DEFAULTS = {
    "prices": {"radius": 10.0, "maximum_pharmacies": 50},
    "group_prices": {"radius": 10.0, "maximum_pharmacies": 50},
    "prices_ndc": {"radius": 10.0, "maximum_pharmacies": 50},
    "compare": {},
}


@dataclass
class PriceRequest:
    """One price lookup, with exactly one primary drug identifier."""
    identifier_kind: str                  # "name" | "gsn" | "ndc"
    latitude: float
    longitude: float
    drug_name: Optional[str] = None
    gsn: Optional[int] = None
    ndc_code: Optional[str] = None
    radius: Optional[float] = None
    maximum_pharmacies: Optional[int] = None
    quantity: Optional[int] = None
    customized_quantity: bool = False

    @property
    def primary_identifier(self):
        return {"name": self.drug_name, "gsn": self.gsn, "ndc": self.ndc_code}[self.identifier_kind]

    def to_upstream_body(self, hq_mapping_name: str) -> dict:
        body = {
            "hqMappingName": hq_mapping_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
        if self.identifier_kind == "name":
            body["drugName"] = self.drug_name.lower()
        elif self.identifier_kind == "gsn":
            body["gsn"] = self.gsn
        else:
            body["ndcCode"] = self.ndc_code
        if self.radius is not None:
            body["radius"] = self.radius
        if self.maximum_pharmacies is not None:
            body["maximumPharmacies"] = self.maximum_pharmacies
        if self.customized_quantity:
            body["customizedQuantity"] = True
            body["quantity"] = self.quantity
        return body


# ── Coercion helpers ──

def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def coerce_float(value, field_name: str) -> Optional[float]:
    """Finite float from a number or numeric string; None for blank input."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid value for {field_name}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for {field_name}: {value!r}")
    # NaN / Infinity cannot be written back out as JSON
    if not math.isfinite(number):
        raise ValidationError(f"Invalid value for {field_name}: {value!r}")
    return number


def coerce_int(value, field_name: str) -> Optional[int]:
    """Integer from a number or numeric string; None for blank input."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid value for {field_name}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for {field_name}: {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"Invalid value for {field_name}: {value!r}")
    if not number.is_integer():
        raise ValidationError(f"{field_name} must be a whole number.")
    return int(number)


def coerce_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def resolve_coordinates(latitude=None, longitude=None, zip_code=None) -> tuple:
    """Pick (lat, lon): explicit coordinates, then zip lookup, then default.

    A zip code that is not in the table resolves to the default location.
    With neither coordinates nor a zip code, the request is rejected.
    """
    lat = coerce_float(latitude, "latitude")
    lon = coerce_float(longitude, "longitude")

    if lat is None or lon is None:
        zip_code = str(zip_code).strip() if not _is_blank(zip_code) else ""
        if not zip_code:
            raise ValidationError(
                "Missing required parameters: either zipCode or latitude and longitude"
            )
        lat, lon = ZIP_COORDINATES.get(zip_code, DEFAULT_LOCATION)

    if not -90 <= lat <= 90:
        raise ValidationError("latitude must be between -90 and 90.")
    if not -180 <= lon <= 180:
        raise ValidationError("longitude must be between -180 and 180.")
    return lat, lon


def select_identifier(params: dict, endpoint: str) -> tuple:
    """Return (kind, value) for the highest-precedence identifier present."""
    for kind in IDENTIFIER_PRECEDENCE[endpoint]:
        for key in IDENTIFIER_FIELDS[kind]:
            raw = params.get(key)
            if _is_blank(raw):
                continue
            if kind == "gsn":
                return kind, coerce_int(raw, "gsn")
            return kind, str(raw).strip()

    accepted = [IDENTIFIER_FIELDS[k][0] for k in IDENTIFIER_PRECEDENCE[endpoint]]
    raise ValidationError(f"Missing required parameter: one of {', '.join(accepted)}")


def build_price_request(params: dict, endpoint: str = "prices") -> PriceRequest:
    """Normalize a raw price-lookup body for the given endpoint."""
    if not isinstance(params, dict):
        raise ValidationError("Request body must be a JSON object.")

    kind, value = select_identifier(params, endpoint)
    lat, lon = resolve_coordinates(
        params.get("latitude"), params.get("longitude"), params.get("zipCode")
    )
    defaults = ENDPOINT_DEFAULTS.get(endpoint, {})

    radius = coerce_float(params.get("radius"), "radius")
    if radius is None:
        radius = defaults.get("radius")
    elif radius <= 0:
        raise ValidationError("radius must be positive.")

    max_pharmacies = coerce_int(params.get("maximumPharmacies"), "maximumPharmacies")
    if max_pharmacies is None:
        max_pharmacies = defaults.get("maximum_pharmacies")
    elif max_pharmacies <= 0:
        raise ValidationError("maximumPharmacies must be positive.")

    customized = coerce_bool(params.get("customizedQuantity", False))
    quantity = coerce_int(params.get("quantity"), "quantity")
    if customized and (quantity is None or quantity <= 0):
        raise ValidationError("quantity must be a positive number when customizedQuantity is set.")

    return PriceRequest(
        identifier_kind=kind,
        latitude=lat,
        longitude=lon,
        drug_name=value if kind == "name" else None,
        gsn=value if kind == "gsn" else None,
        ndc_code=value if kind == "ndc" else None,
        radius=radius,
        maximum_pharmacies=max_pharmacies,
        quantity=quantity,
        customized_quantity=customized,
    )
