"""
Pharmacy price routes.
Bodies accept drugName | gsn | ndcCode plus latitude/longitude (or zipCode).
"""

from flask import Blueprint, request, jsonify

from walkerrx.services.medication_service import get_medication_service

pricing_bp = Blueprint("pricing", __name__)

PRICING_DISCLAIMER = (
    "Prices shown are discount card prices reported by participating pharmacies. "
    "Actual costs may vary by pharmacy, quantity, and time of purchase."
)


@pricing_bp.route("/prices", methods=["POST"])
def drug_prices():
    """
    Pharmacy prices for one drug near a location.

    Identifier precedence: drugName, then gsn, then ndcCode.
    Defaults: radius 10 miles, maximumPharmacies 50.
    ``quantity`` is only sent when ``customizedQuantity`` is true.
    """
    body = request.get_json(silent=True) or {}
    return jsonify(get_medication_service().drug_prices(body)), 200


@pricing_bp.route("/prices/ndc", methods=["POST"])
def drug_prices_by_ndc():
    body = request.get_json(silent=True) or {}
    return jsonify(get_medication_service().ndc_prices(body)), 200


@pricing_bp.route("/prices/group", methods=["POST"])
def group_drug_prices():
    """Group prices, also grouped by pharmacy chain."""
    body = request.get_json(silent=True) or {}
    data = get_medication_service().group_prices(body)
    data["disclaimer"] = PRICING_DISCLAIMER
    return jsonify(data), 200


@pricing_bp.route("/prices/multi/gsn", methods=["POST"])
def multi_drug_prices_by_gsn():
    """Compare prices for ``gsns`` (list) at latitude/longitude or zipCode."""
    body = request.get_json(silent=True) or {}
    return jsonify(get_medication_service().compare_list(body, "gsn")), 200


@pricing_bp.route("/prices/multi/name", methods=["POST"])
def multi_drug_prices_by_name():
    """Compare prices for ``drugNames`` (list) at latitude/longitude or zipCode."""
    body = request.get_json(silent=True) or {}
    return jsonify(get_medication_service().compare_list(body, "name")), 200
