"""
Pharmacy locator route.
"""

from flask import Blueprint, request, jsonify

from walkerrx.services.medication_service import get_medication_service

pharmacies_bp = Blueprint("pharmacies", __name__)


@pharmacies_bp.route("", methods=["GET"])
def list_pharmacies():
    """
    Pharmacies near a location, each with coordinates for mapping.

    Query parameters:
        zipCode             – used when latitude/longitude are absent
        latitude, longitude – explicit search point
        count               – number of pharmacies (default 10)
    """
    result = get_medication_service().pharmacies(request.args)
    response = jsonify(result.data)
    if result.using_mock_data:
        response.headers["X-Using-Mock-Data"] = "true"
    return response, 200
