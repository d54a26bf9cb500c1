"""
Medication comparison route – price several drugs side by side.
"""

from flask import Blueprint, request, jsonify

from walkerrx.services.medication_service import get_medication_service

comparison_bp = Blueprint("comparison", __name__)


@comparison_bp.route("/compare", methods=["POST"])
def compare_medications():
    """
    Compare pharmacy prices for multiple medications.

    Body:
        medications – list of {name} or {gsn}; gsn wins when both are given
        latitude, longitude (or zipCode), radius (optional)
    """
    body = request.get_json(silent=True) or {}
    return jsonify(get_medication_service().compare(body)), 200
