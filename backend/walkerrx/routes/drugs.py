"""
Drug search & information routes.
Uses the central medication_service for consistent data access.
"""

from flask import Blueprint, request, jsonify

from walkerrx.services.medication_service import get_medication_service

drugs_bp = Blueprint("drugs", __name__)


@drugs_bp.route("/search", methods=["GET"])
def search_drugs():
    """Search drugs by name. ``q`` must be at least 2 characters."""
    result = get_medication_service().search_drugs(request.args.get("q", ""))
    return jsonify(result.annotate({"results": result.data})), 200


@drugs_bp.route("/search/<path:query>", methods=["GET"])
def search_drugs_by_path(query):
    """Same search, returned as a bare array."""
    result = get_medication_service().search_drugs(query)
    return jsonify(result.data), 200


@drugs_bp.route("/prefix/<path:prefix>", methods=["GET"])
def search_by_prefix(prefix):
    """
    Prefix search against the pricing catalog.

    Query parameters:
        count    – maximum number of hits (default 10)
        hqAlias  – tenant alias, defaults to the configured hqMappingName
    """
    result = get_medication_service().search_by_prefix(
        prefix,
        count=request.args.get("count"),
        hq_alias=request.args.get("hqAlias") or None,
    )
    return jsonify(result.annotate({"results": result.data})), 200


@drugs_bp.route("/info/gsn", methods=["GET"])
def drug_info_by_gsn():
    result = get_medication_service().drug_info_by_gsn(
        request.args.get("gsn"), language_code=request.args.get("languageCode", "en")
    )
    return jsonify(result.annotate(dict(result.data))), 200


@drugs_bp.route("/info/name", methods=["GET"])
def drug_info_by_name():
    result = get_medication_service().drug_info_by_name(request.args.get("name", ""))
    return jsonify(result.annotate(dict(result.data))), 200


@drugs_bp.route("/alternatives", methods=["POST"])
def drug_alternatives():
    """Generic and therapeutic alternatives with embedded pharmacy prices."""
    body = request.get_json(silent=True) or {}
    return jsonify(get_medication_service().alternatives(body)), 200


@drugs_bp.route("/autocomplete", methods=["GET"])
def autocomplete():
    """
    Type-ahead suggestions as a bare array.

    Query parameters:
        query  – search text, at least 2 characters
        count  – maximum number of suggestions (default 10)
    """
    result = get_medication_service().autocomplete(
        request.args.get("query", ""), count=request.args.get("count")
    )
    return jsonify(result.data), 200


@drugs_bp.route("/gsn/<path:drug_name>", methods=["GET"])
def drug_gsn(drug_name):
    result = get_medication_service().resolve_gsn(drug_name)
    return jsonify(result.annotate({"drugName": drug_name, "gsn": result.data})), 200
