# routes/institutions.py
from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from certregistry.services import directory

institutions_bp = Blueprint("institutions", __name__, url_prefix='/institutions')


@institutions_bp.route("/register", methods=["POST"])
@jwt_required()
def register():
    """Registers the logged-in account as an authorized issuing institution."""
    data = request.get_json(silent=True) or {}
    institution = directory.register_institution(get_jwt_identity(), data.get("name"), data.get("email"))
    return jsonify(institution.to_dict()), 201


@institutions_bp.route("/<string:address>/revoke", methods=["POST"])
@jwt_required()
def revoke(address):
    directory.revoke_institution(get_jwt_identity(), address)
    return jsonify(message=f"Institution '{address}' is no longer authorized.")


@institutions_bp.route("/me", methods=["PUT"])
@jwt_required()
def update_me():
    data = request.get_json(silent=True) or {}
    institution = directory.update_institution_info(get_jwt_identity(), data.get("name"), data.get("email"))
    return jsonify(institution.to_dict())


@institutions_bp.route("/<string:address>/stats", methods=["GET"])
def stats(address):
    return jsonify(directory.get_institution_stats(address).to_dict())
