from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity, get_jwt
from certregistry.models import db, Account, TokenBlocklist, utcnow
from certregistry.services import directory, guards

auth_bp = Blueprint("auth", __name__)


def _is_text(*values):
    return all(value is None or isinstance(value, str) for value in values)


@auth_bp.route("/signup", methods=["POST"])
def signup():
    """Creates login credentials for an account address."""
    data = request.get_json(silent=True) or {}

    address = data.get("address")
    password = data.get("password")
    pin = data.get("pin")

    if not pin or pin != current_app.config.get('SIGNUP_PIN'):
        return jsonify(error="NotAuthorized", message="Invalid security PIN provided."), 403

    if not _is_text(address, password):
        return jsonify(error="InvalidInput", message="Address and password must be text."), 400
    address = guards.normalize_identity(address)
    if not address or not password:
        return jsonify(error="InvalidInput", message="Address and password are required."), 400

    if Account.query.filter_by(address=address).first():
        return jsonify(error="AlreadyRegistered", message="An account for this address already exists."), 409

    account = Account(address=address)
    account.set_password(password)
    db.session.add(account)
    db.session.commit()

    current_app.logger.info(f"Account created for '{address}'")
    return jsonify(message=f"Account created for {address}. Please log in."), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """Handles login and returns a JWT whose identity is the account address."""
    data = request.get_json(silent=True) or {}
    address = data.get("address")
    password = data.get("password")

    if not _is_text(address, password):
        return jsonify(error="InvalidInput", message="Address and password must be text."), 400
    address = guards.normalize_identity(address)
    if not address or not password:
        return jsonify(error="InvalidInput", message="Address and password are required."), 400

    account = Account.query.filter_by(address=address).first()

    if account and account.check_password(password):
        additional_claims = {"is_admin": guards.is_admin(address)}
        access_token = create_access_token(identity=address, additional_claims=additional_claims)
        return jsonify(access_token=access_token)

    return jsonify(error="NotAuthorized", message="Bad address or password."), 401


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """Handles logout by blocklisting the current token."""
    jti = get_jwt()['jti']
    db.session.add(TokenBlocklist(jti=jti, created_at=utcnow()))
    db.session.commit()
    return jsonify(message="Access token revoked successfully")


@auth_bp.route('/profile', methods=['GET'])
@jwt_required()
def profile():
    address = get_jwt_identity()
    return jsonify(
        address=address,
        is_admin=guards.is_admin(address),
        institution=directory.get_institution_stats(address).to_dict(),
    )
