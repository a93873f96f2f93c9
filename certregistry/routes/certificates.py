# routes/certificates.py

from flask import Blueprint, request, jsonify, Response
from flask_jwt_extended import jwt_required, get_jwt_identity

from certregistry.errors import InvalidInput
from certregistry.services import events, hash_service, qr_service, queries, registry

certificates_bp = Blueprint("certificates", __name__)

BATCH_FIELDS = ("recipients", "recipient_names", "course_names", "grades",
                "content_refs", "completion_dates", "cert_types")


def _issue_payload():
    """Reads issuance fields from JSON, or from a multipart form whose file is the certificate document."""
    if request.files.get('file'):
        data = request.form.to_dict()
        data["content_ref"] = hash_service.sha256_of_stream(request.files['file'].stream)
        return data
    return request.get_json(silent=True) or {}


@certificates_bp.route("/certificates", methods=["POST"])
@jwt_required()
def issue():
    data = _issue_payload()
    token_id = registry.issue_certificate(
        get_jwt_identity(),
        data.get("recipient"),
        data.get("recipient_name"),
        data.get("course_name"),
        data.get("grade"),
        data.get("content_ref"),
        data.get("completion_date"),
        data.get("cert_type"),
    )
    return jsonify(token_id=token_id, content_ref=data.get("content_ref")), 201


@certificates_bp.route("/certificates/batch", methods=["POST"])
@jwt_required()
def batch_issue():
    data = request.get_json(silent=True) or {}
    token_ids = registry.batch_issue_certificates(
        get_jwt_identity(), *[data.get(field) for field in BATCH_FIELDS])
    return jsonify(token_ids=token_ids), 201


@certificates_bp.route("/certificates/<int:token_id>/revoke", methods=["POST"])
@jwt_required()
def revoke(token_id):
    certificate = registry.revoke_certificate(get_jwt_identity(), token_id)
    return jsonify(certificate.to_dict())


@certificates_bp.route("/certificates/<int:token_id>", methods=["GET"])
def verify(token_id):
    return jsonify(queries.verify_certificate(token_id).to_dict())


@certificates_bp.route("/certificates/by-ref/<path:content_ref>", methods=["GET"])
def verify_by_content_ref(content_ref):
    return jsonify(queries.verify_certificate_by_content_ref(content_ref).to_dict())


@certificates_bp.route("/certificates/verify-document", methods=["POST"])
def verify_document():
    """Hashes an uploaded document and looks the digest up as a content reference."""
    file = request.files.get('file')
    if file is None or file.filename == '':
        raise InvalidInput("No file part in the request.")
    content_ref = hash_service.sha256_of_stream(file.stream)
    result = queries.verify_certificate_by_content_ref(content_ref).to_dict()
    result["content_ref"] = content_ref
    return jsonify(result)


@certificates_bp.route("/certificates/total", methods=["GET"])
def total():
    return jsonify(total=queries.get_total_certificates())


@certificates_bp.route("/certificates/<int:token_id>/qr", methods=["GET"])
def qr_code(token_id):
    queries.verify_certificate(token_id)
    return Response(qr_service.generate_verification_qr(token_id), mimetype="image/png")


@certificates_bp.route("/holders/<string:holder>/certificates", methods=["GET"])
def holder_certificates(holder):
    return jsonify(holder=holder, token_ids=queries.get_holder_certificates(holder))


@certificates_bp.route("/events", methods=["GET"])
def list_events():
    limit = request.args.get("limit", default=100, type=int)
    found = events.get_events(
        event_name=request.args.get("name"),
        token_id=request.args.get("token_id", type=int),
        account=request.args.get("account"),
        actor=request.args.get("actor"),
        limit=max(1, min(limit, 500)),
    )
    return jsonify([event.to_dict() for event in found])
