# services/directory.py
"""
Authorization directory: which accounts may issue certificates.
"""
from datetime import datetime
from typing import NamedTuple, Optional

from flask import current_app

from certregistry.errors import AlreadyRegistered, NotAuthorized
from certregistry.models import db, Institution, utcnow
from certregistry.services import guards
from certregistry.services.transaction import write_transaction


class InstitutionStats(NamedTuple):
    name: str
    authorized: bool
    registered_at: Optional[datetime]
    issued_count: int

    def to_dict(self):
        return {
            "name": self.name,
            "authorized": self.authorized,
            "registered_at": self.registered_at.isoformat() if self.registered_at else None,
            "issued_count": self.issued_count,
        }


def _not_currently_authorized(caller):
    def check():
        if guards.is_authorized_institution(caller):
            raise AlreadyRegistered(f"Institution '{caller}' is already registered and authorized.")
    return check


def _target_authorized(institution):
    def check():
        if not guards.is_authorized_institution(institution):
            raise NotAuthorized(f"Institution '{institution}' is not currently authorized.")
    return check


def register_institution(caller, name, email) -> Institution:
    """
    Registers the caller as an authorized institution.

    A revoked institution may register again; its record is overwritten and
    its issuance counter starts from zero. Certificates it issued earlier stay
    untouched.
    """
    caller = guards.normalize_identity(caller)
    with write_transaction() as tx:
        guards.enforce(
            guards.caller_identified(caller),
            _not_currently_authorized(caller),
            guards.optional_text(name, "Institution name"),
            guards.optional_text(email, "Institution email"),
        )
        institution = db.session.get(Institution, caller)
        if institution is None:
            institution = Institution(address=caller)
            db.session.add(institution)
        institution.name = name or ""
        institution.email = email or ""
        institution.authorized = True
        institution.registered_at = utcnow()
        institution.issued_count = 0
        tx.emit("InstitutionAuthorized", account=caller, actor=caller, institution=caller, name=institution.name)

    current_app.logger.info(f"Institution '{caller}' registered as '{institution.name}'")
    return institution


def revoke_institution(caller, institution) -> None:
    caller = guards.normalize_identity(caller)
    institution = guards.normalize_identity(institution)
    try:
        with write_transaction() as tx:
            guards.enforce(
                guards.admin_only(caller),
                _target_authorized(institution),
            )
            db.session.get(Institution, institution).authorized = False
            tx.emit("InstitutionRevoked", account=institution, actor=caller, institution=institution)
    except NotAuthorized as e:
        current_app.logger.warning(f"Institution revocation by '{caller}' rejected: {e.message}")
        raise

    current_app.logger.info(f"Institution '{institution}' revoked by administrator")


def update_institution_info(caller, new_name, new_email) -> Institution:
    caller = guards.normalize_identity(caller)
    with write_transaction():
        guards.enforce(
            guards.authorized_institution(caller),
            guards.non_empty(new_name, "Institution name"),
            guards.optional_text(new_email, "Institution email"),
        )
        institution = db.session.get(Institution, caller)
        institution.name = new_name
        institution.email = new_email or ""

    current_app.logger.info(f"Institution '{caller}' updated its profile")
    return institution


def get_institution_stats(institution) -> InstitutionStats:
    address = guards.normalize_identity(institution)
    record = db.session.get(Institution, address) if address else None
    if record is None:
        return InstitutionStats(name="", authorized=False, registered_at=None, issued_count=0)
    return InstitutionStats(
        name=record.name,
        authorized=record.authorized,
        registered_at=record.registered_at,
        issued_count=record.issued_count,
    )
