# services/queries.py
"""
Read-only lookups over the registry. None of these take the write lock.
"""
from typing import List, NamedTuple, Optional

from certregistry.errors import NotFound
from certregistry.models import db, Certificate, HolderEntry, RegistryState
from certregistry.services import guards, ownership


class ContentRefLookup(NamedTuple):
    exists: bool
    token_id: int
    certificate: Optional[Certificate]

    def to_dict(self):
        return {
            "exists": self.exists,
            "token_id": self.token_id,
            "certificate": self.certificate.to_dict() if self.certificate else Certificate.empty_dict(),
        }


def verify_certificate(token_id) -> Certificate:
    """
    Returns the full record for a bound identifier.

    The record is returned whether or not it has been revoked; callers must
    look at ``is_valid`` themselves.
    """
    if not ownership.certificate_exists(token_id):
        raise NotFound(f"Certificate {token_id} does not exist.")
    return db.session.get(Certificate, token_id)


def verify_certificate_by_content_ref(content_ref) -> ContentRefLookup:
    if not content_ref:
        return ContentRefLookup(exists=False, token_id=0, certificate=None)
    certificate = Certificate.query.filter_by(content_ref=content_ref).first()
    if certificate is None:
        return ContentRefLookup(exists=False, token_id=0, certificate=None)
    return ContentRefLookup(exists=True, token_id=certificate.token_id, certificate=certificate)


def get_holder_certificates(holder) -> List[int]:
    holder = guards.normalize_identity(holder)
    if holder is None:
        return []
    entries = HolderEntry.query.filter_by(holder=holder).order_by(HolderEntry.position).all()
    return [entry.token_id for entry in entries]


def get_total_certificates() -> int:
    state = db.session.get(RegistryState, 1)
    return state.total_minted if state else 0
