# services/guards.py
"""
Precondition checks run before any registry mutation.

Each factory returns a zero-argument check that raises a typed error. Callers
pass them to ``enforce`` in the order they must be evaluated, so the first
violated precondition is the one reported.
"""
from typing import Callable, Optional

from flask import current_app

from certregistry.errors import NotAuthorized, InvalidInput
from certregistry.models import db, Institution

ZERO_ADDRESS = "0x" + "0" * 40

Check = Callable[[], None]


def normalize_identity(value) -> Optional[str]:
    """Strips an identity; returns None for the null identity."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or value.lower() == ZERO_ADDRESS:
        return None
    return value


def is_admin(caller) -> bool:
    admin = current_app.config.get("ADMIN_ADDRESS")
    return bool(admin) and caller == admin


def is_authorized_institution(address) -> bool:
    if not address:
        return False
    institution = db.session.get(Institution, address)
    return bool(institution and institution.authorized)


def enforce(*checks: Check) -> None:
    for check in checks:
        check()


def caller_identified(caller) -> Check:
    def check():
        if caller is None:
            raise NotAuthorized("Caller identity is required.")
    return check


def admin_only(caller) -> Check:
    def check():
        if not is_admin(caller):
            raise NotAuthorized("Only the administrative owner may perform this action.")
    return check


def authorized_institution(caller) -> Check:
    def check():
        if not is_authorized_institution(caller):
            raise NotAuthorized("Caller is not an authorized institution.")
    return check


def admin_or_authorized_institution(caller) -> Check:
    def check():
        if not (is_admin(caller) or is_authorized_institution(caller)):
            raise NotAuthorized("Caller is neither an authorized institution nor the administrative owner.")
    return check


def issuer_or_admin(caller, certificate) -> Check:
    def check():
        if certificate.issuer != caller and not is_admin(caller):
            raise NotAuthorized("Only the issuing institution or the administrative owner may revoke this certificate.")
    return check


def non_null_identity(value, field: str) -> Check:
    def check():
        if value is not None and not isinstance(value, str):
            raise InvalidInput(f"{field} must be an identity string.")
        if normalize_identity(value) is None:
            raise InvalidInput(f"{field} must not be the null identity.")
    return check


def non_empty(value, field: str) -> Check:
    def check():
        if not isinstance(value, str):
            raise InvalidInput(f"{field} must be text.")
        if value == "":
            raise InvalidInput(f"{field} must not be empty.")
    return check


def optional_text(value, field: str) -> Check:
    def check():
        if value is not None and not isinstance(value, str):
            raise InvalidInput(f"{field} must be text.")
    return check
