# services/registry.py
"""
Certificate registry: issuance, batch issuance and revocation.

Identifiers come from a single high-water mark in ``registry_state``. Because
the counter is only bumped inside the write transaction, a rejected issuance
rolls it back together with everything else and never leaves a gap or a
reused number behind.
"""
from datetime import date, datetime, timezone
from typing import List, Sequence

from dateutil import parser
from flask import current_app

from certregistry.errors import DuplicateReference, InvalidInput, NotFound, RegistryError
from certregistry.models import db, Certificate, HolderEntry, Institution, RegistryState, utcnow
from certregistry.services import guards, ownership
from certregistry.services.transaction import write_transaction


def _as_utc_naive(value):
    """
    Accepts a date, a datetime, an ISO-8601 string or unix seconds.

    Naive values are taken as UTC. Anything that cannot be read as a point in
    time raises InvalidInput.
    """
    if isinstance(value, str):
        try:
            value = parser.parse(value)
        except (parser.ParserError, ValueError, OverflowError):
            raise InvalidInput(f"Could not parse completion date: {value!r}")
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            value = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            raise InvalidInput(f"Completion date timestamp is out of range: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise InvalidInput("Completion date must be a date, an ISO-8601 string or unix seconds.")


def _completion_not_in_future(completion_date, now):
    def check():
        if completion_date is None or completion_date == "":
            raise InvalidInput("Completion date is required.")
        if _as_utc_naive(completion_date) > now:
            raise InvalidInput("Completion date cannot be in the future.")
    return check


def _content_ref_unused(content_ref):
    def check():
        if Certificate.query.filter_by(content_ref=content_ref).first() is not None:
            raise DuplicateReference(f"Content reference '{content_ref}' is already registered.")
    return check


def _locked(model, key):
    """Loads a row with ``SELECT ... FOR UPDATE`` so concurrent writers on other processes wait for it."""
    return db.session.query(model).filter_by(**key).with_for_update()


def _next_token_id() -> int:
    state = _locked(RegistryState, {"id": 1}).first()
    if state is None:
        state = RegistryState(id=1, total_minted=0)
        db.session.add(state)
    state.total_minted += 1
    return state.total_minted


def _append_to_holder_index(holder, token_id):
    position = HolderEntry.query.filter_by(holder=holder).count()
    db.session.add(HolderEntry(holder=holder, position=position, token_id=token_id))


def _issue(tx, caller, recipient, recipient_name, course_name, grade, content_ref,
           completion_date, cert_type) -> int:
    now = utcnow()
    guards.enforce(
        guards.non_null_identity(recipient, "Recipient"),
        guards.non_empty(recipient_name, "Recipient name"),
        guards.non_empty(course_name, "Course name"),
        guards.optional_text(grade, "Grade"),
        guards.non_empty(content_ref, "Content reference"),
        guards.optional_text(cert_type, "Certificate type"),
        _content_ref_unused(content_ref),
        _completion_not_in_future(completion_date, now),
    )
    recipient = guards.normalize_identity(recipient)
    institution = _locked(Institution, {"address": caller}).first()

    token_id = _next_token_id()
    db.session.add(Certificate(
        token_id=token_id,
        recipient_name=recipient_name,
        institution_name=institution.name,
        course_name=course_name,
        grade=grade or "",
        issue_date=now,
        completion_date=_as_utc_naive(completion_date),
        content_ref=content_ref,
        is_valid=True,
        issuer=caller,
        cert_type=cert_type or "",
    ))
    _append_to_holder_index(recipient, token_id)
    institution.issued_count += 1
    ownership.mint(token_id, recipient)
    # Flush now so a later entry of the same batch sees this content reference.
    db.session.flush()

    tx.emit("CertificateIssued", token_id=token_id, account=recipient, actor=caller,
            recipient=recipient, issuer=caller, course_name=course_name, content_ref=content_ref)
    return token_id


def issue_certificate(caller, recipient, recipient_name, course_name, grade, content_ref,
                      completion_date, cert_type) -> int:
    """Issues one certificate and returns its identifier. Nothing is stored if any check fails."""
    caller = guards.normalize_identity(caller)
    try:
        with write_transaction() as tx:
            guards.enforce(guards.authorized_institution(caller))
            token_id = _issue(tx, caller, recipient, recipient_name, course_name, grade,
                              content_ref, completion_date, cert_type)
    except RegistryError as e:
        current_app.logger.warning(f"Issuance by '{caller}' rejected: {e.kind}: {e.message}")
        raise

    current_app.logger.info(f"Certificate {token_id} issued by '{caller}' for content '{content_ref}'")
    return token_id


def batch_issue_certificates(caller, recipients: Sequence, recipient_names: Sequence,
                             course_names: Sequence, grades: Sequence, content_refs: Sequence,
                             completion_dates: Sequence, cert_types: Sequence) -> List[int]:
    """
    Issues a batch of certificates from parallel arrays, in input order.

    The whole batch shares one transaction: if any entry fails, none of the
    batch is committed and the error of the first failing entry is raised.
    """
    caller = guards.normalize_identity(caller)
    columns = [recipients, recipient_names, course_names, grades, content_refs,
               completion_dates, cert_types]
    max_size = current_app.config.get("MAX_BATCH_SIZE", 50)

    def equal_lengths():
        if any(not isinstance(column, (list, tuple)) for column in columns):
            raise InvalidInput("Batch fields must all be arrays.")
        if len({len(column) for column in columns}) != 1:
            raise InvalidInput("Batch arrays must all have the same length.")

    def within_size():
        if len(recipients) > max_size:
            raise InvalidInput(f"Batch size exceeds the limit of {max_size}.")

    try:
        with write_transaction() as tx:
            guards.enforce(guards.authorized_institution(caller), equal_lengths, within_size)
            token_ids = [
                _issue(tx, caller, *entry)
                for entry in zip(*columns)
            ]
    except RegistryError as e:
        current_app.logger.warning(f"Batch issuance by '{caller}' rejected: {e.kind}: {e.message}")
        raise

    current_app.logger.info(f"Batch of {len(token_ids)} certificates issued by '{caller}'")
    return token_ids


def revoke_certificate(caller, token_id) -> Certificate:
    """Marks a certificate invalid. Revoking an already revoked certificate is allowed."""
    caller = guards.normalize_identity(caller)
    try:
        with write_transaction() as tx:
            certificate = db.session.get(Certificate, token_id) if token_id is not None else None
            if certificate is None:
                raise NotFound(f"Certificate {token_id} does not exist.")
            guards.enforce(
                guards.admin_or_authorized_institution(caller),
                guards.issuer_or_admin(caller, certificate),
            )
            certificate.is_valid = False
            tx.emit("CertificateRevoked", token_id=certificate.token_id, account=caller, actor=caller,
                    revoked_by=caller)
    except RegistryError as e:
        current_app.logger.warning(f"Revocation of certificate {token_id} by '{caller}' rejected: {e.message}")
        raise

    current_app.logger.info(f"Certificate {token_id} revoked by '{caller}'")
    return certificate
