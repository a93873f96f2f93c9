# services/events.py
"""
Registry notifications.

Each notification is written to the ``registry_events`` table inside the same
database transaction as the change it describes, so the audit trail can never
disagree with the registry state. Once the transaction commits the event is
logged and sent on a blinker signal for in-process observers.
"""
from typing import Any, Dict, Optional

from blinker import Namespace
from flask import current_app

from certregistry.models import db, RegistryEvent

registry_signals = Namespace()

certificate_issued = registry_signals.signal("certificate-issued")
certificate_revoked = registry_signals.signal("certificate-revoked")
institution_authorized = registry_signals.signal("institution-authorized")
institution_revoked = registry_signals.signal("institution-revoked")

SIGNALS = {
    "CertificateIssued": certificate_issued,
    "CertificateRevoked": certificate_revoked,
    "InstitutionAuthorized": institution_authorized,
    "InstitutionRevoked": institution_revoked,
}


def record(event_name: str, token_id: Optional[int] = None, account: Optional[str] = None,
           actor: Optional[str] = None, **payload: Any) -> RegistryEvent:
    """Adds an event row to the current session. It is committed with the caller's transaction."""
    if event_name not in SIGNALS:
        raise ValueError(f"Unknown registry event '{event_name}'")
    event = RegistryEvent(name=event_name, token_id=token_id, account=account, actor=actor, payload=payload)
    db.session.add(event)
    return event


def publish(event: RegistryEvent) -> Dict[str, Any]:
    data = event.to_dict()
    current_app.logger.info(
        f"Event {data['name']} token={data['token_id']} account={data['account']} actor={data['actor']}")
    SIGNALS[data["name"]].send(current_app._get_current_object(), event=data)
    return data


def get_events(event_name: Optional[str] = None, token_id: Optional[int] = None,
               account: Optional[str] = None, actor: Optional[str] = None, limit: int = 100):
    """Returns audit-log entries, newest first, filtered on the indexed correlation fields."""
    query = RegistryEvent.query
    if event_name:
        query = query.filter_by(name=event_name)
    if token_id is not None:
        query = query.filter_by(token_id=token_id)
    if account:
        query = query.filter_by(account=account)
    if actor:
        query = query.filter_by(actor=actor)
    return query.order_by(RegistryEvent.id.desc()).limit(limit).all()
