# services/transaction.py
"""
Single-writer transaction boundary for every state-changing registry operation.

A process-wide lock is held from the first precondition check until the
database commit, so no reader or writer ever observes a half-applied mint.
Entering a second write from the thread that already holds the lock is a
reentrant call and is rejected instead of deadlocking.
"""
import threading
from contextlib import contextmanager
from typing import List

from certregistry.errors import ReentrantCall
from certregistry.models import db, RegistryEvent
from certregistry.services import events

_write_lock = threading.Lock()
_local = threading.local()


class WriteTransaction:
    """Collects the events emitted during one write so they are published only after commit."""

    def __init__(self):
        self.events: List[RegistryEvent] = []

    def emit(self, event_name, token_id=None, account=None, actor=None, **payload):
        self.events.append(events.record(event_name, token_id=token_id, account=account, actor=actor, **payload))


def in_write_transaction() -> bool:
    return getattr(_local, "active", False)


@contextmanager
def write_transaction():
    if in_write_transaction():
        raise ReentrantCall("A registry update is already in progress.")

    tx = WriteTransaction()
    with _write_lock:
        _local.active = True
        try:
            yield tx
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        finally:
            _local.active = False

    for event in tx.events:
        events.publish(event)
