# services/ownership.py
"""
Binds each certificate identifier to its holder.

Certificates are non-transferable: the binding is written once at mint time
and there is no operation that moves it, which keeps it in step with the
holder index.
"""
from certregistry.errors import InvalidInput, NotFound
from certregistry.models import db, TokenOwnership


def mint(token_id: int, holder: str) -> TokenOwnership:
    if db.session.get(TokenOwnership, token_id) is not None:
        raise InvalidInput(f"Certificate {token_id} is already bound to a holder.")
    binding = TokenOwnership(token_id=token_id, holder=holder)
    db.session.add(binding)
    return binding


def certificate_exists(token_id) -> bool:
    if token_id is None:
        return False
    return db.session.get(TokenOwnership, token_id) is not None


def owner_of(token_id) -> str:
    binding = db.session.get(TokenOwnership, token_id) if token_id is not None else None
    if binding is None:
        raise NotFound(f"Certificate {token_id} does not exist.")
    return binding.holder
