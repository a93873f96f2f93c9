# errors.py
"""
Typed failures raised by the registry services.

Every error carries the HTTP status the API layer answers with, so routes
never need to translate them by hand.
"""


class RegistryError(Exception):
    """Base class for every precondition failure in the registry."""
    status_code = 400
    kind = "RegistryError"

    def __init__(self, message=None):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self):
        return {"error": self.kind, "message": self.message}


class NotAuthorized(RegistryError):
    """Caller lacks the role or ownership the action requires."""
    status_code = 403
    kind = "NotAuthorized"


class InvalidInput(RegistryError):
    status_code = 400
    kind = "InvalidInput"


class DuplicateReference(RegistryError):
    """Content reference already belongs to another certificate."""
    status_code = 409
    kind = "DuplicateReference"


class NotFound(RegistryError):
    status_code = 404
    kind = "NotFound"


class AlreadyRegistered(RegistryError):
    status_code = 409
    kind = "AlreadyRegistered"


class ReentrantCall(RegistryError):
    """A write operation was entered while another was still in progress on this thread."""
    status_code = 409
    kind = "ReentrantCall"
