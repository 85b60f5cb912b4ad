"""
Error taxonomy shared by the conversation, generation and build layers.

Each error carries the HTTP status the web layer reports it with.
"""


class HeavyLifterError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotFound(HeavyLifterError):
    """An identifier (conversation, build) is not known to its table."""

    status_code = 404


class ValidationError(HeavyLifterError):
    """Request input was rejected before any state was touched."""

    status_code = 400


class ConflictError(HeavyLifterError):
    """The operation clashes with work already in flight."""

    status_code = 409


class InternalError(HeavyLifterError):
    """Unexpected failure, reported to the caller with a generic message."""

    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)
