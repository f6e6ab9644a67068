"""Error taxonomy raised by services and rendered by the API layer."""


class CineMatchError(Exception):
    """Base class for every error a caller can see.

    Each subclass fixes the ``kind`` reported to clients and the HTTP
    status it maps to.
    """

    kind = "internal"
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InvalidInputError(CineMatchError):
    kind = "invalid_input"
    status_code = 400


class UnauthorizedError(CineMatchError):
    kind = "unauthorized"
    status_code = 403


class NotFoundError(CineMatchError):
    kind = "not_found"
    status_code = 404


class ConflictError(CineMatchError):
    kind = "conflict"
    status_code = 409


class InternalError(CineMatchError):
    kind = "internal"
    status_code = 500


class WriteConflictError(InternalError):
    """A write lost a serialization race; the whole transaction may be retried."""
