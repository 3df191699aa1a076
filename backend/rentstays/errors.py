"""Domain error taxonomy for the booking service.

Services raise these; ``rentstays.main`` renders them as ``{"detail": ...}``
with the status code carried by each class.  None of them is retried by the
service itself.
"""


class BookingError(Exception):
    """Base class for every error the booking service reports to callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Malformed or missing input; the caller can fix it and resubmit."""

    status_code = 422


class NotFoundError(BookingError):
    """The booking or property does not exist."""

    status_code = 404


class ForbiddenError(BookingError):
    """The actor may not read or change the target booking/property."""

    status_code = 403


class InvalidTransitionError(BookingError):
    """The requested status change is not allowed from the current status."""

    status_code = 400

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move booking from '{current}' to '{target}'")
        self.current = current
        self.target = target


class ConflictError(BookingError):
    """Stale write or duplicate active booking."""

    status_code = 409
