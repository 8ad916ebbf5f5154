"""Error taxonomy for the messaging core.

The core raises these and never swallows them. The HTTP layer maps each one
to a response through ``to_response()`` and ``http_status``.
"""

from typing import Optional


class CourierError(Exception):
    """Base exception for all Courier domain failures."""

    code = "COURIER_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(CourierError):
    """Malformed or missing input, e.g. an empty message body."""

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConflictError(CourierError):
    """The resource already exists (duplicate username)."""

    code = "CONFLICT"
    http_status = 409


class NotFoundError(CourierError):
    """Unknown username or message id."""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, resource_type: str, resource_id: object):
        super().__init__(f"{resource_type} '{resource_id}' not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class CredentialError(CourierError):
    """Authentication failed.

    The public message is the same for every cause so a caller cannot tell an
    unknown username from a wrong password. ``reason`` is for logs only.
    """

    code = "INVALID_CREDENTIALS"
    http_status = 401
    public_message = "Invalid username or password"

    def __init__(self, reason: str = "invalid_credentials"):
        super().__init__(self.public_message)
        self.reason = reason


class AuthorizationError(CourierError):
    """Authenticated, but not permitted to perform the action."""

    code = "FORBIDDEN"
    http_status = 403

    def __init__(self, message: str = "Not permitted"):
        super().__init__(message)
