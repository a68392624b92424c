"""Exceptions raised by the Capsule access-control core.

Every service raises one of these; the HTTP layer maps them to status
codes in capsule.api.errors.
"""


class CapsuleError(Exception):
    """Base exception for all Capsule errors."""

    code = "error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PermissionDeniedError(CapsuleError):
    """Raised when the caller lacks the capability an operation requires."""

    code = "permission_denied"


class ForbiddenError(PermissionDeniedError):
    """Raised by AccessGate.require_capability."""

    code = "forbidden"

    def __init__(self, album_id: str, user_id: str, capability: str):
        super().__init__(
            f"User {user_id} lacks '{capability}' on album {album_id}",
            {"album_id": album_id, "user_id": user_id, "capability": capability},
        )
        self.album_id = album_id
        self.user_id = user_id
        self.capability = capability


class NotFoundError(CapsuleError):
    """Raised when an album, invite, join request or membership is absent."""

    code = "not_found"


class AlreadyMemberError(CapsuleError):
    """Raised when a membership for (album, user) already exists."""

    code = "already_member"

    def __init__(self, album_id: str, user_id: str):
        super().__init__(
            f"User {user_id} is already a member of album {album_id}",
            {"album_id": album_id, "user_id": user_id},
        )
        self.album_id = album_id
        self.user_id = user_id


class InviteExpiredError(CapsuleError):
    code = "expired"


class AlreadyResolvedError(CapsuleError):
    """Raised when a join request is no longer pending."""

    code = "already_resolved"

    def __init__(self, request_id: str, status: str | None = None):
        details = {"request_id": request_id}
        if status:
            details["status"] = status
        super().__init__(f"Join request {request_id} was already resolved", details)
        self.request_id = request_id
        self.status = status


class CannotRemoveOwnerError(CapsuleError):
    code = "cannot_remove_owner"


class InvalidTransitionError(CapsuleError):
    """Raised for role changes the ownership model forbids."""

    code = "invalid_transition"


class InvalidRoleError(CapsuleError):
    """Raised when an invite would grant a role invites may not grant."""

    code = "invalid_role"


class StoreUnavailableError(CapsuleError):
    """Raised when the persistent store fails."""

    code = "store_unavailable"

    def __init__(self, operation: str, cause: Exception | None = None):
        details = {"operation": operation}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Store unavailable during {operation}", details)
        self.operation = operation
