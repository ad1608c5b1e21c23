"""
Domain errors raised by the service layer.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class FoodSyncError(Exception):
    """Base class for service-level failures"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(FoodSyncError, ValueError):
    """Required field missing or malformed; caught before any query"""


class InvalidRole(ValidationFailed):
    def __init__(self, role: str | None = None):
        super().__init__("Invalid user type")
        self.role = role


class InvalidCredentials(FoodSyncError):
    # Unknown email and wrong password share one message
    def __init__(self):
        super().__init__("Invalid email or password")


class DuplicateAccount(FoodSyncError):
    pass


class SessionInvalid(FoodSyncError):
    pass


class NotFound(FoodSyncError):
    pass


class NotPermitted(FoodSyncError):
    """Caller's role or ownership does not allow the operation"""


class NotAddressedParty(NotPermitted):
    """Caller is not the counterparty a request is addressed to"""


class TransitionNotAllowed(FoodSyncError):
    pass
