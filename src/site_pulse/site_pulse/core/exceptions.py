class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class StateConflictError(ValidationError):
    """Raised when a request does not fit the user's current tracking state.

    Callers should re-read their state (today summary) before retrying.
    """

    default_message = "Request conflicts with the current tracking state"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AlreadyClockedIn(StateConflictError):
    default_message = "You are already clocked in"


class NoActiveSession(StateConflictError):
    default_message = "No active clock-in found"


class NotClockedIn(StateConflictError):
    default_message = "Please clock in first"


class NoActiveActivity(StateConflictError):
    default_message = "No active activity found"


class NoActiveBreak(StateConflictError):
    default_message = "No active break found"


class AlreadyOnBreak(StateConflictError):
    default_message = "You are already on a break"


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
