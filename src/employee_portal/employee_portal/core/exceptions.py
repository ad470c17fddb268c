class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the caller has no valid session or credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist (or is hidden by row-level security)."""


class DeviceRegistrationRequired(DomainError):
    """Raised on clock-in when the employee has no registered device yet."""


class DeviceMismatchError(DomainError):
    """Raised on clock-in from a device other than the registered one."""


class BackendError(DomainError):
    """Raised when the hosted backend (database, auth or storage) rejects a call."""
