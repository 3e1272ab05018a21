"""
Custom exception classes
Give the reservation engine and the HTTP layer precise error categories

Error families:
- AuthError: identity provider rejections (bad credentials, duplicate sign-up)
- PersistenceError: data store failures, including constraint violations
- ValidationError: local rule violations caught before any gateway call
"""

from typing import Any, Dict


class BaseApplicationError(Exception):
    """Base application exception"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class AuthError(BaseApplicationError):
    """Identity provider rejection"""

    def __init__(self, message: str, error_code: str = "AUTH_ERROR",
                 details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class SessionRequiredError(AuthError):
    """Operation needs a signed-in owner"""

    def __init__(self, message: str = "No active session"):
        super().__init__(message, "AUTHENTICATION_REQUIRED")


class PersistenceError(BaseApplicationError):
    """Data store query or mutation failure"""

    def __init__(self, message: str, error_code: str = "PERSISTENCE_ERROR",
                 details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class DuplicateKeyError(PersistenceError):
    """Unique constraint rejection (one reservation per owner and date)"""

    def __init__(self, message: str = "Duplicate key", details: Dict[str, Any] = None):
        super().__init__(message, "DUPLICATE_KEY", details)


class ReservationNotFoundError(PersistenceError):
    """No reservation row matched the owner and id"""

    def __init__(self, reservation_id: str):
        super().__init__(
            "Reservation not found",
            "RESERVATION_NOT_FOUND",
            {"reservation_id": reservation_id},
        )


class ValidationError(BaseApplicationError):
    """Local rule violation, never reaches the network"""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR",
                 details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class ReservationLockedError(ValidationError):
    """Reservation is inside the 48 hour lockout window"""

    def __init__(self, reservation_id: str):
        super().__init__(
            "No es posible modificar reservas con menos de 48h de anticipación",
            "RESERVATION_LOCKED",
            {"reservation_id": reservation_id},
        )
