# core/exceptions.py

from typing import Any

from fastapi import HTTPException, status


class DevonFarmException(Exception):
    def __init__(
        self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(DevonFarmException):
    def __init__(self, message: str = "Application is misconfigured"):
        super().__init__(message, error_code="CONFIGURATION_ERROR")


class AuthenticationError(DevonFarmException):
    def __init__(self, message: str = "Authentication failed", error_code: str | None = None):
        super().__init__(message, error_code=error_code or "AUTHENTICATION_FAILED")


class InvalidTokenError(AuthenticationError):
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, error_code="INVALID_TOKEN")


class SessionExpiredError(AuthenticationError):
    def __init__(self, message: str = "Session has expired"):
        super().__init__(message, error_code="SESSION_EXPIRED")


class ProviderError(DevonFarmException):
    def __init__(
        self,
        message: str = "Magic-link provider request failed",
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=error_code or "PROVIDER_ERROR", details=details)


class ProviderUnavailableError(ProviderError):
    def __init__(self, message: str = "Magic-link provider is unavailable"):
        super().__init__(message, error_code="PROVIDER_UNAVAILABLE")


class ValidationError(DevonFarmException):
    def __init__(self, message: str = "Invalid input", details: dict[str, Any] | None = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)


class PersistenceError(DevonFarmException):
    def __init__(self, message: str = "Database operation failed", operation: str | None = None):
        super().__init__(
            message, error_code="PERSISTENCE_ERROR", details={"operation": operation}
        )


class UserNotFoundError(DevonFarmException):
    def __init__(self, message: str = "User not found"):
        super().__init__(message, error_code="USER_NOT_FOUND")


class FarmNotFoundError(DevonFarmException):
    def __init__(self, message: str = "Farm not found"):
        super().__init__(message, error_code="FARM_NOT_FOUND")


class HorseNotFoundError(DevonFarmException):
    def __init__(self, message: str = "Horse not found"):
        super().__init__(message, error_code="HORSE_NOT_FOUND")


class TenantAccessDenied(DevonFarmException):
    def __init__(self, message: str = "You do not have access to this farm"):
        super().__init__(message, error_code="TENANT_ACCESS_DENIED")


# HTTP Exception converters
def convert_to_http_exception(exc: DevonFarmException) -> HTTPException:
    status_map = {
        "AUTHENTICATION_FAILED": status.HTTP_401_UNAUTHORIZED,
        "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
        "SESSION_EXPIRED": status.HTTP_401_UNAUTHORIZED,
        "PROVIDER_ERROR": status.HTTP_502_BAD_GATEWAY,
        "PROVIDER_UNAVAILABLE": status.HTTP_502_BAD_GATEWAY,
        "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
        "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "FARM_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "HORSE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
        "TENANT_ACCESS_DENIED": status.HTTP_403_FORBIDDEN,
    }

    status_code = status_map.get(exc.error_code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Persistence and configuration details stay server-side
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        return HTTPException(
            status_code=status_code,
            detail={"message": "Internal server error", "error_code": exc.error_code},
        )

    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "error_code": exc.error_code, "details": exc.details},
    )
