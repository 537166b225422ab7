"""Custom exceptions raised by connector actions."""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ActionError(Exception):
    """Base exception for action errors."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        result = {"message": self.message}
        if self.code:
            result["code"] = self.code
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(ActionError):
    """Raised when an action input is missing or invalid."""
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class AuthenticationError(ActionError):
    """Raised when authentication fails."""
    def __init__(self, message: str = "Invalid authentication credentials"):
        super().__init__(message, code="AUTHENTICATION_FAILED")


class NotFoundError(ActionError):
    """Raised when a remote resource does not exist."""
    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message, code="NOT_FOUND")
        self.resource = resource


class OperationNotFoundError(ActionError):
    """Raised when no action is registered under the requested name."""
    def __init__(self, name: str, available: Optional[list] = None):
        message = f"Operation '{name}' not found. Available: {available or []}"
        super().__init__(message, code="OPERATION_NOT_FOUND")
        self.name = name


class ExternalServiceError(ActionError):
    """Raised when a third-party service answers with an error."""
    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR")
        self.service = service
        self.status_code = status_code


class MailError(ActionError):
    """Raised for mail store and message handling errors."""
    def __init__(self, message: str):
        super().__init__(message, code="MAIL_ERROR")


class DecryptionError(MailError):
    """Raised when an S/MIME part cannot be decrypted."""


def action_error_handler(error: ActionError) -> HTTPException:
    """Convert action errors to HTTP exceptions."""
    status_map = {
        ValidationError: status.HTTP_400_BAD_REQUEST,
        AuthenticationError: status.HTTP_401_UNAUTHORIZED,
        NotFoundError: status.HTTP_404_NOT_FOUND,
        OperationNotFoundError: status.HTTP_404_NOT_FOUND,
        ExternalServiceError: status.HTTP_502_BAD_GATEWAY,
    }

    status_code = status_map.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.to_dict()
    )
