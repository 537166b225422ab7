"""FastAPI dependency injection helpers."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import get_settings
from ..exceptions import AuthenticationError, action_error_handler
from ..services.operation_service import OperationService, operation_service

security = HTTPBearer()


async def get_operation_service() -> OperationService:
    """Get the operation registry, loading the actions on first use."""
    operation_service.load_operations()
    return operation_service


async def verify_admin_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """Verify admin authentication token."""
    settings = get_settings()
    if credentials.credentials != settings.admin_token:
        raise action_error_handler(
            AuthenticationError("Invalid authentication credentials")
        )
    return credentials.credentials
