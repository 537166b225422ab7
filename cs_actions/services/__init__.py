"""Service modules for connector actions."""

from .operation_service import OperationService

__all__ = ["OperationService"]
