"""
Operation service for loading and executing connector actions.
"""

import importlib
import inspect
import pkgutil
from types import ModuleType
from typing import Any, Dict, List, Mapping, Optional

import structlog

from .. import operations as operations_package
from ..exceptions import OperationNotFoundError
from ..models.schemas import ActionResult
from ..operations.base import Operation

logger = structlog.get_logger(__name__)


class OperationService:
    """Service for loading and executing operations."""

    def __init__(self, package: ModuleType = operations_package):
        self.operations: Dict[str, Operation] = {}
        self._loaded = False
        self._package = package

    def load_operations(self) -> Dict[str, Operation]:
        """Load all operation plugins."""
        if self._loaded:
            return self.operations

        logger.info("Loading operations", package=self._package.__name__)

        for module_info in pkgutil.walk_packages(self._package.__path__, prefix=f"{self._package.__name__}."):
            if module_info.name.endswith(".base"):
                continue
            try:
                module = importlib.import_module(module_info.name)
            except Exception as e:
                logger.error("Failed to load operation module", module=module_info.name, error=str(e))
                continue

            for operation in self._load_operation_classes(module):
                if operation.name in self.operations:
                    logger.warning("Duplicate operation name ignored", operation=operation.name, module=module_info.name)
                    continue
                self.operations[operation.name] = operation
                logger.debug("Loaded operation", operation=operation.name)

        self._loaded = True
        logger.info("Loaded operations", count=len(self.operations), operations=sorted(self.operations))
        return self.operations

    def _load_operation_classes(self, module: ModuleType) -> List[Operation]:
        """Instantiate every concrete Operation subclass defined in the module."""
        instances = []
        for _, attr in inspect.getmembers(module, inspect.isclass):
            if (issubclass(attr, Operation) and
                    attr.__module__ == module.__name__ and
                    not inspect.isabstract(attr)):
                try:
                    instances.append(attr())
                except Exception as e:
                    logger.error("Error instantiating operation", operation_class=attr.__name__, error=str(e))
        return instances

    def get_operation(self, name: str) -> Operation:
        """
        Get operation by name.

        Args:
            name: Operation name

        Returns:
            Operation instance

        Raises:
            OperationNotFoundError: If operation not found
        """
        if not self._loaded:
            self.load_operations()

        if name not in self.operations:
            raise OperationNotFoundError(name, sorted(self.operations))

        return self.operations[name]

    def get_operation_names(self) -> List[str]:
        """Get the sorted list of all available operation names."""
        if not self._loaded:
            self.load_operations()

        return sorted(self.operations)

    def get_operations_metadata(self) -> List[Dict[str, Any]]:
        """Get metadata for all loaded operations."""
        return [self.operations[name].get_metadata() for name in self.get_operation_names()]

    def execute_operation(self, operation_name: str, inputs: Mapping[str, Optional[str]]) -> ActionResult:
        """
        Execute an operation with given inputs.

        Raises:
            OperationNotFoundError: If operation not found
        """
        operation = self.get_operation(operation_name)
        return operation.run(inputs)

    def reload_operations(self) -> Dict[str, Operation]:
        """Reload all operations (useful for development)."""
        self.operations.clear()
        self._loaded = False
        return self.load_operations()


# Global operation service instance
operation_service = OperationService()
