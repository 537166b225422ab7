"""
Base interface for all connector actions.

All action plugins must implement the Operation interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import structlog

from ..exceptions import ValidationError
from ..models.enums import ResponseName
from ..models.schemas import ActionResult, InputDefinition
from ..utils import results
from ..utils.inputs import EXCEPTION_NULL_EMPTY, is_empty
from ..utils.logging import mask_inputs

logger = structlog.get_logger(__name__)


class Operation(ABC):
    """Base class for all connector actions."""

    #: Declared inputs, in the order the orchestrator documents them.
    inputs: List[InputDefinition] = []

    #: Names of the outputs present in the result map.
    outputs: List[str] = [results.RETURN_RESULT, results.RETURN_CODE, results.EXCEPTION]

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the operation id used to look it up."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Return the action name shown in workflows."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a human-readable description of the operation."""
        pass

    @abstractmethod
    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        """
        Run the action against the remote system.

        Args:
            inputs: Declared inputs with defaults applied

        Returns:
            The result map

        Raises:
            Exception: Any error; ``run`` turns it into a failure result
        """
        pass

    @property
    def encrypted_inputs(self) -> set:
        return {definition.name for definition in self.inputs if definition.encrypted}

    def resolve_inputs(self, raw_inputs: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
        """Keep the declared inputs only and fill in their defaults."""
        resolved = {}
        for definition in self.inputs:
            value = raw_inputs.get(definition.name)
            if is_empty(value) and definition.default is not None:
                value = definition.default
            resolved[definition.name] = value
        return resolved

    def validate_inputs(self, inputs: Dict[str, Optional[str]]) -> None:
        """
        Validate inputs before execution (override to add checks).

        Raises:
            ValidationError: If a required input is missing
        """
        for definition in self.inputs:
            if definition.required and is_empty(inputs.get(definition.name)):
                raise ValidationError(EXCEPTION_NULL_EMPTY.format(definition.name), field=definition.name)

    def run(self, raw_inputs: Mapping[str, Optional[str]]) -> ActionResult:
        """Execute the action, converting any error into a failure result."""
        inputs = self.resolve_inputs(raw_inputs)
        logger.info("Running action", operation=self.name, inputs=mask_inputs(inputs, self.encrypted_inputs))

        try:
            self.validate_inputs(inputs)
            result = self.execute(inputs)
        except Exception as e:
            logger.error("Action failed", operation=self.name, error=str(e), exc_info=True)
            result = results.from_exception(e)

        response = results.resolve_response(result)
        logger.info("Action finished", operation=self.name, response=response.value)
        return ActionResult(outputs=result, response=response)

    def get_metadata(self) -> Dict[str, Any]:
        """
        Return operation metadata for API exposure.

        Returns:
            Dictionary containing operation information
        """
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "inputs": [definition.to_dict() for definition in self.inputs],
            "outputs": list(self.outputs),
            "responses": [response.value for response in ResponseName],
        }
