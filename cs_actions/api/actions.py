"""Action listing and execution endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from ..exceptions import OperationNotFoundError, action_error_handler
from ..models.api import ActionMetadata, ExecuteRequest, ExecuteResponse
from ..services.operation_service import OperationService
from .dependencies import get_operation_service, verify_admin_token

router = APIRouter(prefix="/actions", tags=["actions"])


@router.get("", response_model=List[ActionMetadata])
async def list_actions(service: OperationService = Depends(get_operation_service)):
    """List every loaded action with its inputs and outputs."""
    return service.get_operations_metadata()


@router.get("/{name}", response_model=ActionMetadata)
async def get_action(name: str, service: OperationService = Depends(get_operation_service)):
    """Describe one action."""
    try:
        return service.get_operation(name).get_metadata()
    except OperationNotFoundError as e:
        raise action_error_handler(e)


@router.post("/{name}/execute", response_model=ExecuteResponse, dependencies=[Depends(verify_admin_token)])
async def execute_action(
    name: str,
    request: ExecuteRequest,
    service: OperationService = Depends(get_operation_service)
):
    """
    Run an action.

    Action failures are reported in the body with response 'failure';
    only unknown actions are HTTP errors.
    """
    try:
        result = await run_in_threadpool(service.execute_operation, name, request.inputs)
    except OperationNotFoundError as e:
        raise action_error_handler(e)

    return ExecuteResponse(action=name, response=result.response.value, outputs=result.outputs)
