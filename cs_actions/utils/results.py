"""Helpers building the string result maps returned by actions."""

import traceback
from typing import Dict, Optional

from ..models.enums import ResponseName, ReturnCode

RETURN_RESULT = "returnResult"
RETURN_CODE = "returnCode"
EXCEPTION = "exception"
STATUS_CODE = "statusCode"


def success(return_result: str = "", **outputs: str) -> Dict[str, str]:
    """Build a successful result map."""
    result = {RETURN_CODE: ReturnCode.SUCCESS.value, RETURN_RESULT: return_result}
    result.update({key: value for key, value in outputs.items() if value is not None})
    return result


def failure(return_result: str, exception: Optional[str] = None, **outputs: str) -> Dict[str, str]:
    """Build a failed result map."""
    result = {RETURN_CODE: ReturnCode.FAILURE.value, RETURN_RESULT: return_result}
    if exception is not None:
        result[EXCEPTION] = exception
    result.update({key: value for key, value in outputs.items() if value is not None})
    return result


def from_exception(error: BaseException) -> Dict[str, str]:
    """Convert an exception raised inside an action into a failed result map."""
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    stack_trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    status_code = getattr(error, "status_code", None)
    return failure(message, exception=stack_trace,
                   statusCode=None if status_code is None else str(status_code))


def resolve_response(result: Dict[str, str]) -> ResponseName:
    """Pick the workflow branch from the returnCode output."""
    if result.get(RETURN_CODE) == ReturnCode.SUCCESS.value:
        return ResponseName.SUCCESS
    return ResponseName.FAILURE
