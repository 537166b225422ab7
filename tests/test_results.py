"""Tests for result map helpers."""

from cs_actions.exceptions import ExternalServiceError, ValidationError
from cs_actions.models.enums import ResponseName
from cs_actions.utils import results


class TestResults:
    def test_success_drops_none_outputs(self):
        result = results.success("done", statusCode="200", taskId=None)
        assert result == {"returnCode": "0", "returnResult": "done", "statusCode": "200"}

    def test_failure(self):
        result = results.failure("boom", exception="trace", statusCode="500")
        assert result["returnCode"] == "-1"
        assert result["returnResult"] == "boom"
        assert result["exception"] == "trace"
        assert result["statusCode"] == "500"

    def test_from_exception_uses_action_error_message(self):
        try:
            raise ValidationError("The sourceFile can't be null or empty.", field="sourceFile")
        except ValidationError as e:
            result = results.from_exception(e)

        assert result["returnCode"] == "-1"
        assert result["returnResult"] == "The sourceFile can't be null or empty."
        assert "Traceback" in result["exception"]
        assert "ValidationError" in result["exception"]
        assert "statusCode" not in result

    def test_from_exception_keeps_remote_status_code(self):
        result = results.from_exception(ExternalServiceError("vsphere", "vSphere answered 503", status_code=503))

        assert result["returnResult"] == "vSphere answered 503"
        assert result["statusCode"] == "503"

    def test_from_exception_without_message(self):
        result = results.from_exception(RuntimeError())
        assert result["returnResult"] == "RuntimeError"

    def test_resolve_response(self):
        assert results.resolve_response({"returnCode": "0"}) is ResponseName.SUCCESS
        assert results.resolve_response({"returnCode": "-1"}) is ResponseName.FAILURE
        assert results.resolve_response({}) is ResponseName.FAILURE
