"""Client for the ABBYY Cloud OCR SDK processing API."""

import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

import httpx
import structlog

from ..exceptions import ExternalServiceError
from ..models.abbyy import ProcessImageInput
from ..models.enums import AbbyyTaskStatus
from ..models.schemas import PollingConfig
from ..utils import results
from ..utils.polling import PollingHandler
from .http_client import build_client, decode_body, format_headers

logger = structlog.get_logger(__name__)

ABBYY_URL_TEMPLATE = "https://{location_id}.ocrsdk.com"
PROCESS_IMAGE_PATH = "/processImage"
GET_TASK_STATUS_PATH = "/getTaskStatus"

TASK_ID = "taskId"
CREDITS = "credits"
RESULT_URL = "resultUrl"
FAILURE_MESSAGE = "failureMessage"
TIMED_OUT = "timedOut"
RESPONSE_HEADERS = "responseHeaders"

CHUNK_SIZE = 64 * 1024


@dataclass
class AbbyyTask:
    """Processing task as described by the ``<task>`` element."""
    id: str
    status: AbbyyTaskStatus
    credits: str = ""
    result_url: Optional[str] = None
    error: Optional[str] = None


def parse_task(response: httpx.Response) -> AbbyyTask:
    """
    Parse ``<response><task .../></response>``.

    Raises:
        ExternalServiceError: If the body is not a task description
    """
    try:
        root = ET.fromstring(response.content)
    except ET.ParseError as e:
        raise ExternalServiceError("abbyy", f"Unexpected response from the ABBYY server: {e}",
                                   status_code=response.status_code)

    task = root if root.tag == "task" else root.find("task")
    if task is None or not task.get("id"):
        raise ExternalServiceError("abbyy", "The ABBYY server response does not describe a task.",
                                   status_code=response.status_code)
    try:
        status = AbbyyTaskStatus(task.get("status"))
    except ValueError:
        raise ExternalServiceError("abbyy", f"Unknown ABBYY task status: {task.get('status')}",
                                   status_code=response.status_code)

    return AbbyyTask(
        id=task.get("id"),
        status=status,
        credits=task.get("credits", ""),
        result_url=task.get("resultUrl"),
        error=task.get("error"),
    )


def parse_error_message(response: httpx.Response) -> str:
    """Extract ``<error><message>`` from an error response, falling back to the raw body."""
    try:
        root = ET.fromstring(response.content)
    except ET.ParseError:
        return response.text or f"The ABBYY server answered with status {response.status_code}."
    message = root.find(".//message")
    if message is not None and message.text:
        return message.text.strip()
    return response.text


class AbbyyService:
    """Submits an image for recognition, waits for the task and fetches its result."""

    def __init__(self, client_factory: Callable[..., httpx.Client] = build_client,
                 sleep: Callable[[float], None] = time.sleep):
        self._client_factory = client_factory
        self._sleep = sleep

    def process_image(self, request: ProcessImageInput) -> Dict[str, str]:
        """Run the Process Image action and build its result map."""
        base_url = ABBYY_URL_TEMPLATE.format(location_id=request.location_id)

        with self._client_factory(request.http, base_url=base_url,
                                  auth=(request.application_id, request.password)) as client:
            response = self._submit(client, request)
            if not response.is_success:
                return self._error_result(response)

            task = parse_task(response)
            logger.info("ABBYY task registered", task_id=task.id, status=task.status.value)

            timed_out = False
            if not task.status.is_final:
                polling = PollingHandler(
                    PollingConfig(interval=request.time_to_wait, max_attempts=request.number_of_retries),
                    sleep=self._sleep,
                )
                response, timed_out = polling.poll(
                    lambda: client.get(GET_TASK_STATUS_PATH, params={"taskId": task.id}),
                    lambda status_response: not status_response.is_success or parse_task(status_response).status.is_final,
                    operation_name="abbyy_task_status",
                )
                if not response.is_success:
                    return self._error_result(response, task)
                task = parse_task(response)

        task_outputs = {
            TASK_ID: task.id,
            CREDITS: task.credits,
            RESULT_URL: task.result_url or "",
            results.STATUS_CODE: str(response.status_code),
            RESPONSE_HEADERS: format_headers(response),
        }

        if timed_out:
            message = (f"The ABBYY task {task.id} did not finish after {request.number_of_retries} "
                       f"status checks. Last status: {task.status.value}.")
            return results.failure(message, failureMessage=message, timedOut="true", **task_outputs)

        if task.status is not AbbyyTaskStatus.COMPLETED:
            message = task.error or f"The ABBYY task {task.id} ended with status {task.status.value}."
            return results.failure(message, failureMessage=message, timedOut="false", **task_outputs)

        if not task.result_url:
            raise ExternalServiceError("abbyy", f"The ABBYY task {task.id} completed without a result URL.")

        return self._download_result(request, task, task_outputs)

    def _submit(self, client: httpx.Client, request: ProcessImageInput) -> httpx.Response:
        if request.chunked_request_entity:
            content = self._read_chunks(request.source_file)
        else:
            with open(request.source_file, "rb") as image:
                content = image.read()

        logger.info("Submitting image to ABBYY", location=request.location_id,
                    export_format=request.export_format, chunked=request.chunked_request_entity)
        return client.post(PROCESS_IMAGE_PATH, params=request.query_params(), content=content)

    @staticmethod
    def _read_chunks(path: str) -> Iterator[bytes]:
        with open(path, "rb") as image:
            for chunk in iter(lambda: image.read(CHUNK_SIZE), b""):
                yield chunk

    def _download_result(self, request: ProcessImageInput, task: AbbyyTask,
                         task_outputs: Dict[str, str]) -> Dict[str, str]:
        # The result URL is pre-signed; the application credentials must not be sent with it.
        with self._client_factory(request.http) as client:
            response = client.get(task.result_url)

        task_outputs[results.STATUS_CODE] = str(response.status_code)
        task_outputs[RESPONSE_HEADERS] = format_headers(response)

        if not response.is_success:
            message = f"Could not download the recognition result: status {response.status_code}."
            return results.failure(message, failureMessage=message, timedOut="false", **task_outputs)

        if request.destination_file:
            with open(request.destination_file, "wb") as destination:
                destination.write(response.content)
            return_result = f"The recognition result was saved to '{request.destination_file}'."
        elif request.is_text_export:
            return_result = decode_body(response, request.http.response_character_set)
        else:
            return_result = (f"The image was successfully processed into the "
                             f"'{request.export_format[0]}' format. The result can be found at the resultUrl.")

        logger.info("ABBYY task completed", task_id=task.id, credits=task.credits)
        return results.success(return_result, timedOut="false", **task_outputs)

    @staticmethod
    def _error_result(response: httpx.Response, task: Optional[AbbyyTask] = None) -> Dict[str, str]:
        message = parse_error_message(response)
        logger.warning("ABBYY request failed", status_code=response.status_code, error=message)
        return results.failure(
            message,
            failureMessage=message,
            statusCode=str(response.status_code),
            responseHeaders=format_headers(response),
            taskId=task.id if task else None,
            timedOut="false",
        )
