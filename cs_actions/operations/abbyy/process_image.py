"""Process Image action - converts an image to text with the ABBYY Cloud OCR SDK."""

from typing import Dict, Optional

from ...config import get_settings
from ...models.abbyy import ProcessImageInput
from ...models.schemas import InputDefinition
from ...services.abbyy_service import (
    CREDITS,
    FAILURE_MESSAGE,
    RESPONSE_HEADERS,
    RESULT_URL,
    TASK_ID,
    TIMED_OUT,
    AbbyyService,
)
from ...services.http_client import http_input_definitions, parse_http_settings
from ...utils import results
from ..base import Operation


class ProcessImageOperation(Operation):
    """Recognize the text of an image and export it in the requested format."""

    outputs = [
        results.RETURN_RESULT, TASK_ID, CREDITS, RESULT_URL, results.STATUS_CODE,
        results.RETURN_CODE, results.EXCEPTION, FAILURE_MESSAGE, TIMED_OUT, RESPONSE_HEADERS,
    ]

    def __init__(self, service: Optional[AbbyyService] = None):
        self.service = service or AbbyyService()
        settings = get_settings()
        self.inputs = [
            InputDefinition("locationId", required=True,
                            description="Processing location. Valid values: cloud-eu, cloud-westus."),
            InputDefinition("applicationId", required=True),
            InputDefinition("password", required=True, encrypted=True),
            InputDefinition("timeToWait", default=str(settings.abbyy_time_to_wait),
                            description="Seconds to wait between two task status checks."),
            InputDefinition("numberOfRetries", default=str(settings.abbyy_number_of_retries),
                            description="How many times the task status is checked."),
            *http_input_definitions(),
            InputDefinition("destinationFile", description="File where the recognition result is saved."),
            InputDefinition("sourceFile", required=True, description="Path of the image to recognize."),
            InputDefinition("chunkedRequestEntity", default="false"),
            InputDefinition("language", default="English"),
            InputDefinition("profile", default="documentConversion"),
            InputDefinition("textType", default="normal"),
            InputDefinition("imageSource", default="auto"),
            InputDefinition("correctOrientation", default="true"),
            InputDefinition("correctSkew", default="true"),
            InputDefinition("readBarcodes",
                            description="Defaults to true when exportFormat is xml, false otherwise."),
            InputDefinition("exportFormat", default="xml", description="Up to three formats, comma separated."),
            InputDefinition("writeFormatting", default="false"),
            InputDefinition("writeRecognitionVariants", default="false"),
            InputDefinition("writeTags", default="auto"),
            InputDefinition("description"),
            InputDefinition("pdfPassword", encrypted=True),
        ]

    @property
    def name(self) -> str:
        return "process_image"

    @property
    def display_name(self) -> str:
        return "Process Image"

    @property
    def description(self) -> str:
        return "Converts a given image to text in the specified output format using the ABBYY Cloud OCR SDK."

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        settings = get_settings()
        request = ProcessImageInput.from_inputs(
            inputs,
            parse_http_settings(inputs),
            default_time_to_wait=settings.abbyy_time_to_wait,
            default_number_of_retries=settings.abbyy_number_of_retries,
        )
        return self.service.process_image(request)
