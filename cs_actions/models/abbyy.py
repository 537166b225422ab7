"""Input model of the ABBYY Cloud OCR SDK actions."""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..exceptions import ValidationError
from ..utils.inputs import (
    default_if_empty,
    parse_bool,
    parse_int,
    parse_list,
    require,
    validate_choice,
)
from .schemas import HttpSettings

LOCATION_IDS = ["cloud-eu", "cloud-westus"]
PROFILES = ["documentConversion", "documentArchiving", "textExtraction", "barcodeRecognition"]
TEXT_TYPES = ["normal", "typewriter", "matrix", "index", "ocrA", "ocrB", "e13b", "cmc7", "gothic"]
IMAGE_SOURCES = ["auto", "photo", "scanner"]
EXPORT_FORMATS = [
    "txt", "txtUnstructured", "rtf", "docx", "xlsx", "pptx", "pdfSearchable",
    "pdfTextAndImages", "pdfa", "xml", "xmlForCorrectedImage", "alto",
]
XML_EXPORT_FORMATS = ["xml", "xmlForCorrectedImage"]
TEXT_EXPORT_FORMATS = ["txt", "txtUnstructured"]
PDF_EXPORT_FORMATS = ["pdfSearchable", "pdfTextAndImages", "pdfa"]
WRITE_TAGS = ["auto", "write", "dontWrite"]

MAX_EXPORT_FORMATS = 3
MAX_DESCRIPTION_LENGTH = 255


@dataclass
class ProcessImageInput:
    """Validated inputs of the Process Image action."""
    location_id: str
    application_id: str
    password: str
    source_file: str
    time_to_wait: int
    number_of_retries: int
    http: HttpSettings = field(default_factory=HttpSettings)
    destination_file: Optional[str] = None
    chunked_request_entity: bool = False
    language: List[str] = field(default_factory=lambda: ["English"])
    profile: str = "documentConversion"
    text_type: List[str] = field(default_factory=lambda: ["normal"])
    image_source: str = "auto"
    correct_orientation: bool = True
    correct_skew: bool = True
    read_barcodes: bool = True
    export_format: List[str] = field(default_factory=lambda: ["xml"])
    write_formatting: bool = False
    write_recognition_variants: bool = False
    write_tags: str = "auto"
    description: Optional[str] = None
    pdf_password: Optional[str] = None

    @property
    def is_text_export(self) -> bool:
        return self.export_format[0] in TEXT_EXPORT_FORMATS

    def query_params(self) -> Dict[str, str]:
        """Query string parameters of the processImage call."""
        params = {
            "language": ",".join(self.language),
            "profile": self.profile,
            "textType": ",".join(self.text_type),
            "imageSource": self.image_source,
            "correctOrientation": _flag(self.correct_orientation),
            "correctSkew": _flag(self.correct_skew),
            "readBarcodes": _flag(self.read_barcodes),
            "exportFormat": ",".join(self.export_format),
        }
        if any(fmt in XML_EXPORT_FORMATS for fmt in self.export_format):
            params["xml:writeFormatting"] = _flag(self.write_formatting)
            params["xml:writeRecognitionVariants"] = _flag(self.write_recognition_variants)
        if any(fmt in PDF_EXPORT_FORMATS for fmt in self.export_format):
            params["pdf:writeTags"] = self.write_tags
        if self.description:
            params["description"] = self.description
        if self.pdf_password:
            params["pdfPassword"] = self.pdf_password
        return params

    @classmethod
    def from_inputs(cls, inputs: Dict[str, Optional[str]], http: HttpSettings,
                    default_time_to_wait: int, default_number_of_retries: int) -> "ProcessImageInput":
        """
        Validate the raw action inputs.

        Raises:
            ValidationError: If any input is missing or has an invalid value
        """
        location_id = validate_choice(require(inputs.get("locationId"), "locationId"), "locationId", LOCATION_IDS)

        source_file = require(inputs.get("sourceFile"), "sourceFile")
        if not os.path.isfile(source_file):
            raise ValidationError(f"The source file '{source_file}' does not exist.", field="sourceFile")

        destination_file = default_if_empty(inputs.get("destinationFile"), None)
        if destination_file:
            parent = os.path.dirname(os.path.abspath(destination_file))
            if not os.path.isdir(parent):
                raise ValidationError(f"The directory of the destination file '{destination_file}' does not exist.",
                                      field="destinationFile")

        export_format = [
            validate_choice(fmt, "exportFormat", EXPORT_FORMATS)
            for fmt in parse_list(default_if_empty(inputs.get("exportFormat"), "xml"))
        ]
        if len(export_format) > MAX_EXPORT_FORMATS:
            raise ValidationError(f"At most {MAX_EXPORT_FORMATS} export formats can be requested.",
                                  field="exportFormat")
        has_xml_export = any(fmt in XML_EXPORT_FORMATS for fmt in export_format)

        write_formatting = parse_bool(inputs.get("writeFormatting"), "writeFormatting")
        write_recognition_variants = parse_bool(inputs.get("writeRecognitionVariants"), "writeRecognitionVariants")
        if (write_formatting or write_recognition_variants) and not has_xml_export:
            raise ValidationError("The writeFormatting and writeRecognitionVariants inputs can be used only "
                                  "with the 'xml' or 'xmlForCorrectedImage' export formats.",
                                  field="exportFormat")

        description = default_if_empty(inputs.get("description"), None)
        if description and len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(f"The description cannot contain more than {MAX_DESCRIPTION_LENGTH} characters.",
                                  field="description")

        return cls(
            location_id=location_id,
            application_id=require(inputs.get("applicationId"), "applicationId"),
            password=require(inputs.get("password"), "password"),
            source_file=source_file,
            time_to_wait=parse_int(inputs.get("timeToWait"), "timeToWait",
                                   default=default_time_to_wait, minimum=0),
            number_of_retries=parse_int(inputs.get("numberOfRetries"), "numberOfRetries",
                                        default=default_number_of_retries, minimum=1),
            http=http,
            destination_file=destination_file,
            chunked_request_entity=parse_bool(inputs.get("chunkedRequestEntity"), "chunkedRequestEntity"),
            language=parse_list(default_if_empty(inputs.get("language"), "English")),
            profile=validate_choice(default_if_empty(inputs.get("profile"), PROFILES[0]), "profile", PROFILES),
            text_type=[validate_choice(text_type, "textType", TEXT_TYPES)
                       for text_type in parse_list(default_if_empty(inputs.get("textType"), "normal"))],
            image_source=validate_choice(default_if_empty(inputs.get("imageSource"), "auto"),
                                         "imageSource", IMAGE_SOURCES),
            correct_orientation=parse_bool(inputs.get("correctOrientation"), "correctOrientation", default=True),
            correct_skew=parse_bool(inputs.get("correctSkew"), "correctSkew", default=True),
            read_barcodes=parse_bool(inputs.get("readBarcodes"), "readBarcodes", default=has_xml_export),
            export_format=export_format,
            write_formatting=write_formatting,
            write_recognition_variants=write_recognition_variants,
            write_tags=validate_choice(default_if_empty(inputs.get("writeTags"), "auto"), "writeTags", WRITE_TAGS),
            description=description,
            pdf_password=inputs.get("pdfPassword") or None,
        )


def _flag(value: bool) -> str:
    return "true" if value else "false"
