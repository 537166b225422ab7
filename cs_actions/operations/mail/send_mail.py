"""Send Mail action - sends a message over SMTP."""

from typing import Dict, Optional

from ...models import mail
from ...models.mail import SendMailInput
from ...models.schemas import InputDefinition
from ...services.mail import MailSender
from ..base import Operation
from .base import proxy_input_definitions


class SendMailOperation(Operation):
    """Send an HTML or plain text mail with optional attachments."""

    def __init__(self, sender: Optional[MailSender] = None):
        self.sender = sender or MailSender()
        self.inputs = [
            InputDefinition(mail.HOSTNAME, required=True),
            InputDefinition(mail.PORT, default=str(mail.SMTP_PORT)),
            InputDefinition(mail.FROM, required=True),
            InputDefinition(mail.TO, required=True),
            InputDefinition(mail.CC),
            InputDefinition(mail.BCC),
            InputDefinition(mail.SUBJECT),
            InputDefinition(mail.BODY),
            InputDefinition(mail.HTML_EMAIL, default="true"),
            InputDefinition(mail.READ_RECEIPT, default="false"),
            InputDefinition(mail.ATTACHMENTS, description="Paths of the files to attach."),
            InputDefinition(mail.DELIMITER, default=","),
            InputDefinition(mail.USERNAME),
            InputDefinition(mail.PASSWORD, encrypted=True),
            InputDefinition(mail.CHARACTER_SET, default="UTF-8"),
            InputDefinition(mail.CONTENT_TRANSFER_ENCODING, default="base64"),
            InputDefinition(mail.ENABLE_TLS, default="false"),
            InputDefinition(mail.TRUST_ALL_ROOTS, default="true"),
            InputDefinition(mail.TRUST_KEYSTORE),
            InputDefinition(mail.KEYSTORE),
            InputDefinition(mail.KEYSTORE_PASSWORD, encrypted=True),
            InputDefinition(mail.TIMEOUT),
            InputDefinition(mail.HEADERS, description="Extra headers, one Name:Value per line."),
            *proxy_input_definitions(),
        ]

    @property
    def name(self) -> str:
        return "send_mail"

    @property
    def display_name(self) -> str:
        return "Send Mail"

    @property
    def description(self) -> str:
        return "Sends an email through an SMTP server."

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        return self.sender.send(SendMailInput.from_inputs(inputs))
