"""Get Mail Message action - reads one message from an IMAP or POP3 folder."""

from typing import Dict, Optional

from ...models import mail
from ...models.mail import GetMailMessageInput
from ...models.schemas import InputDefinition
from ...services.mail import MailReader
from ...services.mail.reader import ATTACHED_FILE_NAMES, BODY, PLAIN_TEXT_BODY, SUBJECT
from ...utils import results
from ..base import Operation
from .base import store_input_definitions


class GetMailMessageOperation(Operation):
    """
    Retrieve a message by its number in a folder.

    Messages are numbered from 1. Reading a message does not mark it as
    read unless ``markMessageAsRead`` is set.
    """

    outputs = [
        results.RETURN_RESULT, SUBJECT, ATTACHED_FILE_NAMES, BODY, PLAIN_TEXT_BODY,
        results.RETURN_CODE, results.EXCEPTION,
    ]

    def __init__(self, reader: Optional[MailReader] = None):
        self.reader = reader or MailReader()
        self.inputs = [
            *store_input_definitions(),
            InputDefinition(mail.MESSAGE_NUMBER, required=True),
            InputDefinition(mail.SUBJECT_ONLY, default="false"),
            InputDefinition(mail.CHARACTER_SET, description="Forces the charset of headers and bodies."),
            InputDefinition(mail.DELETE_UPON_RETRIEVAL, default="false"),
            InputDefinition(mail.MARK_MESSAGE_AS_READ, default="false"),
            InputDefinition(mail.DECRYPTION_KEYSTORE, description="PKCS#12 file path or http(s) URL."),
            InputDefinition(mail.DECRYPTION_KEY_ALIAS),
            InputDefinition(mail.DECRYPTION_KEYSTORE_PASSWORD, encrypted=True),
            InputDefinition(mail.VERIFY_CERTIFICATE, default="false"),
        ]

    @property
    def name(self) -> str:
        return "get_mail_message"

    @property
    def display_name(self) -> str:
        return "Get Mail Message"

    @property
    def description(self) -> str:
        return "Retrieves a message from a mail server using IMAP4 or POP3."

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        return self.reader.get_message(GetMailMessageInput.from_inputs(inputs))
