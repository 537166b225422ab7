"""Get Mail Message Count action."""

from typing import Dict, Optional

from ...models.mail import MailConnectionInput
from ...services.mail import MailReader
from ..base import Operation
from .base import store_input_definitions


class GetMailMessageCountOperation(Operation):
    def __init__(self, reader: Optional[MailReader] = None):
        self.reader = reader or MailReader()
        self.inputs = store_input_definitions()

    @property
    def name(self) -> str:
        return "get_mail_message_count"

    @property
    def display_name(self) -> str:
        return "Get Mail Message Count"

    @property
    def description(self) -> str:
        return "Returns the number of messages in a mail folder."

    def execute(self, inputs: Dict[str, Optional[str]]) -> Dict[str, str]:
        return self.reader.get_message_count(MailConnectionInput.from_inputs(inputs))
