"""Mail store access, message parsing, S/MIME decryption and SMTP sending."""

from .reader import MailReader
from .sender import MailSender

__all__ = ["MailReader", "MailSender"]
