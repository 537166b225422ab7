"""Sending mail over SMTP."""

import mimetypes
import os
import smtplib
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Callable, Dict

import structlog

from ...exceptions import ValidationError
from ...models.mail import ATTACHMENTS, SendMailInput
from ...utils import results
from ...utils.tls import build_ssl_context
from .proxy import ProxiedSMTP

logger = structlog.get_logger(__name__)

SENT_MAIL_SUCCESSFULLY = "SentMailSuccessfully"


def build_message(request: SendMailInput) -> EmailMessage:
    """Build the MIME message, attachments included."""
    message = EmailMessage()
    message["From"] = request.sender
    message["To"] = ", ".join(request.to)
    if request.cc:
        message["Cc"] = ", ".join(request.cc)
    message["Subject"] = request.subject
    message["Date"] = formatdate(localtime=True)
    message["Message-ID"] = make_msgid()
    if request.read_receipt:
        message["Disposition-Notification-To"] = request.sender
    for name, value in request.headers.items():
        message[name] = value

    message.set_content(
        request.body,
        subtype="html" if request.html_email else "plain",
        charset=request.character_set,
        cte=request.content_transfer_encoding.lower(),
    )

    for path in request.attachments:
        if not os.path.isfile(path):
            raise ValidationError(f"The attachment {path} does not exist.", field=ATTACHMENTS)
        content_type, _ = mimetypes.guess_type(path)
        maintype, subtype = (content_type or "application/octet-stream").split("/", 1)
        with open(path, "rb") as attachment:
            message.add_attachment(
                attachment.read(), maintype=maintype, subtype=subtype, filename=os.path.basename(path)
            )
    return message


def _connect(request: SendMailInput) -> smtplib.SMTP:
    if request.proxy:
        return ProxiedSMTP(request.hostname, request.port, request.proxy, timeout=request.timeout)
    return smtplib.SMTP(request.hostname, request.port, timeout=request.timeout)


class MailSender:
    """Service behind the Send Mail action."""

    def __init__(self, connect: Callable[[SendMailInput], smtplib.SMTP] = _connect):
        self._connect = connect

    def send(self, request: SendMailInput) -> Dict[str, str]:
        message = build_message(request)
        recipients = request.to + request.cc + request.bcc

        logger.info("Sending mail", host=request.hostname, port=request.port, recipients=len(recipients))
        client = self._connect(request)
        try:
            if request.enable_tls:
                client.starttls(context=build_ssl_context(request.tls))
            if request.username:
                client.login(request.username, request.password or "")
            client.send_message(message, from_addr=request.sender, to_addrs=recipients)
        finally:
            try:
                client.quit()
            except smtplib.SMTPException as e:
                logger.warning("Error while closing SMTP connection", error=str(e))

        return results.success(SENT_MAIL_SUCCESSFULLY)
