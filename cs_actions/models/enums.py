"""Enumerations shared by all actions."""

from enum import Enum


class ResponseName(Enum):
    """Workflow branch selected from an action result."""
    SUCCESS = "success"
    FAILURE = "failure"


class ReturnCode(Enum):
    """Values of the returnCode output."""
    SUCCESS = "0"
    FAILURE = "-1"


class HostnameVerifier(Enum):
    """How the server hostname is matched against its X.509 certificate."""
    STRICT = "strict"
    BROWSER_COMPATIBLE = "browser_compatible"
    ALLOW_ALL = "allow_all"


class MailProtocol(Enum):
    """Mail retrieval protocols."""
    IMAP = "imap"
    POP3 = "pop3"


class AbbyyTaskStatus(Enum):
    """Processing task states reported by the ABBYY Cloud OCR SDK."""
    SUBMITTED = "Submitted"
    QUEUED = "Queued"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    PROCESSING_FAILED = "ProcessingFailed"
    DELETED = "Deleted"
    NOT_ENOUGH_CREDITS = "NotEnoughCredits"

    @property
    def is_final(self) -> bool:
        return self in (
            AbbyyTaskStatus.COMPLETED,
            AbbyyTaskStatus.PROCESSING_FAILED,
            AbbyyTaskStatus.DELETED,
            AbbyyTaskStatus.NOT_ENOUGH_CREDITS,
        )


class VmPowerState(Enum):
    """Power states of a vSphere virtual machine."""
    POWERED_ON = "POWERED_ON"
    POWERED_OFF = "POWERED_OFF"
    SUSPENDED = "SUSPENDED"
