"""Common types and enums shared across all models."""

from enum import Enum
from typing import Literal

FieldType = Literal["text", "textarea", "date"]


class DocType(str, Enum):
    """Document kinds offered by the template catalog."""

    RESIGNATION = "Resignation Letter"
    BANK_COMPLAINT = "Bank Complaint"
    POLICE_COMPLAINT = "Police Complaint"
    COLLEGE_APP = "College Application"
    OFFICE_APOLOGY = "Office Apology"
    LEAVE_LETTER = "Leave Letter"


class OperationStatus(str, Enum):
    """Status of a single pending-capable operation (generation, auth, claim)."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Page(str, Enum):
    """Front-end page currently displayed."""

    HOME = "home"
    FORM = "form"
    RECORDS = "records"
    AUTH = "auth"
