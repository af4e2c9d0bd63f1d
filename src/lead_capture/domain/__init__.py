"""Domain layer for the lead capture pipeline.

This module contains the submission records, queue entries, health state and
the exception hierarchy shared by every other layer.
"""

from .exceptions import (
    FormValidationException,
    InvalidTransitionException,
    LeadCaptureException,
    QueueIOError,
)
from .models import (
    ContactForm,
    ErrorCode,
    FieldError,
    HealthState,
    InsertResult,
    QueueEntry,
    ReconciliationReport,
    RemoteErrorKind,
    RetryResult,
    SubmissionOutcome,
    SubmissionRecord,
    SubmissionSource,
    SubmissionState,
    SubmissionStatus,
)
from .validation import ContactFormValidator, FormValidator

__all__ = [
    "ContactForm",
    "ContactFormValidator",
    "ErrorCode",
    "FieldError",
    "FormValidationException",
    "FormValidator",
    "HealthState",
    "InsertResult",
    "InvalidTransitionException",
    "LeadCaptureException",
    "QueueEntry",
    "QueueIOError",
    "ReconciliationReport",
    "RemoteErrorKind",
    "RetryResult",
    "SubmissionOutcome",
    "SubmissionRecord",
    "SubmissionSource",
    "SubmissionState",
    "SubmissionStatus",
]
