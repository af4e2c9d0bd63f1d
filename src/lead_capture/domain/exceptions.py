"""Exception hierarchy for the lead capture pipeline."""

from typing import Any

from .models import ErrorCode, FieldError, SubmissionState


class LeadCaptureException(Exception):
    """Base exception for the lead capture pipeline."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: dict[str, Any] | None = None,
        correlation_id: str | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}
        self.correlation_id = correlation_id


class FormValidationException(LeadCaptureException):
    """Form input failed field-level checks."""

    def __init__(self, field_errors: list[FieldError]):
        super().__init__(
            "Form validation failed",
            ErrorCode.VALIDATION_ERROR,
            {"fields": [error.field for error in field_errors]},
        )
        self.field_errors = field_errors


class QueueIOError(LeadCaptureException):
    """The local durable store could not be read or written."""

    def __init__(self, message: str, key: str, operation: str):
        super().__init__(
            message,
            ErrorCode.QUEUE_IO_ERROR,
            {"key": key, "operation": operation},
        )
        self.key = key
        self.operation = operation


class InvalidTransitionException(LeadCaptureException):
    """A submission state machine was driven along an undefined edge."""

    def __init__(self, current: SubmissionState, target: SubmissionState):
        super().__init__(
            f"Invalid submission transition: {current.value} -> {target.value}",
            ErrorCode.INVALID_TRANSITION,
            {"current": current.value, "target": target.value},
        )
        self.current = current
        self.target = target
