"""Resilience-specific exceptions."""

from lead_capture.domain.exceptions import LeadCaptureException
from lead_capture.domain.models import ErrorCode, RemoteErrorKind


class RemoteServiceException(LeadCaptureException):
    """A remote operation failed with a known classification."""

    def __init__(
        self,
        message: str,
        kind: RemoteErrorKind,
        service_name: str = "remote",
        correlation_id: str | None = None,
    ):
        super().__init__(
            message,
            (
                ErrorCode.REMOTE_PERMANENT_ERROR
                if kind.is_permanent
                else ErrorCode.REMOTE_TRANSIENT_ERROR
            ),
            {"service_name": service_name, "kind": kind.value},
            correlation_id,
        )
        self.kind = kind
        self.service_name = service_name

    @property
    def is_retryable(self) -> bool:
        return not self.kind.is_permanent


class PermanentRemoteError(RemoteServiceException):
    """Duplicate, validation or authorization failure. Never retried."""

    def __init__(
        self,
        message: str,
        kind: RemoteErrorKind = RemoteErrorKind.VALIDATION,
        service_name: str = "remote",
        correlation_id: str | None = None,
    ):
        if not kind.is_permanent:
            raise ValueError("PermanentRemoteError requires a permanent error kind")
        super().__init__(message, kind, service_name, correlation_id)


class TransientRemoteError(RemoteServiceException):
    """Timeout, network or server-side failure. Retried with backoff."""

    def __init__(
        self,
        message: str,
        service_name: str = "remote",
        correlation_id: str | None = None,
    ):
        super().__init__(
            message, RemoteErrorKind.TRANSIENT, service_name, correlation_id
        )


def error_from_kind(message: str, kind: RemoteErrorKind) -> RemoteServiceException:
    """Build the matching exception for a failed InsertResult."""
    if kind.is_permanent:
        return PermanentRemoteError(message, kind)
    return TransientRemoteError(message)
