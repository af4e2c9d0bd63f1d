"""Classification of remote operation failures."""

import asyncio

from lead_capture.domain.models import RemoteErrorKind

from ..exceptions import RemoteServiceException


class ErrorClassifier:
    """Maps exceptions to a RemoteErrorKind.

    Exceptions that already carry a kind keep it. Anything else is matched
    against message patterns, and whatever matches nothing is transient.
    """

    PERMANENT_PATTERNS = {
        # Duplicate / conflict
        "duplicate": RemoteErrorKind.DUPLICATE,
        "already exists": RemoteErrorKind.DUPLICATE,
        "unique constraint": RemoteErrorKind.DUPLICATE,
        "conflict": RemoteErrorKind.DUPLICATE,
        "23505": RemoteErrorKind.DUPLICATE,
        # Validation
        "validation": RemoteErrorKind.VALIDATION,
        "invalid input": RemoteErrorKind.VALIDATION,
        "violates check constraint": RemoteErrorKind.VALIDATION,
        "not-null constraint": RemoteErrorKind.VALIDATION,
        # Authorization
        "auth": RemoteErrorKind.AUTHORIZATION,
        "permission": RemoteErrorKind.AUTHORIZATION,
        "forbidden": RemoteErrorKind.AUTHORIZATION,
        "row-level security": RemoteErrorKind.AUTHORIZATION,
        "jwt": RemoteErrorKind.AUTHORIZATION,
    }

    def __init__(self, extra_patterns: dict[str, RemoteErrorKind] | None = None):
        self.patterns = dict(self.PERMANENT_PATTERNS)
        if extra_patterns:
            self.patterns.update(extra_patterns)

    def classify(self, error: BaseException) -> RemoteErrorKind:
        """Classify an exception raised by a remote operation."""
        if isinstance(error, RemoteServiceException):
            return error.kind

        if isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
            return RemoteErrorKind.TRANSIENT

        message = str(error).lower()
        for pattern, kind in self.patterns.items():
            if pattern in message:
                return kind

        return RemoteErrorKind.TRANSIENT

    def is_transient(self, error: BaseException) -> bool:
        """Whether a retry could plausibly succeed."""
        if not isinstance(error, Exception):
            return False
        return self.classify(error) is RemoteErrorKind.TRANSIENT
