"""Form submission lifecycle."""

from .service import (
    DEGRADED_MESSAGE,
    REJECTED_MESSAGE,
    SUCCESS_MESSAGE,
    SubmissionOrchestrator,
)
from .state import SubmissionStateMachine

__all__ = [
    "DEGRADED_MESSAGE",
    "REJECTED_MESSAGE",
    "SUCCESS_MESSAGE",
    "SubmissionOrchestrator",
    "SubmissionStateMachine",
]
