"""Lifecycle of a single form submission."""

from lead_capture.domain.exceptions import InvalidTransitionException
from lead_capture.domain.models import SubmissionState

TRANSITIONS: dict[SubmissionState, frozenset[SubmissionState]] = {
    SubmissionState.IDLE: frozenset({SubmissionState.VALIDATING}),
    SubmissionState.VALIDATING: frozenset(
        {SubmissionState.REJECTED_INPUT, SubmissionState.SUBMITTING}
    ),
    SubmissionState.REJECTED_INPUT: frozenset({SubmissionState.IDLE}),
    SubmissionState.SUBMITTING: frozenset(
        {SubmissionState.SUCCESS, SubmissionState.DEGRADED_SUCCESS}
    ),
    SubmissionState.SUCCESS: frozenset(),
    SubmissionState.DEGRADED_SUCCESS: frozenset(),
}


class SubmissionStateMachine:
    """Tracks the current state and every state visited."""

    def __init__(self) -> None:
        self.state = SubmissionState.IDLE
        self.history: list[SubmissionState] = [SubmissionState.IDLE]

    def transition(self, target: SubmissionState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransitionException(self.state, target)
        self.state = target
        self.history.append(target)

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self.state]
