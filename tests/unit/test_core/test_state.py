"""Tests for the submission state machine."""

import pytest

from lead_capture.core.submissions import SubmissionStateMachine
from lead_capture.domain.exceptions import InvalidTransitionException
from lead_capture.domain.models import SubmissionState


class TestSubmissionStateMachine:
    def test_starts_idle(self):
        machine = SubmissionStateMachine()

        assert machine.state == SubmissionState.IDLE
        assert machine.history == [SubmissionState.IDLE]
        assert machine.is_terminal is False

    @pytest.mark.parametrize(
        "path",
        [
            [SubmissionState.VALIDATING, SubmissionState.SUBMITTING, SubmissionState.SUCCESS],
            [
                SubmissionState.VALIDATING,
                SubmissionState.SUBMITTING,
                SubmissionState.DEGRADED_SUCCESS,
            ],
            [
                SubmissionState.VALIDATING,
                SubmissionState.REJECTED_INPUT,
                SubmissionState.IDLE,
                SubmissionState.VALIDATING,
            ],
        ],
    )
    def test_valid_paths(self, path):
        machine = SubmissionStateMachine()
        for state in path:
            machine.transition(state)

        assert machine.state == path[-1]
        assert machine.history == [SubmissionState.IDLE, *path]

    def test_terminal_states(self):
        machine = SubmissionStateMachine()
        machine.transition(SubmissionState.VALIDATING)
        machine.transition(SubmissionState.SUBMITTING)
        machine.transition(SubmissionState.DEGRADED_SUCCESS)

        assert machine.is_terminal is True
        with pytest.raises(InvalidTransitionException):
            machine.transition(SubmissionState.IDLE)

    def test_cannot_skip_validation(self):
        machine = SubmissionStateMachine()

        with pytest.raises(InvalidTransitionException) as exc_info:
            machine.transition(SubmissionState.SUBMITTING)

        assert exc_info.value.current == SubmissionState.IDLE
        assert exc_info.value.target == SubmissionState.SUBMITTING
        assert machine.history == [SubmissionState.IDLE]
