# =============================================================================
# core/services/submission_state.py - Form Submission State Machine
# =============================================================================
#   Idle -> Submitting -> Succeeded -> (after display interval) -> Idle
#                      -> Failed    -> (edit or resubmit)       -> Idle/Submitting
#
# Only one submission can be in flight: begin() while Submitting is a no-op.
# =============================================================================

import logging
import time
from enum import Enum
from typing import Awaitable, Callable

from lib.intake_client import SubmissionResult

logger = logging.getLogger(__name__)

SUCCESS_DISPLAY_SECONDS = 5.0


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmissionStateMachine:
    """
    Tracks one form's submission lifecycle.

    Example:
        machine = SubmissionStateMachine()
        result = await machine.run(lambda: client.submit_application(form))
        if result is None:
            ...  # a submission was already in flight
    """

    def __init__(
        self,
        display_seconds: float = SUCCESS_DISPLAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.display_seconds = display_seconds
        self._clock = clock
        self._state = SubmissionState.IDLE
        self._succeeded_at: float | None = None
        self.identifier: str | None = None
        self.error_message: str | None = None

    @property
    def state(self) -> SubmissionState:
        if (
            self._state is SubmissionState.SUCCEEDED
            and self._succeeded_at is not None
            and self._clock() - self._succeeded_at >= self.display_seconds
        ):
            self._reset()
        return self._state

    def begin(self) -> bool:
        """
        Enter Submitting. Returns False (and changes nothing) unless the
        form is Idle or Failed.
        """
        if self.state not in (SubmissionState.IDLE, SubmissionState.FAILED):
            logger.debug(f"Ignoring submit while {self._state.value}")
            return False
        self._state = SubmissionState.SUBMITTING
        self.error_message = None
        return True

    def succeed(self, identifier: str | None) -> None:
        self._require(SubmissionState.SUBMITTING)
        self._state = SubmissionState.SUCCEEDED
        self._succeeded_at = self._clock()
        self.identifier = identifier

    def fail(self, message: str) -> None:
        self._require(SubmissionState.SUBMITTING)
        self._state = SubmissionState.FAILED
        self.error_message = message

    def edit(self) -> None:
        """The user changed a field: a shown error is cleared."""
        if self._state is SubmissionState.FAILED:
            self._reset()

    async def run(
        self,
        submit: Callable[[], Awaitable[SubmissionResult]],
    ) -> SubmissionResult | None:
        """
        Drive one submission through the machine.

        Returns:
            The SubmissionResult, or None if the submit was ignored
        """
        if not self.begin():
            return None
        try:
            result = await submit()
        except Exception as e:
            self.fail(str(e) or "Hubo un error inesperado al enviar el formulario.")
            raise
        if result.success:
            self.succeed(result.id)
        else:
            self.fail(result.message)
        return result

    def _require(self, expected: SubmissionState) -> None:
        if self._state is not expected:
            raise RuntimeError(f"Invalid transition from {self._state.value}")

    def _reset(self) -> None:
        self._state = SubmissionState.IDLE
        self._succeeded_at = None
        self.identifier = None
        self.error_message = None
