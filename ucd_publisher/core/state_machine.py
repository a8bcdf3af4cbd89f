#ucd_publisher\core\state_machine.py

from datetime import datetime, timezone

from ucd_publisher.core.errors import InvalidStateTransition
from ucd_publisher.core.models import DeploymentRequest, DeploymentState, TERMINAL_STATES


ALLOWED_TRANSITIONS = {
    DeploymentState.REQUESTED: {
        DeploymentState.RUNNING,
        DeploymentState.SUCCEEDED,
        DeploymentState.FAULTED,
        DeploymentState.FAILED_TO_START,
        DeploymentState.CANCELLED,
        DeploymentState.TIMED_OUT,
    },
    DeploymentState.RUNNING: {
        DeploymentState.SUCCEEDED,
        DeploymentState.FAULTED,
        DeploymentState.FAILED_TO_START,
        DeploymentState.CANCELLED,
        DeploymentState.TIMED_OUT,
    },
}

FAULTED_RESULT = "FAULTED"
FAILED_TO_START_RESULT = "FAILED TO START"


def classify_result(result: str) -> DeploymentState:
    """Map a terminal server result string onto a terminal state."""
    normalized = result.strip().upper()
    if normalized == FAULTED_RESULT:
        return DeploymentState.FAULTED
    if normalized == FAILED_TO_START_RESULT:
        return DeploymentState.FAILED_TO_START
    return DeploymentState.SUCCEEDED


class DeploymentStateMachine:
    @staticmethod
    def transition(
        request: DeploymentRequest,
        new_state: DeploymentState,
        *,
        now: datetime | None = None,
    ) -> DeploymentRequest:
        now = now or datetime.now(timezone.utc)

        current = request.state

        if current == new_state:
            return request

        allowed = ALLOWED_TRANSITIONS.get(current, set())
        if new_state not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {current.value} to {new_state.value}"
            )

        if new_state in TERMINAL_STATES:
            request.finished_at = now

        request.state = new_state
        return request
