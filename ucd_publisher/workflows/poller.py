#ucd_publisher\workflows\poller.py
"""Polls a deployment request until it reaches a terminal result."""

import logging
import threading
import time
from typing import Callable, Optional
from uuid import UUID

from ucd_publisher.core.errors import DeploymentCancelledError, DeploymentTimeoutError
from ucd_publisher.core.models import DeploymentRequest, DeploymentState
from ucd_publisher.core.state_machine import (
    FAULTED_RESULT,
    DeploymentStateMachine,
    classify_result,
)

logger = logging.getLogger(__name__)

NO_RESULT = "NONE"


class DeploymentPoller:
    """
    Fixed-interval poller for process request status.

    Bounded by timeout_seconds and/or max_attempts when set; both unset
    means poll until the server reports a result. The wait before the last
    poll is shortened so that poll happens at the timeout. Setting
    cancel_event stops the wait between polls.
    """

    def __init__(
        self,
        application_client,
        *,
        interval_seconds: float = 3.0,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._applications = application_client
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self._clock = clock

    def check(self, request_id: UUID) -> Optional[str]:
        """
        Poll once.

        Returns:
            The terminal result, or None while the process is still running
        """
        status = self._applications.get_request_status(request_id)

        if status is None:
            # malformed body
            return FAULTED_RESULT

        state = (status.status or "").strip()
        result = (status.result or "").strip()

        if state.lower() == "closed" or state.lower() == "faulted" or result.lower() == "faulted":
            if not result:
                return FAULTED_RESULT
            if result.upper() == NO_RESULT:
                return None
            return result

        return None

    def wait_for(self, request: DeploymentRequest) -> DeploymentRequest:
        """Poll until terminal. The request is updated in place and returned."""
        started = self._clock()

        while True:
            request.poll_count += 1
            result = self.check(request.request_id)

            if result is not None:
                request.result = result
                DeploymentStateMachine.transition(request, classify_result(result))
                logger.info(
                    f"[deploy] Request {request.request_id} finished with result {result} "
                    f"after {request.poll_count} poll(s)"
                )
                return request

            if request.state == DeploymentState.REQUESTED:
                DeploymentStateMachine.transition(request, DeploymentState.RUNNING)

            if self.max_attempts is not None and request.poll_count >= self.max_attempts:
                DeploymentStateMachine.transition(request, DeploymentState.TIMED_OUT)
                raise DeploymentTimeoutError(
                    f"Deployment request {request.request_id} still running after "
                    f"{request.poll_count} status checks",
                    request_id=request.request_id,
                )

            wait_seconds = self.interval_seconds

            if self.timeout_seconds is not None:
                elapsed = self._clock() - started
                remaining = self.timeout_seconds - elapsed
                if remaining <= 0:
                    DeploymentStateMachine.transition(request, DeploymentState.TIMED_OUT)
                    raise DeploymentTimeoutError(
                        f"Deployment request {request.request_id} still running after {int(elapsed)}s "
                        f"(limit {self.timeout_seconds}s)",
                        request_id=request.request_id,
                    )
                # last poll lands on the deadline
                wait_seconds = min(wait_seconds, remaining)

            logger.debug(f"[deploy] Request {request.request_id} still running (poll {request.poll_count})")

            # give the application process more time to complete
            if self._cancel.wait(wait_seconds):
                DeploymentStateMachine.transition(request, DeploymentState.CANCELLED)
                raise DeploymentCancelledError(
                    f"Stopped waiting for deployment request {request.request_id}",
                    request_id=request.request_id,
                )
