# ucd_publisher/workflows/deployment.py
"""Deployment request workflow - submit one application process request and wait for it."""

import logging
from typing import Mapping

from ucd_publisher.core.errors import DeploymentProcessError
from ucd_publisher.core.models import (
    DeploymentOutcome,
    DeploymentRequest,
    DeploymentState,
    SnapshotSelection,
)
from ucd_publisher.core.parsing import expand_vars, parse_deploy_versions
from ucd_publisher.core.schemas import DeployBlock
from ucd_publisher.core.validation import validate_deploy_target

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Requested by UCD Publisher"


class DeploymentRunner:
    """
    Runs a deploy block.

    Flow:
    1. Validate application/environment/process and parse the versions field
    2. Create the application process first when asked to
    3. Submit exactly one request
    4. Poll until terminal
    5. FAULTED / FAILED TO START raise DeploymentProcessError, any other result completes
    """

    def __init__(
        self,
        application_client,
        process_creator,
        poller,
        env: Mapping[str, str],
        description: str = DEFAULT_DESCRIPTION,
    ):
        self._applications = application_client
        self._processes = process_creator
        self._poller = poller
        self._env = env
        self._description = description

    def deploy(self, block: DeployBlock) -> DeploymentOutcome:
        application = expand_vars(block.deploy_app, self._env).strip()
        environment = expand_vars(block.deploy_env, self._env).strip()
        process = expand_vars(block.deploy_proc, self._env).strip()

        validate_deploy_target(application, environment, process)
        selection = parse_deploy_versions(expand_vars(block.deploy_versions, self._env))

        if block.create_process is not None:
            self._processes.ensure_process(
                application,
                process,
                expand_vars(block.create_process.process_component, self._env).strip(),
            )

        if isinstance(selection, SnapshotSelection):
            logger.info(f"[deploy] Deploying SNAPSHOT '{selection.name}'")
        else:
            logger.info(f"[deploy] Deploying component versions {selection.versions}")

        logger.info(
            f"[deploy] Starting deployment process '{process}' of application '{application}' "
            f"in environment '{environment}'"
        )

        request_id = self._applications.request_application_process(
            application,
            process,
            self._description,
            environment,
            selection,
            block.deploy_only_changed,
        )

        logger.info(f"[deploy] Deployment request id is: '{request_id}'")
        logger.info("[deploy] Deployment is running. Waiting for server feedback.")

        request = DeploymentRequest(
            request_id=request_id,
            application=application,
            process=process,
            environment=environment,
            selection=selection,
            only_changed=block.deploy_only_changed,
        )

        self._poller.wait_for(request)

        duration = request.duration_seconds()
        logger.info(f"[deploy] Finished the deployment in {int(duration)} seconds")

        if request.state in (DeploymentState.FAULTED, DeploymentState.FAILED_TO_START):
            logger.error(f"[deploy] ❌ Deployment process failed with result {request.result}")
            raise DeploymentProcessError(
                f"Deployment process failed with result {request.result}",
                request_id=request_id,
                result=request.result,
            )

        logger.info(
            f"[deploy] ✅ The deployment result is {request.result}. "
            f"See the deployment server logs for details."
        )

        return DeploymentOutcome(
            request_id=request_id,
            state=request.state,
            result=request.result or "",
            duration_seconds=duration,
            poll_count=request.poll_count,
        )
