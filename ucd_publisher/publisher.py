# ucd_publisher/publisher.py
"""Top level publisher - component versions first, then the optional deployment."""

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from ucd_publisher.core.errors import PublishCancelledError
from ucd_publisher.core.models import ComponentPublishResult, DeploymentOutcome
from ucd_publisher.core.schemas import PublisherJob

logger = logging.getLogger(__name__)


@dataclass
class PublishReport:
    components: List[ComponentPublishResult] = field(default_factory=list)
    deployment: Optional[DeploymentOutcome] = None

    @property
    def failures(self) -> List[ComponentPublishResult]:
        return [r for r in self.components if not r.succeeded]


class Publisher:
    def __init__(self, version_publisher, deployment_runner, cancel_event: Optional[threading.Event] = None):
        self._versions = version_publisher
        self._deployments = deployment_runner
        self._cancel = cancel_event

    def run(self, job: PublisherJob, build_name: str = "", build_url: str = "") -> PublishReport:
        """
        Run a publisher job.

        Args:
            job: Validated job
            build_name: Name of the calling build, used in the version link name
            build_url: URL of the calling build, used as the version link target

        Returns:
            PublishReport with per-component results and the deployment outcome

        Raises:
            PublisherError: The first component failure, or any deployment failure
            PublishCancelledError: cancel_event was set before the deployment was requested
        """
        link_name = f"{job.link_prefix} {build_name}".strip() if build_name else ""
        report = PublishReport()

        if job.components:
            logger.info(f"[publisher] Publishing {len(job.components)} component version block(s)")
            report.components = self._versions.publish_all(job.components, link_name, build_url)

            for result in report.components:
                logger.info(f"[publisher] {result.component}: {result.status.value}")

            failed = [r for r in report.failures if r.error is not None]
            if failed:
                logger.error(f"[publisher] ❌ Component '{failed[0].component}' failed, skipping deployment")
                raise failed[0].error

        self._check_cancelled()

        if job.deploy is not None:
            report.deployment = self._deployments.deploy(job.deploy)

        logger.info("[publisher] ✅ Job finished")
        return report

    def _check_cancelled(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            logger.error("[publisher] 🛑 Cancelled, no deployment requested")
            raise PublishCancelledError("Publisher run was cancelled")
