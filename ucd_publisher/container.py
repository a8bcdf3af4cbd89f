#ucd_publisher\container.py

"""Dependency injection container - wires all services for one site together."""

import threading
from dataclasses import dataclass
from typing import Mapping, Optional

from ucd_publisher.client.application_client import ApplicationClient
from ucd_publisher.client.artifact_client import ArtifactClient
from ucd_publisher.client.component_client import ComponentClient
from ucd_publisher.client.property_client import PropertyClient
from ucd_publisher.client.version_client import VersionClient
from ucd_publisher.config.sites import PollConfig, Site
from ucd_publisher.publisher import Publisher

from ucd_publisher.workflows.components import ComponentProvisioner
from ucd_publisher.workflows.deployment import DeploymentRunner
from ucd_publisher.workflows.poller import DeploymentPoller
from ucd_publisher.workflows.processes import ProcessCreator
from ucd_publisher.workflows.properties import PropertyReconciler
from ucd_publisher.workflows.versions import VersionPublisher


@dataclass
class Services:
    version_publisher: VersionPublisher
    deployment_runner: DeploymentRunner
    publisher: Publisher


def build_services(
    site: Site,
    env: Mapping[str, str],
    poll: Optional[PollConfig] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Services:
    poll = poll or PollConfig()
    http = site.client

    # ============================================
    # CLIENTS
    # ============================================

    component_client = ComponentClient(http)
    version_client = VersionClient(http)
    property_client = PropertyClient(http)
    application_client = ApplicationClient(http)
    artifact_client = ArtifactClient(http, component_client, site.user)

    # ============================================
    # VERSIONS
    # ============================================

    version_publisher = VersionPublisher(
        version_client=version_client,
        component_client=component_client,
        artifact_client=artifact_client,
        reconciler=PropertyReconciler(component_client, property_client, version_client),
        provisioner=ComponentProvisioner(component_client, application_client, env),
        env=env,
        cancel_event=cancel_event,
    )

    # ============================================
    # DEPLOYMENT
    # ============================================

    poller = DeploymentPoller(
        application_client,
        interval_seconds=poll.interval_seconds,
        timeout_seconds=poll.timeout_seconds,
        max_attempts=poll.max_attempts,
        cancel_event=cancel_event,
    )

    deployment_runner = DeploymentRunner(
        application_client,
        ProcessCreator(application_client),
        poller,
        env,
    )

    return Services(
        version_publisher=version_publisher,
        deployment_runner=deployment_runner,
        publisher=Publisher(version_publisher, deployment_runner, cancel_event),
    )
