# ucd_publisher/workflows/versions.py
"""Version publication - create, upload, reconcile properties, link back to the build."""

import logging
import threading
from pathlib import Path
from typing import List, Mapping, Optional

from ucd_publisher.core.errors import (
    ArtifactUploadError,
    ConfigurationError,
    PublisherError,
    VersionPublishError,
)
from ucd_publisher.core.models import ComponentPublishResult, ComponentVersion, PublishStatus
from ucd_publisher.core.parsing import expand_vars, parse_properties
from ucd_publisher.core.patterns import collect_files, resolve_patterns
from ucd_publisher.core.schemas import PullDelivery, PushDelivery, VersionBlock
from ucd_publisher.core.validation import validate_component_name, validate_version_name

logger = logging.getLogger(__name__)


class VersionPublisher:
    """
    Publishes component versions.

    Push flow:
    1. Validate version name (before any server call)
    2. Check the base directory exists
    3. Create the version
    4. Upload files; on failure delete the version and re-raise
    5. Reconcile properties
    6. Add the build link

    Pull flow asks the server to import versions itself.
    """

    def __init__(
        self,
        *,
        version_client,
        component_client,
        artifact_client,
        reconciler,
        provisioner,
        env: Mapping[str, str],
        cancel_event: Optional[threading.Event] = None,
    ):
        self._versions = version_client
        self._components = component_client
        self._artifacts = artifact_client
        self._reconciler = reconciler
        self._provisioner = provisioner
        self._env = env
        self._cancel = cancel_event

    @property
    def cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    # -------------------------
    # MULTI-COMPONENT
    # -------------------------

    def publish_all(
        self,
        blocks: List[VersionBlock],
        link_name: str,
        link_url: str,
    ) -> List[ComponentPublishResult]:
        """
        Publish blocks one after another.

        The first failure stops the run. Versions published before it are
        kept; later blocks are reported as SKIPPED. Blocks not yet started
        when cancel_event is set are SKIPPED too.
        """
        results: List[ComponentPublishResult] = []
        failed = False

        for block in blocks:
            component = expand_vars(block.component_name, self._env)

            if failed or self.cancelled:
                results.append(ComponentPublishResult(component=component, status=PublishStatus.SKIPPED))
                continue

            try:
                version = self.publish(block, link_name, link_url)
            except PublisherError as e:
                logger.error(f"[{component}] ❌ Publication failed: {e}")
                results.append(ComponentPublishResult(component=component, status=PublishStatus.FAILED, error=e))
                failed = True
                continue

            status = PublishStatus.PUBLISHED if version is not None else PublishStatus.IMPORTED
            results.append(ComponentPublishResult(component=component, status=status, version=version))

        return results

    # -------------------------
    # SINGLE COMPONENT
    # -------------------------

    def publish(self, block: VersionBlock, link_name: str, link_url: str) -> Optional[ComponentVersion]:
        """
        Publish one version block.

        Returns:
            The created version for push delivery, None for pull delivery
        """
        component = expand_vars(block.component_name, self._env)
        validate_component_name(component)

        delivery = block.delivery

        if isinstance(delivery, PushDelivery):
            # validate everything that needs no server before touching it
            version = expand_vars(delivery.push_version, self._env)
            validate_version_name(version)
            work_dir = self._work_dir(delivery)
            properties = parse_properties(expand_vars(delivery.push_properties, self._env))
            includes, excludes = resolve_patterns(
                expand_vars(delivery.file_include_patterns, self._env),
                expand_vars(delivery.file_exclude_patterns, self._env),
                component,
            )

            if block.create_component is not None:
                self._provisioner.ensure_component(component, block.create_component, delivery)

            return self._push(
                component, version, work_dir, includes, excludes, delivery, properties, link_name, link_url
            )

        if isinstance(delivery, PullDelivery):
            if block.create_component is not None:
                self._provisioner.ensure_component(component, block.create_component, delivery)

            self.import_versions(component, parse_properties(expand_vars(delivery.pull_properties, self._env)))
            return None

        raise ConfigurationError(f"Invalid delivery type: {delivery!r}")

    def import_versions(self, component: str, properties: Mapping[str, str]) -> None:
        logger.info(f"[{component}] Importing versions using runtime properties {dict(properties)}")
        try:
            self._components.import_versions(component, dict(properties))
        except PublisherError as e:
            raise VersionPublishError(
                f"An error occurred while importing component versions on component '{component}': {e}"
            ) from e

    def _work_dir(self, delivery: PushDelivery) -> Path:
        base_dir = expand_vars(delivery.base_dir, self._env)
        if not base_dir:
            raise ConfigurationError("Base artifact directory is a required field.")

        base = Path(base_dir)
        if not base.exists():
            raise ConfigurationError(f"Base artifact directory {base.absolute()} does not exist")

        offset = expand_vars(delivery.directory_offset, self._env).strip()
        work_dir = base / offset if offset else base

        if not work_dir.is_dir():
            raise ConfigurationError(f"Working directory {work_dir.absolute()} does not exist")

        return work_dir

    def _push(
        self,
        component: str,
        version: str,
        work_dir: Path,
        includes: List[str],
        excludes: List[str],
        delivery: PushDelivery,
        properties: Mapping[str, str],
        link_name: str,
        link_url: str,
    ) -> ComponentVersion:
        description = expand_vars(delivery.push_description, self._env)
        version_type = "INCREMENTAL" if delivery.push_incremental else "FULL"

        logger.info(f"[{component}] Creating new component version '{version}'")
        try:
            version_id = self._versions.create_version(component, version, description, version_type)
        except PublisherError as e:
            raise VersionPublishError(
                f"Failed to create component version '{version}' on component '{component}': {e}"
            ) from e
        logger.info(f"[{component}] ✅ Created component version with UUID '{version_id}'")

        # upload files
        logger.info(f"[{component}] Working Directory: {work_dir}")
        logger.info(f"[{component}] Includes: {includes}")
        logger.info(f"[{component}] Excludes: {excludes}")

        try:
            entries = collect_files(work_dir, includes, excludes)
            self._artifacts.upload_version_files(component, version, work_dir, entries)
        except (PublisherError, OSError) as e:
            upload_error = ArtifactUploadError(
                f"Failed to upload files to version '{version}': {e}",
                version_id=version_id,
            )
            upload_error.compensation_error = self._delete_version(component, version_id)
            raise upload_error from e

        logger.info(f"[{component}] ✅ Uploaded {len(entries)} file(s) to version '{version}'")

        # properties and link: failures here keep the version and its files
        applied = self._reconciler.reconcile(component, version, properties)

        if link_name and link_url:
            logger.info(f"[{component}] Creating component version link '{link_name}' to URL '{link_url}'")
            try:
                self._components.add_version_link(component, version, link_name, link_url)
            except PublisherError as e:
                raise VersionPublishError(f"Failed to add a version link to the component '{component}': {e}") from e

        return ComponentVersion(
            component=component,
            name=version,
            version_id=version_id,
            description=description,
            properties=dict(applied),
            links={link_name: link_url} if link_name and link_url else {},
        )

    def _delete_version(self, component: str, version_id) -> Optional[Exception]:
        """Best-effort delete of a version whose upload failed. Returns the delete failure, if any."""
        logger.error(f"[{component}] Deleting component version {version_id} due to failed artifact upload")
        try:
            self._versions.delete_version(version_id)
        except PublisherError as e:
            logger.error(f"[{component}] Failed to delete component version {version_id}: {e}")
            return e
        logger.info(f"[{component}] Deleted component version {version_id}")
        return None
