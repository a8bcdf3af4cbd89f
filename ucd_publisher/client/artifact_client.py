# ucd_publisher/client/artifact_client.py
"""Artifact transfer client - uploads version files through the VFS staging area."""

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from ucd_publisher.client.component_client import ComponentClient
from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.core.errors import PublisherError, ResponseFormatError
from ucd_publisher.core.models import FileEntry

logger = logging.getLogger(__name__)

REPOSITORY_PROPERTY = "code_station/repository"


class ArtifactClient:
    """
    Uploads files to a component version.

    Flow:
    1. Create a staging directory
    2. Add every file (content-addressed by SHA-256)
    3. Commit the staging directory as a change set in the component repository
    4. Label the change set with the version name

    On failure the staging directory is deleted and the error re-raised.
    """

    def __init__(self, http: UCDHttpClient, components: ComponentClient, user: str):
        self._http = http
        self._components = components
        self._user = user

    def upload_version_files(
        self,
        component: str,
        version: str,
        work_dir: Path,
        entries: List[FileEntry],
    ) -> Optional[str]:
        """
        Upload entries found under work_dir.

        Returns:
            The change set id, or None when there was nothing to upload
        """
        if not entries:
            logger.warning(f"[{component}] Did not find any files to upload!")
            return None

        repository_id = self._repository_id(component)

        stage_id = self._create_staging_directory()
        logger.info(f"[{component}] Created staging directory: {stage_id}")

        try:
            for entry in entries:
                logger.info(f"[{component}] Adding {entry.path} to staging directory...")
                self._add_file(stage_id, work_dir, entry)

            change_set_id = self._commit(stage_id, repository_id, version, entries)
            logger.info(f"[{component}] Created change set: {change_set_id}")

            self._label(repository_id, change_set_id, version)
            logger.info(f"[{component}] Labeled change set with '{version}'")

            return change_set_id

        except Exception:
            try:
                self._http.delete(f"/vfs/stagingDirectory/{quote(stage_id, safe='')}")
                logger.info(f"[{component}] Deleted staging directory: {stage_id}")
            except PublisherError as cleanup_error:
                logger.error(f"[{component}] Failed to delete staging directory {stage_id}: {cleanup_error}")
            raise

    def _repository_id(self, component: str) -> str:
        schema = self._components.get_component(component)
        for prop in schema.properties:
            if str(prop.get("name", "")).lower() == REPOSITORY_PROPERTY:
                return str(prop.get("value", "")).strip()
        raise ResponseFormatError(
            f"Component '{component}' has no '{REPOSITORY_PROPERTY}' property"
        )

    def _create_staging_directory(self) -> str:
        response = self._http.request("POST", "/vfs/stagingDirectory")
        stage_id = response.text.strip()
        if not stage_id:
            raise ResponseFormatError("create staging directory: server returned no id")
        return stage_id

    def _add_file(self, stage_id: str, work_dir: Path, entry: FileEntry) -> None:
        path = f"/vfs/stagingDirectory/{quote(stage_id, safe='')}/{quote(entry.path)}"
        headers = {"Content-Type": "application/octet-stream"}

        if entry.link_target is not None:
            headers["X-Link-Target"] = entry.link_target
            self._http.request("PUT", path, data=b"", headers=headers)
            return

        if entry.executable:
            headers["X-Executable"] = "true"

        with open(work_dir / entry.path, "rb") as fh:
            self._http.request("PUT", path, data=fh, headers=headers)

    def _commit(self, stage_id: str, repository_id: str, version: str, entries: List[FileEntry]) -> str:
        change_set = {
            "repositoryId": repository_id,
            "user": self._user,
            "comment": f"Uploaded for version {version}",
            "entries": [
                {
                    "path": e.path,
                    "size": e.size,
                    "digest": e.sha256,
                    "digestAlgorithm": "SHA-256",
                    "executable": e.executable,
                    "linkTarget": e.link_target,
                }
                for e in entries
            ],
        }
        response = self._http.request(
            "POST",
            f"/vfs/stagingDirectory/{quote(stage_id, safe='')}/commit",
            json=change_set,
        )
        change_set_id = response.text.strip()
        if not change_set_id:
            raise ResponseFormatError("commit staging directory: server returned no change set id")
        return change_set_id

    def _label(self, repository_id: str, change_set_id: str, version: str) -> None:
        self._http.request(
            "PUT",
            f"/vfs/repository/{quote(repository_id, safe='')}/changeSet/{quote(change_set_id, safe='')}/label",
            params={
                "label": version,
                "user": self._user,
                "comment": f"Associated with version {version}",
            },
        )
