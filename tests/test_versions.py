#tests\test_versions.py

"""Test version publication."""

import pytest

from ucd_publisher.core.errors import (
    ArtifactUploadError,
    ConfigurationError,
    PropertyReconciliationError,
    ServerResponseError,
    VersionPublishError,
)
from ucd_publisher.core.models import PublishStatus
from ucd_publisher.core.schemas import VersionBlock


def push_block(work_dir, version="1.0.${BUILD_NUMBER}", **delivery):
    return VersionBlock.model_validate({
        "component_name": "web",
        "delivery": {
            "type": "push",
            "push_version": version,
            "base_dir": str(work_dir),
            **delivery,
        },
    })


class TestPushVersion:

    def test_publish_creates_uploads_and_links(self, version_publisher, work_dir, calls, artifact_client):
        block = push_block(work_dir, push_properties="owner=team")

        version = version_publisher.publish(block, "Build #42", "http://ci/42")

        assert version.name == "1.0.42"
        assert version.properties == {"owner": "team"}
        assert version.links == {"Build #42": "http://ci/42"}
        assert sorted(artifact_client.uploaded) == ["README.txt", "bin/app.sh", "lib/core.jar"]

        names = [c[0] for c in calls]
        assert names.index("create_version") < names.index("upload_version_files")
        assert names.index("upload_version_files") < names.index("set_version_property")
        assert names[-1] == "add_version_link"

    @pytest.mark.parametrize("version", ["", "v" * 256])
    def test_bad_version_name_fails_before_any_call(self, version_publisher, work_dir, calls, version):
        with pytest.raises(ConfigurationError):
            version_publisher.publish(push_block(work_dir, version=version), "", "")

        assert calls == []

    def test_missing_base_dir_fails_before_any_call(self, version_publisher, tmp_path, calls):
        with pytest.raises(ConfigurationError, match="does not exist"):
            version_publisher.publish(push_block(tmp_path / "missing"), "", "")

        assert calls == []

    def test_upload_failure_deletes_version_once(self, version_publisher, work_dir, calls, artifact_client, version_client):
        """Test the created version is deleted exactly once and the upload error propagates."""
        upload_failure = ServerResponseError("upload failed", status_code=500)
        artifact_client.error = upload_failure

        with pytest.raises(ArtifactUploadError) as exc_info:
            version_publisher.publish(push_block(work_dir), "", "")

        deletes = [c for c in calls if c[0] == "delete_version"]
        assert len(deletes) == 1
        assert deletes[0][1] == exc_info.value.version_id
        assert exc_info.value.__cause__ is upload_failure
        assert exc_info.value.compensation_error is None
        assert version_client.versions == {}

    def test_failed_delete_attached_not_raised(self, version_publisher, work_dir, artifact_client, version_client):
        artifact_client.error = ServerResponseError("upload failed", status_code=500)
        delete_failure = ServerResponseError("delete failed", status_code=500)
        version_client.delete_error = delete_failure

        with pytest.raises(ArtifactUploadError) as exc_info:
            version_publisher.publish(push_block(work_dir), "", "")

        assert exc_info.value.compensation_error is delete_failure

    def test_create_failure_wrapped(self, version_publisher, work_dir, version_client, calls):
        version_client.create_error = ServerResponseError("nope", status_code=400)

        with pytest.raises(VersionPublishError):
            version_publisher.publish(push_block(work_dir), "", "")

        assert not [c for c in calls if c[0] == "upload_version_files"]

    def test_include_scoped_to_other_component_fails_before_any_call(
        self, version_publisher, tmp_path, calls, artifact_client
    ):
        """Test a filename containing '=' never widens the upload to the whole directory."""
        (tmp_path / "a=b.txt").write_text("a")
        (tmp_path / "secret.key").write_text("key")

        with pytest.raises(ConfigurationError):
            version_publisher.publish(push_block(tmp_path, file_include_patterns="a=b.txt"), "", "")

        assert calls == []
        assert artifact_client.uploaded == []

    def test_property_failure_keeps_version(self, version_publisher, work_dir, calls, version_client):
        """Test a property failure after upload is fatal and nothing is deleted."""
        def failing_set(*args, **kwargs):
            calls.append(("set_version_property",) + args[2:3])
            raise ServerResponseError("boom", status_code=500)

        version_client.set_version_property = failing_set

        with pytest.raises(PropertyReconciliationError):
            version_publisher.publish(push_block(work_dir, push_properties="owner=team"), "Build", "http://ci/1")

        names = [c[0] for c in calls]
        assert "upload_version_files" in names
        assert "delete_version" not in names
        assert "add_version_link" not in names
        assert list(version_client.versions.values()) == ["1.0.42"]

    def test_link_failure_keeps_version(self, version_publisher, work_dir, calls, component_client, version_client):
        """Test a link failure after upload is fatal and nothing is deleted."""
        def failing_link(*args, **kwargs):
            raise ServerResponseError("boom", status_code=500)

        component_client.add_version_link = failing_link

        with pytest.raises(VersionPublishError) as exc_info:
            version_publisher.publish(push_block(work_dir), "Build", "http://ci/1")

        assert not isinstance(exc_info.value, ArtifactUploadError)
        assert "delete_version" not in [c[0] for c in calls]
        assert list(version_client.versions.values()) == ["1.0.42"]

    def test_no_link_without_build_url(self, version_publisher, work_dir, calls):
        version = version_publisher.publish(push_block(work_dir), "Build", "")

        assert "add_version_link" not in [c[0] for c in calls]
        assert version.links == {}


class TestPullVersion:

    def test_pull_imports_with_properties(self, version_publisher, calls):
        block = VersionBlock.model_validate({
            "component_name": "web",
            "delivery": {"type": "pull", "pull_properties": "branch=main"},
        })

        assert version_publisher.publish(block, "", "") is None
        assert ("import_versions", "web", {"branch": "main"}) in calls

    def test_pull_creates_component_with_source_properties(self, version_publisher, calls):
        block = VersionBlock.model_validate({
            "component_name": "web",
            "create_component": {"component_template": "tpl", "component_application": "shop"},
            "delivery": {
                "type": "pull",
                "pull_source_type": "Git",
                "pull_source_properties": "repoUrl=git://x",
            },
        })

        version_publisher.publish(block, "", "")

        create = next(c for c in calls if c[0] == "create_component")
        assert create[2]["source_config_plugin"] == "Git"
        assert create[2]["properties"] == {"repoUrl": "git://x"}
        assert ("set_component_property", "web", "repoUrl", "git://x") in calls
        assert ("add_component_to_application", "shop", "web") in calls


class TestPublishAll:

    def test_first_failure_skips_the_rest(self, version_publisher, work_dir, tmp_path):
        blocks = [
            push_block(work_dir),
            push_block(tmp_path / "missing"),
            push_block(work_dir, version="2.0"),
        ]

        results = version_publisher.publish_all(blocks, "", "")

        assert [r.status for r in results] == [
            PublishStatus.PUBLISHED,
            PublishStatus.FAILED,
            PublishStatus.SKIPPED,
        ]
        assert isinstance(results[1].error, ConfigurationError)
        assert results[0].succeeded
