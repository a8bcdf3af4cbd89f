#tests\test_http.py

"""Test the HTTP layer and REST clients against a patched requests Session."""

import json
from uuid import uuid4

import pytest
import requests

from ucd_publisher.client.application_client import ApplicationClient
from ucd_publisher.client.artifact_client import ArtifactClient
from ucd_publisher.client.component_client import ComponentClient
from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.client.version_client import VersionClient
from ucd_publisher.core.errors import (
    ConnectivityError,
    CredentialsError,
    ResponseFormatError,
    ServerResponseError,
)
from ucd_publisher.core.models import ComponentVersionSelection, FileEntry, SnapshotSelection

BASE_URL = "https://ucd.example.com:8443"


def make_response(status_code=200, body=None, text=None, url=""):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


class FakeServer:
    """Replays scripted responses and records requests."""

    def __init__(self):
        self.requests = []
        self.responses = []

    def __call__(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if not response.url:
            response.url = url
        return response


@pytest.fixture
def server(monkeypatch):
    fake = FakeServer()
    monkeypatch.setattr(requests.Session, "request", fake)
    return fake


@pytest.fixture
def http():
    return UCDHttpClient(BASE_URL, "admin", "secret")


class TestUCDHttpClient:

    def test_basic_auth_and_verify(self):
        client = UCDHttpClient(BASE_URL + "/", "admin", "secret", trust_all_certs=True)

        assert client.base_url == BASE_URL
        assert client._session.auth.username == "admin"
        assert client._session.verify is False

    def test_401_is_credentials_error(self, server, http):
        server.responses = [make_response(401)]

        with pytest.raises(CredentialsError) as exc_info:
            http.request("GET", "/rest/state")

        assert exc_info.value.status_code == 401

    def test_500_carries_status_and_url(self, server, http):
        server.responses = [make_response(500, text="internal")]

        with pytest.raises(ServerResponseError) as exc_info:
            http.request("GET", "/rest/state")

        assert exc_info.value.status_code == 500
        assert exc_info.value.url == f"{BASE_URL}/rest/state"
        assert "internal" in str(exc_info.value)

    def test_transport_failure_is_connectivity_error(self, server, http):
        server.responses = [requests.exceptions.ConnectionError("refused")]

        with pytest.raises(ConnectivityError):
            http.request("GET", "/rest/state")

    def test_invalid_json_is_format_error(self, server, http):
        server.responses = [make_response(200, text="not json")]

        with pytest.raises(ResponseFormatError):
            http.get_json("/rest/state")

    def test_empty_put_body_allowed(self, server, http):
        server.responses = [make_response(200)]

        assert http.put_json("/cli/component/integrate", {}) is None


class TestComponentClient:

    def test_missing_component_is_none(self, server, http):
        server.responses = [make_response(404)]

        assert ComponentClient(http).find_component_id("web") is None

    def test_other_errors_propagate(self, server, http):
        server.responses = [make_response(500)]

        with pytest.raises(ServerResponseError):
            ComponentClient(http).find_component_id("web")

    def test_prop_sheet_def(self, server, http):
        sheet_id = uuid4()
        server.responses = [make_response(200, body={
            "id": str(uuid4()),
            "name": "web",
            "versionPropSheetDef": {"id": str(sheet_id), "path": "components/1/versionPropSheetDef"},
        })]

        sheet = ComponentClient(http).get_version_prop_sheet_def("web")

        assert sheet.id == sheet_id
        assert sheet.path == "components/1/versionPropSheetDef"


class TestVersionClient:

    def test_create_version(self, server, http):
        version_id = uuid4()
        server.responses = [make_response(200, body={"id": str(version_id)})]

        assert VersionClient(http).create_version("web", "1.0", "desc", "FULL") == version_id

        method, url, kwargs = server.requests[0]
        assert method == "POST"
        assert url == f"{BASE_URL}/cli/version/createVersion"
        assert kwargs["params"]["type"] == "FULL"

    def test_create_version_without_id(self, server, http):
        server.responses = [make_response(200, body={"name": "1.0"})]

        with pytest.raises(ResponseFormatError):
            VersionClient(http).create_version("web", "1.0")


class TestApplicationClient:

    def test_snapshot_request_body(self, server, http):
        request_id = uuid4()
        server.responses = [make_response(200, body={"requestId": str(request_id)})]

        result = ApplicationClient(http).request_application_process(
            "shop", "Deploy", "desc", "QA", SnapshotSelection(name="s1"), True
        )

        assert result == request_id
        body = server.requests[0][2]["json"]
        assert body["snapshot"] == "s1"
        assert body["onlyChanged"] == "true"
        assert "versions" not in body

    def test_versions_request_body(self, server, http):
        server.responses = [make_response(200, body={"requestId": str(uuid4())})]

        ApplicationClient(http).request_application_process(
            "shop", "Deploy", "desc", "QA",
            ComponentVersionSelection(versions={"web": ["1.0", "1.1"]}), False,
        )

        body = server.requests[0][2]["json"]
        assert body["versions"] == [
            {"version": "1.0", "component": "web"},
            {"version": "1.1", "component": "web"},
        ]
        assert body["onlyChanged"] == "false"

    def test_empty_status_object(self, server, http):
        server.responses = [make_response(200, body={})]

        status = ApplicationClient(http).get_request_status(uuid4())

        assert status.status is None
        assert status.result is None

    def test_non_object_status_is_none(self, server, http):
        server.responses = [make_response(200, body=["unexpected"])]

        assert ApplicationClient(http).get_request_status(uuid4()) is None

    def test_missing_process_is_none(self, server, http):
        server.responses = [make_response(400)]

        assert ApplicationClient(http).get_application_process("shop", "Deploy") is None


class TestArtifactClient:

    @pytest.fixture
    def component_body(self):
        return {
            "id": str(uuid4()),
            "name": "web",
            "properties": [{"name": "code_station/repository", "value": "repo-1"}],
        }

    def test_upload_flow(self, server, http, component_body, work_dir):
        server.responses = [
            make_response(200, body=component_body),
            make_response(200, text="stage-1"),
            make_response(200),
            make_response(200, text="cs-1"),
            make_response(200),
        ]
        entries = [FileEntry(path="README.txt", size=6, sha256="ab")]

        client = ArtifactClient(http, ComponentClient(http), "admin")
        change_set = client.upload_version_files("web", "1.0", work_dir, entries)

        assert change_set == "cs-1"
        urls = [url for _, url, _ in server.requests]
        assert urls[1].endswith("/vfs/stagingDirectory")
        assert urls[2].endswith("/vfs/stagingDirectory/stage-1/README.txt")
        assert urls[3].endswith("/vfs/stagingDirectory/stage-1/commit")
        assert urls[4].endswith("/vfs/repository/repo-1/changeSet/cs-1/label")

    def test_failed_upload_deletes_staging_directory(self, server, http, component_body, work_dir):
        server.responses = [
            make_response(200, body=component_body),
            make_response(200, text="stage-1"),
            make_response(500),
            make_response(200),
        ]
        entries = [FileEntry(path="README.txt", size=6, sha256="ab")]

        client = ArtifactClient(http, ComponentClient(http), "admin")
        with pytest.raises(ServerResponseError):
            client.upload_version_files("web", "1.0", work_dir, entries)

        method, url, _ = server.requests[-1]
        assert method == "DELETE"
        assert url.endswith("/vfs/stagingDirectory/stage-1")

    def test_nothing_to_upload(self, server, http, work_dir):
        client = ArtifactClient(http, ComponentClient(http), "admin")

        assert client.upload_version_files("web", "1.0", work_dir, []) is None
        assert server.requests == []
