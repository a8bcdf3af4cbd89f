#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from ucd_publisher.core.errors import ServerResponseError
from ucd_publisher.core.models import PropSheetDefinition, PropertyDefinition
from ucd_publisher.core.schemas import RequestStatusSchema
from ucd_publisher.workflows.components import ComponentProvisioner
from ucd_publisher.workflows.properties import PropertyReconciler
from ucd_publisher.workflows.versions import VersionPublisher


# ============================================
# IN-MEMORY SERVER CLIENTS
# ============================================

class FakeVersionClient:
    def __init__(self, calls: List[tuple]):
        self.calls = calls
        self.versions: Dict[UUID, str] = {}
        self.properties: Dict[str, str] = {}
        self.delete_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None

    def create_version(self, component, name, description="", version_type=""):
        self.calls.append(("create_version", component, name))
        if self.create_error:
            raise self.create_error
        version_id = uuid4()
        self.versions[version_id] = name
        return version_id

    def delete_version(self, version_id):
        self.calls.append(("delete_version", version_id))
        if self.delete_error:
            raise self.delete_error
        self.versions.pop(version_id, None)

    def set_version_property(self, component, version, name, value, secure=False):
        self.calls.append(("set_version_property", name, value))
        self.properties[name] = value


class FakeComponentClient:
    def __init__(self, calls: List[tuple]):
        self.calls = calls
        self.sheet = PropSheetDefinition(id=uuid4(), path="components/abc/versionPropSheetDef")
        self.existing: Dict[str, UUID] = {}
        self.members_error: Optional[Exception] = None

    def find_component_id(self, component):
        self.calls.append(("find_component_id", component))
        return self.existing.get(component)

    def create_component(self, component, **kwargs):
        self.calls.append(("create_component", component, kwargs))
        component_id = uuid4()
        self.existing[component] = component_id
        return component_id

    def set_component_property(self, component, name, value, secure=False):
        self.calls.append(("set_component_property", component, name, value))

    def add_tag(self, component, tag):
        self.calls.append(("add_tag", component, tag))

    def import_versions(self, component, properties):
        self.calls.append(("import_versions", component, properties))

    def get_version_prop_sheet_def(self, component):
        self.calls.append(("get_version_prop_sheet_def", component))
        return self.sheet

    def add_version_link(self, component, version, link_name, link_url):
        self.calls.append(("add_version_link", component, version, link_name, link_url))


class FakePropertyClient:
    def __init__(self, calls: List[tuple]):
        self.calls = calls
        self.definitions: List[PropertyDefinition] = []

    def get_prop_defs(self, path):
        self.calls.append(("get_prop_defs", path))
        return list(self.definitions)

    def create_prop_def(self, sheet_id, sheet_path, definition):
        self.calls.append(("create_prop_def", definition.name))
        self.definitions.append(definition)


class FakeArtifactClient:
    def __init__(self, calls: List[tuple]):
        self.calls = calls
        self.error: Optional[Exception] = None
        self.uploaded: List[str] = []

    def upload_version_files(self, component, version, work_dir, entries):
        self.calls.append(("upload_version_files", component, version))
        if self.error:
            raise self.error
        self.uploaded.extend(e.path for e in entries)
        return "change-set-1"


class FakeApplicationClient:
    def __init__(self, calls: List[tuple]):
        self.calls = calls
        self.statuses: List[Optional[RequestStatusSchema]] = []
        self.members: List[str] = []
        self.processes: Dict[str, dict] = {}
        self.request_id = uuid4()

    def get_application_components(self, application):
        self.calls.append(("get_application_components", application))
        return list(self.members)

    def add_component_to_application(self, application, component):
        self.calls.append(("add_component_to_application", application, component))
        self.members.append(component)

    def get_application_process(self, application, process):
        self.calls.append(("get_application_process", application, process))
        return self.processes.get(process)

    def create_application_process(self, process_json):
        self.calls.append(("create_application_process", process_json))
        self.processes[process_json["name"]] = process_json
        return uuid4()

    def request_application_process(self, application, process, description, environment, selection, only_changed):
        self.calls.append(("request_application_process", application, process, environment, selection, only_changed))
        return self.request_id

    def get_request_status(self, request_id):
        self.calls.append(("get_request_status", request_id))
        if not self.statuses:
            raise ServerResponseError("no status scripted", status_code=500)
        return self.statuses.pop(0)


class FakeEvent:
    """Records every wait instead of sleeping."""

    def __init__(self, set_after: Optional[int] = None):
        self.waits: List[float] = []
        self.set_after = set_after

    def wait(self, timeout=None):
        self.waits.append(timeout)
        return self.set_after is not None and len(self.waits) >= self.set_after

    def set(self):
        self.set_after = 0


def status(status=None, result=None) -> RequestStatusSchema:
    return RequestStatusSchema(status=status, result=result)


# ============================================
# FIXTURES
# ============================================

@pytest.fixture
def calls():
    return []


@pytest.fixture
def version_client(calls):
    return FakeVersionClient(calls)


@pytest.fixture
def component_client(calls):
    return FakeComponentClient(calls)


@pytest.fixture
def property_client(calls):
    return FakePropertyClient(calls)


@pytest.fixture
def artifact_client(calls):
    return FakeArtifactClient(calls)


@pytest.fixture
def application_client(calls):
    return FakeApplicationClient(calls)


@pytest.fixture
def env():
    return {"BUILD_NUMBER": "42", "WORKSPACE": "/tmp/ws"}


@pytest.fixture
def reconciler(component_client, property_client, version_client):
    return PropertyReconciler(component_client, property_client, version_client)


@pytest.fixture
def version_publisher(version_client, component_client, artifact_client, reconciler, application_client, env):
    return VersionPublisher(
        version_client=version_client,
        component_client=component_client,
        artifact_client=artifact_client,
        reconciler=reconciler,
        provisioner=ComponentProvisioner(component_client, application_client, env),
        env=env,
    )


@pytest.fixture
def work_dir(tmp_path):
    """Small artifact tree."""
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "app.sh").write_text("#!/bin/sh\necho hi\n")
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "core.jar").write_bytes(b"jar")
    (tmp_path / "README.txt").write_text("readme")
    return tmp_path
