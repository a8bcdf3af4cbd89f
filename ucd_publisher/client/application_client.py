"""REST client for applications, application processes and process requests."""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.core.errors import ResponseFormatError, ServerResponseError
from ucd_publisher.core.models import (
    ComponentVersionSelection,
    DeploymentSelection,
    SnapshotSelection,
)
from ucd_publisher.core.schemas import (
    CreatedEntity,
    NamedEntity,
    RequestStatusSchema,
    RequestSubmitted,
)

logger = logging.getLogger(__name__)


class ApplicationClient:
    def __init__(self, http: UCDHttpClient):
        self._http = http

    # -------------------------
    # APPLICATION COMPONENTS
    # -------------------------

    def get_application_components(self, application: str) -> List[str]:
        operation = f"list components of application '{application}'"
        payload = self._http.get_json(
            "/cli/application/componentsInApplication",
            params={"application": application},
            operation=operation,
        )
        if not isinstance(payload, list):
            raise ResponseFormatError(f"{operation}: expected a JSON array")
        return [self._http.parse_model(item, NamedEntity, operation).name for item in payload]

    def add_component_to_application(self, application: str, component: str) -> None:
        self._http.request(
            "PUT",
            "/cli/application/addComponentToApp",
            params={"application": application, "component": component},
        )

    # -------------------------
    # APPLICATION PROCESSES
    # -------------------------

    def get_application_process(self, application: str, process: str) -> Optional[Dict[str, Any]]:
        """Return the process definition, or None when it does not exist."""
        try:
            return self._http.get_json(
                "/cli/applicationProcess/info",
                params={"application": application, "applicationProcess": process},
                operation=f"get application process '{process}'",
            )
        except ServerResponseError as e:
            if e.status_code in (400, 404):
                return None
            raise

    def create_application_process(self, process_json: Dict[str, Any]) -> UUID:
        operation = f"create application process '{process_json.get('name')}'"
        payload = self._http.post_json(
            "/cli/applicationProcessRequest/request",
            process_json,
            operation=operation,
        )
        return self._http.parse_model(payload, CreatedEntity, operation).id

    # -------------------------
    # PROCESS REQUESTS
    # -------------------------

    def request_application_process(
        self,
        application: str,
        process: str,
        description: str,
        environment: str,
        selection: DeploymentSelection,
        only_changed: bool,
    ) -> UUID:
        body: Dict[str, Any] = {
            "application": application,
            "applicationProcess": process,
            "description": description,
            "environment": environment,
            "onlyChanged": str(only_changed).lower(),
        }

        if isinstance(selection, SnapshotSelection):
            body["snapshot"] = selection.name
        elif isinstance(selection, ComponentVersionSelection):
            body["versions"] = [
                {"version": version, "component": component}
                for component, versions in selection.versions.items()
                for version in versions
            ]
        else:
            raise TypeError(f"Unsupported deployment selection: {selection!r}")

        operation = f"request application process '{process}'"
        payload = self._http.put_json("/cli/applicationProcessRequest/request", body, operation=operation)
        return self._http.parse_model(payload, RequestSubmitted, operation).request_id

    def get_request_status(self, request_id: UUID) -> Optional[RequestStatusSchema]:
        """
        Fetch the raw status of a process request.

        Returns None when the body is not a JSON object.
        """
        operation = f"get status of request '{request_id}'"
        payload = self._http.get_json(
            "/cli/applicationProcessRequest/requestStatus",
            params={"request": str(request_id)},
            operation=operation,
        )
        if not isinstance(payload, dict):
            logger.warning(f"[deploy] Malformed status response for {request_id}: {payload!r}")
            return None
        return self._http.parse_model(payload, RequestStatusSchema, operation)
