"""REST client for component versions."""

from uuid import UUID

from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.core.schemas import CreatedEntity


class VersionClient:
    def __init__(self, http: UCDHttpClient):
        self._http = http

    def create_version(self, component: str, name: str, description: str = "", version_type: str = "") -> UUID:
        params = {"component": component, "name": name, "description": description}
        if version_type:
            params["type"] = version_type

        operation = f"create version '{name}' on component '{component}'"
        payload = self._http.post_json("/cli/version/createVersion", params=params, operation=operation)
        return self._http.parse_model(payload, CreatedEntity, operation).id

    def delete_version(self, version_id: UUID) -> None:
        self._http.delete(f"/rest/deploy/version/{version_id}")

    def set_version_property(self, component: str, version: str, name: str, value: str, secure: bool = False) -> None:
        self._http.request(
            "PUT",
            "/cli/version/versionProperties",
            params={
                "component": component,
                "version": version,
                "name": name,
                "value": value,
                "isSecure": str(secure).lower(),
            },
        )
