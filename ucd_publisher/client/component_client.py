"""REST client for components."""

import logging
from typing import Dict, Optional
from urllib.parse import quote
from uuid import UUID

from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.core.errors import ResponseFormatError, ServerResponseError
from ucd_publisher.core.models import PropSheetDefinition
from ucd_publisher.core.schemas import ComponentSchema, CreatedEntity

logger = logging.getLogger(__name__)


class ComponentClient:
    def __init__(self, http: UCDHttpClient):
        self._http = http

    def get_component(self, component: str) -> ComponentSchema:
        operation = f"get component '{component}'"
        payload = self._http.get_json(f"/rest/deploy/component/{quote(component, safe='')}", operation=operation)
        return self._http.parse_model(payload, ComponentSchema, operation)

    def find_component_id(self, component: str) -> Optional[UUID]:
        """Return the component UUID, or None when the server does not know it."""
        try:
            return self.get_component(component).id
        except ServerResponseError as e:
            if e.status_code in (400, 404):
                return None
            raise

    def create_component(
        self,
        component: str,
        *,
        description: str,
        source_config_plugin: str,
        default_version_type: str,
        template_name: str,
        template_version: int,
        import_automatically: bool,
        use_vfs: bool,
        properties: Dict[str, str],
    ) -> UUID:
        body = {
            "name": component,
            "description": description,
            "sourceConfigPlugin": source_config_plugin,
            "defaultVersionType": default_version_type,
            "importAutomatically": import_automatically,
            "useVfs": use_vfs,
            "properties": properties,
        }
        if template_name:
            body["templateName"] = template_name
            body["templateVersion"] = template_version

        operation = f"create component '{component}'"
        payload = self._http.put_json("/cli/component/create", body, operation=operation)
        return self._http.parse_model(payload, CreatedEntity, operation).id

    def set_component_property(self, component: str, name: str, value: str, secure: bool = False) -> None:
        self._http.request(
            "PUT",
            "/cli/component/propValue",
            params={"component": component, "name": name, "value": value, "isSecure": str(secure).lower()},
        )

    def add_tag(self, component: str, tag: str) -> None:
        self._http.request("PUT", "/cli/component/tag", params={"component": component, "tag": tag})

    def import_versions(self, component: str, properties: Dict[str, str]) -> None:
        body = {"component": component, "properties": properties}
        self._http.put_json("/cli/component/integrate", body, operation=f"import versions of '{component}'")

    def get_version_prop_sheet_def(self, component: str) -> PropSheetDefinition:
        schema = self.get_component(component)
        if schema.version_prop_sheet_def is None:
            raise ResponseFormatError(
                f"Component '{component}' has no version property sheet definition"
            )
        return PropSheetDefinition(
            id=schema.version_prop_sheet_def.id,
            path=schema.version_prop_sheet_def.path,
        )

    def add_version_link(self, component: str, version: str, link_name: str, link_url: str) -> None:
        self._http.request(
            "PUT",
            "/cli/version/addLink",
            params={"component": component, "version": version, "linkName": link_name, "link": link_url},
        )
