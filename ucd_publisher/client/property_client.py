"""REST client for property sheet definitions."""

from typing import List
from urllib.parse import quote
from uuid import UUID

from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.core.errors import ResponseFormatError
from ucd_publisher.core.models import PropertyDefinition
from ucd_publisher.core.schemas import PropDefSchema


class PropertyClient:
    def __init__(self, http: UCDHttpClient):
        self._http = http

    @staticmethod
    def _prop_defs_path(prop_sheet_def_path: str) -> str:
        # ".-1" addresses the latest version of the sheet definition
        return f"/property/propSheetDef/{quote(prop_sheet_def_path, safe='/')}.-1/propDefs"

    def get_prop_defs(self, prop_sheet_def_path: str) -> List[PropertyDefinition]:
        operation = f"list property definitions of '{prop_sheet_def_path}'"
        payload = self._http.get_json(self._prop_defs_path(prop_sheet_def_path), operation=operation)

        if not isinstance(payload, list):
            raise ResponseFormatError(f"{operation}: expected a JSON array")

        definitions = []
        for item in payload:
            schema = self._http.parse_model(item, PropDefSchema, operation)
            definitions.append(
                PropertyDefinition(
                    name=schema.name,
                    type=schema.type,
                    label=schema.label or "",
                    description=schema.description or "",
                    required=schema.required,
                )
            )
        return definitions

    def create_prop_def(
        self,
        prop_sheet_def_id: UUID,
        prop_sheet_def_path: str,
        definition: PropertyDefinition,
    ) -> None:
        body = {
            "name": definition.name,
            "label": definition.label,
            "type": definition.type,
            "value": definition.value,
            "required": definition.required,
            "description": definition.description,
            "inherited": False,
            "propSheetDefId": str(prop_sheet_def_id),
        }
        self._http.put_json(
            self._prop_defs_path(prop_sheet_def_path),
            body,
            operation=f"create property definition '{definition.name}'",
        )
