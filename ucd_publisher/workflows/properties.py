# ucd_publisher/workflows/properties.py
"""Version property reconciliation."""

import logging
from typing import Dict, Mapping

from ucd_publisher.core.errors import PropertyReconciliationError, PublisherError
from ucd_publisher.core.models import PropertyDefinition

logger = logging.getLogger(__name__)


class PropertyReconciler:
    """
    Sets name=value properties on a component version.

    A property can only be set once the version property sheet has a
    definition for it, so missing definitions are created first (TEXT,
    not required, empty label and description).

    Not transactional: a failure stops the run and properties already set
    stay set on the server. Nothing is retried.
    """

    def __init__(self, component_client, property_client, version_client):
        self._components = component_client
        self._properties = property_client
        self._versions = version_client

    def reconcile(self, component: str, version: str, desired: Mapping[str, str]) -> Dict[str, str]:
        """
        Make every key of desired present on the version with its value.

        Args:
            component: Component owning the version
            version: Version name
            desired: Property name -> value; empty values are set as-is

        Returns:
            The properties that were set

        Raises:
            PropertyReconciliationError: If any lookup, create or set fails
        """
        if not desired:
            return {}

        pending = dict(desired)
        applied: Dict[str, str] = {}

        # acquire prop sheet definition and its existing definitions
        try:
            sheet = self._components.get_version_prop_sheet_def(component)
            existing = self._properties.get_prop_defs(sheet.path)
        except PublisherError as e:
            raise PropertyReconciliationError(
                f"An error occurred acquiring property definitions of the version property "
                f"sheet for component '{component}': {e}"
            ) from e

        # update properties that already have a definition
        for definition in existing:
            if definition.name not in pending:
                continue

            value = pending.pop(definition.name)
            try:
                logger.info(f"[{component}] Setting version property '{definition.name}'")
                self._versions.set_version_property(component, version, definition.name, value)
            except PublisherError as e:
                raise PropertyReconciliationError(
                    f"An error occurred while setting the value of an existing property "
                    f"'{definition.name}': {e}"
                ) from e
            applied[definition.name] = value

        # create definitions for the rest, then set them
        if pending:
            logger.info(f"[{component}] Creating {len(pending)} new property definition(s)")

        for name, value in pending.items():
            try:
                logger.info(f"[{component}] Creating property definition for '{name}'")
                self._properties.create_prop_def(sheet.id, sheet.path, PropertyDefinition(name=name))
                self._versions.set_version_property(component, version, name, value)
            except PublisherError as e:
                raise PropertyReconciliationError(
                    f"An error occurred while creating a new version property '{name}' "
                    f"for version '{version}': {e}"
                ) from e
            applied[name] = value

        logger.info(f"[{component}] ✅ {len(applied)} version propert(ies) set on '{version}'")

        return applied
