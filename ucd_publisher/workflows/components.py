"""Component provisioning - create a component on demand and attach it to an application."""

import logging
from typing import Dict, Mapping
from uuid import UUID

from ucd_publisher.core.errors import ConfigurationError, PublisherError, VersionPublishError
from ucd_publisher.core.parsing import expand_vars, parse_properties
from ucd_publisher.core.schemas import CreateComponentBlock, Delivery, PullDelivery, PushDelivery

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Created by UCD Publisher"
DEFAULT_TEMPLATE_VERSION = -1


class ComponentProvisioner:
    def __init__(self, component_client, application_client, env: Mapping[str, str]):
        self._components = component_client
        self._applications = application_client
        self._env = env

    def ensure_component(self, component: str, block: CreateComponentBlock, delivery: Delivery) -> UUID:
        """
        Make sure the component exists, creating it when missing.

        Pull delivery also sets the source configuration properties on the
        component. When the block names an application the component is
        added to it unless it is already a member.
        """
        template = expand_vars(block.component_template, self._env)

        # properties based on delivery type
        if isinstance(delivery, PushDelivery):
            source_config_plugin = ""
            version_type = "INCREMENTAL" if delivery.push_incremental else "FULL"
            properties: Dict[str, str] = {}
        elif isinstance(delivery, PullDelivery):
            source_config_plugin = expand_vars(delivery.pull_source_type, self._env)
            version_type = "INCREMENTAL" if delivery.pull_incremental else "FULL"
            properties = parse_properties(expand_vars(delivery.pull_source_properties, self._env))
        else:
            raise ConfigurationError(f"Invalid delivery type: {delivery!r}")

        logger.info(f"[{component}] Checking the server for an existing component")
        component_id = self._components.find_component_id(component)

        if component_id is not None:
            logger.info(f"[{component}] Component already exists with UUID '{component_id}'")
        else:
            logger.info(f"[{component}] Creating new component")
            try:
                component_id = self._components.create_component(
                    component,
                    description=DEFAULT_DESCRIPTION,
                    source_config_plugin=source_config_plugin,
                    default_version_type=version_type,
                    template_name=template,
                    template_version=DEFAULT_TEMPLATE_VERSION,
                    import_automatically=False,
                    use_vfs=True,
                    properties=properties,
                )
            except PublisherError as e:
                raise VersionPublishError(f"Failed to create the component '{component}': {e}") from e
            logger.info(f"[{component}] ✅ Created component with UUID '{component_id}'")

        if isinstance(delivery, PullDelivery):
            for key, value in properties.items():
                logger.info(f"[{component}] Setting component property '{key}'")
                try:
                    self._components.set_component_property(component, key, value)
                except PublisherError as e:
                    raise VersionPublishError(f"Failed to set component property '{key}': {e}") from e

        application = expand_vars(block.component_application, self._env)
        if application:
            self._add_to_application(component, application)

        tag = expand_vars(block.component_tag, self._env)
        if tag:
            try:
                self._components.add_tag(component, tag)
            except PublisherError as e:
                raise VersionPublishError(f"An error occurred while tagging the component: {e}") from e
            logger.info(f"[{component}] Tagged component with '{tag}'")

        return component_id

    def _add_to_application(self, component: str, application: str) -> None:
        try:
            members = self._applications.get_application_components(application)
        except PublisherError as e:
            raise VersionPublishError(
                f"An error occurred while retrieving components of application '{application}': {e}"
            ) from e

        if component in members:
            logger.info(f"[{component}] Already part of application '{application}'")
            return

        logger.info(f"[{component}] Adding component to application '{application}'")
        try:
            self._applications.add_component_to_application(application, component)
        except PublisherError as e:
            raise VersionPublishError(
                f"An error occurred while adding the component to application '{application}': {e}"
            ) from e
