"""Application process creation."""

import logging
from typing import Any, Dict
from uuid import uuid4

from ucd_publisher.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

INSTALL_STEP_NAME = "Install Components"
FINISH_STEP_NAME = "FINISH"
DEFAULT_DESCRIPTION = "Created by UCD Publisher"


def build_process_json(
    process: str,
    application: str,
    description: str,
    component_process: str,
) -> Dict[str, Any]:
    """
    Build the step graph of an application process that installs every
    component with the given component process.

        rootActivity
          children: [finish, install -> compEnvIterator -> inventoryDiff -> componentProcess]
          edges:    [-> install, install -> FINISH]
          offsets:  [install, finish]
    """
    component_process_step = {
        "type": "componentProcess",
        "name": process,
        "componentProcessName": component_process,
        "activity.componentProcess.name": component_process,
        "allowFailure": "false",
        "children": {},
    }

    inventory_diff = {
        "type": "inventoryVersionDiff",
        "status": "Active",
        "name": uuid4().hex,
        "children": [component_process_step],
    }

    component_env_iterator = {
        "type": "componentEnvironmentIterator",
        "name": uuid4().hex,
        "tagId": "",
        "runOnlyOnFirst": "false",
        "children": [inventory_diff],
    }

    install_step = {
        "name": INSTALL_STEP_NAME,
        "componentProcessName": component_process,
        "activity.componentProcess.name": component_process,
        "type": "multiComponentEnvironmentIterator",
        "failFast": "false",
        "runOnlyOnFirst": "false",
        "preconditionScript": "",
        "maxIteration": "-1",
        "children": [component_env_iterator],
    }

    finish_step = {"type": "finish", "name": FINISH_STEP_NAME}

    return {
        "name": process,
        "application": application,
        "description": description,
        "inventoryManagementType": "AUTOMATIC",
        "offlineAgentHandling": "PRE_EXECUTION_CHECK",
        "rootActivity": {
            "type": "graph",
            "name": "GRAPH",
            "children": [finish_step, install_step],
            "edges": [
                {"to": INSTALL_STEP_NAME, "type": "ALWAYS", "value": ""},
                {"to": FINISH_STEP_NAME, "from": INSTALL_STEP_NAME, "type": "ALWAYS", "value": ""},
            ],
            "offsets": [
                {"name": INSTALL_STEP_NAME, "x": "-21", "y": "191", "h": "50", "w": "330"},
                {"name": FINISH_STEP_NAME, "x": "-5", "y": "420", "h": "50", "w": "90"},
            ],
        },
    }


class ProcessCreator:
    def __init__(self, application_client):
        self._applications = application_client

    def ensure_process(self, application: str, process: str, component_process: str) -> bool:
        """
        Create the application process unless it already exists.

        Returns:
            True if a process was created
        """
        if not application or not process:
            raise ConfigurationError("Application and process are required to create an application process.")
        if not component_process:
            raise ConfigurationError("A component process is required to create an application process.")

        logger.info(f"[process] Checking the server for existing application process '{process}'")
        existing = self._applications.get_application_process(application, process)

        if existing is not None:
            logger.info(f"[process] Application process '{process}' already exists")
            return False

        logger.info(f"[process] Creating new application process '{process}'")
        process_json = build_process_json(process, application, DEFAULT_DESCRIPTION, component_process)
        process_id = self._applications.create_application_process(process_json)

        logger.info(f"[process] ✅ Created application process with UUID '{process_id}'")
        return True
