"""Parsers for the free-text fields of a publisher job."""

import re
from typing import Dict, List, Mapping

from ucd_publisher.core.errors import ConfigurationError
from ucd_publisher.core.models import (
    ComponentVersionSelection,
    DeploymentSelection,
    SnapshotSelection,
)


_VARIABLE = re.compile(r"\$\{([^}]*)\}")


def expand_vars(text: str | None, env: Mapping[str, str]) -> str:
    """
    Replace ${NAME} references with values from env.

    Unknown names are left as written.
    """
    if not text:
        return ""

    def _replace(match: re.Match) -> str:
        return env.get(match.group(1), match.group(0))

    return _VARIABLE.sub(_replace, text)


def parse_properties(text: str | None) -> Dict[str, str]:
    """
    Parse newline separated name=value lines into an ordered mapping.

    Blank lines are skipped. Values may be empty and may contain '='.
    """
    properties: Dict[str, str] = {}

    if not text:
        return properties

    for line in text.splitlines():
        if not line.strip():
            continue

        name, sep, value = line.partition("=")
        if not sep or not name.strip():
            raise ConfigurationError(
                f"Missing property delimiter '=' in property definition '{line}'"
            )

        properties[name.strip()] = value.strip()

    return properties


def parse_component_versions(text: str) -> Dict[str, List[str]]:
    """
    Parse newline separated component:version pairs.

    A component may repeat to request several versions; order is kept.
    """
    versions: Dict[str, List[str]] = {}

    for line in text.splitlines():
        if not line.strip():
            continue

        delim = line.find(":")
        if delim <= 0:
            raise ConfigurationError(
                "Component/version pairs must be of the form {Component}:{Version}"
            )

        component = line[:delim].strip()
        version = line[delim + 1:].strip()
        if not component or not version:
            raise ConfigurationError(
                f"Component/version pair '{line.strip()}' is missing a component or a version"
            )

        versions.setdefault(component, []).append(version)

    return versions


def parse_deploy_versions(text: str) -> DeploymentSelection:
    """
    Interpret the versions field of a deployment.

    Text containing '=' names a single snapshot (SNAPSHOT=name). Anything
    else is read as component:version pairs.
    """
    raw = text or ""
    text = raw.strip()

    if not text:
        raise ConfigurationError("Deploy Versions is a required field for deployment.")

    if "=" in text:
        # checked before trimming: a trailing newline is rejected too
        if "\n" in raw:
            raise ConfigurationError("Only a single SNAPSHOT can be specified")

        _, _, snapshot = text.partition("=")
        snapshot = snapshot.strip()
        if not snapshot:
            raise ConfigurationError(f"Snapshot specification '{text}' has no snapshot name")

        return SnapshotSelection(name=snapshot)

    return ComponentVersionSelection(versions=parse_component_versions(text))
