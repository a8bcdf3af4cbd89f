#ucd_publisher\core\validation.py
from ucd_publisher.core.errors import ConfigurationError
from ucd_publisher.core.models import MAX_VERSION_NAME_LENGTH


def validate_version_name(version: str | None) -> None:
    length = len(version) if version else 0

    if length == 0 or length > MAX_VERSION_NAME_LENGTH:
        raise ConfigurationError(
            f"Failed to create version '{version}'. Version name length must be between "
            f"1 and {MAX_VERSION_NAME_LENGTH} characters long. (Current length: {length})"
        )


def validate_component_name(component: str | None) -> None:
    if not component or not component.strip():
        raise ConfigurationError("Component Name is a required property.")


def validate_deploy_target(application: str, environment: str, process: str) -> None:
    # -------------------------
    # Required fields
    # -------------------------
    if not application:
        raise ConfigurationError("Deploy Application is a required field for deployment.")

    if not environment:
        raise ConfigurationError("Deploy Environment is a required field for deployment.")

    if not process:
        raise ConfigurationError("Deploy Process is a required field for deployment.")
