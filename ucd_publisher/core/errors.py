# ucd_publisher/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class PublisherError(Exception):
    """Base class for all publisher errors. Callers treat it as an abort."""
    pass


# -----------------------------
# Configuration Errors
# -----------------------------

class ConfigurationError(PublisherError):
    """Missing required field or malformed job input. Raised before any network call."""
    pass


# -----------------------------
# Connectivity Errors
# -----------------------------

class ConnectivityError(PublisherError):
    """Server could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class CredentialsError(ConnectivityError):
    """Server answered 401."""
    pass


class ServerResponseError(ConnectivityError):
    """Server answered with a non-2xx status other than 401."""
    pass


class ResponseFormatError(PublisherError):
    """Response body did not have the expected JSON shape."""
    pass


# -----------------------------
# Version Publication Errors
# -----------------------------

class VersionPublishError(PublisherError):
    pass


class ArtifactUploadError(VersionPublishError):
    """
    File upload failed after the version was created.

    compensation_error holds the failure of the compensating delete, if any.
    The upload failure stays the primary error.
    """

    def __init__(self, message: str, version_id=None, compensation_error: Exception | None = None):
        super().__init__(message)
        self.version_id = version_id
        self.compensation_error = compensation_error


class PropertyReconciliationError(VersionPublishError):
    pass


# -----------------------------
# Deployment Errors
# -----------------------------

class DeploymentError(PublisherError):
    def __init__(self, message: str, request_id=None):
        super().__init__(message)
        self.request_id = request_id


class DeploymentProcessError(DeploymentError):
    """Deployment reached FAULTED or FAILED TO START."""

    def __init__(self, message: str, request_id=None, result: str | None = None):
        super().__init__(message, request_id=request_id)
        self.result = result


class DeploymentTimeoutError(DeploymentError):
    pass


class DeploymentCancelledError(DeploymentError):
    pass


class PublishCancelledError(PublisherError):
    """Interrupted before the run finished. Work already done on the server is kept."""
    pass


class InvalidStateTransition(PublisherError):
    pass
