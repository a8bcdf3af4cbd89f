"""Core domain models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union
from uuid import UUID


MAX_VERSION_NAME_LENGTH = 255


# -------------------------
# COMPONENTS & PROPERTIES
# -------------------------

@dataclass(frozen=True)
class PropSheetDefinition:
    """Schema holder for the properties a component's versions may carry."""
    id: UUID
    path: str


@dataclass(frozen=True)
class PropertyDefinition:
    name: str
    type: str = "TEXT"
    label: str = ""
    description: str = ""
    required: bool = False
    value: str = ""


@dataclass
class ComponentVersion:
    """A version created on the server for one component."""
    component: str
    name: str
    version_id: UUID
    description: str = ""
    properties: Dict[str, str] = field(default_factory=dict)
    links: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FileEntry:
    """A local file selected for upload, relative to the working directory."""
    path: str
    size: int
    sha256: Optional[str]
    executable: bool = False
    link_target: Optional[str] = None


# -------------------------
# DEPLOYMENT SELECTION
# -------------------------

@dataclass(frozen=True)
class SnapshotSelection:
    name: str


@dataclass(frozen=True)
class ComponentVersionSelection:
    versions: Dict[str, List[str]]


DeploymentSelection = Union[SnapshotSelection, ComponentVersionSelection]


# -------------------------
# DEPLOYMENT REQUEST
# -------------------------

class DeploymentState(Enum):
    """Deployment request state machine."""

    REQUESTED = "REQUESTED"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAULTED = "FAULTED"
    FAILED_TO_START = "FAILED_TO_START"
    CANCELLED = "CANCELLED"
    TIMED_OUT = "TIMED_OUT"


TERMINAL_STATES = {
    DeploymentState.SUCCEEDED,
    DeploymentState.FAULTED,
    DeploymentState.FAILED_TO_START,
    DeploymentState.CANCELLED,
    DeploymentState.TIMED_OUT,
}


@dataclass
class DeploymentRequest:
    """A submitted application process request and its polled state."""

    request_id: UUID
    application: str
    process: str
    environment: str
    selection: DeploymentSelection
    only_changed: bool = False

    state: DeploymentState = DeploymentState.REQUESTED
    result: Optional[str] = None
    poll_count: int = 0

    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def duration_seconds(self) -> float:
        end = self.finished_at or datetime.now(timezone.utc)
        return (end - self.requested_at).total_seconds()


@dataclass(frozen=True)
class DeploymentOutcome:
    request_id: UUID
    state: DeploymentState
    result: str
    duration_seconds: float
    poll_count: int


# -------------------------
# PUBLICATION RESULTS
# -------------------------

class PublishStatus(Enum):
    PUBLISHED = "PUBLISHED"
    IMPORTED = "IMPORTED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


@dataclass
class ComponentPublishResult:
    """Outcome of one component's publication within a run."""
    component: str
    status: PublishStatus
    version: Optional[ComponentVersion] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.status in (PublishStatus.PUBLISHED, PublishStatus.IMPORTED)
