"""Pydantic schemas for job files and server responses."""

from typing import List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================
# Job Schemas
# ============================================

class CreateComponentBlock(BaseModel):
    """Create the component on the server when it does not exist."""

    component_template: str = ""
    component_application: str = ""
    component_tag: str = ""

    model_config = ConfigDict(extra="forbid")


class PushDelivery(BaseModel):
    """Create a version from local files."""

    type: Literal["push"] = "push"
    push_version: str
    base_dir: str
    directory_offset: str = ""
    file_include_patterns: str = ""
    file_exclude_patterns: str = ""
    push_properties: str = ""
    push_description: str = ""
    push_incremental: bool = False

    model_config = ConfigDict(extra="forbid")


class PullDelivery(BaseModel):
    """Ask the server to import versions from its configured source."""

    type: Literal["pull"] = "pull"
    pull_properties: str = ""
    pull_source_type: str = ""
    pull_source_properties: str = ""
    pull_incremental: bool = False

    model_config = ConfigDict(extra="forbid")


Delivery = Union[PushDelivery, PullDelivery]


class VersionBlock(BaseModel):
    component_name: str
    create_component: Optional[CreateComponentBlock] = None
    delivery: Delivery = Field(..., discriminator="type")

    model_config = ConfigDict(extra="forbid")


class CreateProcessBlock(BaseModel):
    process_component: str

    model_config = ConfigDict(extra="forbid")


class DeployBlock(BaseModel):
    deploy_app: str = ""
    deploy_env: str = ""
    deploy_proc: str = ""
    create_process: Optional[CreateProcessBlock] = None
    deploy_versions: str = ""
    deploy_only_changed: bool = False

    model_config = ConfigDict(extra="forbid")


class PublisherJob(BaseModel):
    """One publisher invocation: component versions first, then an optional deployment."""

    site: Optional[str] = None
    link_prefix: str = "Build"
    components: List[VersionBlock] = Field(default_factory=list)
    deploy: Optional[DeployBlock] = None

    model_config = ConfigDict(extra="forbid")


# ============================================
# Server Response Schemas
# ============================================

class ServerModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CreatedEntity(ServerModel):
    id: UUID


class RequestSubmitted(ServerModel):
    request_id: UUID = Field(..., alias="requestId")


class PropSheetDefSchema(ServerModel):
    id: UUID
    path: str


class ComponentSchema(ServerModel):
    id: UUID
    name: str
    version_prop_sheet_def: Optional[PropSheetDefSchema] = Field(None, alias="versionPropSheetDef")
    properties: List[dict] = Field(default_factory=list)


class PropDefSchema(ServerModel):
    name: str
    type: str = "TEXT"
    label: Optional[str] = None
    description: Optional[str] = None
    required: bool = False


class NamedEntity(ServerModel):
    name: str


class RequestStatusSchema(ServerModel):
    status: Optional[str] = None
    result: Optional[str] = None
