"""Pydantic models for build creation and read-back."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cadence.models.enums import BuildStatus


class BuildCreate(BaseModel):
    """Input to build assembly."""

    model_config = ConfigDict(extra="forbid")

    job_id: str
    event_id: str
    username: str
    scm_context: str
    sha: str | None = None
    config_pipeline_sha: str | None = None
    pr_ref: str | None = None
    pr_title: str | None = None
    parent_build_id: str | None = None
    parent_builds: dict[str, Any] | None = None
    environment: dict[str, str] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    start: bool = True
    cause_message: str | None = None


class StepOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    command: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    code: int | None = None


class BuildOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    build_id: str
    job_id: str
    event_id: str
    number: int
    status: BuildStatus
    container: str
    environment: dict[str, str]
    build_cluster_name: str | None = None
    sha: str
    config_pipeline_sha: str | None = None
    pr_ref: str | None = None
    meta: dict[str, Any]
    stats: dict[str, Any]
    parent_build_id: str | None = None
    parent_builds: dict[str, Any] | None = None
    cause: str
    cause_message: str | None = None
    create_time: datetime
    steps: list[StepOut] = Field(default_factory=list)
