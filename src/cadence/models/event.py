"""Pydantic models for event creation and read-back."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cadence.models.build import BuildOut
from cadence.models.enums import EventType


class EventCreate(BaseModel):
    """Input to event orchestration."""

    model_config = ConfigDict(extra="forbid")

    pipeline_id: str
    sha: str
    username: str
    scm_context: str
    type: EventType = EventType.PIPELINE
    start_from: str | None = None
    cause_message: str | None = None
    creator: dict[str, Any] | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    # Pull request fields
    pr_num: int | None = None
    pr_ref: str | None = None
    pr_title: str | None = None
    pr_info: dict[str, Any] | None = None
    # Chaining
    parent_event_id: str | None = None
    parent_build_id: str | None = None
    parent_builds: dict[str, Any] | None = None
    workflow_graph: dict[str, Any] | None = None
    config_pipeline_sha: str | None = None
    # Webhook-only inputs
    changed_files: list[str] | None = None
    webhooks: bool = False
    skip_message: str | None = None

    @property
    def is_pr(self) -> bool:
        return self.pr_ref is not None and self.pr_num is not None


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    pipeline_id: str
    type: EventType
    sha: str
    config_pipeline_sha: str | None = None
    start_from: str | None = None
    cause_message: str
    creator: dict[str, Any] | None = None
    commit: dict[str, Any] | None = None
    workflow_graph: dict[str, Any]
    meta: dict[str, Any]
    pr_num: int | None = None
    pr_ref: str | None = None
    pr: dict[str, Any]
    parent_event_id: str | None = None
    created_at: datetime
    # None when no build was started for this event
    builds: list[BuildOut] | None = None
