"""String enums for persisted orchestration state."""

from enum import StrEnum


class JobState(StrEnum):
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


class BuildStatus(StrEnum):
    CREATED = "CREATED"
    QUEUED = "QUEUED"
    BLOCKED = "BLOCKED"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ABORTED = "ABORTED"
    UNSTABLE = "UNSTABLE"
    COLLAPSED = "COLLAPSED"
    FROZEN = "FROZEN"


class EventType(StrEnum):
    PIPELINE = "pipeline"
    PR = "pr"


class StageBuildStatus(StrEnum):
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
