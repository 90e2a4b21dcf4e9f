"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from cadence.db.models.pipeline import PipelineRow
from cadence.db.models.job import JobRow
from cadence.db.models.event import EventRow
from cadence.db.models.build import BuildRow, StepRow
from cadence.db.models.build_cluster import BuildClusterRow
from cadence.db.models.user import UserRow
from cadence.db.models.stage import StageRow, StageBuildRow

__all__ = [
    "PipelineRow",
    "JobRow",
    "EventRow",
    "BuildRow",
    "StepRow",
    "BuildClusterRow",
    "UserRow",
    "StageRow",
    "StageBuildRow",
]
