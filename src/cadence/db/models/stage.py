"""Stage and stage build tables."""

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin


class StageRow(Base, TimestampMixin):
    __tablename__ = "stages"
    __table_args__ = (UniqueConstraint("pipeline_id", "name", name="uq_stages_pipeline_name"),)

    stage_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    pipeline_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("pipelines.pipeline_id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    job_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class StageBuildRow(Base, TimestampMixin):
    __tablename__ = "stage_builds"

    stage_build_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    stage_id: Mapped[str] = mapped_column(String(128), ForeignKey("stages.stage_id"), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(String(128), ForeignKey("events.event_id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
