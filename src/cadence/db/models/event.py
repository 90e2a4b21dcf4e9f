"""Event table."""

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin


class EventRow(Base, TimestampMixin):
    __tablename__ = "events"

    event_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    pipeline_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("pipelines.pipeline_id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="pipeline")
    sha: Mapped[str] = mapped_column(String(64), nullable=False)
    config_pipeline_sha: Mapped[str | None] = mapped_column(String(64), nullable=True)
    start_from: Mapped[str | None] = mapped_column(String(256), nullable=True)
    cause_message: Mapped[str] = mapped_column(Text, nullable=False)
    creator: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    commit: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    workflow_graph: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    meta: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    pr_num: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pr_ref: Mapped[str | None] = mapped_column(String(256), nullable=True)
    pr: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    parent_event_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    parent_build_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
