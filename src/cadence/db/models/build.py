"""Build and step tables."""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin


class BuildRow(Base, TimestampMixin):
    __tablename__ = "builds"

    build_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    job_id: Mapped[str] = mapped_column(String(128), ForeignKey("jobs.job_id"), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(String(128), ForeignKey("events.event_id"), nullable=False, index=True)
    number: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    container: Mapped[str] = mapped_column(String(512), nullable=False)
    environment: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    build_cluster_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    sha: Mapped[str] = mapped_column(String(64), nullable=False)
    config_pipeline_sha: Mapped[str | None] = mapped_column(String(64), nullable=True)
    pr_ref: Mapped[str | None] = mapped_column(String(256), nullable=True)
    meta: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    stats: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    parent_build_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    parent_builds: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    cause: Mapped[str] = mapped_column(Text, nullable=False)
    cause_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    scm_context: Mapped[str] = mapped_column(String(128), nullable=False)
    template_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    create_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class StepRow(Base):
    __tablename__ = "steps"

    step_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    build_id: Mapped[str] = mapped_column(String(128), ForeignKey("builds.build_id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    command: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    code: Mapped[int | None] = mapped_column(Integer, nullable=True)
