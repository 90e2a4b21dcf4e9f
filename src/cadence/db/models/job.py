"""Job table."""

import re

from sqlalchemy import JSON, Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin

PR_JOB_NAME = re.compile(r"^PR-(\d+):(.+)$")


class JobRow(Base, TimestampMixin):
    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("pipeline_id", "name", name="uq_jobs_pipeline_name"),)

    job_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    pipeline_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("pipelines.pipeline_id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="ENABLED")
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    permutations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # Commit the permutations were last synced at
    sha: Mapped[str | None] = mapped_column(String(64), nullable=True)
    template_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    @property
    def is_pr(self) -> bool:
        return PR_JOB_NAME.match(self.name) is not None

    @property
    def pr_num(self) -> int | None:
        match = PR_JOB_NAME.match(self.name)
        return int(match.group(1)) if match else None

    @property
    def base_name(self) -> str:
        """Job name with any ``PR-<num>:`` prefix removed."""
        match = PR_JOB_NAME.match(self.name)
        return match.group(2) if match else self.name
