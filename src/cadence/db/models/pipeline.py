"""Pipeline table."""

from sqlalchemy import JSON, Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin

ROOT_DIRS = ("", ".", "/", "./")


class PipelineRow(Base, TimestampMixin):
    __tablename__ = "pipelines"

    pipeline_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    # "<org>/<repo>"
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    scm_uri: Mapped[str] = mapped_column(String(512), nullable=False)
    scm_context: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    scm_repo: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    admins: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    annotations: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    workflow_graph: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    pr_chain: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    config_pipeline_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("pipelines.pipeline_id"), nullable=True
    )
    last_event_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    @property
    def branch(self) -> str:
        return (self.scm_repo or {}).get("branch") or "main"

    @property
    def root_dir(self) -> str:
        """Source directory the pipeline is scoped to, without trailing slash."""
        root = (self.scm_repo or {}).get("root_dir") or ""
        if root in ROOT_DIRS:
            return ""
        return root.strip("/")
