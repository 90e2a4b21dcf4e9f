"""Build cluster table."""

from sqlalchemy import JSON, Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin


class BuildClusterRow(Base, TimestampMixin):
    __tablename__ = "build_clusters"
    __table_args__ = (UniqueConstraint("name", "scm_context", name="uq_build_clusters_name_scm"),)

    cluster_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    scm_context: Mapped[str] = mapped_column(String(128), nullable=False)
    scm_organizations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    managed_by_screwdriver: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    weightage: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    group: Mapped[str | None] = mapped_column("cluster_group", String(128), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
