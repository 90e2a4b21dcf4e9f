"""User table."""

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base, TimestampMixin


class UserRow(Base, TimestampMixin):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", "scm_context", name="uq_users_username_scm"),)

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    scm_context: Mapped[str] = mapped_column(String(128), nullable=False)
    # Sealed SCM token; only the SCM plugin can unseal it
    token: Mapped[str | None] = mapped_column(Text, nullable=True)
