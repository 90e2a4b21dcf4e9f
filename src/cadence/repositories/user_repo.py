"""User repository."""

from cadence.db.models.user import UserRow
from cadence.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserRow]):
    model_class = UserRow
    pk_field = "user_id"

    async def get_by_username(self, username: str, scm_context: str) -> UserRow | None:
        return await self.get_where(username=username, scm_context=scm_context)
