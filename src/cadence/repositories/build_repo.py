"""Build and step repositories."""

from cadence.db.models.build import BuildRow, StepRow
from cadence.repositories.base import BaseRepository


class BuildRepository(BaseRepository[BuildRow]):
    model_class = BuildRow
    pk_field = "build_id"

    async def list_for_event(self, event_id: str) -> list[BuildRow]:
        return await self.list_where(BuildRow.number, event_id=event_id)


class StepRepository(BaseRepository[StepRow]):
    model_class = StepRow
    pk_field = "step_id"

    async def list_for_build(self, build_id: str) -> list[StepRow]:
        """Steps of a build in creation order."""
        return await self.list_where(StepRow.position, build_id=build_id)
