"""Stage and stage build repositories."""

from cadence.db.models.stage import StageBuildRow, StageRow
from cadence.repositories.base import BaseRepository


class StageRepository(BaseRepository[StageRow]):
    model_class = StageRow
    pk_field = "stage_id"

    async def get_by_name(self, pipeline_id: str, name: str) -> StageRow | None:
        return await self.get_where(pipeline_id=pipeline_id, name=name)


class StageBuildRepository(BaseRepository[StageBuildRow]):
    model_class = StageBuildRow
    pk_field = "stage_build_id"

    async def list_for_event(self, event_id: str) -> list[StageBuildRow]:
        return await self.list_where(event_id=event_id)
