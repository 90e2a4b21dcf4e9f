"""Build cluster repository."""

from cadence.db.models.build_cluster import BuildClusterRow
from cadence.repositories.base import BaseRepository


class BuildClusterRepository(BaseRepository[BuildClusterRow]):
    model_class = BuildClusterRow
    pk_field = "cluster_id"

    async def list_all(self) -> list[BuildClusterRow]:
        return await self.list_where(BuildClusterRow.created_at, BuildClusterRow.name)
