"""Job repository."""

from sqlalchemy import select

from cadence.db.models.job import JobRow
from cadence.repositories.base import BaseRepository


class JobRepository(BaseRepository[JobRow]):
    model_class = JobRow
    pk_field = "job_id"

    async def get_by_name(self, pipeline_id: str, name: str) -> JobRow | None:
        return await self.get_where(pipeline_id=pipeline_id, name=name)

    async def list_for_pipeline(self, pipeline_id: str) -> list[JobRow]:
        """All jobs of a pipeline, archived included, in creation order."""
        return await self.list_where(JobRow.created_at, JobRow.name, pipeline_id=pipeline_id)

    async def list_pr_jobs(self, pipeline_id: str, pr_num: int) -> list[JobRow]:
        """Unarchived ``PR-<num>:*`` jobs of a pipeline."""
        stmt = select(JobRow).where(
            JobRow.pipeline_id == pipeline_id,
            JobRow.name.startswith(f"PR-{pr_num}:", autoescape=True),
            JobRow.archived.is_(False),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
