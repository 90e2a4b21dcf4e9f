"""Job creation policy shared by pipeline sync and PR job materialization."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models.job import JobRow
from cadence.errors.exceptions import ConflictError, NotFoundError
from cadence.models.enums import JobState
from cadence.models.job import (
    BUILD_PERIODICALLY_ANNOTATION,
    DISABLED_BY_DEFAULT_ANNOTATION,
)
from cadence.plugins.base import Executor
from cadence.repositories.job_repo import JobRepository
from cadence.repositories.pipeline_repo import PipelineRepository
from cadence.services import id_generator
from cadence.services.id_generator import generate_id
from cadence.services.orchestration.triggers import is_pr_job_name

logger = logging.getLogger(__name__)

# https://yaml.org/type/bool.html
_TRUE_VALUES = {"on", "true", "yes", "y"}


def convert_to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in _TRUE_VALUES


def _annotation(permutations: list[dict], name: str) -> Any:
    if not permutations:
        return None
    return (permutations[0].get("annotations") or {}).get(name)


class JobService:
    """Creates jobs with their initial state and periodic schedule."""

    def __init__(self, session: AsyncSession, executor: Executor):
        self.session = session
        self.executor = executor
        self.jobs = JobRepository(session)
        self.pipelines = PipelineRepository(session)

    async def create(
        self,
        pipeline_id: str,
        name: str,
        permutations: list[dict],
        sha: str | None = None,
    ) -> JobRow:
        """Create a job.

        Non-PR jobs whose first permutation carries a truthy
        ``screwdriver.cd/jobDisabledByDefault`` start DISABLED. Non-PR jobs
        with ``screwdriver.cd/buildPeriodically`` are registered with the
        executor's periodic scheduler.
        """
        is_pr = is_pr_job_name(name)
        disabled = convert_to_bool(_annotation(permutations, DISABLED_BY_DEFAULT_ANNOTATION))
        state = JobState.DISABLED if disabled and not is_pr else JobState.ENABLED
        template_id = permutations[0].get("template_id") if permutations else None

        try:
            job = await self.jobs.create(
                job_id=generate_id(id_generator.JOB),
                pipeline_id=pipeline_id,
                name=name,
                state=state.value,
                archived=False,
                permutations=permutations,
                sha=sha,
                template_id=template_id,
            )
        except IntegrityError as exc:
            raise ConflictError(f"Job '{name}' already exists in pipeline '{pipeline_id}'") from exc

        logger.info("Created job %s (%s, state=%s)", name, job.job_id, state.value)

        if _annotation(permutations, BUILD_PERIODICALLY_ANNOTATION) and not is_pr:
            pipeline = await self.pipelines.get(pipeline_id)
            if not pipeline:
                raise NotFoundError("Pipeline", pipeline_id)
            await self.executor.start_periodic(pipeline, job)

        return job
