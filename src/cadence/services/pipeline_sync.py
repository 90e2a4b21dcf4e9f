"""Pipeline sync: reconcile stored jobs and workflow with the pipeline's configuration."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models.pipeline import PipelineRow
from cadence.errors.exceptions import NotFoundError
from cadence.models.job import Permutation
from cadence.models.pipeline import ParsedConfig
from cadence.plugins.base import ConfigParser, ScmPlugin
from cadence.repositories.job_repo import JobRepository
from cadence.repositories.pipeline_repo import PipelineRepository
from cadence.repositories.user_repo import UserRepository
from cadence.services.job_service import JobService

logger = logging.getLogger(__name__)

CONFIG_FILE = "screwdriver.yaml"


def dump_permutations(permutations: list[Permutation]) -> list[dict]:
    return [p.model_dump(mode="json", exclude_none=True) for p in permutations]


class PipelineSyncService:
    def __init__(
        self,
        session: AsyncSession,
        scm: ScmPlugin,
        config_parser: ConfigParser,
        job_service: JobService,
    ):
        self.session = session
        self.scm = scm
        self.config_parser = config_parser
        self.job_service = job_service
        self.pipelines = PipelineRepository(session)
        self.jobs = JobRepository(session)
        self.users = UserRepository(session)

    async def admin_token(self, pipeline: PipelineRow) -> str:
        """Unsealed SCM token of the pipeline's first admin."""
        if not pipeline.admins:
            raise NotFoundError("Pipeline admin", pipeline.pipeline_id)
        username = pipeline.admins[0]
        user = await self.users.get_by_username(username, pipeline.scm_context)
        if not user:
            raise NotFoundError("User", username)
        return await self.scm.unseal_token(user.token, pipeline.scm_context)

    async def latest_commit_sha(self, pipeline: PipelineRow) -> str:
        token = await self.admin_token(pipeline)
        return await self.scm.get_commit_sha(pipeline.scm_uri, pipeline.scm_context, token)

    async def get_configuration(self, pipeline: PipelineRow, ref: str | None = None) -> ParsedConfig:
        """Parse the pipeline configuration at ``ref``.

        Child pipelines read their configuration from their config pipeline's
        repository. A missing configuration file parses as empty.
        """
        source = pipeline
        if pipeline.config_pipeline_id:
            source = await self.pipelines.get(pipeline.config_pipeline_id)
            if not source:
                raise NotFoundError("Pipeline", pipeline.config_pipeline_id)

        token = await self.admin_token(source)
        try:
            text = await self.scm.get_file(source.scm_uri, source.scm_context, CONFIG_FILE, token, ref=ref)
        except FileNotFoundError:
            logger.warning("No %s in %s at ref %s", CONFIG_FILE, source.name, ref)
            return ParsedConfig()
        return await self.config_parser.parse(text)

    async def sync(self, pipeline: PipelineRow, ref: str | None = None) -> PipelineRow:
        """Store the workflow graph and reconcile the job set.

        1. Jobs present in the configuration get fresh permutations and are unarchived
        2. Non-PR jobs missing from the configuration are archived
        3. PR jobs are left alone
        4. Configured jobs that do not exist yet are created
        """
        parsed = await self.get_configuration(pipeline, ref)
        pipeline.workflow_graph = parsed.workflow_graph.to_json()
        pipeline.annotations = parsed.annotations
        await self.session.flush()

        seen: set[str] = set()
        for job in await self.jobs.list_for_pipeline(pipeline.pipeline_id):
            seen.add(job.name)
            if job.name in parsed.jobs:
                await self.jobs.update(
                    job,
                    permutations=dump_permutations(parsed.jobs[job.name]),
                    archived=False,
                    sha=ref,
                )
            elif not job.is_pr and not job.archived:
                await self.jobs.update(job, archived=True)

        for name, permutations in parsed.jobs.items():
            if name not in seen:
                await self.job_service.create(
                    pipeline.pipeline_id, name, dump_permutations(permutations), sha=ref
                )

        logger.info("Synced pipeline %s at ref %s (%d jobs)", pipeline.pipeline_id, ref, len(parsed.jobs))
        return pipeline

    async def sync_pr(self, pipeline: PipelineRow, pr_num: int, pr_ref: str | None = None) -> ParsedConfig:
        """Refresh this PR's jobs from the configuration at the PR ref.

        ``pr_ref`` is the event's ref; without it the SCM is asked for the PR's.
        Returns the parsed PR configuration so the caller can snapshot its graph.
        """
        if not pr_ref:
            token = await self.admin_token(pipeline)
            pr_info = await self.scm.get_pr_info(pipeline.scm_uri, pipeline.scm_context, token, pr_num)
            pr_ref = pr_info["ref"]
        parsed = await self.get_configuration(pipeline, ref=pr_ref)

        for job in await self.jobs.list_pr_jobs(pipeline.pipeline_id, pr_num):
            permutations = parsed.jobs.get(job.base_name)
            if permutations:
                await self.jobs.update(job, permutations=dump_permutations(permutations))

        return parsed
