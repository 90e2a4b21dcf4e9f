"""Turn a job and a trigger into a persisted, runnable build."""

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models.build import BuildRow, StepRow
from cadence.db.models.job import JobRow
from cadence.db.models.pipeline import PipelineRow
from cadence.errors.exceptions import NotFoundError, ValidationError
from cadence.models.build import BuildCreate, BuildOut, StepOut
from cadence.models.enums import BuildStatus, StageBuildStatus
from cadence.models.job import EXECUTOR_ANNOTATION, EXECUTOR_ANNOTATION_BETA, Permutation, Provider
from cadence.plugins.base import Bookend, BookendContext, BookendKey, Executor, ScmPlugin
from cadence.repositories.build_repo import BuildRepository, StepRepository
from cadence.repositories.job_repo import JobRepository
from cadence.repositories.pipeline_repo import PipelineRepository
from cadence.repositories.stage_repo import StageBuildRepository, StageRepository
from cadence.repositories.user_repo import UserRepository
from cadence.services import id_generator
from cadence.services.id_generator import generate_id
from cadence.services.orchestration.cluster_selector import BuildClusterSelector
from cadence.services.orchestration.images import docker_image_name
from cadence.services.pipeline_sync import PipelineSyncService, dump_permutations

logger = logging.getLogger(__name__)

DEFAULT_EXECUTOR = "default"
ARM_CONTAINER = "ARM_CONTAINER"
STAGE_SETUP_JOB = re.compile(r"^stage@([\w-]+):setup$")


@dataclass
class StepResult:
    name: str
    ok: bool
    error: Exception | None = None


@dataclass
class CommitInfo:
    sha: str
    commit: dict[str, Any] | None = None


def stage_from_setup_job_name(job_name: str) -> str | None:
    """``stage@deploy:setup`` -> ``deploy``."""
    matched = STAGE_SETUP_JOB.match(job_name)
    return matched.group(1) if matched else None


def executor_name(
    annotations: dict[str, Any], pipeline: PipelineRow, provider: Provider | None = None
) -> str:
    if provider:
        if provider.environment_type == ARM_CONTAINER:
            return f"{provider.executor}-arm64"
        return provider.executor

    pipeline_annotations = pipeline.annotations or {}
    return (
        annotations.get(EXECUTOR_ANNOTATION)
        or annotations.get(EXECUTOR_ANNOTATION_BETA)
        or pipeline_annotations.get(EXECUTOR_ANNOTATION)
        or pipeline_annotations.get(EXECUTOR_ANNOTATION_BETA)
        or DEFAULT_EXECUTOR
    )


def bookend_key(
    build_cluster_name: str,
    annotations: dict[str, Any],
    pipeline: PipelineRow,
    provider: Provider | None = None,
) -> BookendKey:
    """Split ``<cluster>.<env>[...]`` and pair it with the executor name."""
    cluster = build_cluster_name or None
    env = None
    if cluster:
        items = cluster.split(".")
        if len(items) > 1:
            cluster, env = items[0], items[1]
    return BookendKey(executor=executor_name(annotations, pipeline, provider), cluster=cluster, env=env)


def build_out(build: BuildRow, steps: list[StepRow]) -> BuildOut:
    out = BuildOut.model_validate(build)
    return out.model_copy(update={"steps": [StepOut.model_validate(s) for s in steps]})


class BuildAssembler:
    """Creates builds for a job within an event.

    Persistence order is build first, then each step on its own savepoint so
    that one failing step does not take the build down with it.
    """

    def __init__(
        self,
        session: AsyncSession,
        scm: ScmPlugin,
        bookend: Bookend,
        executor: Executor,
        cluster_selector: BuildClusterSelector,
        pipeline_sync: PipelineSyncService,
        docker_registry: str | None = None,
        cluster_env: dict[str, str] | None = None,
        steps: StepRepository | None = None,
    ):
        self.session = session
        self.scm = scm
        self.bookend = bookend
        self.executor = executor
        self.cluster_selector = cluster_selector
        self.pipeline_sync = pipeline_sync
        self.docker_registry = docker_registry
        self.cluster_env = cluster_env or {}
        self.jobs = JobRepository(session)
        self.pipelines = PipelineRepository(session)
        self.users = UserRepository(session)
        self.builds = BuildRepository(session)
        self.steps = steps or StepRepository(session)
        self.stages = StageRepository(session)
        self.stage_builds = StageBuildRepository(session)

    async def create(self, config: BuildCreate) -> BuildOut:
        number = int(time.time() * 1000)
        create_time = datetime.fromtimestamp(number / 1000, tz=timezone.utc)

        job = await self.jobs.get(config.job_id)
        if not job:
            raise NotFoundError("Job", config.job_id)
        pipeline = await self.pipelines.get(job.pipeline_id)
        if not pipeline:
            raise NotFoundError("Pipeline", job.pipeline_id)

        commit_info = await self._commit_info(config, pipeline)
        trigger_sha = config.config_pipeline_sha or commit_info.sha
        permutations = await self._permutations_at(job, pipeline, trigger_sha)
        if not permutations:
            raise ValidationError(f"Job '{job.name}' has no permutations")

        # Matrix builds are not supported yet; the first permutation always runs
        permutation = Permutation.model_validate(permutations[0])
        annotations = permutation.annotations
        provider = permutation.provider

        build_cluster_name = await self.cluster_selector.select(annotations, pipeline, provider)

        stage_name = stage_from_setup_job_name(job.base_name)
        if stage_name:
            await self._create_stage_build(pipeline, stage_name, config.event_id)

        key = bookend_key(build_cluster_name, annotations, pipeline, provider)
        container = docker_image_name(permutation.image, self.docker_registry)
        environment = {**self.cluster_env, **config.environment, **permutation.environment}

        meta = dict(config.meta)
        if commit_info.commit and "commit" not in meta:
            meta["commit"] = commit_info.commit
        if config.pr_title:
            meta["pr"] = {**meta.get("pr", {}), "title": config.pr_title}

        fields: dict[str, Any] = {
            "job_id": job.job_id,
            "event_id": config.event_id,
            "number": number,
            "status": (BuildStatus.QUEUED if config.start else BuildStatus.CREATED).value,
            "container": container,
            "environment": environment,
            "build_cluster_name": build_cluster_name or None,
            "sha": commit_info.sha,
            "config_pipeline_sha": config.config_pipeline_sha,
            "pr_ref": config.pr_ref,
            "meta": meta,
            "stats": {},
            "parent_build_id": config.parent_build_id,
            "parent_builds": config.parent_builds,
            "cause": self._cause(config),
            "cause_message": config.cause_message,
            "username": config.username,
            "scm_context": config.scm_context,
            "template_id": permutation.template_id or job.template_id,
            "create_time": create_time,
        }

        context = await self._bookend_context(pipeline, job, fields, config.config_pipeline_sha)
        setup, teardown = await asyncio.gather(
            self.bookend.get_setup_commands(context, key),
            self.bookend.get_teardown_commands(context, key),
        )

        steps = [
            {"name": "sd-setup-init", "start_time": create_time},
            {"name": "sd-setup-launcher"},
            *setup,
            *({"name": c.name, "command": c.command} for c in permutation.commands),
            *teardown,
        ]

        build = await self.builds.create(build_id=generate_id(id_generator.BUILD), **fields)
        results = [await self._create_step(build, position, step) for position, step in enumerate(steps)]
        failed = [r for r in results if not r.ok]
        for result in failed:
            logger.error(
                "Failed to persist step %s of build %s: %s", result.name, build.build_id, result.error
            )
        await self.session.commit()
        logger.info(
            "Created build %s for job %s (%d steps, %d failed)",
            build.build_id,
            job.name,
            len(results),
            len(failed),
        )

        if config.start:
            build = await self.executor.start(build, config.cause_message)
            await self.session.commit()

        return build_out(build, await self.steps.list_for_build(build.build_id))

    async def _commit_info(self, config: BuildCreate, pipeline: PipelineRow) -> CommitInfo:
        if config.sha:
            return CommitInfo(sha=config.sha)

        user = await self.users.get_by_username(config.username, config.scm_context)
        if not user:
            raise NotFoundError("User", config.username)
        token = await self.scm.unseal_token(user.token, config.scm_context)
        sha = await self.scm.get_commit_sha(pipeline.scm_uri, pipeline.scm_context, token)
        commit = await self.scm.decorate_commit(
            pipeline.scm_uri, pipeline.scm_context, sha, token, scm_repo=pipeline.scm_repo
        )
        return CommitInfo(sha=sha, commit=commit)

    async def _permutations_at(self, job: JobRow, pipeline: PipelineRow, ref: str) -> list[dict]:
        """Job permutations as configured at ``ref`` when the stored job has moved on."""
        if not job.sha or job.sha == ref:
            return job.permutations

        parsed = await self.pipeline_sync.get_configuration(pipeline, ref=ref)
        permutations = parsed.jobs.get(job.base_name)
        if not permutations:
            logger.warning("Job %s not found in configuration at %s, using current definition", job.name, ref)
            return job.permutations
        return dump_permutations(permutations)

    async def _create_stage_build(self, pipeline: PipelineRow, stage_name: str, event_id: str) -> None:
        stage = await self.stages.get_by_name(pipeline.pipeline_id, stage_name)
        if not stage:
            raise NotFoundError("Stage", stage_name)
        await self.stage_builds.create(
            stage_build_id=generate_id(id_generator.STAGE_BUILD),
            stage_id=stage.stage_id,
            event_id=event_id,
            status=StageBuildStatus.CREATED.value,
        )

    async def _bookend_context(
        self,
        pipeline: PipelineRow,
        job: JobRow,
        build: dict[str, Any],
        config_pipeline_sha: str | None,
    ) -> BookendContext:
        context = BookendContext(pipeline=pipeline, job=job, build=build)
        if pipeline.config_pipeline_id:
            context.config_pipeline = await self.pipelines.get(pipeline.config_pipeline_id)
            context.config_pipeline_sha = config_pipeline_sha
        return context

    async def _create_step(self, build: BuildRow, position: int, step: dict[str, Any]) -> StepResult:
        name = step.get("name", "")
        try:
            async with self.session.begin_nested():
                await self.steps.create(
                    step_id=generate_id(id_generator.STEP),
                    build_id=build.build_id,
                    position=position,
                    name=name,
                    command=step.get("command"),
                    start_time=step.get("start_time"),
                )
        except SQLAlchemyError as exc:
            return StepResult(name=name, ok=False, error=exc)
        return StepResult(name=name, ok=True)

    def _cause(self, config: BuildCreate) -> str:
        label = self.scm.get_display_name(config.scm_context)
        display_name = f"{label}:{config.username}" if label else config.username
        return f"Started by user {display_name}"
