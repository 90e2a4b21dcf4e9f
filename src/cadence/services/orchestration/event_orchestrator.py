"""Create an event and start the builds it triggers."""

import asyncio
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models.event import EventRow
from cadence.db.models.pipeline import PipelineRow
from cadence.errors.exceptions import NoJobsToStartError, NotFoundError
from cadence.logging_config import bind_event_context
from cadence.models.build import BuildCreate, BuildOut
from cadence.models.enums import EventType
from cadence.models.event import EventCreate, EventOut
from cadence.models.pipeline import ParsedConfig
from cadence.models.workflow import WorkflowGraph
from cadence.plugins.base import ScmPlugin
from cadence.repositories.event_repo import EventRepository
from cadence.repositories.job_repo import JobRepository
from cadence.repositories.pipeline_repo import PipelineRepository
from cadence.services import id_generator
from cadence.services.id_generator import generate_id
from cadence.services.orchestration.build_assembler import BuildAssembler
from cadence.services.orchestration.source_paths import plan_build
from cadence.services.orchestration.trigger_resolver import TriggerResolver
from cadence.services.orchestration.workflow_graph import WorkflowGraphUpdater
from cadence.services.pipeline_sync import PipelineSyncService

logger = logging.getLogger(__name__)


def event_out(event: EventRow, builds: list[BuildOut] | None) -> EventOut:
    return EventOut.model_validate(event).model_copy(update={"builds": builds})


class EventOrchestrator:
    """Creates events and fans them out into builds.

    The event is committed before any build is attempted, so an event can
    exist with ``builds`` set to None: nothing to start, a skip message, or
    every job filtered out by source paths.
    """

    def __init__(
        self,
        session: AsyncSession,
        scm: ScmPlugin,
        pipeline_sync: PipelineSyncService,
        graph_updater: WorkflowGraphUpdater,
        trigger_resolver: TriggerResolver,
        build_assembler: BuildAssembler,
    ):
        self.session = session
        self.scm = scm
        self.pipeline_sync = pipeline_sync
        self.graph_updater = graph_updater
        self.trigger_resolver = trigger_resolver
        self.build_assembler = build_assembler
        self.pipelines = PipelineRepository(session)
        self.events = EventRepository(session)
        self.jobs = JobRepository(session)

    async def create(self, config: EventCreate) -> EventOut:
        pipeline = await self.pipelines.get(config.pipeline_id)
        if not pipeline:
            raise NotFoundError("Pipeline", config.pipeline_id)
        bind_event_context(pipeline.pipeline_id)

        config_pipeline_sha = await self._sync(pipeline, config)

        pr: dict[str, Any] = {}
        if config.pr_info and config.pr_info.get("url"):
            pr["url"] = config.pr_info["url"]
        if config.pr_title:
            pr["title"] = config.pr_title

        pr_config = None
        if config.is_pr:
            pr_config = await self.pipeline_sync.sync_pr(pipeline, config.pr_num, config.pr_ref)

        token = await self.pipeline_sync.admin_token(pipeline)
        creator, commit = await asyncio.gather(
            self._creator(config, token),
            self.scm.decorate_commit(
                pipeline.scm_uri, config.scm_context, config.sha, token, scm_repo=pipeline.scm_repo
            ),
        )

        if config.workflow_graph is not None:
            graph = WorkflowGraph.model_validate(config.workflow_graph)
        elif pr_config is not None:
            graph = pr_config.workflow_graph
        else:
            graph = WorkflowGraph.model_validate(pipeline.workflow_graph or {})
        graph = await self.graph_updater.update(pipeline, config, graph)

        event = await self.events.create(
            event_id=generate_id(id_generator.EVENT),
            pipeline_id=pipeline.pipeline_id,
            type=config.type.value,
            sha=config.sha,
            config_pipeline_sha=config_pipeline_sha,
            start_from=config.start_from,
            cause_message=config.cause_message or f"Started by {self._display_name(config)}",
            creator=creator,
            commit=commit,
            workflow_graph=graph.to_json(),
            meta=config.meta,
            pr_num=config.pr_num,
            pr_ref=config.pr_ref,
            pr=pr,
            parent_event_id=config.parent_event_id,
            parent_build_id=config.parent_build_id,
        )
        if config.type == EventType.PIPELINE:
            pipeline.last_event_id = event.event_id
        await self.session.commit()
        bind_event_context(pipeline.pipeline_id, event.event_id)
        logger.info("Created event %s (start_from=%s)", event.event_id, config.start_from)

        if config.skip_message:
            logger.info("Skipping builds for event %s: %s", event.event_id, config.skip_message)
            return event_out(event, None)
        if not config.start_from:
            return event_out(event, None)

        builds = await self._create_builds(
            pipeline, event, graph, config, config_pipeline_sha, commit, pr_config
        )
        return event_out(event, builds)

    async def _sync(self, pipeline: PipelineRow, config: EventCreate) -> str | None:
        """Sync the pipeline at the right ref and return the config pipeline SHA to record."""
        if config.parent_event_id:
            # Restarts replay the parent event's configuration
            if config.config_pipeline_sha:
                await self.pipeline_sync.sync(pipeline, config.config_pipeline_sha)
                return config.config_pipeline_sha
            await self.pipeline_sync.sync(pipeline, config.sha)
            return None

        if pipeline.config_pipeline_id:
            config_pipeline = await self.pipelines.get(pipeline.config_pipeline_id)
            if not config_pipeline:
                raise NotFoundError("Pipeline", pipeline.config_pipeline_id)
            sha = await self.pipeline_sync.latest_commit_sha(config_pipeline)
            await self.pipeline_sync.sync(pipeline, sha)
            return sha

        await self.pipeline_sync.sync(pipeline)
        return config.config_pipeline_sha

    async def _creator(self, config: EventCreate, token: str) -> dict[str, Any]:
        if config.creator:
            return config.creator
        return await self.scm.decorate_author(config.username, config.scm_context, token)

    def _display_name(self, config: EventCreate) -> str:
        label = self.scm.get_display_name(config.scm_context)
        return f"{label}:{config.username}" if label else config.username

    async def _create_builds(
        self,
        pipeline: PipelineRow,
        event: EventRow,
        graph: WorkflowGraph,
        config: EventCreate,
        config_pipeline_sha: str | None,
        commit: dict[str, Any] | None,
        pr_config: ParsedConfig | None = None,
    ) -> list[BuildOut] | None:
        jobs = await self.jobs.list_for_pipeline(pipeline.pipeline_id)
        try:
            resolution = await self.trigger_resolver.resolve(
                jobs, pipeline, graph, config.start_from, config.pr_num, pr_config
            )
        except NoJobsToStartError:
            logger.info("No jobs to start in event %s", event.event_id)
            return None
        if resolution.jobs_created:
            await self.session.commit()

        # All jobs are checked before any build exists
        plans = []
        for job in resolution.jobs_to_start:
            source_paths = (job.permutations[0] if job.permutations else {}).get("source_paths")
            plans.append(
                (job, plan_build(source_paths, pipeline.root_dir, config.changed_files, config.webhooks))
            )

        meta = {**config.meta, "commit": {**(commit or {}), "changedFiles": config.changed_files or []}}

        builds = []
        for job, plan in plans:
            if not plan.should_build:
                logger.info("Skipping job %s: no changes under its source paths", job.name)
                continue
            build = await self.build_assembler.create(
                BuildCreate(
                    job_id=job.job_id,
                    event_id=event.event_id,
                    username=config.username,
                    scm_context=config.scm_context,
                    sha=config.sha,
                    config_pipeline_sha=config_pipeline_sha,
                    pr_ref=config.pr_ref,
                    pr_title=config.pr_title,
                    parent_build_id=config.parent_build_id,
                    parent_builds=config.parent_builds,
                    environment=plan.environment,
                    meta=meta,
                    cause_message=config.cause_message,
                )
            )
            builds.append(build)

        if not builds:
            logger.info("No jobs to start in event %s after source path filtering", event.event_id)
            return None
        return builds
