"""Wire the orchestration services for one database session."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config import Settings, settings as default_settings
from cadence.plugins import Plugins
from cadence.repositories.build_cluster_repo import BuildClusterRepository
from cadence.repositories.job_repo import JobRepository
from cadence.services.job_service import JobService
from cadence.services.orchestration.build_assembler import BuildAssembler
from cadence.services.orchestration.cluster_selector import BuildClusterSelector
from cadence.services.orchestration.event_orchestrator import EventOrchestrator
from cadence.services.orchestration.trigger_resolver import TriggerResolver
from cadence.services.orchestration.workflow_graph import WorkflowGraphUpdater
from cadence.services.pipeline_sync import PipelineSyncService


@dataclass
class OrchestrationServices:
    events: EventOrchestrator
    builds: BuildAssembler


def create_services(
    session: AsyncSession,
    plugins: Plugins,
    settings: Settings | None = None,
    cluster_selector: BuildClusterSelector | None = None,
) -> OrchestrationServices:
    settings = settings or default_settings

    job_service = JobService(session, plugins.executor)
    pipeline_sync = PipelineSyncService(session, plugins.scm, plugins.config_parser, job_service)
    selector = cluster_selector or BuildClusterSelector(
        BuildClusterRepository(session), settings.multi_build_cluster_enabled
    )
    assembler = BuildAssembler(
        session,
        plugins.scm,
        plugins.bookend,
        plugins.executor,
        selector,
        pipeline_sync,
        docker_registry=settings.docker_registry,
        cluster_env=settings.cluster_env,
    )
    jobs = JobRepository(session)
    orchestrator = EventOrchestrator(
        session,
        plugins.scm,
        pipeline_sync,
        WorkflowGraphUpdater(jobs),
        TriggerResolver(jobs, job_service),
        assembler,
    )
    return OrchestrationServices(events=orchestrator, builds=assembler)
