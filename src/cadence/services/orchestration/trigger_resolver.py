"""Decide which jobs an event starts."""

import logging
from dataclasses import dataclass, field

from cadence.db.models.job import JobRow
from cadence.db.models.pipeline import PipelineRow
from cadence.errors.exceptions import NoJobsToStartError, ValidationError
from cadence.models.enums import JobState
from cadence.models.pipeline import ParsedConfig
from cadence.models.workflow import WorkflowGraph
from cadence.repositories.job_repo import JobRepository
from cadence.services.job_service import JobService
from cadence.services.orchestration.triggers import (
    Commit,
    CommitBranch,
    JobName,
    Other,
    PullRequest,
    PullRequestBranch,
    TriggerSource,
    parse_trigger,
    pr_job_name,
)
from cadence.services.pipeline_sync import dump_permutations

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    jobs_to_start: list[JobRow] = field(default_factory=list)
    jobs_created: list[JobRow] = field(default_factory=list)


def is_startable(job: JobRow) -> bool:
    return job.state == JobState.ENABLED and not job.archived


class TriggerResolver:
    """Computes the jobs to build for a ``start_from`` value.

    Each trigger family (graph triggers, literal job names, pull requests) is
    resolved independently and the results are concatenated.
    """

    def __init__(self, jobs: JobRepository, job_service: JobService):
        self.jobs = jobs
        self.job_service = job_service

    async def resolve(
        self,
        jobs: list[JobRow],
        pipeline: PipelineRow,
        workflow_graph: WorkflowGraph,
        start_from: str,
        pr_num: int | None = None,
        pr_config: ParsedConfig | None = None,
    ) -> Resolution:
        """``pr_config`` is the configuration at the PR ref; PR jobs created
        here take their permutations from it when it defines the base job."""
        trigger = parse_trigger(start_from)

        from_trigger = self._jobs_from_trigger(trigger, jobs, pipeline, workflow_graph)
        from_job_name = self._jobs_from_job_name(trigger, jobs)
        pr_resolution = await self._jobs_from_pr(trigger, jobs, pipeline, workflow_graph, pr_num, pr_config)

        resolution = Resolution(
            jobs_to_start=from_trigger + from_job_name + pr_resolution.jobs_to_start,
            jobs_created=pr_resolution.jobs_created,
        )
        if not resolution.jobs_to_start:
            raise NoJobsToStartError(start_from)
        return resolution

    def _jobs_from_trigger(
        self,
        trigger: TriggerSource,
        jobs: list[JobRow],
        pipeline: PipelineRow,
        graph: WorkflowGraph,
    ) -> list[JobRow]:
        if isinstance(trigger, Commit):
            # ~commit also fires jobs bound to the pipeline's own branch
            names = graph.next_jobs(trigger.node) + graph.next_jobs(f"~commit:{pipeline.branch}")
        elif isinstance(trigger, (CommitBranch, Other)):
            names = graph.next_jobs(trigger.node)
        else:
            return []
        return [job for job in jobs if job.name in names and is_startable(job)]

    def _jobs_from_job_name(self, trigger: TriggerSource, jobs: list[JobRow]) -> list[JobRow]:
        if not isinstance(trigger, JobName):
            return []
        return [job for job in jobs if job.name == trigger.name and is_startable(job)]

    async def _jobs_from_pr(
        self,
        trigger: TriggerSource,
        jobs: list[JobRow],
        pipeline: PipelineRow,
        graph: WorkflowGraph,
        pr_num: int | None,
        pr_config: ParsedConfig | None,
    ) -> Resolution:
        if not isinstance(trigger, (PullRequest, PullRequestBranch)):
            return Resolution()
        if pr_num is None:
            raise ValidationError(f"A PR number is required to start from {trigger.node}")

        by_id = {job.job_id: job for job in jobs}
        by_name = {job.name: job for job in jobs}
        resolution = Resolution()

        # Every live job of this PR restarts, reachable from the trigger or not
        prefix = pr_job_name(pr_num, "")
        resolution.jobs_to_start.extend(
            job for job in jobs if job.name.startswith(prefix) and is_startable(job)
        )

        for node in graph.next_nodes(trigger.node):
            name = pr_job_name(pr_num, node.name)
            pr_job = by_id.get(node.id) if node.id else None
            if pr_job is None:
                pr_job = by_name.get(name)

            base_job = by_name.get(node.name)
            if pr_job is None:
                if base_job is None:
                    logger.warning("Trigger %s references unknown job %s", trigger.node, node.name)
                    continue
                permutations = self._pr_permutations(node.name, pr_config, base_job.permutations)
                pr_job = await self.job_service.create(pipeline.pipeline_id, name, permutations)
                by_name[name] = pr_job
                resolution.jobs_created.append(pr_job)
            elif pr_job.archived:
                current = base_job.permutations if base_job else pr_job.permutations
                permutations = self._pr_permutations(node.name, pr_config, current)
                pr_job = await self.jobs.update(pr_job, archived=False, permutations=permutations)

            if is_startable(pr_job) and pr_job not in resolution.jobs_to_start:
                resolution.jobs_to_start.append(pr_job)

        if resolution.jobs_created:
            logger.info(
                "Created %d job(s) for PR-%s: %s",
                len(resolution.jobs_created),
                pr_num,
                ", ".join(job.name for job in resolution.jobs_created),
            )
        return resolution

    def _pr_permutations(self, base_name: str, pr_config: ParsedConfig | None, fallback: list[dict]) -> list[dict]:
        if pr_config and pr_config.jobs.get(base_name):
            return dump_permutations(pr_config.jobs[base_name])
        return fallback
