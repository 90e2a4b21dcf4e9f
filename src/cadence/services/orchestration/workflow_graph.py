"""Derive the workflow graph an event actually runs against."""

import logging

from cadence.db.models.pipeline import PipelineRow
from cadence.models.event import EventCreate
from cadence.models.workflow import WorkflowGraph, WorkflowNode
from cadence.repositories.job_repo import JobRepository
from cadence.services.orchestration.triggers import is_pr_job_name, pr_job_name

logger = logging.getLogger(__name__)


class WorkflowGraphUpdater:
    def __init__(self, jobs: JobRepository):
        self.jobs = jobs

    async def update(
        self,
        pipeline: PipelineRow,
        event_config: EventCreate,
        workflow_graph: WorkflowGraph,
    ) -> WorkflowGraph:
        """Return the graph variant for this event; the input is never modified.

        PR events on PR-chained pipelines get job nodes annotated with the id of
        the matching unarchived ``PR-<num>:<job>`` job. A ``start_from`` that is
        not yet a node is appended as a bare node, unless it names a PR job.
        """
        graph = workflow_graph

        if event_config.is_pr and pipeline.pr_chain:
            graph = await self._resolve_pr_nodes(pipeline, event_config.pr_num, graph)

        start_from = event_config.start_from
        if start_from and not graph.has_node(start_from) and not is_pr_job_name(start_from):
            graph = graph.with_node(WorkflowNode(name=start_from))

        return graph

    async def _resolve_pr_nodes(self, pipeline: PipelineRow, pr_num: int, graph: WorkflowGraph) -> WorkflowGraph:
        pr_jobs = {job.name: job for job in await self.jobs.list_pr_jobs(pipeline.pipeline_id, pr_num)}
        nodes = []
        for node in graph.nodes:
            job = pr_jobs.get(pr_job_name(pr_num, node.name))
            nodes.append(WorkflowNode(name=node.name, id=job.job_id) if job else node)
        logger.debug("Resolved %d PR-%s nodes", sum(1 for n in nodes if n.id), pr_num)
        return graph.with_nodes(nodes)
