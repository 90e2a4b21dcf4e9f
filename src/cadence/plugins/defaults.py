"""Minimal collaborator implementations for single-node deployments."""

import logging
from datetime import datetime, timezone

from cadence.db.models.build import BuildRow
from cadence.db.models.job import JobRow
from cadence.db.models.pipeline import PipelineRow
from cadence.plugins.base import Bookend, BookendContext, BookendKey, Executor

logger = logging.getLogger(__name__)


class NullBookend(Bookend):
    """Adds no setup or teardown commands."""

    async def get_setup_commands(self, context: BookendContext, key: BookendKey) -> list[dict[str, str]]:
        return []

    async def get_teardown_commands(self, context: BookendContext, key: BookendKey) -> list[dict[str, str]]:
        return []


class QueueingExecutor(Executor):
    """Leaves builds QUEUED and stamps the queue entry time.

    An external runner is expected to pick QUEUED builds up from the database.
    """

    async def start(self, build: BuildRow, cause_message: str | None = None) -> BuildRow:
        build.stats = {**(build.stats or {}), "queueEnterTime": datetime.now(timezone.utc).isoformat()}
        logger.info("Build %s queued (job=%s, cause=%s)", build.build_id, build.job_id, cause_message)
        return build

    async def start_periodic(self, pipeline: PipelineRow, job: JobRow) -> None:
        logger.info("Periodic builds for job %s are not scheduled by QueueingExecutor", job.job_id)
