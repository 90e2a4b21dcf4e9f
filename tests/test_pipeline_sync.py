"""Pipeline and pull request sync tests."""

import pytest

from cadence.errors.exceptions import NotFoundError
from cadence.repositories.job_repo import JobRepository
from cadence.services.job_service import JobService
from cadence.services.pipeline_sync import PipelineSyncService

from fakes import FakeScm, HEAD_SHA, parsed_config, permutation, seed_job, seed_pipeline, seed_user


@pytest.fixture
def sync_service(db_session, plugins):
    return PipelineSyncService(
        db_session,
        plugins.scm,
        plugins.config_parser,
        JobService(db_session, plugins.executor),
    )


async def _jobs_by_name(db_session, pipeline):
    return {j.name: j for j in await JobRepository(db_session).list_for_pipeline(pipeline.pipeline_id)}


@pytest.mark.asyncio
async def test_sync_reconciles_job_set(db_session, plugins, sync_service):
    await seed_user(db_session)
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main", permutations=[permutation(image="node:14")])
    await seed_job(db_session, pipeline, "removed")
    await seed_job(db_session, pipeline, "revived", archived=True)
    await seed_job(db_session, pipeline, "PR-1:removed")
    plugins.config_parser.default = parsed_config(
        {"main": permutation(image="node:20"), "revived": permutation(), "new": permutation()},
        [("~commit", "main"), ("main", "new")],
        annotations={"screwdriver.cd/buildCluster": "sd1"},
    )

    await sync_service.sync(pipeline, ref=HEAD_SHA)

    jobs = await _jobs_by_name(db_session, pipeline)
    assert jobs["main"].permutations[0]["image"] == "node:20"
    assert jobs["main"].sha == HEAD_SHA
    assert jobs["removed"].archived is True
    assert jobs["revived"].archived is False
    assert jobs["new"].archived is False
    assert jobs["new"].sha == HEAD_SHA
    assert jobs["PR-1:removed"].archived is False
    assert pipeline.annotations == {"screwdriver.cd/buildCluster": "sd1"}
    assert pipeline.workflow_graph["edges"] == [{"src": "~commit", "dest": "main"}, {"src": "main", "dest": "new"}]


@pytest.mark.asyncio
async def test_missing_configuration_file_parses_as_empty(db_session, sync_service):
    class NoFileScm(FakeScm):
        async def get_file(self, scm_uri, scm_context, path, token, ref=None):
            raise FileNotFoundError(path)

    await seed_user(db_session)
    pipeline = await seed_pipeline(db_session)
    sync_service.scm = NoFileScm()
    sync_service.config_parser.by_ref[""] = parsed_config({"never": permutation()}, [])

    parsed = await sync_service.get_configuration(pipeline)

    assert parsed.jobs == {}


@pytest.mark.asyncio
async def test_sync_requires_admin_user(db_session, sync_service):
    pipeline = await seed_pipeline(db_session, admins=["ghost"])

    with pytest.raises(NotFoundError) as exc_info:
        await sync_service.sync(pipeline)
    assert exc_info.value.resource == "User"


@pytest.mark.asyncio
async def test_sync_pr_refreshes_pr_jobs_from_pr_ref(db_session, plugins, sync_service):
    await seed_user(db_session)
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    pr_job = await seed_job(db_session, pipeline, "PR-8:main", permutations=[permutation(image="node:14")])
    plugins.config_parser.by_ref["pull/8/merge"] = parsed_config(
        {"main": permutation(image="node:22")}, [("~pr", "main")]
    )

    parsed = await sync_service.sync_pr(pipeline, 8)

    assert plugins.scm.file_refs == ["pull/8/merge"]
    assert pr_job.permutations[0]["image"] == "node:22"
    assert parsed.workflow_graph.next_jobs("~pr") == ["main"]


@pytest.mark.asyncio
async def test_periodic_jobs_are_scheduled_on_creation(db_session, plugins, sync_service):
    await seed_user(db_session)
    pipeline = await seed_pipeline(db_session)
    plugins.config_parser.default = parsed_config(
        {"nightly": permutation(annotations={"screwdriver.cd/buildPeriodically": "H 0 * * *"})},
        [],
    )

    await sync_service.sync(pipeline)

    assert plugins.executor.periodic == ["nightly"]


@pytest.mark.asyncio
async def test_sync_pr_prefers_event_pr_ref(db_session, plugins, sync_service):
    await seed_user(db_session)
    pipeline = await seed_pipeline(db_session)
    plugins.config_parser.by_ref["refs/pull/8/head"] = parsed_config(
        {"main": permutation(image="node:22")}, [("~pr", "main")]
    )

    parsed = await sync_service.sync_pr(pipeline, 8, "refs/pull/8/head")

    assert plugins.scm.file_refs == ["refs/pull/8/head"]
    assert list(parsed.jobs) == ["main"]
