"""Trigger resolution tests: graph triggers, job names and PR job materialization."""

import pytest

from cadence.errors.exceptions import NoJobsToStartError, ValidationError
from cadence.models.workflow import WorkflowNode
from cadence.repositories.job_repo import JobRepository
from cadence.services.job_service import JobService
from cadence.services.orchestration.trigger_resolver import TriggerResolver

from fakes import RecordingExecutor, graph, parsed_config, permutation, seed_job, seed_pipeline


@pytest.fixture
def resolver(db_session):
    jobs = JobRepository(db_session)
    return TriggerResolver(jobs, JobService(db_session, RecordingExecutor()))


async def _jobs(db_session, pipeline):
    return await JobRepository(db_session).list_for_pipeline(pipeline.pipeline_id)


@pytest.mark.asyncio
async def test_commit_starts_enabled_jobs_reachable_from_commit(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    main = await seed_job(db_session, pipeline, "main")
    await seed_job(db_session, pipeline, "lint", state="DISABLED")
    await seed_job(db_session, pipeline, "old", archived=True)
    await seed_job(db_session, pipeline, "publish")
    g = graph([("~commit", "main"), ("~commit", "lint"), ("~commit", "old"), ("main", "publish")])

    resolution = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~commit")

    assert [j.job_id for j in resolution.jobs_to_start] == [main.job_id]
    assert resolution.jobs_created == []


@pytest.mark.asyncio
async def test_commit_includes_jobs_bound_to_pipeline_branch(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    await seed_job(db_session, pipeline, "branch-only")
    await seed_job(db_session, pipeline, "other-branch")
    g = graph([("~commit", "main"), ("~commit:main", "branch-only"), ("~commit:dev", "other-branch")])

    resolution = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~commit")

    assert sorted(j.name for j in resolution.jobs_to_start) == ["branch-only", "main"]


@pytest.mark.asyncio
async def test_commit_branch_and_other_triggers_follow_their_edges(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    await seed_job(db_session, pipeline, "dev-only")
    await seed_job(db_session, pipeline, "release")
    g = graph([("~commit", "main"), ("~commit:dev", "dev-only"), ("~release", "release")])
    jobs = await _jobs(db_session, pipeline)

    dev = await resolver.resolve(jobs, pipeline, g, "~commit:dev")
    assert [j.name for j in dev.jobs_to_start] == ["dev-only"]

    release = await resolver.resolve(jobs, pipeline, g, "~release")
    assert [j.name for j in release.jobs_to_start] == ["release"]


@pytest.mark.asyncio
async def test_job_name_starts_that_job_only(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    publish = await seed_job(db_session, pipeline, "publish")
    g = graph([("~commit", "main"), ("main", "publish")])

    resolution = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "publish")

    assert [j.job_id for j in resolution.jobs_to_start] == [publish.job_id]


@pytest.mark.asyncio
async def test_disabled_job_name_has_nothing_to_start(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main", state="DISABLED")
    g = graph([("~commit", "main")])

    with pytest.raises(NoJobsToStartError) as exc_info:
        await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "main")
    assert exc_info.value.details == {"start_from": "main"}


@pytest.mark.asyncio
async def test_unknown_trigger_has_nothing_to_start(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")

    with pytest.raises(NoJobsToStartError):
        await resolver.resolve(await _jobs(db_session, pipeline), pipeline, graph([("~commit", "main")]), "~tag")


@pytest.mark.asyncio
async def test_pr_creates_pr_jobs_from_base_configuration(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    base_perms = [permutation(image="python:3.12", annotations={"screwdriver.cd/jobDisabledByDefault": "true"})]
    await seed_job(db_session, pipeline, "main", permutations=base_perms, state="DISABLED")
    await seed_job(db_session, pipeline, "publish")
    g = graph([("~pr", "main"), ("main", "publish")])

    resolution = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~pr", pr_num=9)

    assert [j.name for j in resolution.jobs_created] == ["PR-9:main"]
    assert [j.name for j in resolution.jobs_to_start] == ["PR-9:main"]
    created = resolution.jobs_created[0]
    # PR jobs ignore jobDisabledByDefault
    assert created.state == "ENABLED"
    assert created.permutations == base_perms


@pytest.mark.asyncio
async def test_pr_resolution_is_idempotent(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    g = graph([("~pr", "main")])

    first = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~pr", pr_num=4)
    second = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~pr", pr_num=4)

    assert len(first.jobs_created) == 1
    assert second.jobs_created == []
    assert [j.job_id for j in second.jobs_to_start] == [first.jobs_created[0].job_id]
    pr_jobs = await JobRepository(db_session).list_pr_jobs(pipeline.pipeline_id, 4)
    assert len(pr_jobs) == 1


@pytest.mark.asyncio
async def test_pr_unarchives_existing_pr_job(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main", permutations=[permutation(image="node:20")])
    stale = await seed_job(
        db_session, pipeline, "PR-2:main", permutations=[permutation(image="node:14")], archived=True
    )

    resolution = await resolver.resolve(
        await _jobs(db_session, pipeline), pipeline, graph([("~pr", "main")]), "~pr", pr_num=2
    )

    assert [j.job_id for j in resolution.jobs_to_start] == [stale.job_id]
    assert stale.archived is False
    assert stale.permutations[0]["image"] == "node:20"


@pytest.mark.asyncio
async def test_pr_uses_resolved_node_ids(db_session, resolver):
    pipeline = await seed_pipeline(db_session, pr_chain=True)
    await seed_job(db_session, pipeline, "main")
    pr_job = await seed_job(db_session, pipeline, "PR-3:main")
    g = graph([("~pr", "main")]).with_nodes(
        [WorkflowNode(name="~pr"), WorkflowNode(name="main", id=pr_job.job_id)]
    )

    resolution = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~pr", pr_num=3)

    assert [j.job_id for j in resolution.jobs_to_start] == [pr_job.job_id]
    assert resolution.jobs_created == []


@pytest.mark.asyncio
async def test_pr_branch_trigger(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    await seed_job(db_session, pipeline, "release-check")
    g = graph([("~pr", "main"), ("~pr:release", "release-check")])

    resolution = await resolver.resolve(
        await _jobs(db_session, pipeline), pipeline, g, "~pr:release", pr_num=11
    )

    assert [j.name for j in resolution.jobs_to_start] == ["PR-11:release-check"]


@pytest.mark.asyncio
async def test_pr_without_number_is_rejected(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")

    with pytest.raises(ValidationError):
        await resolver.resolve(await _jobs(db_session, pipeline), pipeline, graph([("~pr", "main")]), "~pr")


@pytest.mark.asyncio
async def test_pr_restarts_every_enabled_job_of_that_pr(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    await seed_job(db_session, pipeline, "lint")
    lint = await seed_job(db_session, pipeline, "PR-3:lint")
    await seed_job(db_session, pipeline, "PR-3:docs", state="DISABLED")
    await seed_job(db_session, pipeline, "PR-4:lint")
    g = graph([("~pr", "main")], extra_nodes=["lint"])

    resolution = await resolver.resolve(await _jobs(db_session, pipeline), pipeline, g, "~pr", pr_num=3)

    assert [j.name for j in resolution.jobs_created] == ["PR-3:main"]
    assert [j.name for j in resolution.jobs_to_start] == ["PR-3:lint", "PR-3:main"]
    assert resolution.jobs_to_start[0].job_id == lint.job_id
    pr_jobs = await JobRepository(db_session).list_pr_jobs(pipeline.pipeline_id, 3)
    assert sorted(j.name for j in pr_jobs) == ["PR-3:docs", "PR-3:lint", "PR-3:main"]


@pytest.mark.asyncio
async def test_existing_pr_job_on_trigger_edge_is_started_once(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main")
    pr_job = await seed_job(db_session, pipeline, "PR-6:main")

    resolution = await resolver.resolve(
        await _jobs(db_session, pipeline), pipeline, graph([("~pr", "main")]), "~pr", pr_num=6
    )

    assert [j.job_id for j in resolution.jobs_to_start] == [pr_job.job_id]
    assert resolution.jobs_created == []


@pytest.mark.asyncio
async def test_new_pr_job_takes_permutations_from_pr_ref(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    await seed_job(db_session, pipeline, "main", permutations=[permutation(commands=[("test", "npm test")])])
    pr_perm = permutation(commands=[("test", "npm run pr-test")])
    pr_config = parsed_config({"main": pr_perm}, [("~pr", "main")])

    resolution = await resolver.resolve(
        await _jobs(db_session, pipeline),
        pipeline,
        pr_config.workflow_graph,
        "~pr",
        pr_num=5,
        pr_config=pr_config,
    )

    assert resolution.jobs_created[0].permutations == [pr_perm]


@pytest.mark.asyncio
async def test_new_pr_job_falls_back_to_base_when_pr_ref_lacks_it(db_session, resolver):
    pipeline = await seed_pipeline(db_session)
    base_perms = [permutation(image="node:20")]
    await seed_job(db_session, pipeline, "main", permutations=base_perms)
    pr_config = parsed_config({"other": permutation()}, [("~pr", "other")])

    resolution = await resolver.resolve(
        await _jobs(db_session, pipeline), pipeline, graph([("~pr", "main")]), "~pr", pr_num=5, pr_config=pr_config
    )

    assert resolution.jobs_created[0].permutations == base_perms
