"""Job creation policy tests."""

import pytest

from cadence.errors.exceptions import ConflictError
from cadence.models.enums import JobState
from cadence.services.job_service import JobService, convert_to_bool

from fakes import RecordingExecutor, permutation, seed_pipeline


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), ("true", True), ("ON", True), ("y", True), ("no", False), ("", False), (None, False)],
)
def test_convert_to_bool(value, expected):
    assert convert_to_bool(value) is expected


@pytest.mark.asyncio
async def test_disabled_by_default_applies_to_regular_jobs_only(db_session):
    pipeline = await seed_pipeline(db_session)
    service = JobService(db_session, RecordingExecutor())
    perms = [permutation(annotations={"screwdriver.cd/jobDisabledByDefault": "true"}, template_id="tpl_1")]

    job = await service.create(pipeline.pipeline_id, "main", perms)
    pr_job = await service.create(pipeline.pipeline_id, "PR-1:main", perms)

    assert job.state == JobState.DISABLED
    assert job.template_id == "tpl_1"
    assert job.archived is False
    assert pr_job.state == JobState.ENABLED


@pytest.mark.asyncio
async def test_periodic_schedule_skips_pr_jobs(db_session):
    pipeline = await seed_pipeline(db_session)
    executor = RecordingExecutor()
    service = JobService(db_session, executor)
    perms = [permutation(annotations={"screwdriver.cd/buildPeriodically": "H * * * *"})]

    await service.create(pipeline.pipeline_id, "hourly", perms)
    await service.create(pipeline.pipeline_id, "PR-2:hourly", perms)

    assert executor.periodic == ["hourly"]


@pytest.mark.asyncio
async def test_duplicate_job_name_conflicts(db_session):
    pipeline = await seed_pipeline(db_session)
    service = JobService(db_session, RecordingExecutor())
    await service.create(pipeline.pipeline_id, "main", [permutation()])

    with pytest.raises(ConflictError):
        async with db_session.begin_nested():
            await service.create(pipeline.pipeline_id, "main", [permutation()])
