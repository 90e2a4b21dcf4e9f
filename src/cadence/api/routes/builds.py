"""Build creation and lookup."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.dependencies import get_db, get_plugins
from cadence.errors.exceptions import NotFoundError
from cadence.models.build import BuildCreate
from cadence.plugins import Plugins
from cadence.repositories.build_repo import BuildRepository, StepRepository
from cadence.services.orchestration.build_assembler import build_out
from cadence.services.orchestration.factory import create_services

router = APIRouter(tags=["Builds"])


@router.post("/builds", status_code=201)
async def create_build(
    body: BuildCreate,
    db: AsyncSession = Depends(get_db),
    plugins: Plugins = Depends(get_plugins),
) -> dict:
    services = create_services(db, plugins)
    build = await services.builds.create(body)
    return build.model_dump(mode="json")


@router.get("/builds/{build_id}")
async def get_build(
    build_id: str,
    db: AsyncSession = Depends(get_db),
) -> dict:
    build = await BuildRepository(db).get(build_id)
    if not build:
        raise NotFoundError("Build", build_id)
    steps = await StepRepository(db).list_for_build(build_id)
    return build_out(build, steps).model_dump(mode="json")
