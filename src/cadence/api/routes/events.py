"""Event creation and lookup."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.dependencies import get_db, get_plugins
from cadence.errors.exceptions import NotFoundError
from cadence.models.event import EventCreate
from cadence.plugins import Plugins
from cadence.repositories.build_repo import BuildRepository, StepRepository
from cadence.repositories.event_repo import EventRepository
from cadence.services.orchestration.build_assembler import build_out
from cadence.services.orchestration.event_orchestrator import event_out
from cadence.services.orchestration.factory import create_services

router = APIRouter(tags=["Events"])


@router.post("/events", status_code=201)
async def create_event(
    body: EventCreate,
    db: AsyncSession = Depends(get_db),
    plugins: Plugins = Depends(get_plugins),
) -> dict:
    services = create_services(db, plugins)
    event = await services.events.create(body)
    return event.model_dump(mode="json")


@router.get("/events/{event_id}")
async def get_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
) -> dict:
    event = await EventRepository(db).get(event_id)
    if not event:
        raise NotFoundError("Event", event_id)

    steps = StepRepository(db)
    builds = [
        build_out(build, await steps.list_for_build(build.build_id))
        for build in await BuildRepository(db).list_for_event(event_id)
    ]
    return event_out(event, builds or None).model_dump(mode="json")
