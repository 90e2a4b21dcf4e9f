"""Event repository."""

from cadence.db.models.event import EventRow
from cadence.repositories.base import BaseRepository


class EventRepository(BaseRepository[EventRow]):
    model_class = EventRow
    pk_field = "event_id"
