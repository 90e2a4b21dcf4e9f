"""Pipeline repository."""

from cadence.db.models.pipeline import PipelineRow
from cadence.repositories.base import BaseRepository


class PipelineRepository(BaseRepository[PipelineRow]):
    model_class = PipelineRow
    pk_field = "pipeline_id"
