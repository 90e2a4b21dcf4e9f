"""Pydantic model for a parsed pipeline configuration."""

from pydantic import BaseModel, Field

from cadence.models.job import Permutation
from cadence.models.workflow import WorkflowGraph


class ParsedConfig(BaseModel):
    """Result of parsing a pipeline's ``screwdriver.yaml`` at some ref."""

    jobs: dict[str, list[Permutation]] = Field(default_factory=dict)
    workflow_graph: WorkflowGraph = Field(default_factory=WorkflowGraph)
    annotations: dict = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
