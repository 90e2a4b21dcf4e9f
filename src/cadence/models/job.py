"""Pydantic models for job configuration (permutations)."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

BUILD_CLUSTER_ANNOTATION = "screwdriver.cd/buildCluster"
EXECUTOR_ANNOTATION = "screwdriver.cd/executor"
EXECUTOR_ANNOTATION_BETA = "beta.screwdriver.cd/executor"
DISABLED_BY_DEFAULT_ANNOTATION = "screwdriver.cd/jobDisabledByDefault"
BUILD_PERIODICALLY_ANNOTATION = "screwdriver.cd/buildPeriodically"


class Command(BaseModel):
    name: str
    command: str


class Provider(BaseModel):
    """Cloud provider placement request declared on a job."""

    name: str
    build_region: str
    executor: str
    account_id: str
    environment_type: str | None = None

    @property
    def cluster_name(self) -> str:
        return f"{self.name}.{self.build_region}.{self.executor}.{self.account_id}"

    @property
    def group(self) -> str:
        return f"{self.name}.{self.executor}"


class Permutation(BaseModel):
    """One configuration variant of a job."""

    model_config = ConfigDict(extra="allow")

    image: str
    commands: list[Command] = Field(default_factory=list)
    environment: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, Any] = Field(default_factory=dict)
    source_paths: list[str] | None = None
    provider: Provider | None = None
    template_id: str | None = None
    requires: list[str] = Field(default_factory=list)
