"""Abstract interfaces for the collaborators the orchestration core drives."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from cadence.db.models.build import BuildRow
from cadence.db.models.job import JobRow
from cadence.db.models.pipeline import PipelineRow
from cadence.models.pipeline import ParsedConfig


class ScmPlugin(ABC):
    """Source-control provider."""

    @abstractmethod
    async def unseal_token(self, sealed_token: str | None, scm_context: str) -> str:
        """Turn a stored (sealed) user token into a usable API token."""
        ...

    @abstractmethod
    async def get_commit_sha(self, scm_uri: str, scm_context: str, token: str) -> str:
        """Return the head commit SHA of the repository's configured branch."""
        ...

    @abstractmethod
    async def decorate_commit(
        self,
        scm_uri: str,
        scm_context: str,
        sha: str,
        token: str,
        scm_repo: dict | None = None,
    ) -> dict[str, Any]:
        """Return ``{"url", "message", "author"}`` for a commit."""
        ...

    @abstractmethod
    async def decorate_author(self, username: str, scm_context: str, token: str) -> dict[str, Any]:
        """Return ``{"username", "name", "url", "avatar"}`` for a user."""
        ...

    @abstractmethod
    def get_display_name(self, scm_context: str) -> str | None:
        """Short label for the SCM (e.g. ``github``), or None."""
        ...

    @abstractmethod
    async def get_file(self, scm_uri: str, scm_context: str, path: str, token: str, ref: str | None = None) -> str:
        """Fetch the contents of a file at ``ref`` (default branch when None).

        Raises FileNotFoundError when the file does not exist at that ref.
        """
        ...

    @abstractmethod
    async def get_pr_info(self, scm_uri: str, scm_context: str, token: str, pr_num: int) -> dict[str, Any]:
        """Return pull request details, including its ``ref``."""
        ...


@dataclass
class BookendKey:
    """Lookup key for environment-specific setup/teardown commands."""

    executor: str
    cluster: str | None = None
    env: str | None = None


@dataclass
class BookendContext:
    pipeline: PipelineRow
    job: JobRow
    build: dict[str, Any]
    config_pipeline: PipelineRow | None = None
    config_pipeline_sha: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


class Bookend(ABC):
    """Supplies the commands that wrap every build."""

    @abstractmethod
    async def get_setup_commands(self, context: BookendContext, key: BookendKey) -> list[dict[str, str]]:
        ...

    @abstractmethod
    async def get_teardown_commands(self, context: BookendContext, key: BookendKey) -> list[dict[str, str]]:
        ...


class Executor(ABC):
    """Execution subsystem that runs assembled builds."""

    @abstractmethod
    async def start(self, build: BuildRow, cause_message: str | None = None) -> BuildRow:
        """Hand a persisted build to the executor and return it updated."""
        ...

    async def start_periodic(self, pipeline: PipelineRow, job: JobRow) -> None:
        """Register a periodic build schedule. Override in executors that support it."""
        raise NotImplementedError(f"{type(self).__name__} does not support periodic builds")


class ConfigParser(ABC):
    """Turns raw pipeline configuration text into jobs and a workflow graph."""

    @abstractmethod
    async def parse(self, yaml_text: str) -> ParsedConfig:
        ...
