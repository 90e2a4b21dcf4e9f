"""Trigger sources an event can start from, parsed once from ``start_from``."""

import re
from dataclasses import dataclass

from cadence.db.models.job import PR_JOB_NAME

COMMIT_TRIGGER = re.compile(r"^~commit(?::(.+))?$")
PR_TRIGGER = re.compile(r"^~pr(?::(.+))?$")


@dataclass(frozen=True)
class Commit:
    @property
    def node(self) -> str:
        return "~commit"


@dataclass(frozen=True)
class CommitBranch:
    branch: str

    @property
    def node(self) -> str:
        return f"~commit:{self.branch}"


@dataclass(frozen=True)
class PullRequest:
    @property
    def node(self) -> str:
        return "~pr"


@dataclass(frozen=True)
class PullRequestBranch:
    branch: str

    @property
    def node(self) -> str:
        return f"~pr:{self.branch}"


@dataclass(frozen=True)
class JobName:
    name: str

    @property
    def node(self) -> str:
        return self.name


@dataclass(frozen=True)
class Other:
    """Any other graph-defined trigger: ``~release``, ``~tag``, ``~sd@123:main``..."""

    name: str

    @property
    def node(self) -> str:
        return self.name


TriggerSource = Commit | CommitBranch | PullRequest | PullRequestBranch | JobName | Other


def parse_trigger(start_from: str) -> TriggerSource:
    """Classify a ``start_from`` value into exactly one trigger source."""
    match = COMMIT_TRIGGER.match(start_from)
    if match:
        return CommitBranch(match.group(1)) if match.group(1) else Commit()

    match = PR_TRIGGER.match(start_from)
    if match:
        return PullRequestBranch(match.group(1)) if match.group(1) else PullRequest()

    if start_from.startswith("~"):
        return Other(start_from)

    return JobName(start_from)


def is_pr_job_name(name: str) -> bool:
    return PR_JOB_NAME.match(name) is not None


def pr_job_name(pr_num: int, base_name: str) -> str:
    return f"PR-{pr_num}:{base_name}"
