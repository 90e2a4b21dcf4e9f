"""Source-path and root-directory filtering for webhook-triggered builds."""

import posixpath
from dataclasses import dataclass, field

from cadence.errors.exceptions import SourcePathsUnsupportedError

SOURCE_PATH_ENV = "SD_SOURCE_PATH"


@dataclass
class BuildPlan:
    """Whether a job should build for this change set, and its injected environment."""

    should_build: bool = True
    environment: dict[str, str] = field(default_factory=dict)


def match_source_paths(changed_files: list[str], source_paths: list[str]) -> str | None:
    """First declared source path touched by the change set.

    Paths ending in ``/`` are directories matched by prefix; anything else must
    equal a changed file exactly.
    """
    for changed in changed_files:
        for source in source_paths:
            if source.endswith("/"):
                if changed.startswith(source):
                    return source
            elif changed == source:
                return source
    return None


def plan_build(
    source_paths: list[str] | None,
    root_dir: str,
    changed_files: list[str] | None,
    webhooks: bool,
) -> BuildPlan:
    """Decide whether a job builds for the event's changed files.

    Only webhook-triggered events are filtered. Declared source paths win over
    the pipeline root directory, which otherwise acts as an implicit source
    path and exposes the directory of the first changed file under it.
    """
    if not webhooks:
        return BuildPlan()

    if source_paths:
        if changed_files is None:
            raise SourcePathsUnsupportedError()
        matched = match_source_paths(changed_files, source_paths)
        if matched is None:
            return BuildPlan(should_build=False)
        return BuildPlan(environment={SOURCE_PATH_ENV: matched})

    if root_dir and changed_files is not None:
        root = f"{root_dir.rstrip('/')}/"
        matched = next((changed for changed in changed_files if changed.startswith(root)), None)
        if matched is None:
            return BuildPlan(should_build=False)
        return BuildPlan(environment={SOURCE_PATH_ENV: posixpath.dirname(matched)})

    return BuildPlan()
