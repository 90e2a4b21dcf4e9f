"""Prefixed ID generation utility."""

import uuid

# Prefix per persisted entity type
PIPELINE = "pipe_"
JOB = "job_"
EVENT = "evt_"
BUILD = "bld_"
STEP = "step_"
BUILD_CLUSTER = "bc_"
USER = "usr_"
STAGE = "stg_"
STAGE_BUILD = "sb_"


def generate_id(prefix: str) -> str:
    """Generate a prefixed unique ID.

    Args:
        prefix: The prefix (e.g., "evt_", "bld_", "job_").

    Returns:
        A string like "evt_a1b2c3d4e5f6a7b8".
    """
    short_uuid = uuid.uuid4().hex[:16]
    return f"{prefix}{short_uuid}"
