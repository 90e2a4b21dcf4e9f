"""Build cluster placement by explicit name or weighted random pick."""

import logging
import random
import re
from typing import Any

from cadence.db.models.build_cluster import BuildClusterRow
from cadence.db.models.pipeline import PipelineRow
from cadence.errors.exceptions import ClusterNotFoundError, ClusterUnauthorizedError
from cadence.models.job import BUILD_CLUSTER_ANNOTATION, Provider
from cadence.repositories.build_cluster_repo import BuildClusterRepository

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"
SCM_ORG_REGEX = re.compile(r"^([^/]+)/.*")


def pick_weighted(clusters: list[BuildClusterRow], rng: random.Random) -> str:
    """Pick a cluster name at random, proportionally to ``weightage``."""
    if not clusters:
        return ""
    total_weight = sum(c.weightage for c in clusters)
    number = int(rng.random() * total_weight)
    cumulative = 0
    for cluster in clusters:
        cumulative += cluster.weightage
        if number < cumulative:
            return cluster.name
    return clusters[0].name


def scm_organization(pipeline_name: str) -> str:
    """``screwdriver-cd/ui`` -> ``screwdriver-cd``."""
    matched = SCM_ORG_REGEX.match(pipeline_name or "")
    return matched.group(1) if matched else ""


def active_clusters(
    clusters: list[BuildClusterRow], scm_context: str, managed_by_screwdriver: bool
) -> list[BuildClusterRow]:
    return [
        c for c in clusters
        if c.managed_by_screwdriver == managed_by_screwdriver
        and c.is_active
        and c.scm_context == scm_context
    ]


def group_clusters(clusters: list[BuildClusterRow]) -> dict[str, list[BuildClusterRow]]:
    grouped: dict[str, list[BuildClusterRow]] = {DEFAULT_GROUP: []}
    for cluster in clusters:
        grouped.setdefault(cluster.group or DEFAULT_GROUP, []).append(cluster)
    return grouped


class BuildClusterSelector:
    def __init__(
        self,
        clusters: BuildClusterRepository,
        multi_cluster_enabled: bool,
        rng: random.Random | None = None,
    ):
        self.clusters = clusters
        self.multi_cluster_enabled = multi_cluster_enabled
        self.rng = rng or random.Random()

    async def select(
        self,
        annotations: dict[str, Any] | None,
        pipeline: PipelineRow,
        provider: Provider | None = None,
        is_pipeline_update: bool = False,
    ) -> str:
        """Name of the cluster to place a build on; empty when placement is off or nothing fits."""
        if not self.multi_cluster_enabled:
            return ""

        cluster_name = (annotations or {}).get(BUILD_CLUSTER_ANNOTATION) or ""
        if not cluster_name:
            cluster_name = (pipeline.annotations or {}).get(BUILD_CLUSTER_ANNOTATION) or ""

        if cluster_name:
            group = cluster_name.split(".")[0]
        elif provider:
            cluster_name = provider.cluster_name
            group = provider.group
        else:
            group = DEFAULT_GROUP

        grouped = group_clusters(await self.clusters.list_all())
        candidates = grouped.get(group)
        if not candidates:
            candidates = grouped[DEFAULT_GROUP]
            group = DEFAULT_GROUP

        managed = active_clusters(candidates, pipeline.scm_context, True)

        if not cluster_name:
            return pick_weighted(managed, self.rng)

        cluster = next(
            (c for c in candidates if c.name == cluster_name and c.scm_context == pipeline.scm_context),
            None,
        )
        if cluster is None:
            raise ClusterNotFoundError(cluster_name, pipeline.scm_context, group)

        if cluster.scm_context != pipeline.scm_context or (
            not cluster.managed_by_screwdriver
            and scm_organization(pipeline.name) not in (cluster.scm_organizations or [])
        ):
            raise ClusterUnauthorizedError(cluster_name)

        if not cluster.is_active and not is_pipeline_update:
            fallback = managed if cluster.managed_by_screwdriver else active_clusters(
                candidates, pipeline.scm_context, False
            )
            picked = pick_weighted(fallback, self.rng)
            logger.warning("Cluster %s is inactive, falling back to %s", cluster_name, picked or "<none>")
            return picked

        return cluster.name
