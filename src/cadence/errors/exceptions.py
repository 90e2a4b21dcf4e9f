"""Custom exception classes for the cadence orchestration core."""


class CadenceError(Exception):
    """Base exception for cadence."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(CadenceError):
    """Schema or request validation failure."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class NotFoundError(CadenceError):
    """Referenced entity (job, pipeline, user, stage...) does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class ConflictError(CadenceError):
    """Resource state conflict."""

    def __init__(self, message: str):
        super().__init__("CONFLICT", message, status_code=409)


class NoJobsToStartError(CadenceError):
    """A trigger resolved to zero enabled jobs."""

    def __init__(self, start_from: str):
        self.start_from = start_from
        super().__init__(
            "NO_JOBS_TO_START",
            "No jobs to start",
            details={"start_from": start_from},
            status_code=422,
        )


class ClusterNotFoundError(CadenceError):
    """An explicitly requested build cluster does not exist."""

    def __init__(self, cluster_name: str, scm_context: str, group: str):
        super().__init__(
            "CLUSTER_NOT_FOUND",
            f"Cluster specified in screwdriver.cd/buildCluster {cluster_name} "
            f"for scmContext {scm_context} and group {group} does not exist.",
            details={"cluster": cluster_name, "scm_context": scm_context, "group": group},
            status_code=404,
        )


class ClusterUnauthorizedError(CadenceError):
    """The pipeline may not place builds on the requested cluster."""

    def __init__(self, cluster_name: str):
        super().__init__(
            "CLUSTER_UNAUTHORIZED",
            "This pipeline is not authorized to use this build cluster.",
            details={"cluster": cluster_name},
            status_code=403,
        )


class SourcePathsUnsupportedError(CadenceError):
    """Jobs declare source paths but the SCM reported no changed files."""

    def __init__(self):
        super().__init__(
            "SOURCE_PATHS_UNSUPPORTED",
            "Your SCM does not support Source Paths",
            status_code=422,
        )


class PluginsNotConfiguredError(CadenceError):
    """The application was started without SCM/bookend/executor plugins."""

    def __init__(self):
        super().__init__(
            "PLUGINS_NOT_CONFIGURED",
            "SCM, bookend, executor and config parser plugins are not configured",
            status_code=503,
        )
