"""Plugin bundle and loader for the collaborators the core depends on."""

from dataclasses import dataclass, field

from cadence.plugins.base import Bookend, ConfigParser, Executor, ScmPlugin
from cadence.plugins.defaults import NullBookend, QueueingExecutor


@dataclass
class Plugins:
    """Collaborators for one deployment; bookend and executor default to no-ops."""

    scm: ScmPlugin
    config_parser: ConfigParser
    bookend: Bookend = field(default_factory=NullBookend)
    executor: Executor = field(default_factory=QueueingExecutor)


def import_plugins(dotted_path: str) -> Plugins:
    """Import a zero-argument factory by dotted path and call it.

    ``"myorg.cadence_plugins.build"`` resolves ``build`` in
    ``myorg.cadence_plugins`` and must return a :class:`Plugins`.
    """
    import importlib

    module_path, attr = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    plugins = getattr(module, attr)()
    if not isinstance(plugins, Plugins):
        raise TypeError(f"{dotted_path} returned {type(plugins).__name__}, expected Plugins")
    return plugins
