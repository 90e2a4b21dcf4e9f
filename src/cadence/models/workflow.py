"""Immutable workflow graph: trigger and job nodes joined by edges."""

from pydantic import BaseModel, ConfigDict


class WorkflowNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    # Resolved job id; set for PR-chained graphs
    id: str | None = None


class WorkflowEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str
    dest: str
    join: bool | None = None


class WorkflowGraph(BaseModel):
    """A value-typed snapshot of a pipeline workflow.

    Nodes are job names or trigger pseudo-names (``~commit``, ``~pr:main``,
    ``~sd@123:deploy``...). Edges point from a source node name to the name
    of the job it triggers. Methods never mutate; they return new graphs.
    """

    model_config = ConfigDict(frozen=True)

    nodes: tuple[WorkflowNode, ...] = ()
    edges: tuple[WorkflowEdge, ...] = ()

    def has_node(self, name: str) -> bool:
        return any(node.name == name for node in self.nodes)

    def node(self, name: str) -> WorkflowNode | None:
        return next((node for node in self.nodes if node.name == name), None)

    def next_jobs(self, trigger: str) -> list[str]:
        """Names reachable by a single edge from ``trigger``, in edge order."""
        names: list[str] = []
        for edge in self.edges:
            if edge.src == trigger and edge.dest not in names:
                names.append(edge.dest)
        return names

    def next_nodes(self, trigger: str) -> list[WorkflowNode]:
        """Like ``next_jobs`` but yields nodes, so resolved ids travel along."""
        return [self.node(name) or WorkflowNode(name=name) for name in self.next_jobs(trigger)]

    def with_node(self, node: WorkflowNode) -> "WorkflowGraph":
        return self.model_copy(update={"nodes": self.nodes + (node,)})

    def with_nodes(self, nodes: list[WorkflowNode]) -> "WorkflowGraph":
        return self.model_copy(update={"nodes": tuple(nodes)})

    def to_json(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
