from pipeline_graph.models.node import (
    BlueDownstreamBuild,
    Edge,
    Link,
    NodeRecord,
    NodeResult,
    NodeState,
    NodeType,
    PipelineStep,
)

__all__ = [
    "BlueDownstreamBuild",
    "Edge",
    "Link",
    "NodeRecord",
    "NodeResult",
    "NodeState",
    "NodeType",
    "PipelineStep",
]
