from pipeline_graph.exceptions.errors import (
    PipelineGraphError,
    GraphConfigError,
    NodeNotFoundError,
    GraphCycleError,
    GraphSerializationError,
    TrackerUpdateError,
    UnsupportedWireVersionError,
    create_node_not_found_error,
    create_cycle_error,
)

__all__ = [
    "PipelineGraphError",
    "GraphConfigError",
    "NodeNotFoundError",
    "GraphCycleError",
    "GraphSerializationError",
    "TrackerUpdateError",
    "UnsupportedWireVersionError",
    "create_node_not_found_error",
    "create_cycle_error",
]
