from pipeline_graph.serialization.wire import (
    SUPPORTED_WIRE_VERSIONS,
    WIRE_VERSION,
    serialize_downstream_build,
    serialize_edge,
    serialize_graph,
    serialize_link,
    serialize_node,
    serialize_step,
    serialize_steps,
    to_json,
)

__all__ = [
    "SUPPORTED_WIRE_VERSIONS",
    "WIRE_VERSION",
    "serialize_downstream_build",
    "serialize_edge",
    "serialize_graph",
    "serialize_link",
    "serialize_node",
    "serialize_step",
    "serialize_steps",
    "to_json",
]
