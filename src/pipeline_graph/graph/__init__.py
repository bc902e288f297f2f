from pipeline_graph.graph.node import PipelineNode, StepContainer
from pipeline_graph.graph.node_graph import (
    DanglingEdge,
    EdgeTypeMismatch,
    GraphReport,
    PipelineNodeGraph,
)

__all__ = [
    "DanglingEdge",
    "EdgeTypeMismatch",
    "GraphReport",
    "PipelineNode",
    "PipelineNodeGraph",
    "StepContainer",
]
