"""
Observability package для pipeline graph
"""

from pipeline_graph.observability.logging import (
    GraphLogger,
    PipelineGraphLoggerConfig,
    get_logger,
    setup_logging,
)

__all__ = [
    "GraphLogger",
    "PipelineGraphLoggerConfig",
    "get_logger",
    "setup_logging",
]
