"""
Configuration package для pipeline graph
"""

from pipeline_graph.config.settings import (
    DanglingEdgePolicy,
    GraphSettings,
    LogFormat,
    LogLevel,
)

__all__ = [
    "DanglingEdgePolicy",
    "GraphSettings",
    "LogFormat",
    "LogLevel",
]
