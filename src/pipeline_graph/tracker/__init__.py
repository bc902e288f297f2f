from pipeline_graph.tracker.base import ExecutionTracker
from pipeline_graph.tracker.memory import InMemoryExecutionTracker

__all__ = ["ExecutionTracker", "InMemoryExecutionTracker"]
