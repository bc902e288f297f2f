"""
Pipeline Graph - граф выполнения запуска pipeline

Основные компоненты:
- PipelineNode и PipelineNodeGraph: представление DAG запуска только для чтения
- ExecutionTracker: контракт источника состояния запуска и in-memory реализация
- Явное версионированное преобразование в wire формат
- Загрузка снимков запуска из YAML
- Observability: структурированные логи на structlog
"""

__version__ = "0.1.0"

from pipeline_graph.config.settings import DanglingEdgePolicy, GraphSettings
from pipeline_graph.exceptions.errors import (
    GraphConfigError,
    GraphCycleError,
    GraphSerializationError,
    NodeNotFoundError,
    PipelineGraphError,
    TrackerUpdateError,
    UnsupportedWireVersionError,
)
from pipeline_graph.graph.node import PipelineNode, StepContainer
from pipeline_graph.graph.node_graph import (
    DanglingEdge,
    EdgeTypeMismatch,
    GraphReport,
    PipelineNodeGraph,
)
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
from pipeline_graph.observability.logging import get_logger, setup_logging
from pipeline_graph.parser.yaml_parser import RunSnapshotParser, load_run_snapshot
from pipeline_graph.serialization.wire import (
    serialize_downstream_build,
    serialize_edge,
    serialize_graph,
    serialize_node,
    to_json,
)
from pipeline_graph.tracker.base import ExecutionTracker
from pipeline_graph.tracker.memory import InMemoryExecutionTracker

__all__ = [
    "__version__",
    # Модели
    "BlueDownstreamBuild",
    "Edge",
    "Link",
    "NodeRecord",
    "NodeResult",
    "NodeState",
    "NodeType",
    "PipelineStep",
    # Граф
    "DanglingEdge",
    "EdgeTypeMismatch",
    "GraphReport",
    "PipelineNode",
    "PipelineNodeGraph",
    "StepContainer",
    # Трекер
    "ExecutionTracker",
    "InMemoryExecutionTracker",
    # Экспорт
    "serialize_downstream_build",
    "serialize_edge",
    "serialize_graph",
    "serialize_node",
    "to_json",
    # Конфигурация и парсер
    "DanglingEdgePolicy",
    "GraphSettings",
    "RunSnapshotParser",
    "load_run_snapshot",
    # Логирование
    "get_logger",
    "setup_logging",
    # Исключения
    "GraphConfigError",
    "GraphCycleError",
    "GraphSerializationError",
    "NodeNotFoundError",
    "PipelineGraphError",
    "TrackerUpdateError",
    "UnsupportedWireVersionError",
]
