"""
Контракт трекера выполнения

Трекер - единственный источник истины о запуске pipeline и единственный,
кто изменяет его состояние. Граф только читает.
"""

from typing import Optional, Protocol, Tuple, runtime_checkable

from pipeline_graph.models.node import NodeRecord, PipelineStep


@runtime_checkable
class ExecutionTracker(Protocol):
    """Источник состояния одного запуска pipeline"""

    run_id: str

    def node_ids(self) -> Tuple[str, ...]:
        """Id всех материализованных узлов в порядке появления"""
        ...

    def get_record(self, node_id: str) -> Optional[NodeRecord]:
        """Текущая запись узла или None, если узел ещё не материализован"""
        ...

    def get_steps(self, node_id: str) -> Tuple[PipelineStep, ...]:
        """Шаги узла в порядке выполнения"""
        ...

    def is_complete(self) -> bool:
        """Завершён ли запуск"""
        ...
