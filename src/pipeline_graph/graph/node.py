"""
PipelineNode - вершина DAG запуска pipeline

Представление только для чтения над записью трекера. Идентичность узла
(id и тип) фиксируется при создании, остальное читается у трекера на
каждом вызове. Если состояние узла определить нельзя, методы возвращают
пустой результат вместо исключения.

Пример запуска:

    build : test
    test : unit, integration
    unit : deploy
    integration : deploy
    deploy

                      /---- unit ----------\\
    build--->test--->/                      \\------> deploy
                     \\----- integration ---/
"""

from datetime import datetime
from typing import Iterator, Optional, Tuple

import structlog

from pipeline_graph.models.node import (
    BlueDownstreamBuild,
    Edge,
    NodeRecord,
    NodeResult,
    NodeState,
    PipelineStep,
)
from pipeline_graph.tracker.base import ExecutionTracker

logger = structlog.get_logger(__name__)


def read_record(tracker: ExecutionTracker, node_id: str) -> Optional[NodeRecord]:
    """Чтение записи узла. Любая ошибка трекера превращается в None"""
    try:
        return tracker.get_record(node_id)
    except Exception as e:
        logger.warning(
            "Tracker failed to provide node record",
            run_id=tracker.run_id,
            node_id=node_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


class StepContainer:
    """Навигируемый контейнер шагов узла. Шаги принадлежат трекеру"""

    def __init__(self, tracker: ExecutionTracker, node_id: str):
        self._tracker = tracker
        self.node_id = node_id

    def snapshot(self) -> Tuple[PipelineStep, ...]:
        try:
            return tuple(self._tracker.get_steps(self.node_id))
        except Exception as e:
            logger.warning(
                "Tracker failed to provide steps",
                run_id=self._tracker.run_id,
                node_id=self.node_id,
                error=str(e),
            )
            return ()

    def get(self, step_id: str) -> Optional[PipelineStep]:
        return next((s for s in self.snapshot() if s.id == step_id), None)

    def href(self, node_href: str) -> str:
        return f"{node_href.rstrip('/')}/steps/"

    def __iter__(self) -> Iterator[PipelineStep]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self.snapshot())

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"StepContainer(node_id={self.node_id!r})"


class PipelineNode:
    """Узел запуска pipeline: stage, parallel ветка или контейнер шагов"""

    __slots__ = ("_tracker", "_id", "_type")

    def __init__(self, tracker: ExecutionTracker, node_id: str, node_type: str):
        if not node_id or not node_type:
            raise ValueError("node_id и node_type должны быть непустыми")
        self._tracker = tracker
        self._id = node_id
        self._type = node_type

    @classmethod
    def from_record(cls, tracker: ExecutionTracker, record: NodeRecord) -> "PipelineNode":
        return cls(tracker, record.id, record.type)

    def _record(self) -> Optional[NodeRecord]:
        return read_record(self._tracker, self._id)

    def get_id(self) -> str:
        return self._id

    def get_type(self) -> str:
        return self._type

    def get_display_name(self) -> str:
        record = self._record()
        return (record.display_name if record else None) or self._id

    def get_display_description(self) -> Optional[str]:
        record = self._record()
        return record.display_description if record else None

    def get_state(self) -> Optional[NodeState]:
        record = self._record()
        return record.state if record else None

    def get_result(self) -> Optional[NodeResult]:
        record = self._record()
        return record.result if record else None

    def get_start_time(self) -> Optional[datetime]:
        record = self._record()
        return record.start_time if record else None

    def get_duration_in_millis(self) -> Optional[int]:
        record = self._record()
        return record.duration_in_millis if record else None

    def get_first_parent(self) -> Optional[str]:
        record = self._record()
        return record.first_parent if record else None

    def get_cause_of_blockage(self) -> Optional[str]:
        """
        Причина блокировки узла

        Returns:
            None если узел не заблокирован, иначе непустое объяснение
        """
        record = self._record()
        return record.cause_of_blockage if record else None

    def is_blocked(self) -> bool:
        return self.get_cause_of_blockage() is not None

    def get_steps(self) -> StepContainer:
        """Шаги внутри stage или parallel ветки"""
        return StepContainer(self._tracker, self._id)

    def get_edges(self) -> Tuple[Edge, ...]:
        """Исходящие рёбра в порядке объявления. Пусто для конечных узлов"""
        record = self._record()
        return record.edges if record else ()

    def get_downstream_builds(self) -> Tuple[BlueDownstreamBuild, ...]:
        """Сборки других pipeline, запущенные этим узлом"""
        record = self._record()
        return record.downstream_builds if record else ()

    def __eq__(self, other) -> bool:
        if not isinstance(other, PipelineNode):
            return NotImplemented
        return (
            self._tracker is other._tracker
            and self._id == other._id
            and self._type == other._type
        )

    def __hash__(self) -> int:
        return hash((id(self._tracker), self._id, self._type))

    def __repr__(self) -> str:
        return f"PipelineNode(id={self._id!r}, type={self._type!r})"
