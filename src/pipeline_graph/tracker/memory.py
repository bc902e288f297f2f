"""
In-memory трекер выполнения

Хранит неизменяемые NodeRecord и заменяет их целиком под RLock, поэтому
конкурентные читатели всегда получают согласованную запись.
"""

import threading
from typing import Any, Dict, Iterable, Optional, Tuple

import structlog
from pydantic import ValidationError

from pipeline_graph.exceptions.errors import TrackerUpdateError
from pipeline_graph.models.node import (
    BlueDownstreamBuild,
    Edge,
    NodeRecord,
    PipelineStep,
)

logger = structlog.get_logger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "type", "first_parent"})


class InMemoryExecutionTracker:
    """Потокобезопасный трекер выполнения в памяти"""

    def __init__(
        self,
        run_id: str = "1",
        records: Optional[Iterable[NodeRecord]] = None,
        complete: bool = False,
    ):
        self.run_id = run_id
        self._lock = threading.RLock()
        self._records: Dict[str, NodeRecord] = {}
        self._complete = complete

        for record in records or ():
            self.add_node(record)

    # Чтение

    def node_ids(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._records)

    def get_record(self, node_id: str) -> Optional[NodeRecord]:
        with self._lock:
            return self._records.get(node_id)

    def get_steps(self, node_id: str) -> Tuple[PipelineStep, ...]:
        record = self.get_record(node_id)
        return record.steps if record else ()

    def is_complete(self) -> bool:
        with self._lock:
            return self._complete

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # Запись

    def add_node(self, record: NodeRecord) -> NodeRecord:
        """Материализация нового узла"""
        with self._lock:
            if record.id in self._records:
                raise TrackerUpdateError(
                    f"Узел '{record.id}' уже существует",
                    node_id=record.id,
                    details={"run_id": self.run_id},
                )
            self._records[record.id] = record

        logger.debug(
            "Node materialized", run_id=self.run_id, node_id=record.id, type=record.type
        )
        return record

    def update_node(self, node_id: str, **changes: Any) -> NodeRecord:
        """
        Замена записи узла новой версией

        Args:
            node_id: Id узла
            **changes: Новые значения полей NodeRecord

        Returns:
            NodeRecord: Новая запись

        Raises:
            TrackerUpdateError: Узел не найден, поле неизвестно, значение
                некорректно, меняется неизменяемое поле или существующие
                рёбра переупорядочены
        """
        unknown = set(changes) - set(NodeRecord.model_fields)
        if unknown:
            raise TrackerUpdateError(
                f"Неизвестные поля узла '{node_id}': {sorted(unknown)}",
                node_id=node_id,
            )

        forbidden = IMMUTABLE_FIELDS.intersection(changes)

        with self._lock:
            current = self._records.get(node_id)
            if current is None:
                raise TrackerUpdateError(
                    f"Узел '{node_id}' не найден", node_id=node_id
                )

            changed = [f for f in forbidden if changes[f] != getattr(current, f)]
            if changed:
                raise TrackerUpdateError(
                    f"Поля {sorted(changed)} узла '{node_id}' неизменяемы",
                    node_id=node_id,
                )

            data = current.model_dump()
            data.update(changes)
            try:
                updated = NodeRecord.model_validate(data)
            except ValidationError as e:
                raise TrackerUpdateError(
                    f"Некорректное обновление узла '{node_id}'",
                    node_id=node_id,
                    details={"errors": e.error_count(), "first": e.errors()[0]["msg"]},
                )

            # рёбра можно только дописывать, порядок объявленных сохраняется
            if updated.edges[: len(current.edges)] != current.edges:
                raise TrackerUpdateError(
                    f"Рёбра узла '{node_id}' можно только дополнять",
                    node_id=node_id,
                    details={
                        "current": [e.id for e in current.edges],
                        "new": [e.id for e in updated.edges],
                    },
                )

            self._records[node_id] = updated

        return updated

    def add_edge(self, node_id: str, edge: Edge) -> NodeRecord:
        with self._lock:
            record = self._require(node_id)
            return self.update_node(node_id, edges=record.edges + (edge,))

    def set_blockage(self, node_id: str, cause: Optional[str]) -> NodeRecord:
        """Установка (или снятие при None) причины блокировки"""
        logger.debug(
            "Blockage changed", run_id=self.run_id, node_id=node_id, cause=cause
        )
        return self.update_node(node_id, cause_of_blockage=cause)

    def clear_blockage(self, node_id: str) -> NodeRecord:
        return self.set_blockage(node_id, None)

    def add_downstream_build(
        self, node_id: str, build: BlueDownstreamBuild
    ) -> NodeRecord:
        with self._lock:
            record = self._require(node_id)
            return self.update_node(
                node_id, downstream_builds=record.downstream_builds + (build,)
            )

    def add_step(self, node_id: str, step: PipelineStep) -> NodeRecord:
        with self._lock:
            record = self._require(node_id)
            return self.update_node(node_id, steps=record.steps + (step,))

    def mark_complete(self) -> None:
        with self._lock:
            self._complete = True
        logger.info("Run completed", run_id=self.run_id, nodes=len(self))

    def _require(self, node_id: str) -> NodeRecord:
        record = self.get_record(node_id)
        if record is None:
            raise TrackerUpdateError(f"Узел '{node_id}' не найден", node_id=node_id)
        return record
