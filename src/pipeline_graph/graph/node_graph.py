"""
PipelineNodeGraph - граф выполнения одного запуска pipeline

Узлы ссылаются друг на друга только по id (индекс id -> узел), поэтому
граф можно обходить частично, не материализуя соседей.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from pipeline_graph.config.settings import DanglingEdgePolicy, GraphSettings
from pipeline_graph.exceptions.errors import (
    create_cycle_error,
    create_node_not_found_error,
)
from pipeline_graph.graph.node import PipelineNode, read_record
from pipeline_graph.models.node import BlueDownstreamBuild, Edge
from pipeline_graph.observability.logging import GraphLogger
from pipeline_graph.tracker.base import ExecutionTracker


@dataclass(frozen=True)
class DanglingEdge:
    """Ребро на узел, которого нет среди материализованных"""

    source_id: str
    edge: Edge


@dataclass(frozen=True)
class EdgeTypeMismatch:
    """Ребро, тип которого не совпадает с типом узла назначения"""

    source_id: str
    edge: Edge
    actual_type: str


@dataclass
class GraphReport:
    """Результат проверки согласованности графа"""

    run_id: str
    node_count: int
    complete: bool
    dangling_edges: List[DanglingEdge] = field(default_factory=list)
    type_mismatches: List[EdgeTypeMismatch] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        if self.cycles or self.type_mismatches:
            return False
        # пока запуск идёт, рёбра на будущие узлы допустимы
        return not (self.complete and self.dangling_edges)


class PipelineNodeGraph:
    """
    Граф узлов запуска pipeline поверх трекера выполнения

    Example:
        tracker = InMemoryExecutionTracker(run_id="42", records=records)
        graph = PipelineNodeGraph(tracker)

        build = graph.get_node("build")
        [edge.id for edge in build.get_edges()]  # ["test"]
    """

    def __init__(
        self, tracker: ExecutionTracker, settings: Optional[GraphSettings] = None
    ):
        self.tracker = tracker
        self.settings = settings or GraphSettings()
        self.log = GraphLogger(tracker.run_id, __name__)
        self._views: Dict[str, PipelineNode] = {}
        self._lock = threading.Lock()

    @property
    def run_id(self) -> str:
        return self.tracker.run_id

    # Поиск узлов

    def _node_ids(self) -> Tuple[str, ...]:
        try:
            return tuple(self.tracker.node_ids())
        except Exception as e:
            self.log.warning("Tracker failed to list nodes", error=str(e))
            return ()

    def _is_complete(self) -> bool:
        try:
            return self.tracker.is_complete()
        except Exception as e:
            self.log.warning("Tracker failed to report completion", error=str(e))
            return False

    def find_node(self, node_id: str) -> Optional[PipelineNode]:
        """Узел по id или None, если он ещё не материализован"""
        with self._lock:
            view = self._views.get(node_id)
        if view is not None:
            return view

        record = read_record(self.tracker, node_id)
        if record is None:
            return None

        with self._lock:
            return self._views.setdefault(
                node_id, PipelineNode.from_record(self.tracker, record)
            )

    def get_node(self, node_id: str) -> PipelineNode:
        """
        Узел по id

        Raises:
            NodeNotFoundError: Узел отсутствует в графе
        """
        node = self.find_node(node_id)
        if node is None:
            raise create_node_not_found_error(node_id, self.run_id)
        return node

    def get_nodes(self) -> List[PipelineNode]:
        """Все материализованные узлы в порядке трекера"""
        nodes = []
        for node_id in self._node_ids():
            node = self.find_node(node_id)
            if node is not None:
                nodes.append(node)
        return nodes

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, str) and self.find_node(node_id) is not None

    def __iter__(self) -> Iterator[PipelineNode]:
        return iter(self.get_nodes())

    def __len__(self) -> int:
        return len(self._node_ids())

    # Навигация

    def resolve_edge(self, edge: Edge) -> Optional[PipelineNode]:
        return self.find_node(edge.id)

    def successors(self, node_id: str) -> List[PipelineNode]:
        """Материализованные узлы, в которые ведут рёбра узла"""
        node = self.get_node(node_id)
        resolved = (self.resolve_edge(edge) for edge in node.get_edges())
        return [n for n in resolved if n is not None]

    def predecessors(self, node_id: str) -> List[PipelineNode]:
        """Узлы, у которых есть ребро в node_id"""
        self.get_node(node_id)
        return [
            node
            for node in self.get_nodes()
            if any(edge.id == node_id for edge in node.get_edges())
        ]

    def _adjacency(self) -> Dict[str, List[str]]:
        return {
            node.get_id(): [edge.id for edge in node.get_edges()]
            for node in self.get_nodes()
        }

    def start_nodes(self) -> List[PipelineNode]:
        """Узлы без входящих рёбер"""
        adjacency = self._adjacency()
        targets = {target for edges in adjacency.values() for target in edges}
        nodes = (self.find_node(n) for n in adjacency if n not in targets)
        return [node for node in nodes if node is not None]

    def terminal_nodes(self) -> List[PipelineNode]:
        """Узлы без исходящих рёбер"""
        return [node for node in self.get_nodes() if not node.get_edges()]

    def blocked_nodes(self) -> List[PipelineNode]:
        return [node for node in self.get_nodes() if node.is_blocked()]

    def downstream_builds(self) -> Tuple[BlueDownstreamBuild, ...]:
        """Все сборки, запущенные узлами запуска, без повторов"""
        builds: Dict[BlueDownstreamBuild, None] = {}
        for node in self.get_nodes():
            builds.update(dict.fromkeys(node.get_downstream_builds()))
        return tuple(builds)

    # Проверки согласованности

    def _emitter(self, node_id: str, pending_allowed: bool):
        """
        Метод логгера для события согласованности по политике dangling_edges

        Returns:
            Метод логгера или None, если событие не логируется
        """
        policy = self.settings.dangling_edges
        if policy == DanglingEdgePolicy.IGNORE:
            return None

        complete = self._is_complete()
        log = self.log.get_node_logger(node_id).bind(complete=complete)
        if pending_allowed and policy == DanglingEdgePolicy.ALLOW_PENDING and not complete:
            return log.debug
        return log.warning

    def find_dangling_edges(self) -> List[DanglingEdge]:
        """
        Рёбра на узлы, которых нет в графе

        Не является ошибкой: пока запуск идёт, рёбра могут опережать
        материализацию узлов. Каждое такое ребро логируется согласно
        GraphSettings.dangling_edges.
        """
        known = set(self._node_ids())
        dangling = [
            DanglingEdge(node.get_id(), edge)
            for node in self.get_nodes()
            for edge in node.get_edges()
            if edge.id not in known
        ]

        for item in dangling:
            emit = self._emitter(item.source_id, pending_allowed=True)
            if emit is not None:
                emit(
                    "Edge references unknown node",
                    target_id=item.edge.id,
                    target_type=item.edge.type,
                )
        return dangling

    def find_edge_type_mismatches(self) -> List[EdgeTypeMismatch]:
        """
        Рёбра, чей тип расходится с типом материализованного узла назначения

        Тип узла неизменяем, поэтому расхождение - ошибка данных трекера
        независимо от хода запуска. Логируется, но не выбрасывается.
        """
        mismatches = []
        for node in self.get_nodes():
            for edge in node.get_edges():
                target = self.resolve_edge(edge)
                if target is not None and target.get_type() != edge.type:
                    mismatches.append(
                        EdgeTypeMismatch(node.get_id(), edge, target.get_type())
                    )

        for item in mismatches:
            emit = self._emitter(item.source_id, pending_allowed=False)
            if emit is not None:
                emit(
                    "Edge type differs from target node type",
                    target_id=item.edge.id,
                    edge_type=item.edge.type,
                    target_type=item.actual_type,
                )
        return mismatches

    def find_cycles(self) -> List[List[str]]:
        """Циклы среди материализованных узлов. Каждый цикл замкнут: [a, b, a]"""
        adjacency = self._adjacency()
        WHITE, GRAY, BLACK = 0, 1, 2
        color = {node_id: WHITE for node_id in adjacency}
        cycles: List[List[str]] = []

        for root in adjacency:
            if color[root] != WHITE:
                continue

            # явный стек кадров (узел, итератор соседей) вместо рекурсии
            color[root] = GRAY
            path = [root]
            stack = [(root, iter(adjacency[root]))]

            while stack:
                node_id, neighbors = stack[-1]
                neighbor = next(neighbors, None)

                if neighbor is None:
                    stack.pop()
                    path.pop()
                    color[node_id] = BLACK
                elif neighbor not in color:
                    continue
                elif color[neighbor] == GRAY:
                    cycles.append(path[path.index(neighbor):] + [neighbor])
                elif color[neighbor] == WHITE:
                    color[neighbor] = GRAY
                    path.append(neighbor)
                    stack.append((neighbor, iter(adjacency[neighbor])))

        for cycle in cycles:
            self.log.warning("Cycle detected", cycle=cycle)
        return cycles

    def is_acyclic(self) -> bool:
        return not self.find_cycles()

    def topological_order(self) -> List[str]:
        """
        Порядок узлов, в котором каждый узел идёт после всех предшественников

        При равенстве сохраняется порядок трекера и порядок объявления рёбер.

        Raises:
            GraphCycleError: Граф содержит цикл
        """
        adjacency = self._adjacency()
        in_degree = {node_id: 0 for node_id in adjacency}
        for targets in adjacency.values():
            for target in targets:
                if target in in_degree:
                    in_degree[target] += 1

        queue = deque(n for n in adjacency if in_degree[n] == 0)
        order: List[str] = []

        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for target in adjacency[node_id]:
                if target not in in_degree:
                    continue
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)

        if len(order) != len(adjacency):
            cycles = self.find_cycles()
            raise create_cycle_error(cycles[0] if cycles else [])

        return order

    def validate(self) -> GraphReport:
        """Полная проверка согласованности графа"""
        report = GraphReport(
            run_id=self.run_id,
            node_count=len(self),
            complete=self._is_complete(),
            dangling_edges=self.find_dangling_edges(),
            type_mismatches=self.find_edge_type_mismatches(),
            cycles=self.find_cycles(),
        )
        self.log.info(
            "Graph validated",
            nodes=report.node_count,
            dangling_edges=len(report.dangling_edges),
            type_mismatches=len(report.type_mismatches),
            cycles=len(report.cycles),
            consistent=report.is_consistent,
        )
        return report
