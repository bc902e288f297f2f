"""
Исключения для pipeline graph
"""

from typing import Optional, Dict, Any, List


class PipelineGraphError(Exception):
    """Базовое исключение для всех ошибок pipeline graph"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class GraphConfigError(PipelineGraphError):
    """Ошибка в конфигурации или снимке графа"""

    pass


class NodeNotFoundError(PipelineGraphError):
    """Узел с заданным id отсутствует в графе"""

    def __init__(
        self,
        message: str,
        node_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.node_id = node_id


class GraphCycleError(PipelineGraphError):
    """Граф выполнения содержит цикл"""

    def __init__(
        self,
        message: str,
        cycle: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.cycle = cycle or []


class TrackerUpdateError(PipelineGraphError):
    """Недопустимое изменение записи узла в трекере"""

    def __init__(
        self,
        message: str,
        node_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.node_id = node_id


class GraphSerializationError(PipelineGraphError):
    """Ошибка преобразования модели в wire формат"""

    pass


class UnsupportedWireVersionError(GraphSerializationError):
    """Запрошена неподдерживаемая версия wire формата"""

    def __init__(
        self,
        message: str,
        version: Optional[int] = None,
        supported: Optional[List[int]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.version = version
        self.supported = supported or []


# Utility функции для создания исключений


def create_node_not_found_error(node_id: str, run_id: Optional[str] = None) -> NodeNotFoundError:
    """Создание ошибки поиска узла"""
    details = {"node_id": node_id}
    if run_id:
        details["run_id"] = run_id
    return NodeNotFoundError(
        f"Узел '{node_id}' не найден в графе", node_id=node_id, details=details
    )


def create_cycle_error(cycle: List[str]) -> GraphCycleError:
    """Создание ошибки цикла с путём цикла"""
    return GraphCycleError(
        f"Обнаружен цикл в графе: {' -> '.join(cycle)}",
        cycle=cycle,
        details={"cycle_length": max(len(cycle) - 1, 0)},
    )
