"""
Модели узлов графа выполнения pipeline

Узел - вершина DAG одного запуска pipeline (stage, parallel ветка или
контейнер шагов). Рёбра ссылаются на другие узлы только по id и типу.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeType(str, Enum):
    """Известные типы узлов"""

    STAGE = "STAGE"
    PARALLEL = "PARALLEL"
    STEP_CONTAINER = "STEP_CONTAINER"


class NodeState(str, Enum):
    """Состояние выполнения узла"""

    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    SKIPPED = "SKIPPED"
    NOT_BUILT = "NOT_BUILT"
    FINISHED = "FINISHED"


class NodeResult(str, Enum):
    """Результат выполнения узла"""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    UNKNOWN = "UNKNOWN"
    ABORTED = "ABORTED"


def _require_text(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} должен быть непустой строкой")
    return value.strip()


class Link(BaseModel):
    """Адрес ресурса (URL или путь). Формат непрозрачен для графа"""

    model_config = ConfigDict(frozen=True)

    href: str

    @field_validator("href")
    @classmethod
    def validate_href(cls, v: str) -> str:
        return _require_text(v, "href")


class Edge(BaseModel):
    """Ребро графа: id и тип узла назначения"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Id узла назначения")
    type: str = Field(..., description="Тип узла назначения")

    @field_validator("id", "type")
    @classmethod
    def validate_text(cls, v: str, info) -> str:
        return _require_text(v, info.field_name)


class BlueDownstreamBuild(BaseModel):
    """
    Сборка другого pipeline, запущенная узлом.

    Равенство по значению: два экземпляра равны (и имеют одинаковый hash)
    тогда и только тогда, когда совпадают description и link.
    """

    model_config = ConfigDict(frozen=True)

    description: str
    link: Link

    @field_validator("link", mode="before")
    @classmethod
    def coerce_link(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"href": v}
        return v


class PipelineStep(BaseModel):
    """Шаг внутри stage или parallel ветки"""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: Optional[str] = None
    type: str = "STEP"
    state: Optional[NodeState] = None
    result: Optional[NodeResult] = None
    duration_in_millis: Optional[int] = Field(None, ge=0)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _require_text(v, "id")


class NodeRecord(BaseModel):
    """
    Запись трекера выполнения об одном узле.

    Запись неизменяема: трекер заменяет её целиком, поэтому читатель всегда
    видит согласованный снимок.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    display_name: Optional[str] = None
    display_description: Optional[str] = None
    state: Optional[NodeState] = None
    result: Optional[NodeResult] = None
    start_time: Optional[datetime] = None
    duration_in_millis: Optional[int] = Field(None, ge=0)
    first_parent: Optional[str] = None
    cause_of_blockage: Optional[str] = None
    edges: Tuple[Edge, ...] = ()
    downstream_builds: Tuple[BlueDownstreamBuild, ...] = ()
    steps: Tuple[PipelineStep, ...] = ()

    @field_validator("id", "type")
    @classmethod
    def validate_text(cls, v: str, info) -> str:
        return _require_text(v, info.field_name)

    @field_validator("cause_of_blockage")
    @classmethod
    def normalize_blockage(cls, v: Optional[str]) -> Optional[str]:
        # пустая причина означает "не заблокирован"
        if v is None or not v.strip():
            return None
        return v

    @field_validator("downstream_builds")
    @classmethod
    def dedupe_builds(
        cls, v: Tuple[BlueDownstreamBuild, ...]
    ) -> Tuple[BlueDownstreamBuild, ...]:
        return tuple(dict.fromkeys(v))
