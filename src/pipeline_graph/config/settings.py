"""
Настройки pipeline graph
"""

import os
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Уровни логирования"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Форматы вывода логов"""

    JSON = "json"
    CONSOLE = "console"
    TEXT = "text"


class DanglingEdgePolicy(str, Enum):
    """
    Как сообщать о рёбрах на ещё не материализованные узлы

    - allow_pending: debug пока запуск идёт, warning после завершения
    - warn: всегда warning
    - ignore: не логировать
    """

    ALLOW_PENDING = "allow_pending"
    WARN = "warn"
    IGNORE = "ignore"


ENV_PREFIX = "PIPELINE_GRAPH_"


class GraphSettings(BaseModel):
    """Настройки графа, экспорта и логирования"""

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=True,
    )

    log_level: LogLevel = Field(LogLevel.INFO, description="Уровень логирования")
    log_format: LogFormat = Field(LogFormat.JSON, description="Формат логов")
    wire_version: int = Field(1, ge=1, description="Версия wire формата")
    dangling_edges: DanglingEdgePolicy = Field(
        DanglingEdgePolicy.ALLOW_PENDING,
        description="Политика для рёбер на отсутствующие узлы",
    )
    base_href: Optional[str] = Field(
        None, description="Базовый адрес для _links в экспорте"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            valid_levels = {level.value for level in LogLevel}
            if v.upper() not in valid_levels:
                raise ValueError(f"log_level must be one of: {valid_levels}")
            return v.upper()
        return v

    @field_validator("log_format", "dangling_edges", mode="before")
    @classmethod
    def lower_enum_values(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("base_href")
    @classmethod
    def strip_base_href(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip().rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> "GraphSettings":
        """Настройки из переменных окружения PIPELINE_GRAPH_*"""
        values: Dict[str, Any] = {}
        for field_name in cls.model_fields:
            env_value = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if env_value is not None:
                values[field_name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
