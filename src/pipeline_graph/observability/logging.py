"""
Структурированное логирование для pipeline graph

Обеспечивает:
- Структурированные логи в JSON, console или logfmt формате
- Контекст запуска (run_id) в каждом сообщении
- Обрезание длинных значений
"""

import os
import sys
import logging
from typing import Any, Optional, TextIO, Union

import structlog
from structlog.stdlib import BoundLogger

from pipeline_graph.config.settings import GraphSettings


class PipelineGraphLoggerConfig:
    """Конфигурация логгера pipeline graph"""

    def __init__(
        self,
        level: str = "INFO",
        format: str = "json",  # json, console, text
        output: Union[str, TextIO] = sys.stdout,
        include_caller: bool = False,
        include_timestamp: bool = True,
        max_string_length: int = 2000,
    ):
        self.level = level.upper()
        self.format = format.lower()
        self.output = output
        self.include_caller = include_caller
        self.include_timestamp = include_timestamp
        self.max_string_length = max_string_length

    @classmethod
    def from_settings(cls, settings: GraphSettings, **kwargs) -> "PipelineGraphLoggerConfig":
        return cls(level=settings.log_level, format=settings.log_format, **kwargs)


def make_truncate_processor(max_length: int):
    """Процессор для обрезания длинных значений"""

    def truncate_value(value: Any) -> Any:
        if isinstance(value, str) and len(value) > max_length:
            return value[:max_length] + "... [TRUNCATED]"
        elif isinstance(value, dict):
            return {k: truncate_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [truncate_value(item) for item in value]
        return value

    def truncate_long_values(logger, method_name, event_dict):
        return {k: truncate_value(v) for k, v in event_dict.items()}

    return truncate_long_values


def add_process_context(logger, method_name, event_dict):
    """Процессор для добавления id процесса"""
    event_dict["process_id"] = os.getpid()
    return event_dict


def setup_logging(config: Optional[PipelineGraphLoggerConfig] = None) -> None:
    """
    Настройка системы логирования

    Args:
        config: Конфигурация логгера, если None - из переменных окружения
    """

    if config is None:
        settings = GraphSettings.from_env()
        config = PipelineGraphLoggerConfig.from_settings(settings)

    output = config.output
    if isinstance(output, str):
        output = open(output, "a", encoding="utf-8")

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_process_context,
    ]

    if config.include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if config.include_caller:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    processors.append(structlog.processors.format_exc_info)
    processors.append(make_truncate_processor(config.max_string_length))

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    elif config.format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))
    else:  # text format
        processors.append(structlog.processors.LogfmtRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        level=getattr(logging, config.level),
        stream=output,
        format="%(message)s",
        force=True,
    )


def get_logger(name: Optional[str] = None, **initial_values) -> BoundLogger:
    """
    Получение логгера с начальным контекстом

    Args:
        name: Имя логгера
        **initial_values: Начальные значения контекста
    """

    logger = structlog.get_logger(name)

    if initial_values:
        logger = logger.bind(**initial_values)

    return logger


class GraphLogger:
    """Логгер, привязанный к одному запуску pipeline"""

    def __init__(self, run_id: str, name: Optional[str] = None):
        self.run_id = run_id
        self.logger = get_logger(name, run_id=run_id)
        self._node_loggers = {}

    def get_node_logger(self, node_id: str) -> BoundLogger:
        """Получение логгера для конкретного узла"""
        if node_id not in self._node_loggers:
            self._node_loggers[node_id] = self.logger.bind(node_id=node_id)
        return self._node_loggers[node_id]

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)
