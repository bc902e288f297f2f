"""
YAML парсер снимков запуска pipeline

Формат:

    variables:
      JOBS_URL: /jobs
    run:
      id: "42"
      complete: false
    nodes:
      build:
        type: STAGE
        edges: [test]
      test:
        type: STAGE
        causeOfBlockage: Waiting for input
        edges: [unit, integration]
        downstreamBuilds:
          - description: "docs #7"
            link: ${JOBS_URL}/docs/7/
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from pipeline_graph.exceptions.errors import GraphConfigError, TrackerUpdateError
from pipeline_graph.models.node import NodeRecord, NodeType
from pipeline_graph.tracker.memory import InMemoryExecutionTracker

# camelCase ключи wire формата -> поля NodeRecord
FIELD_ALIASES = {
    "displayName": "display_name",
    "displayDescription": "display_description",
    "startTime": "start_time",
    "durationInMillis": "duration_in_millis",
    "firstParent": "first_parent",
    "causeOfBlockage": "cause_of_blockage",
    "downstreamBuilds": "downstream_builds",
}

DEFAULT_EDGE_TYPE = NodeType.STAGE.value


class YAMLTemplateProcessor:
    """Обработчик шаблонов ${...} в YAML"""

    def __init__(self, variables: Optional[Dict[str, Any]] = None):
        self.variables: Dict[str, Any] = dict(os.environ)
        self.variables.update(variables or {})

    def process_template(self, content: str) -> str:
        """
        Обработка шаблонов в строке
        Поддерживает:
        - ${VAR} - обязательная переменная
        - ${VAR:-default} - переменная с значением по умолчанию
        - ${VAR:?error} - переменная с ошибкой если не найдена
        """

        def replace_var(match):
            var_expr = match.group(1)

            if ":-" in var_expr:
                var_name, default_value = var_expr.split(":-", 1)
                return str(self.variables.get(var_name.strip(), default_value))

            elif ":?" in var_expr:
                var_name, error_msg = var_expr.split(":?", 1)
                var_name = var_name.strip()
                if var_name not in self.variables:
                    raise GraphConfigError(
                        f"Обязательная переменная '{var_name}' не найдена: {error_msg}"
                    )
                return str(self.variables[var_name])

            else:
                var_name = var_expr.strip()
                if var_name not in self.variables:
                    raise GraphConfigError(f"Переменная '{var_name}' не найдена")
                return str(self.variables[var_name])

        return re.sub(r"\$\{([^}]+)\}", replace_var, content)


class RunSnapshotParser:
    """Парсер YAML снимка запуска в InMemoryExecutionTracker"""

    def parse_file(
        self, file_path: Path, variables: Optional[Dict[str, Any]] = None
    ) -> InMemoryExecutionTracker:
        if not file_path.exists():
            raise GraphConfigError(f"Файл снимка не найден: {file_path}")

        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise GraphConfigError(f"Ошибка чтения файла {file_path}: {e}")

        return self.parse_string(content, variables)

    def parse_string(
        self, yaml_content: str, variables: Optional[Dict[str, Any]] = None
    ) -> InMemoryExecutionTracker:
        """
        Парсинг строки со снимком запуска

        Args:
            yaml_content: YAML контент как строка
            variables: Переменные для шаблонизации

        Returns:
            InMemoryExecutionTracker: Трекер, заполненный узлами снимка
        """
        try:
            raw_data = yaml.safe_load(yaml_content)
            if not raw_data:
                raise GraphConfigError("YAML файл пуст")
            if not isinstance(raw_data, dict):
                raise GraphConfigError("Снимок запуска должен быть объектом")

            processor = YAMLTemplateProcessor(variables)
            snapshot_variables = raw_data.get("variables") or {}
            if not isinstance(snapshot_variables, dict):
                raise GraphConfigError("Раздел 'variables' должен быть объектом")
            processor.variables.update(snapshot_variables)

            data = yaml.safe_load(processor.process_template(yaml_content))
            return self._build_tracker(data)

        except yaml.YAMLError as e:
            raise GraphConfigError(f"Ошибка парсинга YAML: {e}")

    def _build_tracker(self, data: Dict[str, Any]) -> InMemoryExecutionTracker:
        run = data.get("run") or {}
        if not isinstance(run, dict):
            raise GraphConfigError("Раздел 'run' должен быть объектом")
        nodes = data.get("nodes")
        if not isinstance(nodes, dict) or not nodes:
            raise GraphConfigError("Снимок должен содержать непустой раздел 'nodes'")

        node_types = {
            str(node_id): str(node.get("type", ""))
            for node_id, node in nodes.items()
            if isinstance(node, dict)
        }

        tracker = InMemoryExecutionTracker(
            run_id=str(run.get("id", "1")), complete=bool(run.get("complete", False))
        )

        for node_id, node_data in nodes.items():
            if not isinstance(node_data, dict):
                raise GraphConfigError(f"Узел '{node_id}' должен быть объектом")
            if "type" not in node_data:
                raise GraphConfigError(f"Узел '{node_id}' должен содержать поле 'type'")

            record_data = {FIELD_ALIASES.get(k, k): v for k, v in node_data.items()}
            record_data["id"] = str(node_id)
            record_data["edges"] = self._parse_edges(
                node_id, record_data.get("edges") or [], node_types
            )
            record_data["steps"] = self._parse_steps(
                node_id, record_data.get("steps") or []
            )

            try:
                tracker.add_node(NodeRecord.model_validate(record_data))
            except ValidationError as e:
                raise GraphConfigError(
                    f"Некорректный узел '{node_id}'",
                    details={"errors": e.error_count(), "first": e.errors()[0]["msg"]},
                )
            except TrackerUpdateError as e:
                raise GraphConfigError(str(e))

        return tracker

    def _parse_edges(
        self, node_id: str, edges: Any, node_types: Dict[str, str]
    ) -> List[Dict[str, str]]:
        """Ребро задаётся строкой (id) или объектом {id, type}"""
        if not isinstance(edges, list):
            raise GraphConfigError(
                f"Рёбра узла '{node_id}' должны быть списком",
                details={"got": type(edges).__name__},
            )
        parsed = []
        for edge in edges:
            if isinstance(edge, dict):
                edge_id = str(edge.get("id", ""))
                edge_type = edge.get("type") or node_types.get(edge_id) or DEFAULT_EDGE_TYPE
            else:
                edge_id = str(edge)
                edge_type = node_types.get(edge_id) or DEFAULT_EDGE_TYPE
            parsed.append({"id": edge_id, "type": str(edge_type)})
        return parsed

    def _parse_steps(self, node_id: str, steps: Any) -> List[Dict[str, Any]]:
        if not isinstance(steps, list):
            raise GraphConfigError(
                f"Шаги узла '{node_id}' должны быть списком",
                details={"got": type(steps).__name__},
            )
        parsed = []
        for step in steps:
            if isinstance(step, dict):
                parsed.append({FIELD_ALIASES.get(k, k): v for k, v in step.items()})
            else:
                parsed.append({"id": str(step)})
        return parsed


def load_run_snapshot(
    file_path: Path, variables: Optional[Dict[str, Any]] = None
) -> InMemoryExecutionTracker:
    return RunSnapshotParser().parse_file(Path(file_path), variables)
