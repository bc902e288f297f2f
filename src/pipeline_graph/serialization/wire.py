"""
Явное преобразование модели графа в wire формат

Каждая сущность имеет свою функцию, отображающую поля модели в публичную
форму. edges и downstreamBuilds всегда встраиваются массивами, шаги узла
отдаются ссылкой в _links.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pipeline_graph.exceptions.errors import UnsupportedWireVersionError
from pipeline_graph.graph.node import PipelineNode
from pipeline_graph.graph.node_graph import PipelineNodeGraph
from pipeline_graph.models.node import (
    BlueDownstreamBuild,
    Edge,
    Link,
    PipelineStep,
)

WIRE_VERSION = 1
SUPPORTED_WIRE_VERSIONS = (1,)


def check_version(version: int) -> int:
    if version not in SUPPORTED_WIRE_VERSIONS:
        raise UnsupportedWireVersionError(
            f"Неподдерживаемая версия wire формата: {version}",
            version=version,
            supported=list(SUPPORTED_WIRE_VERSIONS),
        )
    return version


def _value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def serialize_link(link: Link) -> Dict[str, Any]:
    return {"_class": "Link", "href": link.href}


def serialize_edge(edge: Edge) -> Dict[str, Any]:
    return {"_class": "Edge", "id": edge.id, "type": edge.type}


def serialize_downstream_build(build: BlueDownstreamBuild) -> Dict[str, Any]:
    return {
        "_class": "BlueDownstreamBuild",
        "description": build.description,
        "link": serialize_link(build.link),
    }


def serialize_step(step: PipelineStep) -> Dict[str, Any]:
    return {
        "_class": "PipelineStep",
        "id": step.id,
        "displayName": step.display_name or step.id,
        "type": step.type,
        "state": _value(step.state),
        "result": _value(step.result),
        "durationInMillis": step.duration_in_millis,
    }


def node_href(base_href: str, node_id: str) -> str:
    return f"{base_href.rstrip('/')}/nodes/{node_id}/"


def serialize_node(
    node: PipelineNode,
    version: int = WIRE_VERSION,
    base_href: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Преобразование узла в wire форму

    Args:
        node: Узел графа
        version: Версия wire формата
        base_href: Адрес запуска; если задан, добавляется секция _links

    Returns:
        Dict: Публичное представление узла
    """
    check_version(version)

    data: Dict[str, Any] = {
        "_class": "PipelineNode",
        "id": node.get_id(),
        "type": node.get_type(),
        "displayName": node.get_display_name(),
        "displayDescription": node.get_display_description(),
        "state": _value(node.get_state()),
        "result": _value(node.get_result()),
        "startTime": _value(node.get_start_time()),
        "durationInMillis": node.get_duration_in_millis(),
        "firstParent": node.get_first_parent(),
        "causeOfBlockage": node.get_cause_of_blockage(),
        "edges": [serialize_edge(edge) for edge in node.get_edges()],
        "downstreamBuilds": [
            serialize_downstream_build(build) for build in node.get_downstream_builds()
        ],
    }

    if base_href:
        self_href = node_href(base_href, node.get_id())
        data["_links"] = {
            "self": {"_class": "Link", "href": self_href},
            "steps": {"_class": "Link", "href": node.get_steps().href(self_href)},
        }

    return data


def serialize_steps(node: PipelineNode, version: int = WIRE_VERSION) -> List[Dict[str, Any]]:
    """Содержимое навигируемой ссылки steps"""
    check_version(version)
    return [serialize_step(step) for step in node.get_steps()]


def serialize_graph(
    graph: PipelineNodeGraph,
    version: Optional[int] = None,
    base_href: Optional[str] = None,
) -> Dict[str, Any]:
    """Все узлы запуска в порядке трекера"""
    version = check_version(
        version if version is not None else graph.settings.wire_version
    )
    base_href = base_href or graph.settings.base_href

    return {
        "version": version,
        "runId": graph.run_id,
        "nodes": [
            serialize_node(node, version=version, base_href=base_href)
            for node in graph.get_nodes()
        ],
    }


def to_json(data: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(data, ensure_ascii=False, indent=indent)
