"""
Тесты преобразования в wire формат
"""

import json
from datetime import datetime, timezone

import pytest

from pipeline_graph import (
    BlueDownstreamBuild,
    Edge,
    GraphSettings,
    InMemoryExecutionTracker,
    NodeRecord,
    PipelineNodeGraph,
    PipelineStep,
    UnsupportedWireVersionError,
    serialize_downstream_build,
    serialize_edge,
    serialize_graph,
    serialize_node,
    to_json,
)
from pipeline_graph.serialization import serialize_steps


class TestSerializeNode:
    """Форма узла в экспорте"""

    def test_blocked_node_shape(self, graph):
        data = serialize_node(graph.get_node("integration"))

        assert data["_class"] == "PipelineNode"
        assert data["id"] == "integration"
        assert data["type"] == "PARALLEL"
        assert data["causeOfBlockage"] == "Waiting for input"
        assert data["edges"] == [{"_class": "Edge", "id": "deploy", "type": "STAGE"}]
        assert data["downstreamBuilds"] == []
        assert data["firstParent"] == "test"
        assert "_links" not in data

    def test_unblocked_node_exposes_null(self, graph):
        data = serialize_node(graph.get_node("build"))

        assert "causeOfBlockage" in data
        assert data["causeOfBlockage"] is None
        assert '"causeOfBlockage": null' in to_json(data)

    def test_downstream_builds_inline(self, graph):
        data = serialize_node(graph.get_node("unit"))

        assert data["downstreamBuilds"] == [
            {
                "_class": "BlueDownstreamBuild",
                "description": "docs #7",
                "link": {"_class": "Link", "href": "/jobs/docs/7/"},
            }
        ]

    def test_links_with_base_href(self, graph):
        data = serialize_node(graph.get_node("build"), base_href="/runs/42/")

        assert data["_links"]["self"]["href"] == "/runs/42/nodes/build/"
        assert data["_links"]["steps"]["href"] == "/runs/42/nodes/build/steps/"
        assert "steps" not in data

    def test_status_fields(self):
        started = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        tracker = InMemoryExecutionTracker(
            records=[
                NodeRecord(
                    id="build",
                    type="STAGE",
                    display_name="Build",
                    state="FINISHED",
                    result="SUCCESS",
                    start_time=started,
                    duration_in_millis=1200,
                )
            ]
        )
        data = serialize_node(PipelineNodeGraph(tracker).get_node("build"))

        assert data["displayName"] == "Build"
        assert data["state"] == "FINISHED"
        assert data["result"] == "SUCCESS"
        assert data["startTime"] == "2024-05-01T12:00:00+00:00"
        assert data["durationInMillis"] == 1200

    def test_unsupported_version(self, graph):
        with pytest.raises(UnsupportedWireVersionError) as exc_info:
            serialize_node(graph.get_node("build"), version=2)

        assert exc_info.value.version == 2
        assert exc_info.value.supported == [1]


class TestSerializeValues:
    """Отдельные сущности"""

    def test_edge(self):
        assert serialize_edge(Edge(id="unit", type="PARALLEL")) == {
            "_class": "Edge",
            "id": "unit",
            "type": "PARALLEL",
        }

    def test_downstream_build(self):
        build = BlueDownstreamBuild(description="site #3", link="/jobs/site/3/")
        assert serialize_downstream_build(build)["link"]["href"] == "/jobs/site/3/"

    def test_steps(self, graph, tracker):
        tracker.add_step("build", PipelineStep(id="5", state="FINISHED"))
        steps = serialize_steps(graph.get_node("build"))

        assert steps == [
            {
                "_class": "PipelineStep",
                "id": "5",
                "displayName": "5",
                "type": "STEP",
                "state": "FINISHED",
                "result": None,
                "durationInMillis": None,
            }
        ]


class TestSerializeGraph:
    """Экспорт всего запуска"""

    def test_graph(self, graph):
        data = serialize_graph(graph)

        assert data["version"] == 1
        assert data["runId"] == "42"
        assert [n["id"] for n in data["nodes"]] == [
            "build",
            "test",
            "unit",
            "integration",
            "deploy",
        ]
        assert data["nodes"][-1]["edges"] == []

    def test_graph_uses_settings(self, tracker):
        graph = PipelineNodeGraph(tracker, GraphSettings(base_href="/runs/42/"))
        data = serialize_graph(graph)

        assert data["nodes"][0]["_links"]["self"]["href"] == "/runs/42/nodes/build/"

    def test_explicit_zero_version_not_replaced_by_settings(self, graph):
        """Явная версия 0 проверяется, а не подменяется версией из настроек"""
        with pytest.raises(UnsupportedWireVersionError) as exc_info:
            serialize_graph(graph, version=0)

        assert exc_info.value.version == 0

    def test_json_round_trip(self, graph):
        data = json.loads(to_json(serialize_graph(graph)))
        assert data["nodes"][3]["causeOfBlockage"] == "Waiting for input"
