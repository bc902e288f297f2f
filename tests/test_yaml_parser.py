"""
Тесты загрузки снимка запуска из YAML
"""

import pytest

from pipeline_graph import (
    GraphConfigError,
    NodeState,
    PipelineNodeGraph,
    RunSnapshotParser,
    load_run_snapshot,
)
from pipeline_graph.parser import YAMLTemplateProcessor


class TestRunSnapshotParser:
    """Тесты парсера снимков"""

    def test_parse_file(self, snapshot_file):
        tracker = load_run_snapshot(snapshot_file)
        graph = PipelineNodeGraph(tracker)

        assert tracker.run_id == "42"
        assert tracker.is_complete() is False
        assert len(graph) == 5

        build = graph.get_node("build")
        assert build.get_display_name() == "Build"
        assert build.get_state() is NodeState.FINISHED
        assert build.get_duration_in_millis() == 1200
        assert [s.display_name for s in build.get_steps()] == ["Building..."]

    def test_edge_types_from_destination(self, snapshot_file):
        graph = PipelineNodeGraph(load_run_snapshot(snapshot_file))

        edges = graph.get_node("test").get_edges()
        assert [(e.id, e.type) for e in edges] == [
            ("unit", "PARALLEL"),
            ("integration", "PARALLEL"),
        ]

    def test_variables_substituted(self, snapshot_file):
        graph = PipelineNodeGraph(load_run_snapshot(snapshot_file))

        (build,) = graph.get_node("unit").get_downstream_builds()
        assert build.description == "docs #7"
        assert build.link.href == "/api/pipelines/docs/runs/7/"

    def test_blockage(self, snapshot_file):
        graph = PipelineNodeGraph(load_run_snapshot(snapshot_file))

        assert graph.get_node("integration").get_cause_of_blockage() == "Waiting for input"
        assert graph.get_node("unit").get_cause_of_blockage() is None

    def test_edge_object_and_unknown_destination(self):
        tracker = RunSnapshotParser().parse_string(
            """
            nodes:
              test:
                type: STAGE
                edges:
                  - {id: unit, type: PARALLEL}
                  - release
            """
        )
        edges = tracker.get_record("test").edges

        assert [(e.id, e.type) for e in edges] == [("unit", "PARALLEL"), ("release", "STAGE")]

    @pytest.mark.parametrize(
        "field, value",
        [("edges", "unit"), ("steps", "checkout")],
    )
    def test_scalar_list_field_rejected(self, field, value):
        """Строка вместо списка не разбирается посимвольно"""
        content = f"nodes:\n  test:\n    type: STAGE\n    {field}: {value}\n"

        with pytest.raises(GraphConfigError) as exc_info:
            RunSnapshotParser().parse_string(content)

        assert "test" in str(exc_info.value)
        assert exc_info.value.details["got"] == "str"

    def test_missing_file(self, tmp_path):
        with pytest.raises(GraphConfigError):
            load_run_snapshot(tmp_path / "missing.yaml")

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "- just\n- a list\n",
            "run: {id: '1'}\n",
            "nodes:\n  build: {}\n",
            "nodes:\n  build: not-an-object\n",
            "nodes:\n  build:\n    type: STAGE\n    durationInMillis: -5\n",
            "nodes: [unclosed\n",
            "run: 42\nnodes:\n  build: {type: STAGE}\n",
            "variables: [a]\nnodes:\n  build: {type: STAGE}\n",
        ],
    )
    def test_invalid_snapshots(self, content):
        with pytest.raises(GraphConfigError):
            RunSnapshotParser().parse_string(content)


class TestYAMLTemplateProcessor:
    """Шаблоны ${...}"""

    def test_default_value(self):
        processor = YAMLTemplateProcessor({})
        assert processor.process_template("${PG_TEST_MISSING:-fallback}") == "fallback"

    def test_required_variable(self):
        processor = YAMLTemplateProcessor({})
        with pytest.raises(GraphConfigError):
            processor.process_template("${PG_TEST_MISSING:?set it}")

    def test_missing_variable(self):
        with pytest.raises(GraphConfigError):
            YAMLTemplateProcessor({}).process_template("${PG_TEST_MISSING}")

    def test_explicit_variables_override_environment(self, monkeypatch):
        monkeypatch.setenv("PG_TEST_HOST", "env")
        processor = YAMLTemplateProcessor({"PG_TEST_HOST": "explicit"})

        assert processor.process_template("${PG_TEST_HOST}") == "explicit"
