"""
Тесты настроек и логирования
"""

import io
import json

import pytest
import structlog
from pydantic import ValidationError

from pipeline_graph import GraphSettings, get_logger, setup_logging
from pipeline_graph.config import DanglingEdgePolicy
from pipeline_graph.observability import GraphLogger, PipelineGraphLoggerConfig


class TestGraphSettings:
    """Тесты GraphSettings"""

    def test_defaults(self):
        settings = GraphSettings()

        assert settings.log_level == "INFO"
        assert settings.log_format == "json"
        assert settings.wire_version == 1
        assert settings.dangling_edges == DanglingEdgePolicy.ALLOW_PENDING
        assert settings.base_href is None

    def test_normalization(self):
        settings = GraphSettings(log_level="debug", dangling_edges="WARN", base_href=" /runs/1/ ")

        assert settings.log_level == "DEBUG"
        assert settings.dangling_edges == "warn"
        assert settings.base_href == "/runs/1"

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            GraphSettings(log_level="LOUD")
        with pytest.raises(ValidationError):
            GraphSettings(wire_version=0)
        with pytest.raises(ValidationError):
            GraphSettings(dangling_edges="explode")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PIPELINE_GRAPH_LOG_LEVEL", "warning")
        monkeypatch.setenv("PIPELINE_GRAPH_DANGLING_EDGES", "ignore")

        settings = GraphSettings.from_env(base_href="/runs/3")

        assert settings.log_level == "WARNING"
        assert settings.dangling_edges == "ignore"
        assert settings.base_href == "/runs/3"

    def test_overrides_skip_none(self, monkeypatch):
        monkeypatch.setenv("PIPELINE_GRAPH_WIRE_VERSION", "1")
        assert GraphSettings.from_env(wire_version=None).wire_version == 1


class TestLogging:
    """Тесты настройки structlog"""

    def test_json_output(self):
        stream = io.StringIO()
        setup_logging(PipelineGraphLoggerConfig(level="INFO", format="json", output=stream))

        get_logger("pipeline_graph.test").info("Graph validated", run_id="42")

        line = stream.getvalue().strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Graph validated"
        assert record["run_id"] == "42"
        assert record["level"] == "info"

    def test_level_filtering(self):
        stream = io.StringIO()
        setup_logging(PipelineGraphLoggerConfig(level="WARNING", format="json", output=stream))

        get_logger("pipeline_graph.test").debug("hidden")

        assert stream.getvalue() == ""

    def test_long_values_truncated(self):
        stream = io.StringIO()
        setup_logging(
            PipelineGraphLoggerConfig(format="json", output=stream, max_string_length=10)
        )

        get_logger("pipeline_graph.test").info("event", payload="x" * 50)

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["payload"] == "x" * 10 + "... [TRUNCATED]"

    def test_graph_logger_binds_context(self):
        graph_logger = GraphLogger("42")

        with structlog.testing.capture_logs() as logs:
            graph_logger.get_node_logger("build").info("Node inspected")

        assert logs[0]["run_id"] == "42"
        assert logs[0]["node_id"] == "build"
