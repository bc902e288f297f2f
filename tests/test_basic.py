"""
Базовые тесты для проверки работоспособности
"""

import pytest


def test_imports():
    """Тест базовых импортов"""
    try:
        from pipeline_graph import (
            BlueDownstreamBuild,
            Edge,
            InMemoryExecutionTracker,
            PipelineNode,
            PipelineNodeGraph,
            serialize_node,
        )

        assert BlueDownstreamBuild is not None
        assert Edge is not None
        assert InMemoryExecutionTracker is not None
        assert PipelineNode is not None
        assert PipelineNodeGraph is not None
        assert serialize_node is not None

    except ImportError as e:
        pytest.fail(f"Ошибка импорта: {e}")


def test_tracker_satisfies_protocol():
    """In-memory трекер реализует контракт ExecutionTracker"""
    from pipeline_graph import ExecutionTracker, InMemoryExecutionTracker

    assert isinstance(InMemoryExecutionTracker(), ExecutionTracker)


def test_version():
    from pipeline_graph import __version__

    assert __version__ == "0.1.0"
