"""
Общие фикстуры: запуск build -> test -> {unit, integration} -> deploy
"""

from pathlib import Path

import pytest
import structlog

from pipeline_graph import (
    BlueDownstreamBuild,
    InMemoryExecutionTracker,
    NodeRecord,
    PipelineNodeGraph,
)

SNAPSHOT_YAML = """
variables:
  JOBS_URL: /api/pipelines

run:
  id: "42"
  complete: false

nodes:
  build:
    type: STAGE
    displayName: Build
    state: FINISHED
    result: SUCCESS
    durationInMillis: 1200
    edges: [test]
    steps:
      - id: "5"
        displayName: Building...
        state: FINISHED
        result: SUCCESS
  test:
    type: STAGE
    state: RUNNING
    edges: [unit, integration]
  unit:
    type: PARALLEL
    firstParent: test
    state: RUNNING
    edges: [deploy]
    downstreamBuilds:
      - description: "docs #7"
        link: ${JOBS_URL}/docs/runs/7/
  integration:
    type: PARALLEL
    firstParent: test
    state: PAUSED
    causeOfBlockage: Waiting for input
    edges: [deploy]
  deploy:
    type: STAGE
    state: QUEUED
"""


def make_records():
    return [
        NodeRecord(id="build", type="STAGE", edges=[{"id": "test", "type": "STAGE"}]),
        NodeRecord(
            id="test",
            type="STAGE",
            edges=[
                {"id": "unit", "type": "PARALLEL"},
                {"id": "integration", "type": "PARALLEL"},
            ],
        ),
        NodeRecord(
            id="unit",
            type="PARALLEL",
            first_parent="test",
            edges=[{"id": "deploy", "type": "STAGE"}],
            downstream_builds=[
                BlueDownstreamBuild(description="docs #7", link="/jobs/docs/7/")
            ],
        ),
        NodeRecord(
            id="integration",
            type="PARALLEL",
            first_parent="test",
            cause_of_blockage="Waiting for input",
            edges=[{"id": "deploy", "type": "STAGE"}],
        ),
        NodeRecord(id="deploy", type="STAGE"),
    ]


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def tracker() -> InMemoryExecutionTracker:
    return InMemoryExecutionTracker(run_id="42", records=make_records())


@pytest.fixture
def graph(tracker) -> PipelineNodeGraph:
    return PipelineNodeGraph(tracker)


@pytest.fixture
def snapshot_file(tmp_path) -> Path:
    path = tmp_path / "run.yaml"
    path.write_text(SNAPSHOT_YAML, encoding="utf-8")
    return path
