from pipeline_graph.parser.yaml_parser import (
    RunSnapshotParser,
    YAMLTemplateProcessor,
    load_run_snapshot,
)

__all__ = ["RunSnapshotParser", "YAMLTemplateProcessor", "load_run_snapshot"]
