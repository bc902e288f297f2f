from pipeline_graph.cli.main import app, main

__all__ = ["app", "main"]
