"""
CLI interface для pipeline graph

Команды:
- show: Дерево узлов и таблица состояния запуска
- node: Подробности одного узла
- validate: Проверка согласованности графа
- export: Экспорт графа в JSON
"""

from pathlib import Path
from typing import Optional, Set

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
import structlog

from pipeline_graph.config.settings import GraphSettings
from pipeline_graph.exceptions.errors import PipelineGraphError
from pipeline_graph.graph.node import PipelineNode
from pipeline_graph.graph.node_graph import PipelineNodeGraph
from pipeline_graph.observability.logging import (
    PipelineGraphLoggerConfig,
    setup_logging,
)
from pipeline_graph.parser.yaml_parser import load_run_snapshot
from pipeline_graph.serialization.wire import (
    serialize_graph,
    serialize_node,
    to_json,
)

app = typer.Typer(
    name="pipeline-graph",
    help="Pipeline run graph CLI",
    add_completion=False,
)

console = Console()
logger = structlog.get_logger(__name__)


def _load_graph(
    snapshot_path: Path,
    log_level: Optional[str] = None,
    dangling_edges: Optional[str] = None,
    base_href: Optional[str] = None,
    wire_version: Optional[int] = None,
) -> PipelineNodeGraph:
    settings = GraphSettings.from_env(
        log_level=log_level,
        dangling_edges=dangling_edges,
        base_href=base_href,
        wire_version=wire_version,
    )
    # логи идут в stderr, чтобы не смешиваться с экспортом
    setup_logging(
        PipelineGraphLoggerConfig.from_settings(settings, output=typer.get_text_stream("stderr"))
    )
    tracker = load_run_snapshot(snapshot_path)
    return PipelineNodeGraph(tracker, settings)


def _node_label(node: PipelineNode) -> str:
    label = f"[cyan]{node.get_display_name()}[/cyan] [dim]({node.get_type()})[/dim]"
    cause = node.get_cause_of_blockage()
    if cause:
        label += f" [red]blocked: {cause}[/red]"
    return label


def _add_branch(
    graph: PipelineNodeGraph, tree: Tree, node: PipelineNode, seen: Set[str]
) -> None:
    branch = tree.add(_node_label(node))
    if node.get_id() in seen:
        return
    seen.add(node.get_id())

    for edge in node.get_edges():
        target = graph.resolve_edge(edge)
        if target is None:
            branch.add(f"[yellow]{edge.id}[/yellow] [dim](not started)[/dim]")
        else:
            _add_branch(graph, branch, target, seen)


@app.command()
def show(
    snapshot_path: Path = typer.Argument(..., help="Path to run snapshot (YAML)"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
):
    """Show the run graph"""

    try:
        graph = _load_graph(snapshot_path, log_level=log_level)
    except (PipelineGraphError, ValueError) as e:
        rprint(f"[red]Error loading snapshot:[/red] {e}")
        raise typer.Exit(1)

    tree = Tree(f"[bold blue]Run {graph.run_id}[/bold blue]")
    seen: Set[str] = set()
    for node in graph.start_nodes():
        _add_branch(graph, tree, node, seen)
    console.print(tree)

    table = Table(title="Pipeline Nodes")
    table.add_column("Id", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("State", style="green")
    table.add_column("Result")
    table.add_column("Edges", style="yellow")
    table.add_column("Downstream", style="magenta")

    for node in graph.get_nodes():
        state = node.get_state()
        result = node.get_result()
        edges = ", ".join(edge.id for edge in node.get_edges()) or "-"
        table.add_row(
            node.get_id(),
            node.get_type(),
            state.value if state else "-",
            result.value if result else "-",
            edges,
            str(len(node.get_downstream_builds())),
        )

    console.print(table)


@app.command()
def node(
    snapshot_path: Path = typer.Argument(..., help="Path to run snapshot (YAML)"),
    node_id: str = typer.Argument(..., help="Node id"),
    base_href: Optional[str] = typer.Option(None, "--base-href", help="Run href"),
):
    """Show a single node as JSON"""

    try:
        graph = _load_graph(snapshot_path, log_level="WARNING", base_href=base_href)
        data = serialize_node(
            graph.get_node(node_id),
            version=graph.settings.wire_version,
            base_href=graph.settings.base_href,
        )
    except (PipelineGraphError, ValueError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    typer.echo(to_json(data))


@app.command()
def validate(
    snapshot_path: Path = typer.Argument(..., help="Path to run snapshot (YAML)"),
    dangling_edges: Optional[str] = typer.Option(
        None, "--dangling-edges", help="allow_pending, warn or ignore"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Validate graph consistency"""

    try:
        graph = _load_graph(
            snapshot_path,
            log_level="DEBUG" if verbose else "WARNING",
            dangling_edges=dangling_edges,
        )
    except (PipelineGraphError, ValueError) as e:
        rprint(f"[red]Validation failed:[/red] {e}")
        raise typer.Exit(1)

    report = graph.validate()

    if verbose:
        rprint(f"Run: {report.run_id}")
        rprint(f"Nodes: {report.node_count}")
        rprint(f"Complete: {report.complete}")

    for item in report.dangling_edges:
        rprint(
            f"  - [yellow]{item.source_id} -> {item.edge.id}[/yellow] "
            "references a node that is not materialized"
        )
    for item in report.type_mismatches:
        rprint(
            f"  - [red]{item.source_id} -> {item.edge.id}[/red] "
            f"edge type {item.edge.type} differs from node type {item.actual_type}"
        )
    for cycle in report.cycles:
        rprint(f"  - [red]cycle:[/red] {' -> '.join(cycle)}")

    if report.is_consistent:
        rprint("[green]✓ Graph is consistent[/green]")
    else:
        rprint("[red]✗ Graph is inconsistent[/red]")
        raise typer.Exit(1)


@app.command()
def export(
    snapshot_path: Path = typer.Argument(..., help="Path to run snapshot (YAML)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file"),
    wire_version: Optional[int] = typer.Option(None, "--wire-version", help="Wire format version"),
    base_href: Optional[str] = typer.Option(None, "--base-href", help="Run href"),
):
    """Export the run graph as JSON"""

    try:
        graph = _load_graph(
            snapshot_path,
            log_level="WARNING",
            base_href=base_href,
            wire_version=wire_version,
        )
        content = to_json(serialize_graph(graph))
    except (PipelineGraphError, ValueError) as e:
        rprint(f"[red]Export failed:[/red] {e}")
        raise typer.Exit(1)

    if output:
        output.write_text(content + "\n", encoding="utf-8")
        logger.info("Graph exported", run_id=graph.run_id, output=str(output))
        rprint(f"[green]✓[/green] Exported {len(graph)} nodes to {output}")
    else:
        typer.echo(content)


def main():
    app()


if __name__ == "__main__":
    main()
