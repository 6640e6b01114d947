import asyncio
import json
import logging
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from mindmap_engine.core.config import settings
from mindmap_engine.core.exceptions import InsufficientContentError
from mindmap_engine.models.content import VideoContent
from mindmap_engine.models.mindmap import MindMap
from mindmap_engine.models.options import MindMapOptions
from mindmap_engine.services.concept_source import GeminiConceptSource
from mindmap_engine.services.mindmap_service import MindMapService, assemble_mind_map

cli_app = typer.Typer(help="Build, validate and export mind maps from concept payloads.")
console = Console()


class Layout(str, Enum):
    hierarchical = "hierarchical"
    radial = "radial"
    network = "network"
    timeline = "timeline"


class ColorScheme(str, Enum):
    default = "default"
    categorical = "categorical"
    importance = "importance"
    difficulty = "difficulty"


class OutputFormat(str, Enum):
    summary = "summary"
    json = "json"
    flow = "flow"
    graph = "graph"


@cli_app.callback()
def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_mind_map(mind_map: MindMap, output: OutputFormat) -> None:
    if output is OutputFormat.json:
        console.print(Syntax(mind_map.export_formats.json_data, "json", theme="solarized-dark"))
        return
    if output is OutputFormat.flow:
        console.print(mind_map.export_formats.flow_notation, markup=False)
        return
    if output is OutputFormat.graph:
        console.print(mind_map.export_formats.graph_notation, markup=False)
        return

    validation = mind_map.validation
    structure = validation.structure_validation
    table = Table(title=f"Mind map: {mind_map.title}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Nodes", str(mind_map.metadata.total_nodes))
    table.add_row("Edges", str(mind_map.metadata.total_edges))
    table.add_row("Max depth", str(mind_map.metadata.max_depth))
    table.add_row("Layout", mind_map.layout.type)
    table.add_row("Generated by", mind_map.metadata.generated_by)
    table.add_row("Overall score", f"{validation.overall_score:.2f}")
    table.add_row("Structure", f"{structure.category} ({structure.score:.2f})")
    table.add_row("Valid", "[green]yes[/green]" if validation.is_valid else "[red]no[/red]")
    console.print(table)

    for issue in structure.issues:
        console.print(f"[yellow]Issue:[/yellow] {issue}")
    for recommendation in validation.recommendations:
        console.print(f"[cyan]Recommendation:[/cyan] {recommendation}")


@cli_app.command()
def build(
    payload_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON concept payload."),
    title: str = typer.Option("Mind Map", "--title", "-t", help="Title of the mind map."),
    layout: Layout = typer.Option(Layout.hierarchical, "--layout", "-l", help="Layout strategy."),
    max_depth: int = typer.Option(4, "--max-depth", min=1, max=10),
    max_nodes: int = typer.Option(50, "--max-nodes", min=1),
    color_scheme: ColorScheme = typer.Option(ColorScheme.categorical, "--color-scheme"),
    output: OutputFormat = typer.Option(OutputFormat.summary, "--format", "-f", help="What to print."),
):
    """
    Builds a mind map from a concept payload file without calling a model.
    """
    try:
        payload = json.loads(payload_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error:[/bold red] Payload is not valid JSON ({payload_file}): {e}")
        raise typer.Exit(code=1)

    options = MindMapOptions(
        max_depth=max_depth,
        max_nodes=max_nodes,
        organization_style=layout.value,
        color_scheme=color_scheme.value,
    )
    mind_map = assemble_mind_map(payload, title, options)
    _print_mind_map(mind_map, output)


@cli_app.command()
def generate(
    transcript_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Plain-text transcript."),
    title: str = typer.Option(..., "--title", "-t", help="Video title."),
    summary_file: Path | None = typer.Option(None, "--summary-file", exists=True, dir_okay=False),
    topics: list[str] = typer.Option([], "--topic", help="Main topic; repeat for several."),
    key_points: list[str] = typer.Option([], "--key-point", help="Key point; repeat for several."),
    layout: Layout = typer.Option(Layout.hierarchical, "--layout", "-l", help="Layout strategy."),
    output: OutputFormat = typer.Option(OutputFormat.summary, "--format", "-f", help="What to print."),
):
    """
    Runs the full pipeline: concept extraction with Gemini, then build, validate and export.
    """
    if not settings.GEMINI_API_KEY:
        console.print("[bold red]Error:[/bold red] GEMINI_API_KEY is not set in your .env file.")
        raise typer.Exit(code=1)

    content = VideoContent(
        transcript=transcript_file.read_text(encoding="utf-8"),
        summary=summary_file.read_text(encoding="utf-8") if summary_file else "",
        topics=topics,
        key_points=key_points,
        title=title,
    )
    service = MindMapService(GeminiConceptSource(api_key=settings.GEMINI_API_KEY))

    console.print("[cyan]Extracting concepts with Gemini...[/cyan]")
    try:
        mind_map = asyncio.run(
            service.generate_mind_map(content, MindMapOptions(organization_style=layout.value))
        )
    except InsufficientContentError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        raise typer.Exit(code=2)

    _print_mind_map(mind_map, output)


if __name__ == "__main__":
    cli_app()
