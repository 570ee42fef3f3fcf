"""CLI entry point for formflow"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from formflow.config import EngineConfig, load_config
from formflow.exceptions import FormFlowError

app = typer.Typer(
    name="formflow",
    help="Dynamic form and qualification flow engine",
    add_completion=False
)
console = Console()

_state: Dict[str, Any] = {"config": None}


def _config() -> EngineConfig:
    if _state["config"] is None:
        _state["config"] = load_config()
    return _state["config"]


def handle_formflow_error(error: FormFlowError, exit_code: int = 1):
    """Handle formflow errors with Rich formatting

    Args:
        error: formflow exception to handle
        exit_code: Exit code to use
    """
    if error.help_text:
        panel_content = f"{error.message}\n\n[bold cyan]Help:[/bold cyan]\n{error.help_text}"
    else:
        panel_content = error.message

    panel = Panel(
        panel_content,
        title="[bold red]Error[/bold red]",
        border_style="red",
        expand=False
    )

    console.print(panel)
    raise typer.Exit(exit_code)


def handle_unexpected_error(error: Exception, exit_code: int = 1):
    """Handle unexpected errors with Rich formatting"""
    error_text = Text()
    error_text.append("✗ Unexpected Error: ", style="bold red")
    error_text.append(str(error))

    console.print(error_text)
    console.print(f"[dim]Error type: {type(error).__name__}[/dim]")

    raise typer.Exit(exit_code)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to formflow.yaml")
):
    """Validate, simulate and visualize form flows"""
    try:
        _state["config"] = load_config(config)
    except FileNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    except FormFlowError as e:
        handle_formflow_error(e)
    except ValueError as e:
        console.print(f"[red]✗ Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    level = logging.DEBUG if verbose else getattr(logging, _state["config"].log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def validate(
    flow_file: Path = typer.Argument(..., help="Flow document (.json, .yaml)"),
    strict: bool = typer.Option(False, "--strict", help="Fail on warnings too"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON")
):
    """Check a flow for broken references, self-loops and unreachable questions"""
    from formflow.parsers.flow_parser import load_flow
    from formflow.validation.graph_validator import validate as validate_flow

    try:
        flow = load_flow(flow_file)
        report = validate_flow(flow.questions, flow.endings)
    except FormFlowError as e:
        handle_formflow_error(e)

    if as_json:
        console.print_json(json.dumps(report.to_dict()))
    elif report.issues:
        table = Table(title=f"Validation: {flow.title}")
        table.add_column("Severity")
        table.add_column("Code", style="cyan")
        table.add_column("Question", style="magenta")
        table.add_column("Message")
        for issue in report.issues:
            style = "red" if issue.severity.value == "error" else "yellow"
            table.add_row(
                f"[{style}]{issue.severity.value}[/{style}]",
                issue.code.value,
                issue.question_id or "",
                issue.message
            )
        console.print(table)

    if not report.valid or (strict and report.warnings):
        if not as_json:
            console.print(f"[red]✗[/red] {len(report.errors)} error(s), {len(report.warnings)} warning(s)")
        raise typer.Exit(1)

    if not as_json:
        console.print(f"[green]✓[/green] Flow is valid ({len(report.warnings)} warning(s))")


@app.command()
def simulate(
    flow_file: Path = typer.Argument(..., help="Flow document (.json, .yaml)"),
    answers_file: Path = typer.Option(..., "--answers", "-a", help="Answers keyed by question id")
):
    """Walk a flow with a fixed answer set and print the path taken"""
    from formflow.autosave.session import RespondentSession
    from formflow.parsers.flow_parser import load_answers, load_flow

    try:
        flow = load_flow(flow_file)
        answers = load_answers(answers_file)
    except FormFlowError as e:
        handle_formflow_error(e)

    if not flow.questions:
        console.print("[yellow]Flow has no questions[/yellow]")
        raise typer.Exit(1)

    async def walk():
        session = RespondentSession(flow, config=_config())
        visited = set()
        while not session.finished:
            question = session.current_question
            if question.id in visited:
                return session, None, f"Loop detected at question '{question.id}'"
            visited.add(question.id)
            outcome = await session.answer(answers.get(question.id))
            if outcome.error:
                return session, outcome, f"Stopped at '{question.id}': {outcome.error}"
        return session, outcome, None

    try:
        session, outcome, problem = asyncio.run(walk())
    except FormFlowError as e:
        handle_formflow_error(e)
    except Exception as e:
        handle_unexpected_error(e)

    console.print(f"[bold blue]Path:[/bold blue] {' → '.join(session.path)}")
    if problem:
        console.print(f"[red]✗[/red] {problem}")
        raise typer.Exit(1)

    console.print(f"State: [green]{session.state.value}[/green]")
    if outcome.ending_id:
        console.print(f"Ending: {outcome.ending_id}")
    if session.message:
        console.print(f"Message: {session.message}")
    console.print(f"Lead score: {session.lead_score().total}")


@app.command()
def score(
    flow_file: Path = typer.Argument(..., help="Flow document (.json, .yaml)"),
    answers_file: Path = typer.Option(..., "--answers", "-a", help="Answers keyed by question id")
):
    """Print the lead score breakdown for an answer set"""
    from formflow.core.scoring import score as lead_score
    from formflow.parsers.flow_parser import load_answers, load_flow

    try:
        flow = load_flow(flow_file)
        result = lead_score(flow.questions, load_answers(answers_file))
    except FormFlowError as e:
        handle_formflow_error(e)

    table = Table(title="Lead Score")
    table.add_column("Question", style="cyan")
    table.add_column("Title")
    table.add_column("Points", style="green", justify="right")
    for entry in result.breakdown:
        table.add_row(entry.question_id, entry.title, str(entry.score))
    console.print(table)

    threshold = _config().qualification.score_threshold
    verdict = "[green]qualified[/green]" if result.qualified(threshold) else "[yellow]not qualified[/yellow]"
    console.print(f"Total: {result.total} ({verdict})")


@app.command()
def graph(
    flow_file: Path = typer.Argument(..., help="Flow document (.json, .yaml)"),
    mermaid: bool = typer.Option(False, "--mermaid", help="Print a Mermaid flowchart instead")
):
    """Print the derived workflow graph"""
    from formflow.core.flow_map import render_mermaid
    from formflow.parsers.flow_parser import load_flow
    from formflow.sync.workflow_sync import derive_graph

    try:
        flow = load_flow(flow_file)
    except FormFlowError as e:
        handle_formflow_error(e)

    if mermaid:
        typer.echo(render_mermaid(flow), nl=False)
        return

    workflow = derive_graph(flow)
    nodes = Table(title="Nodes")
    nodes.add_column("Id", style="cyan")
    nodes.add_column("Kind")
    nodes.add_column("Position", justify="right")
    for node in workflow.nodes:
        nodes.add_row(node.id, node.kind.value, f"{node.position.x:g}, {node.position.y:g}")
    console.print(nodes)

    edges = Table(title="Edges")
    edges.add_column("Id", style="cyan")
    edges.add_column("Source")
    edges.add_column("Target")
    edges.add_column("Label")
    for edge in workflow.edges:
        edges.add_row(edge.id, edge.source, edge.target, edge.label or "")
    console.print(edges)


if __name__ == "__main__":
    app()
