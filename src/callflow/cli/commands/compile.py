"""Compile command: write one JSON document per flow."""

from pathlib import Path

import typer
from rich.table import Table

from callflow.cli.commands.common import build_flows, console, print_failures, print_warnings


def compile_flows(
    config: Path | None = typer.Argument(
        None, help="Flow definition file or directory", exists=True
    ),
    flow: list[str] = typer.Option([], "--flow", "-f", help="Only compile this flow"),
    module: list[str] = typer.Option(
        [], "--module", "-m", help="Python module registering flows (e.g. 'app.flows')"
    ),
    output: Path = typer.Option(Path("build"), "--output", "-o", help="Output directory"),
    strict: bool | None = typer.Option(
        None, "--strict/--lenient", help="Unreachable actions and missing terminals as errors"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (default: the definition's settings.log_level)"
    ),
) -> None:
    """Compile flows into contact-flow JSON documents."""
    outcome = build_flows(config, module, flow, strict, log_level)

    if outcome.flows:
        output.mkdir(parents=True, exist_ok=True)
        table = Table(title="Compiled flows")
        table.add_column("Flow", style="cyan")
        table.add_column("Actions", justify="right")
        table.add_column("Warnings", justify="right")
        table.add_column("File")
        for name, compiled in outcome.flows.items():
            path = compiled.write(output)
            table.add_row(name, str(compiled.action_count), str(len(compiled.warnings)), str(path))
            print_warnings(name, compiled.warnings)
        console.print(table)

    if not outcome.ok:
        print_failures(outcome)
        raise typer.Exit(1)
