"""Validate command: build every flow without writing output."""

from pathlib import Path

import typer

from callflow.cli.commands.common import build_flows, console, print_failures, print_warnings


def validate_flows(
    config: Path | None = typer.Argument(
        None, help="Flow definition file or directory", exists=True
    ),
    flow: list[str] = typer.Option([], "--flow", "-f", help="Only validate this flow"),
    module: list[str] = typer.Option(
        [], "--module", "-m", help="Python module registering flows (e.g. 'app.flows')"
    ),
    strict: bool | None = typer.Option(
        None, "--strict/--lenient", help="Unreachable actions and missing terminals as errors"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (default: the definition's settings.log_level)"
    ),
) -> None:
    """Check that flows resolve and pass validation."""
    outcome = build_flows(config, module, flow, strict, log_level)

    for name, compiled in outcome.flows.items():
        console.print(f"[green]✓[/] {name} ({compiled.action_count} actions)")
        print_warnings(name, compiled.warnings)

    if not outcome.ok:
        print_failures(outcome)
        raise typer.Exit(1)
