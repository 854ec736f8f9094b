"""Shared helpers of the compile and validate commands."""

from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.definition import build_flow, registry_for
from callflow.compiler.flow_compiler import FlowCompiler, SerializedFlow
from callflow.compiler.references import ResourceReferenceRegistry
from callflow.config.loader import ConfigLoader
from callflow.config.settings import CompilerSettings
from callflow.core.errors import (
    CallflowError,
    ConfigError,
    GraphValidationError,
    UnresolvedReferenceError,
)
from callflow.core.types import Severity
from callflow.flows.registry import FlowCatalog, import_flows
from callflow.observability.logging import setup_logging
from callflow.validation.findings import ValidationFinding

console = Console()


@dataclass
class BuildOutcome:
    """Results of compiling a set of flows, successes and failures side by side."""

    flows: dict[str, SerializedFlow] = field(default_factory=dict)
    failures: dict[str, CallflowError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def resolve_settings(settings: CompilerSettings, strict: bool | None) -> CompilerSettings:
    """Apply --strict/--lenient on top of the configured settings."""
    if strict is None:
        return settings
    severity = Severity.ERROR if strict else Severity.WARNING
    return settings.model_copy(
        update={"reachability_severity": severity, "terminal_severity": severity}
    )


def build_flows(
    config: Path | None,
    modules: list[str],
    selected: list[str],
    strict: bool | None,
    log_level: str | None = None,
) -> BuildOutcome:
    """Load YAML and Python flows and compile them, collecting every failure.

    Logging is set up at `log_level`, or at the level of the loaded definition
    when none is given.

    Raises:
        typer.Exit: If there is nothing to build or the sources cannot be loaded
    """
    if config is None and not modules:
        console.print("[red]Give a definition file or directory, or --module[/]")
        raise typer.Exit(2)

    builders: dict[str, FlowBuilder] = {}
    outcome = BuildOutcome()
    settings = CompilerSettings()
    registry = ResourceReferenceRegistry()
    setup_logging((log_level or settings.log_level).upper())

    try:
        if config is not None:
            definition = ConfigLoader.load(config)
            settings = definition.settings
            if log_level is None:
                setup_logging(settings.log_level)
            registry = registry_for(definition)
            for name, flow_config in definition.flows.items():
                if selected and name not in selected:
                    continue
                try:
                    builders[name] = build_flow(name, flow_config)
                except ConfigError as e:
                    outcome.failures[name] = e
        for module in modules:
            import_flows(module)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Cannot load flows: {escape(str(e))}[/]")
        raise typer.Exit(1)

    catalog = FlowCatalog.get_default()
    for name in catalog.names():
        if selected and name not in selected:
            continue
        try:
            builders[name] = catalog.builder_for(name)
        except CallflowError as e:
            outcome.failures[name] = e

    missing = [name for name in selected if name not in builders and name not in outcome.failures]
    if missing:
        console.print(f"[red]Unknown flow(s): {', '.join(missing)}[/]")
        raise typer.Exit(1)

    compiler = FlowCompiler(registry=registry, settings=resolve_settings(settings, strict))
    for name, builder in builders.items():
        try:
            outcome.flows[name] = compiler.compile(builder.graph)
        except CallflowError as e:
            outcome.failures[name] = e
    return outcome


def findings_of(error: CallflowError) -> list[tuple[str, str, str]]:
    """(check, node, message) rows describing a failure."""
    if isinstance(error, GraphValidationError):
        return [(f.validator_id, f.node_id or "-", f.message) for f in error.findings]
    if isinstance(error, UnresolvedReferenceError):
        return [
            (
                "unresolved-reference",
                ref.node_id,
                f"{ref.kind.value} '{ref.name}' is not registered",
            )
            for ref in error.unresolved
        ] + [(f.validator_id, f.node_id or "-", f.message) for f in error.findings]
    return [(type(error).__name__, "-", str(error))]


def print_failures(outcome: BuildOutcome) -> None:
    for name, error in outcome.failures.items():
        table = Table(title=f"[red]{name}[/] failed")
        table.add_column("Check", style="cyan")
        table.add_column("Action")
        table.add_column("Message")
        for check, node, message in findings_of(error):
            table.add_row(escape(check), escape(node), escape(message))
        console.print(table)


def print_warnings(name: str, warnings: list[ValidationFinding]) -> None:
    for warning in warnings:
        console.print(f"[yellow]warning[/] {name}: {escape(str(warning))}")
