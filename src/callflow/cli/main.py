"""Main CLI entry point for callflow"""

import typer

from callflow.__version__ import __version__
from callflow.cli.commands.compile import compile_flows
from callflow.cli.commands.validate import validate_flows

app = typer.Typer(
    name="callflow",
    help="callflow - compile call-handling flows into contact-flow documents",
    add_completion=False,
)

# Register subcommands
app.command(name="compile")(compile_flows)
app.command(name="validate")(validate_flows)


def version_callback(value: bool) -> None:
    """Print version and exit"""
    if value:
        typer.echo(f"callflow version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """callflow - compile call-handling flows into contact-flow documents"""
    pass


def cli() -> None:
    """Entry point for CLI"""
    app()


if __name__ == "__main__":
    cli()
