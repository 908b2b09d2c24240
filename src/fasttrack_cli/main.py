"""Main entry point for FastTrack CLI."""

import typer

from fasttrack_cli import __version__
from fasttrack_cli.commands import config, fast
from fasttrack_cli.services.config_service import get_config_service
from fasttrack_cli.utils.logger import get_logger
from fasttrack_cli.utils.ui.console import get_console

app = typer.Typer(
    name="fasttrack",
    help="Intermittent fasting timer with history",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(config.app, name="config", help="Configuration management")

# The timer commands live at the top level: `fasttrack start 16`
for command in fast.app.registered_commands:
    app.registered_commands.append(command)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    """FastTrack - intermittent fasting timer."""
    try:
        verbose = verbose or get_config_service().config.output.verbose_logging
    except RuntimeError as e:
        console.print(f"[yellow]Warning: {e}; using defaults[/yellow]")
    get_logger(verbose=verbose)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]FastTrack CLI[/bold] version [cyan]{__version__}[/cyan]")


def run() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    run()
