"""Configuration management commands."""

import typer

from fasttrack_cli.services.config_service import get_config_service
from fasttrack_cli.ui.formatters import format_error, format_output, format_success
from fasttrack_cli.utils.ui.console import get_console

app = typer.Typer(help="Configuration management commands")
console = get_console()


@app.command("view")
def view_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    try:
        config_dict = get_config_service().config.model_dump()
        format_output(config_dict, output)
    except Exception as e:
        format_error(f"Failed to view config: {str(e)}")
        raise typer.Exit(1)


@app.command("get")
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., fasting.default_hours)"),
) -> None:
    """Get a configuration value."""
    try:
        value = get_config_service().get_value(key)
    except KeyError:
        format_error(f"Configuration key '{key}' not found")
        raise typer.Exit(1)
    console.print(value)


@app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., fasting.default_hours)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    try:
        new_value = get_config_service().set_value(key, value)
    except KeyError:
        format_error(f"Configuration key '{key}' not found")
        raise typer.Exit(1)
    except (ValueError, RuntimeError) as e:
        format_error(f"Failed to set config: {str(e)}")
        raise typer.Exit(1)
    format_success(f"Configuration '{key}' set to '{new_value}'")


@app.command("reset")
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        confirm = typer.confirm("Are you sure you want to reset the entire configuration?")
        if not confirm:
            format_error("Cancelled")
            raise typer.Exit(0)

    try:
        get_config_service().reset_config()
    except Exception as e:
        format_error(f"Failed to reset config: {str(e)}")
        raise typer.Exit(1)
    format_success("Configuration reset to defaults")
