"""Error formatting and display utilities."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ...exceptions import ConfigurationError, FloodPipelineError, InputError, SchemaError


def exit_code_for(error: Exception) -> int:
    """Exit code for a failed run: 2 for configuration errors, 1 otherwise."""
    return 2 if isinstance(error, ConfigurationError) else 1


def _suggestions_for(error: Exception) -> list[str]:
    if isinstance(error, ConfigurationError):
        return [
            "Verify config/base.yaml syntax",
            "Check FLOOD_PIPELINE__* environment variable overrides",
            "Run with --verbose for detailed error messages",
        ]
    if isinstance(error, InputError):
        return ["Check that --input points to a non-empty CSV file"]
    if isinstance(error, SchemaError):
        return ["Fix the input CSV at source; rows are never dropped to satisfy the schema"]
    return []


def format_error(error: Exception, include_suggestions: bool = True) -> Panel:
    """Format an error for Rich display.

    Args:
        error: Exception to format
        include_suggestions: Include troubleshooting suggestions

    Returns:
        Rich Panel with formatted error
    """
    message = error.message if isinstance(error, FloodPipelineError) else str(error)

    error_text = Text()
    error_text.append("✗ ", style="bold red")
    error_text.append(message, style="red")
    error_text.append(f"\n\nType: {type(error).__name__}", style="dim")

    if isinstance(error, FloodPipelineError):
        if error.component:
            error_text.append(f"\nComponent: {error.component}", style="dim")
        if error.status_code:
            error_text.append(f"\nCode: {int(error.status_code)}", style="dim")

    suggestions = _suggestions_for(error) if include_suggestions else []
    if suggestions:
        suggestion_text = Text("\n\nSuggested fixes:", style="bold yellow")
        for i, suggestion in enumerate(suggestions, 1):
            suggestion_text.append(f"\n  {i}. {suggestion}", style="yellow")
        error_text.append(suggestion_text)

    return Panel(error_text, title="Error", border_style="red")


def handle_error(
    error: Exception,
    console: Console | None = None,
    exit_code: int | None = None,
) -> None:
    """Display an error panel, then exit.

    Args:
        error: Exception to handle
        console: Console to print on; a stderr console is created when omitted
        exit_code: Override exit code (derived from the error type otherwise)
    """
    console = console or Console(stderr=True)
    console.print(format_error(error))
    raise typer.Exit(code=exit_code if exit_code is not None else exit_code_for(error))
