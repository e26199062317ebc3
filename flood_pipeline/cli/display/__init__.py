"""Rich display helpers for the CLI."""

from .errors import exit_code_for, format_error, handle_error

__all__ = ["exit_code_for", "format_error", "handle_error"]
