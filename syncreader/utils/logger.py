"""
Rich logging utilities for the read-along sync engine.
"""

import os

from rich.console import Console
from rich.theme import Theme

# Custom theme for read-along output
custom_theme = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "debug": "dim",
        "highlight": "magenta",
        "active": "bold white on blue",
    }
)

# Global console instance
console = Console(theme=custom_theme)

_debug_enabled = os.environ.get("SYNCREADER_DEBUG", "").lower() in ["1", "true", "yes"]


def set_debug(enabled: bool) -> None:
    """Turn debug messages on or off."""
    global _debug_enabled
    _debug_enabled = enabled


def is_debug() -> bool:
    """Check whether debug messages are printed."""
    return _debug_enabled


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]✗[/error] {message}")


def debug(message: str) -> None:
    """Print a debug message (only when debugging is enabled)."""
    if _debug_enabled:
        console.print(f"[debug]· {message}[/debug]")


def header(message: str) -> None:
    """Print a header message."""
    console.print()
    console.rule(f"[bold]{message}[/bold]")
    console.print()
