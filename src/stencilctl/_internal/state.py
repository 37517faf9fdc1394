"""CLI state management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from stencilctl.models import StencilSettings

CLI_THEME: Final[Theme] = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "green",
        "text": "white",
    }
)


@dataclass(slots=True)
class CLIState:
    """State shared between CLI commands during a single invocation."""

    console: Console
    settings: StencilSettings
    verbose: bool

    def debug(self, message: str) -> None:
        """Log a timestamped diagnostic line when verbose output is enabled."""
        if self.verbose:
            self.console.log(f"[text]{escape(message)}[/text]")


def build_console(verbose: bool) -> Console:
    """Return a Rich console configured with project-specific styling.

    Args:
        verbose: Whether to enable verbose logging with timestamps.

    Returns:
        Configured Console instance.
    """
    return Console(
        theme=CLI_THEME,
        highlight=False,
        soft_wrap=True,
        stderr=False,
        log_path=False,
        log_time=verbose,
    )
