"""Rich formatters for CLI output.

A single shared Console with semantic colours:
- green: success
- yellow: warning
- red: error
- blue: info
"""

from rich.console import Console
from rich.theme import Theme

SCOPEGUARD_THEME = Theme(
    {
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "dim",
        "highlight": "bold cyan",
        "risk.low": "bold green",
        "risk.medium": "bold yellow",
        "risk.high": "bold red",
    }
)

console = Console(theme=SCOPEGUARD_THEME)

__all__ = ["console", "SCOPEGUARD_THEME"]
