"""ScopeGuard CLI module.

Command-line interface built with Typer, Rich output and prompt_toolkit input.
"""

from scopeguard.cli.main import app

__all__ = ["app"]
