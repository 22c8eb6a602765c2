"""ScopeGuard CLI main entry point.

Defines the Typer application and registers every command.
"""

from typing import Annotated

import typer

from scopeguard import __version__
from scopeguard.cli.commands import config, sessions, start, usage
from scopeguard.cli.formatters import console

app = typer.Typer(
    name="scopeguard",
    help="ScopeGuard - adaptive questionnaires that pin down project scope.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="start")(start.start)
app.command(name="sessions")(sessions.sessions)
app.command(name="summary")(sessions.summary)
app.command(name="usage")(usage.usage)
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]ScopeGuard[/] version [green]{__version__}[/]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """ScopeGuard - adaptive questionnaires that pin down project scope.

    Describe a project, answer the questions that matter (budget, timeline,
    requirements, risks) and get a completeness and scope-risk summary.

    Use [bold cyan]scopeguard COMMAND --help[/] for command-specific help.
    """


__all__ = ["app", "main"]
