"""Commands for browsing saved questionnaire sessions."""

from pathlib import Path
from typing import Annotated

import typer

from scopeguard.cli.formatters import console
from scopeguard.cli.formatters.dashboard import render_dashboard
from scopeguard.cli.formatters.panels import print_error, print_info, print_success
from scopeguard.cli.formatters.tables import create_sessions_table, print_table
from scopeguard.cli.runtime import load_settings, session_store_for
from scopeguard.questionnaire.analytics import summarize
from scopeguard.questionnaire.store import export_brief

StateDirOption = Annotated[
    Path | None,
    typer.Option(
        "--state-dir",
        help="Custom directory for saved sessions.",
        file_okay=False,
        dir_okay=True,
    ),
]


def sessions(state_dir: StateDirOption = None) -> None:
    """List saved sessions, most recent first."""
    config = load_settings()
    store = session_store_for(config, state_dir)

    saved = store.list_sessions()
    if not saved:
        print_info("No saved sessions found.")
        return

    print_table(create_sessions_table(saved))
    console.print("[muted]Resume with:[/] [bold]scopeguard start --resume SESSION_ID[/]")


def summary(
    session_id: Annotated[str, typer.Argument(help="Session ID to summarize.")],
    export: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Write the brief as JSON to this path."),
    ] = None,
    state_dir: StateDirOption = None,
) -> None:
    """Show the completeness and scope-risk dashboard for a saved session."""
    config = load_settings()
    store = session_store_for(config, state_dir)

    result = store.load(session_id)
    if result.is_err:
        print_error(f"Failed to load session: {result.error.message}")
        raise typer.Exit(code=1)

    session = result.value
    analytics = summarize(session.questions, session.answers)
    render_dashboard(session, analytics)

    if export is not None:
        export_result = export_brief(session, export, analytics)
        if export_result.is_err:
            print_error(export_result.error.message, title="Export Failed")
        else:
            print_success(f"Brief exported to {export_result.value}")


__all__ = ["sessions", "summary"]
