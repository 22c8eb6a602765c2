"""Rich tables for sessions, questions and settings."""

from collections.abc import Sequence
from typing import Any

from rich.table import Table

from scopeguard.cli.formatters import console
from scopeguard.questionnaire.models import Phase, QuestionKind, Session
from scopeguard.questionnaire.store import SessionInfo

_PHASE_STYLES = {
    Phase.COLLECTING: "muted",
    Phase.QUESTIONING: "warning",
    Phase.SUMMARIZING: "success",
}


def create_table(
    title: str | None = None,
    *,
    show_header: bool = True,
    show_lines: bool = False,
) -> Table:
    """Create a Table with the CLI's border and header styling.

    Example:
        table = create_table("Sessions")
        table.add_column("ID", style="cyan")
        table.add_row("session_20250101_120000_ab12cd")
        print_table(table)
    """
    return Table(
        title=title,
        show_header=show_header,
        show_lines=show_lines,
        border_style="blue",
        header_style="bold cyan",
        row_styles=["", "dim"],
    )


def create_key_value_table(data: dict[str, Any], title: str | None = None) -> Table:
    """Two-column table of labels and values."""
    table = create_table(title, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(str(key), str(value))

    return table


def create_sessions_table(sessions: Sequence[SessionInfo], title: str = "Saved Sessions") -> Table:
    """Table listing saved sessions.

    Args:
        sessions: Entries from SessionStore.list_sessions().
        title: Table title.
    """
    table = create_table(title)
    table.add_column("Session", style="cyan", no_wrap=True)
    table.add_column("Phase", justify="center")
    table.add_column("Answered", justify="right")
    table.add_column("Updated", style="muted")
    table.add_column("Description")

    for info in sessions:
        style = _PHASE_STYLES.get(info.phase, "")
        description = info.description
        if len(description) > 50:
            description = description[:47] + "..."
        table.add_row(
            info.session_id,
            f"[{style}]{info.phase.value}[/]",
            f"{info.answered}/{info.questions}",
            info.updated_at.strftime("%Y-%m-%d %H:%M"),
            description,
        )

    return table


def create_questions_table(session: Session, title: str = "Questions & Answers") -> Table:
    """Table of every question in the session with its answer, or "skipped"."""
    table = create_table(title, show_lines=True)
    table.add_column("#", justify="right", style="muted")
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Question")
    table.add_column("Answer")

    for idx, question in enumerate(session.questions):
        category = f"{question.icon} {question.category}".strip()
        if question.kind == QuestionKind.EDGE_CASE:
            category += " [warning](edge case)[/]"
        answer = session.answers.get(idx)
        table.add_row(
            str(question.sequence_number),
            category,
            question.text,
            answer if answer is not None else "[muted]skipped[/]",
        )

    return table


def print_table(table: Table) -> None:
    console.print(table)


__all__ = [
    "create_table",
    "create_key_value_table",
    "create_sessions_table",
    "create_questions_table",
    "print_table",
]
