"""Summary dashboard for a finished questionnaire."""

from rich.columns import Columns
from rich.panel import Panel

from scopeguard.cli.formatters import console
from scopeguard.cli.formatters.panels import message_panel
from scopeguard.cli.formatters.tables import create_questions_table, create_table
from scopeguard.questionnaire.analytics import Analytics, FindingLevel, ScopeRisk, findings
from scopeguard.questionnaire.models import Session

_RISK_STYLES = {
    ScopeRisk.LOW: "risk.low",
    ScopeRisk.MEDIUM: "risk.medium",
    ScopeRisk.HIGH: "risk.high",
}

_FINDING_STYLES = {
    FindingLevel.WARNING: "warning",
    FindingLevel.INFO: "info",
    FindingLevel.SUCCESS: "success",
}


def _metric(label: str, value: str) -> Panel:
    return Panel(f"[highlight]{value}[/]\n[muted]{label}[/]", expand=True)


def render_dashboard(
    session: Session,
    analytics: Analytics,
    *,
    show_questions: bool = True,
) -> None:
    """Print the completeness and scope-risk dashboard for a session.

    Args:
        session: The session being summarized.
        analytics: Analytics computed for the session.
        show_questions: Also print every question with its answer.
    """
    risk_style = _RISK_STYLES[analytics.scope_risk]

    console.print()
    console.print(
        message_panel(
            session.description or "(no description)",
            title="Project Scope Summary",
            style="info",
            expand=True,
        )
    )
    console.print(
        Columns(
            [
                _metric("Completeness", f"{analytics.completeness}%"),
                Panel(f"[{risk_style}]{analytics.scope_risk.value}[/]\n[muted]Scope Risk[/]"),
                _metric("Answered", f"{analytics.answered_count}/{analytics.total_questions}"),
                _metric("Edge Cases", str(analytics.edge_case_answered_count)),
            ],
            equal=True,
            expand=True,
        )
    )

    if analytics.category_coverage:
        coverage = create_table("Category Coverage")
        coverage.add_column("Category", style="cyan")
        coverage.add_column("Answered", justify="right")
        for category, count in analytics.category_coverage.items():
            coverage.add_row(category, str(count))
        console.print(coverage)

    for finding in findings(analytics):
        console.print(
            message_panel(finding.message, finding.title, _FINDING_STYLES[finding.level])
        )

    if show_questions and session.questions:
        console.print(create_questions_table(session))


__all__ = ["render_dashboard"]
