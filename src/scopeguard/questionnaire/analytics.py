"""Completeness and scope-risk analytics for a questionnaire.

``summarize`` is a pure function over the question history and answer map,
so dashboards can call it as often as they like.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
import math

from pydantic import BaseModel, Field

from scopeguard.questionnaire.models import Question, QuestionKind

HIGH_RISK_BELOW = 60
MEDIUM_RISK_BELOW = 80
INCOMPLETE_BELOW = 70
COMPREHENSIVE_FROM = 80


class ScopeRisk(StrEnum):
    """Coarse rating of how much of the scope is still unknown."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class FindingLevel(StrEnum):
    """Severity of a dashboard finding."""

    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class Finding(BaseModel, frozen=True):
    """One line of the summary dashboard."""

    level: FindingLevel
    title: str
    message: str


class Analytics(BaseModel, frozen=True):
    """Summary figures for a finished (or in-progress) questionnaire.

    Attributes:
        answered_count: Questions with a recorded answer.
        total_questions: Length of the question history.
        completeness: Answered share as a whole percentage (0-100), halves rounded up.
        scope_risk: Low, Medium or High.
        has_budget_info: An answered question's category mentions budget.
        has_timeline_info: An answered question's category mentions timeline.
        edge_case_answered_count: Answered questions of the edge-case kind.
        category_coverage: Answered count per category, in question order.
    """

    answered_count: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    completeness: int = Field(ge=0, le=100)
    scope_risk: ScopeRisk
    has_budget_info: bool
    has_timeline_info: bool
    edge_case_answered_count: int = Field(ge=0)
    category_coverage: dict[str, int] = Field(default_factory=dict)


def risk_for(completeness: int) -> ScopeRisk:
    """Map a completeness percentage to a scope-risk rating."""
    if completeness < HIGH_RISK_BELOW:
        return ScopeRisk.HIGH
    if completeness < MEDIUM_RISK_BELOW:
        return ScopeRisk.MEDIUM
    return ScopeRisk.LOW


def summarize(questions: Sequence[Question], answers: Mapping[int, str]) -> Analytics:
    """Compute analytics from the question history and answer map.

    Args:
        questions: Question history in session order.
        answers: Answer text keyed by 0-based position.

    Returns:
        Analytics for the session.
    """
    total = len(questions)
    answered_count = len(answers)
    completeness = math.floor(100 * answered_count / total + 0.5) if total else 0

    answered = [q for idx, q in enumerate(questions) if idx in answers]
    coverage: dict[str, int] = {}
    for question in answered:
        coverage[question.category] = coverage.get(question.category, 0) + 1

    return Analytics(
        answered_count=answered_count,
        total_questions=total,
        completeness=min(completeness, 100),
        scope_risk=risk_for(completeness),
        has_budget_info=any("budget" in q.category.lower() for q in answered),
        has_timeline_info=any("timeline" in q.category.lower() for q in answered),
        edge_case_answered_count=sum(1 for q in answered if q.kind == QuestionKind.EDGE_CASE),
        category_coverage=coverage,
    )


def findings(analytics: Analytics) -> list[Finding]:
    """Dashboard findings, most pressing first."""
    result: list[Finding] = []

    if analytics.completeness < INCOMPLETE_BELOW:
        result.append(
            Finding(
                level=FindingLevel.WARNING,
                title="Incomplete Requirements",
                message=(
                    f"Only {analytics.completeness}% of questions were answered. "
                    "Consider revisiting the skipped questions."
                ),
            )
        )

    if not analytics.has_budget_info:
        result.append(
            Finding(
                level=FindingLevel.WARNING,
                title="Budget Not Defined",
                message=(
                    "No budget constraints were captured. "
                    "This is a common cause of scope creep."
                ),
            )
        )

    if not analytics.has_timeline_info:
        result.append(
            Finding(
                level=FindingLevel.INFO,
                title="Timeline Missing",
                message="No deadlines were captured. Set milestones to keep the scope in check.",
            )
        )

    if analytics.completeness >= COMPREHENSIVE_FROM:
        result.append(
            Finding(
                level=FindingLevel.SUCCESS,
                title="Comprehensive Requirements",
                message="Most questions were answered. The scope is well documented.",
            )
        )

    return result


def format_analytics_display(analytics: Analytics) -> str:
    """Format analytics as plain text.

    Args:
        analytics: The analytics to format.

    Returns:
        Multi-line string for display or logging.
    """
    lines = [
        f"Completeness: {analytics.completeness}%",
        f"Scope Risk: {analytics.scope_risk.value}",
        f"Questions Answered: {analytics.answered_count}/{analytics.total_questions}",
        f"Edge Cases Covered: {analytics.edge_case_answered_count}",
        f"Budget Captured: {'Yes' if analytics.has_budget_info else 'No'}",
        f"Timeline Captured: {'Yes' if analytics.has_timeline_info else 'No'}",
    ]

    if analytics.category_coverage:
        lines.append("")
        lines.append("Category Coverage:")
        for category, count in analytics.category_coverage.items():
            lines.append(f"  {category}: {count}")

    notes = findings(analytics)
    if notes:
        lines.append("")
        lines.append("Findings:")
        for finding in notes:
            lines.append(f"  [{finding.level.value}] {finding.title}: {finding.message}")

    return "\n".join(lines)
