"""Unit tests for scopeguard.questionnaire.analytics module."""

import pytest

from scopeguard.questionnaire.analytics import (
    FindingLevel,
    ScopeRisk,
    findings,
    format_analytics_display,
    risk_for,
    summarize,
)
from scopeguard.questionnaire.models import Question, QuestionKind


def make_questions(*categories: str) -> list[Question]:
    return [
        Question(sequence_number=i, category=category, text=f"About {category}?")
        for i, category in enumerate(categories, start=1)
    ]


class TestRiskFor:
    @pytest.mark.parametrize(
        ("completeness", "risk"),
        [
            (0, ScopeRisk.HIGH),
            (59, ScopeRisk.HIGH),
            (60, ScopeRisk.MEDIUM),
            (79, ScopeRisk.MEDIUM),
            (80, ScopeRisk.LOW),
            (100, ScopeRisk.LOW),
        ],
    )
    def test_thresholds(self, completeness: int, risk: ScopeRisk) -> None:
        assert risk_for(completeness) == risk


class TestSummarize:
    def test_empty_session(self) -> None:
        analytics = summarize([], {})

        assert analytics.completeness == 0
        assert analytics.scope_risk == ScopeRisk.HIGH
        assert analytics.total_questions == 0
        assert analytics.category_coverage == {}

    def test_all_answered_without_budget(self) -> None:
        questions = make_questions(*["Requirements"] * 10)
        answers = {i: "answer" for i in range(10)}

        analytics = summarize(questions, answers)

        assert analytics.completeness == 100
        assert analytics.scope_risk == ScopeRisk.LOW
        assert not analytics.has_budget_info
        assert analytics.category_coverage == {"Requirements": 10}

    def test_completeness_rounds(self) -> None:
        questions = make_questions("Scope", "Scope", "Scope")

        assert summarize(questions, {0: "a"}).completeness == 33
        assert summarize(questions, {0: "a", 1: "b"}).completeness == 67

    @pytest.mark.parametrize(
        ("total", "answered", "expected"),
        [(8, 1, 13), (8, 5, 63), (16, 2, 13), (8, 3, 38)],
    )
    def test_halves_round_up(self, total: int, answered: int, expected: int) -> None:
        questions = make_questions(*["Scope"] * total)
        answers = {i: "answer" for i in range(answered)}

        assert summarize(questions, answers).completeness == expected

    def test_idempotent(self) -> None:
        questions = make_questions("Budget", "Timeline", "Risks", "Scope")
        answers = {0: "40k", 2: "Supplier delays"}

        first = summarize(questions, answers)
        second = summarize(questions, answers)

        assert first == second
        assert answers == {0: "40k", 2: "Supplier delays"}
        assert len(questions) == 4

    def test_category_checks_are_case_insensitive_substrings(self) -> None:
        questions = make_questions("Project BUDGET breakdown", "Delivery timeline")

        analytics = summarize(questions, {0: "10k", 1: "June"})

        assert analytics.has_budget_info
        assert analytics.has_timeline_info

    def test_skipped_budget_question_does_not_count(self) -> None:
        questions = make_questions("Budget", "Timeline")

        analytics = summarize(questions, {1: "Q3"})

        assert not analytics.has_budget_info
        assert analytics.has_timeline_info
        assert analytics.category_coverage == {"Timeline": 1}

    def test_edge_cases_counted_when_answered(self) -> None:
        questions = [
            Question(
                sequence_number=1, category="Risks", text="What if?", kind=QuestionKind.EDGE_CASE
            ),
            Question(
                sequence_number=2, category="Risks", text="And then?", kind=QuestionKind.EDGE_CASE
            ),
        ]

        analytics = summarize(questions, {0: "Backup plan"})

        assert analytics.edge_case_answered_count == 1


class TestFindings:
    def test_sparse_session(self) -> None:
        analytics = summarize(make_questions("Scope", "Scope", "Scope"), {0: "a"})

        titles = [(f.level, f.title) for f in findings(analytics)]

        assert titles == [
            (FindingLevel.WARNING, "Incomplete Requirements"),
            (FindingLevel.WARNING, "Budget Not Defined"),
            (FindingLevel.INFO, "Timeline Missing"),
        ]

    def test_comprehensive_session(self) -> None:
        questions = make_questions("Budget", "Timeline", "Scope", "Risks", "Scope")
        answers = {i: "answer" for i in range(4)}

        result = findings(summarize(questions, answers))

        assert [f.title for f in result] == ["Comprehensive Requirements"]
        assert result[0].level == FindingLevel.SUCCESS

    def test_middle_band_has_neither_warning_nor_praise(self) -> None:
        questions = make_questions("Budget", "Timeline", "Scope", "Scope")

        result = findings(summarize(questions, {0: "a", 1: "b", 2: "c"}))

        assert result == []


class TestFormatAnalyticsDisplay:
    def test_contains_headline_figures(self) -> None:
        questions = make_questions("Budget", "Timeline", "Scope")
        analytics = summarize(questions, {0: "20k", 2: "MVP only"})

        text = format_analytics_display(analytics)

        assert "Completeness: 67%" in text
        assert "Scope Risk: Medium" in text
        assert "Questions Answered: 2/3" in text
        assert "Budget Captured: Yes" in text
        assert "Timeline Captured: No" in text
        assert "  Budget: 1" in text
        assert "[info] Timeline Missing" in text
