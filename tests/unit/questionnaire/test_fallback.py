"""Unit tests for scopeguard.questionnaire.fallback module."""

import pytest

from scopeguard.questionnaire.fallback import FALLBACK_QUESTIONS, fallback_for
from scopeguard.questionnaire.models import QuestionKind

DESCRIPTION = "Launch a subscription coffee delivery service for offices in Berlin and Munich"


class TestFallbackFor:
    def test_first_question_quotes_description_excerpt(self) -> None:
        question = fallback_for(DESCRIPTION, 0)

        assert question.category == "Project Vision"
        assert DESCRIPTION[:50] in question.text
        assert DESCRIPTION[:51] not in question.text
        assert question.sequence_number == 1

    def test_index_follows_answered_count(self) -> None:
        assert fallback_for(DESCRIPTION, 2).category == "Timeline"
        assert fallback_for(DESCRIPTION, 3).category == "Budget"

    @pytest.mark.parametrize("answered", [9, 10, 15, 100])
    def test_counts_past_the_end_repeat_last(self, answered: int) -> None:
        question = fallback_for(DESCRIPTION, answered)

        assert question.category == FALLBACK_QUESTIONS[-1][0]
        assert question.sequence_number == 10

    def test_negative_count_clamps_to_first(self) -> None:
        assert fallback_for(DESCRIPTION, -1).category == "Project Vision"

    def test_sequence_number_override(self) -> None:
        assert fallback_for(DESCRIPTION, 1, sequence_number=7).sequence_number == 7

    def test_deterministic(self) -> None:
        assert fallback_for(DESCRIPTION, 4) == fallback_for(DESCRIPTION, 4)

    def test_risks_question_is_edge_case(self) -> None:
        kinds = {category: kind for category, _, _, kind in FALLBACK_QUESTIONS}

        assert kinds["Risks"] == QuestionKind.EDGE_CASE
        assert kinds["Budget"] == QuestionKind.STANDARD

    def test_list_has_ten_entries(self) -> None:
        assert len(FALLBACK_QUESTIONS) == 10
