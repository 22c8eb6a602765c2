"""Data model for questionnaire sessions.

A Session owns the immutable project description, the append-only question
history, the answer map keyed by 0-based position, the current position
pointer and the lifecycle phase. Absence of a key in ``answers`` means the
question at that position was skipped; an empty string is never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

MAX_QUESTIONS = 20


class Phase(StrEnum):
    """Lifecycle phase of a questionnaire session."""

    COLLECTING = "collecting"
    QUESTIONING = "questioning"
    SUMMARIZING = "summarizing"


class QuestionKind(StrEnum):
    """Whether a question probes core requirements or risks and what-ifs."""

    STANDARD = "standard"
    EDGE_CASE = "edge_case"


class Question(BaseModel, frozen=True):
    """A single question in the session history.

    Attributes:
        sequence_number: 1-based position in the session's question list.
        category: Free-form category label ("Budget", "Timeline", ...).
        text: The question itself.
        icon: Short display token (usually an emoji).
        kind: Standard or EdgeCase.
    """

    sequence_number: int = Field(ge=1, le=MAX_QUESTIONS)
    category: str
    text: str = Field(min_length=1)
    icon: str = ""
    kind: QuestionKind = QuestionKind.STANDARD


@dataclass(frozen=True, slots=True)
class AnsweredQuestion:
    """A question paired with the answer the user gave to it."""

    position: int
    question: Question
    answer: str


class Session(BaseModel):
    """State of one questionnaire.

    Attributes:
        session_id: Unique identifier, also the saved file name stem.
        description: The project description (set once at start).
        phase: Current lifecycle phase.
        questions: Ordered, append-only question history.
        answers: Answer text keyed by 0-based question position.
        position: 0-based index of the question currently shown.
        created_at: When the session was created.
        updated_at: When the session was last changed.
    """

    session_id: str
    description: str = ""
    phase: Phase = Phase.COLLECTING
    questions: list[Question] = Field(default_factory=list)
    answers: dict[int, str] = Field(default_factory=dict)
    position: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def answered_count(self) -> int:
        """Number of questions with a recorded answer."""
        return len(self.answers)

    @property
    def current_question(self) -> Question | None:
        """The question at the current position, if any."""
        if 0 <= self.position < len(self.questions):
            return self.questions[self.position]
        return None

    @property
    def is_finished(self) -> bool:
        """True once the session has reached the summary phase."""
        return self.phase == Phase.SUMMARIZING

    def answered_history(self) -> list[AnsweredQuestion]:
        """Answered questions in question order; skipped ones are left out."""
        return [
            AnsweredQuestion(position=idx, question=question, answer=self.answers[idx])
            for idx, question in enumerate(self.questions)
            if idx in self.answers
        ]

    def mark_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(UTC)
