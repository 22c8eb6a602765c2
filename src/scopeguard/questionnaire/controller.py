"""Questioning controller: the session state machine.

Phases and the actions each accepts:

    COLLECTING   --start-->   QUESTIONING   (first question accepted)
    COLLECTING   --start-->   COLLECTING    (invalid, rate limited, rejected)
    QUESTIONING  --answer/skip--> QUESTIONING | SUMMARIZING
    any          --finish-->  SUMMARIZING
    any          --reset-->   COLLECTING    (fresh session)

Every oracle call has three outcomes: continue (append the question), stop
(summarize), or unusable (append a fallback question). Failed calls are never
retried. Only one oracle call is in flight per controller; a reply that
arrives after ``finish`` or ``reset`` is discarded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
import uuid

import structlog

from scopeguard.core.errors import (
    OracleRejection,
    RateLimitExceeded,
    ScopeGuardError,
    ValidationError,
)
from scopeguard.core.security import MAX_ANSWER_LENGTH
from scopeguard.core.types import Result
from scopeguard.questionnaire.analytics import Analytics, summarize
from scopeguard.questionnaire.fallback import fallback_for
from scopeguard.questionnaire.models import MAX_QUESTIONS, Phase, Question, Session
from scopeguard.questionnaire.oracle import (
    NextQuestion,
    OracleClient,
    Rejected,
    Stopped,
    Unparsable,
)
from scopeguard.questionnaire.usage import DailyRateLimiter
from scopeguard.questionnaire.validation import validate_description

log = structlog.get_logger()

NOTHING_TO_ASK_MESSAGE = (
    "The assistant found nothing to ask about this description. "
    "Please provide more project details."
)


class Action(StrEnum):
    """User actions that drive the session."""

    START = "start"
    ANSWER = "answer"
    SKIP = "skip"
    FINISH = "finish"
    RESET = "reset"


TRANSITIONS: dict[Phase, dict[Action, frozenset[Phase]]] = {
    Phase.COLLECTING: {
        Action.START: frozenset({Phase.COLLECTING, Phase.QUESTIONING}),
        Action.FINISH: frozenset({Phase.SUMMARIZING}),
        Action.RESET: frozenset({Phase.COLLECTING}),
    },
    Phase.QUESTIONING: {
        Action.ANSWER: frozenset({Phase.QUESTIONING, Phase.SUMMARIZING}),
        Action.SKIP: frozenset({Phase.QUESTIONING, Phase.SUMMARIZING}),
        Action.FINISH: frozenset({Phase.SUMMARIZING}),
        Action.RESET: frozenset({Phase.COLLECTING}),
    },
    Phase.SUMMARIZING: {
        Action.FINISH: frozenset({Phase.SUMMARIZING}),
        Action.RESET: frozenset({Phase.COLLECTING}),
    },
}


def new_session_id() -> str:
    """Timestamped session identifier with a short random suffix."""
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"session_{stamp}_{uuid.uuid4().hex[:6]}"


def is_allowed(phase: Phase, action: Action) -> bool:
    """True if ``action`` may be taken in ``phase``."""
    return action in TRANSITIONS[phase]


@dataclass
class QuestioningController:
    """Drives one questionnaire from description to summary.

    Example:
        controller = QuestioningController(oracle=client, rate_limiter=limiter)
        result = await controller.start("Launch a subscription coffee delivery service")
        while result.is_ok and controller.session.phase == Phase.QUESTIONING:
            result = await controller.submit_answer(input(controller.session.current_question.text))
        analytics = controller.summarize()

    Attributes:
        oracle: Source of adaptive questions.
        rate_limiter: Daily allowance checked before a session starts.
        max_questions: Ceiling on questions per session.
        session: The session being driven; pass a loaded one to resume.
    """

    oracle: OracleClient
    rate_limiter: DailyRateLimiter
    max_questions: int = MAX_QUESTIONS
    session: Session = field(default_factory=lambda: Session(session_id=new_session_id()))
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def busy(self) -> bool:
        """True while an oracle call is in flight."""
        return self._lock.locked()

    def _check(self, action: Action) -> ValidationError | None:
        if not is_allowed(self.session.phase, action):
            return ValidationError(
                f"Cannot {action.value} while the session is {self.session.phase.value}",
                field="phase",
                value=self.session.phase.value,
            )
        if self.busy and action not in (Action.FINISH, Action.RESET):
            return ValidationError(
                "Still waiting for the previous question to be generated",
                field="phase",
                value=self.session.phase.value,
            )
        return None

    def _transition(self, action: Action, target: Phase) -> None:
        session = self.session
        if target not in TRANSITIONS[session.phase].get(action, frozenset()):
            msg = f"Illegal transition {session.phase.value} -{action.value}-> {target.value}"
            raise RuntimeError(msg)
        if session.phase != target:
            log.info(
                "questionnaire.phase.changed",
                session_id=session.session_id,
                from_phase=session.phase.value,
                to_phase=target.value,
                action=action.value,
            )
        session.phase = target
        session.mark_updated()

    def _append(self, question: Question) -> None:
        session = self.session
        session.questions.append(question)
        session.position = len(session.questions) - 1
        session.mark_updated()
        log.info(
            "questionnaire.question.added",
            session_id=session.session_id,
            sequence_number=question.sequence_number,
            category=question.category,
            kind=question.kind.value,
        )

    async def start(self, description: str) -> Result[Session, ScopeGuardError]:
        """Validate the description, count it against today's allowance and
        fetch the first question.

        Returns:
            Ok(session) in QUESTIONING, or Err with ValidationError,
            RateLimitExceeded or OracleRejection (session stays COLLECTING).
        """
        error = self._check(Action.START)
        if error:
            return Result.err(error)

        check = validate_description(description)
        if not check.valid:
            log.info("questionnaire.description.rejected", reason=check.reason)
            return Result.err(
                ValidationError(
                    check.reason or "Invalid project description",
                    field="description",
                    value=description,
                )
            )

        if not self.rate_limiter.try_consume():
            limit = self.rate_limiter.daily_limit
            return Result.err(
                RateLimitExceeded(
                    f"You have reached your limit of {limit} projects per day. "
                    "Please try again tomorrow!",
                    limit=limit,
                    count=self.rate_limiter.used_today(),
                )
            )

        session = self.session
        text = description.strip()

        async with self._lock:
            outcome = await self.oracle.generate_next(text, [], sequence_number=1)

        if self.session is not session or session.phase != Phase.COLLECTING:
            log.info("questionnaire.reply.discarded", session_id=session.session_id)
            return Result.ok(self.session)

        match outcome:
            case NextQuestion(question=question):
                first = question
            case Rejected(message=message, validation_type=vtype, reasoning=reasoning):
                log.info(
                    "questionnaire.session.rejected",
                    session_id=session.session_id,
                    validation_type=vtype,
                )
                return Result.err(
                    OracleRejection(message, validation_type=vtype, reasoning=reasoning)
                )
            case Stopped(reasoning=reasoning):
                log.info("questionnaire.session.nothing_to_ask", session_id=session.session_id)
                return Result.err(OracleRejection(NOTHING_TO_ASK_MESSAGE, reasoning=reasoning))
            case Unparsable():
                first = fallback_for(text, 0, sequence_number=1)

        session.description = text
        self._append(first)
        self._transition(Action.START, Phase.QUESTIONING)
        log.info(
            "questionnaire.session.started",
            session_id=session.session_id,
            description_length=len(text),
            fallback=isinstance(outcome, Unparsable),
        )
        return Result.ok(session)

    async def submit_answer(self, text: str) -> Result[Session, ScopeGuardError]:
        """Record an answer for the current question and move on.

        Blank answers are ignored and leave the session untouched.
        """
        error = self._check(Action.ANSWER)
        if error:
            return Result.err(error)

        answer = text.strip()
        if not answer:
            return Result.ok(self.session)

        if len(answer) > MAX_ANSWER_LENGTH:
            return Result.err(
                ValidationError(
                    f"Answer exceeds maximum length ({MAX_ANSWER_LENGTH} chars)",
                    field="answer",
                )
            )

        session = self.session
        session.answers[session.position] = answer
        session.mark_updated()
        log.info(
            "questionnaire.answer.recorded",
            session_id=session.session_id,
            sequence_number=session.position + 1,
            answer_length=len(answer),
        )
        return await self._advance(Action.ANSWER)

    async def skip(self) -> Result[Session, ScopeGuardError]:
        """Leave the current question unanswered and move on."""
        error = self._check(Action.SKIP)
        if error:
            return Result.err(error)

        log.info(
            "questionnaire.question.skipped",
            session_id=self.session.session_id,
            sequence_number=self.session.position + 1,
        )
        return await self._advance(Action.SKIP)

    async def _advance(self, action: Action) -> Result[Session, ScopeGuardError]:
        session = self.session
        answered = session.answered_count

        if answered >= self.max_questions or len(session.questions) >= self.max_questions:
            log.info(
                "questionnaire.limit.reached",
                session_id=session.session_id,
                answered=answered,
                total=len(session.questions),
            )
            self._transition(action, Phase.SUMMARIZING)
            return Result.ok(session)

        next_number = len(session.questions) + 1
        async with self._lock:
            outcome = await self.oracle.generate_next(
                session.description,
                session.answered_history(),
                sequence_number=next_number,
            )

        if self.session is not session or session.phase != Phase.QUESTIONING:
            log.info("questionnaire.reply.discarded", session_id=session.session_id)
            return Result.ok(self.session)

        match outcome:
            case NextQuestion(question=question):
                self._append(question)
            case Stopped() | Rejected():
                self._transition(action, Phase.SUMMARIZING)
            case Unparsable():
                self._append(
                    fallback_for(session.description, answered, sequence_number=next_number)
                )

        return Result.ok(session)

    def finish(self) -> Result[Session, ScopeGuardError]:
        """Move straight to the summary, even if an oracle call is pending."""
        error = self._check(Action.FINISH)
        if error:
            return Result.err(error)
        self._transition(Action.FINISH, Phase.SUMMARIZING)
        return Result.ok(self.session)

    def reset(self) -> Session:
        """Discard the current session and begin a new one in COLLECTING.

        A call still pending for the old session keeps the old lock, so the
        new session can start immediately.
        """
        log.info("questionnaire.session.reset", session_id=self.session.session_id)
        self._lock = asyncio.Lock()
        self.session = Session(session_id=new_session_id())
        return self.session

    def summarize(self) -> Analytics:
        """Completeness and risk analytics for the current session."""
        return summarize(self.session.questions, self.session.answers)
