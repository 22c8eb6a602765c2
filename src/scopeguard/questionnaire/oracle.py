"""Oracle client: asks the LLM for the next clarifying question.

One call sends one prompt holding the project description and every
answered question so far. The reply is free text expected to embed a single
JSON object; it is reduced to one of four outcomes:

- Rejected:      the description is a simple task or gibberish
- Stopped:       enough information has been gathered
- NextQuestion:  ask this question next
- Unparsable:    no usable reply (no credential, call failed, bad JSON)

The controller never sees raw text, only these outcomes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
import json
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic import ValidationError as PydanticValidationError
import structlog

from scopeguard.config.models import OracleConfig, QuestioningConfig
from scopeguard.providers.base import (
    CompletionConfig,
    LLMAdapter,
    Message,
    MessageRole,
)
from scopeguard.providers.litellm_adapter import LiteLLMAdapter
from scopeguard.questionnaire.models import AnsweredQuestion, Question, QuestionKind
from scopeguard.questionnaire.usage import (
    LAST_ORACLE_CALL_KEY,
    InMemoryUsageStore,
    UsageStore,
)

log = structlog.get_logger()

CATEGORIES = ("Budget", "Timeline", "Requirements", "Risks", "Scope", "Technical", "Stakeholders")
DEFAULT_CATEGORY = "Requirements"
DEFAULT_REJECTION_MESSAGE = (
    "This looks like a simple task or an unclear description rather than a project. "
    "Describe something with multiple phases, a budget and a timeline, such as "
    "building an app, launching a product or organising an event."
)

_EDGE_CASE_TYPES = frozenset({"outside-box", "outside_box", "edge-case", "edge_case", "edgecase"})


@dataclass(frozen=True, slots=True)
class Rejected:
    """The oracle judged the description not to be a project."""

    message: str
    validation_type: str | None = None
    reasoning: str | None = None


@dataclass(frozen=True, slots=True)
class Stopped:
    """The oracle has enough information and asks nothing further."""

    reasoning: str | None = None


@dataclass(frozen=True, slots=True)
class NextQuestion:
    """The oracle proposes the next question."""

    question: Question
    reasoning: str | None = None


@dataclass(frozen=True, slots=True)
class Unparsable:
    """No usable reply; callers fall back to a predetermined question."""

    reason: str


OracleOutcome = Rejected | Stopped | NextQuestion | Unparsable


class OracleReply(BaseModel):
    """The JSON object the oracle is instructed to return."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    should_continue: StrictBool = Field(alias="shouldContinue")
    is_valid: StrictBool | None = Field(default=None, alias="isValid")
    validation_type: str | None = Field(default=None, alias="validationType")
    validation_message: str | None = Field(default=None, alias="validationMessage")
    reasoning: str | None = None
    category: str | None = None
    question: str | None = None
    icon: str | None = None
    type: str | None = None


def extract_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` block in ``text``.

    Braces inside JSON string literals are ignored. Returns None when there
    is no opening brace or the first object never closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(text)):
        char = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    return None


def question_kind_from(raw_type: str | None) -> QuestionKind:
    """Map the oracle's ``type`` field to a QuestionKind (unknown -> standard)."""
    if raw_type and raw_type.strip().lower() in _EDGE_CASE_TYPES:
        return QuestionKind.EDGE_CASE
    return QuestionKind.STANDARD


def parse_reply(text: str, sequence_number: int) -> OracleOutcome:
    """Reduce a raw oracle reply to an outcome.

    Shape rules:
    - ``shouldContinue`` must be a boolean.
    - ``shouldContinue: false`` with ``isValid: false`` is a rejection;
      any other stop is a plain stop.
    - ``shouldContinue: true`` needs a non-empty ``question`` and must not
      also claim ``isValid: false``.

    Args:
        text: Raw reply text.
        sequence_number: Position the proposed question will take.

    Returns:
        The parsed outcome; anything malformed becomes Unparsable.
    """
    candidate = extract_json_object(text)
    if candidate is None:
        return Unparsable(reason="no JSON object in reply")

    try:
        data: Any = json.loads(candidate)
    except json.JSONDecodeError as e:
        return Unparsable(reason=f"invalid JSON: {e.msg}")

    if not isinstance(data, dict):
        return Unparsable(reason="reply JSON is not an object")

    try:
        reply = OracleReply.model_validate(data)
    except PydanticValidationError as e:
        return Unparsable(reason=f"unexpected reply shape: {e.error_count()} error(s)")

    if not reply.should_continue:
        if reply.is_valid is False:
            return Rejected(
                message=(reply.validation_message or "").strip() or DEFAULT_REJECTION_MESSAGE,
                validation_type=reply.validation_type,
                reasoning=reply.reasoning,
            )
        return Stopped(reasoning=reply.reasoning)

    if reply.is_valid is False:
        return Unparsable(reason="reply both continues and rejects")

    question_text = (reply.question or "").strip()
    if not question_text:
        return Unparsable(reason="continue reply without a question")

    try:
        question = Question(
            sequence_number=sequence_number,
            category=(reply.category or "").strip() or DEFAULT_CATEGORY,
            text=question_text,
            icon=(reply.icon or "").strip(),
            kind=question_kind_from(reply.type),
        )
    except PydanticValidationError as e:
        return Unparsable(reason=f"invalid question: {e.error_count()} error(s)")

    return NextQuestion(question=question, reasoning=reply.reasoning)


def _focus_for(answered: int) -> str:
    if answered < 5:
        return "CORE requirements (main features, target users, timeline, budget, success metrics)"
    if answered < 10:
        return "OPERATIONAL details (processes, user flows, technical requirements)"
    return "EDGE CASES and RISKS (what could go wrong, backup plans, legal issues, scaling)"


def build_prompt(
    description: str,
    history: Sequence[AnsweredQuestion],
    questioning: QuestioningConfig,
) -> str:
    """Build the single prompt sent to the oracle.

    Args:
        description: The project description.
        history: Answered questions in order; skipped questions are excluded.
        questioning: Ceilings and coverage minimums to instruct the oracle with.
    """
    context = f"Project Description: {description}\n"
    if history:
        context += "\nPrevious Questions & Answers:\n"
        for idx, item in enumerate(history, start=1):
            context += f"Q{idx}: {item.question.text}\nA{idx}: {item.answer}\n\n"

    categories = " | ".join(f'"{c}"' for c in CATEGORIES)

    return f"""You are an expert project manager helping a client avoid scope creep and budget overruns.

{context}
STEP 1 - VALIDATE THE INPUT
Decide whether the description is a real PROJECT.
- Accept: building software or physical things, launching products, services or campaigns, organising multi-part events, implementing business systems, construction or renovation.
- Reject as "task": everyday one-person actions such as cooking, shopping, sending an email or cleaning.
- Reject as "gibberish": meaningless combinations ("build rice", "construct pizza") or random words.

If rejected, return:
{{"shouldContinue": false, "isValid": false, "validationType": "task" or "gibberish", "validationMessage": "Short message telling the user why and giving examples of real projects", "reasoning": "Why it was rejected"}}

STEP 2 - DECIDE WHETHER TO ASK ANOTHER QUESTION
Questions answered so far: {len(history)}
Current focus: {_focus_for(len(history))}

Rules:
1. Ask at least {questioning.min_budget_questions} Budget questions (total cost, breakdown, contingency) before stopping.
2. Ask at least {questioning.min_timeline_questions} Timeline questions (deadline, milestones, phases) before stopping.
3. Look for gaps in requirements, unconsidered edge cases, hidden complexity and untested assumptions.
4. Never exceed {questioning.max_questions} questions in total.
5. At question {questioning.checkpoint_question}, ask the user whether they want to continue with the remaining questions.
6. Stop once core requirements, operations and risks are covered.

If continuing, return:
{{"shouldContinue": true, "isValid": true, "category": {categories}, "question": "One specific question about THIS project", "icon": "one emoji", "type": "standard" or "outside-box", "reasoning": "Why this question matters"}}
Use "outside-box" for questions about risks, edge cases or what-ifs.

If stopping, return:
{{"shouldContinue": false, "isValid": true, "reasoning": "Why the information is sufficient"}}

Return ONLY the JSON object."""


@dataclass
class OracleClient:
    """Asks the LLM for the next question, paced and credential-checked.

    Example:
        client = OracleClient.from_config(
            config.oracle, config.questioning, api_key=api_key, usage_store=store
        )
        outcome = await client.generate_next(description, session.answered_history())
        match outcome:
            case NextQuestion(question=q): ...
            case Stopped() | Rejected(): ...
            case Unparsable(): ...

    Attributes:
        llm_adapter: LLM transport.
        api_key: Access credential; when empty no call is made.
        oracle: Model and pacing settings.
        questioning: Limits written into the prompt.
        usage_store: Where the last-call timestamp is kept.
        clock: Wall-clock source in seconds.
        sleep: Awaitable sleep used to honour the minimum call spacing.
    """

    llm_adapter: LLMAdapter
    api_key: str | None
    oracle: OracleConfig = field(default_factory=OracleConfig)
    questioning: QuestioningConfig = field(default_factory=QuestioningConfig)
    usage_store: UsageStore = field(default_factory=InMemoryUsageStore)
    clock: Callable[[], float] = time.time
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @classmethod
    def from_config(
        cls,
        oracle: OracleConfig,
        questioning: QuestioningConfig,
        *,
        api_key: str | None,
        usage_store: UsageStore,
    ) -> OracleClient:
        """Build a client backed by LiteLLM."""
        adapter = LiteLLMAdapter(
            api_key=api_key,
            timeout=oracle.timeout,
            max_retries=oracle.max_retries,
        )
        return cls(
            llm_adapter=adapter,
            api_key=api_key,
            oracle=oracle,
            questioning=questioning,
            usage_store=usage_store,
        )

    @property
    def is_configured(self) -> bool:
        """True when an access credential is available."""
        return bool(self.api_key)

    async def _wait_for_call_slot(self) -> None:
        """Wait out the minimum spacing since the previous call, then claim the slot."""
        interval = self.oracle.min_call_interval_seconds
        last = self.usage_store.get(LAST_ORACLE_CALL_KEY)
        if isinstance(last, (int, float)) and interval > 0:
            elapsed = self.clock() - float(last)
            if elapsed < interval:
                delay = min(interval - elapsed, interval)
                log.debug("oracle.call.throttled", delay_seconds=round(delay, 3))
                await self.sleep(delay)
        self.usage_store.set(LAST_ORACLE_CALL_KEY, self.clock())

    async def generate_next(
        self,
        description: str,
        history: Sequence[AnsweredQuestion],
        *,
        sequence_number: int | None = None,
    ) -> OracleOutcome:
        """Ask the oracle what to do next.

        Args:
            description: The project description.
            history: Answered questions in order.
            sequence_number: Position the proposed question will take;
                defaults to ``len(history) + 1``.

        Returns:
            Rejected, Stopped, NextQuestion, or Unparsable.
        """
        if not self.is_configured:
            log.warning("oracle.credential.missing")
            return Unparsable(reason="no access credential configured")

        if sequence_number is None:
            sequence_number = len(history) + 1

        prompt = build_prompt(description, history, self.questioning)
        config = CompletionConfig(
            model=self.oracle.model,
            temperature=self.oracle.temperature,
            max_tokens=self.oracle.max_tokens,
        )

        await self._wait_for_call_slot()

        log.debug(
            "oracle.call.started",
            answered=len(history),
            sequence_number=sequence_number,
            prompt_length=len(prompt),
        )

        try:
            result = await self.llm_adapter.complete(
                [Message(role=MessageRole.USER, content=prompt)], config
            )
        except Exception as e:
            log.warning("oracle.call.raised", error=str(e), error_type=type(e).__name__)
            return Unparsable(reason=f"oracle call raised {type(e).__name__}")

        if result.is_err:
            log.warning("oracle.call.failed", error=str(result.error))
            return Unparsable(reason=f"oracle call failed: {result.error.message}")

        outcome = parse_reply(result.value.content, sequence_number)

        if isinstance(outcome, Unparsable):
            log.warning(
                "oracle.reply.unparsable",
                reason=outcome.reason,
                reply_preview=result.value.content[:200],
            )
        else:
            log.info(
                "oracle.reply.parsed",
                outcome=type(outcome).__name__,
                sequence_number=sequence_number,
            )
        return outcome
