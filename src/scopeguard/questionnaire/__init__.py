"""Adaptive questionnaire - from a project description to a scope brief.

This package validates the description, paces and counts oracle usage,
drives the questioning state machine with fallback questions, and computes
the completeness and scope-risk summary.
"""

from scopeguard.questionnaire.analytics import (
    Analytics,
    Finding,
    FindingLevel,
    ScopeRisk,
    findings,
    format_analytics_display,
    summarize,
)
from scopeguard.questionnaire.controller import Action, QuestioningController
from scopeguard.questionnaire.fallback import FALLBACK_QUESTIONS, fallback_for
from scopeguard.questionnaire.models import (
    MAX_QUESTIONS,
    AnsweredQuestion,
    Phase,
    Question,
    QuestionKind,
    Session,
)
from scopeguard.questionnaire.oracle import (
    NextQuestion,
    OracleClient,
    OracleOutcome,
    Rejected,
    Stopped,
    Unparsable,
    parse_reply,
)
from scopeguard.questionnaire.store import SessionInfo, SessionStore, export_brief
from scopeguard.questionnaire.usage import (
    DailyRateLimiter,
    InMemoryUsageStore,
    JsonFileUsageStore,
    UsageStore,
)
from scopeguard.questionnaire.validation import DescriptionCheck, validate_description

__all__ = [
    # Models
    "MAX_QUESTIONS",
    "AnsweredQuestion",
    "Phase",
    "Question",
    "QuestionKind",
    "Session",
    # Validation
    "DescriptionCheck",
    "validate_description",
    # Usage
    "DailyRateLimiter",
    "InMemoryUsageStore",
    "JsonFileUsageStore",
    "UsageStore",
    # Oracle
    "NextQuestion",
    "OracleClient",
    "OracleOutcome",
    "Rejected",
    "Stopped",
    "Unparsable",
    "parse_reply",
    # Fallback
    "FALLBACK_QUESTIONS",
    "fallback_for",
    # Controller
    "Action",
    "QuestioningController",
    # Analytics
    "Analytics",
    "Finding",
    "FindingLevel",
    "ScopeRisk",
    "findings",
    "format_analytics_display",
    "summarize",
    # Persistence
    "SessionInfo",
    "SessionStore",
    "export_brief",
]
