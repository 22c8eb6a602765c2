"""Gibberish filter for project descriptions.

A cheap, local heuristic run before any oracle call. It only rejects input
that is too short or not word-shaped; whether the text describes a real
project is left to the oracle's own classification.
"""

from dataclasses import dataclass
import re

from scopeguard.core.security import MAX_DESCRIPTION_LENGTH

MIN_DESCRIPTION_LENGTH = 10
MIN_MEANINGFUL_WORDS = 3
MIN_WORD_LENGTH = 2

TOO_SHORT_MESSAGE = (
    "Please provide a more detailed project description "
    f"(at least {MIN_DESCRIPTION_LENGTH} characters)"
)
NOT_WORDS_MESSAGE = "Please describe your project with real words."
TOO_LONG_MESSAGE = (
    f"Project description is too long (maximum {MAX_DESCRIPTION_LENGTH} characters)"
)

_NON_ALPHA = re.compile(r"[^a-zA-Z]")
_VOWEL = re.compile(r"[aeiouAEIOU]")


@dataclass(frozen=True, slots=True)
class DescriptionCheck:
    """Outcome of validating a project description."""

    valid: bool
    reason: str | None = None


def is_meaningful_word(token: str) -> bool:
    """A token counts when its letters form a 2+ character run with a vowel."""
    letters = _NON_ALPHA.sub("", token)
    return len(letters) >= MIN_WORD_LENGTH and bool(_VOWEL.search(letters))


def count_meaningful_words(text: str) -> int:
    """Count whitespace-separated tokens that look like words."""
    return sum(1 for token in text.split() if is_meaningful_word(token))


def validate_description(text: str | None) -> DescriptionCheck:
    """Check that a project description is long enough and word-like.

    Args:
        text: The raw description typed by the user.

    Returns:
        DescriptionCheck with a user-facing reason when invalid.
    """
    stripped = (text or "").strip()
    if len(stripped) < MIN_DESCRIPTION_LENGTH:
        return DescriptionCheck(valid=False, reason=TOO_SHORT_MESSAGE)

    if len(stripped) > MAX_DESCRIPTION_LENGTH:
        return DescriptionCheck(valid=False, reason=TOO_LONG_MESSAGE)

    if count_meaningful_words(stripped) < MIN_MEANINGFUL_WORDS:
        return DescriptionCheck(valid=False, reason=NOT_WORDS_MESSAGE)

    return DescriptionCheck(valid=True)
