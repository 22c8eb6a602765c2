"""Deterministic questions used whenever the oracle cannot supply one."""

from scopeguard.questionnaire.models import Question, QuestionKind

DESCRIPTION_EXCERPT_LENGTH = 50

# (category, text, icon, kind); "{excerpt}" is filled from the description
FALLBACK_QUESTIONS: tuple[tuple[str, str, str, QuestionKind], ...] = (
    (
        "Project Vision",
        'What specific problem does "{excerpt}..." solve?',
        "🎯",
        QuestionKind.STANDARD,
    ),
    (
        "Target Audience",
        "Who exactly will use this? Describe their demographics and needs.",
        "👥",
        QuestionKind.STANDARD,
    ),
    (
        "Timeline",
        "When do you need this completed? Any critical deadlines?",
        "📅",
        QuestionKind.STANDARD,
    ),
    (
        "Budget",
        "What is your total budget? What is the maximum you're willing to spend?",
        "💰",
        QuestionKind.STANDARD,
    ),
    (
        "Success Metrics",
        "How will you measure whether this project is successful?",
        "📊",
        QuestionKind.STANDARD,
    ),
    (
        "Key Features",
        "What are the must-have features versus the nice-to-haves?",
        "⚡",
        QuestionKind.STANDARD,
    ),
    (
        "Resources",
        "What resources (people, tools, equipment) do you currently have?",
        "🛠️",
        QuestionKind.STANDARD,
    ),
    (
        "Dependencies",
        "Does this project depend on any other projects or external factors?",
        "🔗",
        QuestionKind.STANDARD,
    ),
    (
        "Risks",
        "What are the top 3 risks that could derail this project?",
        "⚠️",
        QuestionKind.EDGE_CASE,
    ),
    (
        "Stakeholders",
        "Who needs to approve decisions? Who are all the key stakeholders?",
        "👔",
        QuestionKind.STANDARD,
    ),
)


def fallback_for(
    description: str,
    answered_count: int,
    sequence_number: int | None = None,
) -> Question:
    """Pick the fallback question for the number of answers collected so far.

    Counts past the end of the list repeat the last question.

    Args:
        description: The project description, quoted in the first question.
        answered_count: Questions answered so far in the session.
        sequence_number: Position the question will take in the session;
            defaults to its place in the fallback list.

    Returns:
        A fresh Question.
    """
    index = min(max(answered_count, 0), len(FALLBACK_QUESTIONS) - 1)
    category, template, icon, kind = FALLBACK_QUESTIONS[index]
    excerpt = description.strip()[:DESCRIPTION_EXCERPT_LENGTH]

    return Question(
        sequence_number=sequence_number if sequence_number is not None else index + 1,
        category=category,
        text=template.format(excerpt=excerpt),
        icon=icon,
        kind=kind,
    )
