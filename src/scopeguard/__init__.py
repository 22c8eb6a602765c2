"""ScopeGuard - adaptive project questionnaire.

Turns a free-text project description into a requirements brief by asking
an LLM for the next most valuable clarifying question (budget, timeline,
requirements, risks) until enough is known, then scores the answers for
completeness and scope-creep risk.

Example:
    # Using CLI
    scopeguard start "Build a mobile app for dog walkers"

    # Using Python
    from scopeguard.questionnaire import QuestioningController, summarize
"""

__version__ = "0.4.0"

__all__ = ["__version__", "main"]


def main() -> None:
    """Main entry point for the ScopeGuard CLI.

    This function invokes the Typer app from scopeguard.cli.main.
    """
    from scopeguard.cli.main import app

    app()
