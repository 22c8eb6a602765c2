"""Start command: run an adaptive questionnaire for a project.

Answers are typed free-form; ``/skip`` leaves the current question
unanswered and ``/finish`` jumps straight to the summary. The session is
saved after every step so an interrupted run can be resumed.
"""

import asyncio
from pathlib import Path
from typing import Annotated

from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from rich.prompt import Confirm
import typer

from scopeguard.cli.formatters import console
from scopeguard.cli.formatters.dashboard import render_dashboard
from scopeguard.cli.formatters.panels import (
    print_error,
    print_info,
    print_success,
    print_warning,
)
from scopeguard.cli.runtime import (
    load_settings,
    rate_limiter_for,
    require_api_key,
    session_store_for,
    setup_logging,
    usage_store_for,
)
from scopeguard.config import ScopeGuardConfig
from scopeguard.core.errors import ScopeGuardError, ValidationError
from scopeguard.core.types import Result
from scopeguard.observability import bind_context, clear_context
from scopeguard.questionnaire.controller import QuestioningController
from scopeguard.questionnaire.models import Phase, Question, QuestionKind, Session
from scopeguard.questionnaire.oracle import OracleClient
from scopeguard.questionnaire.store import SessionStore, export_brief
from scopeguard.questionnaire.usage import DailyRateLimiter, InMemoryUsageStore

SKIP_COMMAND = "/skip"
FINISH_COMMAND = "/finish"


async def _multiline_prompt_async(prompt_text: str) -> str:
    """Read multiline input; Enter submits, Ctrl+J inserts a newline.

    Raises:
        EOFError: If stdin is closed.
        KeyboardInterrupt: If the user presses Ctrl+C.
    """
    bindings = KeyBindings()

    @bindings.add("c-j")
    def insert_newline(event: KeyPressEvent) -> None:
        event.current_buffer.insert_text("\n")

    @bindings.add("c-m")
    def submit(event: KeyPressEvent) -> None:
        event.current_buffer.validate_and_handle()

    console.print(f"[bold green]{prompt_text}[/] [dim](Enter: submit, Ctrl+J: newline)[/]")

    session: PromptSession[str] = PromptSession(
        message="> ",
        multiline=True,
        prompt_continuation="  ",
        key_bindings=bindings,
    )

    return await session.prompt_async()


def _build_controller(
    config: ScopeGuardConfig,
    *,
    offline: bool,
    session: Session | None = None,
) -> QuestioningController:
    """Wire the oracle client and rate limiter for a run.

    Offline runs never call the oracle, so they keep their counters in
    memory and do not use up the daily allowance.
    """
    if offline:
        memory_store = InMemoryUsageStore()
        oracle = OracleClient.from_config(
            config.oracle, config.questioning, api_key=None, usage_store=memory_store
        )
        limiter = DailyRateLimiter(
            store=memory_store, daily_limit=config.usage.daily_project_limit
        )
    else:
        api_key = require_api_key(config)
        file_store = usage_store_for(config)
        oracle = OracleClient.from_config(
            config.oracle, config.questioning, api_key=api_key, usage_store=file_store
        )
        limiter = rate_limiter_for(config, file_store)

    controller = QuestioningController(
        oracle=oracle,
        rate_limiter=limiter,
        max_questions=config.questioning.max_questions,
    )
    if session is not None:
        controller.session = session
    return controller


def _save(store: SessionStore, session: Session) -> None:
    result = store.save(session)
    if result.is_err:
        print_warning(f"Failed to save session: {result.error.message}")


def _show_question(question: Question, session: Session, max_questions: int) -> None:
    console.print()
    label = f"Question {question.sequence_number} of up to {max_questions}"
    if question.kind == QuestionKind.EDGE_CASE:
        label += " [warning]· edge case[/]"
    console.print(f"[muted]{label}[/]  [muted]answered: {session.answered_count}[/]")
    heading = f"{question.icon} {question.category}".strip()
    console.print(f"[highlight]{heading}[/]")
    console.print(f"[bold yellow]Q:[/] {question.text}")
    console.print(f"[muted]Type {SKIP_COMMAND} to skip or {FINISH_COMMAND} to see the summary.[/]")


async def _begin(
    controller: QuestioningController,
    description: str | None,
) -> bool:
    """Start the session, prompting again while the description is rejected locally.

    Returns:
        True once the session is in the questioning phase.
    """
    interactive = description is None
    while True:
        if description is None:
            description = await _multiline_prompt_async("Describe your project")

        with console.status("[cyan]Preparing your first question...[/]", spinner="dots"):
            result = await controller.start(description)

        if result.is_ok:
            return controller.session.phase == Phase.QUESTIONING

        error = result.error
        if isinstance(error, ValidationError) and interactive:
            print_warning(error.message, title="Invalid Description")
            description = None
            continue

        _report(error)
        return False


def _report(error: ScopeGuardError) -> None:
    print_error(error.message, title=type(error).__name__)


async def _question_loop(
    controller: QuestioningController,
    store: SessionStore,
    checkpoint: int,
) -> None:
    """Ask questions until the session reaches the summary phase."""
    checkpoint_asked = False

    while controller.session.phase == Phase.QUESTIONING:
        session = controller.session
        question = session.current_question
        if question is None:
            controller.finish()
            break

        if question.sequence_number == checkpoint and not checkpoint_asked:
            checkpoint_asked = True
            console.print()
            keep_going = Confirm.ask(
                f"[bold cyan]You've reached question {checkpoint}. "
                "Continue with the remaining questions?[/]",
                default=True,
            )
            if not keep_going:
                controller.finish()
                _save(store, controller.session)
                break

        _show_question(question, session, controller.max_questions)
        response = await _multiline_prompt_async("Your answer")
        command = response.strip().lower()

        result: Result[Session, ScopeGuardError]
        if command == FINISH_COMMAND:
            result = controller.finish()
        elif command == SKIP_COMMAND:
            with console.status("[cyan]Choosing the next question...[/]", spinner="dots"):
                result = await controller.skip()
        elif not command:
            print_warning(f"Type an answer, {SKIP_COMMAND} or {FINISH_COMMAND}.")
            continue
        else:
            with console.status("[cyan]Choosing the next question...[/]", spinner="dots"):
                result = await controller.submit_answer(response)

        if result.is_err:
            _report(result.error)
            continue

        _save(store, controller.session)


async def _run_start(
    config: ScopeGuardConfig,
    controller: QuestioningController,
    store: SessionStore,
    description: str | None,
    export: Path | None,
) -> None:
    session = controller.session

    if session.phase == Phase.COLLECTING:
        started = await _begin(controller, description)
        if not started:
            return
        session = controller.session
        console.print(f"[muted]Session: {session.session_id}[/]")
        _save(store, session)

    await _question_loop(controller, store, config.questioning.checkpoint_question)

    session = controller.session
    _save(store, session)

    print_success(
        f"Questionnaire complete: {session.answered_count} of "
        f"{len(session.questions)} questions answered.",
    )
    analytics = controller.summarize()
    render_dashboard(session, analytics)

    if export is not None:
        export_result = export_brief(session, export, analytics)
        if export_result.is_err:
            print_error(export_result.error.message, title="Export Failed")
        else:
            print_success(f"Brief exported to {export_result.value}")


def start(
    description: Annotated[
        str | None,
        typer.Argument(help="Project description (interactive prompt if not provided)."),
    ] = None,
    resume: Annotated[
        str | None,
        typer.Option("--resume", "-r", help="Resume a saved session by ID."),
    ] = None,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Use built-in questions only; no API key needed."),
    ] = False,
    export: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Write the final brief as JSON to this path."),
    ] = None,
    state_dir: Annotated[
        Path | None,
        typer.Option(
            "--state-dir",
            help="Custom directory for saved sessions.",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", "-d", help="Show verbose logs including debug messages."),
    ] = False,
) -> None:
    """Start an adaptive questionnaire to pin down a project's scope.

    Example:
        scopeguard start "Open a neighbourhood bakery with online ordering"

        scopeguard start --offline --export brief.json

        scopeguard start --resume session_20260116_120000_ab12cd
    """
    config = load_settings()
    setup_logging(config, debug=debug)
    store = session_store_for(config, state_dir)

    loaded: Session | None = None
    if resume:
        load_result = store.load(resume)
        if load_result.is_err:
            print_error(f"Failed to load session: {load_result.error.message}")
            raise typer.Exit(code=1)
        loaded = load_result.value
        print_info(f"Resuming session: {loaded.session_id}")
        if loaded.phase == Phase.COLLECTING and description is None:
            description = loaded.description or None
    elif description is None:
        console.print("[bold cyan]Welcome to ScopeGuard![/]")
        console.print()
        console.print("Describe your project and answer a few adaptive questions.")
        console.print("You'll get a completeness and scope-risk summary at the end.")
        console.print()

    controller = _build_controller(config, offline=offline, session=loaded)
    if offline:
        print_info("Offline mode - using built-in questions")

    bind_context(session_id=controller.session.session_id)
    try:
        asyncio.run(_run_start(config, controller, store, description, export))
    except (KeyboardInterrupt, EOFError):
        console.print()
        if controller.session.phase != Phase.COLLECTING:
            _save(store, controller.session)
            print_info(
                "Questionnaire interrupted. Resume with: "
                f"[bold]scopeguard start --resume {controller.session.session_id}[/]"
            )
        else:
            print_info("Questionnaire cancelled.")
        raise typer.Exit(code=0) from None
    finally:
        clear_context()


__all__ = ["start"]
