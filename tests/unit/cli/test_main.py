"""Unit tests for the ScopeGuard CLI."""

import json
from pathlib import Path
import re
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from scopeguard import __version__
from scopeguard.cli.main import app
from scopeguard.questionnaire.models import Phase, Question, Session
from scopeguard.questionnaire.store import SessionStore

runner = CliRunner()

PROMPT_TARGET = "scopeguard.cli.commands.start._multiline_prompt_async"
DESCRIPTION = "Launch an online marketplace for handmade furniture"


def strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ~/.scopeguard at a temporary directory and clear API keys."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ("SCOPEGUARD_API_KEY", "GEMINI_API_KEY", "SCOPEGUARD_LOG_MODE"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "sessions"


def saved_session(state_dir: Path, session_id: str = "demo-1") -> Session:
    session = Session(
        session_id=session_id,
        description=DESCRIPTION,
        phase=Phase.SUMMARIZING,
        questions=[
            Question(sequence_number=1, category="Budget", text="What is the budget?"),
            Question(sequence_number=2, category="Timeline", text="When is launch?"),
        ],
        answers={0: "15k EUR"},
        position=1,
    )
    SessionStore(state_dir).save(session).unwrap()
    return session


class TestMainApp:
    """Tests for the main Typer application."""

    def test_app_has_help(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "ScopeGuard" in result.output
        for command in ("start", "sessions", "summary", "usage", "config"):
            assert command in result.output

    @pytest.mark.parametrize("flag", ["--version", "-V"])
    def test_version(self, flag: str) -> None:
        result = runner.invoke(app, [flag])

        assert result.exit_code == 0
        assert __version__ in strip_ansi(result.output)

    def test_no_args_shows_help(self) -> None:
        """no_args_is_help exits with code 2."""
        result = runner.invoke(app, [])

        assert result.exit_code == 2
        assert "ScopeGuard" in result.output


class TestConfigCommands:
    def test_init_creates_files(self, isolated_home: Path) -> None:
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert (isolated_home / ".scopeguard" / "config.yaml").exists()
        credentials = isolated_home / ".scopeguard" / "credentials.yaml"
        assert credentials.stat().st_mode & 0o777 == 0o600

    def test_init_refuses_to_overwrite(self) -> None:
        runner.invoke(app, ["config", "init"])

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "--force" in result.output

    def test_init_force_overwrites(self) -> None:
        runner.invoke(app, ["config", "init"])

        result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0

    def test_show_without_key(self) -> None:
        runner.invoke(app, ["config", "init"])

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "not configured" in result.output
        assert "gemini" in result.output

    def test_show_masks_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCOPEGUARD_API_KEY", "sk-test-abcdef123456")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "sk-test-abcdef123456" not in result.output
        assert "3456" in result.output

    def test_malformed_config_exits(self, isolated_home: Path) -> None:
        config_dir = isolated_home / ".scopeguard"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("questioning:\n  max_questions: 99\n")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1


class TestStartCommand:
    def test_requires_api_key(self, state_dir: Path) -> None:
        result = runner.invoke(app, ["start", DESCRIPTION, "--state-dir", str(state_dir)])

        assert result.exit_code == 1
        assert "No API key" in result.output

    def test_offline_run_with_export(self, state_dir: Path, tmp_path: Path) -> None:
        brief_path = tmp_path / "brief.json"
        prompt = AsyncMock(side_effect=["Makers and small workshops", "/skip", "/finish"])

        with patch(PROMPT_TARGET, prompt):
            result = runner.invoke(
                app,
                [
                    "start",
                    DESCRIPTION,
                    "--offline",
                    "--state-dir",
                    str(state_dir),
                    "--export",
                    str(brief_path),
                ],
            )

        assert result.exit_code == 0, result.output
        assert prompt.await_count == 3
        assert "Project Scope Summary" in result.output

        saved = SessionStore(state_dir).list_sessions()
        assert len(saved) == 1
        assert saved[0].phase == Phase.SUMMARIZING
        assert saved[0].questions == 3
        assert saved[0].answered == 1

        brief = json.loads(brief_path.read_text(encoding="utf-8"))
        assert brief["description"] == DESCRIPTION
        assert brief["questions"][0]["category"] == "Project Vision"
        assert brief["questions"][0]["answer"] == "Makers and small workshops"

    def test_offline_run_does_not_use_daily_allowance(self, state_dir: Path) -> None:
        with patch(PROMPT_TARGET, AsyncMock(side_effect=["/finish"])):
            runner.invoke(app, ["start", DESCRIPTION, "--offline", "--state-dir", str(state_dir)])

        result = runner.invoke(app, ["usage"])

        assert result.exit_code == 0
        assert "Remaining" in result.output
        assert "Daily limit reached" not in result.output

    def test_interrupt_saves_session(self, state_dir: Path) -> None:
        prompt = AsyncMock(side_effect=["Makers and small workshops", EOFError()])

        with patch(PROMPT_TARGET, prompt):
            result = runner.invoke(
                app, ["start", DESCRIPTION, "--offline", "--state-dir", str(state_dir)]
            )

        assert result.exit_code == 0
        assert "--resume" in strip_ansi(result.output)
        saved = SessionStore(state_dir).list_sessions()
        assert len(saved) == 1
        assert saved[0].phase == Phase.QUESTIONING
        assert saved[0].answered == 1

    def test_resume_unknown_session(self, state_dir: Path) -> None:
        result = runner.invoke(
            app, ["start", "--resume", "nope", "--offline", "--state-dir", str(state_dir)]
        )

        assert result.exit_code == 1
        assert "Session not found" in result.output

    def test_resume_finished_session_shows_summary(self, state_dir: Path) -> None:
        saved_session(state_dir)
        prompt = AsyncMock()

        with patch(PROMPT_TARGET, prompt):
            result = runner.invoke(
                app, ["start", "--resume", "demo-1", "--offline", "--state-dir", str(state_dir)]
            )

        assert result.exit_code == 0
        assert "Project Scope Summary" in result.output
        prompt.assert_not_awaited()


class TestSessionCommands:
    def test_sessions_empty(self, state_dir: Path) -> None:
        result = runner.invoke(app, ["sessions", "--state-dir", str(state_dir)])

        assert result.exit_code == 0
        assert "No saved sessions found." in result.output

    def test_sessions_lists_saved(self, state_dir: Path) -> None:
        saved_session(state_dir)

        result = runner.invoke(app, ["sessions", "--state-dir", str(state_dir)])

        assert result.exit_code == 0
        assert "demo-1" in result.output

    def test_summary(self, state_dir: Path, tmp_path: Path) -> None:
        saved_session(state_dir)
        brief_path = tmp_path / "brief.json"

        result = runner.invoke(
            app,
            ["summary", "demo-1", "--state-dir", str(state_dir), "--export", str(brief_path)],
        )

        assert result.exit_code == 0
        assert "50%" in result.output
        assert "Timeline Missing" in result.output
        assert json.loads(brief_path.read_text(encoding="utf-8"))["session_id"] == "demo-1"

    def test_summary_unknown_session(self, state_dir: Path) -> None:
        result = runner.invoke(app, ["summary", "missing", "--state-dir", str(state_dir)])

        assert result.exit_code == 1


class TestUsageCommand:
    def test_fresh_usage(self) -> None:
        result = runner.invoke(app, ["usage"])

        assert result.exit_code == 0
        assert "Daily Usage" in result.output
        assert "5" in result.output
