"""JSON persistence for questionnaire sessions and exported briefs."""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
import re
from typing import Any

from pydantic import BaseModel
import structlog

from scopeguard.core.errors import PersistenceError, ValidationError
from scopeguard.core.locking import file_lock
from scopeguard.core.types import Result
from scopeguard.questionnaire.analytics import Analytics, findings, summarize
from scopeguard.questionnaire.models import Phase, Session

log = structlog.get_logger()

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class SessionInfo(BaseModel, frozen=True):
    """Listing entry for a saved session."""

    session_id: str
    phase: Phase
    description: str
    questions: int
    answered: int
    created_at: datetime
    updated_at: datetime


class SessionStore:
    """Saves sessions as ``<state_dir>/<session_id>.json``.

    Example:
        store = SessionStore(Path("data/sessions"))
        store.save(controller.session)
        session = store.load("session_20250101_120000_ab12cd").unwrap()
    """

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    def _path_for(self, session_id: str) -> Result[Path, ValidationError]:
        if not _SESSION_ID_PATTERN.match(session_id):
            return Result.err(
                ValidationError(
                    "Session IDs may only contain letters, digits, '-' and '_'",
                    field="session_id",
                    value=session_id,
                )
            )
        return Result.ok(self.state_dir / f"{session_id}.json")

    def save(self, session: Session) -> Result[Path, PersistenceError | ValidationError]:
        """Write the session to disk.

        Returns:
            Result containing the file path, or the error that prevented saving.
        """
        path_result = self._path_for(session.session_id)
        if path_result.is_err:
            return Result.err(path_result.error)
        file_path = path_result.value

        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            with file_lock(file_path, exclusive=True):
                tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
                tmp_path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
                tmp_path.replace(file_path)
        except OSError as e:
            log.exception("questionnaire.session.save_failed", session_id=session.session_id)
            return Result.err(
                PersistenceError(
                    f"Failed to save session: {e}",
                    operation="save",
                    details={"session_id": session.session_id},
                )
            )

        log.debug(
            "questionnaire.session.saved",
            session_id=session.session_id,
            file_path=str(file_path),
        )
        return Result.ok(file_path)

    def load(self, session_id: str) -> Result[Session, PersistenceError | ValidationError]:
        """Read a saved session.

        Returns:
            Result containing the session, or an error if it is missing,
            unreadable or malformed.
        """
        path_result = self._path_for(session_id)
        if path_result.is_err:
            return Result.err(path_result.error)
        file_path = path_result.value

        if not file_path.exists():
            return Result.err(
                ValidationError(
                    f"Session not found: {session_id}",
                    field="session_id",
                    value=session_id,
                )
            )

        try:
            with file_lock(file_path, exclusive=False):
                content = file_path.read_text(encoding="utf-8")
            session = Session.model_validate_json(content)
        except (OSError, ValueError) as e:
            log.warning("questionnaire.session.load_failed", session_id=session_id, error=str(e))
            return Result.err(
                PersistenceError(
                    f"Failed to load session: {e}",
                    operation="load",
                    details={"session_id": session_id, "file_path": str(file_path)},
                )
            )

        log.info(
            "questionnaire.session.loaded",
            session_id=session_id,
            questions=len(session.questions),
        )
        return Result.ok(session)

    def list_sessions(self) -> list[SessionInfo]:
        """Saved sessions, most recently updated first. Unreadable files are skipped."""
        if not self.state_dir.exists():
            return []

        sessions: list[SessionInfo] = []
        for file_path in self.state_dir.glob("*.json"):
            try:
                session = Session.model_validate_json(file_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                log.warning(
                    "questionnaire.session.list_skipped",
                    file_path=str(file_path),
                    error=str(e),
                )
                continue
            sessions.append(
                SessionInfo(
                    session_id=session.session_id,
                    phase=session.phase,
                    description=session.description,
                    questions=len(session.questions),
                    answered=session.answered_count,
                    created_at=session.created_at,
                    updated_at=session.updated_at,
                )
            )

        return sorted(sessions, key=lambda info: info.updated_at, reverse=True)


def build_brief(session: Session, analytics: Analytics | None = None) -> dict[str, Any]:
    """Assemble the exportable project brief for a session."""
    analytics = analytics or summarize(session.questions, session.answers)
    return {
        "session_id": session.session_id,
        "description": session.description,
        "exported_at": datetime.now(UTC).isoformat(),
        "questions": [
            {
                "sequence_number": question.sequence_number,
                "category": question.category,
                "kind": question.kind.value,
                "question": question.text,
                "answer": session.answers.get(idx),
            }
            for idx, question in enumerate(session.questions)
        ],
        "analytics": analytics.model_dump(mode="json"),
        "findings": [finding.model_dump(mode="json") for finding in findings(analytics)],
    }


def export_brief(
    session: Session,
    path: Path,
    analytics: Analytics | None = None,
) -> Result[Path, PersistenceError]:
    """Write the project brief as JSON to ``path``.

    Args:
        session: The session to export.
        path: Destination file; parent directories are created.
        analytics: Precomputed analytics, computed from the session if omitted.

    Returns:
        Result containing the written path or a PersistenceError.
    """
    brief = build_brief(session, analytics)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(brief, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        return Result.err(
            PersistenceError(
                f"Failed to export brief: {e}",
                operation="export",
                details={"path": str(path)},
            )
        )

    log.info("questionnaire.brief.exported", session_id=session.session_id, path=str(path))
    return Result.ok(path)
