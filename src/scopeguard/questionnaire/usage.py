"""Process-wide usage counters: daily project allowance and oracle pacing.

Both counters live behind the UsageStore port. The CLI uses a JSON file
guarded by an fcntl lock; tests use InMemoryUsageStore. ``update`` performs
the read-modify-write under a single lock so two processes never lose an
increment.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
import json
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
import structlog

from scopeguard.core.errors import PersistenceError
from scopeguard.core.locking import file_lock

log = structlog.get_logger()

DAILY_USAGE_KEY = "project_count"
LAST_ORACLE_CALL_KEY = "last_oracle_call"


class UsageStore(Protocol):
    """Key/value port for persisted counters."""

    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serialisable value."""
        ...

    def update(self, key: str, fn: Callable[[Any | None], Any]) -> Any:
        """Atomically replace the value with ``fn(current)`` and return it."""
        ...


class InMemoryUsageStore:
    """UsageStore kept in a dict; for tests and ``--offline`` dry runs."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def update(self, key: str, fn: Callable[[Any | None], Any]) -> Any:
        value = fn(self._data.get(key))
        self._data[key] = value
        return value


class JsonFileUsageStore:
    """UsageStore persisted as a single JSON object on disk.

    A missing or corrupt file reads as empty; it is rewritten on the next
    successful ``set``/``update``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("usage.store.unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            log.warning("usage.store.unreadable", path=str(self.path), error="not an object")
            return {}
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise PersistenceError(
                f"Failed to write usage store: {e}",
                operation="write",
                details={"path": str(self.path)},
            ) from e

    def get(self, key: str) -> Any | None:
        with file_lock(self.path, exclusive=False):
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        with file_lock(self.path):
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def update(self, key: str, fn: Callable[[Any | None], Any]) -> Any:
        with file_lock(self.path):
            data = self._read_all()
            value = fn(data.get(key))
            data[key] = value
            self._write_all(data)
            return value


class DailyUsage(BaseModel):
    """Projects started on one calendar day."""

    date: str
    count: int = Field(ge=0)


def _parse_usage(raw: Any) -> DailyUsage | None:
    if raw is None:
        return None
    try:
        return DailyUsage.model_validate(raw)
    except PydanticValidationError:
        log.warning("usage.record.corrupt", record=str(raw)[:100])
        return None


class DailyRateLimiter:
    """Caps the number of new questionnaires started per calendar day.

    Example:
        limiter = DailyRateLimiter(store=JsonFileUsageStore(path), daily_limit=5)
        if not limiter.try_consume():
            ...  # tell the user to come back tomorrow
    """

    def __init__(
        self,
        store: UsageStore,
        daily_limit: int,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.daily_limit = daily_limit
        self._today = today

    def _today_key(self) -> str:
        return self._today().isoformat()

    def try_consume(self) -> bool:
        """Count one new project if today's allowance is not used up.

        A new day (or a missing/corrupt record) resets the count to 1.
        A denied call leaves the stored record unchanged.

        Returns:
            True if the project may start.
        """
        today = self._today_key()
        allowed = False

        def _consume(raw: Any | None) -> Any:
            nonlocal allowed
            usage = _parse_usage(raw)
            if usage is None or usage.date != today:
                allowed = True
                return DailyUsage(date=today, count=1).model_dump()
            if usage.count < self.daily_limit:
                allowed = True
                return DailyUsage(date=today, count=usage.count + 1).model_dump()
            return raw

        self.store.update(DAILY_USAGE_KEY, _consume)

        if allowed:
            log.debug("usage.project.counted", date=today)
        else:
            log.info("usage.limit.reached", date=today, limit=self.daily_limit)
        return allowed

    def used_today(self) -> int:
        """Projects already started today."""
        usage = _parse_usage(self.store.get(DAILY_USAGE_KEY))
        if usage is None or usage.date != self._today_key():
            return 0
        return usage.count

    def remaining(self) -> int:
        """Projects that can still be started today."""
        return max(0, self.daily_limit - self.used_today())
