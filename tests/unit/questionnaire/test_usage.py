"""Unit tests for scopeguard.questionnaire.usage module."""

from datetime import date
import json
from pathlib import Path

import pytest

from scopeguard.core.errors import PersistenceError
from scopeguard.questionnaire.usage import (
    DAILY_USAGE_KEY,
    DailyRateLimiter,
    InMemoryUsageStore,
    JsonFileUsageStore,
)

TODAY = date(2026, 3, 14)


def _limiter(store: InMemoryUsageStore | JsonFileUsageStore, limit: int = 5) -> DailyRateLimiter:
    return DailyRateLimiter(store=store, daily_limit=limit, today=lambda: TODAY)


class TestInMemoryUsageStore:
    def test_get_set_update(self) -> None:
        store = InMemoryUsageStore({"a": 1})

        assert store.get("a") == 1
        assert store.get("missing") is None
        store.set("b", 2)
        assert store.update("b", lambda v: v + 1) == 3
        assert store.get("b") == 3


class TestJsonFileUsageStore:
    def test_persists_between_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "data" / "usage.json"
        JsonFileUsageStore(path).set("last_oracle_call", 123.5)

        assert JsonFileUsageStore(path).get("last_oracle_call") == 123.5
        assert json.loads(path.read_text()) == {"last_oracle_call": 123.5}

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        assert JsonFileUsageStore(tmp_path / "none.json").get("x") is None

    def test_corrupt_file_reads_empty_and_is_rewritten(self, tmp_path: Path) -> None:
        path = tmp_path / "usage.json"
        path.write_text("{not json")
        store = JsonFileUsageStore(path)

        assert store.get("x") is None
        store.set("x", 1)
        assert json.loads(path.read_text()) == {"x": 1}

    def test_non_object_json_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "usage.json"
        path.write_text("[1, 2, 3]")

        assert JsonFileUsageStore(path).get("x") is None

    def test_update_is_read_modify_write(self, tmp_path: Path) -> None:
        store = JsonFileUsageStore(tmp_path / "usage.json")
        store.set("other", "kept")

        store.update("n", lambda v: (v or 0) + 1)
        store.update("n", lambda v: (v or 0) + 1)

        assert store.get("n") == 2
        assert store.get("other") == "kept"

    def test_write_failure_raises_persistence_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonFileUsageStore(blocker / "usage.json")

        with pytest.raises((PersistenceError, OSError)):
            store.set("x", 1)


class TestDailyRateLimiter:
    def test_allows_up_to_limit(self) -> None:
        limiter = _limiter(InMemoryUsageStore(), limit=5)

        results = [limiter.try_consume() for _ in range(6)]

        assert results == [True, True, True, True, True, False]
        assert limiter.used_today() == 5
        assert limiter.remaining() == 0

    def test_denied_call_leaves_record_unchanged(self) -> None:
        store = InMemoryUsageStore({DAILY_USAGE_KEY: {"date": TODAY.isoformat(), "count": 5}})

        assert _limiter(store).try_consume() is False
        assert store.get(DAILY_USAGE_KEY) == {"date": TODAY.isoformat(), "count": 5}

    def test_new_day_resets_count(self) -> None:
        store = InMemoryUsageStore({DAILY_USAGE_KEY: {"date": "2026-03-13", "count": 5}})
        limiter = _limiter(store)

        assert limiter.remaining() == 5
        assert limiter.try_consume() is True
        assert store.get(DAILY_USAGE_KEY) == {"date": TODAY.isoformat(), "count": 1}

    @pytest.mark.parametrize(
        "corrupt",
        ["garbage", {"date": TODAY.isoformat()}, {"date": TODAY.isoformat(), "count": -3}, 42],
    )
    def test_corrupt_record_counts_as_absent(self, corrupt: object) -> None:
        store = InMemoryUsageStore({DAILY_USAGE_KEY: corrupt})
        limiter = _limiter(store)

        assert limiter.used_today() == 0
        assert limiter.try_consume() is True
        assert store.get(DAILY_USAGE_KEY) == {"date": TODAY.isoformat(), "count": 1}

    def test_counts_survive_restart_with_file_store(self, tmp_path: Path) -> None:
        path = tmp_path / "usage.json"
        for _ in range(3):
            _limiter(JsonFileUsageStore(path), limit=3).try_consume()

        assert _limiter(JsonFileUsageStore(path), limit=3).try_consume() is False
