"""
Visibility Store Tests

Tests for the scan cache TTL, result persistence and trend history against
an in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from llmcheck.database import VisibilityResultRow, VisibilityScan, VisibilityStore
from llmcheck.database.repository import as_utc
from llmcheck.visibility import ModelId, Prominence, VisibilityResult


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _results(found_prompt: str = "Q1") -> list:
    return [
        VisibilityResult(
            model=ModelId.CHATGPT,
            prompt=found_prompt,
            found=True,
            snippet="Acme is great",
            prominence=Prominence.HIGH,
            sentiment=0.5,
            cited=True,
            score=92,
        ),
        VisibilityResult(model=ModelId.GEMINI, prompt=found_prompt),
        VisibilityResult.failed(ModelId.PERPLEXITY, found_prompt),
    ]


@pytest.fixture
def store(db_session):
    return VisibilityStore(db_session)


class TestSaveScan:
    """Persistence of scans and their cells."""

    def test_error_cells_are_not_persisted(self, store, db_session):
        scan = store.save_scan("https://acme.io", "saas", 1, 3, _results(), scanned_at=NOW)

        rows = db_session.query(VisibilityResultRow).filter_by(scan_id=scan.id).all()
        assert len(rows) == 2
        assert {r.model for r in rows} == {"chatgpt", "gemini"}

    def test_scan_row_keeps_submitted_and_normalized_url(self, store):
        scan = store.save_scan("http://Acme.io/", "saas", 1, 3, _results(), scanned_at=NOW)

        assert scan.url == "http://Acme.io/"
        assert scan.normalized_url == "https://acme.io/"
        assert scan.total_found == 1
        assert scan.total_queries == 3

    def test_rubric_fields_round_trip(self, store):
        store.save_scan("acme.io", "saas", 1, 3, _results(), scanned_at=NOW)
        latest = store.get_latest_scan("acme.io", now=NOW)

        found = next(r for r in latest.results if r.found)
        assert found.model == ModelId.CHATGPT
        assert found.prominence == Prominence.HIGH
        assert found.sentiment == 0.5
        assert found.cited is True
        assert found.score == 92
        assert found.error is False

    def test_prompt_list_round_trips(self, store):
        prompts = ["Q1", "Q2", "Q3"]
        store.save_scan("acme.io", "saas", 1, 9, _results(), scanned_at=NOW, prompts=prompts)
        latest = store.get_latest_scan("acme.io", now=NOW)

        assert latest.prompts == prompts
        assert {r.prompt for r in latest.results} == {"Q1"}

    def test_scan_without_prompt_list(self, store):
        store.save_scan("acme.io", "saas", 1, 3, _results(), scanned_at=NOW)

        assert store.get_latest_scan("acme.io", now=NOW).prompts == []

    def test_storage_failure_rolls_back_and_raises(self, store, db_session):
        with patch.object(db_session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
            with pytest.raises(OperationalError):
                store.save_scan("acme.io", "saas", 0, 3, _results(), scanned_at=NOW)

        assert db_session.query(VisibilityScan).count() == 0


class TestGetLatestScan:
    """72 hour cache lookups."""

    def test_no_scan(self, store):
        assert store.get_latest_scan("acme.io", now=NOW) is None

    def test_fresh_scan_is_returned(self, store):
        store.save_scan("acme.io", "saas", 1, 3, _results(), scanned_at=NOW - timedelta(hours=71))

        cached = store.get_latest_scan("acme.io", 72, now=NOW)

        assert cached is not None
        assert cached.total_found == 1
        assert cached.total_queries == 3

    def test_stale_scan_is_ignored(self, store):
        store.save_scan("acme.io", "saas", 1, 3, _results(), scanned_at=NOW - timedelta(hours=73))

        assert store.get_latest_scan("acme.io", 72, now=NOW) is None

    def test_newest_fresh_scan_wins(self, store):
        store.save_scan("acme.io", "saas", 1, 15, _results(), scanned_at=NOW - timedelta(hours=10))
        store.save_scan("acme.io", "saas", 4, 15, _results(), scanned_at=NOW - timedelta(hours=2))

        assert store.get_latest_scan("acme.io", now=NOW).total_found == 4

    def test_lookup_uses_normalized_url(self, store):
        store.save_scan("http://Acme.io/", "saas", 1, 3, _results(), scanned_at=NOW)

        assert store.get_latest_scan("https://acme.io", now=NOW) is not None
        assert store.get_latest_scan("acme.io", now=NOW) is not None
        assert store.get_latest_scan("other.io", now=NOW) is None

    def test_scanned_at_is_utc_aware(self, store):
        store.save_scan("acme.io", "saas", 1, 3, _results(), scanned_at=NOW)

        cached = store.get_latest_scan("acme.io", now=NOW)
        assert cached.scanned_at == NOW
        assert cached.scanned_at.tzinfo is not None


class TestScanHistory:
    """Trend series."""

    def test_history_is_oldest_first(self, store):
        for hours_ago, found in [(1, 3), (48, 1), (200, 2)]:
            store.save_scan("acme.io", "saas", found, 15, _results(), scanned_at=NOW - timedelta(hours=hours_ago))

        history = store.get_scan_history("https://acme.io/")

        assert [h.total_found for h in history] == [2, 1, 3]
        dates = [h.scanned_at for h in history]
        assert dates == sorted(dates)

    def test_history_includes_stale_scans(self, store):
        store.save_scan("acme.io", "saas", 1, 15, _results(), scanned_at=NOW - timedelta(days=30))

        assert len(store.get_scan_history("acme.io")) == 1

    def test_limit_keeps_most_recent(self, store):
        for day in range(5):
            store.save_scan("acme.io", "saas", day, 15, _results(), scanned_at=NOW - timedelta(days=4 - day))

        history = store.get_scan_history("acme.io", limit=2)

        assert [h.total_found for h in history] == [3, 4]

    def test_history_is_per_url(self, store):
        store.save_scan("acme.io", "saas", 1, 15, _results(), scanned_at=NOW)
        store.save_scan("other.io", "saas", 2, 15, _results(), scanned_at=NOW)

        assert [h.total_found for h in store.get_scan_history("acme.io")] == [1]

    def test_empty_history(self, store):
        assert store.get_scan_history("acme.io") == []


class TestAsUtc:

    def test_naive_is_treated_as_utc(self):
        assert as_utc(datetime(2025, 1, 1, 8, 0)) == datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)

    def test_aware_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        assert as_utc(datetime(2025, 1, 1, 10, 0, tzinfo=plus_two)).hour == 8
