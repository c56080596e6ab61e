"""Unit tests for retention module.

Tests retention settings validation, the runtime config store, and the
cleanup rules against a real (SQLite) database and staging directory.
"""

import threading
from datetime import timedelta

import pytest
from pydantic import ValidationError

from fanvault.config import Settings
from fanvault.domain.submissions import SubmissionStatus
from fanvault.domain.submissions.errors import CleanupInProgressError, RetentionConfigError
from fanvault.models.base import utcnow
from fanvault.models.pending_submission import PendingSubmission
from fanvault.models.retention_config import RetentionConfig
from fanvault.retention import lock as cleanup_lock
from fanvault.retention.config_store import RetentionConfigStore
from fanvault.retention.lock import CleanupLock, get_redis_client
from fanvault.retention.schemas import RetentionSettings, RetentionStatistics

REJECTED = SubmissionStatus.REJECTED


class TestRetentionSettings:
    """Test RetentionSettings schema validation."""

    def test_default_values(self):
        settings = RetentionSettings()

        assert settings.retention_days == 7
        assert settings.max_retained_rejected == 100

    @pytest.mark.parametrize("days", [0, 366])
    def test_retention_days_bounds(self, days):
        with pytest.raises(ValidationError):
            RetentionSettings(retention_days=days)

    @pytest.mark.parametrize("count", [9, 10001])
    def test_max_retained_bounds(self, count):
        with pytest.raises(ValidationError):
            RetentionSettings(max_retained_rejected=count)

    def test_boundary_values_accepted(self):
        assert RetentionSettings(retention_days=1, max_retained_rejected=10)
        assert RetentionSettings(retention_days=365, max_retained_rejected=10000)


class TestRetentionStatistics:
    def test_totals(self):
        now = utcnow()
        stats = RetentionStatistics(
            job_started_at=now,
            job_completed_at=now,
            duration_seconds=0.0,
            aged_out_deleted=3,
            excess_deleted=2,
            failed_items=0,
        )
        assert stats.total_deleted == 5
        assert not stats.has_errors

    def test_has_errors(self):
        now = utcnow()
        stats = RetentionStatistics(
            job_started_at=now, job_completed_at=now, duration_seconds=0.0, failed_items=1
        )
        assert stats.has_errors


class TestRetentionConfigStore:
    def test_defaults_until_first_update(self, config_store, db_session):
        assert config_store.get() == RetentionSettings()
        assert db_session.query(RetentionConfig).count() == 0

    def test_partial_update(self, config_store):
        updated = config_store.update({"retention_days": 14})

        assert updated.retention_days == 14
        assert updated.max_retained_rejected == 100
        assert config_store.get() == updated

    def test_second_update_keeps_earlier_fields(self, config_store, db_session):
        config_store.update({"retention_days": 14})
        config_store.update({"max_retained_rejected": 500})

        assert config_store.get() == RetentionSettings(retention_days=14, max_retained_rejected=500)
        assert db_session.query(RetentionConfig).count() == 1

    def test_out_of_bounds_update_changes_nothing(self, config_store):
        with pytest.raises(RetentionConfigError):
            config_store.update({"retention_days": 400})

        assert config_store.get() == RetentionSettings()

    def test_one_bad_field_rejects_whole_update(self, config_store):
        config_store.update({"retention_days": 14})

        with pytest.raises(RetentionConfigError):
            config_store.update({"retention_days": 30, "max_retained_rejected": 5})

        assert config_store.get() == RetentionSettings(retention_days=14)

    def test_unknown_field_rejected(self, config_store):
        with pytest.raises(RetentionConfigError):
            config_store.update({"retention_weeks": 2})

    def test_from_settings(self, session_factory):
        store = RetentionConfigStore.from_settings(
            Settings(RETENTION_DAYS=3, MAX_RETAINED_REJECTED=50), session_factory
        )
        assert store.get() == RetentionSettings(retention_days=3, max_retained_rejected=50)

    def test_invalid_environment_defaults(self, session_factory):
        with pytest.raises(RetentionConfigError):
            RetentionConfigStore.from_settings(Settings(RETENTION_DAYS=0), session_factory)

    def test_update_visible_to_every_store(self, session_factory):
        api_store = RetentionConfigStore(session_factory)
        worker_store = RetentionConfigStore(session_factory)

        api_store.update({"retention_days": 30})
        worker_store.update({"max_retained_rejected": 500})

        expected = RetentionSettings(retention_days=30, max_retained_rejected=500)
        assert worker_store.get() == expected
        assert api_store.get() == expected

    def test_stored_settings_win_over_defaults(self, session_factory):
        RetentionConfigStore(session_factory).update({"retention_days": 30})

        worker_store = RetentionConfigStore(session_factory, RetentionSettings(retention_days=3))

        assert worker_store.get().retention_days == 30

    def test_concurrent_updates_never_mix(self, config_store):
        pairs = [(d, d * 10) for d in range(1, 21)]

        def apply(days, count):
            config_store.update({"retention_days": days, "max_retained_rejected": count})

        threads = [threading.Thread(target=apply, args=pair) for pair in pairs]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        final = config_store.get()
        assert final.max_retained_rejected == final.retention_days * 10


class TestAgeRule:
    def test_age_boundary(self, retention_service, make_submission, db_session):
        now = utcnow()
        old = make_submission(status=REJECTED, created_at=now - timedelta(days=8))
        recent = make_submission(status=REJECTED, created_at=now - timedelta(days=6))
        old_id, recent_id = old.id, recent.id

        stats = retention_service.run_cleanup(now=now)

        assert stats.aged_out_deleted == 1
        assert stats.excess_deleted == 0
        remaining = {s.id for s in db_session.query(PendingSubmission).all()}
        assert remaining == {recent_id}
        assert old_id not in remaining

    def test_staged_file_removed_with_row(self, retention_service, make_submission, staging):
        now = utcnow()
        old = make_submission(status=REJECTED, created_at=now - timedelta(days=30))
        key = old.staged_path

        retention_service.run_cleanup(now=now)

        assert not staging.exists(key)

    def test_pending_and_approved_are_never_touched(self, retention_service, make_submission, db_session):
        now = utcnow()
        ancient = now - timedelta(days=300)
        pending = make_submission(status=SubmissionStatus.PENDING, created_at=ancient)
        approved = make_submission(status=SubmissionStatus.APPROVED, created_at=ancient)

        stats = retention_service.run_cleanup(now=now)

        assert stats.total_deleted == 0
        assert db_session.get(PendingSubmission, pending.id) is not None
        assert db_session.get(PendingSubmission, approved.id) is not None

    def test_missing_file_still_deletes_row(self, retention_service, make_submission, db_session):
        now = utcnow()
        make_submission(status=REJECTED, created_at=now - timedelta(days=10), write_file=False)

        stats = retention_service.run_cleanup(now=now)

        assert stats.aged_out_deleted == 1
        assert stats.failed_items == 0
        assert db_session.query(PendingSubmission).count() == 0


class TestCountRule:
    def test_excess_oldest_deleted_first(self, retention_service, config_store, make_submission, db_session):
        config_store.update({"retention_days": 365, "max_retained_rejected": 10})
        now = utcnow()
        created = [
            make_submission(status=REJECTED, created_at=now - timedelta(hours=i))
            for i in range(12, 0, -1)
        ]

        stats = retention_service.run_cleanup(now=now)

        assert stats.excess_deleted == 2
        remaining = {s.id for s in db_session.query(PendingSubmission).all()}
        assert remaining == {s.id for s in created[2:]}

    def test_count_boundary_then_idempotent(self, retention_service, make_submission, db_session):
        now = utcnow()
        for i in range(101):
            make_submission(status=REJECTED, created_at=now - timedelta(minutes=101 - i), write_file=False)

        first = retention_service.run_cleanup(now=now)
        second = retention_service.run_cleanup(now=now)

        assert first.excess_deleted == 1
        assert second.total_deleted == 0
        assert db_session.query(PendingSubmission).count() == 100

    def test_created_at_ties_broken_by_id(self, retention_service, config_store, make_submission, db_session):
        config_store.update({"max_retained_rejected": 10})
        same_time = utcnow() - timedelta(hours=1)
        rows = [make_submission(status=REJECTED, created_at=same_time, write_file=False) for _ in range(11)]
        lowest_id = min(r.id for r in rows)

        retention_service.run_cleanup()

        assert db_session.get(PendingSubmission, lowest_id) is None

    def test_age_rule_runs_before_count_rule(self, retention_service, config_store, make_submission):
        config_store.update({"retention_days": 7, "max_retained_rejected": 10})
        now = utcnow()
        for _ in range(3):
            make_submission(status=REJECTED, created_at=now - timedelta(days=20), write_file=False)
        for i in range(10):
            make_submission(status=REJECTED, created_at=now - timedelta(hours=i + 1), write_file=False)

        stats = retention_service.run_cleanup(now=now)

        assert stats.aged_out_deleted == 3
        assert stats.excess_deleted == 0


class TestFailureIsolation:
    def test_one_failing_item_does_not_stop_batch(
        self, retention_service, make_submission, staging, db_session, monkeypatch
    ):
        now = utcnow()
        rows = [make_submission(status=REJECTED, created_at=now - timedelta(days=10 + i)) for i in range(3)]
        broken_key = rows[1].staged_path
        original_delete = staging.delete

        def flaky_delete(key):
            if key == broken_key:
                raise PermissionError("read-only file system")
            return original_delete(key)

        monkeypatch.setattr(staging, "delete", flaky_delete)

        stats = retention_service.run_cleanup(now=now)

        assert stats.aged_out_deleted == 2
        assert stats.failed_items == 1
        assert stats.has_errors
        remaining = [s.id for s in db_session.query(PendingSubmission).all()]
        assert remaining == [rows[1].id]


class TestSingleFlight:
    def test_busy_lock_raises(self, retention_service):
        with CleanupLock().hold() as acquired:
            assert acquired
            with pytest.raises(CleanupInProgressError):
                retention_service.run_cleanup()

    def test_manual_cleanup_reports_busy(self, retention_service):
        with CleanupLock().hold():
            result = retention_service.manual_cleanup()

        assert not result.success
        assert result.error == "cleanup_in_progress"
        assert result.statistics is None

    def test_lock_released_after_run(self, retention_service):
        retention_service.run_cleanup()
        assert not CleanupLock().locked

    def test_manual_cleanup_never_raises(self, retention_service, monkeypatch):
        def explode(now):
            raise RuntimeError("database went away")

        monkeypatch.setattr(retention_service, "_execute", explode)

        result = retention_service.manual_cleanup()

        assert not result.success
        assert "database went away" in result.error
        assert not CleanupLock().locked


@pytest.fixture
def fresh_redis_client():
    get_redis_client.cache_clear()
    yield get_redis_client
    get_redis_client.cache_clear()


class TestRedisClient:
    def test_client_built_once_per_process(self, fresh_redis_client):
        assert fresh_redis_client() is fresh_redis_client()

    def test_malformed_url_degrades_to_none(self, fresh_redis_client, monkeypatch):
        monkeypatch.setattr(cleanup_lock, "get_settings", lambda: Settings(REDIS_URL="not-a-redis-url"))

        assert fresh_redis_client() is None

    def test_unreachable_redis_falls_back_to_process_lock(self, fresh_redis_client):
        # Tests point REDIS_URL at a port nothing listens on
        lock = CleanupLock(redis_client=fresh_redis_client())

        with lock.hold() as acquired:
            assert acquired
            assert lock.locked

        assert not lock.locked


class TestRetentionStats:
    def test_stats_follow_current_config(self, retention_service, config_store, make_submission):
        now = utcnow()
        for i in range(12):
            make_submission(status=REJECTED, created_at=now - timedelta(days=i), write_file=False)

        before = retention_service.get_stats(now=now)
        config_store.update({"retention_days": 3, "max_retained_rejected": 10})
        after = retention_service.get_stats(now=now)

        assert before.total_rejected == 12
        assert before.aged_out_count == 4  # days 8..11 older than 7 days
        assert before.excess_count == 0
        assert before.next_cleanup_needed

        assert after.retention_days == 3
        assert after.aged_out_count == 8
        assert after.excess_count == 2

    def test_nothing_to_do(self, retention_service):
        stats = retention_service.get_stats()
        assert stats.total_rejected == 0
        assert not stats.next_cleanup_needed
