import threading

import pytest

from auth_control.otp_errors import InvalidConfigurationError
from monitor_unit.persistent_replay_guard import SqliteReplayGuard
from monitor_unit.replay_guard import InMemoryReplayGuard, ReplayGuard


@pytest.fixture(params=["memory", "sqlite"])
def make_guard(request, tmp_path):
    def factory(retention_buckets=None):
        if request.param == "memory":
            return InMemoryReplayGuard(retention_buckets=retention_buckets)
        return SqliteReplayGuard(str(tmp_path / "used_codes.db"), retention_buckets=retention_buckets)
    return factory


def test_mark_then_query(make_guard):
    guard = make_guard()
    assert not guard.is_used(100, "123456", "alice")
    guard.mark_used(100, "123456", "alice")
    assert guard.is_used(100, "123456", "alice")


def test_mark_used_is_idempotent(make_guard):
    guard = make_guard()
    guard.mark_used(100, "123456", "alice")
    guard.mark_used(100, "123456", "alice")
    assert guard.is_used(100, "123456", "alice")


def test_records_are_scoped(make_guard):
    guard = make_guard()
    guard.mark_used(100, "123456", "alice")
    assert not guard.is_used(100, "123456", "bob")
    assert not guard.is_used(101, "123456", "alice")
    assert not guard.is_used(100, "654321", "alice")


def test_is_used_has_no_side_effect(make_guard):
    guard = make_guard()
    guard.is_used(100, "123456", "alice")
    assert guard.claim(100, "123456", "alice")


def test_claim_only_once(make_guard):
    guard = make_guard()
    assert guard.claim(100, "123456", "alice") is True
    assert guard.claim(100, "123456", "alice") is False


def test_missing_user_is_one_identity(make_guard):
    guard = make_guard()
    assert guard.claim(100, "123456", None)
    assert not guard.claim(100, "123456", "")


def test_concurrent_claims_have_one_winner(make_guard):
    guard = make_guard()
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(guard.claim(100, "123456", "alice"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert results.count(False) == 7


def test_prune_drops_old_buckets(make_guard):
    guard = make_guard()
    for bucket in (10, 11, 12):
        guard.mark_used(bucket, "123456", "alice")

    assert guard.prune(12) == 2
    assert not guard.is_used(11, "123456", "alice")
    assert guard.is_used(12, "123456", "alice")


def test_retention_follows_newest_bucket(make_guard):
    guard = make_guard(retention_buckets=10)
    guard.mark_used(100, "111111", "alice")
    guard.mark_used(110, "222222", "alice")
    assert guard.is_used(100, "111111", "alice")

    guard.mark_used(111, "333333", "alice")
    assert not guard.is_used(100, "111111", "alice")
    assert guard.is_used(110, "222222", "alice")


def test_older_claim_does_not_move_retention(make_guard):
    guard = make_guard(retention_buckets=2)
    guard.mark_used(50, "111111", "alice")
    guard.mark_used(49, "222222", "alice")
    assert guard.is_used(50, "111111", "alice")
    assert guard.is_used(49, "222222", "alice")


@pytest.mark.parametrize("retention", [-1, 1.5, True])
def test_invalid_retention(retention):
    with pytest.raises(InvalidConfigurationError):
        InMemoryReplayGuard(retention_buckets=retention)


def test_count(make_guard):
    guard = make_guard()
    assert guard.count() == 0
    guard.mark_used(1, "123456", "alice")
    guard.mark_used(1, "123456", "bob")
    guard.mark_used(1, "123456", "bob")
    assert guard.count() == 2


def test_empty_guard_is_still_a_guard(make_guard):
    guard = make_guard()
    assert guard.count() == 0
    assert guard is not None and bool(guard)


def test_sqlite_survives_reopen(tmp_path):
    path = str(tmp_path / "used_codes.db")
    SqliteReplayGuard(path).mark_used(100, "123456", "alice")

    reopened = SqliteReplayGuard(path)
    assert reopened.is_used(100, "123456", "alice")
    assert reopened.count() == 1


def test_sqlite_path_from_environment(tmp_path, monkeypatch):
    path = str(tmp_path / "env.db")
    monkeypatch.setenv("OTP_REPLAY_DB_PATH", path)
    assert SqliteReplayGuard().db_path == path


def test_replay_guard_is_abstract():
    with pytest.raises(TypeError):
        ReplayGuard()
