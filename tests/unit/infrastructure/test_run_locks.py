"""Tests for the in-process and database run locks."""

import pytest

from core.infrastructure.locking import InProcessRunLock
from core.infrastructure.locking.sql_run_lock import SqlRunLock


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_in_process_lock_is_single_flight():
    lock = InProcessRunLock()

    assert await lock.try_acquire("run-1") is True
    assert await lock.try_acquire("run-2") is False
    assert await lock.is_held() is True

    await lock.release("run-2")
    assert lock.holder == "run-1"

    await lock.release("run-1")
    assert await lock.is_held() is False
    assert await lock.try_acquire("run-2") is True


@pytest.mark.asyncio
async def test_in_process_lease_can_be_taken_over_after_expiry():
    clock = FakeClock()
    lock = InProcessRunLock(lease_seconds=60, clock=clock)
    await lock.try_acquire("crashed-run")

    clock.now += 30
    assert await lock.try_acquire("run-2") is False

    clock.now += 31
    assert await lock.is_held() is False
    assert await lock.try_acquire("run-2") is True
    assert lock.holder == "run-2"


@pytest.mark.asyncio
async def test_sql_lock_is_single_flight(test_session_factory):
    lock = SqlRunLock(test_session_factory, lease_seconds=3600)
    other_process = SqlRunLock(test_session_factory, lease_seconds=3600)

    assert await lock.try_acquire("run-1") is True
    assert await other_process.try_acquire("run-2") is False
    assert await other_process.current_holder() == "run-1"

    await other_process.release("run-2")
    assert await lock.is_held() is True

    await lock.release("run-1")
    assert await lock.is_held() is False
    assert await other_process.try_acquire("run-2") is True


@pytest.mark.asyncio
async def test_sql_lock_expired_lease_is_taken_over(test_session_factory):
    expired = SqlRunLock(test_session_factory, lease_seconds=0)
    await expired.try_acquire("crashed-run")

    assert await expired.is_held() is False

    lock = SqlRunLock(test_session_factory, lease_seconds=3600)
    assert await lock.try_acquire("run-2") is True
    assert await lock.current_holder() == "run-2"

    # The crashed run's late release must not free the new holder's lease.
    await expired.release("crashed-run")
    assert await lock.current_holder() == "run-2"


@pytest.mark.asyncio
async def test_sql_locks_with_different_names_are_independent(test_session_factory):
    first = SqlRunLock(test_session_factory, name="guests-a")
    second = SqlRunLock(test_session_factory, name="guests-b")

    assert await first.try_acquire("run-1") is True
    assert await second.try_acquire("run-2") is True
