# backend/tests/unit/core/test_booking_lock.py
"""Unit tests for the per-tutor booking lock."""

import threading
from unittest.mock import MagicMock

from tutorbook.core import booking_lock


class TestProcessLock:
    def test_lock_is_taken_without_redis(self):
        with booking_lock.tutor_booking_lock("tutor-a", wait_s=0.1) as held:
            assert held is True

    def test_second_holder_times_out(self):
        results = []

        with booking_lock.tutor_booking_lock("tutor-b", wait_s=0.1) as held:
            assert held

            def contender():
                with booking_lock.tutor_booking_lock("tutor-b", wait_s=0.05) as other:
                    results.append(other)

            thread = threading.Thread(target=contender)
            thread.start()
            thread.join()

        assert results == [False]

    def test_different_tutors_do_not_block_each_other(self):
        with booking_lock.tutor_booking_lock("tutor-c", wait_s=0.05) as first:
            with booking_lock.tutor_booking_lock("tutor-d", wait_s=0.05) as second:
                assert first and second

    def test_lock_released_after_exception(self):
        try:
            with booking_lock.tutor_booking_lock("tutor-e", wait_s=0.05):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        with booking_lock.tutor_booking_lock("tutor-e", wait_s=0.05) as held:
            assert held


class TestRedisLock:
    def test_redis_lock_acquired_and_released(self, monkeypatch):
        client = MagicMock()
        client.set.return_value = True
        client.delete.return_value = 1
        monkeypatch.setattr(booking_lock, "_get_sync_redis", lambda: client)

        with booking_lock.tutor_booking_lock("tutor-r1", ttl_s=10, wait_s=0.05) as held:
            assert held

        _, kwargs = client.set.call_args
        assert kwargs == {"nx": True, "ex": 10}
        assert client.set.call_args[0][0].endswith("lock:tutor:tutor-r1:booking")
        client.delete.assert_called_once()

    def test_redis_lock_held_elsewhere_yields_false(self, monkeypatch):
        client = MagicMock()
        client.set.return_value = False
        monkeypatch.setattr(booking_lock, "_get_sync_redis", lambda: client)

        with booking_lock.tutor_booking_lock("tutor-r2", wait_s=0) as held:
            assert held is False
        client.delete.assert_not_called()

    def test_redis_errors_fail_open(self, monkeypatch):
        client = MagicMock()
        client.set.side_effect = ConnectionError("redis down")
        monkeypatch.setattr(booking_lock, "_get_sync_redis", lambda: client)

        with booking_lock.tutor_booking_lock("tutor-r3", wait_s=0.05) as held:
            assert held is True
        client.delete.assert_not_called()
