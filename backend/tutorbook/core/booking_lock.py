"""Per-tutor mutual exclusion for the booking re-check-and-insert sequence."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
import time
from typing import Dict, Iterator, Optional

from redis import Redis

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

_LOCAL_LOCKS: Dict[str, threading.Lock] = {}
_LOCAL_LOCKS_GUARD = threading.Lock()

_POLL_INTERVAL_S = 0.05


def _lock_key(tutor_id: str) -> str:
    return f"tutor:{tutor_id}:booking"


def _namespaced_key(key: str) -> str:
    return f"{settings.lock_namespace}:lock:{key}"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if not settings.redis_url:
        return None
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is not None:
            return _SYNC_REDIS
        try:
            client = Redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            client.ping()
        except Exception as exc:
            logger.warning("booking_lock_sync_redis_unavailable: %s", exc)
            return None
        _SYNC_REDIS = client
        return _SYNC_REDIS


def _local_lock(tutor_id: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        lock = _LOCAL_LOCKS.get(tutor_id)
        if lock is None:
            lock = threading.Lock()
            _LOCAL_LOCKS[tutor_id] = lock
        return lock


def acquire_tutor_lock_sync(tutor_id: str, ttl_s: int, wait_s: float) -> Optional[bool]:
    """
    Take the cross-worker Redis lock for a tutor.

    Returns True when held, False when another worker kept it for the whole
    wait, and None when Redis is not configured or failing. In the last case
    the caller relies on the process lock and the database constraint.
    """
    client = _get_sync_redis()
    if client is None:
        if settings.redis_url:
            prometheus_metrics.record_booking_lock("acquire", "redis_unavailable")
        return None

    key = _namespaced_key(_lock_key(tutor_id))
    deadline = time.monotonic() + wait_s
    try:
        while True:
            if client.set(key, str(time.time()), nx=True, ex=ttl_s):
                prometheus_metrics.record_booking_lock("acquire", "success")
                return True
            if time.monotonic() >= deadline:
                prometheus_metrics.record_booking_lock("acquire", "blocked")
                logger.warning("booking_lock_sync_blocked", extra={"tutor_id": tutor_id})
                return False
            time.sleep(_POLL_INTERVAL_S)
    except Exception as exc:
        prometheus_metrics.record_booking_lock("acquire", "error")
        logger.warning(
            "booking_lock_sync_failed",
            extra={
                "tutor_id": tutor_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return None


def release_tutor_lock_sync(tutor_id: str) -> None:
    client = _get_sync_redis()
    if client is None:
        return
    try:
        deleted = client.delete(_namespaced_key(_lock_key(tutor_id)))
        if deleted:
            prometheus_metrics.record_booking_lock("release", "success")
        else:
            prometheus_metrics.record_booking_lock("release", "not_found")
    except Exception as exc:
        prometheus_metrics.record_booking_lock("release", "error")
        logger.warning(
            "booking_lock_sync_release_failed",
            extra={
                "tutor_id": tutor_id,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )


@contextmanager
def tutor_booking_lock(
    tutor_id: str,
    ttl_s: Optional[int] = None,
    wait_s: Optional[float] = None,
) -> Iterator[bool]:
    """
    Hold the booking lock for one tutor.

    Yields True while the lock is held and False if it could not be taken
    within ``wait_s``; callers treat False as a transient failure.
    """
    ttl = ttl_s if ttl_s is not None else settings.booking_lock_ttl_seconds
    wait = wait_s if wait_s is not None else settings.booking_lock_wait_seconds

    local = _local_lock(tutor_id)
    if not local.acquire(timeout=wait):
        prometheus_metrics.record_booking_lock("acquire", "blocked")
        logger.warning("booking_lock_local_blocked", extra={"tutor_id": tutor_id})
        yield False
        return

    try:
        distributed = acquire_tutor_lock_sync(tutor_id, ttl, wait)
        if distributed is False:
            yield False
            return
        try:
            yield True
        finally:
            if distributed:
                release_tutor_lock_sync(tutor_id)
    finally:
        local.release()
