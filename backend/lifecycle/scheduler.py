"""
Periodic purge of soft-deleted entities whose retention window has elapsed.

Only one sweep runs at a time: a trigger that finds the single-flight lock
taken is skipped rather than queued.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from django.conf import settings
from redis.exceptions import LockError

from core.clock import Clock, system_clock
from core.redis import get_redis_client

from .errors import ConflictError, NotFound, SchedulerPartialFailure
from .machine import EntityStatusMachine
from .soft_delete import SoftDeleteLifecycle
from .store import EntityStore
from .transitions import SYSTEM_ACTOR, Action

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"


class LocalSingleFlight:
    """In-process lock; enough when beat and worker share one process."""

    def __init__(self):
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def held(self) -> bool:
        return self._lock.locked()


class RedisSingleFlight:
    """Cross-process lock shared by every Celery worker through Redis."""

    def __init__(self, key: str, ttl_seconds: int, client=None):
        self.key = key
        self.ttl_seconds = ttl_seconds
        self._client = client
        self._lock = None

    def acquire(self) -> bool:
        client = self._client or get_redis_client()
        lock = client.lock(self.key, timeout=self.ttl_seconds)
        if not lock.acquire(blocking=False):
            return False
        self._lock = lock
        return True

    def release(self) -> None:
        lock, self._lock = self._lock, None
        if lock is None:
            return
        try:
            lock.release()
        except LockError:
            # TTL expired mid-sweep; another worker may own the key now.
            logger.warning("purge: single-flight lock expired before release", exc_info=True)

    @property
    def held(self) -> bool:
        return self._lock is not None


@dataclass
class SweepResult:
    purged_count: int = 0
    skipped_count: int = 0
    failures: list[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "purged_count": self.purged_count,
            "skipped_count": self.skipped_count,
            "failures": self.failures,
        }


class PurgeScheduler:
    def __init__(
        self,
        stores: Sequence[EntityStore],
        *,
        single_flight,
        lifecycle: SoftDeleteLifecycle | None = None,
        clock: Clock = system_clock,
    ):
        self.lifecycle = lifecycle or SoftDeleteLifecycle()
        self.clock = clock
        self.single_flight = single_flight
        self.machines = [
            EntityStatusMachine(store, lifecycle=self.lifecycle, clock=clock) for store in stores
        ]
        self.state = IDLE

    def trigger(self) -> SweepResult | None:
        """Run one sweep unless another one is in flight."""
        if not self.single_flight.acquire():
            logger.info("purge: sweep already running, skipping trigger")
            return None
        self.state = RUNNING
        try:
            return self.run_purge_sweep(self.clock.now())
        finally:
            self.state = IDLE
            self.single_flight.release()

    def run_purge_sweep(self, now: datetime) -> SweepResult:
        """
        Hard-delete every entity eligible at ``now``.

        Safe to call manually; a repeated call without new deletions purges
        nothing. Per-entity failures are logged and the sweep continues.
        """
        result = SweepResult()
        for machine in self.machines:
            self._sweep_store(machine, now, result)

        if result.failures:
            logger.error(
                "purge: %s",
                SchedulerPartialFailure(result.failures),
                extra={"failures": result.failures},
            )
        logger.info(
            "purge: removed %s entities (%s skipped, %s failed)",
            result.purged_count,
            result.skipped_count,
            len(result.failures),
        )
        return result

    def _sweep_store(self, machine: EntityStatusMachine, now: datetime, result: SweepResult):
        store = machine.store
        for entity in list(store.find_purge_eligible(now)):
            if not self.lifecycle.is_purge_eligible(entity, now):
                result.skipped_count += 1
                continue
            try:
                machine.apply(
                    entity.pk,
                    SYSTEM_ACTOR,
                    Action.PURGE,
                    expected_version=entity.version,
                )
            except (ConflictError, NotFound):
                # Restored, changed or already removed since it was listed.
                result.skipped_count += 1
                continue
            except Exception as exc:
                logger.exception("purge: failed to remove %s %s", store.kind, entity.pk)
                result.failures.append(
                    {"kind": store.kind, "id": entity.pk, "error": str(exc) or type(exc).__name__}
                )
                continue
            result.purged_count += 1


_local_single_flight = LocalSingleFlight()


def build_single_flight():
    backend = getattr(settings, "PURGE_SINGLE_FLIGHT_BACKEND", "redis")
    if backend == "local":
        return _local_single_flight
    return RedisSingleFlight(
        getattr(settings, "PURGE_LOCK_KEY", "lifecycle:purge-sweep:lock"),
        getattr(settings, "PURGE_LOCK_TTL_SECONDS", 3600),
    )


def build_purge_scheduler(clock: Clock = system_clock) -> PurgeScheduler:
    from listings.models import Listing
    from posts.models import Post

    return PurgeScheduler(
        [EntityStore(Listing), EntityStore(Post)],
        single_flight=build_single_flight(),
        clock=clock,
    )
