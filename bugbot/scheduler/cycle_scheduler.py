"""
Single-flight sync cycle scheduler.

APScheduler drives two interval jobs, a short heartbeat and a coarse forced
refresh. Both go through ``CycleScheduler.trigger``, which owns the only
check-and-set on the running flag, so the two timers can never produce
overlapping cycles.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bugbot.enums import SchedulerState, TriggerOutcome
from bugbot.logging import LogContext, get_logger

logger = get_logger("scheduler")

HEARTBEAT_JOB_ID = "sync_heartbeat"
REFRESH_JOB_ID = "sync_refresh"


class CycleScheduler:
    """
    Runs sync cycles on a cadence, at most one at a time.

    Features:
    - Heartbeat and forced-refresh triggers sharing one arbiter
    - Triggers arriving while a cycle runs are dropped, never queued
    - Statistics tracking
    """

    def __init__(
        self,
        cycle: Callable[[], Any],
        heartbeat_seconds: int = 50,
        refresh_hours: int = 6,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self._cycle = cycle
        self.heartbeat_seconds = heartbeat_seconds
        self.refresh_hours = refresh_hours
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")

        self._running_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._state = SchedulerState.IDLE
        self._started = False
        self.stats: Dict[str, Any] = {
            "runs": 0,
            "skipped": 0,
            "failures": 0,
            "last_outcome": None,
            "last_source": None,
            "last_started": None,
            "last_finished": None,
            "last_result": None,
        }

    @property
    def state(self) -> SchedulerState:
        return self._state

    def trigger(self, source: str = "manual") -> TriggerOutcome:
        """
        Start a cycle unless one is already running.

        Returns:
            COMPLETED or FAILED when this call ran the cycle, SKIPPED when
            another cycle was in flight
        """
        if not self._running_lock.acquire(blocking=False):
            with self._stats_lock:
                self.stats["skipped"] += 1
            logger.debug("scheduling_overlap", source=source)
            return TriggerOutcome.SKIPPED

        self._state = SchedulerState.RUNNING
        started = datetime.now(timezone.utc)
        cycle_id = uuid.uuid4().hex[:8]
        outcome = TriggerOutcome.COMPLETED
        result = None

        try:
            with LogContext(cycle_id=cycle_id, source=source):
                logger.info("sync_cycle_started")
                try:
                    result = self._cycle()
                except Exception as e:
                    outcome = TriggerOutcome.FAILED
                    logger.error("sync_cycle_failed", error=str(e), error_type=type(e).__name__)
        finally:
            self._state = SchedulerState.IDLE
            self._running_lock.release()

        with self._stats_lock:
            self.stats["runs"] += 1
            if outcome == TriggerOutcome.FAILED:
                self.stats["failures"] += 1
            self.stats["last_outcome"] = outcome.value
            self.stats["last_source"] = source
            self.stats["last_started"] = started.isoformat()
            self.stats["last_finished"] = datetime.now(timezone.utc).isoformat()
            self.stats["last_result"] = result.to_dict() if hasattr(result, "to_dict") else result

        return outcome

    def add_jobs(self, run_immediately: bool = True) -> None:
        """Register the heartbeat and forced-refresh jobs."""
        heartbeat_kwargs = {}
        if run_immediately:
            heartbeat_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            self.trigger,
            trigger=IntervalTrigger(seconds=self.heartbeat_seconds),
            id=HEARTBEAT_JOB_ID,
            name="Sync heartbeat",
            kwargs={"source": "heartbeat"},
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **heartbeat_kwargs,
        )
        self.scheduler.add_job(
            self.trigger,
            trigger=IntervalTrigger(hours=self.refresh_hours),
            id=REFRESH_JOB_ID,
            name="Forced refresh",
            kwargs={"source": "refresh"},
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(
            "sync_jobs_added",
            heartbeat_seconds=self.heartbeat_seconds,
            refresh_hours=self.refresh_hours,
        )

    def start(self, run_immediately: bool = True) -> None:
        """Start the scheduler."""
        if self._started:
            return

        self.add_jobs(run_immediately=run_immediately)
        self.scheduler.start()
        self._started = True
        logger.info("scheduler_started", jobs=len(self.scheduler.get_jobs()))

    def stop(self, wait: bool = True) -> None:
        """Stop the scheduler gracefully."""
        if not self._started:
            return

        self.scheduler.shutdown(wait=wait)
        self._started = False
        logger.info("scheduler_stopped")

    def get_stats(self) -> Dict:
        """Get scheduler statistics."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
            })

        with self._stats_lock:
            stats = dict(self.stats)

        return {
            "running": self._started,
            "state": self._state.value,
            "cycles": stats,
            "jobs": jobs,
        }
