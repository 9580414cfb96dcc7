"""
Tests for the single-flight cycle scheduler.
"""

import threading
from unittest.mock import MagicMock

from bugbot.enums import SchedulerState, TriggerOutcome
from bugbot.scheduler import HEARTBEAT_JOB_ID, REFRESH_JOB_ID, CycleScheduler, build_scheduler


class TestCycleScheduler:
    def test_trigger_runs_cycle_and_records_result(self):
        summary = MagicMock()
        summary.to_dict.return_value = {"reason": "completed"}
        scheduler = CycleScheduler(lambda: summary, scheduler=MagicMock())

        outcome = scheduler.trigger(source="heartbeat")

        assert outcome == TriggerOutcome.COMPLETED
        assert scheduler.stats["runs"] == 1
        assert scheduler.stats["last_source"] == "heartbeat"
        assert scheduler.stats["last_result"] == {"reason": "completed"}
        assert scheduler.state == SchedulerState.IDLE

    def test_overlapping_trigger_is_skipped(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_cycle():
            calls.append(1)
            started.set()
            release.wait(timeout=5)

        scheduler = CycleScheduler(slow_cycle, scheduler=MagicMock())
        worker = threading.Thread(target=scheduler.trigger, kwargs={"source": "heartbeat"})
        worker.start()
        assert started.wait(timeout=5)

        assert scheduler.state == SchedulerState.RUNNING
        assert scheduler.trigger(source="refresh") == TriggerOutcome.SKIPPED

        release.set()
        worker.join(timeout=5)

        assert len(calls) == 1
        assert scheduler.stats["skipped"] == 1
        assert scheduler.stats["runs"] == 1

    def test_failed_cycle_releases_running_flag(self):
        cycle = MagicMock(side_effect=[RuntimeError("db down"), None])
        scheduler = CycleScheduler(cycle, scheduler=MagicMock())

        assert scheduler.trigger() == TriggerOutcome.FAILED
        assert scheduler.state == SchedulerState.IDLE
        assert scheduler.trigger() == TriggerOutcome.COMPLETED
        assert scheduler.stats["failures"] == 1
        assert scheduler.stats["runs"] == 2

    def test_add_jobs_registers_heartbeat_and_refresh(self):
        backend = MagicMock()
        scheduler = CycleScheduler(lambda: None, heartbeat_seconds=50, refresh_hours=6, scheduler=backend)

        scheduler.add_jobs(run_immediately=False)

        jobs = {call.kwargs["id"]: call for call in backend.add_job.call_args_list}
        assert set(jobs) == {HEARTBEAT_JOB_ID, REFRESH_JOB_ID}
        for call in jobs.values():
            assert call.args[0] == scheduler.trigger
            assert call.kwargs["max_instances"] == 1
            assert call.kwargs["coalesce"] is True
        assert jobs[HEARTBEAT_JOB_ID].kwargs["kwargs"] == {"source": "heartbeat"}
        assert jobs[REFRESH_JOB_ID].kwargs["kwargs"] == {"source": "refresh"}
        assert "next_run_time" not in jobs[HEARTBEAT_JOB_ID].kwargs

    def test_start_and_stop_are_idempotent(self):
        backend = MagicMock()
        backend.get_jobs.return_value = []
        scheduler = CycleScheduler(lambda: None, scheduler=backend)

        scheduler.start()
        scheduler.start()
        scheduler.stop()
        scheduler.stop()

        backend.start.assert_called_once()
        backend.shutdown.assert_called_once_with(wait=True)
        assert "next_run_time" in backend.add_job.call_args_list[0].kwargs


def test_build_scheduler_uses_settings(settings):
    scheduler = build_scheduler(settings=settings)

    assert scheduler.heartbeat_seconds == settings.scheduler_heartbeat_seconds
    assert scheduler.refresh_hours == settings.scheduler_refresh_hours
    assert scheduler.get_stats()["state"] == "idle"
