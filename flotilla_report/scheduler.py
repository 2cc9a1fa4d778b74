"""Hourly trigger for the reporting workflow.

Cycles run back to back on the main thread: the next trigger is computed
only after the previous cycle returns, so two cycles never overlap. The
consecutive-failure count lives in :class:`CycleState`, which each cycle
takes and returns.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict

from flotilla_report.common.config import Settings
from flotilla_report.reporting.timestamps import as_utc, get_zone, utcnow
from flotilla_report.schemas.models import WorkflowResult
from flotilla_report.workflow import run_workflow

log = logging.getLogger(__name__)

Workflow = Callable[[], WorkflowResult]


class CycleState(BaseModel):
    model_config = ConfigDict(frozen=True)

    consecutive_failures: int = 0
    last_error: str | None = None


def run_scheduled_cycle(
    state: CycleState, workflow: Workflow, alert_threshold: int = 3
) -> CycleState:
    """Run one cycle and return the updated state; never raises on failure."""
    log.info("scheduled task triggered")
    try:
        result = workflow()
    except Exception as exc:  # noqa: BLE001
        failures = state.consecutive_failures + 1
        log.error("scheduled task failed (%d consecutive failures): %s", failures, exc)
        if failures >= alert_threshold:
            log.error(
                "ALERT: %d consecutive failures, manual intervention may be required",
                failures,
            )
        return CycleState(consecutive_failures=failures, last_error=str(exc))

    log.info("scheduled task completed: %d vessels processed, email sent", result.vessels)
    return CycleState()


def next_run_after(moment: datetime, tz: str) -> datetime:
    """Return the next top of the hour strictly after *moment*, as UTC."""
    local = as_utc(moment).astimezone(get_zone(tz))
    top = local.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    return as_utc(top)


class Scheduler:
    def __init__(
        self,
        settings: Settings,
        workflow: Workflow | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = settings
        self.workflow = workflow or (lambda: run_workflow(settings))
        self.clock = clock
        self.state = CycleState()
        self.stop_event = threading.Event()

    def install_signal_handlers(self) -> None:
        def _stop(signum, _frame):
            log.info("received %s, stopping scheduler", signal.Signals(signum).name)
            self.stop_event.set()

        signal.signal(signal.SIGINT, _stop)
        signal.signal(signal.SIGTERM, _stop)

    def tick(self) -> CycleState:
        self.state = run_scheduled_cycle(
            self.state, self.workflow, self.settings.schedule.alert_threshold
        )
        return self.state

    def serve(self, max_cycles: int | None = None) -> CycleState:
        """Run cycles on every top of the hour until stopped."""
        log.info("starting scheduler: every hour on the hour (%s)", self.settings.timezone)
        cycles = 0
        while not self.stop_event.is_set():
            now = self.clock()
            due = next_run_after(now, self.settings.timezone)
            log.info("waiting for next scheduled run at %s", due.isoformat())
            if self.stop_event.wait((due - now).total_seconds()):
                break
            self.tick()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
        log.info("scheduler stopped")
        return self.state
