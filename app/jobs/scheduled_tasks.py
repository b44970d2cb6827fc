"""Periodic notification dispatch.

A daemon thread drives a private ``schedule.Scheduler`` that runs one
dispatch cycle every ``interval_seconds`` after an initial delay.
"""

import threading
from typing import Callable, Optional

import schedule
import structlog

from modules.notifications.dispatcher import NotificationDispatcher

logger = structlog.get_logger()


def safe_run(job: Callable) -> Callable:
    """Wrap a job so an exception is logged instead of killing the thread."""

    def wrapper(*args, **kwargs):
        try:
            return job(*args, **kwargs)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "scheduled_job_failed",
                job=getattr(job, "__name__", repr(job)),
                error=str(e),
                exc_info=True,
            )
            return None

    return wrapper


class NotificationScheduler:
    """Runs ``dispatcher.process_due`` on a fixed interval.

    Missed runs are not replayed: if a cycle outlasts the interval, the
    next one starts at the following poll.

    Args:
        dispatcher: Dispatcher whose ``process_due`` is invoked.
        interval_seconds: Seconds between cycles.
        initial_delay_seconds: Seconds to wait before the first cycle.
        poll_interval: Seconds between checks for pending jobs.
    """

    thread_name = "notification-dispatch"

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        interval_seconds: int = 15,
        initial_delay_seconds: int = 10,
        poll_interval: float = 1,
    ):
        self.dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.poll_interval = poll_interval
        self.scheduler = schedule.Scheduler()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def register_jobs(self) -> None:
        self.scheduler.clear()
        self.scheduler.every(self.interval_seconds).seconds.do(
            safe_run(self.dispatcher.process_due)
        ).tag("notification-dispatch")

    def _run(self) -> None:
        if self._stop_event.wait(self.initial_delay_seconds):
            return
        # First cycle right after the delay, then on the interval
        self.scheduler.run_all()
        while not self._stop_event.is_set():
            self.scheduler.run_pending()
            self._stop_event.wait(self.poll_interval)

    def start(self) -> None:
        if self.is_running:
            logger.warning("notification_scheduler_already_running")
            return
        self._stop_event.clear()
        self.register_jobs()
        self._thread = threading.Thread(
            target=self._run, name=self.thread_name, daemon=True
        )
        self._thread.start()
        logger.info(
            "notification_scheduler_started",
            interval_seconds=self.interval_seconds,
            initial_delay_seconds=self.initial_delay_seconds,
        )

    def stop(self, timeout: Optional[float] = 30) -> None:
        """Signal the thread to stop and wait for the current cycle to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.scheduler.clear()
        logger.info("notification_scheduler_stopped")
