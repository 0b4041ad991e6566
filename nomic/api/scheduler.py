"""
Weekly job scheduling.

WeeklyRule says when a job fires; JobScheduler keeps exactly one pending
threading.Timer for it. Rescheduling cancels the pending timer first, and a
lock serialises firings, so two hunger cycles never run at once.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from nomic import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeeklyRule:
    """Fire once a week on `weekday` (Monday == 0) at hour:minute local time."""
    weekday: int
    hour: int
    minute: int = 0
    timezone: str = "UTC"

    def __post_init__(self):
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"weekday must be 0-6, got {self.weekday}")
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise ValueError(f"Invalid time {self.hour}:{self.minute}")

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def next_fire(self, after: datetime) -> datetime:
        """First fire time strictly after `after` (an aware datetime), in the rule's timezone."""
        local = after.astimezone(self.tz)
        days_ahead = (self.weekday - local.weekday()) % 7
        candidate = (local + timedelta(days=days_ahead)).replace(
            hour=self.hour, minute=self.minute, second=0, microsecond=0,
        )
        if candidate <= local:
            candidate += timedelta(days=7)
        return candidate


def hunger_rule() -> WeeklyRule:
    return WeeklyRule(
        weekday=config.HUNGER_WEEKDAY,
        hour=config.HUNGER_HOUR,
        minute=config.HUNGER_MINUTE,
        timezone=config.TIMEZONE,
    )


def format_run_time(when: datetime | None) -> str:
    """M/D/YY HH:MM TZ, or NONE."""
    if when is None:
        return "NONE"
    return f"{when.month}/{when.day}/{when:%y %H:%M %Z}"


class JobScheduler:
    """Runs `job` on a weekly rule in a background timer thread."""

    def __init__(
        self,
        name: str,
        job: Callable[[], object],
        rule: WeeklyRule,
        clock: Callable[[], datetime] | None = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.name = name
        self.job = job
        self.rule = rule
        self.clock = clock or (lambda: datetime.now(rule.tz))
        self.timer_factory = timer_factory
        self._timer: threading.Timer | None = None
        self._next_run: datetime | None = None
        self._state_lock = threading.Lock()
        self._run_lock = threading.Lock()

    def schedule(self, after: datetime | None = None) -> datetime:
        """
        (Re)install the timer for the next fire time, cancelling any pending one.
        The fire time is strictly after both now and `after`.
        """
        with self._state_lock:
            if self._timer is not None:
                self._timer.cancel()
            now = self.clock()
            self._next_run = self.rule.next_fire(max(now, after) if after else now)
            delay = max(0.0, (self._next_run - now).total_seconds())
            self._timer = self.timer_factory(delay, self.run)
            self._timer.daemon = True
            self._timer.start()
        logger.info("Creating %s Job. Next Run: %s", self.name, self.describe_next_run())
        return self._next_run

    def cancel(self) -> None:
        with self._state_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._next_run = None

    def run_now(self, job: Callable[[], object] | None = None) -> object:
        """
        Run the job (or a stand-in for it) immediately.

        Waits for any firing in progress; errors propagate to the caller.
        """
        with self._run_lock:
            return (job or self.job)()

    def run(self) -> None:
        """Timer target: fire the job, then schedule the next firing."""
        with self._state_lock:
            # A timer can fire slightly early; never pick this slot again
            fired_for = self._next_run
            after = self.clock() + timedelta(seconds=1)
            if fired_for is not None and fired_for > after:
                after = fired_for
            # Reported as the next run while this one is in progress
            self._next_run = self.rule.next_fire(after)
        try:
            self.run_now()
        except Exception:
            logger.exception("%s job failed", self.name)
        if self._timer is not None:
            self.schedule(after=after)

    def next_run(self) -> datetime | None:
        return self._next_run

    def describe_next_run(self) -> str:
        return format_run_time(self._next_run)
