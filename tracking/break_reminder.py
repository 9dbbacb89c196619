"""
Break reminder scheduling.

Once per minute, while monitoring is active and reminders are enabled, the
scheduler checks whether a full interval has passed since the last break.
When it has, the "show reminder" flag goes up and stays up (no further
evaluation) until the user either takes a break or dismisses it.

Dismissing is a snooze, not a cancel: last_break_at is moved so the next
check fires exactly snooze_minutes later, whatever the configured interval.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

import config
from tracking.break_settings import BreakSettingsStore

logger = logging.getLogger(__name__)


class ReminderState(Enum):
    """Scheduler states."""
    IDLE = "idle"
    DUE = "due"


class BreakReminderScheduler:
    """
    Derives the break "due" signal from BreakReminderConfig.

    Callbacks:
        on_break_due()  fired once each time the reminder becomes due
    """

    def __init__(
        self,
        settings: BreakSettingsStore,
        snooze_minutes: int = config.BREAK_SNOOZE_MINUTES,
        check_interval_seconds: float = config.BREAK_CHECK_INTERVAL_SECONDS,
    ):
        """
        Initialize the scheduler.

        Args:
            settings: Settings collaborator owning last_break_at.
            snooze_minutes: How long a dismissal defers the reminder.
            check_interval_seconds: Period of the run() loop.
        """
        if snooze_minutes <= 0:
            raise ValueError("snooze_minutes must be positive")
        self.settings = settings
        self.snooze_minutes = snooze_minutes
        self.check_interval_seconds = check_interval_seconds
        self.state = ReminderState.IDLE
        self.monitoring_active = False
        self.on_break_due: Optional[Callable[[], None]] = None

    @property
    def show_reminder(self) -> bool:
        """Whether the break interstitial should be shown right now."""
        return self.state is ReminderState.DUE

    @property
    def is_evaluating(self) -> bool:
        return self.monitoring_active and self.settings.get().enabled

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def tick(self, now: Optional[datetime] = None) -> bool:
        """
        Periodic check.

        Args:
            now: Evaluation time (defaults to now).

        Returns:
            The show_reminder flag after the check.
        """
        if not self.is_evaluating:
            # Suspended; drop a stale flag but keep last_break_at as is
            if self.state is ReminderState.DUE:
                logger.debug("Reminders suspended, hiding pending break reminder")
                self.state = ReminderState.IDLE
            return False

        if self.state is ReminderState.DUE:
            return True

        now = now or datetime.now()
        if now >= self.next_due_at():
            self.state = ReminderState.DUE
            logger.info("Break is due")
            self._notify_break_due()
        return self.show_reminder

    def next_due_at(self) -> datetime:
        """When the elapsed-time condition is first satisfied."""
        settings = self.settings.get()
        return settings.last_break_at + timedelta(minutes=settings.interval_minutes)

    def seconds_until_due(self, now: Optional[datetime] = None) -> float:
        """Seconds left until due (0 if already reached)."""
        now = now or datetime.now()
        return max(0.0, (self.next_due_at() - now).total_seconds())

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def take_break(self, now: Optional[datetime] = None) -> None:
        """Record a break; the full interval restarts from now."""
        now = now or datetime.now()
        self._set_last_break_at(now)
        self.state = ReminderState.IDLE
        logger.info("Break taken")

    def dismiss(self, now: Optional[datetime] = None) -> None:
        """Snooze: the reminder comes back snooze_minutes from now."""
        now = now or datetime.now()
        interval = timedelta(minutes=self.settings.get().interval_minutes)
        self._set_last_break_at(now - interval + timedelta(minutes=self.snooze_minutes))
        self.state = ReminderState.IDLE
        logger.info(f"Break reminder snoozed for {self.snooze_minutes} min")

    def _set_last_break_at(self, when: datetime) -> None:
        if not self.settings.update(last_break_at=when):
            logger.warning("Break time not saved; it will reset on restart")

    # ------------------------------------------------------------------
    # Suspension
    # ------------------------------------------------------------------

    def set_monitoring_active(self, active: bool) -> None:
        """Start/stop evaluation with the monitoring subsystem."""
        if active == self.monitoring_active:
            return
        self.monitoring_active = active
        logger.debug(f"Break reminders {'resumed' if active else 'suspended'} (monitoring)")
        if not active:
            self.state = ReminderState.IDLE

    def set_enabled(self, enabled: bool) -> bool:
        """
        Turn reminders on/off; last_break_at is untouched.

        Returns:
            True if the setting was saved.
        """
        saved = self.settings.update(enabled=enabled)
        if not enabled:
            self.state = ReminderState.IDLE
        logger.info(f"Break reminders {'enabled' if enabled else 'disabled'}")
        return saved

    # ------------------------------------------------------------------
    # Periodic loop
    # ------------------------------------------------------------------

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Tick once per check interval until stop_event is set.

        Args:
            stop_event: Set to end the loop.
        """
        logger.debug("Break reminder loop started")
        while not stop_event.is_set():
            self.tick()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.check_interval_seconds)
            except asyncio.TimeoutError:
                pass
        logger.debug("Break reminder loop stopped")

    def _notify_break_due(self) -> None:
        if self.on_break_due:
            try:
                self.on_break_due()
            except Exception as e:
                logger.debug(f"on_break_due callback error: {e}")
