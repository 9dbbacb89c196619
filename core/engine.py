"""
DashboardSession: headless session state for the FocusHub dashboard.

Composes the widget registry, break reminder scheduler, mode state machine
and navigation state. Zero UI dependencies: a presentation layer polls
get_status(), issues mutation requests, and receives updates via callbacks.

Everything runs on one asyncio event loop. The only awaits are the
restricted-mode side effects; the reminder loop is a task on the same loop.

Callbacks:
    on_mode_change(mode: str)
    on_break_due()
    on_error(error_type: str, message: str)
    on_warning(warning_type: str, message: str)
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

import config
from core.errors import ModeTransitionError, PersistenceError, UnresolvableWidget
from core.mode import ModeState, ModeStateMachine, NullRestrictionsController, RestrictionsController
from core.navigation import NavigationState
from tracking.break_reminder import BreakReminderScheduler
from tracking.break_settings import BreakSettingsStore
from widgets.builtin import default_catalog
from widgets.catalog import WidgetCatalog
from widgets.registry import WidgetRegistryManager

logger = logging.getLogger(__name__)


class DashboardSession:
    """
    Session state engine for one dashboard process.

    Handles:
    - Active widget set (load once, write-through on add/remove)
    - Break reminder due signal (one-minute tick)
    - Standard/Kids mode with passcode gating
    - Tab/sub-tab navigation, locked while in Kids mode
    """

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def __init__(
        self,
        catalog: Optional[WidgetCatalog] = None,
        restrictions: Optional[RestrictionsController] = None,
        data_dir: Optional[Path] = None,
    ) -> None:
        """
        Initialise the session with all controllers.

        Args:
            catalog: Widget catalog (default: built-in widgets).
            restrictions: Restricted-mode collaborator (default: logging only).
            data_dir: Directory for widget/settings files (default: config paths).
        """
        widgets_file = data_dir / config.WIDGETS_FILE.name if data_dir else None
        settings_file = data_dir / config.BREAK_SETTINGS_FILE.name if data_dir else None

        self.catalog: WidgetCatalog = catalog or default_catalog()
        self.widgets: WidgetRegistryManager = WidgetRegistryManager(self.catalog, widgets_file)
        self.break_settings: BreakSettingsStore = BreakSettingsStore(settings_file)
        self.breaks: BreakReminderScheduler = BreakReminderScheduler(self.break_settings)
        self.navigation: NavigationState = NavigationState()
        self.mode: ModeStateMachine = ModeStateMachine(
            restrictions or NullRestrictionsController(), self.navigation
        )
        self.started: bool = False

        # Reminder loop
        self._reminder_task: Optional[asyncio.Task] = None
        self._reminder_stop: Optional[asyncio.Event] = None

        # ---- Callbacks (set by the presentation layer) ----
        self.on_mode_change: Optional[Callable[[str], None]] = None
        self.on_break_due: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[str, str], None]] = None
        self.on_warning: Optional[Callable[[str, str], None]] = None

        self.mode.on_mode_change = self._handle_mode_change
        self.breaks.on_break_due = self._handle_break_due

    def start(self) -> None:
        """Restore persisted widgets and break settings (once per process)."""
        if self.started:
            logger.debug("Session already started")
            return
        self.widgets.load()
        self.break_settings.load()
        self.started = True
        logger.info("Dashboard session started")

    # ------------------------------------------------------------------
    # Widgets
    # ------------------------------------------------------------------

    def add_widget(self, widget_type: str, size: Optional[str] = None) -> Dict:
        """
        Add a widget from the catalog.

        Returns:
            {"success": bool, "widget": dict | None, "error": str | None,
             "error_type": str | None}
            error_type values: "unknown_widget", "invalid_size"
        """
        try:
            widget = self.widgets.add(widget_type, size)
        except UnresolvableWidget as e:
            return {"success": False, "widget": None, "error": str(e), "error_type": "unknown_widget"}
        except ValueError as e:
            return {"success": False, "widget": None, "error": str(e), "error_type": "invalid_size"}
        except PersistenceError as e:
            self._notify_warning("persistence", str(e))
            # In-memory set already holds the new widget
            widget = self.widgets.active_widgets[-1]

        return {"success": True, "widget": widget.to_dict(), "error": None, "error_type": None}

    def remove_widget(self, widget_id: str) -> Dict:
        """
        Remove a widget (idempotent).

        Returns:
            {"success": True, "removed": bool}
        """
        present = self.widgets.get(widget_id) is not None
        try:
            self.widgets.remove(widget_id)
        except PersistenceError as e:
            self._notify_warning("persistence", str(e))
        return {"success": True, "removed": present}

    # ------------------------------------------------------------------
    # Mode
    # ------------------------------------------------------------------

    async def request_mode_switch(self) -> Dict:
        """
        Toggle between Standard and Kids mode.

        From Kids mode this only opens the passcode prompt.

        Returns:
            {"success": bool, "mode": str, "passcode_required": bool,
             "error": str | None, "error_type": str | None}
        """
        try:
            await self.mode.request_switch()
        except ModeTransitionError as e:
            return self._mode_failure(e)
        return self._mode_result()

    async def submit_passcode_result(self, accepted: bool) -> Dict:
        """
        Feed the credential prompt outcome back in.

        Args:
            accepted: True if the passcode was verified, False if cancelled.

        Returns:
            Same shape as request_mode_switch().
        """
        if not accepted:
            self.mode.credential_cancelled()
            return self._mode_result()
        try:
            await self.mode.credential_accepted()
        except ModeTransitionError as e:
            return self._mode_failure(e)
        return self._mode_result()

    def _mode_result(self) -> Dict:
        return {
            "success": True,
            "mode": self.mode.state.value,
            "passcode_required": self.mode.is_prompt_shown,
            "error": None,
            "error_type": None,
        }

    def _mode_failure(self, error: ModeTransitionError) -> Dict:
        self._notify_error("mode_transition", str(error))
        return {
            "success": False,
            "mode": self.mode.state.value,
            "passcode_required": self.mode.is_prompt_shown,
            "error": str(error),
            "error_type": "mode_transition",
        }

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select_tab(self, tab: str) -> bool:
        return self.navigation.select_tab(tab)

    def select_sub_tab(self, sub_tab: str) -> bool:
        return self.navigation.select_sub_tab(sub_tab)

    # ------------------------------------------------------------------
    # Break reminders
    # ------------------------------------------------------------------

    def start_monitoring(self) -> None:
        """Monitoring became active; break reminders resume."""
        self.breaks.set_monitoring_active(True)
        logger.info("Monitoring active")

    def stop_monitoring(self) -> None:
        """Monitoring stopped; break reminders suspend."""
        self.breaks.set_monitoring_active(False)
        logger.info("Monitoring stopped")

    def set_reminders_enabled(self, enabled: bool) -> Dict:
        """
        Turn break reminders on or off.

        Returns:
            {"success": True, "error": None, "error_type": None}
        """
        if not self.breaks.set_enabled(enabled):
            self._notify_warning("persistence", "Break settings could not be saved")
        return {"success": True, "error": None, "error_type": None}

    def set_break_interval(self, minutes: int) -> Dict:
        """
        Change the reminder interval.

        Returns:
            {"success": bool, "error": str | None, "error_type": str | None}
        """
        try:
            saved = self.break_settings.update(interval_minutes=minutes)
        except ValueError as e:
            return {"success": False, "error": str(e), "error_type": "invalid_interval"}
        if not saved:
            self._notify_warning("persistence", "Break settings could not be saved")
        return {"success": True, "error": None, "error_type": None}

    def tick(self) -> bool:
        """Run one reminder check now; returns the show-reminder flag."""
        return self.breaks.tick()

    def take_break(self) -> None:
        self.breaks.take_break()

    def dismiss_break(self) -> None:
        self.breaks.dismiss()

    def run_reminder_loop(self) -> asyncio.Task:
        """
        Start the one-minute reminder task on the running event loop.

        Returns:
            The reminder task (the existing one if already running).
        """
        if self._reminder_task and not self._reminder_task.done():
            return self._reminder_task
        self._reminder_stop = asyncio.Event()
        self._reminder_task = asyncio.create_task(self.breaks.run(self._reminder_stop))
        return self._reminder_task

    async def stop_reminder_loop(self) -> None:
        """Stop the reminder task and wait for it to finish."""
        if self._reminder_stop:
            self._reminder_stop.set()
        if self._reminder_task:
            await self._reminder_task
        self._reminder_task = None
        self._reminder_stop = None

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> Dict:
        """
        Snapshot of the whole session (polled by the presentation layer).

        Returns:
            dict with keys: mode, is_kids_mode, passcode_prompt,
            mode_switch_pending, navigation, widgets, widgets_degraded,
            show_break_reminder, break_reminders_enabled,
            break_interval_minutes, seconds_until_break, monitoring_active.
        """
        settings = self.break_settings.get()
        return {
            "mode": self.mode.state.value,
            "is_kids_mode": self.mode.is_kids_mode,
            "passcode_prompt": self.mode.passcode_prompt.value,
            "mode_switch_pending": self.mode.transition_in_flight,
            "navigation": self.navigation.snapshot(),
            "widgets": [w.to_dict() for w in self.widgets.active_widgets],
            "widgets_degraded": self.widgets.persistence_degraded,
            "show_break_reminder": self.breaks.show_reminder,
            "break_reminders_enabled": settings.enabled,
            "break_interval_minutes": settings.interval_minutes,
            "seconds_until_break": int(self.breaks.seconds_until_due()),
            "monitoring_active": self.breaks.monitoring_active,
        }

    # ------------------------------------------------------------------
    # Callback helpers
    # ------------------------------------------------------------------

    def _handle_mode_change(self, mode: ModeState) -> None:
        if self.on_mode_change:
            try:
                self.on_mode_change(mode.value)
            except Exception as e:
                logger.debug(f"on_mode_change callback error: {e}")

    def _handle_break_due(self) -> None:
        if self.on_break_due:
            try:
                self.on_break_due()
            except Exception as e:
                logger.debug(f"on_break_due callback error: {e}")

    def _notify_error(self, error_type: str, message: str) -> None:
        """Notify of an error via callback."""
        logger.warning(f"{error_type}: {message}")
        if self.on_error:
            try:
                self.on_error(error_type, message)
            except Exception as e:
                logger.debug(f"on_error callback error: {e}")

    def _notify_warning(self, warning_type: str, message: str) -> None:
        """Notify of a non-fatal problem via callback."""
        logger.warning(f"{warning_type}: {message}")
        if self.on_warning:
            try:
                self.on_warning(warning_type, message)
            except Exception as e:
                logger.debug(f"on_warning callback error: {e}")
