"""
Break reminder settings for FocusHub.

The settings store is the source of truth for whether reminders are on,
how often they fire, and when the user last took a break. The scheduler
only reads it and asks it to move last_break_at.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import config
from core.storage import MISSING, read_json, write_json_atomic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreakReminderConfig:
    """Break reminder settings snapshot."""
    enabled: bool
    interval_minutes: int
    last_break_at: datetime

    def __post_init__(self):
        if self.interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage."""
        return {
            "enabled": self.enabled,
            "interval_minutes": self.interval_minutes,
            "last_break_at": self.last_break_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BreakReminderConfig':
        """
        Create from a stored dictionary.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed.
        """
        enabled = data["enabled"]
        interval = data["interval_minutes"]
        if not isinstance(enabled, bool) or not isinstance(interval, int) or isinstance(interval, bool):
            raise TypeError("enabled must be bool and interval_minutes int")
        last_break_at = datetime.fromisoformat(data["last_break_at"])
        if last_break_at.tzinfo is not None:
            # Scheduler compares against naive local time
            last_break_at = last_break_at.astimezone().replace(tzinfo=None)
        return cls(
            enabled=enabled,
            interval_minutes=interval,
            last_break_at=last_break_at,
        )


class BreakSettingsStore:
    """
    Persists BreakReminderConfig as JSON.

    Corrupt or missing files fall back to defaults. A failed write is logged
    and reported, but the in-memory settings still change.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        """
        Initialize the settings store.

        Args:
            settings_path: JSON file path (default: config.BREAK_SETTINGS_FILE)
        """
        self.settings_path = settings_path or config.BREAK_SETTINGS_FILE
        self._config: Optional[BreakReminderConfig] = None

    def _defaults(self) -> BreakReminderConfig:
        return BreakReminderConfig(
            enabled=config.BREAK_REMINDER_ENABLED,
            interval_minutes=config.BREAK_INTERVAL_MINUTES,
            last_break_at=datetime.now(),
        )

    def load(self) -> BreakReminderConfig:
        """
        Load settings from disk, or defaults if missing/corrupt.

        Returns:
            The loaded settings.
        """
        data = read_json(self.settings_path)
        if data is MISSING:
            self._config = self._defaults()
            logger.info("Using default break reminder settings")
            return self._config

        try:
            self._config = BreakReminderConfig.from_dict(data)
            logger.debug(f"Loaded break settings: {self._config}")
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Invalid break settings, using defaults: {e}")
            self._config = self._defaults()
        return self._config

    def get(self) -> BreakReminderConfig:
        """Current settings (loads on first access)."""
        if self._config is None:
            return self.load()
        return self._config

    def update(
        self,
        enabled: Optional[bool] = None,
        interval_minutes: Optional[int] = None,
        last_break_at: Optional[datetime] = None,
    ) -> bool:
        """
        Change settings and save them.

        Args:
            enabled: Turn reminders on/off.
            interval_minutes: New reminder interval (must be > 0).
            last_break_at: New last-break timestamp.

        Returns:
            True if saved successfully, False if only the in-memory copy changed.

        Raises:
            ValueError: If interval_minutes is not positive.
        """
        changes: Dict[str, Any] = {}
        if enabled is not None:
            changes["enabled"] = enabled
        if interval_minutes is not None:
            changes["interval_minutes"] = interval_minutes
        if last_break_at is not None:
            changes["last_break_at"] = last_break_at

        # replace() re-runs validation
        self._config = replace(self.get(), **changes)
        return self._save()

    def _save(self) -> bool:
        try:
            write_json_atomic(self.settings_path, self._config.to_dict(), prefix="break_settings_")
            logger.debug(f"Saved break settings: {self._config}")
            return True
        except (IOError, OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save break settings: {e}")
            return False
