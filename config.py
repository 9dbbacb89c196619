"""Configuration settings for FocusHub."""

import os
import sys
from pathlib import Path
from dotenv import load_dotenv


APP_NAME = "FocusHub"


def is_bundled() -> bool:
    """
    Check if the application is running from a PyInstaller bundle.

    Returns:
        True if running from a bundled executable, False otherwise.
    """
    return getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS')


def get_user_data_dir() -> Path:
    """
    Get the directory for user-writable data (widgets, settings, etc.).

    For development: BASE_DIR/data
    For bundled apps: A dedicated folder in the user's home directory
                      so data persists across updates.

    Returns:
        Path to the user data directory.
    """
    if not is_bundled():
        return Path(__file__).parent / "data"

    if sys.platform == 'darwin':
        # macOS: ~/Library/Application Support/FocusHub
        return Path.home() / "Library" / "Application Support" / APP_NAME
    if sys.platform == 'win32':
        # Windows: %APPDATA%/FocusHub
        appdata = os.environ.get('APPDATA')
        if appdata:
            return Path(appdata) / APP_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME
    # Linux: ~/.local/share/FocusHub
    return Path.home() / ".local" / "share" / APP_NAME


def _get_int_env(name: str, default: int) -> int:
    """
    Read a positive integer from the environment.

    Args:
        name: Environment variable name.
        default: Value used when unset or invalid.

    Returns:
        Parsed value, or default.
    """
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        import logging
        logging.getLogger(__name__).warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value <= 0:
        import logging
        logging.getLogger(__name__).warning(f"{name} must be positive, using {default}")
        return default
    return value


# Load environment variables from .env file (only in development)
if not is_bundled():
    # Explicitly load from the project root (where config.py lives)
    _env_path = Path(__file__).parent / ".env"
    load_dotenv(_env_path)

# User data directory (for writable data like widgets and settings)
# Created lazily by the stores on first write
USER_DATA_DIR = get_user_data_dir()

# Widget registry persistence (a single JSON array of {id, type, size})
WIDGETS_FILE = USER_DATA_DIR / "active_widgets.json"

# Widget sizes and their rendered heights in the overview grid (pixels)
WIDGET_SIZE_SMALL = "small"
WIDGET_SIZE_MEDIUM = "medium"
WIDGET_SIZE_LARGE = "large"
WIDGET_HEIGHTS = {
    WIDGET_SIZE_SMALL: 192,
    WIDGET_SIZE_MEDIUM: 256,
    WIDGET_SIZE_LARGE: 320,
}

# Break reminders
BREAK_SETTINGS_FILE = USER_DATA_DIR / "break_settings.json"
BREAK_REMINDER_ENABLED = os.getenv("FOCUSHUB_BREAK_REMINDERS", "true").lower() in ("true", "1", "yes")
BREAK_INTERVAL_MINUTES = _get_int_env("FOCUSHUB_BREAK_INTERVAL_MINUTES", 30)
BREAK_SNOOZE_MINUTES = _get_int_env("FOCUSHUB_BREAK_SNOOZE_MINUTES", 5)  # Dismiss defers by this much
BREAK_CHECK_INTERVAL_SECONDS = 60  # Reminder evaluated once per minute

# Navigation sections: tab -> selectable sub-tabs (first one is the default)
NAVIGATION_TABS = {
    "overview": [],
    "monitoring": ["activity", "applications", "websites"],
    "goals": ["daily", "weekly"],
    "widgets": [],
    "kids": ["kids_activities", "kids_rewards"],
}
DEFAULT_TAB = "overview"

# Kids mode pins navigation to this section
RESTRICTED_TAB = "kids"

# Operating modes
MODE_STANDARD = "standard"
MODE_KIDS = "kids"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # Can override in .env: DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
