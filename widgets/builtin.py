"""Built-in widgets shipped with the standalone FocusHub app."""

import time
from typing import Any, Dict, Optional

from widgets.catalog import WidgetCatalog, WidgetDescriptor, WidgetSize


class BaseWidget:
    """Minimal panel: a title plus a render payload for the presentation layer."""

    widget_type = ""
    title = ""

    def render_data(self) -> Dict[str, Any]:
        """Plain data the UI needs to draw this panel."""
        return {"type": self.widget_type, "title": self.title}


class FocusTimerWidget(BaseWidget):
    """Countdown timer for a single focus block."""

    widget_type = "focus_timer"
    title = "Focus Timer"

    def __init__(self, duration_minutes: int = 25):
        self.duration_seconds = duration_minutes * 60
        self.started_at: Optional[float] = None

    def start(self, now: Optional[float] = None) -> None:
        self.started_at = time.time() if now is None else now

    def reset(self) -> None:
        self.started_at = None

    def remaining_seconds(self, now: Optional[float] = None) -> int:
        if self.started_at is None:
            return self.duration_seconds
        now = time.time() if now is None else now
        return max(0, int(self.duration_seconds - (now - self.started_at)))

    def render_data(self) -> Dict[str, Any]:
        data = super().render_data()
        data["remaining_seconds"] = self.remaining_seconds()
        data["running"] = self.started_at is not None
        return data


class QuickNotesWidget(BaseWidget):
    """Scratch pad that lives for the session."""

    widget_type = "quick_notes"
    title = "Quick Notes"

    def __init__(self):
        self.text = ""

    def render_data(self) -> Dict[str, Any]:
        data = super().render_data()
        data["text"] = self.text
        return data


class StopwatchWidget(BaseWidget):
    """Counts up from when it was started."""

    widget_type = "stopwatch"
    title = "Stopwatch"

    def __init__(self):
        self.started_at: Optional[float] = None

    def start(self, now: Optional[float] = None) -> None:
        self.started_at = time.time() if now is None else now

    def elapsed_seconds(self, now: Optional[float] = None) -> int:
        if self.started_at is None:
            return 0
        now = time.time() if now is None else now
        return int(now - self.started_at)

    def render_data(self) -> Dict[str, Any]:
        data = super().render_data()
        data["elapsed_seconds"] = self.elapsed_seconds()
        return data


def default_catalog() -> WidgetCatalog:
    """Catalog of the built-in widgets."""
    return WidgetCatalog([
        WidgetDescriptor(
            type=FocusTimerWidget.widget_type,
            title=FocusTimerWidget.title,
            size=WidgetSize.SMALL,
            factory=FocusTimerWidget,
            description="25-minute countdown for a focus block",
        ),
        WidgetDescriptor(
            type=QuickNotesWidget.widget_type,
            title=QuickNotesWidget.title,
            size=WidgetSize.MEDIUM,
            factory=QuickNotesWidget,
            description="Jot down thoughts without leaving the dashboard",
        ),
        WidgetDescriptor(
            type=StopwatchWidget.widget_type,
            title=StopwatchWidget.title,
            size=WidgetSize.SMALL,
            factory=StopwatchWidget,
            description="Track how long a task takes",
        ),
    ])
