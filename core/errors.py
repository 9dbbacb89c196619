"""Error types raised by the dashboard session controllers."""


class DashboardError(Exception):
    """Base class for session state errors."""


class PersistenceError(DashboardError):
    """
    Durable storage could not be written.

    Non-fatal: the in-memory state has already been updated and stays
    authoritative for the rest of the session.
    """


class UnresolvableWidget(DashboardError, LookupError):
    """A widget type tag has no entry in the widget catalog."""

    def __init__(self, widget_type: str):
        super().__init__(f"Unknown widget type: {widget_type!r}")
        self.widget_type = widget_type


class ModeTransitionError(DashboardError):
    """
    The external side effect of a mode switch failed.

    The mode is left at its pre-transition value. Retrying is an explicit
    user action.
    """

    def __init__(self, target_mode: str, message: str):
        super().__init__(message)
        self.target_mode = target_mode

