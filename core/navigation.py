"""
Navigation state: which top-level tab and sub-tab are displayed.

Kids mode locks navigation to the restricted section. The lock is applied
by the mode state machine; navigation never changes the mode.
"""

import logging
from typing import Dict, List, Optional

import config

logger = logging.getLogger(__name__)


class NavigationState:
    """Active tab/sub-tab plus the restricted-mode lock."""

    def __init__(
        self,
        tabs: Optional[Dict[str, List[str]]] = None,
        restricted_tab: str = config.RESTRICTED_TAB,
        default_tab: str = config.DEFAULT_TAB,
    ):
        """
        Initialize navigation.

        Args:
            tabs: Mapping of tab -> sub-tabs (first sub-tab is the default).
            restricted_tab: Tab that Kids mode pins navigation to.
            default_tab: Tab shown at startup.
        """
        self.tabs = {tab: list(subs) for tab, subs in (tabs or config.NAVIGATION_TABS).items()}
        if restricted_tab not in self.tabs:
            raise ValueError(f"Restricted tab {restricted_tab!r} is not a known tab")
        if default_tab not in self.tabs:
            raise ValueError(f"Default tab {default_tab!r} is not a known tab")

        self.restricted_tab = restricted_tab
        self.active_tab = default_tab
        self.active_sub_tab = self._first_sub_tab(default_tab)
        self._locked = False

    @property
    def is_locked(self) -> bool:
        return self._locked

    def sub_tabs_for(self, tab: str) -> List[str]:
        """Sub-tabs of a tab in display order (empty for unknown tabs)."""
        return list(self.tabs.get(tab, []))

    def _first_sub_tab(self, tab: str) -> Optional[str]:
        subs = self.sub_tabs_for(tab)
        return subs[0] if subs else None

    def select_tab(self, tab: str) -> bool:
        """
        Switch to a top-level tab, resetting the sub-tab.

        Unknown tabs, and anything but the restricted tab while locked, are
        ignored.

        Returns:
            True if the selection was applied.
        """
        if self._locked and tab != self.restricted_tab:
            logger.debug(f"Tab {tab!r} blocked in kids mode")
            return False
        if tab not in self.tabs:
            logger.debug(f"Ignoring unknown tab {tab!r}")
            return False

        self.active_tab = tab
        self.active_sub_tab = self._first_sub_tab(tab)
        return True

    def select_sub_tab(self, sub_tab: str) -> bool:
        """
        Switch sub-tab within the active tab.

        Membership is not validated; an unrelated id simply renders nothing.

        Returns:
            True if the selection was applied.
        """
        if self._locked and self.active_tab != self.restricted_tab:
            logger.debug(f"Sub-tab {sub_tab!r} blocked in kids mode")
            return False

        self.active_sub_tab = sub_tab
        return True

    def lock_to_restricted(self) -> None:
        """Pin navigation to the restricted section (Kids mode engaged)."""
        self._locked = True
        self.active_tab = self.restricted_tab
        self.active_sub_tab = self._first_sub_tab(self.restricted_tab)
        logger.debug(f"Navigation locked to {self.restricted_tab!r}")

    def unlock(self) -> None:
        """Release the lock; the current tab stays where it is."""
        self._locked = False
        logger.debug("Navigation unlocked")

    def snapshot(self) -> Dict[str, Optional[str]]:
        return {"active_tab": self.active_tab, "active_sub_tab": self.active_sub_tab}
