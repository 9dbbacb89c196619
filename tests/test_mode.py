"""Unit tests for navigation state and the Standard/Kids mode state machine."""

import asyncio
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import ModeTransitionError
from core.mode import (
    ModeState,
    ModeStateMachine,
    NullRestrictionsController,
    PasscodePrompt,
    RestrictionsController,
)
from core.navigation import NavigationState


class FakeRestrictions(RestrictionsController):
    """Restrictions controller with scripted outcomes."""

    def __init__(self, enter_result=True, exit_result=True):
        self.enter_result = enter_result
        self.exit_result = exit_result
        self.enter_calls = 0
        self.exit_calls = 0
        self.gate = None  # asyncio.Event to hold enter in flight

    async def enter_restricted_mode(self):
        self.enter_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.enter_result, Exception):
            raise self.enter_result
        return self.enter_result

    async def exit_restricted_mode(self):
        self.exit_calls += 1
        if isinstance(self.exit_result, Exception):
            raise self.exit_result
        return self.exit_result


class TestNavigationState(unittest.TestCase):
    """Test tab/sub-tab selection rules."""

    def setUp(self):
        self.nav = NavigationState()

    def test_initial_state(self):
        """Starts on the overview with no sub-tab."""
        self.assertEqual(self.nav.snapshot(), {"active_tab": "overview", "active_sub_tab": None})
        self.assertFalse(self.nav.is_locked)

    def test_select_tab_resets_sub_tab(self):
        """Selecting a tab picks its first sub-tab, or None."""
        self.assertTrue(self.nav.select_tab("monitoring"))
        self.assertEqual(self.nav.active_sub_tab, "activity")
        self.nav.select_sub_tab("websites")
        self.assertTrue(self.nav.select_tab("widgets"))
        self.assertIsNone(self.nav.active_sub_tab)

    def test_sub_tabs_for(self):
        """Sub-tabs come back in order; unknown tabs have none."""
        self.assertEqual(self.nav.sub_tabs_for("kids"), ["kids_activities", "kids_rewards"])
        self.assertEqual(self.nav.sub_tabs_for("overview"), [])
        self.assertEqual(self.nav.sub_tabs_for("reports"), [])

        self.nav.sub_tabs_for("goals").append("monthly")
        self.assertEqual(self.nav.sub_tabs_for("goals"), ["daily", "weekly"])

    def test_unknown_tab_ignored(self):
        """Unknown tabs are a silent no-op."""
        self.nav.select_tab("goals")
        self.assertFalse(self.nav.select_tab("reports"))
        self.assertEqual(self.nav.snapshot(), {"active_tab": "goals", "active_sub_tab": "daily"})

    def test_unknown_sub_tab_accepted(self):
        """Sub-tab membership is not validated."""
        self.nav.select_tab("monitoring")
        self.assertTrue(self.nav.select_sub_tab("does-not-exist"))
        self.assertEqual(self.nav.active_sub_tab, "does-not-exist")

    def test_locked_rejects_other_tabs(self):
        """While locked only the restricted tab can be selected."""
        self.nav.lock_to_restricted()
        self.assertEqual(self.nav.snapshot(), {"active_tab": "kids", "active_sub_tab": "kids_activities"})
        self.assertFalse(self.nav.select_tab("monitoring"))
        self.assertEqual(self.nav.active_tab, "kids")
        self.assertTrue(self.nav.select_tab("kids"))
        self.assertTrue(self.nav.select_sub_tab("kids_rewards"))

    def test_locked_sub_tab_outside_restricted_rejected(self):
        """Sub-tab changes are rejected if locked outside the restricted tab."""
        self.nav.lock_to_restricted()
        self.nav.active_tab = "monitoring"
        self.assertFalse(self.nav.select_sub_tab("apps"))

    def test_unlock_keeps_position(self):
        """Unlocking does not move navigation."""
        self.nav.lock_to_restricted()
        self.nav.unlock()
        self.assertEqual(self.nav.active_tab, "kids")
        self.assertTrue(self.nav.select_tab("overview"))

    def test_custom_tabs_validated(self):
        """Restricted and default tabs must exist."""
        with self.assertRaises(ValueError):
            NavigationState(tabs={"home": []}, restricted_tab="kids", default_tab="home")
        with self.assertRaises(ValueError):
            NavigationState(tabs={"kids": []}, restricted_tab="kids", default_tab="home")


class TestModeStateMachine(unittest.IsolatedAsyncioTestCase):
    """Test mode transitions and the navigation cascade."""

    def setUp(self):
        self.nav = NavigationState()
        self.nav.select_tab("monitoring")
        self.restrictions = FakeRestrictions()
        self.mode = ModeStateMachine(self.restrictions, self.nav)
        self.changes = []
        self.mode.on_mode_change = self.changes.append

    async def _enter_kids(self):
        await self.mode.request_switch()
        self.assertTrue(self.mode.is_kids_mode)

    async def test_enter_kids_locks_navigation(self):
        """Entering kids mode applies restrictions then pins navigation."""
        await self.mode.request_switch()
        self.assertEqual(self.mode.state, ModeState.KIDS)
        self.assertEqual(self.restrictions.enter_calls, 1)
        self.assertEqual(self.nav.snapshot(), {"active_tab": "kids", "active_sub_tab": "kids_activities"})
        self.assertTrue(self.nav.is_locked)
        self.assertEqual(self.changes, [ModeState.KIDS])

    async def test_enter_kids_rejected(self):
        """A rejected enter effect keeps Standard mode and navigation."""
        self.restrictions.enter_result = False
        with self.assertRaises(ModeTransitionError):
            await self.mode.request_switch()
        self.assertEqual(self.mode.state, ModeState.STANDARD)
        self.assertEqual(self.nav.active_tab, "monitoring")
        self.assertFalse(self.nav.is_locked)
        self.assertFalse(self.mode.transition_in_flight)
        self.assertEqual(self.changes, [])

    async def test_enter_kids_raises(self):
        """An exception from the enter effect becomes ModeTransitionError."""
        self.restrictions.enter_result = RuntimeError("MDM unavailable")
        with self.assertRaises(ModeTransitionError) as ctx:
            await self.mode.request_switch()
        self.assertEqual(ctx.exception.target_mode, "kids")
        self.assertFalse(self.mode.is_kids_mode)

    async def test_leave_kids_shows_prompt_only(self):
        """Switching from kids mode only opens the passcode prompt."""
        await self._enter_kids()
        await self.mode.request_switch()
        self.assertEqual(self.mode.passcode_prompt, PasscodePrompt.SHOWN)
        self.assertTrue(self.mode.is_kids_mode)
        self.assertEqual(self.restrictions.exit_calls, 0)

    async def test_cancel_prompt_stays_in_kids(self):
        """Cancelling the prompt hides it and keeps kids mode."""
        await self._enter_kids()
        await self.mode.request_switch()
        self.mode.credential_cancelled()
        self.assertEqual(self.mode.passcode_prompt, PasscodePrompt.HIDDEN)
        self.assertEqual(self.mode.state, ModeState.KIDS)

    async def test_accept_restores_standard(self):
        """Accepted credential plus successful exit returns to Standard."""
        await self._enter_kids()
        await self.mode.request_switch()
        await self.mode.credential_accepted()
        self.assertEqual(self.mode.state, ModeState.STANDARD)
        self.assertEqual(self.mode.passcode_prompt, PasscodePrompt.HIDDEN)
        self.assertFalse(self.nav.is_locked)
        self.assertEqual(self.nav.active_tab, "kids")
        self.assertEqual(self.changes, [ModeState.KIDS, ModeState.STANDARD])

    async def test_failed_exit_then_retry(self):
        """A failed exit keeps kids mode with the prompt hidden; a retry succeeds."""
        await self._enter_kids()
        self.restrictions.exit_result = False
        await self.mode.request_switch()
        with self.assertRaises(ModeTransitionError):
            await self.mode.credential_accepted()
        self.assertEqual(self.mode.state, ModeState.KIDS)
        self.assertEqual(self.mode.passcode_prompt, PasscodePrompt.HIDDEN)
        self.assertTrue(self.nav.is_locked)

        self.restrictions.exit_result = True
        await self.mode.request_switch()
        await self.mode.credential_accepted()
        self.assertEqual(self.mode.state, ModeState.STANDARD)

    async def test_credential_without_prompt_ignored(self):
        """Credential outcomes with no prompt shown do nothing."""
        await self._enter_kids()
        await self.mode.credential_accepted()
        self.assertEqual(self.restrictions.exit_calls, 0)
        self.assertTrue(self.mode.is_kids_mode)

    async def test_duplicate_request_while_in_flight(self):
        """A second switch request during an awaited enter is ignored."""
        self.restrictions.gate = asyncio.Event()
        task = asyncio.create_task(self.mode.request_switch())
        await asyncio.sleep(0)
        self.assertTrue(self.mode.transition_in_flight)
        self.assertFalse(self.mode.is_kids_mode)

        await self.mode.request_switch()
        self.restrictions.gate.set()
        await task
        self.assertEqual(self.restrictions.enter_calls, 1)
        self.assertTrue(self.mode.is_kids_mode)

    async def test_broken_callback_swallowed(self):
        """A raising on_mode_change does not undo the transition."""
        self.mode.on_mode_change = MagicMock(side_effect=RuntimeError("ui gone"))
        await self.mode.request_switch()
        self.assertTrue(self.mode.is_kids_mode)

    async def test_null_restrictions(self):
        """The default controller always succeeds."""
        mode = ModeStateMachine(NullRestrictionsController(), NavigationState())
        await mode.request_switch()
        await mode.request_switch()
        await mode.credential_accepted()
        self.assertEqual(mode.state, ModeState.STANDARD)


if __name__ == "__main__":
    unittest.main()
