"""
Standard/Kids mode switching.

Entering Kids mode needs no credential but waits for the external
"enter restricted mode" effect (e.g. OS-level restrictions) before the mode
flips. Leaving Kids mode only opens the passcode prompt; the mode flips back
after the credential is accepted and the "exit restricted mode" effect has
succeeded. A failed effect leaves the mode where it was and raises
ModeTransitionError.

Transitions:
    STANDARD --request_switch--> [enter effect ok] --> KIDS
    KIDS     --request_switch--> prompt SHOWN
    SHOWN    --credential_accepted--> [exit effect ok] --> STANDARD, prompt HIDDEN
    SHOWN    --credential_cancelled--> prompt HIDDEN (still KIDS)
"""

import logging
from enum import Enum
from typing import Callable, Optional

import config
from core.errors import ModeTransitionError
from core.navigation import NavigationState

logger = logging.getLogger(__name__)


class ModeState(Enum):
    """Operating modes."""
    STANDARD = config.MODE_STANDARD
    KIDS = config.MODE_KIDS


class PasscodePrompt(Enum):
    """Visibility of the credential prompt."""
    HIDDEN = "hidden"
    SHOWN = "shown"


class RestrictionsController:
    """
    Applies and lifts restricted mode outside this process.

    Both methods return True on success. Returning False or raising counts
    as a failure.
    """

    async def enter_restricted_mode(self) -> bool:
        raise NotImplementedError

    async def exit_restricted_mode(self) -> bool:
        raise NotImplementedError


class NullRestrictionsController(RestrictionsController):
    """Restrictions controller that only logs (no OS integration)."""

    async def enter_restricted_mode(self) -> bool:
        logger.info("Restricted mode requested (no OS restrictions configured)")
        return True

    async def exit_restricted_mode(self) -> bool:
        logger.info("Standard mode restore requested (no OS restrictions configured)")
        return True


class ModeStateMachine:
    """
    Owns the operating mode and the passcode prompt state.

    Callbacks:
        on_mode_change(mode: ModeState)  fired after each committed switch
    """

    def __init__(self, restrictions: RestrictionsController, navigation: NavigationState):
        """
        Initialize in Standard mode with the prompt hidden.

        Args:
            restrictions: External restricted-mode collaborator.
            navigation: Navigation state to lock when Kids mode engages.
        """
        self.restrictions = restrictions
        self.navigation = navigation
        self.state = ModeState.STANDARD
        self.passcode_prompt = PasscodePrompt.HIDDEN
        self.transition_in_flight = False
        self.on_mode_change: Optional[Callable[[ModeState], None]] = None

    @property
    def is_kids_mode(self) -> bool:
        return self.state is ModeState.KIDS

    @property
    def is_prompt_shown(self) -> bool:
        return self.passcode_prompt is PasscodePrompt.SHOWN

    async def request_switch(self) -> None:
        """
        Handle the mode toggle.

        From Standard this awaits the enter effect and switches to Kids.
        From Kids it only shows the passcode prompt.

        Raises:
            ModeTransitionError: If entering Kids mode failed.
        """
        if self.transition_in_flight:
            logger.debug("Mode switch already in progress, ignoring request")
            return

        if self.state is ModeState.KIDS:
            if not self.is_prompt_shown:
                self.passcode_prompt = PasscodePrompt.SHOWN
                logger.info("Passcode required to leave kids mode")
            return

        await self._run_effect(ModeState.KIDS, self.restrictions.enter_restricted_mode)
        self.state = ModeState.KIDS
        # Cascade: kids mode always lands in the restricted section
        self.navigation.lock_to_restricted()
        logger.info("Kids mode enabled")
        self._notify_mode_change()

    async def credential_accepted(self) -> None:
        """
        Passcode verified: restore Standard mode.

        The prompt is hidden whether or not the restore succeeds.

        Raises:
            ModeTransitionError: If the exit effect failed (still in Kids mode).
        """
        if not self.is_prompt_shown or self.transition_in_flight:
            logger.debug("Ignoring credential result with no pending prompt")
            return

        try:
            await self._run_effect(ModeState.STANDARD, self.restrictions.exit_restricted_mode)
        finally:
            self.passcode_prompt = PasscodePrompt.HIDDEN

        self.state = ModeState.STANDARD
        self.navigation.unlock()
        logger.info("Kids mode disabled")
        self._notify_mode_change()

    def credential_cancelled(self) -> None:
        """Passcode prompt closed without success; stay in Kids mode."""
        if self.transition_in_flight:
            logger.debug("Ignoring cancel while restore is in progress")
            return
        if self.is_prompt_shown:
            self.passcode_prompt = PasscodePrompt.HIDDEN
            logger.info("Passcode prompt cancelled, staying in kids mode")

    async def _run_effect(self, target: ModeState, effect: Callable) -> None:
        """Await an external effect, raising ModeTransitionError on failure."""
        self.transition_in_flight = True
        try:
            ok = await effect()
        except Exception as e:
            logger.error(f"Switch to {target.value} mode failed: {e}")
            raise ModeTransitionError(target.value, f"Could not switch to {target.value} mode: {e}") from e
        finally:
            self.transition_in_flight = False

        if not ok:
            logger.error(f"Switch to {target.value} mode was rejected")
            raise ModeTransitionError(target.value, f"Could not switch to {target.value} mode")

    def _notify_mode_change(self) -> None:
        if self.on_mode_change:
            try:
                self.on_mode_change(self.state)
            except Exception as e:
                logger.debug(f"on_mode_change callback error: {e}")
