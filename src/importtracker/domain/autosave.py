"""Debounced autosave.

The scheduler is a small state machine driven by discrete events: an edit,
the quiet period elapsing, a save succeeding or failing, and a manual
"save now". Time is read only through an injected clock, so tests drive it
with ``ManualClock`` instead of sleeping.

    idle --edit--> pending --quiet period--> saving --ok--> idle
                      ^                        |
                      +-------- failed --------+

Edits during a save are remembered and scheduled once the save finishes;
they never start a second save while one is in flight.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional, Protocol

logger = logging.getLogger("importtracker.autosave")

AUTOSAVE_DELAY = 0.8


class Clock(Protocol):
    def now(self) -> float: ...


class MonotonicClock:
    """Wall-independent clock for production use."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class SaveState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


class AutosaveScheduler:
    """Decides when the owner's save callback runs.

    The callback persists everything and raises on failure; any exception
    it raises sends the scheduler back to ``pending`` and is re-raised for
    the owner to report.
    """

    def __init__(
        self,
        save: Callable[[], None],
        clock: Optional[Clock] = None,
        delay: float = AUTOSAVE_DELAY,
    ):
        self.save = save
        self.clock = clock or MonotonicClock()
        self.delay = delay
        self.state = SaveState.IDLE
        self.deadline: Optional[float] = None
        self.last_saved_at: Optional[float] = None
        self._edited_during_save = False

    @property
    def saving(self) -> bool:
        return self.state == SaveState.SAVING

    def edit(self) -> None:
        """Record a mutation, restarting the quiet period."""
        if self.state == SaveState.SAVING:
            self._edited_during_save = True
            return
        self.state = SaveState.PENDING
        self.deadline = self.clock.now() + self.delay

    def cancel(self) -> None:
        """Forget pending work (the owner discarded its edits)."""
        if self.state == SaveState.SAVING:
            self._edited_during_save = False
            return
        self.state = SaveState.IDLE
        self.deadline = None

    def due(self) -> bool:
        return (
            self.state == SaveState.PENDING
            and self.deadline is not None
            and self.clock.now() >= self.deadline
        )

    def poll(self) -> bool:
        """Run the save if the quiet period has elapsed.

        Returns:
            True if a save ran and succeeded
        """
        if not self.due():
            return False
        return self._run()

    def save_now(self) -> bool:
        """Cancel the timer and save immediately.

        Returns:
            True if the save succeeded, False if a save is already running
        """
        if self.state == SaveState.SAVING:
            self._edited_during_save = True
            return False
        return self._run()

    def _run(self) -> bool:
        self.state = SaveState.SAVING
        self.deadline = None
        self._edited_during_save = False
        try:
            self.save()
        except Exception:
            logger.warning("Save failed; changes remain pending", exc_info=True)
            self.state = SaveState.PENDING
            self.deadline = self.clock.now() + self.delay
            raise
        self.last_saved_at = self.clock.now()
        if self._edited_during_save:
            self._edited_during_save = False
            self.state = SaveState.PENDING
            self.deadline = self.clock.now() + self.delay
        else:
            self.state = SaveState.IDLE
        return True
