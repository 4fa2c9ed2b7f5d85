"""
Tick Driver
===========

Fixed-timestep driver that turns elapsed wall time into ``CoreGame.advance``
calls.

A driver is bound to the session that was live when it was created. It stops
for good (cancels itself) as soon as that session leaves the playing state
or a newer session is started, so a queued step can never run against a
stale session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from espresso_dash.dash_core.game import CoreGame, TickResult


class TickDriver:
    """
    Accumulator-based fixed-step driver.

    Usage:
        driver = TickDriver(game, step_seconds=1 / 60)
        while running:
            driver.pump(clock.tick(60) / 1000.0)
    """

    def __init__(
        self,
        game: "CoreGame",
        step_seconds: float = 1.0 / 60.0,
        max_steps_per_pump: int = 5,
        on_tick: Optional[Callable[["TickResult"], None]] = None
    ):
        """
        Initialize driver for the game's current session.

        Args:
            game: Game to drive.
            step_seconds: Wall time per tick.
            max_steps_per_pump: Cap on catch-up ticks after a stall.
            on_tick: Called with each TickResult.
        """
        if step_seconds <= 0:
            raise ValueError(f"step_seconds must be positive, got {step_seconds}")
        if max_steps_per_pump < 1:
            raise ValueError(f"max_steps_per_pump must be >= 1, got {max_steps_per_pump}")

        self._game = game
        self._step_seconds = step_seconds
        self._max_steps = max_steps_per_pump
        self._on_tick = on_tick
        self._accumulator = 0.0
        self._generation = game.session_id
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """True while the bound session is live and playing."""
        return (
            not self._cancelled
            and self._game.session_id == self._generation
            and self._game.is_playing
        )

    def cancel(self) -> None:
        """Stop the driver; pending accumulated time is discarded."""
        self._cancelled = True
        self._accumulator = 0.0

    def rearm(self) -> None:
        """Bind to the game's current session and resume."""
        self._generation = self._game.session_id
        self._cancelled = False
        self._accumulator = 0.0

    def pump(self, elapsed: float) -> List["TickResult"]:
        """
        Run as many whole ticks as the elapsed time allows.

        Args:
            elapsed: Wall time since the last pump, in seconds.

        Returns:
            Results of the ticks that ran (possibly empty).
        """
        if not self.active:
            self.cancel()
            return []

        self._accumulator += max(0.0, elapsed)
        results = []
        while self._accumulator >= self._step_seconds and len(results) < self._max_steps:
            self._accumulator -= self._step_seconds
            result = self._game.advance()
            results.append(result)
            if self._on_tick is not None:
                self._on_tick(result)
            if not self.active:
                self.cancel()
                break

        # Drop backlog beyond the catch-up cap
        if len(results) >= self._max_steps:
            self._accumulator = min(self._accumulator, self._step_seconds)
        return results
