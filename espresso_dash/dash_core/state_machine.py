"""
Game State Machine
==================

Session lifecycle::

    menu --start--> playing --hazard--> gameover --reset--> menu
                            --victory--> victory --reset--> menu

``victory`` and ``gameover`` are terminal for a session. The best-record
store is only consulted at menu entry and written on ``reset``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from espresso_dash.dash_core.config_loader import GameConfig, get_config
from espresso_dash.dash_core.economy import ProgressionEconomy
from espresso_dash.dash_core.records import BestRecord, BestRecordStore, InMemoryRecordStore
from espresso_dash.dash_core.session import (
    GAMEOVER,
    MENU,
    PLAYING,
    VICTORY,
    Session,
)

_logger = logging.getLogger(__name__)

TRANSITIONS = {
    MENU: (PLAYING,),
    PLAYING: (VICTORY, GAMEOVER),
    VICTORY: (MENU,),
    GAMEOVER: (MENU,),
}

# Exceptions a third-party store may leak; treated as a non-fatal store failure
_STORE_ERRORS = (OSError, ValueError, TypeError)


class InvalidTransitionError(RuntimeError):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot transition from '{current}' to '{target}'")
        self.current = current
        self.target = target


@dataclass
class RecordUpdate:
    """Outcome of comparing a finished session against the best records."""
    score: int
    distance: int
    best_score: int
    best_distance: int
    new_best_score: bool
    new_best_distance: bool
    store_failed: bool = False  # Store could not be read or written

    @property
    def is_new_best(self) -> bool:
        return self.new_best_score or self.new_best_distance


class GameStateMachine:
    """
    Owns the Session and its lifecycle transitions.

    Every successful transition invokes ``on_state_change(new_state)`` exactly
    once.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        record_store: Optional[BestRecordStore] = None,
        on_state_change: Optional[Callable[[str], None]] = None,
        economy: Optional[ProgressionEconomy] = None
    ):
        """
        Initialize state machine in the menu state.

        Args:
            config: Game configuration. Uses default if None.
            record_store: Best-record store. In-memory if None.
            on_state_change: Called with the new state after each transition.
            economy: Economy used to reset session values on start.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._store = record_store if record_store is not None else InMemoryRecordStore()
        self._on_state_change = on_state_change
        self._economy = economy if economy is not None else ProgressionEconomy(config)
        self._session = Session(state=MENU, player_lane=config.track.start_lane)
        self._last_update: Optional[RecordUpdate] = None

    @property
    def session(self) -> Session:
        """The live session."""
        return self._session

    @property
    def state(self) -> str:
        return self._session.state

    @property
    def record_store(self) -> BestRecordStore:
        return self._store

    @property
    def last_update(self) -> Optional[RecordUpdate]:
        """Result of the most recent reset, if any."""
        return self._last_update

    def can_transition(self, target: str) -> bool:
        return target in TRANSITIONS[self._session.state]

    def _transition(self, target: str) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError(self._session.state, target)
        previous = self._session.state
        self._session.state = target
        if previous == PLAYING:
            # No entity outlives the playing state
            self._session.entities.clear()
        _logger.debug("State %s -> %s", previous, target)
        if self._on_state_change is not None:
            self._on_state_change(target)

    def start(self) -> Session:
        """
        Begin a new session: menu -> playing.

        The previous session is discarded and a fresh one is created with
        default economy values, no entities and tick 0.

        Returns:
            The new session.

        Raises:
            InvalidTransitionError: If not in the menu state.
        """
        if not self.can_transition(PLAYING):
            raise InvalidTransitionError(self._session.state, PLAYING)

        session = Session(state=MENU, player_lane=self._config.track.start_lane)
        self._economy.reset(session)
        self._session = session
        self._transition(PLAYING)
        return session

    def end(self, outcome: str, reason: str = "") -> None:
        """
        Finish the playing session with victory or gameover.

        Args:
            outcome: VICTORY or GAMEOVER.
            reason: Short machine-readable cause (e.g. "hazard").

        Raises:
            InvalidTransitionError: If not playing or outcome is not terminal.
        """
        if outcome not in (VICTORY, GAMEOVER) or not self.can_transition(outcome):
            raise InvalidTransitionError(self._session.state, outcome)
        self._session.termination_reason = reason or outcome
        self._transition(outcome)

    def reset(self) -> RecordUpdate:
        """
        Return to the menu, comparing the finished session to the best records.

        Score and distance are compared and persisted independently. Store
        failures are logged and reported through ``store_failed``; they never
        prevent the transition.

        Returns:
            RecordUpdate for the finished session.

        Raises:
            InvalidTransitionError: If the session has not finished.
        """
        if not self.can_transition(MENU):
            raise InvalidTransitionError(self._session.state, MENU)

        update = self._update_records()
        self._last_update = update
        self._transition(MENU)
        return update

    def best_record(self) -> BestRecord:
        """Current best score and distance; absent or unreadable values read as 0."""
        score, _ = self._read(self._config.records.best_score_key)
        distance, _ = self._read(self._config.records.best_distance_key)
        return BestRecord(best_score=score or 0, best_distance=distance or 0)

    def _read(self, key: str) -> Tuple[Optional[int], bool]:
        """Read a key, returning (value, failed)."""
        try:
            return self._store.get(key), False
        except _STORE_ERRORS as e:
            _logger.warning("Best record store read failed for %s: %s", key, e)
            return None, True

    def _write(self, key: str, value: int) -> bool:
        try:
            ok = bool(self._store.set(key, value))
        except _STORE_ERRORS as e:
            _logger.warning("Best record store write failed for %s: %s", key, e)
            return False
        if not ok:
            _logger.warning("Best record store rejected %s=%d", key, value)
        return ok

    def _update_records(self) -> RecordUpdate:
        records = self._config.records
        score = int(self._session.score)
        distance = int(math.floor(self._session.distance))

        best_score, score_read_failed = self._read(records.best_score_key)
        best_distance, distance_read_failed = self._read(records.best_distance_key)
        failed = score_read_failed or distance_read_failed

        new_best_score = score > (best_score or 0)
        new_best_distance = distance > (best_distance or 0)

        # A key whose stored best could not be read is never overwritten
        if new_best_score:
            if not score_read_failed:
                failed = not self._write(records.best_score_key, score) or failed
            best_score = score
        if new_best_distance:
            if not distance_read_failed:
                failed = not self._write(records.best_distance_key, distance) or failed
            best_distance = distance

        return RecordUpdate(
            score=score,
            distance=distance,
            best_score=best_score or 0,
            best_distance=best_distance or 0,
            new_best_score=new_best_score,
            new_best_distance=new_best_distance,
            store_failed=failed
        )
