"""
Entity Spawner
==============

Creates rewards and hazards on a fixed tick cadence using an injectable,
seedable random source so spawn sequences replay exactly.
"""

from __future__ import annotations

import itertools
import random
from typing import Optional, Tuple

from espresso_dash.dash_core.config_loader import GameConfig, get_config
from espresso_dash.dash_core.entities import Entity, HAZARD, REWARD


class EntitySpawner:
    """
    Tick-driven entity spawner.

    Fires on every tick that is a multiple of ``spawn.interval_ticks`` (and at
    or past ``spawn.warmup_ticks``). Each spawn draws the kind first, then the
    lane, from the same generator.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize spawner.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
            rng: Random source to draw from. Takes precedence over seed.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else random.Random(seed)
        self._ids = itertools.count(1)

        self._interval = config.spawn.interval_ticks
        self._warmup = config.spawn.warmup_ticks
        self._reward_probability = config.spawn.reward_probability
        self._lane_count = config.track.lane_count
        self._entry_position = config.track.entry_position

    @property
    def rng(self) -> random.Random:
        """The random source spawns are drawn from."""
        return self._rng

    def should_spawn(self, tick: int) -> bool:
        """True if the cadence fires on this tick."""
        return tick >= self._warmup and tick % self._interval == 0

    def spawn(self, tick: int) -> Optional[Entity]:
        """
        Spawn an entity if the cadence fires on this tick.

        Args:
            tick: Current session tick.

        Returns:
            The new entity, or None if nothing spawns this tick.
        """
        if not self.should_spawn(tick):
            return None

        kind = REWARD if self._rng.random() < self._reward_probability else HAZARD
        lane = self._rng.randint(0, self._lane_count - 1)

        return Entity(
            uid=next(self._ids),
            lane=lane,
            travel_position=self._entry_position,
            kind=kind
        )

    def reset(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        """
        Reset the spawner for a new session.

        Entity ids keep counting so no id is reused within the spawner's
        lifetime.

        Args:
            seed: New random seed. Keeps current generator if None.
            rng: Replacement random source. Takes precedence over seed.
        """
        if rng is not None:
            self._rng = rng
        elif seed is not None:
            self._rng = random.Random(seed)

    def get_state(self) -> Tuple:
        """Generator state for replay/checkpointing."""
        return self._rng.getstate()

    def set_state(self, state: Tuple) -> None:
        """Restore generator state from get_state()."""
        self._rng.setstate(state)
