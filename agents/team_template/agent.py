"""
Team Template Agent
===================

Your agent must provide one of:
1. A `DashAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are integers: 0 keep lane, 1 move toward lane 0, 2 move toward the
last lane. See DashEnv for the full observation dictionary.
"""

from __future__ import annotations

from typing import Dict
import numpy as np


class DashAgent:
    """
    Your agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: 0, 1 or 2.
        """
        return int(self.rng.integers(0, 3))

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return int(np.random.randint(0, 3))
