"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the lane-dodging game.
Reward is always 0.0 - agents must compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from espresso_dash.dash_core.config_loader import GameConfig, load_config
from espresso_dash.dash_core.game import CoreGame
from espresso_dash.dash_core.session import GAMEOVER, MENU, PLAYING, STATE_CODES

# Discrete actions
ACTION_KEEP = 0
ACTION_LANE_DECREASE = 1
ACTION_LANE_INCREASE = 2
ACTION_DELTAS = {ACTION_KEEP: 0, ACTION_LANE_DECREASE: -1, ACTION_LANE_INCREASE: 1}


class DashEnv(gym.Env):
    """
    Turbo Espresso Dash as a Gymnasium environment.

    Action Space:
        Discrete(3): 0 keep lane, 1 move toward lane 0, 2 move toward the last lane.

    Observation Space:
        Dict of session scalars, per-lane gaps and padded entity arrays.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains score, delta_score, distance, caffeine, state, terminated_reason, etc.
    """

    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 15,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        frame_skip: Optional[int] = None,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Preloaded configuration. Takes precedence over config_path.
            render_mode: "ansi" for a text picture, None for headless.
            frame_skip: Ticks per step. Uses observation.frame_skip if None.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)

        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode: {render_mode}")
        self.render_mode = render_mode
        self._debug = debug
        self._frame_skip = frame_skip or self._config.observation.frame_skip

        self._game = CoreGame(config=self._config)

        self.action_space = spaces.Discrete(3)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] DashEnv initialized")
            print(f"[DEBUG]   Lanes: {self._config.track.lane_count}")
            print(f"[DEBUG]   Frame skip: {self._frame_skip}")
            print(f"[DEBUG]   Win policy: {self._config.rules.win_policy}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_ent = self._config.observation.max_entities
        lanes = self._config.track.lane_count
        track = self._config.track
        max_caffeine = self._config.economy.max_caffeine

        return spaces.Dict({
            # Core state
            "state": spaces.Box(low=0, high=len(STATE_CODES) - 1, shape=(), dtype=np.int32),
            "tick": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "player_lane": spaces.Box(low=0, high=lanes - 1, shape=(), dtype=np.int32),
            "caffeine": spaces.Box(low=0, high=max_caffeine, shape=(), dtype=np.float32),
            "speed": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "base_speed": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "distance": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "beans_collected": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "max_speed_seen": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "delivery_made": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),
            "entity_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),

            # Lane lidar
            "hazard_gap": spaces.Box(low=0, high=track.length, shape=(lanes,), dtype=np.float32),
            "reward_gap": spaces.Box(low=0, high=track.length, shape=(lanes,), dtype=np.float32),

            # Entity arrays
            "ent_lane": spaces.Box(low=0, high=lanes - 1, shape=(max_ent,), dtype=np.int16),
            "ent_travel": spaces.Box(low=-np.inf, high=np.inf, shape=(max_ent,), dtype=np.float32),
            "ent_kind": spaces.Box(low=-1, high=1, shape=(max_ent,), dtype=np.int8),
            "ent_mask": spaces.MultiBinary(max_ent),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        if self._game.is_over:
            self._game.reset()
        elif self._game.state == PLAYING:
            # Abandoned episode
            self._game.state_machine.end(GAMEOVER, "abandoned")
            self._game.reset()

        snapshot = self._game.start(seed=seed)

        info = self._game.get_info()
        info["delta_score"] = 0
        info["collisions"] = []
        return snapshot.to_obs_dict(), info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step: apply the lane action, then run frame_skip ticks.

        Args:
            action: 0 keep, 1 lane -1, 2 lane +1.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)
        if action not in ACTION_DELTAS:
            raise ValueError(f"Invalid action {action}, expected 0, 1 or 2")

        if self._game.state == MENU:
            raise RuntimeError("Call reset() before step()")

        score_before = self._game.session.score
        self._game.move_lane(ACTION_DELTAS[action])

        collisions: List[str] = []
        max_ticks = self._config.caps.max_ticks
        for _ in range(self._frame_skip):
            if not self._game.is_playing or self._game.session.tick >= max_ticks:
                break
            result = self._game.advance()
            if result.collision is not None:
                collisions.append(result.collision.kind)

        terminated = self._game.is_over
        truncated = not terminated and self._game.session.tick >= max_ticks

        info = self._game.get_info()
        info["delta_score"] = self._game.session.score - score_before
        info["collisions"] = collisions
        if truncated:
            info["terminated_reason"] = "tick_cap"

        if self._debug:
            print(f"[DEBUG] Step: action={action}, lane={self._game.session.player_lane}, "
                  f"delta_score={info['delta_score']}, caffeine={info['caffeine']:.0f}")
            if terminated:
                print(f"[DEBUG] TERMINATED: {info.get('terminated_reason', 'unknown')}")

        obs = self._game.snapshot().to_obs_dict()
        return obs, 0.0, terminated, truncated, info

    def render(self) -> Optional[str]:
        """
        Render the current game state.

        Returns:
            Text picture if render_mode is "ansi", None otherwise.
        """
        if self.render_mode != "ansi":
            return None

        columns = 40
        track = self._config.track
        scale = columns / track.length
        session = self._game.session

        rows = []
        for lane in range(track.lane_count):
            row = ["."] * columns
            for entity in session.entities:
                if entity.lane != lane:
                    continue
                col = int((entity.travel_position - track.entry_position) * scale)
                if 0 <= col < columns:
                    row[col] = "o" if entity.is_reward else "X"
            if lane == session.player_lane:
                col = min(columns - 1, int((track.player_position - track.entry_position) * scale))
                row[col] = "C"
            rows.append("".join(row))

        rows.append(
            f"score={session.score} dist={session.distance:.0f}m "
            f"caffeine={session.caffeine:.0f}% state={session.state}"
        )
        return "\n".join(rows)

    def close(self) -> None:
        """Clean up resources."""

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
