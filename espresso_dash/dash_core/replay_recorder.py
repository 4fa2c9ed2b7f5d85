"""
Replay Recorder
===============

A simple wrapper to record Gymnasium environment episodes for replay.

Usage:
    from espresso_dash.dash_core import DashEnv, ReplayRecorder

    env = DashEnv()
    recorder = ReplayRecorder(env)

    obs, info = recorder.reset(seed=42)

    done = False
    while not done:
        action = your_agent(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    recorder.save("my_replay.json")

Because spawning is fully seeded, a replay is just the seed plus the action
list; ``verify_replay`` re-runs it and checks the score trace.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import gymnasium as gym
import numpy as np

from espresso_dash.dash_core.config_loader import GameConfig, get_config


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {agent_name}_{YYYYMMDD_HHMMSS}_s{seed}.json
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if seed is not None:
        filename = f"{agent_name}_{timestamp}_s{seed}.json"
    else:
        filename = f"{agent_name}_{timestamp}.json"

    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash of every gameplay parameter, for replay validation."""
    if config is None:
        config = get_config()
    hash_data = {
        name: dataclasses.asdict(getattr(config, name))
        for name in ("track", "spawn", "motion", "economy", "collision", "rules", "observation")
    }
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that records environment interactions for replay.

    Wraps a DashEnv and records all actions, scores and metadata.

    Attributes:
        env: The wrapped Gymnasium environment.
        recording: Whether currently recording.
    """

    def __init__(
        self,
        env: gym.Env,
        agent_name: str = "unknown",
        auto_save_path: Optional[str] = None
    ):
        """
        Initialize the replay recorder.

        Args:
            env: The Gymnasium environment to wrap.
            agent_name: Name of the agent (stored in replay metadata).
            auto_save_path: If provided, automatically save replay on episode end.
        """
        self.env = env
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path

        self._recording = False
        self._seed: Optional[int] = None
        self._actions: List[int] = []
        self._scores: List[int] = []
        self._termination_reason: str = ""
        self._config_hash = compute_config_hash(getattr(env, "config", None))

    @property
    def recording(self) -> bool:
        """Whether currently recording."""
        return self._recording

    @property
    def observation_space(self):
        """Forward observation space from wrapped env."""
        return self.env.observation_space

    @property
    def action_space(self):
        """Forward action space from wrapped env."""
        return self.env.action_space

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Any, Dict]:
        """Reset the environment and start recording."""
        self._actions = []
        self._scores = []
        self._termination_reason = ""
        self._seed = seed
        self._recording = True

        return self.env.reset(seed=seed, options=options)

    def step(self, action: Union[int, np.ndarray]) -> Tuple[Any, float, bool, bool, Dict]:
        """Take a step and record it."""
        if isinstance(action, np.ndarray):
            action_val = int(action.item())
        else:
            action_val = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            self._actions.append(action_val)
            self._scores.append(int(info.get("score", 0)))
            if terminated or truncated:
                self._termination_reason = info.get("terminated_reason", "unknown")

        if (terminated or truncated) and self.auto_save_path:
            self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """Current replay data as a dictionary."""
        return {
            "seed": self._seed,
            "agent": self.agent_name,
            "config_hash": self._config_hash,
            "actions": self._actions.copy(),
            "scores": self._scores.copy(),
            "final_score": self._scores[-1] if self._scores else 0,
            "total_steps": len(self._actions),
            "termination_reason": self._termination_reason,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(
                agent_name=self.agent_name,
                seed=self._seed,
                directory=directory
            )
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        replay_data = self.get_replay_data()
        with open(path, "w") as f:
            json.dump(replay_data, f, indent=2)

        print(f"Replay saved: {path}")
        print(f"  Seed: {self._seed}")
        print(f"  Steps: {len(self._actions)}")
        print(f"  Final score: {replay_data['final_score']}")

        return path

    def close(self) -> None:
        """Close the wrapped environment."""
        self.env.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """Load replay data saved by ReplayRecorder.save()."""
    with open(path, "r") as f:
        return json.load(f)


def verify_replay(replay_data: Dict[str, Any], env: Optional[gym.Env] = None) -> bool:
    """
    Re-run a replay and check it reproduces the recorded score trace.

    A replay fails if any recorded score differs, or if the episode ends
    before all recorded actions have been played.

    Args:
        replay_data: Data from get_replay_data() or load_replay().
        env: Environment to replay in. A fresh DashEnv if None.

    Returns:
        True if every recorded step is reproduced.

    Raises:
        ValueError: If the replay has no seed or was recorded with a
            different configuration.
    """
    if replay_data.get("seed") is None:
        raise ValueError("Replay has no seed and cannot be reproduced")

    if env is None:
        from espresso_dash.dash_core.env_gym import DashEnv
        env = DashEnv()

    config_hash = compute_config_hash(getattr(env, "config", None))
    if replay_data.get("config_hash") != config_hash:
        raise ValueError(
            f"Replay config hash {replay_data.get('config_hash')} does not match {config_hash}"
        )

    actions = replay_data["actions"]
    scores = replay_data["scores"]
    if len(actions) != len(scores):
        return False

    env.reset(seed=replay_data["seed"])
    for step, (action, expected) in enumerate(zip(actions, scores), start=1):
        _, _, terminated, truncated, info = env.step(action)
        if int(info["score"]) != expected:
            return False
        if (terminated or truncated) and step < len(actions):
            return False
    return True


def record_episode(
    env: gym.Env,
    agent_fn,
    seed: int,
    save_path: Optional[str] = None,
    agent_name: str = "unknown"
) -> Dict[str, Any]:
    """
    Convenience function to record a single episode.

    Args:
        env: The Gymnasium environment.
        agent_fn: Function that takes observation and returns action.
        seed: Random seed for the episode.
        save_path: If provided, save replay to this path.
        agent_name: Name of the agent.

    Returns:
        Replay data dictionary.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)

    obs, info = recorder.reset(seed=seed)

    done = False
    while not done:
        action = agent_fn(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    replay_data = recorder.get_replay_data()

    if save_path:
        recorder.save(save_path)

    return replay_data
