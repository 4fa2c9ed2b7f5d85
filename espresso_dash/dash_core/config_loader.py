"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


WIN_POLICIES = ("caffeine_only", "caffeine_plus_distance")
LAYOUT_MODES = ("horizontal", "vertical")


@dataclass(frozen=True)
class TrackConfig:
    """Lane geometry and the travel axis."""
    lane_count: int
    lane_spacing: float      # Across-axis distance between lane centers
    entry_position: float    # Travel position where entities spawn
    far_boundary: float      # Entities beyond this are discarded
    player_position: float   # Fixed travel position of the player
    start_lane: int

    @property
    def length(self) -> float:
        """Travel distance from entry to far boundary."""
        return self.far_boundary - self.entry_position

    def clamp_lane(self, lane: int) -> int:
        """Clamp a lane index into [0, lane_count - 1]."""
        return max(0, min(self.lane_count - 1, int(lane)))


@dataclass(frozen=True)
class SpawnConfig:
    """Entity spawn cadence."""
    interval_ticks: int
    reward_probability: float
    warmup_ticks: int


@dataclass(frozen=True)
class MotionConfig:
    """Motion integration parameters."""
    dt: float
    reward_travel_rate: float
    hazard_travel_rate: float

    def travel_rate(self, kind: str) -> float:
        """Travel units per speed unit per tick for an entity kind."""
        if kind == "reward":
            return self.reward_travel_rate
        return self.hazard_travel_rate


@dataclass(frozen=True)
class EconomyConfig:
    """Caffeine, speed and score tuning."""
    base_speed: float
    speed_per_caffeine: float
    caffeine_per_reward: float
    max_caffeine: float
    reward_score: int
    overload_speed_increment: float
    overload_score: int
    distance_per_speed: float
    speed_bonus_divisor: float


@dataclass(frozen=True)
class CollisionConfig:
    """Bounding boxes as (travel, across) half extents."""
    player_half_extents: Tuple[float, float]
    entity_half_extents: Tuple[float, float]
    collision_offset: float  # Travel-axis shift applied to the player box


@dataclass(frozen=True)
class RulesConfig:
    """Victory conditions."""
    win_policy: str
    target_distance: float


@dataclass(frozen=True)
class LayoutConfig:
    """Screen layout used by the orientation adapter."""
    mode: str
    width: float
    height: float
    lane_origin: float
    lane_pitch: float
    entry_margin: float


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_entities: int
    frame_skip: int


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits."""
    max_ticks: int


@dataclass(frozen=True)
class RecordsConfig:
    """Best-record persistence."""
    path: str
    best_score_key: str
    best_distance_key: str


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    track: TrackConfig
    spawn: SpawnConfig
    motion: MotionConfig
    economy: EconomyConfig
    collision: CollisionConfig
    rules: RulesConfig
    layout: LayoutConfig
    observation: ObservationConfig
    caps: CapsConfig
    records: RecordsConfig

    @property
    def lane_count(self) -> int:
        return self.track.lane_count

    @property
    def win_policy(self) -> str:
        """Active win policy name."""
        return self.rules.win_policy


def _parse_extents(data: List, name: str) -> Tuple[float, float]:
    """Parse a [travel, across] half-extent pair from YAML."""
    if len(data) != 2:
        raise ValueError(f"{name} must have 2 values [travel, across], got {data}")
    return (float(data[0]), float(data[1]))


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: GameConfig) -> None:
    """
    Validate configuration consistency.

    Raises:
        ValueError: On the first invalid value found.
    """
    track = config.track
    if track.lane_count < 1:
        raise ValueError(f"track.lane_count must be >= 1, got {track.lane_count}")
    if not 0 <= track.start_lane < track.lane_count:
        raise ValueError(
            f"track.start_lane ({track.start_lane}) must be in [0, {track.lane_count - 1}]"
        )
    if track.lane_spacing <= 0:
        raise ValueError(f"track.lane_spacing must be positive, got {track.lane_spacing}")
    if track.far_boundary <= track.entry_position:
        raise ValueError(
            f"track.far_boundary ({track.far_boundary}) must exceed "
            f"track.entry_position ({track.entry_position})"
        )
    if not track.entry_position <= track.player_position <= track.far_boundary:
        raise ValueError(
            f"track.player_position ({track.player_position}) must lie on the track"
        )

    spawn = config.spawn
    if spawn.interval_ticks < 1:
        raise ValueError(f"spawn.interval_ticks must be >= 1, got {spawn.interval_ticks}")
    if spawn.warmup_ticks < 0:
        raise ValueError(f"spawn.warmup_ticks must be >= 0, got {spawn.warmup_ticks}")
    if not 0.0 <= spawn.reward_probability <= 1.0:
        raise ValueError(
            f"spawn.reward_probability must be in [0, 1], got {spawn.reward_probability}"
        )

    motion = config.motion
    for name in ("dt", "reward_travel_rate", "hazard_travel_rate"):
        if getattr(motion, name) <= 0:
            raise ValueError(f"motion.{name} must be positive, got {getattr(motion, name)}")

    economy = config.economy
    for name in ("base_speed", "caffeine_per_reward", "max_caffeine", "speed_bonus_divisor"):
        if getattr(economy, name) <= 0:
            raise ValueError(f"economy.{name} must be positive, got {getattr(economy, name)}")
    for name in ("speed_per_caffeine", "overload_speed_increment", "reward_score",
                 "overload_score", "distance_per_speed"):
        if getattr(economy, name) < 0:
            raise ValueError(f"economy.{name} must be >= 0, got {getattr(economy, name)}")

    collision = config.collision
    for name in ("player_half_extents", "entity_half_extents"):
        if min(getattr(collision, name)) <= 0:
            raise ValueError(f"collision.{name} must be positive, got {getattr(collision, name)}")

    if config.rules.win_policy not in WIN_POLICIES:
        raise ValueError(
            f"rules.win_policy must be one of {WIN_POLICIES}, got '{config.rules.win_policy}'"
        )
    if config.rules.target_distance <= 0:
        raise ValueError(
            f"rules.target_distance must be positive, got {config.rules.target_distance}"
        )

    if config.layout.mode not in LAYOUT_MODES:
        raise ValueError(f"layout.mode must be one of {LAYOUT_MODES}, got '{config.layout.mode}'")
    if config.layout.width <= 0 or config.layout.height <= 0:
        raise ValueError("layout.width and layout.height must be positive")

    if config.observation.max_entities < 1:
        raise ValueError(
            f"observation.max_entities must be >= 1, got {config.observation.max_entities}"
        )
    if config.observation.frame_skip < 1:
        raise ValueError(f"observation.frame_skip must be >= 1, got {config.observation.frame_skip}")
    if config.caps.max_ticks < 1:
        raise ValueError(f"caps.max_ticks must be >= 1, got {config.caps.max_ticks}")


def default_config_path() -> Path:
    """Location of the bundled game_config.yaml."""
    return Path(os.path.dirname(os.path.dirname(__file__))) / "game_config.yaml"


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.
        overrides: Nested mapping merged over the YAML before parsing,
            e.g. ``{"economy": {"base_speed": 2.0}}``.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    config_path = Path(config_path) if config_path is not None else default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if overrides:
        raw = _deep_merge(raw, overrides)

    track_data = raw["track"]
    track = TrackConfig(
        lane_count=int(track_data["lane_count"]),
        lane_spacing=float(track_data.get("lane_spacing", 60.0)),
        entry_position=float(track_data.get("entry_position", 0.0)),
        far_boundary=float(track_data["far_boundary"]),
        player_position=float(track_data["player_position"]),
        start_lane=int(track_data.get("start_lane", 0))
    )

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        interval_ticks=int(spawn_data["interval_ticks"]),
        reward_probability=float(spawn_data["reward_probability"]),
        warmup_ticks=int(spawn_data.get("warmup_ticks", 0))
    )

    motion_data = raw["motion"]
    motion = MotionConfig(
        dt=float(motion_data.get("dt", 1.0)),
        reward_travel_rate=float(motion_data["reward_travel_rate"]),
        hazard_travel_rate=float(motion_data["hazard_travel_rate"])
    )

    economy_data = raw["economy"]
    economy = EconomyConfig(
        base_speed=float(economy_data["base_speed"]),
        speed_per_caffeine=float(economy_data["speed_per_caffeine"]),
        caffeine_per_reward=float(economy_data.get("caffeine_per_reward", 10.0)),
        max_caffeine=float(economy_data.get("max_caffeine", 100.0)),
        reward_score=int(economy_data.get("reward_score", 50)),
        overload_speed_increment=float(economy_data["overload_speed_increment"]),
        overload_score=int(economy_data["overload_score"]),
        distance_per_speed=float(economy_data["distance_per_speed"]),
        speed_bonus_divisor=float(economy_data.get("speed_bonus_divisor", 10.0))
    )

    collision_data = raw["collision"]
    collision = CollisionConfig(
        player_half_extents=_parse_extents(
            collision_data["player_half_extents"], "collision.player_half_extents"
        ),
        entity_half_extents=_parse_extents(
            collision_data["entity_half_extents"], "collision.entity_half_extents"
        ),
        collision_offset=float(collision_data.get("collision_offset", 0.0))
    )

    rules_data = raw.get("rules", {})
    rules = RulesConfig(
        win_policy=str(rules_data.get("win_policy", "caffeine_only")),
        target_distance=float(rules_data.get("target_distance", 1000.0))
    )

    layout_data = raw.get("layout", {})
    layout = LayoutConfig(
        mode=str(layout_data.get("mode", "horizontal")),
        width=float(layout_data.get("width", 800.0)),
        height=float(layout_data.get("height", 400.0)),
        lane_origin=float(layout_data.get("lane_origin", 80.0)),
        lane_pitch=float(layout_data.get("lane_pitch", 60.0)),
        entry_margin=float(layout_data.get("entry_margin", 50.0))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        max_entities=int(obs_data.get("max_entities", 32)),
        frame_skip=int(obs_data.get("frame_skip", 4))
    )

    caps_data = raw.get("caps", {})
    caps = CapsConfig(
        max_ticks=int(caps_data.get("max_ticks", 36000))
    )

    records_data = raw.get("records", {})
    records = RecordsConfig(
        path=str(records_data.get("path", "~/.espresso_dash/best_records.json")),
        best_score_key=str(records_data.get("best_score_key", "turbo-espresso-best-score")),
        best_distance_key=str(
            records_data.get("best_distance_key", "turbo-espresso-best-distance")
        )
    )

    config = GameConfig(
        track=track,
        spawn=spawn,
        motion=motion,
        economy=economy,
        collision=collision,
        rules=rules,
        layout=layout,
        observation=observation,
        caps=caps,
        records=records
    )

    validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
