"""
State Snapshot
==============

Packs session state into fixed-size numpy arrays for presentation and
Gymnasium observations. Includes per-lane derived features for agents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from espresso_dash.dash_core.config_loader import GameConfig, get_config
from espresso_dash.dash_core.entities import HAZARD, KIND_CODES
from espresso_dash.dash_core.session import STATE_CODES, Session


@dataclass
class GameSnapshot:
    """
    Read-only copy of the session for one tick.

    Entity arrays are fixed-size with masking; entities appear in spawn order.
    """
    # Core state
    state: str
    tick: int
    player_lane: int
    caffeine: float
    speed: float
    base_speed: float
    distance: float
    score: int
    beans_collected: int
    max_speed_seen: float
    delivery_made: bool
    entity_count: int

    # Track info (for normalization)
    lane_count: int
    track_length: float
    player_position: float

    # Per-lane lidar: travel distance from the car's front edge to the
    # nearest approaching entity of each kind, capped at track_length
    hazard_gap: np.ndarray            # (lane_count,) float32
    reward_gap: np.ndarray            # (lane_count,) float32

    # Entity arrays (fixed size, padded)
    ent_lane: np.ndarray              # (MAX_ENT,) int16
    ent_travel: np.ndarray            # (MAX_ENT,) float32
    ent_kind: np.ndarray              # (MAX_ENT,) int8, -1 for padding
    ent_mask: np.ndarray              # (MAX_ENT,) bool

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "state": np.array(STATE_CODES[self.state], dtype=np.int32),
            "tick": np.array(self.tick, dtype=np.int64),
            "player_lane": np.array(self.player_lane, dtype=np.int32),
            "caffeine": np.array(self.caffeine, dtype=np.float32),
            "speed": np.array(self.speed, dtype=np.float32),
            "base_speed": np.array(self.base_speed, dtype=np.float32),
            "distance": np.array(self.distance, dtype=np.float32),
            "score": np.array(self.score, dtype=np.int64),
            "beans_collected": np.array(self.beans_collected, dtype=np.int32),
            "max_speed_seen": np.array(self.max_speed_seen, dtype=np.float32),
            "delivery_made": np.array(int(self.delivery_made), dtype=np.int8),
            "entity_count": np.array(self.entity_count, dtype=np.int32),

            "hazard_gap": self.hazard_gap,
            "reward_gap": self.reward_gap,

            "ent_lane": self.ent_lane,
            "ent_travel": self.ent_travel,
            "ent_kind": self.ent_kind,
            "ent_mask": self.ent_mask,
        }


class SnapshotBuilder:
    """Builds snapshots with fixed-size arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._max_entities = config.observation.max_entities
        self._lane_count = config.track.lane_count
        self._track_length = config.track.length
        self._player_position = config.track.player_position
        self._player_front = (
            config.track.player_position
            + config.collision.collision_offset
            - config.collision.player_half_extents[0]
        )

    @property
    def max_entities(self) -> int:
        return self._max_entities

    def build(self, session: Session) -> GameSnapshot:
        """Build a snapshot from the session."""
        # Arrays are freshly allocated so earlier snapshots stay valid
        ent_lane = np.zeros(self._max_entities, dtype=np.int16)
        ent_travel = np.zeros(self._max_entities, dtype=np.float32)
        ent_kind = np.full(self._max_entities, -1, dtype=np.int8)
        ent_mask = np.zeros(self._max_entities, dtype=bool)
        hazard_gap = np.full(self._lane_count, self._track_length, dtype=np.float32)
        reward_gap = np.full(self._lane_count, self._track_length, dtype=np.float32)

        entities = session.entities
        count = min(len(entities), self._max_entities)
        for i in range(count):
            entity = entities[i]
            ent_lane[i] = entity.lane
            ent_travel[i] = entity.travel_position
            ent_kind[i] = KIND_CODES[entity.kind]
            ent_mask[i] = True

        for entity in entities:
            gap = self._player_front - entity.travel_position
            if gap < 0:
                # Already alongside or past the car
                continue
            gaps = hazard_gap if entity.kind == HAZARD else reward_gap
            if gap < gaps[entity.lane]:
                gaps[entity.lane] = gap

        return GameSnapshot(
            state=session.state,
            tick=session.tick,
            player_lane=session.player_lane,
            caffeine=session.caffeine,
            speed=session.speed,
            base_speed=session.base_speed,
            distance=session.distance,
            score=session.score,
            beans_collected=session.beans_collected,
            max_speed_seen=session.max_speed_seen,
            delivery_made=session.delivery_made,
            entity_count=len(entities),
            lane_count=self._lane_count,
            track_length=self._track_length,
            player_position=self._player_position,
            hazard_gap=hazard_gap,
            reward_gap=reward_gap,
            ent_lane=ent_lane,
            ent_travel=ent_travel,
            ent_kind=ent_kind,
            ent_mask=ent_mask
        )
