"""
Collision Detector
==================

Axis-aligned bounding-box tests between the player and lane-mates.

Boxes live in abstract track space: ``left``/``right`` run along the travel
axis, ``top``/``bottom`` across the lanes. At most one collision resolves per
tick (the first overlapping entity in spawn order), and the resolved entity
is consumed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from espresso_dash.dash_core.config_loader import GameConfig, get_config
from espresso_dash.dash_core.entities import Entity


@dataclass(frozen=True)
class Box:
    """Axis-aligned bounding box."""
    left: float
    right: float
    top: float
    bottom: float

    @staticmethod
    def around(
        travel: float,
        across: float,
        half_extents: Tuple[float, float],
        offset: float = 0.0
    ) -> "Box":
        """Box centered on (travel + offset, across)."""
        half_travel, half_across = half_extents
        center = travel + offset
        return Box(
            left=center - half_travel,
            right=center + half_travel,
            top=across - half_across,
            bottom=across + half_across
        )

    def overlaps(self, other: "Box") -> bool:
        """Separating-axis test. Touching edges count as overlap."""
        return not (
            self.right < other.left or
            self.left > other.right or
            self.bottom < other.top or
            self.top > other.bottom
        )


@dataclass(frozen=True)
class PlayerBody:
    """The car's abstract position."""
    lane: int
    travel_position: float


class CollisionDetector:
    """
    Resolves at most one player/entity collision per tick.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize detector.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._lane_spacing = config.track.lane_spacing
        self._player_half = config.collision.player_half_extents
        self._entity_half = config.collision.entity_half_extents
        self._offset = config.collision.collision_offset

    def lane_center(self, lane: int) -> float:
        """Across-axis coordinate of a lane in track space."""
        return lane * self._lane_spacing

    def player_box(self, player: PlayerBody) -> Box:
        return Box.around(
            player.travel_position,
            self.lane_center(player.lane),
            self._player_half,
            self._offset
        )

    def entity_box(self, entity: Entity) -> Box:
        return Box.around(
            entity.travel_position,
            self.lane_center(entity.lane),
            self._entity_half
        )

    def find_overlaps(self, player: PlayerBody, entities: List[Entity]) -> List[Entity]:
        """All lane-mates overlapping the player, in spawn order."""
        player_box = self.player_box(player)
        return [
            entity for entity in entities
            if entity.lane == player.lane and player_box.overlaps(self.entity_box(entity))
        ]

    def detect(self, player: PlayerBody, entities: List[Entity]) -> Optional[Entity]:
        """
        Find and consume the first colliding entity.

        Only entities in the player's lane are candidates. The first overlap in
        list (spawn) order wins and is removed from ``entities`` in place; any
        other overlapping lane-mates stay for the next tick.

        Args:
            player: The player's lane and travel position.
            entities: Live entities in spawn order. Mutated on collision.

        Returns:
            The consumed entity, or None.
        """
        player_box = self.player_box(player)
        for index, entity in enumerate(entities):
            if entity.lane != player.lane:
                continue
            if player_box.overlaps(self.entity_box(entity)):
                del entities[index]
                return entity
        return None
