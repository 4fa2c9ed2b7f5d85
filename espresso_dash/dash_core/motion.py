"""
Motion Integrator
=================

Advances entities along the travel axis and discards those past the far
boundary.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from espresso_dash.dash_core.config_loader import GameConfig, get_config
from espresso_dash.dash_core.entities import Entity


class MotionIntegrator:
    """
    Pure motion step over the live entity list.

    ``travel_position += speed * travel_rate(kind) * dt`` for every entity.
    Order of the surviving entities (spawn order) is preserved.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._far_boundary = config.track.far_boundary

    @property
    def far_boundary(self) -> float:
        return self._far_boundary

    def displacement(self, entity: Entity, speed: float, dt: float) -> float:
        """Travel distance covered by an entity in one step."""
        return speed * self._config.motion.travel_rate(entity.kind) * dt

    def is_past_boundary(self, entity: Entity) -> bool:
        return entity.travel_position > self._far_boundary

    def advance(self, entities: Sequence[Entity], speed: float, dt: float) -> List[Entity]:
        """
        Move every entity and drop those past the far boundary.

        The input sequence is not modified.

        Args:
            entities: Live entities in spawn order.
            speed: Current session speed.
            dt: Timestep.

        Returns:
            New list of surviving, moved entities.
        """
        moved = []
        for entity in entities:
            stepped = entity.moved(self.displacement(entity, speed, dt))
            if not self.is_past_boundary(stepped):
                moved.append(stepped)
        return moved
