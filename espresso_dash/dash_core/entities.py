"""
Track Entities
==============

Rewards (coffee beans) and hazards (potholes) travelling down the lanes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


REWARD = "reward"
HAZARD = "hazard"
ENTITY_KINDS = (REWARD, HAZARD)

# Integer codes used in numpy observations
KIND_CODES = {REWARD: 0, HAZARD: 1}


@dataclass(frozen=True)
class Entity:
    """
    A single live entity on the track.

    Entities are immutable; motion produces a moved copy with the same uid.
    """
    uid: int
    lane: int
    travel_position: float
    kind: str

    @property
    def is_reward(self) -> bool:
        return self.kind == REWARD

    @property
    def is_hazard(self) -> bool:
        return self.kind == HAZARD

    def moved(self, delta: float) -> "Entity":
        """Copy of this entity advanced by delta along the travel axis."""
        return replace(self, travel_position=self.travel_position + delta)

    def __repr__(self) -> str:
        return f"Entity({self.uid}: {self.kind} lane={self.lane} at {self.travel_position:.1f})"
