"""
Session
=======

The single live play session: lifecycle state, player lane, the economy
values and the live entity set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from espresso_dash.dash_core.entities import Entity


# Lifecycle states
MENU = "menu"
PLAYING = "playing"
VICTORY = "victory"
GAMEOVER = "gameover"
STATES = (MENU, PLAYING, VICTORY, GAMEOVER)
TERMINAL_STATES = (VICTORY, GAMEOVER)

# Integer codes used in numpy observations
STATE_CODES = {MENU: 0, PLAYING: 1, VICTORY: 2, GAMEOVER: 3}


@dataclass
class Session:
    """
    Mutable session state, owned by the core pipeline.

    Presentation code should read it through snapshots and treat it as
    read-only.
    """
    state: str = MENU
    tick: int = 0
    player_lane: int = 0
    caffeine: float = 0.0
    base_speed: float = 0.0
    speed: float = 0.0
    distance: float = 0.0
    score: int = 0
    beans_collected: int = 0
    max_speed_seen: float = 0.0
    delivery_made: bool = False
    overload_count: int = 0
    overload_bonus: int = 0
    termination_reason: str = ""
    entities: List[Entity] = field(default_factory=list)

    @property
    def is_playing(self) -> bool:
        return self.state == PLAYING

    @property
    def is_over(self) -> bool:
        return self.state in TERMINAL_STATES

    def to_dict(self) -> Dict[str, Any]:
        """Plain-value copy of the scalar fields."""
        return {
            "state": self.state,
            "tick": self.tick,
            "player_lane": self.player_lane,
            "caffeine": self.caffeine,
            "base_speed": self.base_speed,
            "speed": self.speed,
            "distance": self.distance,
            "score": self.score,
            "beans_collected": self.beans_collected,
            "max_speed_seen": self.max_speed_seen,
            "delivery_made": self.delivery_made,
            "overload_count": self.overload_count,
            "termination_reason": self.termination_reason,
            "entity_count": len(self.entities),
        }
