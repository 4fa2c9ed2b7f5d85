"""
Orientation Adapter
===================

Maps abstract (lane, travel_position) coordinates to screen coordinates for
the two supported layouts, and maps input back to lanes:

- horizontal: lanes stacked vertically, entities travel right to left
- vertical:   lanes side by side, entities travel top to bottom

Nothing else in the core knows which layout is active.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from espresso_dash.dash_core.config_loader import GameConfig, get_config


# Directional intents
LANE_UP = "lane_up"
LANE_DOWN = "lane_down"
LANE_LEFT = "lane_left"
LANE_RIGHT = "lane_right"

# Intents that move the car toward lane 0 / toward the last lane, per layout
_INTENT_DELTAS = {
    "horizontal": {LANE_UP: -1, LANE_DOWN: 1},
    "vertical": {LANE_LEFT: -1, LANE_RIGHT: 1},
}


@dataclass(frozen=True)
class Layout:
    """
    Pure coordinate mapping for one layout mode.

    The "along" coordinate follows the travel axis on screen, the "across"
    coordinate picks the lane.
    """
    mode: str
    width: float
    height: float
    lane_count: int
    lane_origin: float
    lane_pitch: float
    entry_margin: float
    entry_position: float
    player_position: float

    @property
    def is_horizontal(self) -> bool:
        return self.mode == "horizontal"

    @property
    def travel_direction(self) -> int:
        """Screen direction of increasing travel position along the travel axis."""
        return -1 if self.is_horizontal else 1

    def lane_coordinate(self, lane_index: int) -> float:
        """Across-axis screen coordinate of a lane center."""
        if self.is_horizontal:
            return self.lane_origin + lane_index * self.lane_pitch
        return self.width * (lane_index + 0.5) / self.lane_count

    def spawn_edge_coordinate(self) -> float:
        """Along-axis screen coordinate where entities enter."""
        if self.is_horizontal:
            return self.width
        return -self.entry_margin

    def travel_to_along(self, travel_position: float) -> float:
        """Convert a travel position to an along-axis screen coordinate."""
        offset = travel_position - self.entry_position
        return self.spawn_edge_coordinate() + self.travel_direction * offset

    def player_fixed_coordinate(self) -> float:
        """Along-axis screen coordinate of the car."""
        return self.travel_to_along(self.player_position)

    def to_screen(self, lane_index: int, travel_position: float) -> Tuple[float, float]:
        """
        Screen (x, y) for an abstract position.

        Args:
            lane_index: Lane of the object.
            travel_position: Position along the travel axis.

        Returns:
            (x, y) in layout pixels.
        """
        across = self.lane_coordinate(lane_index)
        along = self.travel_to_along(travel_position)
        if self.is_horizontal:
            return (along, across)
        return (across, along)

    def player_screen(self, lane_index: int) -> Tuple[float, float]:
        """Screen (x, y) of the car in the given lane."""
        return self.to_screen(lane_index, self.player_position)

    def pointer_to_lane(self, x: float, y: float) -> int:
        """
        Inverse mapping of a pointer position to a lane index.

        Picks the lane whose center is nearest the pointer on the across
        axis. Positions outside the lanes clamp to the nearest lane.
        """
        if self.is_horizontal:
            lane = int(round((y - self.lane_origin) / self.lane_pitch))
        else:
            lane = int(math.floor(x / self.width * self.lane_count))
        return max(0, min(self.lane_count - 1, lane))

    def intent_delta(self, intent: str) -> int:
        """
        Lane delta for a directional intent.

        Intents that do not belong to this layout (e.g. lane_left while
        horizontal) map to 0.
        """
        return _INTENT_DELTAS[self.mode].get(intent, 0)


def layout(mode: Optional[str] = None, config: Optional[GameConfig] = None) -> Layout:
    """
    Build the layout for a mode.

    Args:
        mode: "horizontal" or "vertical". Uses config.layout.mode if None.
        config: Game configuration. Uses default if None.

    Returns:
        Layout instance.
    """
    if config is None:
        config = get_config()

    if mode is None:
        mode = config.layout.mode
    if mode not in _INTENT_DELTAS:
        raise ValueError(f"Unknown layout mode: '{mode}'")

    return Layout(
        mode=mode,
        width=config.layout.width,
        height=config.layout.height,
        lane_count=config.track.lane_count,
        lane_origin=config.layout.lane_origin,
        lane_pitch=config.layout.lane_pitch,
        entry_margin=config.layout.entry_margin,
        entry_position=config.track.entry_position,
        player_position=config.track.player_position
    )
