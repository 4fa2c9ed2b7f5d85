"""
Baseline Dodger Agent - Steers toward the lane with the most room.

This is a simple heuristic agent that uses the per-lane gap observations
(a "LIDAR" scan of each lane from the car's front edge) to avoid potholes
and pick up beans when the way is clear.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for teams to compare against
3. A verification that the environment API works correctly

Strategy:
- Read hazard_gap and reward_gap (one value per lane)
- Score every lane: room before the next pothole, plus a bonus when a bean
  comes first
- Move one lane toward the best lane, but never into a lane whose pothole
  is already close
"""

import numpy as np
from typing import Any, Dict, Optional


# Actions (see DashEnv)
KEEP = 0
LANE_DECREASE = 1
LANE_INCREASE = 2

# Gap below which a pothole is too close to share a lane with
DANGER_GAP = 120.0
# Extra lane value when a bean arrives before the next pothole
BEAN_BONUS = 200.0


class DashAgent:
    """
    Simple baseline agent that dodges potholes and grabs reachable beans.
    """

    def __init__(self, debug: bool = False, danger_gap: float = DANGER_GAP):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
            danger_gap: Hazard gap treated as unsafe.
        """
        self.debug = debug
        self.danger_gap = danger_gap

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset agent state for a new episode. The agent is stateless."""

    def lane_values(self, observation: Dict[str, Any]) -> np.ndarray:
        """Desirability of every lane from the gap observations."""
        hazard_gap = np.asarray(observation["hazard_gap"], dtype=np.float64)
        reward_gap = np.asarray(observation["reward_gap"], dtype=np.float64)

        values = hazard_gap.copy()
        values[reward_gap < hazard_gap] += BEAN_BONUS
        values[hazard_gap < self.danger_gap] -= 10 * BEAN_BONUS
        return values

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Choose a lane move.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            0 keep, 1 move toward lane 0, 2 move toward the last lane.
        """
        lane = int(observation["player_lane"])
        values = self.lane_values(observation)
        hazard_gap = observation["hazard_gap"]
        lane_count = len(values)

        target = int(np.argmax(values))
        if values[lane] >= values[target]:
            target = lane
        action = KEEP
        if target < lane and hazard_gap[lane - 1] >= self.danger_gap:
            action = LANE_DECREASE
        elif target > lane and hazard_gap[lane + 1] >= self.danger_gap:
            action = LANE_INCREASE
        elif hazard_gap[lane] < self.danger_gap:
            # Current lane is about to be hit; take the safer neighbour
            up = values[lane - 1] if lane > 0 else -np.inf
            down = values[lane + 1] if lane < lane_count - 1 else -np.inf
            action = LANE_DECREASE if up >= down else LANE_INCREASE

        if debug or self.debug:
            print(f"[Dodger Agent] Lane={lane}, Target={target}, "
                  f"Hazard gaps={np.round(hazard_gap).astype(int).tolist()}, "
                  f"Action={action}")

        return action


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> DashAgent:
    """Factory function to create an agent instance."""
    return DashAgent(**kwargs)
