"""
Progression Economy
===================

Turns collected beans into caffeine, caffeine into speed, and speed and
distance into score.

Score formula (recomputed on every change, never allowed to decrease)::

    floor(distance)
    + beans_collected * reward_score
    + floor(max_speed_seen / speed_bonus_divisor)
    + overload_bonus
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from espresso_dash.dash_core.config_loader import GameConfig, get_config
from espresso_dash.dash_core.session import Session

_logger = logging.getLogger(__name__)


@dataclass
class EconomyEvent:
    """Record of a reward pickup."""
    points: int
    caffeine: float
    speed: float
    is_overload: bool = False
    delivered: bool = False  # True on the pickup that first fills caffeine

    def __repr__(self) -> str:
        if self.is_overload:
            return f"EconomyEvent(overload={self.points}, speed={self.speed:.1f})"
        return f"EconomyEvent(bean={self.points}, caffeine={self.caffeine:.0f})"


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-source score contributions for the results screen."""
    distance_points: int
    bean_bonus: int
    speed_bonus: int
    overload_bonus: int

    @property
    def total(self) -> int:
        return self.distance_points + self.bean_bonus + self.speed_bonus + self.overload_bonus


class ProgressionEconomy:
    """
    Applies economy rules to a Session.

    Holds configuration only; all values live on the Session so there is a
    single owner of session state.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize economy.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._economy = config.economy
        self._rules = config.rules

    @property
    def win_policy(self) -> str:
        """Active win policy."""
        return self._rules.win_policy

    def speed_for(self, base_speed: float, caffeine: float) -> float:
        """Speed derived from base speed and caffeine."""
        return base_speed + caffeine * self._economy.speed_per_caffeine

    def reset(self, session: Session) -> None:
        """Put a session's economy values back to their starting defaults."""
        session.caffeine = 0.0
        session.base_speed = self._economy.base_speed
        session.speed = self.speed_for(session.base_speed, 0.0)
        session.distance = 0.0
        session.score = 0
        session.beans_collected = 0
        session.max_speed_seen = session.speed
        session.delivery_made = False
        session.overload_count = 0
        session.overload_bonus = 0

    def breakdown(self, session: Session) -> ScoreBreakdown:
        """Score contributions from the session's current values."""
        return ScoreBreakdown(
            distance_points=int(math.floor(session.distance)),
            bean_bonus=session.beans_collected * self._economy.reward_score,
            speed_bonus=int(math.floor(session.max_speed_seen / self._economy.speed_bonus_divisor)),
            overload_bonus=session.overload_bonus
        )

    def _refresh(self, session: Session) -> None:
        """Recompute derived speed and score."""
        session.speed = self.speed_for(session.base_speed, session.caffeine)
        session.max_speed_seen = max(session.max_speed_seen, session.speed)
        session.score = max(session.score, self.breakdown(session).total)

    def apply_reward(self, session: Session) -> EconomyEvent:
        """
        Apply a reward collision.

        Below full caffeine the bean adds caffeine and the bean bonus. At full
        caffeine it overloads instead: base speed rises permanently and the
        smaller overload bonus is awarded.

        Args:
            session: Session to update.

        Returns:
            EconomyEvent describing the pickup.
        """
        score_before = session.score
        max_caffeine = self._economy.max_caffeine
        delivered = False
        is_overload = session.caffeine >= max_caffeine

        if is_overload:
            session.base_speed += self._economy.overload_speed_increment
            session.overload_bonus += self._economy.overload_score
            session.overload_count += 1
            _logger.debug("Caffeine overload #%d, base speed now %.2f",
                          session.overload_count, session.base_speed)
        else:
            session.caffeine = min(max_caffeine, session.caffeine + self._economy.caffeine_per_reward)
            session.beans_collected += 1
            if session.caffeine >= max_caffeine and not session.delivery_made:
                session.delivery_made = True
                delivered = True
                _logger.debug("Delivery made at tick %d", session.tick)

        self._refresh(session)

        return EconomyEvent(
            points=session.score - score_before,
            caffeine=session.caffeine,
            speed=session.speed,
            is_overload=is_overload,
            delivered=delivered
        )

    def accrue(self, session: Session, dt: float) -> int:
        """
        Accrue distance and score for one tick of play.

        Args:
            session: Session to update.
            dt: Timestep.

        Returns:
            Score gained this tick.
        """
        score_before = session.score
        session.distance += session.speed * self._economy.distance_per_speed * dt
        self._refresh(session)
        return session.score - score_before

    def victory_reached(self, session: Session) -> bool:
        """True if the active win policy is satisfied."""
        if not session.delivery_made:
            return False
        if self._rules.win_policy == "caffeine_plus_distance":
            return session.distance >= self._rules.target_distance
        return True
