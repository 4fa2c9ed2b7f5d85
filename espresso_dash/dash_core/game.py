"""
Core Game
=========

Main game orchestrator combining spawning, motion, collision, economy and
the session lifecycle behind a single ``advance(dt)`` entry point.

One tick runs, in order: spawn -> move -> detect collision -> apply economy
-> accrue progression. Nothing runs outside the playing state.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from espresso_dash.dash_core.collision import CollisionDetector, PlayerBody
from espresso_dash.dash_core.config_loader import GameConfig, get_config, validate_config
from espresso_dash.dash_core.economy import EconomyEvent, ProgressionEconomy, ScoreBreakdown
from espresso_dash.dash_core.entities import Entity
from espresso_dash.dash_core.motion import MotionIntegrator
from espresso_dash.dash_core.orientation import Layout, layout
from espresso_dash.dash_core.records import BestRecord, BestRecordStore
from espresso_dash.dash_core.session import GAMEOVER, PLAYING, VICTORY, Session
from espresso_dash.dash_core.spawner import EntitySpawner
from espresso_dash.dash_core.state_machine import GameStateMachine, RecordUpdate
from espresso_dash.dash_core.state_snapshot import GameSnapshot, SnapshotBuilder

_logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single advance() call."""
    snapshot: GameSnapshot
    ran: bool                          # False if the session was not playing
    spawned: Optional[Entity]
    collision: Optional[Entity]
    economy_event: Optional[EconomyEvent]
    dropped: int                       # Entities discarded past the far boundary
    delta_score: int
    state_changed: Optional[str]       # New state if this tick ended the session


class CoreGame:
    """
    Main game simulation class.

    Orchestrates:
    - Entity spawner (seeded RNG)
    - Motion integrator
    - Collision detector
    - Progression economy
    - Session state machine and best records
    - State snapshots

    Only the methods on this class mutate the session.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        record_store: Optional[BestRecordStore] = None,
        on_collision: Optional[Callable[[str], None]] = None,
        on_state_change: Optional[Callable[[str], None]] = None,
        layout_mode: Optional[str] = None
    ):
        """
        Initialize game in the menu state.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            rng: Random source for spawning. Takes precedence over seed.
            record_store: Best-record store. In-memory if None.
            on_collision: Called with the entity kind on each resolved collision.
            on_state_change: Called with the new state on each transition.
            layout_mode: Orientation for input mapping. Uses config if None.

        Raises:
            ValueError: If the configuration is invalid.
        """
        if config is None:
            config = get_config()
        validate_config(config)

        self._config = config
        self._seed = seed
        self._rng_injected = rng is not None
        self._on_collision = on_collision

        # Initialize subsystems
        self._layout = layout(layout_mode, config)
        self._spawner = EntitySpawner(config, seed=seed, rng=rng)
        self._motion = MotionIntegrator(config)
        self._detector = CollisionDetector(config)
        self._economy = ProgressionEconomy(config)
        self._machine = GameStateMachine(
            config=config,
            record_store=record_store,
            on_state_change=on_state_change,
            economy=self._economy
        )
        self._snapshot_builder = SnapshotBuilder(config)

        self._session_id: int = 0

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def session(self) -> Session:
        """The live session. Treat as read-only outside the core."""
        return self._machine.session

    @property
    def session_id(self) -> int:
        """Generation counter, incremented on every start."""
        return self._session_id

    @property
    def state(self) -> str:
        return self._machine.state

    @property
    def is_playing(self) -> bool:
        return self._machine.state == PLAYING

    @property
    def is_over(self) -> bool:
        """True if the session ended in victory or gameover."""
        return self.session.is_over

    @property
    def layout(self) -> Layout:
        """Orientation adapter used for input mapping."""
        return self._layout

    @property
    def spawner(self) -> EntitySpawner:
        return self._spawner

    @property
    def state_machine(self) -> GameStateMachine:
        return self._machine

    @property
    def win_policy(self) -> str:
        """Active win policy."""
        return self._economy.win_policy

    @property
    def last_record_update(self) -> Optional[RecordUpdate]:
        return self._machine.last_update

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start a new session (menu -> playing).

        Args:
            seed: New random seed. If None, an injected rng keeps drawing
                where it left off; otherwise the previous seed is reused.

        Returns:
            Initial snapshot.
        """
        # Validate the transition before touching the spawner
        self._machine.start()
        if seed is not None:
            self._seed = seed
            self._rng_injected = False
            self._spawner.reset(seed)
        elif not self._rng_injected:
            self._spawner.reset(self._seed)
        self._session_id += 1
        _logger.debug("Session %d started (seed=%s, policy=%s)",
                      self._session_id, self._seed, self.win_policy)
        return self.snapshot()

    def reset(self) -> RecordUpdate:
        """
        Return to the menu from victory or gameover, updating best records.

        Returns:
            RecordUpdate with new-best flags.
        """
        return self._machine.reset()

    def play_again(self, seed: Optional[int] = None) -> GameSnapshot:
        """Reset to the menu and immediately start a new session."""
        self.reset()
        return self.start(seed)

    def best_record(self) -> BestRecord:
        """Best score and distance, as shown on the menu."""
        return self._machine.best_record()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_lane(self, lane: int) -> int:
        """
        Request a lane. Out-of-range requests are clamped.

        Ignored outside the playing state.

        Returns:
            The player's lane after the request.
        """
        if self.is_playing:
            self.session.player_lane = self._config.track.clamp_lane(lane)
        return self.session.player_lane

    def move_lane(self, delta: int) -> int:
        """Shift the player by delta lanes, clamped."""
        return self.set_lane(self.session.player_lane + delta)

    def steer(self, intent: str) -> int:
        """Apply a directional intent (lane_up/lane_down or lane_left/lane_right)."""
        return self.move_lane(self._layout.intent_delta(intent))

    def point_at(self, x: float, y: float) -> int:
        """Move to the lane under a pointer position in layout coordinates."""
        return self.set_lane(self._layout.pointer_to_lane(x, y))

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def advance(self, dt: Optional[float] = None) -> TickResult:
        """
        Run one tick of the pipeline.

        Args:
            dt: Timestep. Uses motion.dt from config if None.

        Returns:
            TickResult for this tick. ``ran`` is False and nothing changes if
            the session is not playing.

        Raises:
            ValueError: If dt is negative.
        """
        if dt is not None and not dt >= 0.0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        if not self.is_playing:
            return TickResult(
                snapshot=self.snapshot(),
                ran=False,
                spawned=None,
                collision=None,
                economy_event=None,
                dropped=0,
                delta_score=0,
                state_changed=None
            )

        if dt is None:
            dt = self._config.motion.dt

        session = self.session
        score_before = session.score
        state_changed: Optional[str] = None
        economy_event: Optional[EconomyEvent] = None

        # 1. Spawn
        spawned = self._spawner.spawn(session.tick)
        if spawned is not None:
            session.entities.append(spawned)

        # 2. Move
        before = len(session.entities)
        session.entities = self._motion.advance(session.entities, session.speed, dt)
        dropped = before - len(session.entities)

        # 3. Detect (consumes the hit entity)
        player = PlayerBody(lane=session.player_lane,
                            travel_position=self._config.track.player_position)
        hit = self._detector.detect(player, session.entities)

        # 4. Economy
        if hit is not None:
            if self._on_collision is not None:
                self._on_collision(hit.kind)
            if hit.is_hazard:
                self._machine.end(GAMEOVER, "hazard")
                state_changed = GAMEOVER
            else:
                economy_event = self._economy.apply_reward(session)

        # 5. Accrue
        if state_changed is None:
            if self._economy.victory_reached(session):
                self._machine.end(VICTORY, "victory")
                state_changed = VICTORY
            else:
                self._economy.accrue(session, dt)
                if self._economy.victory_reached(session):
                    self._machine.end(VICTORY, "victory")
                    state_changed = VICTORY

        session.tick += 1

        return TickResult(
            snapshot=self.snapshot(),
            ran=True,
            spawned=spawned,
            collision=hit,
            economy_event=economy_event,
            dropped=dropped,
            delta_score=session.score - score_before,
            state_changed=state_changed
        )

    # ------------------------------------------------------------------
    # Read contract
    # ------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        """Build current session snapshot."""
        return self._snapshot_builder.build(self.session)

    def score_breakdown(self) -> ScoreBreakdown:
        """Results-screen score breakdown for the current session."""
        return self._economy.breakdown(self.session)

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        session = self.session
        return {
            "state": session.state,
            "score": session.score,
            "distance": session.distance,
            "caffeine": session.caffeine,
            "speed": session.speed,
            "beans_collected": session.beans_collected,
            "max_speed_seen": session.max_speed_seen,
            "delivery_made": session.delivery_made,
            "tick": session.tick,
            "terminated_reason": session.termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering, in screen coordinates of the layout.

        Returns:
            Dict with car and entity positions plus HUD values.
        """
        session = self.session
        entities_data = []
        for entity in session.entities:
            x, y = self._layout.to_screen(entity.lane, entity.travel_position)
            entities_data.append({
                "uid": entity.uid,
                "kind": entity.kind,
                "lane": entity.lane,
                "x": x,
                "y": y,
            })

        car_x, car_y = self._layout.player_screen(session.player_lane)
        return {
            "mode": self._layout.mode,
            "width": self._layout.width,
            "height": self._layout.height,
            "lane_coordinates": [
                self._layout.lane_coordinate(i) for i in range(self._config.track.lane_count)
            ],
            "car": {"lane": session.player_lane, "x": car_x, "y": car_y},
            "entities": entities_data,
            "state": session.state,
            "score": session.score,
            "distance": session.distance,
            "caffeine": session.caffeine,
            "speed": session.speed,
            "delivery_made": session.delivery_made,
        }
