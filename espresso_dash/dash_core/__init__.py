"""
Dash Core - The deterministic simulation behind Turbo Espresso Dash.

This module provides the core game simulation, Gymnasium environment wrapper,
and all supporting systems (spawning, motion, collision, economy, records).

Main exports:
- DashEnv: Gymnasium environment for single-agent training
- CoreGame: Low-level game simulation behind a single advance() entry point
- TickDriver: Fixed-timestep driver bound to one session
- GameConfig: Configuration loaded from game_config.yaml
"""

from espresso_dash.dash_core.config_loader import GameConfig, load_config
from espresso_dash.dash_core.entities import Entity, HAZARD, REWARD
from espresso_dash.dash_core.game import CoreGame, TickResult
from espresso_dash.dash_core.driver import TickDriver
from espresso_dash.dash_core.orientation import Layout, layout
from espresso_dash.dash_core.records import (
    BestRecord,
    BestRecordStore,
    InMemoryRecordStore,
    JsonFileRecordStore,
)
from espresso_dash.dash_core.state_machine import InvalidTransitionError, RecordUpdate
from espresso_dash.dash_core.env_gym import DashEnv
from espresso_dash.dash_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    generate_replay_filename,
    verify_replay,
)

__all__ = [
    "GameConfig",
    "load_config",
    "Entity",
    "REWARD",
    "HAZARD",
    "CoreGame",
    "TickResult",
    "TickDriver",
    "Layout",
    "layout",
    "BestRecord",
    "BestRecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "InvalidTransitionError",
    "RecordUpdate",
    "DashEnv",
    "ReplayRecorder",
    "record_episode",
    "generate_replay_filename",
    "verify_replay",
]
