"""
Tests for the session lifecycle and best records.
"""

import pytest

from espresso_dash.dash_core.config_loader import load_config
from espresso_dash.dash_core.entities import Entity, HAZARD
from espresso_dash.dash_core.records import InMemoryRecordStore
from espresso_dash.dash_core.session import GAMEOVER, MENU, PLAYING, VICTORY
from espresso_dash.dash_core.state_machine import GameStateMachine, InvalidTransitionError


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def changes():
    return []


@pytest.fixture
def machine(config, store, changes):
    return GameStateMachine(config=config, record_store=store, on_state_change=changes.append)


class FailingStore:
    """Store whose backend is unavailable."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")


class UnreadableStore(InMemoryRecordStore):
    """Store whose reads fail but whose writes still land."""

    def get(self, key):
        raise OSError("read failed")


class RejectingStore(InMemoryRecordStore):
    """Store that reads fine but refuses writes."""

    def set(self, key, value):
        return False


def finish(machine, score, distance, outcome=GAMEOVER):
    machine.start()
    machine.session.score = score
    machine.session.distance = distance
    machine.end(outcome, "hazard" if outcome == GAMEOVER else "victory")
    return machine.reset()


class TestTransitions:

    def test_starts_in_menu(self, machine, config):
        assert machine.state == MENU
        assert machine.session.player_lane == config.track.start_lane

    def test_full_cycle_fires_callback_once_each(self, machine, changes):
        machine.start()
        machine.end(GAMEOVER, "hazard")
        machine.reset()

        assert changes == [PLAYING, GAMEOVER, MENU]

    def test_victory_cycle(self, machine, changes):
        machine.start()
        machine.end(VICTORY)
        assert machine.session.termination_reason == VICTORY
        machine.reset()

        assert changes == [PLAYING, VICTORY, MENU]

    def test_start_creates_fresh_session(self, machine):
        machine.start()
        machine.session.tick = 50
        machine.session.score = 10
        machine.end(GAMEOVER)
        machine.reset()

        session = machine.start()
        assert session.tick == 0
        assert session.score == 0
        assert session.entities == []

    @pytest.mark.parametrize("action", ["reset", "end"])
    def test_invalid_from_menu(self, machine, changes, action):
        with pytest.raises(InvalidTransitionError):
            if action == "reset":
                machine.reset()
            else:
                machine.end(GAMEOVER)
        assert machine.state == MENU
        assert changes == []

    def test_start_while_playing(self, machine):
        machine.start()
        with pytest.raises(InvalidTransitionError):
            machine.start()
        assert machine.state == PLAYING

    def test_end_requires_terminal_outcome(self, machine):
        machine.start()
        with pytest.raises(InvalidTransitionError):
            machine.end(MENU)

    def test_no_double_end(self, machine):
        machine.start()
        machine.end(GAMEOVER, "hazard")
        with pytest.raises(InvalidTransitionError):
            machine.end(VICTORY, "victory")
        assert machine.state == GAMEOVER
        assert machine.session.termination_reason == "hazard"

    def test_error_is_runtime_error(self, machine):
        with pytest.raises(RuntimeError) as excinfo:
            machine.reset()
        assert excinfo.value.current == MENU
        assert excinfo.value.target == MENU

    def test_leaving_playing_clears_entities(self, machine):
        machine.start()
        machine.session.entities.append(Entity(uid=1, lane=0, travel_position=10.0, kind=HAZARD))
        machine.end(GAMEOVER)

        assert machine.session.entities == []


class TestBestRecords:

    def test_first_run_sets_records(self, machine, store, config):
        update = finish(machine, score=120, distance=33.7)

        assert update.score == 120
        assert update.distance == 33
        assert update.new_best_score and update.new_best_distance
        assert store.get(config.records.best_score_key) == 120
        assert store.get(config.records.best_distance_key) == 33

    def test_lower_run_keeps_records(self, machine):
        finish(machine, score=120, distance=33.0)
        update = finish(machine, score=80, distance=20.0)

        assert not update.is_new_best
        assert update.best_score == 120
        assert update.best_distance == 33

    def test_equal_run_is_not_new_best(self, machine):
        finish(machine, score=120, distance=33.0)
        update = finish(machine, score=120, distance=33.0)

        assert not update.is_new_best

    def test_score_and_distance_independent(self, machine, store, config):
        finish(machine, score=500, distance=10.0)
        update = finish(machine, score=100, distance=90.0)

        assert not update.new_best_score
        assert update.new_best_distance
        assert store.get(config.records.best_score_key) == 500
        assert store.get(config.records.best_distance_key) == 90

    def test_best_record_reads_store(self, config):
        store = InMemoryRecordStore({
            config.records.best_score_key: 900,
            config.records.best_distance_key: 450,
        })
        machine = GameStateMachine(config=config, record_store=store)

        best = machine.best_record()
        assert best.best_score == 900
        assert best.best_distance == 450

    def test_empty_store_reads_zero(self, machine):
        best = machine.best_record()
        assert best.best_score == 0
        assert best.best_distance == 0

    def test_last_update(self, machine):
        assert machine.last_update is None
        update = finish(machine, score=5, distance=1.0)
        assert machine.last_update is update


class TestStoreFailures:

    def test_failing_store_is_not_fatal(self, config, changes):
        machine = GameStateMachine(
            config=config, record_store=FailingStore(), on_state_change=changes.append
        )

        update = finish(machine, score=42, distance=7.0)

        assert machine.state == MENU
        assert update.store_failed
        assert update.new_best_score
        assert changes[-1] == MENU
        assert machine.best_record().best_score == 0

    def test_unreadable_best_is_not_overwritten(self, config):
        store = UnreadableStore()
        store.set(config.records.best_score_key, 10000)
        store.set(config.records.best_distance_key, 900)
        machine = GameStateMachine(config=config, record_store=store)

        update = finish(machine, score=5, distance=3.0)

        assert update.store_failed
        assert machine.state == MENU
        assert store._values[config.records.best_score_key] == 10000
        assert store._values[config.records.best_distance_key] == 900

    def test_rejected_write_reported(self, config):
        machine = GameStateMachine(config=config, record_store=RejectingStore())

        update = finish(machine, score=42, distance=7.0)

        assert update.store_failed
        assert machine.state == MENU
