"""
Tests for the orientation adapter.
"""

import pytest

from espresso_dash.dash_core.config_loader import load_config
from espresso_dash.dash_core.orientation import (
    LANE_DOWN,
    LANE_LEFT,
    LANE_RIGHT,
    LANE_UP,
    layout,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def horizontal(config):
    return layout("horizontal", config)


@pytest.fixture
def vertical(config):
    return layout("vertical", config)


class TestHorizontalLayout:

    def test_lane_coordinates(self, horizontal):
        assert [horizontal.lane_coordinate(i) for i in range(4)] == [80.0, 140.0, 200.0, 260.0]

    def test_spawn_edge(self, horizontal):
        assert horizontal.to_screen(1, 0.0) == (800.0, 140.0)

    def test_player_fixed(self, horizontal):
        assert horizontal.player_screen(1) == (100.0, 140.0)
        assert horizontal.player_screen(3) == (100.0, 260.0)

    def test_travel_moves_left(self, horizontal):
        x_early, _ = horizontal.to_screen(0, 100.0)
        x_late, _ = horizontal.to_screen(0, 200.0)
        assert x_late < x_early

    def test_pointer_to_lane(self, horizontal):
        assert horizontal.pointer_to_lane(0.0, 0.0) == 0
        assert horizontal.pointer_to_lane(0.0, 135.0) == 1
        assert horizontal.pointer_to_lane(0.0, 105.0) == 0
        assert horizontal.pointer_to_lane(0.0, 399.0) == 3

    def test_pointer_outside_clamps(self, horizontal):
        assert horizontal.pointer_to_lane(0.0, -20.0) == 0
        assert horizontal.pointer_to_lane(0.0, 5000.0) == 3

    def test_intents(self, horizontal):
        assert horizontal.intent_delta(LANE_UP) == -1
        assert horizontal.intent_delta(LANE_DOWN) == 1
        assert horizontal.intent_delta(LANE_LEFT) == 0
        assert horizontal.intent_delta(LANE_RIGHT) == 0


class TestVerticalLayout:

    def test_lane_coordinates(self, vertical):
        assert [vertical.lane_coordinate(i) for i in range(4)] == [100.0, 300.0, 500.0, 700.0]

    def test_spawn_edge(self, vertical):
        assert vertical.to_screen(0, 0.0) == (100.0, -50.0)

    def test_travel_moves_down(self, vertical):
        _, y_early = vertical.to_screen(2, 100.0)
        _, y_late = vertical.to_screen(2, 200.0)
        assert y_late > y_early

    def test_player_fixed(self, vertical):
        assert vertical.player_screen(2) == (500.0, 650.0)

    def test_pointer_to_lane(self, vertical):
        assert vertical.pointer_to_lane(250.0, 0.0) == 1
        assert vertical.pointer_to_lane(799.0, 0.0) == 3
        assert vertical.pointer_to_lane(-1.0, 0.0) == 0

    def test_intents(self, vertical):
        assert vertical.intent_delta(LANE_LEFT) == -1
        assert vertical.intent_delta(LANE_RIGHT) == 1
        assert vertical.intent_delta(LANE_UP) == 0


@pytest.mark.parametrize("mode", ["horizontal", "vertical"])
def test_pointer_on_car_selects_its_lane(config, mode):
    adapter = layout(mode, config)
    for lane in range(config.track.lane_count):
        assert adapter.pointer_to_lane(*adapter.player_screen(lane)) == lane


def test_layout_defaults_to_config_mode(config):
    assert layout(config=config).mode == config.layout.mode


def test_unknown_mode(config):
    with pytest.raises(ValueError):
        layout("diagonal", config)
