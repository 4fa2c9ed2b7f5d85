"""
Tests for bounding-box collision detection.
"""

import pytest

from espresso_dash.dash_core.collision import Box, CollisionDetector, PlayerBody
from espresso_dash.dash_core.config_loader import load_config
from espresso_dash.dash_core.entities import Entity, HAZARD, REWARD


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def detector(config):
    return CollisionDetector(config)


@pytest.fixture
def player(config):
    # Player box spans travel [640, 700] with the default offset
    return PlayerBody(lane=1, travel_position=config.track.player_position)


class TestBox:

    def test_overlap(self):
        assert Box(0, 10, 0, 10).overlaps(Box(5, 15, 5, 15))

    def test_touching_edges_overlap(self):
        assert Box(0, 10, 0, 10).overlaps(Box(10, 20, 0, 10))

    def test_separated(self):
        assert not Box(0, 10, 0, 10).overlaps(Box(11, 20, 0, 10))
        assert not Box(0, 10, 0, 10).overlaps(Box(0, 10, 11, 20))

    def test_around(self):
        box = Box.around(100.0, 60.0, (30.0, 24.0), offset=-30.0)
        assert box == Box(left=40.0, right=100.0, top=36.0, bottom=84.0)


class TestCollisionDetector:

    def test_lane_mate_collides(self, detector, player):
        entity = Entity(uid=1, lane=1, travel_position=660.0, kind=HAZARD)
        entities = [entity]

        assert detector.detect(player, entities) == entity
        assert entities == []

    def test_other_lane_ignored(self, detector, player):
        entities = [Entity(uid=1, lane=2, travel_position=660.0, kind=HAZARD)]

        assert detector.detect(player, entities) is None
        assert len(entities) == 1

    def test_not_yet_reached(self, detector, player):
        entities = [Entity(uid=1, lane=1, travel_position=620.0, kind=HAZARD)]

        assert detector.detect(player, entities) is None

    def test_leading_edge_touch(self, detector, player):
        # Entity box right edge at 640 touches the player box left edge
        entities = [Entity(uid=1, lane=1, travel_position=624.0, kind=REWARD)]

        assert detector.detect(player, entities) is not None

    def test_trailing_edge(self, detector, player):
        touching = [Entity(uid=1, lane=1, travel_position=716.0, kind=REWARD)]
        past = [Entity(uid=2, lane=1, travel_position=720.0, kind=REWARD)]

        assert detector.detect(player, touching) is not None
        assert detector.detect(player, past) is None

    def test_first_in_spawn_order_wins(self, detector, player):
        first = Entity(uid=1, lane=1, travel_position=650.0, kind=REWARD)
        second = Entity(uid=2, lane=1, travel_position=660.0, kind=HAZARD)
        entities = [first, second]

        assert detector.detect(player, entities) == first
        assert entities == [second]

    def test_find_overlaps(self, detector, player):
        entities = [
            Entity(uid=1, lane=1, travel_position=650.0, kind=REWARD),
            Entity(uid=2, lane=0, travel_position=650.0, kind=REWARD),
            Entity(uid=3, lane=1, travel_position=660.0, kind=HAZARD),
        ]

        assert [e.uid for e in detector.find_overlaps(player, entities)] == [1, 3]
        assert len(entities) == 3
