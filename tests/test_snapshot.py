"""
Tests for numpy snapshots.
"""

import numpy as np
import pytest

from espresso_dash.dash_core.config_loader import load_config
from espresso_dash.dash_core.entities import Entity, HAZARD, REWARD
from espresso_dash.dash_core.session import PLAYING, Session
from espresso_dash.dash_core.state_snapshot import SnapshotBuilder


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def session():
    session = Session(state=PLAYING, player_lane=2, speed=200.0, base_speed=200.0)
    session.entities = [
        Entity(uid=1, lane=2, travel_position=600.0, kind=HAZARD),
        Entity(uid=2, lane=2, travel_position=500.0, kind=REWARD),
        Entity(uid=3, lane=0, travel_position=700.0, kind=HAZARD),
    ]
    return session


class TestSnapshotBuilder:

    def test_entity_arrays(self, config, session):
        snapshot = SnapshotBuilder(config).build(session)

        assert snapshot.entity_count == 3
        assert snapshot.ent_mask.sum() == 3
        assert snapshot.ent_kind[:4].tolist() == [1, 0, 1, -1]
        assert snapshot.ent_lane[:3].tolist() == [2, 2, 0]
        assert snapshot.ent_travel[0] == pytest.approx(600.0)

    def test_lane_gaps(self, config, session):
        snapshot = SnapshotBuilder(config).build(session)
        length = config.track.length

        # Car front edge sits at travel 640 with the default geometry
        assert snapshot.hazard_gap[2] == pytest.approx(40.0)
        assert snapshot.reward_gap[2] == pytest.approx(140.0)
        assert snapshot.hazard_gap[0] == pytest.approx(length)
        assert snapshot.hazard_gap[1] == pytest.approx(length)

    def test_truncates_to_max_entities(self, session):
        config = load_config(overrides={"observation": {"max_entities": 2}})
        snapshot = SnapshotBuilder(config).build(session)

        assert snapshot.entity_count == 3
        assert snapshot.ent_mask.shape == (2,)
        assert snapshot.ent_mask.all()

    def test_snapshots_are_independent(self, config, session):
        builder = SnapshotBuilder(config)
        first = builder.build(session)
        session.entities = []
        builder.build(session)

        assert first.ent_mask.sum() == 3

    def test_obs_dtypes(self, config, session):
        obs = SnapshotBuilder(config).build(session).to_obs_dict()

        assert obs["state"].dtype == np.int32
        assert obs["tick"].dtype == np.int64
        assert obs["score"].dtype == np.int64
        assert obs["caffeine"].dtype == np.float32
        assert obs["delivery_made"].dtype == np.int8
        assert obs["hazard_gap"].dtype == np.float32
        assert obs["ent_lane"].dtype == np.int16
        assert obs["ent_kind"].dtype == np.int8
        assert obs["ent_mask"].dtype == bool
        assert int(obs["state"]) == 1
