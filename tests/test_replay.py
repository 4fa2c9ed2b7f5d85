"""
Tests for replay recording and verification.
"""

import pytest

from espresso_dash.dash_core.config_loader import load_config
from espresso_dash.dash_core.env_gym import DashEnv
from espresso_dash.dash_core.replay_recorder import (
    ReplayRecorder,
    generate_replay_filename,
    load_replay,
    record_episode,
    verify_replay,
)


@pytest.fixture
def config():
    return load_config(overrides={"caps": {"max_ticks": 800}})


def weaving_agent(obs):
    return 2 if int(obs["tick"]) % 64 < 32 else 1


class TestReplay:

    def test_record_episode(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42, agent_name="weaver")

        assert data["seed"] == 42
        assert data["agent"] == "weaver"
        assert data["total_steps"] == len(data["actions"]) == len(data["scores"])
        assert data["final_score"] == data["scores"][-1]
        assert data["termination_reason"] in ("hazard", "victory", "tick_cap")

    def test_verify_replay(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42)

        assert verify_replay(data, DashEnv(config=config))

    def test_tampered_replay_fails(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42)
        data["scores"][-1] += 1

        assert not verify_replay(data, DashEnv(config=config))

    def test_steps_after_episode_end_fail(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42)
        data["actions"].extend([0] * 50)
        data["scores"].extend([999999] * 50)

        assert not verify_replay(data, DashEnv(config=config))

    def test_mismatched_lengths_fail(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42)
        data["scores"].pop()

        assert not verify_replay(data, DashEnv(config=config))

    def test_unseeded_replay_rejected(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42)
        data["seed"] = None

        with pytest.raises(ValueError):
            verify_replay(data, DashEnv(config=config))

    def test_config_mismatch(self, config):
        data = record_episode(DashEnv(config=config), weaving_agent, seed=42)
        other = load_config(overrides={"economy": {"reward_score": 60}})

        with pytest.raises(ValueError):
            verify_replay(data, DashEnv(config=other))

    def test_save_and_load(self, config, tmp_path):
        with ReplayRecorder(DashEnv(config=config), agent_name="keeper") as recorder:
            recorder.reset(seed=9)
            for _ in range(5):
                recorder.step(0)
            path = recorder.save(tmp_path / "replays" / "run.json")

            assert load_replay(path) == recorder.get_replay_data()

    def test_save_refuses_overwrite(self, config, tmp_path):
        recorder = ReplayRecorder(DashEnv(config=config))
        recorder.reset(seed=9)
        recorder.step(0)
        path = recorder.save(tmp_path / "run.json")

        with pytest.raises(FileExistsError):
            recorder.save(path, overwrite=False)

    def test_generated_filename(self, tmp_path):
        path = generate_replay_filename("dodger", seed=5, directory=tmp_path)

        assert path.parent == tmp_path
        assert path.name.startswith("dodger_")
        assert path.name.endswith("_s5.json")
