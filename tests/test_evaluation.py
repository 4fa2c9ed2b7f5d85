"""
Tests for the evaluation harness and the baseline agent.
"""

import json
from pathlib import Path

import numpy as np
import pytest

from espresso_dash.dash_core.config_loader import load_config
from espresso_dash.dash_core.env_gym import DashEnv
from espresso_dash.dash_core.replay_recorder import load_replay, verify_replay
from espresso_dash.evaluation.run_eval import (
    evaluate_agent,
    load_agent,
    load_seed_bank,
    main,
    save_results,
)

AGENTS_DIR = Path(__file__).resolve().parent.parent / "agents"


@pytest.fixture
def config():
    return load_config(overrides={"caps": {"max_ticks": 600}})


@pytest.fixture
def dodger():
    return load_agent(str(AGENTS_DIR / "baseline_dodger"))


def gaps_obs(lane, hazard_gap, reward_gap=None):
    if reward_gap is None:
        reward_gap = [850.0] * len(hazard_gap)
    return {
        "player_lane": np.array(lane, dtype=np.int32),
        "hazard_gap": np.array(hazard_gap, dtype=np.float32),
        "reward_gap": np.array(reward_gap, dtype=np.float32),
    }


class TestSeedBank:

    def test_load_default(self):
        seeds = load_seed_bank()
        assert len(seeds) > 0
        assert all(isinstance(seed, int) for seed in seeds)
        assert len(set(seeds)) == len(seeds)


class TestLoadAgent:

    def test_class_agent(self, dodger):
        assert callable(dodger)

    def test_function_agent(self, tmp_path):
        agent_file = tmp_path / "agent.py"
        agent_file.write_text("def act(obs):\n    return 0\n")

        assert load_agent(str(agent_file))({}) == 0

    def test_missing_agent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path))

    def test_agent_without_act(self, tmp_path):
        agent_file = tmp_path / "agent.py"
        agent_file.write_text("VALUE = 1\n")

        with pytest.raises(AttributeError):
            load_agent(str(agent_file))


class TestBaselineDodger:

    def test_keeps_lane_when_clear(self, dodger):
        assert dodger(gaps_obs(1, [850.0, 850.0, 850.0, 850.0])) == 0

    def test_dodges_close_hazard(self, dodger):
        assert dodger(gaps_obs(1, [850.0, 50.0, 850.0, 850.0])) != 0

    def test_does_not_dodge_into_hazard(self, dodger):
        assert dodger(gaps_obs(1, [60.0, 50.0, 850.0, 850.0])) == 2

    def test_heads_for_bean(self, dodger):
        obs = gaps_obs(1, [850.0, 850.0, 850.0, 850.0], reward_gap=[850.0, 850.0, 300.0, 850.0])
        assert dodger(obs) == 2


class TestEvaluateAgent:

    def test_summary(self, dodger, config):
        summary = evaluate_agent(dodger, seeds=[1, 2], config=config, verbose=False)

        assert len(summary.results) == 2
        assert summary.min_score <= summary.mean_score <= summary.max_score
        assert 0.0 <= summary.delivery_rate <= 1.0
        for result in summary.results:
            assert result.termination_reason in ("hazard", "victory", "tick_cap")
            assert result.ticks <= 600

    def test_record_actions(self, config):
        summary = evaluate_agent(lambda obs: 0, seeds=[5], config=config,
                                 record_actions=True, verbose=False)

        assert summary.results[0].actions is not None
        assert set(summary.results[0].actions) == {0}

    def test_requires_seeds(self, config):
        with pytest.raises(ValueError):
            evaluate_agent(lambda obs: 0, seeds=[], config=config, verbose=False)

    def test_end_reasons_cover_every_seed(self, dodger, config):
        summary = evaluate_agent(dodger, seeds=[1, 2, 3], config=config, verbose=False)

        assert sum(summary.end_reasons.values()) == 3

    def test_replays_written_and_verifiable(self, dodger, config, tmp_path):
        evaluate_agent(dodger, seeds=[4], config=config, verbose=False,
                       replay_dir=tmp_path, agent_name="dodger")

        replay = load_replay(tmp_path / "dodger_s4.json")
        assert replay["seed"] == 4
        assert verify_replay(replay, DashEnv(config=config))

    def test_save_results(self, config, tmp_path):
        summary = evaluate_agent(lambda obs: 0, seeds=[5, 6], config=config, verbose=False)

        path = save_results(summary, "keeper", tmp_path / "out" / "results.json")

        data = json.loads(path.read_text())
        assert data["agent"] == "keeper"
        assert [r["seed"] for r in data["results"]] == [5, 6]
        assert "actions" not in data["results"][0]


def test_main_reports_missing_agent(tmp_path):
    assert main(["--agent", str(tmp_path / "nowhere")]) == 1
