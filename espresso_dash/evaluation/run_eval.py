"""
Evaluation Harness
==================

Scores a dash agent over the fixed seed bank.

Usage:
    python -m espresso_dash.evaluation.run_eval --agent agents/baseline_dodger
    python -m espresso_dash.evaluation.run_eval --agent agents/baseline_dodger --replays runs/

Every seed is played through a ReplayRecorder, so any run can be written to
disk and checked again later with ``verify_replay``.

An agent module exposes a ``DashAgent`` class, a ``create_agent`` factory or
a module-level ``act(obs)`` function. Actions are 0, 1 or 2.
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from espresso_dash.dash_core.config_loader import GameConfig, load_config
from espresso_dash.dash_core.env_gym import DashEnv
from espresso_dash.dash_core.replay_recorder import ReplayRecorder

SEED_BANK_PATH = Path(__file__).with_name("seed_bank.json")

AgentFn = Callable[[Dict[str, np.ndarray]], int]


@dataclass
class EvalResult:
    """Outcome of one seeded episode."""
    seed: int
    final_score: int
    distance: float
    beans_collected: int
    delivery_made: bool
    ticks: int
    termination_reason: str
    elapsed_time: float
    actions: Optional[List[int]] = None

    @classmethod
    def from_replay(
        cls,
        replay: Dict[str, Any],
        info: Dict[str, Any],
        elapsed: float,
        keep_actions: bool = False
    ) -> "EvalResult":
        """Build a result from recorder data and the episode's last info dict."""
        return cls(
            seed=replay["seed"],
            final_score=replay["final_score"],
            distance=float(info["distance"]),
            beans_collected=int(info["beans_collected"]),
            delivery_made=bool(info["delivery_made"]),
            ticks=int(info["tick"]),
            termination_reason=replay["termination_reason"],
            elapsed_time=elapsed,
            actions=list(replay["actions"]) if keep_actions else None
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        del data["actions"]
        return data


@dataclass
class EvalSummary:
    """Aggregate statistics over a batch of seeds."""
    results: List[EvalResult]
    total_time: float

    @property
    def scores(self) -> np.ndarray:
        return np.array([r.final_score for r in self.results])

    @property
    def mean_score(self) -> float:
        return float(np.mean(self.scores))

    @property
    def std_score(self) -> float:
        return float(np.std(self.scores))

    @property
    def min_score(self) -> int:
        return int(np.min(self.scores))

    @property
    def max_score(self) -> int:
        return int(np.max(self.scores))

    @property
    def median_score(self) -> float:
        return float(np.median(self.scores))

    @property
    def mean_distance(self) -> float:
        return float(np.mean([r.distance for r in self.results]))

    @property
    def delivery_rate(self) -> float:
        """Fraction of episodes in which the caffeine meter filled."""
        return float(np.mean([r.delivery_made for r in self.results]))

    @property
    def end_reasons(self) -> Counter:
        """How many episodes ended by hazard, victory or tick cap."""
        return Counter(r.termination_reason for r in self.results)

    def format(self) -> str:
        """Human-readable summary table."""
        ends = ", ".join(f"{reason}={count}" for reason, count in sorted(self.end_reasons.items()))
        rows = [
            ("Seeds evaluated", f"{len(self.results)}"),
            ("Score", f"{self.mean_score:.2f} +/- {self.std_score:.2f}"),
            ("Score range", f"{self.min_score} .. {self.max_score} (median {self.median_score:.1f})"),
            ("Mean distance", f"{self.mean_distance:.1f} m"),
            ("Delivery rate", f"{self.delivery_rate:.0%}"),
            ("Endings", ends),
            ("Total time", f"{self.total_time:.2f}s"),
        ]
        rule = "-" * 50
        return "\n".join([rule] + [f"{label:<16} {value}" for label, value in rows] + [rule])

    def to_dict(self, agent_name: str) -> Dict[str, Any]:
        return {
            "agent": agent_name,
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
            "mean_score": self.mean_score,
            "std_score": self.std_score,
            "min_score": self.min_score,
            "max_score": self.max_score,
            "median_score": self.median_score,
            "mean_distance": self.mean_distance,
            "delivery_rate": self.delivery_rate,
            "end_reasons": dict(self.end_reasons),
            "total_time": self.total_time,
            "results": [r.to_dict() for r in self.results],
        }


def load_seed_bank(path: Optional[Union[str, Path]] = None) -> List[int]:
    """Seeds from a seed bank JSON file. Uses the bundled bank if path is None."""
    with open(path or SEED_BANK_PATH, "r") as f:
        return [int(seed) for seed in json.load(f)["seeds"]]


def _import_agent_module(agent_path: Path) -> ModuleType:
    agent_file = agent_path / "agent.py" if agent_path.is_dir() else agent_path
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    module_name = f"dash_agent_{agent_file.parent.name}"
    spec = importlib.util.spec_from_file_location(module_name, agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import agent from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    # Dataclasses in the agent module look themselves up in sys.modules
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def load_agent(agent_path: Union[str, Path]) -> AgentFn:
    """
    Resolve an agent's act function.

    Lookup order is ``DashAgent().act``, then ``create_agent().act``, then a
    module-level ``act``.

    Args:
        agent_path: Agent directory (containing agent.py) or the file itself.

    Returns:
        Callable mapping an observation dict to an action.

    Raises:
        FileNotFoundError: If there is no agent file.
        AttributeError: If the module exposes none of the entry points.
    """
    module = _import_agent_module(Path(agent_path))

    factory = getattr(module, "DashAgent", None) or getattr(module, "create_agent", None)
    if factory is not None:
        act = getattr(factory(), "act", None)
        if not callable(act):
            raise AttributeError(f"{factory.__name__} instances must define act(obs)")
        return act

    act = getattr(module, "act", None)
    if callable(act):
        return act

    raise AttributeError(
        f"{agent_path} defines no DashAgent class, create_agent factory or act function"
    )


def _reset_agent(agent_fn: AgentFn) -> None:
    # Bound act methods give access to the agent instance
    owner = getattr(agent_fn, "__self__", None)
    reset = getattr(owner, "reset", None)
    if callable(reset):
        reset()


def run_seed(
    agent_fn: AgentFn,
    seed: int,
    config: Optional[GameConfig] = None,
    keep_actions: bool = False,
    replay_dir: Optional[Union[str, Path]] = None,
    agent_name: str = "agent"
) -> EvalResult:
    """
    Play one episode on a seed.

    Args:
        agent_fn: Agent act function.
        seed: Episode seed.
        config: Game configuration. Uses default if None.
        keep_actions: Keep the action trace on the result.
        replay_dir: If given, the replay is written there as {agent}_s{seed}.json.
        agent_name: Name stored in the replay.

    Returns:
        EvalResult for the episode.
    """
    _reset_agent(agent_fn)

    with ReplayRecorder(DashEnv(config=config), agent_name=agent_name) as recorder:
        obs, info = recorder.reset(seed=seed)
        started = time.perf_counter()
        done = False
        while not done:
            obs, _, terminated, truncated, info = recorder.step(agent_fn(obs))
            done = terminated or truncated
        elapsed = time.perf_counter() - started

        replay = recorder.get_replay_data()
        if replay_dir is not None:
            recorder.save(Path(replay_dir) / f"{agent_name}_s{seed}.json")

    return EvalResult.from_replay(replay, info, elapsed, keep_actions)


def evaluate_agent(
    agent_fn: AgentFn,
    seeds: Optional[List[int]] = None,
    config: Optional[GameConfig] = None,
    record_actions: bool = False,
    verbose: bool = True,
    replay_dir: Optional[Union[str, Path]] = None,
    agent_name: str = "agent"
) -> EvalSummary:
    """
    Evaluate an agent over a list of seeds.

    Args:
        agent_fn: Agent act function.
        seeds: Seeds to play. Uses the bundled seed bank if None.
        config: Game configuration. Uses default if None.
        record_actions: Keep each episode's action trace on its result.
        verbose: Print per-seed lines and the summary table.
        replay_dir: Directory to write one replay per seed into.
        agent_name: Name stored in replays.

    Returns:
        EvalSummary over all seeds.

    Raises:
        ValueError: If the seed list is empty.
    """
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("At least one seed is required")

    started = time.perf_counter()
    results = []
    for index, seed in enumerate(seeds, start=1):
        result = run_seed(agent_fn, seed, config=config, keep_actions=record_actions,
                          replay_dir=replay_dir, agent_name=agent_name)
        results.append(result)
        if verbose:
            print(f"[{index:>3}/{len(seeds)}] seed {seed:<8} score {result.final_score:>6}  "
                  f"{result.distance:7.0f} m  {result.termination_reason}")

    summary = EvalSummary(results=results, total_time=time.perf_counter() - started)
    if verbose:
        print(summary.format())
    return summary


def save_results(summary: EvalSummary, agent_name: str, output_path: Union[str, Path]) -> Path:
    """Write the summary as JSON and return the path."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(summary.to_dict(agent_name), f, indent=2)
    print(f"Results saved to {path}")
    return path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Score a Turbo Espresso Dash agent on the seed bank")
    parser.add_argument("--agent", required=True, help="Agent directory or agent.py file")
    parser.add_argument("--seeds", default=None, help="Seed bank JSON (bundled bank if omitted)")
    parser.add_argument("--config", default=None, help="game_config.yaml (bundled config if omitted)")
    parser.add_argument("--output", default=None, help="Write the summary JSON here")
    parser.add_argument("--replays", default=None, help="Write one replay per seed into this directory")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    args = parser.parse_args(argv)

    try:
        agent_fn = load_agent(args.agent)
    except (OSError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    agent_name = Path(args.agent).stem if args.agent.endswith(".py") else Path(args.agent).name
    summary = evaluate_agent(
        agent_fn,
        seeds=load_seed_bank(args.seeds) if args.seeds else None,
        config=load_config(args.config) if args.config else None,
        verbose=not args.quiet,
        replay_dir=args.replays,
        agent_name=agent_name
    )

    if args.output:
        save_results(summary, agent_name, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
