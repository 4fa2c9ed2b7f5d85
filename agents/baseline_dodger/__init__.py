"""
Baseline Dodger Agent Package

A simple heuristic agent that steers toward the lane with the most room
using the hazard_gap/reward_gap observations. Serves as a benchmark and example.
"""

from .agent import DashAgent, create_agent

__all__ = ["DashAgent", "create_agent"]
