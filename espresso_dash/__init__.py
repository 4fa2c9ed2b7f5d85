"""
Espresso Dash Package
=====================

Turbo Espresso Dash: a lane-dodging delivery game. The car holds a fixed
position while coffee beans and potholes travel toward it down parallel
lanes. Beans fill the caffeine meter and raise speed; a pothole ends the run;
a full meter delivers the espresso.

This package contains:

- dash_core: the deterministic simulation core, Gymnasium wrapper and replays
- evaluation: seeded multi-episode agent evaluation

All tunable parameters are in game_config.yaml.
"""
