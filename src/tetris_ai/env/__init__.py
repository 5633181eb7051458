"""Gymnasium environments for tetris_ai."""

from __future__ import annotations

from gymnasium.envs.registration import register

# One action = one full placement (rotation, left column)
register(
    id="TetrisPlacement-v0",
    entry_point="tetris_ai.env.placement_env:TetrisPlacementEnv",
)

__all__ = ["TetrisPlacement-v0"]
