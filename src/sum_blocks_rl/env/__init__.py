"""Gymnasium environments for Sum Blocks RL."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Classic mode: a row is added after every successful match
register(
    id="SumBlocks-Classic-v0",
    entry_point="sum_blocks_rl.env.sum_blocks_env:SumBlocksEnv",
    kwargs={"mode": "classic"},
)

# Time mode: a row is added whenever the countdown expires
register(
    id="SumBlocks-Time-v0",
    entry_point="sum_blocks_rl.env.sum_blocks_env:SumBlocksEnv",
    kwargs={"mode": "time"},
)

__all__ = ["SumBlocks-Classic-v0", "SumBlocks-Time-v0"]
