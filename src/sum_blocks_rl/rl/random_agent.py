from __future__ import annotations

import random

import gymnasium as gym
import numpy as np

import sum_blocks_rl.env  # noqa: F401  ensure registration


def run_random(steps: int = 200, env_id: str = "SumBlocks-Classic-v0", seed: int | None = None) -> float:
    env = gym.make(env_id)
    rng = random.Random(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        # Prefer clicks on occupied cells
        valid = np.flatnonzero(info.get("action_mask", []))
        if valid.size > 0:
            action = int(rng.choice(list(valid)))
        else:
            action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f} over {episodes} finished episodes")
    return total_reward


if __name__ == "__main__":  # pragma: no cover
    run_random()
