from __future__ import annotations

import argparse
from typing import Optional

import gymnasium as gym
import pygame

import sum_blocks_rl.env  # ensure registration
from sum_blocks_rl.env.wrappers import ResampleInvalidActionWrapper
from sum_blocks_rl.visualization.renderer import Renderer
from .train_ppo import ENV_IDS


def build_env(mode: str, render_mode: Optional[str] = None, use_resample: bool = True) -> gym.Env:
    env = gym.make(ENV_IDS[mode], render_mode=render_mode)
    if use_resample:
        env = ResampleInvalidActionWrapper(env)
    return env


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--mode", choices=sorted(ENV_IDS), default="classic")
    p.add_argument("--model", type=str, required=True)
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--fps", type=int, default=10)
    return p


def main() -> None:
    args = build_parser().parse_args()
    if args.algo == "maskable":
        from sb3_contrib import MaskablePPO as Algo
    else:
        from stable_baselines3 import PPO as Algo

    env = build_env(args.mode, render_mode=None, use_resample=(args.algo == "ppo"))
    model = Algo.load(args.model, device="auto")

    game = env.unwrapped.game
    renderer = Renderer()

    pygame.init()
    try:
        screen = pygame.display.set_mode(renderer.window_size(game.config.rows, game.config.cols))
        pygame.display.set_caption("Sum Blocks - Agent Eval")
        clock = pygame.time.Clock()

        obs, info = env.reset()
        total_reward = 0.0
        steps = 0
        while steps < args.steps:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    return

            if args.algo == "maskable":
                action, _ = model.predict(obs, deterministic=True, action_masks=info["action_mask"])
            else:
                action, _ = model.predict(obs, deterministic=True)

            obs, reward, terminated, truncated, info = env.step(action)
            total_reward += float(reward)
            steps += 1
            if terminated or truncated:
                print(f"episode finished: score {game.score}, rows added {game.level}")
                obs, info = env.reset()

            renderer.draw(screen, game.snapshot(), game.selected_sum)
            pygame.display.set_caption(f"Sum Blocks - Agent Eval  step {steps}/{args.steps}  reward {total_reward:.1f}")
            clock.tick(args.fps)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    main()
