from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from sum_blocks_rl.game import GameConfig, GameMode, Outcome, SumBlocksGame


def _compute_action_mask(game: SumBlocksGame) -> np.ndarray:
    # A click is only meaningful on an occupied cell
    return (game.grid.ids() != 0).reshape(-1)


class SumBlocksEnv(gym.Env):
    """Click-a-cell environment over a Sum Blocks session.

    Action ``a`` clicks cell ``divmod(a, cols)``. In time mode the countdown
    advances one second every ``steps_per_second`` steps.
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, mode: GameMode | str = GameMode.CLASSIC,
                 render_mode: Optional[str] = None,
                 steps_per_second: int = 2,
                 invalid_action_penalty: float = -0.1,
                 exceed_penalty: float = -0.05,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -1.0,
                 max_episode_steps: int = 5000) -> None:
        super().__init__()
        self.game = SumBlocksGame(config)
        self.mode = GameMode(mode)
        self.render_mode = render_mode

        # Reward shaping parameters
        self.steps_per_second = max(1, int(steps_per_second))
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.exceed_penalty = float(exceed_penalty)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)

        cfg = self.game.config
        rows, cols = cfg.rows, cfg.cols

        # Observation space: block values (0 = empty), current selection and the target
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=max(cfg.block_values), shape=(rows, cols), dtype=np.int16),
                "selected": spaces.Box(low=0, high=1, shape=(rows, cols), dtype=np.int8),
                "target": spaces.Box(low=0, high=cfg.max_target, shape=(1,), dtype=np.int16),
                "countdown": spaces.Box(low=0, high=cfg.tick_interval, shape=(1,), dtype=np.int16),
            }
        )

        self.action_space = spaces.Discrete(rows * cols)

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        snap = self.game.snapshot()
        return {
            "grid": snap.values.astype(np.int16),
            "selected": snap.selected_mask().astype(np.int8),
            "target": np.array([snap.target], dtype=np.int16),
            "countdown": np.array([snap.countdown], dtype=np.int16),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "level": self.game.level,
            "max_height": self.game.grid.get_max_height(),
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        mode = (options or {}).get("mode", self.mode)
        self.game.start(mode, seed=seed)
        self._steps = 0
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def step(self, action: int):
        action = int(action)
        truncated = False

        _, gained, _, step_info = self.game.step(action)
        outcome = step_info["outcome"]

        reward_components: Dict[str, float] = {"points": float(gained)}
        if outcome == Outcome.IGNORED:
            reward_components["invalid"] = self.invalid_action_penalty
        elif outcome == Outcome.EXCEEDED:
            reward_components["exceeded"] = self.exceed_penalty

        self._steps += 1
        if self.game.mode == GameMode.TIME and self._steps % self.steps_per_second == 0:
            self.game.advance_clock(1)

        reward_components["step"] = self.step_penalty
        terminated = bool(self.game.game_over)
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        if self._steps >= self.max_episode_steps:
            truncated = True

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["outcome"] = outcome
        info["reward_components"] = reward_components
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            # Shade cells by value; selected cells drawn in orange
            grid = self._last_obs["grid"] if self._last_obs is not None else self.game.grid.values()
            selected = self._last_obs["selected"] if self._last_obs is not None else np.zeros_like(grid)
            top = max(self.game.config.block_values)
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    v = int(grid[y, x])
                    if v == 0:
                        color = (30, 30, 36)
                    elif selected[y, x]:
                        color = (242, 125, 38)
                    else:
                        shade = 90 + int(150 * v / top)
                        color = (shade, shade, shade)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        # human rendering delegated to external UI; noop
        return None

    def close(self) -> None:
        pass
