"""
Tests for the Gymnasium environment API.
"""

import gymnasium as gym
import numpy as np
import pytest

import sum_blocks_rl.env  # noqa: F401
from sum_blocks_rl.env.sum_blocks_env import SumBlocksEnv
from sum_blocks_rl.env.wrappers import ResampleInvalidActionWrapper
from sum_blocks_rl.game import GameConfig, GameMode, Outcome

from helpers import fill_grid


@pytest.fixture
def env():
    env = SumBlocksEnv(GameConfig(rows=5, cols=4, initial_rows=2, tick_interval=2), mode=GameMode.TIME,
                       steps_per_second=1)
    yield env
    env.close()


class TestSumBlocksEnv:
    """Test single environment API."""

    def test_reset_returns_obs_and_info(self, env):
        obs, info = env.reset(seed=42)
        assert set(obs) == {"grid", "selected", "target", "countdown"}
        assert obs["grid"].shape == (5, 4)
        assert env.observation_space.contains(obs)
        assert info["action_mask"].shape == (20,)
        assert info["max_height"] == 2

    def test_action_mask_marks_occupied_cells(self, env):
        obs, info = env.reset(seed=1)
        mask = info["action_mask"]
        assert mask.sum() == 8
        assert np.array_equal(mask, (obs["grid"] != 0).reshape(-1))

    def test_empty_cell_click_is_penalized(self, env):
        env.reset(seed=1)
        _, reward, terminated, _, info = env.step(0)
        assert info["outcome"] == Outcome.IGNORED
        assert reward == pytest.approx(env.invalid_action_penalty)
        assert not terminated

    def test_match_reward(self, env):
        env.reset(seed=1)
        game = env.game
        fill_grid(game.grid, [[0] * 4, [0] * 4, [0] * 4, [0] * 4, [3, 7, 0, 0]])
        game.target = 10
        env.step(16)
        obs, reward, terminated, truncated, info = env.step(17)
        assert info["outcome"] == Outcome.EXACT_MATCH
        assert reward == pytest.approx(20.0)
        assert obs["selected"].sum() == 0

    def test_time_mode_clock_adds_rows_until_game_over(self, env):
        env.reset(seed=3)
        terminated = False
        for _ in range(50):
            _, reward, terminated, truncated, info = env.step(0)
            if terminated:
                break
        assert terminated
        assert info["reward_components"]["terminal"] == pytest.approx(env.terminal_penalty)

    def test_rgb_render(self):
        env = SumBlocksEnv(render_mode="rgb_array")
        env.reset(seed=0)
        img = env.render()
        rows, cols = env.game.config.rows, env.game.config.cols
        assert img.shape == (rows * 12, cols * 12, 3)
        env.close()


class TestRegistration:
    @pytest.mark.parametrize("env_id,mode", [
        ("SumBlocks-Classic-v0", GameMode.CLASSIC),
        ("SumBlocks-Time-v0", GameMode.TIME),
    ])
    def test_make(self, env_id, mode):
        env = gym.make(env_id)
        obs, info = env.reset(seed=0)
        assert env.unwrapped.game.mode == mode
        assert env.action_space.n == env.unwrapped.game.config.rows * env.unwrapped.game.config.cols
        env.close()

    def test_resample_wrapper_avoids_empty_cells(self):
        env = ResampleInvalidActionWrapper(gym.make("SumBlocks-Classic-v0"))
        env.reset(seed=0)
        for _ in range(20):
            _, _, terminated, _, info = env.step(0)
            assert info["outcome"] != Outcome.IGNORED
            if terminated:
                break
        env.close()
