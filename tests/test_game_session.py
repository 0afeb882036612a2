"""
Tests for the game session: matches, scoring, row growth, timer and pause.
"""

import dataclasses

import numpy as np
import pytest

from sum_blocks_rl.game import (
    GameConfig,
    GameMode,
    InMemoryBestScoreStore,
    Outcome,
    SessionState,
    SumBlocksGame,
)

from helpers import fill_grid


@pytest.fixture
def config():
    return GameConfig(rows=4, cols=4, initial_rows=0, tick_interval=3, random_seed=42)


@pytest.fixture
def store():
    return InMemoryBestScoreStore()


@pytest.fixture
def game(config, store):
    return SumBlocksGame(config=config, store=store)


class ReadOnlyStore:
    def load_best_score(self):
        return None

    def save_best_score(self, score):
        raise OSError("read-only file system")


def start_with(game, mode, layout, target):
    game.start(mode)
    placed = fill_grid(game.grid, layout)
    game.target = target
    return placed


class TestStart:
    """Test session initialization."""

    def test_new_game_is_not_started(self, game):
        assert game.state == SessionState.NOT_STARTED
        assert game.mode is None

    def test_start_seeds_bottom_rows(self):
        game = SumBlocksGame(GameConfig(rows=10, cols=6, initial_rows=4, random_seed=1))
        game.start(GameMode.CLASSIC)
        values = game.grid.values()
        assert np.all(values[:6] == 0)
        assert np.all(values[6:] > 0)
        assert game.state == SessionState.PLAYING
        assert game.score == 0
        assert game.config.min_target <= game.target <= game.config.max_target

    def test_start_accepts_mode_name(self, game):
        game.start("time")
        assert game.mode == GameMode.TIME

    def test_same_seed_same_board(self):
        a = SumBlocksGame(GameConfig(rows=6, cols=4, initial_rows=3))
        b = SumBlocksGame(GameConfig(rows=6, cols=4, initial_rows=3))
        a.start(GameMode.CLASSIC, seed=5)
        b.start(GameMode.CLASSIC, seed=5)
        assert np.array_equal(a.grid.values(), b.grid.values())
        assert a.target == b.target

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            GameConfig(rows=4, initial_rows=4)
        with pytest.raises(ValueError):
            GameConfig(min_target=0)
        with pytest.raises(ValueError):
            GameConfig(min_target=10, max_target=5)
        with pytest.raises(ValueError):
            GameConfig(block_values=(0, 3))

    def test_config_is_frozen(self, config):
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.rows = 5
        assert GameConfig(block_values=[1, 2]).block_values == (1, 2)

    def test_leave_returns_to_mode_selection(self, game):
        placed = start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [1, 2, 0, 0]], target=9)
        game.click(placed[(3, 0)].id)
        game.leave()
        assert game.state == SessionState.NOT_STARTED
        assert game.mode is None
        assert game.selection == ()
        assert game.click(placed[(3, 1)].id).outcome == Outcome.IGNORED
        assert game.advance_clock(10) == 0
        game.start(GameMode.CLASSIC)
        assert game.state == SessionState.PLAYING
        assert game.score == 0


class TestMatches:
    """Test selection outcomes applied to the session."""

    def test_exact_match_scenario(self, game):
        placed = start_with(game, GameMode.TIME, [
            [2, 3, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
        ], target=5)

        first = game.click_cell(0, 0)
        assert first.outcome == Outcome.CONTINUE
        assert game.selection == (placed[(0, 0)].id,)

        second = game.click_cell(0, 1)
        assert second.outcome == Outcome.EXACT_MATCH
        assert game.selection == ()
        assert game.grid.block_at(0, 0) is None
        assert game.grid.block_at(0, 1) is None
        assert game.score == 20

    def test_match_regenerates_target_and_settles(self, game):
        start_with(game, GameMode.TIME, [
            [0, 0, 0, 0],
            [4, 0, 0, 0],
            [1, 0, 0, 0],
            [9, 0, 0, 0],
        ], target=10)
        game.click_cell(2, 0)
        game.click_cell(3, 0)
        assert game.score == 20
        assert [int(v) for v in game.grid.values()[:, 0]] == [0, 0, 0, 4]
        assert game.config.min_target <= game.target <= game.config.max_target

    def test_exceeded_scenario(self, game):
        start_with(game, GameMode.TIME, [
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [6, 1, 0, 0],
        ], target=5)
        game.click_cell(3, 1)

        result = game.click_cell(3, 0)

        assert result.outcome == Outcome.EXCEEDED
        assert game.selection == ()
        assert game.grid.count_blocks() == 2
        assert game.score == 0

    def test_score_accumulates_per_block(self, game):
        start_with(game, GameMode.TIME, [
            [1, 1, 1, 0],
            [2, 2, 0, 0],
            [3, 3, 3, 3],
            [5, 5, 5, 5],
        ], target=3)
        # k = 3 (three ones)
        for col in range(3):
            game.click_cell(0, col)
        assert game.score == 30
        # k = 1 (the three left in column 2)
        game.target = 3
        block = game.grid.block_at(2, 2)
        assert block.value == 3
        game.click(block.id)
        assert game.score == 40
        # k = 2 (two fives)
        game.target = 10
        game.click_cell(3, 0)
        game.click_cell(3, 1)
        assert game.score == 10 * (3 + 1 + 2)
        assert game.matches == 3

    def test_classic_mode_adds_row_after_match(self, game):
        start_with(game, GameMode.CLASSIC, [
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [5, 1, 0, 0],
        ], target=5)
        game.click_cell(3, 0)
        assert game.level == 1
        assert game.grid.count_blocks() == 1 + game.config.cols
        assert all(game.grid.block_at(3, c) is not None for c in range(game.config.cols))

    def test_time_mode_does_not_add_row_after_match(self, game):
        start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [5, 1, 0, 0]], target=5)
        game.click_cell(3, 0)
        assert game.level == 0
        assert game.grid.count_blocks() == 1

    def test_classic_match_with_full_top_row_ends_game(self, game):
        start_with(game, GameMode.CLASSIC, [
            [1, 1, 1, 1],
            [1, 1, 1, 1],
            [1, 1, 1, 1],
            [1, 1, 1, 2],
        ], target=2)
        game.click_cell(3, 3)
        # the match leaves the top row of columns 0..2 full
        assert game.state == SessionState.GAME_OVER
        assert game.game_over
        assert game.score == 10

    def test_click_empty_cell_is_ignored(self, game):
        start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [1, 0, 0, 0]], target=5)
        result = game.click_cell(0, 0)
        assert result.outcome == Outcome.IGNORED


class TestRowGrowthAndGameOver:
    """Test tick-driven row insertion and the sticky game over."""

    def test_tick_with_full_top_row_is_game_over(self, game):
        start_with(game, GameMode.TIME, [
            [1, 2, 3, 4],
            [1, 2, 3, 4],
            [1, 2, 3, 4],
            [1, 2, 3, 4],
        ], target=20)
        before = game.grid.values()

        game.tick()

        assert game.state == SessionState.GAME_OVER
        assert np.array_equal(game.grid.values(), before)

    def test_game_over_is_sticky(self, game):
        placed = start_with(game, GameMode.TIME, [[1, 1, 1, 1]] * 4, target=2)
        game.tick()
        assert game.game_over
        assert game.tick() is False
        result = game.click(placed[(3, 0)].id)
        assert result.outcome == Outcome.IGNORED
        assert game.game_over

    def test_restart_after_game_over(self, game):
        start_with(game, GameMode.TIME, [[1, 1, 1, 1]] * 4, target=2)
        game.score = 50
        game.tick()
        game.restart()
        assert game.state == SessionState.PLAYING
        assert game.mode == GameMode.TIME
        assert game.score == 0
        assert game.selection == ()
        assert game.countdown == game.config.tick_interval

    def test_countdown_fires_tick(self, game):
        game.start(GameMode.TIME)
        assert game.countdown == 3
        assert game.advance_clock(2) == 0
        assert game.countdown == 1
        assert game.advance_clock(1) == 1
        assert game.countdown == 3
        assert game.level == 1
        assert game.grid.count_blocks() == game.config.cols

    def test_countdown_only_runs_in_time_mode(self, game):
        game.start(GameMode.CLASSIC)
        assert game.advance_clock(10) == 0
        assert game.level == 0

    def test_long_clock_run_ends_game(self, game):
        game.start(GameMode.TIME)
        game.advance_clock(100)
        assert game.game_over
        # four rows fit in the grid; the fifth insertion is refused
        assert game.level == game.config.rows


class TestPause:
    """Test pause gating."""

    def test_pause_blocks_clicks_and_ticks(self, game):
        placed = start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [1, 2, 0, 0]], target=3)
        game.pause()
        assert game.state == SessionState.PAUSED
        assert game.click(placed[(3, 0)].id).outcome == Outcome.IGNORED
        assert game.tick() is False
        assert game.advance_clock(10) == 0
        assert game.selection == ()
        assert game.grid.count_blocks() == 2

    def test_resume_resets_countdown(self, game):
        game.start(GameMode.TIME)
        game.advance_clock(2)
        game.toggle_pause()
        assert game.paused
        game.toggle_pause()
        assert game.state == SessionState.PLAYING
        assert game.countdown == game.config.tick_interval

    def test_pause_after_game_over_is_noop(self, game):
        start_with(game, GameMode.TIME, [[1, 1, 1, 1]] * 4, target=2)
        game.tick()
        game.toggle_pause()
        assert game.state == SessionState.GAME_OVER


class TestBestScore:
    """Test best score tracking and persistence."""

    def test_best_score_loaded_from_store(self, config):
        game = SumBlocksGame(config=config, store=InMemoryBestScoreStore(120))
        assert game.best_score == 120

    def test_best_score_saved_when_beaten(self, game, store):
        start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [2, 3, 0, 0]], target=5)
        game.click_cell(3, 0)
        game.click_cell(3, 1)
        assert game.best_score == 20
        assert store.best_score == 20

    def test_best_score_never_decreases(self, config):
        store = InMemoryBestScoreStore(500)
        game = SumBlocksGame(config=config, store=store)
        start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [2, 3, 0, 0]], target=5)
        game.click_cell(3, 0)
        game.click_cell(3, 1)
        assert game.best_score == 500
        assert store.best_score == 500
        game.restart()
        assert game.best_score == 500

    def test_failed_save_still_finishes_turn(self, config):
        game = SumBlocksGame(config=config, store=ReadOnlyStore())
        start_with(game, GameMode.CLASSIC, [[0] * 4, [0] * 4, [0] * 4, [2, 3, 0, 0]], target=5)
        game.click_cell(3, 0)
        result = game.click_cell(3, 1)
        assert result.outcome == Outcome.EXACT_MATCH
        assert game.score == 20
        assert game.best_score == 20
        assert game.matches == 1
        # the classic row was still inserted after the match
        assert game.level == 1
        assert game.grid.count_blocks() == game.config.cols
        assert game.config.min_target <= game.target <= game.config.max_target
        assert game.state == SessionState.PLAYING


class TestAgentStep:
    """Test the flat-action step interface."""

    def test_step_reports_points(self, game):
        start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [2, 3, 0, 0]], target=5)
        _, reward, done, info = game.step(3 * 4 + 0)
        assert reward == 0
        assert info["outcome"] == Outcome.CONTINUE
        snap, reward, done, info = game.step(3 * 4 + 1)
        assert reward == 20
        assert not done
        assert info["outcome"] == Outcome.EXACT_MATCH
        assert snap.score == 20

    def test_step_out_of_range(self, game):
        game.start(GameMode.CLASSIC)
        with pytest.raises(IndexError):
            game.step(16)

    def test_snapshot_marks_selection(self, game):
        start_with(game, GameMode.TIME, [[0] * 4, [0] * 4, [0] * 4, [2, 3, 0, 0]], target=9)
        game.click_cell(3, 1)
        snap = game.snapshot()
        assert snap.selected_mask()[3, 1]
        assert snap.selected_mask().sum() == 1
        assert game.selected_sum == 3
        assert snap.mode == GameMode.TIME
