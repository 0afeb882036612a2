from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .blocks import DEFAULT_BLOCK_VALUES, BlockFactory
from .grid import GameGrid
from .rules import ScoringRules
from .selection import Outcome, SelectionTracker, ToggleResult, selection_sum
from .storage import BestScoreStore, InMemoryBestScoreStore
from .target import TargetGenerator


logger = logging.getLogger(__name__)


class GameMode(str, Enum):
    CLASSIC = "classic"  # a row is pushed in after every successful match
    TIME = "time"        # a row is pushed in whenever the countdown runs out


class SessionState(IntEnum):
    NOT_STARTED = 0
    PLAYING = 1
    PAUSED = 2
    GAME_OVER = 3


@dataclass(frozen=True)
class GameConfig:
    rows: int = 10
    cols: int = 6
    initial_rows: int = 4
    tick_interval: int = 10  # seconds between forced rows in time mode
    min_target: int = 10
    max_target: int = 25
    block_values: Tuple[int, ...] = DEFAULT_BLOCK_VALUES
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.rows < 2 or self.cols < 1:
            raise ValueError(f"grid must be at least 2x1, got {self.rows}x{self.cols}")
        if not 0 <= self.initial_rows < self.rows:
            raise ValueError(f"initial_rows must be in [0, {self.rows - 1}], got {self.initial_rows}")
        if self.tick_interval < 1:
            raise ValueError(f"tick_interval must be >= 1, got {self.tick_interval}")
        if self.min_target < 1 or self.max_target < self.min_target:
            raise ValueError(f"invalid target range [{self.min_target}, {self.max_target}]")
        object.__setattr__(self, "block_values", tuple(int(v) for v in self.block_values))
        if not self.block_values or min(self.block_values) <= 0:
            raise ValueError(f"block values must be positive, got {self.block_values}")


@dataclass(frozen=True, eq=False)
class GameSnapshot:
    """Read-only view of a session handed to renderers and agents."""

    values: np.ndarray
    ids: np.ndarray
    selection: Tuple[int, ...]
    target: int
    score: int
    best_score: int
    game_over: bool
    paused: bool
    mode: Optional[GameMode]
    countdown: int
    level: int
    state: SessionState = SessionState.NOT_STARTED

    def selected_mask(self) -> np.ndarray:
        return np.isin(self.ids, np.asarray(self.selection, dtype=np.int64)) & (self.ids != 0)


class SumBlocksGame:
    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[BestScoreStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.store = store if store is not None else InMemoryBestScoreStore()
        self.rng = random.Random(self.config.random_seed)
        self.factory = BlockFactory(self.config.block_values, self.rng)
        self.grid = GameGrid(self.config.rows, self.config.cols, self.factory)
        self.targets = TargetGenerator(self.config.min_target, self.config.max_target, self.rng)
        self.tracker = SelectionTracker()

        self.mode: Optional[GameMode] = None
        self.state = SessionState.NOT_STARTED
        self.score = 0
        self.best_score = int(self.store.load_best_score() or 0)
        self.target = 0
        self.selection: Tuple[int, ...] = ()
        self.countdown = self.config.tick_interval
        self.level = 0
        self.matches = 0

    @property
    def game_over(self) -> bool:
        return self.state == SessionState.GAME_OVER

    @property
    def paused(self) -> bool:
        return self.state == SessionState.PAUSED

    @property
    def selected_sum(self) -> int:
        return selection_sum(self.selection, self.grid.flatten())

    # ---------- Lifecycle ----------
    def start(self, mode: GameMode | str = GameMode.CLASSIC, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.mode = GameMode(mode)
        self.grid.seed_rows(self.config.initial_rows)
        self.score = 0
        self.selection = ()
        self.target = self.targets.next()
        self.countdown = self.config.tick_interval
        self.level = 0
        self.matches = 0
        self.state = SessionState.PLAYING
        logger.info("started %s game, target %d", self.mode.value, self.target)

    def restart(self, seed: Optional[int] = None) -> None:
        self.start(self.mode or GameMode.CLASSIC, seed=seed)

    def leave(self) -> None:
        """Abandon the current game and go back to mode selection."""
        self.mode = None
        self.selection = ()
        self.countdown = self.config.tick_interval
        self.state = SessionState.NOT_STARTED

    def pause(self) -> None:
        if self.state == SessionState.PLAYING:
            self.state = SessionState.PAUSED

    def resume(self) -> None:
        if self.state == SessionState.PAUSED:
            self.state = SessionState.PLAYING
            # Countdown restarts from full after a pause
            self.countdown = self.config.tick_interval

    def toggle_pause(self) -> None:
        if self.state == SessionState.PAUSED:
            self.resume()
        else:
            self.pause()

    # ---------- Player input ----------
    def click(self, block_id: int) -> ToggleResult:
        result = self.tracker.toggle(
            block_id,
            self.selection,
            self.grid.flatten(),
            self.target,
            locked=self.state != SessionState.PLAYING,
        )
        if result.outcome == Outcome.IGNORED:
            return result
        self.selection = result.selection
        if result.outcome == Outcome.EXACT_MATCH:
            self._apply_match(result.matched)
        elif result.outcome == Outcome.EXCEEDED:
            logger.debug("selection exceeded target %d, cleared", self.target)
        return result

    def click_cell(self, row: int, col: int) -> ToggleResult:
        block = self.grid.block_at(row, col)
        if block is None:
            return ToggleResult(selection=self.selection, outcome=Outcome.IGNORED)
        return self.click(block.id)

    def _apply_match(self, matched: Tuple[int, ...]) -> None:
        # Applied synchronously: no click can land between detection and removal
        self.grid.remove_blocks(matched)
        self.grid.compact_gravity()
        self.selection = ()
        self.score += self.rules.score_for_match(len(matched))
        self.matches += 1
        logger.debug("matched %d blocks for target %d, score %d", len(matched), self.target, self.score)
        self.target = self.targets.next()
        if self.mode == GameMode.CLASSIC:
            self._insert_row()
        # Persist only once the turn is fully applied
        self._update_best_score()

    def _update_best_score(self) -> None:
        if self.score > self.best_score:
            self.best_score = self.score
            try:
                self.store.save_best_score(self.best_score)
            except OSError as exc:
                logger.warning("could not save best score %d: %s", self.best_score, exc)

    # ---------- Timer ----------
    def tick(self) -> bool:
        """Force a row insertion, as when the time-mode countdown expires."""
        if self.state != SessionState.PLAYING:
            return False
        self._insert_row()
        self.countdown = self.config.tick_interval
        return True

    def advance_clock(self, seconds: int = 1) -> int:
        """Run the time-mode countdown forward; returns the number of ticks fired."""
        if self.mode != GameMode.TIME:
            return 0
        fired = 0
        for _ in range(int(seconds)):
            if self.state != SessionState.PLAYING:
                break
            if self.countdown <= 1:
                fired += int(self.tick())
            else:
                self.countdown -= 1
        return fired

    def _insert_row(self) -> None:
        if self.state == SessionState.GAME_OVER:
            return
        result = self.grid.insert_row()
        if result.game_over:
            self.state = SessionState.GAME_OVER
            self.selection = ()
            logger.info("game over: score %d, best %d", self.score, self.best_score)
            return
        self.level += 1

    # ---------- Agent interface ----------
    def step(self, action: int) -> Tuple[GameSnapshot, int, bool, Dict[str, Any]]:
        if not 0 <= int(action) < self.config.rows * self.config.cols:
            raise IndexError(f"action {action} outside grid of {self.config.rows * self.config.cols} cells")
        if self.game_over:
            return self.snapshot(), 0, True, {"outcome": Outcome.IGNORED}
        row, col = divmod(int(action), self.config.cols)
        score_before = self.score
        result = self.click_cell(row, col)
        info = {
            "outcome": result.outcome,
            "matched": len(result.matched),
            "score": self.score,
            "level": self.level,
        }
        return self.snapshot(), self.score - score_before, self.game_over, info

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            values=self.grid.values(),
            ids=self.grid.ids(),
            selection=self.selection,
            target=self.target,
            score=self.score,
            best_score=self.best_score,
            game_over=self.game_over,
            paused=self.paused,
            mode=self.mode,
            countdown=self.countdown,
            level=self.level,
            state=self.state,
        )
