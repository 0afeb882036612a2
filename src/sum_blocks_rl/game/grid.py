from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from .blocks import Block, BlockFactory


logger = logging.getLogger(__name__)


@dataclass
class InsertResult:
    game_over: bool


class GameGrid:
    """Fixed rows x cols grid of optional numbered blocks.

    Cells hold a `Block` or None. Row 0 is the top of the board; new rows are
    pushed in at row ``rows - 1`` and everything above moves up by one.
    """

    def __init__(self, rows: int, cols: int, factory: Optional[BlockFactory] = None) -> None:
        if rows < 1 or cols < 1:
            raise ValueError(f"grid must be at least 1x1, got {rows}x{cols}")
        self.rows = int(rows)
        self.cols = int(cols)
        self.factory = factory or BlockFactory()
        self.cells = np.full((self.rows, self.cols), None, dtype=object)

    def reset(self) -> None:
        self.cells.fill(None)

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def block_at(self, row: int, col: int) -> Optional[Block]:
        if not self.is_inside(row, col):
            raise IndexError(f"cell ({row}, {col}) outside {self.rows}x{self.cols} grid")
        return self.cells[row, col]

    def seed_rows(self, count: int) -> None:
        """Fill the bottom `count` rows with fresh blocks, leaving the rest empty."""
        if not 0 <= count <= self.rows:
            raise ValueError(f"cannot seed {count} rows into a grid of {self.rows}")
        self.reset()
        for row in range(self.rows - count, self.rows):
            self.cells[row, :] = self._new_row()

    def _new_row(self) -> np.ndarray:
        row = np.full(self.cols, None, dtype=object)
        for col, block in enumerate(self.factory.create_row(self.cols)):
            row[col] = block
        return row

    def is_top_row_occupied(self) -> bool:
        return any(cell is not None for cell in self.cells[0])

    def insert_row(self) -> InsertResult:
        """Shift all rows up by one and push a full new row at the bottom.

        Fails without touching the grid if the top row holds any block.
        """
        if self.is_top_row_occupied():
            logger.debug("insert_row refused: top row occupied")
            return InsertResult(game_over=True)
        self.cells[:-1] = self.cells[1:].copy()
        self.cells[-1] = self._new_row()
        return InsertResult(game_over=False)

    def remove_blocks(self, ids: Iterable[int]) -> int:
        targets = set(ids)
        if not targets:
            return 0
        removed = 0
        for row in range(self.rows):
            for col in range(self.cols):
                cell = self.cells[row, col]
                if cell is not None and cell.id in targets:
                    self.cells[row, col] = None
                    removed += 1
        return removed

    def compact_gravity(self) -> None:
        # Stable per-column fall: surviving blocks keep their vertical order
        for col in range(self.cols):
            column = [cell for cell in self.cells[:, col] if cell is not None]
            self.cells[:, col] = None
            for offset, block in enumerate(column):
                self.cells[self.rows - len(column) + offset, col] = block

    def flatten(self) -> List[Block]:
        return [cell for cell in self.cells.flat if cell is not None]

    def count_blocks(self) -> int:
        return len(self.flatten())

    def get_max_height(self) -> int:
        # row 0 is top; find first non-empty row from the top
        for row in range(self.rows):
            if any(cell is not None for cell in self.cells[row]):
                return self.rows - row
        return 0

    def values(self) -> np.ndarray:
        out = np.zeros((self.rows, self.cols), dtype=np.int16)
        for (row, col), cell in np.ndenumerate(self.cells):
            if cell is not None:
                out[row, col] = cell.value
        return out

    def ids(self) -> np.ndarray:
        out = np.zeros((self.rows, self.cols), dtype=np.int64)
        for (row, col), cell in np.ndenumerate(self.cells):
            if cell is not None:
                out[row, col] = cell.id
        return out
