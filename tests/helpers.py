"""Shared helpers for building deterministic boards in tests."""

from sum_blocks_rl.game import GameGrid


def fill_grid(grid: GameGrid, layout):
    """Overwrite `grid` from a list of rows of ints; 0 leaves the cell empty.

    Returns a dict mapping (row, col) to the block placed there.
    """
    grid.reset()
    placed = {}
    for row, values in enumerate(layout):
        for col, value in enumerate(values):
            if value:
                block = grid.factory.create(value)
                grid.cells[row, col] = block
                placed[(row, col)] = block
    return placed


def column_values(grid: GameGrid, col: int):
    return [int(v) for v in grid.values()[:, col]]
