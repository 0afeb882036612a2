from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


DEFAULT_BLOCK_VALUES: Tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7, 8, 9)


@dataclass(frozen=True)
class Block:
    id: int
    value: int


class BlockFactory:
    """Creates numbered blocks with ids unique for the factory's lifetime."""

    def __init__(self, values: Sequence[int] = DEFAULT_BLOCK_VALUES, rng: Optional[random.Random] = None) -> None:
        if len(values) == 0:
            raise ValueError("values must not be empty")
        if any(int(v) <= 0 for v in values):
            raise ValueError(f"block values must be positive, got {tuple(values)}")
        self.values = tuple(int(v) for v in values)
        self.rng = rng or random.Random()
        self._ids = itertools.count(1)

    def create(self, value: Optional[int] = None) -> Block:
        if value is None:
            value = self.rng.choice(self.values)
        elif int(value) <= 0:
            raise ValueError(f"block value must be positive, got {value}")
        return Block(id=next(self._ids), value=int(value))

    def create_row(self, length: int) -> list[Block]:
        return [self.create() for _ in range(length)]
