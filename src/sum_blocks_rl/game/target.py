from __future__ import annotations

import random
from typing import Optional


class TargetGenerator:
    """Uniform integer targets over the closed range [min_target, max_target]."""

    def __init__(self, min_target: int, max_target: int, rng: Optional[random.Random] = None) -> None:
        if min_target < 1:
            raise ValueError(f"min_target must be >= 1, got {min_target}")
        if max_target < min_target:
            raise ValueError(f"max_target ({max_target}) < min_target ({min_target})")
        self.min_target = int(min_target)
        self.max_target = int(max_target)
        self.rng = rng or random.Random()

    def next(self) -> int:
        return self.rng.randint(self.min_target, self.max_target)
