from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    points_per_block: int = 10

    def score_for_match(self, blocks_cleared: int) -> int:
        if blocks_cleared <= 0:
            return 0
        return blocks_cleared * self.points_per_block
