from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, Sequence, Tuple

from .blocks import Block


logger = logging.getLogger(__name__)


class Outcome(IntEnum):
    CONTINUE = 0
    EXACT_MATCH = 1
    EXCEEDED = 2
    IGNORED = 3


@dataclass(frozen=True)
class ToggleResult:
    selection: Tuple[int, ...]
    outcome: Outcome
    # Ids consumed by an exact match; empty for every other outcome
    matched: Tuple[int, ...] = ()


def selection_sum(selection: Sequence[int], live_blocks: Iterable[Block]) -> int:
    """Sum the values of the selected ids. Ids with no live block count as 0."""
    values: Dict[int, int] = {block.id: block.value for block in live_blocks}
    total = 0
    for block_id in selection:
        if block_id not in values:
            logger.warning("selected id %s has no live block; counting it as 0", block_id)
            continue
        total += values[block_id]
    return total


class SelectionTracker:
    """Accumulates clicked block ids and classifies the running sum against a target.

    The tracker holds no state of its own: the caller passes the current
    selection in and stores the returned one.
    """

    def toggle(
        self,
        block_id: int,
        selection: Sequence[int],
        live_blocks: Iterable[Block],
        target: int,
        locked: bool = False,
    ) -> ToggleResult:
        current = tuple(selection)
        if locked:
            return ToggleResult(selection=current, outcome=Outcome.IGNORED)

        if block_id in current:
            # Deselecting never completes a match
            remaining = tuple(i for i in current if i != block_id)
            return ToggleResult(selection=remaining, outcome=Outcome.CONTINUE)

        grown = current + (block_id,)
        total = selection_sum(grown, live_blocks)
        if total == target:
            return ToggleResult(selection=(), outcome=Outcome.EXACT_MATCH, matched=grown)
        if total > target:
            return ToggleResult(selection=(), outcome=Outcome.EXCEEDED)
        return ToggleResult(selection=grown, outcome=Outcome.CONTINUE)
