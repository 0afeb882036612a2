"""Game module for Sum Blocks RL.

Exports the core game engine and supporting classes:
- Block, BlockFactory: numbered blocks with unique ids
- GameGrid: grid of optional blocks with row insertion and gravity
- TargetGenerator: random target sums
- SelectionTracker: selection accumulation and sum classification
- ScoringRules: points per cleared block
- SumBlocksGame: session state machine for classic and time modes
"""

from .blocks import Block, BlockFactory
from .grid import GameGrid, InsertResult
from .target import TargetGenerator
from .selection import Outcome, SelectionTracker, ToggleResult, selection_sum
from .rules import ScoringRules
from .storage import BestScoreStore, InMemoryBestScoreStore, JsonBestScoreStore
from .core import GameConfig, GameMode, GameSnapshot, SessionState, SumBlocksGame

__all__ = [
    "Block",
    "BlockFactory",
    "GameGrid",
    "InsertResult",
    "TargetGenerator",
    "Outcome",
    "SelectionTracker",
    "ToggleResult",
    "selection_sum",
    "ScoringRules",
    "BestScoreStore",
    "InMemoryBestScoreStore",
    "JsonBestScoreStore",
    "GameConfig",
    "GameMode",
    "GameSnapshot",
    "SessionState",
    "SumBlocksGame",
]
