"""Game module for the block puzzle engine.

Exports the engine and supporting classes:
- ShapeLibrary / ShapeFamily / Piece: polyomino families and their rotations
- PieceSelector: weighted bag picker with drought and duplicate handling
- Board: 10x10 occupancy grid, placement checks and line clearing
- ScoringRules: points per block and per cleared line
- GameSession: hand, score and terminal-state management
"""

from .shapes import (
    Piece,
    ShapeFamily,
    ShapeLibrary,
    all_rotations,
    as_shape,
    count_blocks_in_shape,
    default_library,
    rotate_clockwise,
    shapes_equal,
)
from .selector import PieceSelector, SelectorConfig
from .board import Board, ClearedCell, ClearResult
from .rules import ScoringRules
from .core import GameConfig, GameSession, GameState, PlacementOutcome, RejectReason

__all__ = [
    "Piece",
    "ShapeFamily",
    "ShapeLibrary",
    "all_rotations",
    "as_shape",
    "count_blocks_in_shape",
    "default_library",
    "rotate_clockwise",
    "shapes_equal",
    "PieceSelector",
    "SelectorConfig",
    "Board",
    "ClearedCell",
    "ClearResult",
    "ScoringRules",
    "GameConfig",
    "GameSession",
    "GameState",
    "PlacementOutcome",
    "RejectReason",
]
