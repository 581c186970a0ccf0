from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from block_puzzle_engine.exceptions import ConfigError, SessionStateError

from .board import Board, ClearedCell
from .rules import ScoringRules
from .selector import PieceSelector, SelectorConfig
from .shapes import Piece, Shape, ShapeLibrary, as_shape, count_blocks_in_shape, default_library


logger = logging.getLogger(__name__)


@dataclass
class GameConfig:
    grid_size: int = 10
    hand_size: int = 3
    random_seed: Optional[int] = None

    def validate(self) -> None:
        for name in ("grid_size", "hand_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if self.grid_size < 1:
            raise ConfigError("grid_size must be >= 1")
        if self.hand_size < 1:
            raise ConfigError("hand_size must be >= 1")


class GameState(str, Enum):
    PLAYING = "playing"
    GAME_OVER = "game_over"


class RejectReason(str, Enum):
    INVALID_INDEX = "invalid_index"
    INVALID_PLACEMENT = "invalid_placement"
    GAME_OVER = "game_over"


@dataclass
class PlacementOutcome:
    accepted: bool
    cleared_cells: List[ClearedCell] = field(default_factory=list)
    lines_cleared: int = 0
    score_delta: int = 0
    is_game_over: bool = False
    reason: Optional[RejectReason] = None

    @classmethod
    def rejected(cls, reason: RejectReason, is_game_over: bool) -> "PlacementOutcome":
        return cls(accepted=False, is_game_over=is_game_over, reason=reason)


class GameSession:
    """Block puzzle game session.

    Owns the board, the hand of upcoming pieces, the score and the piece
    selector. Every query is side-effect free, so a presentation layer can
    probe `preview_validity` on each pointer move; only `attempt_placement`
    and `new_game` mutate state.

    An injected `rng` takes precedence over `config.random_seed`; the seed
    only applies to the generator the session creates itself.
    """

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 selector_config: Optional[SelectorConfig] = None,
                 library: Optional[ShapeLibrary] = None,
                 rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self.config.validate()
        self.rules = rules or ScoringRules()
        self.rules.validate()
        self.library = library or default_library()
        self.rng = rng or random.Random(self.config.random_seed)
        self.selector = PieceSelector(self.library, self.rng, selector_config)
        self.board = Board(self.config.grid_size)

        self.hand: List[Piece] = []
        self.score = 0
        self.state = GameState.PLAYING
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        self.new_game()

    @property
    def game_over(self) -> bool:
        return self.state is GameState.GAME_OVER

    def new_game(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.board.reset()
        self.selector.reset()
        self.hand = []
        self.score = 0
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        self.state = GameState.PLAYING
        self._fill_hand()
        logger.debug("New game, hand: %s", self.hand_families())

    def _fill_hand(self) -> None:
        while len(self.hand) < self.config.hand_size:
            self.hand.append(self.selector.next_piece(self.hand_families()))

    def hand_families(self) -> List[str]:
        return [piece.family for piece in self.hand]

    def get_hand(self) -> Tuple[Piece, ...]:
        return tuple(self.hand)

    def get_score(self) -> int:
        return self.score

    def get_board_snapshot(self) -> np.ndarray:
        return self.board.snapshot()

    def get_color_grid(self) -> List[List[Optional[str]]]:
        return [[self.library.color_for(v) if v else None for v in row] for row in self.board.grid.tolist()]

    def _piece_at(self, hand_index: int) -> Optional[Piece]:
        if 0 <= hand_index < len(self.hand):
            return self.hand[hand_index]
        return None

    def preview_validity(self, hand_index: int, origin_x: int, origin_y: int) -> bool:
        piece = self._piece_at(hand_index)
        if piece is None or self.game_over:
            return False
        return self.board.is_valid_placement(origin_x, origin_y, piece.shape)

    def attempt_placement(self, hand_index: int, origin_x: int, origin_y: int) -> PlacementOutcome:
        if self.game_over:
            return PlacementOutcome.rejected(RejectReason.GAME_OVER, True)
        piece = self._piece_at(hand_index)
        if piece is None:
            return PlacementOutcome.rejected(RejectReason.INVALID_INDEX, False)
        if not self.board.is_valid_placement(origin_x, origin_y, piece.shape):
            return PlacementOutcome.rejected(RejectReason.INVALID_PLACEMENT, False)

        self.board.commit(origin_x, origin_y, piece.shape, piece.code)
        gained = self.rules.score_for_blocks(piece.block_count)

        self.hand.pop(hand_index)
        self._fill_hand()

        cleared = self.board.clear_completed_lines()
        gained += self.rules.score_for_lines(cleared.lines)

        self.score += gained
        self.total_pieces_placed += 1
        self.total_lines_cleared += cleared.lines
        logger.debug("Placed %s at (%d, %d): +%d, %d line(s)",
                     piece.family, origin_x, origin_y, gained, cleared.lines)

        if not self.has_valid_moves():
            self.state = GameState.GAME_OVER
            logger.info("Game over with score %d after %d pieces", self.score, self.total_pieces_placed)

        return PlacementOutcome(
            accepted=True,
            cleared_cells=cleared.cells,
            lines_cleared=cleared.lines,
            score_delta=gained,
            is_game_over=self.game_over,
        )

    def has_valid_moves(self) -> bool:
        return any(self.board.can_fit(piece.shape) for piece in self.hand)

    @staticmethod
    def count_blocks_in_shape(shape: Shape) -> int:
        return count_blocks_in_shape(shape)

    def valid_actions(self) -> List[Tuple[int, int, int]]:
        """List of (hand_index, x, y) placements that would be accepted"""
        if self.game_over:
            return []
        actions: List[Tuple[int, int, int]] = []
        for idx, piece in enumerate(self.hand):
            for x, y in self.board.valid_placements(piece.shape):
                actions.append((idx, x, y))
        return actions

    def get_stats(self) -> dict:
        return {
            "score": self.score,
            "pieces_placed": self.total_pieces_placed,
            "lines_cleared": self.total_lines_cleared,
            "fill_ratio": self.board.filled_ratio(),
            "avg_score_per_piece": self.score / max(1, self.total_pieces_placed),
            "avg_lines_per_piece": self.total_lines_cleared / max(1, self.total_pieces_placed),
            "game_over": self.game_over,
        }

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible snapshot of the session (the rng state is not included)"""
        return {
            "grid_size": self.board.size,
            "grid": self.board.grid.tolist(),
            "hand": [
                {"family": p.family, "shape": p.shape.tolist()} for p in self.hand
            ],
            "score": self.score,
            "state": self.state.value,
            "total_lines_cleared": self.total_lines_cleared,
            "total_pieces_placed": self.total_pieces_placed,
            "selector": self.selector.state_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[GameConfig] = None,
                  rules: Optional[ScoringRules] = None,
                  selector_config: Optional[SelectorConfig] = None,
                  library: Optional[ShapeLibrary] = None,
                  rng: Optional[random.Random] = None) -> "GameSession":
        config = config or GameConfig()
        grid_size = int(data.get("grid_size", config.grid_size))
        if grid_size != config.grid_size:
            config = GameConfig(grid_size=grid_size, hand_size=config.hand_size,
                                random_seed=config.random_seed)
        session = cls(config, rules, selector_config, library, rng)

        try:
            grid = np.array(data["grid"], dtype=np.int64)
        except (TypeError, ValueError, OverflowError) as exc:
            raise SessionStateError(f"Malformed grid: {exc}") from exc
        if grid.shape != (grid_size, grid_size):
            raise SessionStateError(f"Grid shape {grid.shape} does not match size {grid_size}")
        for code in np.unique(grid[grid != 0]):
            if session.library.color_for(int(code)) is None:
                raise SessionStateError(f"Unknown occupant code on board: {int(code)}")
        grid = grid.astype(np.int8)

        hand: List[Piece] = []
        for entry in data["hand"]:
            family = session.library.get(entry["family"])
            if family is None:
                raise SessionStateError(f"Unknown family in hand: {entry['family']}")
            shape = as_shape(entry["shape"])
            index = family.rotation_index(shape)
            if index < 0:
                raise SessionStateError(f"Hand shape is not a rotation of {family.name}")
            hand.append(Piece(family=family.name, shape=family.rotations[index],
                              color=family.color, code=family.code))
        if len(hand) != config.hand_size:
            raise SessionStateError(f"Hand holds {len(hand)} pieces, expected {config.hand_size}")

        score = int(data.get("score", 0))
        if score < 0:
            raise SessionStateError("Score cannot be negative")

        try:
            state = GameState(data.get("state", GameState.PLAYING.value))
        except ValueError:
            raise SessionStateError(f"Unknown session state: {data.get('state')!r}") from None

        session.board.grid = grid
        session.hand = hand
        session.score = score
        session.state = state
        session.total_lines_cleared = int(data.get("total_lines_cleared", 0))
        session.total_pieces_placed = int(data.get("total_pieces_placed", 0))
        session.selector.load_state(data.get("selector", {}))
        return session
