"""Block puzzle engine: a 10x10 polyomino placement game with line clearing."""

from block_puzzle_engine.game import GameConfig, GameSession, PlacementOutcome, RejectReason

__version__ = "0.1.0"

__all__ = ["GameConfig", "GameSession", "PlacementOutcome", "RejectReason", "__version__"]
