from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional

from block_puzzle_engine.config import load_config
from block_puzzle_engine.game import GameConfig, GameSession
from block_puzzle_engine.game.display import format_grid, print_grid, print_piece
from block_puzzle_engine.highscore import DEFAULT_PATH, HighScoreStore
from block_puzzle_engine.log import setup_logging


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play a headless block puzzle game with random valid moves")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--moves", type=int, default=200, help="Stop after this many placements")
    p.add_argument("--config", type=str, default=None, help="JSON config file")
    p.add_argument("--highscore", type=str, default=str(DEFAULT_PATH))
    p.add_argument("--quiet", action="store_true", help="Only print the final summary")
    p.add_argument("--verbose", action="store_true")
    return p


def play_random(session: GameSession, moves: int, rng: random.Random, show: bool = False) -> int:
    """Place random valid pieces until game over or `moves` placements; returns placements made."""
    placed = 0
    while placed < moves and not session.game_over:
        actions = session.valid_actions()
        if not actions:
            break
        idx, x, y = rng.choice(actions)
        outcome = session.attempt_placement(idx, x, y)
        placed += 1
        if show:
            print(f"\nMove {placed}: piece {idx} at ({x}, {y}) -> +{outcome.score_delta}"
                  f" ({outcome.lines_cleared} line(s))")
            print_grid(session.get_board_snapshot())
    return placed


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.config:
        game_config, selector_config, rules = load_config(args.config)
    else:
        game_config, selector_config, rules = GameConfig(), None, None
    if args.seed is not None:
        game_config.random_seed = args.seed

    session = GameSession(game_config, rules, selector_config)
    store = HighScoreStore(args.highscore)

    if not args.quiet:
        print("=== Block Puzzle Demo ===")
        for i, piece in enumerate(session.get_hand()):
            print(f"\nPiece {i} ({piece.family}):")
            print_piece(piece.shape)

    play_random(session, args.moves, random.Random(args.seed), show=not args.quiet)

    stats = session.get_stats()
    print("\nFinal board:")
    print(format_grid(session.get_board_snapshot()))
    print(f"Score: {stats['score']}  pieces: {stats['pieces_placed']}  "
          f"lines: {stats['lines_cleared']}  game over: {stats['game_over']}")
    if store.submit(session.get_score()):
        logger.info("New best score: %d", store.best)
    else:
        print(f"Best score: {store.best}")


if __name__ == "__main__":  # pragma: no cover
    main()
