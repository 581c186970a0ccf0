from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import pygame

from block_puzzle_engine.config import load_config
from block_puzzle_engine.game import GameConfig, GameSession
from block_puzzle_engine.highscore import DEFAULT_PATH, HighScoreStore
from block_puzzle_engine.log import setup_logging
from .renderer import HAND_SLOT_CELLS, draw_board, draw_ghost, draw_hand, hand_slot_at, screen_to_cell


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the block puzzle with mouse and keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--config", type=str, default=None)
    p.add_argument("--highscore", type=str, default=str(DEFAULT_PATH))
    p.add_argument("--cell-size", type=int, default=30)
    p.add_argument("--verbose", action="store_true")
    return p


def run(argv: Optional[List[str]] = None) -> None:
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

    pygame.init()
    try:
        cell_size = args.cell_size
        margin = 20
        board_px = session.board.size * cell_size
        side_panel_w = HAND_SLOT_CELLS * cell_size
        width = margin * 3 + board_px + side_panel_w
        height = max(margin * 2 + board_px, margin * 2 + session.config.hand_size * HAND_SLOT_CELLS * cell_size + 140)
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Block Puzzle (10x10)")
        font = pygame.font.SysFont(None, 24)

        selected_piece = 0
        key_to_index = {
            pygame.K_1: 0,
            pygame.K_2: 1,
            pygame.K_3: 2,
            pygame.K_KP1: 0,
            pygame.K_KP2: 1,
            pygame.K_KP3: 2,
        }

        running = True
        clock = pygame.time.Clock()
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in key_to_index:
                        selected_piece = key_to_index[event.key]
                    elif event.key == pygame.K_n:
                        session.new_game()
                        selected_piece = 0
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    mx, my = event.pos
                    slot = hand_slot_at(mx, my, session.board.size, session.config.hand_size, cell_size, margin)
                    if slot is not None:
                        selected_piece = slot
                        continue
                    grid_x, grid_y = screen_to_cell(mx, my, cell_size, margin)
                    outcome = session.attempt_placement(selected_piece, grid_x, grid_y)
                    if outcome.accepted:
                        if store.submit(session.get_score()):
                            logger.debug("Best score is now %d", store.best)
                        if outcome.is_game_over:
                            logger.info("Game over - score %d", session.get_score())

            draw_board(screen, session.get_board_snapshot(), session.library, cell_size, margin)
            mx, my = pygame.mouse.get_pos()
            grid_x, grid_y = screen_to_cell(mx, my, cell_size, margin)
            draw_ghost(screen, session, grid_x, grid_y, cell_size, margin, selected_piece)
            draw_hand(screen, session, cell_size, margin, selected_piece)

            info_lines = [
                f"Score: {session.get_score()}",
                f"Best: {store.best}",
                "Select: 1/2/3 or click",
                "Place: Left click",
                "New game: N",
            ]
            x_text = margin * 2 + board_px
            y_text = margin + session.config.hand_size * HAND_SLOT_CELLS * cell_size + 10
            for i, txt in enumerate(info_lines):
                img = font.render(txt, True, (230, 230, 230))
                screen.blit(img, (x_text, y_text + i * 20))
            if session.game_over:
                over = font.render("Game Over - Press N to reset", True, (255, 100, 100))
                screen.blit(over, (margin, 2))

            pygame.display.flip()
            clock.tick(60)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
