from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pygame

from block_puzzle_engine.game import GameSession, Piece, ShapeLibrary
from block_puzzle_engine.game.display import hex_to_rgb


EMPTY_COLOR = (40, 40, 48)
BACKGROUND = (15, 15, 20)
VALID_GHOST = (120, 220, 140)
INVALID_GHOST = (220, 120, 120)
HAND_SLOT_CELLS = 5


def screen_to_cell(px: int, py: int, cell_size: int, margin: int) -> Tuple[int, int]:
    """Board cell under a pixel position (may lie outside the board)."""
    return (px - margin) // cell_size, (py - margin) // cell_size


def hand_slot_at(px: int, py: int, board_size: int, hand_size: int, cell_size: int, margin: int) -> Optional[int]:
    x0 = margin * 2 + board_size * cell_size
    if px < x0 or px >= x0 + HAND_SLOT_CELLS * cell_size:
        return None
    slot = (py - margin) // (cell_size * HAND_SLOT_CELLS)
    if py < margin or slot >= hand_size:
        return None
    return int(slot)


def color_for_value(library: ShapeLibrary, v: int) -> Tuple[int, int, int]:
    if v == 0:
        return EMPTY_COLOR
    return hex_to_rgb(library.color_for(v))


def draw_board(screen: pygame.Surface, grid: np.ndarray, library: ShapeLibrary, cell_size: int, margin: int) -> None:
    h, w = grid.shape
    screen.fill(BACKGROUND)
    for y in range(h):
        for x in range(w):
            rect = pygame.Rect(margin + x * cell_size, margin + y * cell_size, cell_size - 1, cell_size - 1)
            pygame.draw.rect(screen, color_for_value(library, int(grid[y, x])), rect)


def _draw_piece(screen: pygame.Surface, piece: Piece, x0: int, y0: int, cell_size: int) -> None:
    color = hex_to_rgb(piece.color)
    for py in range(piece.height):
        for px in range(piece.width):
            if piece.shape[py, px]:
                rect = pygame.Rect(x0 + px * cell_size, y0 + py * cell_size, cell_size - 1, cell_size - 1)
                pygame.draw.rect(screen, color, rect)


def draw_hand(screen: pygame.Surface, session: GameSession, cell_size: int, margin: int, selected_piece: int) -> None:
    # Hand pieces stacked in the side panel
    x0 = margin * 2 + session.board.size * cell_size
    for idx, piece in enumerate(session.get_hand()):
        off_y = margin + idx * (cell_size * HAND_SLOT_CELLS)
        _draw_piece(screen, piece, x0, off_y, cell_size)
        if idx == selected_piece:
            outline = pygame.Rect(x0, off_y, piece.width * cell_size, piece.height * cell_size)
            pygame.draw.rect(screen, (255, 255, 255), outline, 2)


def draw_ghost(screen: pygame.Surface, session: GameSession, grid_x: int, grid_y: int,
               cell_size: int, margin: int, selected_piece: int) -> None:
    hand = session.get_hand()
    if not (0 <= selected_piece < len(hand)):
        return
    piece = hand[selected_piece]
    color = VALID_GHOST if session.preview_validity(selected_piece, grid_x, grid_y) else INVALID_GHOST
    for px, py in piece.cells_at(grid_x, grid_y):
        if session.board.is_inside(px, py):
            rect = pygame.Rect(margin + px * cell_size, margin + py * cell_size, cell_size - 1, cell_size - 1)
            pygame.draw.rect(screen, color, rect, 2)
