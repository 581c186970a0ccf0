from __future__ import annotations

from typing import Optional, Tuple

import numpy as np


def format_grid(grid: np.ndarray) -> str:
    return "\n".join("".join("█" if cell else "·" for cell in row) for row in grid)


def format_piece(piece_shape: np.ndarray) -> str:
    return "\n".join("".join("█" if cell else " " for cell in row) for row in piece_shape)


def print_grid(grid: np.ndarray) -> None:
    print(format_grid(grid))


def print_piece(piece_shape: np.ndarray) -> None:
    print(format_piece(piece_shape))


def hex_to_rgb(color: Optional[str], default: Tuple[int, int, int] = (200, 200, 200)) -> Tuple[int, int, int]:
    if not color:
        return default
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
