from __future__ import annotations

import random
from typing import Iterable

from block_puzzle_engine.game import Board, as_shape


class ScriptedRandom(random.Random):
    """Random source whose `randrange` and `random` replay fixed values.

    When a script runs out, `randrange` returns 0 and `random` returns 0.0.
    `shuffle` keeps using the seeded generator.
    """

    def __init__(self, randrange_values: Iterable[int] = (), random_values: Iterable[float] = (), seed: int = 0):
        super().__init__(seed)
        self.randrange_values = list(randrange_values)
        self.random_values = list(random_values)

    def getrandbits(self, k):
        return super().getrandbits(k)

    def random(self):
        if self.random_values:
            return self.random_values.pop(0)
        return 0.0

    def randrange(self, start, stop=None, step=1):
        if self.randrange_values:
            return self.randrange_values.pop(0)
        return 0


def fill_cells(board: Board, cells, occupant: int = 1) -> None:
    single = as_shape([[1]])
    for x, y in cells:
        board.commit(x, y, single, occupant)
