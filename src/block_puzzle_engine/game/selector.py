from __future__ import annotations

import logging
import math
import random
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional, Sequence

from block_puzzle_engine.exceptions import ConfigError, SessionStateError

from .shapes import Piece, ShapeLibrary, default_library


logger = logging.getLogger(__name__)


@dataclass
class SelectorConfig:
    """Tuning of the weighted bag picker"""
    copies_per_weight: int = 4
    drought_threshold: int = 8
    drought_step: float = 0.15
    duplicate_penalty: float = 0.4
    max_attempts: int = 3
    history_size: int = 20

    def validate(self) -> None:
        if self.copies_per_weight < 1:
            raise ConfigError("copies_per_weight must be >= 1")
        if self.drought_threshold < 0 or self.drought_step < 0:
            raise ConfigError("drought settings must be non-negative")
        if not 0.0 <= self.duplicate_penalty <= 1.0:
            raise ConfigError("duplicate_penalty must be within [0, 1]")
        if self.max_attempts < 1:
            raise ConfigError("max_attempts must be >= 1")
        if self.history_size < 0:
            raise ConfigError("history_size must be >= 0")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class PieceSelector:
    """Weighted bag picker with duplicate suppression and drought boost.

    Every random draw (shuffle, bag index, accept check, rotation) goes
    through `rng`, so a seeded or scripted `random.Random` reproduces a
    whole sequence of picks.
    """

    def __init__(self, library: Optional[ShapeLibrary] = None, rng: Optional[random.Random] = None,
                 config: Optional[SelectorConfig] = None) -> None:
        self.library = library or default_library()
        self.rng = rng or random.Random()
        self.config = config or SelectorConfig()
        self.config.validate()
        self.bag: List[str] = []
        self.drought: Dict[str, int] = {}
        self.history: Deque[str] = deque(maxlen=self.config.history_size)
        self.reset()

    def reset(self) -> None:
        self.bag = []
        self.drought = {name: 0 for name in self.library}
        self.history.clear()

    def copies_for(self, family: str) -> int:
        weight = self.library[family].weight
        return max(1, _round_half_up(weight * self.config.copies_per_weight))

    def refill_bag(self) -> None:
        bag: List[str] = []
        for name in self.library:
            bag.extend([name] * self.copies_for(name))
        self.rng.shuffle(bag)
        self.bag = bag
        logger.debug("Refilled piece bag with %d entries", len(bag))

    def drought_modifier(self, family: str) -> float:
        drought = self.drought.get(family, 0)
        boost = max(0.0, (drought - self.config.drought_threshold) * self.config.drought_step)
        return 1.0 + boost

    def candidate_weight(self, family: str, hand_families: Sequence[str]) -> float:
        duplicates = sum(1 for f in hand_families if f == family)
        return (self.library[family].weight
                * self.config.duplicate_penalty ** duplicates
                * self.drought_modifier(family))

    def pick_family(self, hand_families: Sequence[str] = ()) -> str:
        if not self.bag:
            self.refill_bag()

        last_attempt = self.config.max_attempts - 1
        selected = self.bag[0]
        for attempt in range(self.config.max_attempts):
            index = self.rng.randrange(len(self.bag))
            candidate = self.bag[index]
            weight = self.candidate_weight(candidate, hand_families)
            if attempt == last_attempt or self.rng.random() < weight:
                selected = candidate
                del self.bag[index]
                break

        self._update_drought(selected)
        self.history.append(selected)
        logger.debug("Picked %s (bag left: %d)", selected, len(self.bag))
        return selected

    def _update_drought(self, selected: str) -> None:
        for name in self.drought:
            self.drought[name] = 0 if name == selected else self.drought[name] + 1

    def next_piece(self, hand_families: Sequence[str] = ()) -> Piece:
        family = self.library[self.pick_family(hand_families)]
        shape = family.rotations[self.rng.randrange(len(family.rotations))]
        return Piece(family=family.name, shape=shape, color=family.color, code=family.code)

    def state_dict(self) -> Dict[str, Any]:
        return {
            "bag": list(self.bag),
            "drought": dict(self.drought),
            "history": list(self.history),
        }

    def load_state(self, state: Dict[str, Any]) -> None:
        bag = [str(name) for name in state.get("bag", [])]
        drought = {str(k): int(v) for k, v in state.get("drought", {}).items()}
        history = [str(name) for name in state.get("history", [])]
        for name in [*bag, *drought, *history]:
            if name not in self.library:
                raise SessionStateError(f"Unknown family in selection state: {name}")
        self.bag = bag
        self.drought = {name: drought.get(name, 0) for name in self.library}
        self.history.clear()
        self.history.extend(history)


