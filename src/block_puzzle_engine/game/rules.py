from __future__ import annotations

from dataclasses import dataclass

from block_puzzle_engine.exceptions import ConfigError


@dataclass
class ScoringRules:
    placement_points: int = 1
    line_clear_points: int = 10
    combo_multiplier: int = 2

    def validate(self) -> None:
        if self.placement_points < 0 or self.line_clear_points < 0:
            raise ConfigError("scoring points must be non-negative")
        if self.combo_multiplier < 1:
            raise ConfigError("combo_multiplier must be >= 1")

    def score_for_blocks(self, blocks: int) -> int:
        return max(0, blocks) * self.placement_points

    def score_for_lines(self, lines: int) -> int:
        # 10, 20, 40, ... for the first, second, third line of one placement
        if lines <= 0:
            return 0
        return sum(self.line_clear_points * self.combo_multiplier ** i for i in range(lines))
