from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_puzzle_engine.game import GameConfig, GameSession, ScoringRules, SelectorConfig
from block_puzzle_engine.game.display import format_grid, hex_to_rgb


def _compute_action_mask(session: GameSession) -> np.ndarray:
    size = session.board.size
    k = session.config.hand_size
    mask = np.zeros((k, size, size), dtype=np.bool_)
    for piece_idx, x, y in session.valid_actions():
        mask[piece_idx, y, x] = True
    return mask


class BlockPuzzleEnv(gym.Env):
    """Gymnasium view of a `GameSession`.

    Action: (hand_index, x, y). Invalid actions leave the game untouched and
    cost `invalid_action_penalty`. The reward is the engine score delta
    times `score_scale`.
    """

    metadata = {"render_modes": ["ansi", "rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 rules: Optional[ScoringRules] = None,
                 selector_config: Optional[SelectorConfig] = None,
                 score_scale: float = 0.1,
                 invalid_action_penalty: float = -0.1,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = 0.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.session = GameSession(config, rules, selector_config)
        self.render_mode = render_mode

        self.score_scale = float(score_scale)
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)

        size = self.session.board.size
        k = self.session.config.hand_size
        self.extent = self.session.library.max_extent()
        n_families = len(self.session.library)

        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=n_families - 1, shape=(k,), dtype=np.int8),
                "piece_shapes": spaces.Box(low=0, high=1, shape=(k, self.extent, self.extent), dtype=np.int8),
            }
        )

        # Action: (piece_idx, x, y)
        self.action_space = spaces.MultiDiscrete((k, size, size))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        k = self.session.config.hand_size
        grid = (self.session.board.grid != 0).astype(np.int8)
        pieces = np.full((k,), -1, dtype=np.int8)
        shapes = np.zeros((k, self.extent, self.extent), dtype=np.int8)
        for i, piece in enumerate(self.session.get_hand()[:k]):
            pieces[i] = self.session.library.index_of(piece.family)
            h, w = piece.shape.shape
            shapes[i, :h, :w] = piece.shape
        return {"grid": grid, "pieces": pieces, "piece_shapes": shapes}

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.session),
            "score": self.session.score,
            "lines_cleared": self.session.total_lines_cleared,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.session.new_game(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        piece_idx, x, y = map(int, action)
        outcome = self.session.attempt_placement(piece_idx, x, y)

        reward_components: Dict[str, float] = {}
        if outcome.accepted:
            reward_components["score"] = self.score_scale * float(outcome.score_delta)
        else:
            reward_components["invalid"] = self.invalid_action_penalty
        reward_components["step"] = self.step_penalty

        terminated = bool(self.session.game_over)
        self._steps += 1
        truncated = self._steps >= self.max_episode_steps and not terminated
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = outcome.score_delta
        info["accepted"] = outcome.accepted
        if outcome.reason is not None:
            info["reject_reason"] = outcome.reason.value
        return self._get_obs(), reward, terminated, truncated, info

    def render(self):
        grid = self.session.board.grid
        if self.render_mode == "ansi":
            return format_grid(grid)
        if self.render_mode == "rgb_array":
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    color = hex_to_rgb(self.session.library.color_for(int(grid[y, x]))) if grid[y, x] else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass

