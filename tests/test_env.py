from __future__ import annotations

import gymnasium as gym
import numpy as np

from block_puzzle_engine.env import ENV_ID
from block_puzzle_engine.env.block_puzzle_env import BlockPuzzleEnv
from block_puzzle_engine.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper


def test_reset_observation_matches_space():
    env = gym.make(ENV_ID)
    obs, info = env.reset(seed=0)
    assert env.observation_space.contains(obs)
    assert obs["grid"].shape == (10, 10)
    assert (obs["pieces"] >= 0).all()
    assert obs["piece_shapes"].shape == (3, 4, 4)
    assert info["action_mask"].shape == (3, 10, 10)
    assert info["action_mask"].any()
    assert info["score"] == 0
    env.close()


def test_valid_step_rewards_score_delta():
    env = BlockPuzzleEnv()
    obs, info = env.reset(seed=1)
    piece_idx, y, x = np.argwhere(info["action_mask"])[0]
    obs, reward, terminated, truncated, info = env.step((piece_idx, x, y))
    assert info["accepted"]
    assert reward == 0.1 * info["engine_score_delta"]
    assert info["score"] == info["engine_score_delta"]
    assert obs["grid"].sum() > 0
    assert not truncated


def test_occupied_cell_step():
    env = BlockPuzzleEnv()
    _, info = env.reset(seed=3)
    piece_idx, y, x = np.argwhere(info["action_mask"])[0]
    env.step((piece_idx, x, y))
    mask = env._get_info()["action_mask"]
    bad_piece, bad_y, bad_x = np.argwhere(~mask)[0]
    score = env.session.get_score()
    _, reward, terminated, _, info = env.step((bad_piece, bad_x, bad_y))
    assert reward == env.invalid_action_penalty
    assert not info["accepted"]
    assert env.session.get_score() == score


def test_truncation():
    env = BlockPuzzleEnv(max_episode_steps=1)
    _, info = env.reset(seed=4)
    piece_idx, y, x = np.argwhere(info["action_mask"])[0]
    _, _, terminated, truncated, _ = env.step((piece_idx, x, y))
    assert truncated and not terminated


def test_render_modes():
    env = BlockPuzzleEnv(render_mode="ansi")
    env.reset(seed=5)
    assert env.render() == "\n".join(["·" * 10] * 10)
    env = BlockPuzzleEnv(render_mode="rgb_array")
    env.reset(seed=5)
    assert env.render().shape == (120, 120, 3)


def test_flatten_wrapper_mask_and_actions():
    env = FlattenDiscreteActionWrapper(gym.make(ENV_ID))
    _, info = env.reset(seed=6)
    assert env.action_space.n == 300
    mask = env.get_action_mask()
    np.testing.assert_array_equal(mask, info["action_mask"].reshape(-1))
    idx = int(np.flatnonzero(mask)[0])
    piece, x, y = env.action(idx)
    assert info["action_mask"][piece, y, x]
    _, _, _, _, step_info = env.step(idx)
    assert step_info["accepted"]


def test_resample_wrapper_replaces_invalid_action():
    env = ResampleInvalidActionWrapper(FlattenDiscreteActionWrapper(gym.make(ENV_ID)))
    env.reset(seed=7)
    mask = env.get_action_mask()
    invalid = np.flatnonzero(~mask)
    if invalid.size:
        _, _, _, _, info = env.step(int(invalid[0]))
        assert info["accepted"]
