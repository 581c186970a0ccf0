from __future__ import annotations

import argparse
import logging
import os

import gymnasium as gym

# Ensure envs are registered
from block_puzzle_engine.env import ENV_ID
from block_puzzle_engine.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper
from block_puzzle_engine.log import setup_logging


logger = logging.getLogger(__name__)


def make_env(seed: int | None = None, resample: bool = True) -> gym.Env:
    env = gym.make(ENV_ID)
    env = FlattenDiscreteActionWrapper(env)
    # Resample invalid actions for vanilla PPO; also forwards get_action_mask
    if resample:
        env = ResampleInvalidActionWrapper(env)
    if seed is not None:
        env.reset(seed=seed)
    return env


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--timesteps", type=int, default=200_000)
    p.add_argument("--logdir", type=str, default="./logs/ppo")
    p.add_argument("--save_path", type=str, default="./models/ppo_blockpuzzle.zip")
    p.add_argument("--n_envs", type=int, default=4)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--verbose", action="store_true")
    return p


def _mask(env: gym.Env):
    return env.get_action_mask()


def build_vec_env(n_envs: int, seed: int | None, masked: bool):
    """Subprocess vector env; masked envs skip resampling and expose the mask to MaskablePPO."""
    from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

    def factory(i: int):
        env_seed = None if seed is None else seed + i

        def thunk():
            if masked:
                from sb3_contrib.common.wrappers import ActionMasker
                return ActionMasker(make_env(env_seed, resample=False), _mask)
            return make_env(env_seed)
        return thunk

    return VecMonitor(SubprocVecEnv([factory(i) for i in range(n_envs)]))


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    masked = args.algo == "maskable"
    if masked:
        from sb3_contrib import MaskablePPO as Algo
    else:
        from stable_baselines3 import PPO as Algo

    vec_env = build_vec_env(args.n_envs, args.seed, masked)
    model = Algo(policy="MultiInputPolicy", env=vec_env, verbose=1, tensorboard_log=args.logdir)

    logger.info("Training %s for %d timesteps on %d envs", args.algo, args.timesteps, args.n_envs)
    os.makedirs(os.path.dirname(args.save_path) or ".", exist_ok=True)
    model.learn(total_timesteps=args.timesteps)
    model.save(args.save_path)
    logger.info("Saved model to %s", args.save_path)
    vec_env.close()



if __name__ == "__main__":  # pragma: no cover
    main()
