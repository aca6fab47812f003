"""Policy evaluation over seeded episodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np

from healer.config import EnvConfig
from healer.env.env import HealerEnv


class Policy(Protocol):
    def act(self, env: HealerEnv) -> np.ndarray: ...


@dataclass
class EvalStats:
    """Evaluation results."""

    mean_return: float
    mean_episode_length: float
    ally_death_rate: float
    mean_heals: float
    episodes: int


def evaluate_policy(policy: Policy, env_cfg: EnvConfig, seeds: list[int]) -> EvalStats:
    """Run one episode per seed and aggregate.

    Args:
        policy: Anything with act(env) -> action vector
        env_cfg: Environment configuration
        seeds: One seed per episode

    Returns:
        stats: Mean return, episode length, ally death rate, heals per episode
    """
    if not seeds:
        raise ValueError("seeds must not be empty")

    env = HealerEnv(env_cfg)
    returns: list[float] = []
    lengths: list[int] = []
    heals: list[int] = []
    deaths = 0

    for ep_seed in seeds:
        env.reset(seed=int(ep_seed))
        while True:
            _obs, _reward, terminated, truncated, info = env.step(policy.act(env))
            if terminated or truncated:
                episode = info["episode"]
                returns.append(float(episode["episode_return"]))
                lengths.append(int(episode["decision_steps"]))
                heals.append(int(episode["heals"]))
                deaths += int(terminated)
                break

    return EvalStats(
        mean_return=float(np.mean(returns)),
        mean_episode_length=float(np.mean(lengths)),
        ally_death_rate=float(deaths / len(seeds)),
        mean_heals=float(np.mean(heals)),
        episodes=len(seeds),
    )
