from __future__ import annotations

import logging
import math
from dataclasses import asdict
from typing import Any, Sequence

import numpy as np
from gymnasium import spaces

from ..actions import ACTION_BRANCHES
from ..config import EnvConfig
from .agent import EpisodeSummary, HealerAgent
from .arena import Arena
from .observations import OBS_DIM, OBS_HIGH, OBS_LOW
from .rewards import RewardWeights

logger = logging.getLogger(__name__)


class HealerEnv:
    """
    Single-agent env with a gymnasium-like API:

      obs, info = env.reset(seed)
      obs, reward, terminated, truncated, info = env.step(action)

    One step() is one decision step: the action is resolved, then
    `decision_repeat` frames of `dt_sim` run (damage, ally movement,
    navigation, terminal detection), then the next observation is taken.

    Ally death detected during those frames does not end the episode at once.
    The following step() consumes its action without applying it, returns the
    terminal reward and terminated=True, so observations and actions stay
    paired one to one.

    action: int vector [movement (0 hold, 1 approach, 2 retreat), heal (0 none, 1 heal)]
    """

    def __init__(self, config: EnvConfig, weights: RewardWeights | None = None):
        self.config = config
        self.rng = np.random.default_rng(config.seed)
        self.arena = Arena(config, self.rng, weights=weights)
        self.agent: HealerAgent = self.arena.agent
        self.agent.episode_end_listeners.append(self._on_episode_end)

        self.observation_space = spaces.Box(low=OBS_LOW, high=OBS_HIGH, shape=(OBS_DIM,), dtype=np.float32)
        self.action_space = spaces.MultiDiscrete(list(ACTION_BRANCHES))

        self.time_s = 0.0
        self.step_count = 0
        self.max_steps = math.ceil(config.max_episode_seconds / (config.dt_sim * config.decision_repeat))
        self.last_summary: EpisodeSummary | None = None
        self._done = True

    def reset(self, seed: int | None = None) -> tuple[np.ndarray, dict[str, Any]]:
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.step_count = 0
        self._done = False

        self.arena.reset_arena(self.rng)
        self.agent.on_episode_begin(self.time_s)
        logger.debug(f"Reset at t={self.time_s:.2f} (seed={seed}, arena resets={self.arena.resets})")
        return self.agent.collect_observations(), self._info()

    def step(self, action: Sequence[int] | np.ndarray) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        if self._done:
            raise RuntimeError("episode is over; call reset() before step()")

        self.step_count += 1
        result = self.agent.on_action_received(action, self.time_s)
        if result.terminated:
            self._done = True
            info = self._info()
            info["heal_outcome"] = None
            info["episode"] = asdict(self.last_summary) if self.last_summary is not None else None
            return self.agent.collect_observations(), result.reward, True, False, info

        dt = self.config.dt_sim
        for _ in range(self.config.decision_repeat):
            self.time_s += dt
            self.arena.tick(dt)
            # After damage, so a death on the last frame is flagged before the next decision.
            self.agent.update(self.time_s)

        obs = self.agent.collect_observations()

        # Never truncate over a pending termination; it fires on the next step.
        truncated = self.step_count >= self.max_steps and not self.agent.lifecycle.pending
        info = self._info()
        info["heal_outcome"] = result.heal_outcome.value if result.heal_outcome is not None else None
        if truncated:
            self._done = True
            self.agent.interrupt_episode()
            info["episode"] = asdict(self.last_summary) if self.last_summary is not None else None
        return obs, result.reward, False, truncated, info

    def _on_episode_end(self, summary: EpisodeSummary) -> None:
        self.last_summary = summary

    def _info(self) -> dict[str, Any]:
        agent = self.agent
        counts = agent.heal.counts
        return {
            "time_s": self.time_s,
            "step": self.step_count,
            "phase": agent.phase.value,
            "ally_hp": self.arena.ally_health.current_hp,
            "self_hp": self.arena.healer_health.current_hp,
            "episode_return": agent.rewards.total,
            "reward_breakdown": dict(agent.rewards.breakdown),
            "heal_counts": {outcome.value: n for outcome, n in counts.items()},
            "completed_episodes": agent.completed_episodes,
        }
