"""Action decoding and dispatch, once per decision step."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

import numpy as np

from ..actions import HealIntent, decode_action
from ..config import ControlMode
from .healing import HealController, HealOutcome
from .lifecycle import EpisodeLifecycle
from .movement import MovementPlanner, NavRequest
from .rewards import RewardAccumulator

if TYPE_CHECKING:
    from ..nav.agent import NavAgent
    from ..sim.health import HealthStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionResult:
    terminated: bool
    reward: float
    nav_request: NavRequest | None = None
    heal_outcome: HealOutcome | None = None


class IntentResolver:
    """
    Dispatches one action vector per decision step.

    A pending termination always wins: the action is ignored, the terminal
    reward is applied and the episode-end signal fires. This is the only path
    that ends an episode, so termination lands on a decision boundary.
    """

    def __init__(
        self,
        mode: ControlMode,
        lifecycle: EpisodeLifecycle,
        rewards: RewardAccumulator,
        planner: MovementPlanner,
        heal: HealController,
        on_episode_end: Callable[[], None],
    ):
        self.mode = mode
        self.lifecycle = lifecycle
        self.rewards = rewards
        self.planner = planner
        self.heal = heal
        self.on_episode_end = on_episode_end

    def resolve(
        self,
        action: Sequence[int] | np.ndarray,
        now: float,
        self_pos: np.ndarray,
        ally_pos: np.ndarray | None,
        ally_health: HealthStore | None,
        nav: NavAgent | None,
    ) -> DecisionResult:
        if self.lifecycle.pending:
            final = self.lifecycle.fire()
            logger.debug(f"Terminal transition fired at t={now:.2f} (reward={final})")
            if final != 0.0:
                self.rewards.add(final, "terminal")
            reward = self.rewards.end_step()
            self.on_episode_end()
            return DecisionResult(terminated=True, reward=reward)

        decoded = decode_action(action)

        if ally_pos is None or nav is None:
            return DecisionResult(terminated=False, reward=self.rewards.end_step())

        request = None
        if self.mode.learned_positioning:
            request = self.planner.execute(decoded.move, self_pos, ally_pos, nav, now)

        outcome = None
        if self.mode.learned_healing and decoded.heal == HealIntent.HEAL:
            outcome = self.heal.try_heal(now, self_pos, ally_pos, ally_health)

        return DecisionResult(
            terminated=False,
            reward=self.rewards.end_step(),
            nav_request=request,
            heal_outcome=outcome,
        )
