from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

import numpy as np

from ..agents.manual import ManualOverride
from ..config import ControlMode, HealerConfig
from ..nav.agent import NavAgent
from ..sim.body import BodyState
from ..sim.health import HealthStore
from ..sim.los import LineOfSight
from .healing import HealController, HealOutcome
from .intents import DecisionResult, IntentResolver
from .lifecycle import EpisodeLifecycle, EpisodePhase
from .movement import MovementPlanner
from .observations import ObservationContext, ObservationEncoder
from .rewards import RewardAccumulator, RewardWeights

logger = logging.getLogger(__name__)


@dataclass
class EpisodeSummary:
    episode: int
    episode_return: float
    decision_steps: int
    heals: int
    wasted_heals: int
    failed_heals: int
    hp_restored: float
    truncated: bool = False
    breakdown: dict[str, float] = field(default_factory=dict)


class HealerAgent:
    """
    Support agent that follows and heals an ally.

    Collaborators (bodies, health stores, navigation, sightline service) are
    wired in by the arena; the agent never creates or looks them up. Any of
    the ally/nav references may be None, in which case the affected
    operations do nothing.

    Cadence:
    - update(now): every frame (scripted pursuit, ally death detection)
    - collect_observations() / on_action_received(action, now): every decision step
    """

    def __init__(
        self,
        config: HealerConfig,
        body: BodyState,
        health: HealthStore | None,
        ally_body: BodyState | None,
        ally_health: HealthStore | None,
        nav: NavAgent | None,
        los: LineOfSight,
        weights: RewardWeights | None = None,
    ):
        self.config = config
        self.body = body
        self.health = health
        self.ally_body = ally_body
        self.ally_health = ally_health
        self.nav = nav
        self.los = los
        self.weights = weights or RewardWeights()

        self.rewards = RewardAccumulator()
        self.lifecycle = EpisodeLifecycle(ally_death_reward=self.weights.ally_death)
        self.planner = MovementPlanner(config.ideal_min, config.ideal_max, config.repath_interval)
        self.heal = HealController(
            los,
            self.rewards,
            self.weights,
            heal_range=config.heal_range,
            heal_amount=config.heal_amount,
            heal_cooldown=config.heal_cooldown,
            failed_retry=config.failed_heal_retry,
        )
        self.encoder = ObservationEncoder(los, config.heal_range)
        self.resolver = IntentResolver(
            config.control_mode,
            self.lifecycle,
            self.rewards,
            self.planner,
            self.heal,
            on_episode_end=self.end_episode,
        )
        self.manual = ManualOverride()

        self.episode_end_listeners: list[Callable[[EpisodeSummary], None]] = []
        self.completed_episodes = 0
        self.decision_steps = 0
        self.last_summary: EpisodeSummary | None = None
        self._now = 0.0

    @property
    def mode(self) -> ControlMode:
        return self.resolver.mode

    @mode.setter
    def mode(self, mode: ControlMode) -> None:
        self.resolver.mode = mode

    @property
    def phase(self) -> EpisodePhase:
        return self.lifecycle.phase

    def on_episode_begin(self, now: float) -> None:
        self._now = float(now)
        self.lifecycle.begin()
        self.rewards.reset()
        self.heal.reset(now)
        self.planner.throttle.reset(now)
        self.decision_steps = 0
        self.body.stop()
        if self.nav is not None:
            self.nav.resume()
            self.nav.reset_path()

    def update(self, now: float) -> None:
        self._now = float(now)
        if self.mode.scripted_follow and self.ally_body is not None and self.nav is not None:
            self.planner.execute_follow(self.body.pos, self.ally_body.pos, self.nav, now)

        # Flag only; the episode ends on the next decision step.
        if self.lifecycle.observe(self.ally_health):
            logger.debug(f"Ally down at t={now:.2f}; termination pending")

    def collect_observations(self) -> np.ndarray:
        return self.encoder.encode(ObservationContext.from_agent(self))

    def on_action_received(self, action: Sequence[int] | np.ndarray, now: float) -> DecisionResult:
        self._now = float(now)
        self.decision_steps += 1
        ally_pos = self.ally_body.pos if self.ally_body is not None else None
        return self.resolver.resolve(action, now, self.body.pos, ally_pos, self.ally_health, self.nav)

    def heuristic(self, keys: Iterable[str]) -> np.ndarray:
        """Manual override: key names -> action vector, bypassing the policy."""
        return self.manual.action_from_keys(keys)

    def summarize(self, truncated: bool = False) -> EpisodeSummary:
        counts = self.heal.counts
        return EpisodeSummary(
            episode=self.completed_episodes,
            episode_return=self.rewards.total,
            decision_steps=self.decision_steps,
            heals=counts[HealOutcome.HEALED],
            wasted_heals=counts[HealOutcome.WASTED],
            failed_heals=counts[HealOutcome.OUT_OF_REACH],
            hp_restored=self.heal.total_restored,
            truncated=truncated,
            breakdown=dict(self.rewards.breakdown),
        )

    def end_episode(self) -> None:
        """Episode-end signal after the terminal transition; clears state for the next episode."""
        self._finish(self.summarize())

    def interrupt_episode(self) -> None:
        """End on a time limit. Not a terminal transition; refused while one is pending."""
        if self.lifecycle.pending:
            raise RuntimeError("cannot interrupt an episode with a pending termination")
        self._finish(self.summarize(truncated=True))

    def _finish(self, summary: EpisodeSummary) -> None:
        self.completed_episodes += 1
        self.last_summary = summary
        logger.info(
            f"Episode {summary.episode} {'truncated' if summary.truncated else 'ended'}: "
            f"return={summary.episode_return:.3f} steps={summary.decision_steps} heals={summary.heals}"
        )
        for listener in self.episode_end_listeners:
            listener(summary)
        self.on_episode_begin(self._now)
