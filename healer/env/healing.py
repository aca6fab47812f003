"""Heal execution gated by cooldown, range and sightline."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from ..constants import RANGE_EPSILON
from ..sim.body import horizontal_distance
from ..sim.health import apply_heal_to
from .rewards import RewardAccumulator, RewardWeights

if TYPE_CHECKING:
    from ..sim.health import HealthStore
    from ..sim.los import LineOfSight


class HealOutcome(str, Enum):
    COOLDOWN = "cooldown"  # Rejected: cooldown still running
    NO_TARGET = "no_target"  # Rejected: no ally health store
    OUT_OF_REACH = "out_of_reach"  # Out of range or sightline blocked (penalized)
    HEALED = "healed"
    WASTED = "wasted"  # Landed but restored nothing

    @property
    def rejected(self) -> bool:
        return self in (HealOutcome.COOLDOWN, HealOutcome.NO_TARGET)


class HealController:
    def __init__(
        self,
        los: LineOfSight,
        rewards: RewardAccumulator,
        weights: RewardWeights,
        heal_range: float = 2.5,
        heal_amount: float = 15.0,
        heal_cooldown: float = 1.0,
        failed_retry: float = 0.15,
    ):
        self.los = los
        self.rewards = rewards
        self.weights = weights
        self.heal_range = float(heal_range)
        self.heal_amount = float(heal_amount)
        self.heal_cooldown = float(heal_cooldown)
        self.failed_retry = float(failed_retry)
        self.next_heal_time = 0.0
        self.counts: Counter[HealOutcome] = Counter()
        self.total_restored = 0.0

    def reset(self, now: float) -> None:
        self.next_heal_time = float(now)
        self.counts = Counter()
        self.total_restored = 0.0

    def try_heal(
        self,
        now: float,
        self_pos: np.ndarray,
        ally_pos: np.ndarray,
        ally_health: HealthStore | None,
    ) -> HealOutcome:
        outcome = self._attempt(now, self_pos, ally_pos, ally_health)
        self.counts[outcome] += 1
        return outcome

    def _attempt(
        self,
        now: float,
        self_pos: np.ndarray,
        ally_pos: np.ndarray,
        ally_health: HealthStore | None,
    ) -> HealOutcome:
        if now < self.next_heal_time:
            return HealOutcome.COOLDOWN
        if ally_health is None:
            return HealOutcome.NO_TARGET

        dist = horizontal_distance(self_pos, ally_pos)
        if dist > self.heal_range + RANGE_EPSILON or not self.los.is_clear(self_pos, ally_pos):
            self.rewards.add(self.weights.heal_failed, "heal_failed")
            self.next_heal_time = now + self.failed_retry
            return HealOutcome.OUT_OF_REACH

        restored = apply_heal_to(ally_health, self.heal_amount)
        self.next_heal_time = now + self.heal_cooldown
        if restored > self.weights.heal_min_restored:
            self.total_restored += restored
            self.rewards.add(self.weights.heal_scale * (restored / self.heal_amount), "heal")
            return HealOutcome.HEALED
        self.rewards.add(self.weights.heal_wasted, "heal_wasted")
        return HealOutcome.WASTED
