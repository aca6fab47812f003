"""Reward bookkeeping for the healer.

Design:
- RewardWeights: every reward magnitude in one place
- RewardAccumulator: running episode return plus the reward earned since the
  last decision step, broken down by component
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass


@dataclass(frozen=True)
class RewardWeights:
    """Reward magnitudes.

    - ally_death: terminal penalty when the ally's HP reaches zero
    - heal_scale: successful heal pays heal_scale * (restored / heal_amount)
    - heal_failed: out of range or sightline blocked
    - heal_wasted: heal landed but restored nothing (ally already full)
    """

    ally_death: float = -1.0
    heal_scale: float = 0.1
    heal_failed: float = -0.02
    heal_wasted: float = -0.01
    # Restored amounts at or below this count as "nothing restored".
    heal_min_restored: float = 0.001


class RewardAccumulator:
    def __init__(self) -> None:
        self.total = 0.0
        self._step = 0.0
        self.breakdown: dict[str, float] = defaultdict(float)

    def add(self, value: float, component: str) -> None:
        value = float(value)
        self.total += value
        self._step += value
        self.breakdown[component] += value

    @property
    def pending_step_reward(self) -> float:
        return self._step

    def end_step(self) -> float:
        """Return the reward earned since the previous call and start a new step."""
        r = self._step
        self._step = 0.0
        return r

    def reset(self) -> None:
        self.total = 0.0
        self._step = 0.0
        self.breakdown = defaultdict(float)
