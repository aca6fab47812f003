from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..actions import HealIntent, MoveIntent, encode_action
from ..constants import RANGE_EPSILON
from ..sim.body import horizontal_distance

if TYPE_CHECKING:
    from ..env.env import HealerEnv


class HeuristicPolicy:
    """
    Simple baseline controller (cheats by reading env state).

    Behavior:
    - Approach when farther than ideal_max, retreat when closer than ideal_min, else hold.
    - Heal when the ally is missing at least `heal_threshold` of its HP,
      in range, with a clear sightline and the cooldown elapsed.
    """

    def __init__(self, heal_threshold: float = 0.9):
        self.heal_threshold = float(heal_threshold)

    def act(self, env: HealerEnv) -> np.ndarray:
        agent = env.agent
        if agent is None or agent.ally_body is None:
            return encode_action(MoveIntent.HOLD)

        cfg = agent.config
        dist = horizontal_distance(agent.body.pos, agent.ally_body.pos)
        if dist > cfg.ideal_max:
            move = MoveIntent.APPROACH
        elif dist < cfg.ideal_min:
            move = MoveIntent.RETREAT
        else:
            move = MoveIntent.HOLD

        heal = HealIntent.NONE
        ally_health = agent.ally_health
        if ally_health is not None and ally_health.fraction < self.heal_threshold:
            in_range = dist <= cfg.heal_range + RANGE_EPSILON
            ready = env.time_s >= agent.heal.next_heal_time
            if in_range and ready and agent.los.is_clear(agent.body.pos, agent.ally_body.pos):
                heal = HealIntent.HEAL

        return encode_action(move, heal)


class RandomPolicy:
    def __init__(self, rng: np.random.Generator | None = None):
        self.rng = rng or np.random.default_rng()

    def act(self, env: HealerEnv) -> np.ndarray:
        return np.array([self.rng.integers(0, 3), self.rng.integers(0, 2)], dtype=np.int64)
