"""Episode lifecycle state machine.

Ally death can be observed on any frame, but the episode may only end on a
decision step. Detection raises a pending flag (recorded once, not counted);
the intent resolver consumes it at the next decision boundary, before any
action is applied, so every recorded observation is paired with an action.

    RUNNING --ally hp <= 0 (any frame)--> PENDING_TERMINATION
    PENDING_TERMINATION --next decision step--> TERMINATED
    TERMINATED --begin()--> RUNNING
"""

from __future__ import annotations

import logging
from enum import Enum

from ..sim.health import HealthStore

logger = logging.getLogger(__name__)


class EpisodePhase(str, Enum):
    RUNNING = "running"
    PENDING_TERMINATION = "pending_termination"
    TERMINATED = "terminated"


class EpisodeLifecycle:
    def __init__(self, ally_death_reward: float = -1.0):
        self.ally_death_reward = float(ally_death_reward)
        self.phase = EpisodePhase.RUNNING
        self.pending_reward = 0.0

    @property
    def pending(self) -> bool:
        return self.phase is EpisodePhase.PENDING_TERMINATION

    def observe(self, ally_health: HealthStore | None) -> bool:
        """Per-frame terminal check. Returns True when a termination was newly flagged."""
        if self.phase is not EpisodePhase.RUNNING or ally_health is None:
            return False
        if ally_health.current_hp <= 0.0:
            self.phase = EpisodePhase.PENDING_TERMINATION
            self.pending_reward = self.ally_death_reward
            return True
        return False

    def fire(self) -> float:
        """Consume the pending termination; returns the stored terminal reward."""
        if not self.pending:
            raise RuntimeError(f"no pending termination to fire (phase={self.phase.value})")
        reward = self.pending_reward
        self.pending_reward = 0.0
        self.phase = EpisodePhase.TERMINATED
        return reward

    def begin(self) -> None:
        if self.pending:
            logger.warning(f"Discarding pending termination (reward={self.pending_reward}) on explicit reset")
        self.phase = EpisodePhase.RUNNING
        self.pending_reward = 0.0
