from __future__ import annotations

import logging
import math
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Healable(Protocol):
    """Capability: an entity that can receive healing."""

    def apply_heal(self, amount: float) -> float:
        """Restore up to `amount` hit points and return the amount actually restored."""
        ...


class HealthStore:
    """Hit-point store for one entity. HP is always clamped to [0, max_hp]."""

    def __init__(self, max_hp: float = 100.0, current_hp: float | None = None):
        self.max_hp = float(max_hp)
        start = self.max_hp if current_hp is None else float(current_hp)
        self.current_hp = min(max(start, 0.0), self.max_hp)
        self.active = True

    @property
    def is_dead(self) -> bool:
        return self.current_hp <= 0.0

    @property
    def fraction(self) -> float:
        return self.current_hp / max(1.0, self.max_hp)

    def apply_damage(self, amount: float) -> None:
        if self.is_dead or amount <= 0.0:
            return
        self.current_hp = max(0.0, self.current_hp - float(amount))

    def apply_heal(self, amount: float) -> float:
        if amount <= 0.0:
            return 0.0
        prev = self.current_hp
        healed = self.current_hp + float(amount)
        # Within rounding of max is full.
        if healed >= self.max_hp or math.isclose(healed, self.max_hp, rel_tol=1e-9, abs_tol=1e-9):
            healed = self.max_hp
        self.current_hp = healed
        return self.current_hp - prev

    def reset_to_full(self) -> None:
        self.current_hp = self.max_hp
        self.active = True

    def __repr__(self) -> str:
        return f"HealthStore({self.current_hp:.1f}/{self.max_hp:.1f})"


def apply_heal_to(target: object | None, amount: float) -> float:
    """Heal `target` through the Healable capability.

    Targets without the capability contribute nothing; a warning is logged
    and the episode continues.
    """
    if target is None or amount <= 0.0:
        return 0.0
    if not isinstance(target, Healable):
        logger.warning(f"Could not apply heal: {type(target).__name__} does not implement apply_heal")
        return 0.0
    return max(0.0, float(target.apply_heal(amount)))
