from __future__ import annotations

from dataclasses import dataclass

from .health import HealthStore


@dataclass
class DamageTicker:
    """Fixed-rate damage over time against one health store."""

    target: HealthStore | None
    dps: float = 5.0
    enabled: bool = True

    def tick(self, dt: float) -> None:
        if not self.enabled or self.target is None or self.dps <= 0.0:
            return
        self.target.apply_damage(self.dps * dt)
