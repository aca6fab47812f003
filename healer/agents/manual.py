from __future__ import annotations

from typing import Iterable

import numpy as np

from ..actions import HealIntent, MoveIntent, encode_action


class ManualOverride:
    """
    Key-style signals -> action branches, for interactive smoke tests.

    - approach_key: branch A = APPROACH (wins over retreat)
    - retreat_key: branch A = RETREAT
    - heal_key: branch B = HEAL
    """

    def __init__(self, approach_key: str = "w", retreat_key: str = "s", heal_key: str = "h"):
        self.approach_key = approach_key.lower()
        self.retreat_key = retreat_key.lower()
        self.heal_key = heal_key.lower()

    def action_from_keys(self, keys: Iterable[str]) -> np.ndarray:
        pressed = {k.strip().lower() for k in keys}
        if self.approach_key in pressed:
            move = MoveIntent.APPROACH
        elif self.retreat_key in pressed:
            move = MoveIntent.RETREAT
        else:
            move = MoveIntent.HOLD
        heal = HealIntent.HEAL if self.heal_key in pressed else HealIntent.NONE
        return encode_action(move, heal)
