from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

import numpy as np

# Branch sizes of the discrete action vector: [movement, heal].
ACTION_BRANCHES = (3, 2)


class ActionBranch(IntEnum):
    MOVE = 0
    HEAL = 1


class MoveIntent(IntEnum):
    HOLD = 0  # Keep inside the ideal band
    APPROACH = 1  # Close in toward the near edge of the band
    RETREAT = 2  # Back away from the ally


class HealIntent(IntEnum):
    NONE = 0
    HEAL = 1  # Attempt a heal this decision step


@dataclass(frozen=True)
class DecodedAction:
    move: MoveIntent
    heal: HealIntent


def decode_action(action: Sequence[int] | np.ndarray) -> DecodedAction:
    """Decode a discrete action vector into intents.

    A vector carrying only the movement branch decodes with no heal intent.
    """
    arr = np.asarray(action).reshape(-1)
    if arr.size < 1 or arr.size > len(ACTION_BRANCHES):
        raise ValueError(f"action has {arr.size} branches, expected 1..{len(ACTION_BRANCHES)}")

    values = [int(v) for v in arr]
    for branch, value in enumerate(values):
        if not 0 <= value < ACTION_BRANCHES[branch]:
            raise ValueError(
                f"action branch {ActionBranch(branch).name} value {value} out of range "
                f"[0, {ACTION_BRANCHES[branch]})"
            )

    heal = HealIntent(values[ActionBranch.HEAL]) if len(values) > 1 else HealIntent.NONE
    return DecodedAction(move=MoveIntent(values[ActionBranch.MOVE]), heal=heal)


def encode_action(move: MoveIntent, heal: HealIntent = HealIntent.NONE) -> np.ndarray:
    return np.array([int(move), int(heal)], dtype=np.int64)
