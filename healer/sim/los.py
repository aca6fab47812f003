from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numba
import numpy as np

from ..config import LOS_MASK_NONE
from .world import ArenaWorld


@dataclass(frozen=True)
class RaycastHit:
    blocked: bool
    blocked_voxel: tuple[int, int, int] | None  # (x, y, z) voxel indices


def _raycast_dda_pure(
    voxels: np.ndarray,
    blocks_lut: np.ndarray,
    start_x: float, start_y: float, start_z: float,
    end_x_f: float, end_y_f: float, end_z_f: float,
    include_end: bool,
) -> Tuple[bool, int, int, int]:
    """
    3D DDA voxel traversal in voxel coordinates over a y-major grid.

    Returns: (blocked, hit_x, hit_y, hit_z)
             If not blocked, hit coords are -1.
    """
    dx = end_x_f - start_x
    dy = end_y_f - start_y
    dz = end_z_f - start_z

    length = math.sqrt(dx*dx + dy*dy + dz*dz)
    if length <= 1e-9:
        return (False, -1, -1, -1)

    ux, uy, uz = dx/length, dy/length, dz/length

    x = int(math.floor(start_x))
    y = int(math.floor(start_y))
    z = int(math.floor(start_z))
    end_x = int(math.floor(end_x_f))
    end_y = int(math.floor(end_y_f))
    end_z = int(math.floor(end_z_f))

    step_x = 1 if ux > 0 else (-1 if ux < 0 else 0)
    step_y = 1 if uy > 0 else (-1 if uy < 0 else 0)
    step_z = 1 if uz > 0 else (-1 if uz < 0 else 0)

    t_delta_x = abs(1.0 / ux) if ux != 0 else 1e30
    t_delta_y = abs(1.0 / uy) if uy != 0 else 1e30
    t_delta_z = abs(1.0 / uz) if uz != 0 else 1e30

    if step_x > 0:
        t_max_x = (x + 1.0 - start_x) * t_delta_x
    elif step_x < 0:
        t_max_x = (start_x - x) * t_delta_x
    else:
        t_max_x = 1e30

    if step_y > 0:
        t_max_y = (y + 1.0 - start_y) * t_delta_y
    elif step_y < 0:
        t_max_y = (start_y - y) * t_delta_y
    else:
        t_max_y = 1e30

    if step_z > 0:
        t_max_z = (z + 1.0 - start_z) * t_delta_z
    elif step_z < 0:
        t_max_z = (start_z - z) * t_delta_z
    else:
        t_max_z = 1e30

    sy = voxels.shape[0]
    sz = voxels.shape[1]
    sx = voxels.shape[2]

    max_steps = int(length * 2) + sx + sy + sz + 2

    for _ in range(max_steps):
        if x == end_x and y == end_y and z == end_z:
            if not include_end:
                return (False, -1, -1, -1)
            if 0 <= x < sx and 0 <= y < sy and 0 <= z < sz:
                if blocks_lut[voxels[y, z, x]]:
                    return (True, x, y, z)
            return (False, -1, -1, -1)

        if t_max_x < t_max_y:
            if t_max_x < t_max_z:
                x += step_x
                t_max_x += t_delta_x
            else:
                z += step_z
                t_max_z += t_delta_z
        else:
            if t_max_y < t_max_z:
                y += step_y
                t_max_y += t_delta_y
            else:
                z += step_z
                t_max_z += t_delta_z

        # Above the arena walls nothing obstructs; elsewhere leaving the grid blocks.
        if y >= sy:
            if x == end_x and y == end_y and z == end_z:
                return (False, -1, -1, -1)
            continue
        if not (0 <= x < sx and 0 <= y and 0 <= z < sz):
            if x == end_x and y == end_y and z == end_z:
                return (False, -1, -1, -1)
            return (True, -1, -1, -1)

        if (not include_end) and x == end_x and y == end_y and z == end_z:
            return (False, -1, -1, -1)

        if blocks_lut[voxels[y, z, x]]:
            return (True, x, y, z)

    return (True, -1, -1, -1)


_raycast_dda_numba = numba.njit(cache=True)(_raycast_dda_pure)


def raycast_voxels(
    world: ArenaWorld,
    start_xyz: np.ndarray,
    end_xyz: np.ndarray,
    mask: int,
    *,
    include_end: bool = False,
) -> RaycastHit:
    """
    Voxel traversal between two world-space points against an obstruction mask.
    Uses the Numba JIT-compiled core.
    """
    lut = world.mask_lut(mask)
    inv = 1.0 / world.voxel_size

    blocked, hx, hy, hz = _raycast_dda_numba(
        world.voxels,
        lut,
        float(start_xyz[0]) * inv, float(start_xyz[1]) * inv, float(start_xyz[2]) * inv,
        float(end_xyz[0]) * inv, float(end_xyz[1]) * inv, float(end_xyz[2]) * inv,
        include_end,
    )

    blocked_voxel = (hx, hy, hz) if blocked and hx >= 0 else None
    return RaycastHit(blocked=blocked, blocked_voxel=blocked_voxel)


def has_los(world: ArenaWorld, start_xyz: np.ndarray, end_xyz: np.ndarray, mask: int) -> bool:
    if mask == LOS_MASK_NONE:
        return True
    return not raycast_voxels(world, start_xyz, end_xyz, mask).blocked


class LineOfSight:
    """Sightline queries between two ground positions, cast at eye height."""

    def __init__(self, world: ArenaWorld | None, mask: int = LOS_MASK_NONE, eye_height: float = 1.6):
        self.world = world
        self.mask = int(mask)
        self.eye_offset = np.array([0.0, float(eye_height), 0.0], dtype=np.float32)

    def is_clear(self, a: np.ndarray, b: np.ndarray) -> bool:
        # No blockers configured: open arena, always clear.
        if self.mask == LOS_MASK_NONE or self.world is None:
            return True
        return has_los(self.world, np.asarray(a) + self.eye_offset, np.asarray(b) + self.eye_offset, self.mask)
