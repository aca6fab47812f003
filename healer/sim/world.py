from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..config import WorldConfig


@dataclass
class ArenaWorld:
    # Voxel types
    AIR = 0
    WALL = 1  # Blocks movement and sight
    GLASS = 2  # Blocks movement, see-through
    FOLIAGE = 3  # Walk-through, blocks sight

    voxels: np.ndarray  # uint8[sy, sz, sx] (y-major, y is up)
    voxel_size: float = 0.5

    @property
    def size_y(self) -> int:
        return int(self.voxels.shape[0])

    @property
    def size_z(self) -> int:
        return int(self.voxels.shape[1])

    @property
    def size_x(self) -> int:
        return int(self.voxels.shape[2])

    @property
    def extent_x(self) -> float:
        return self.size_x * self.voxel_size

    @property
    def extent_z(self) -> float:
        return self.size_z * self.voxel_size

    @staticmethod
    def mask_bit(voxel_type: int) -> int:
        return 1 << int(voxel_type)

    @classmethod
    def default_los_blockers(cls) -> int:
        return cls.mask_bit(cls.WALL) | cls.mask_bit(cls.FOLIAGE)

    def mask_lut(self, mask: int) -> np.ndarray:
        """bool[256] lookup: voxel type -> included in obstruction mask."""
        lut = np.zeros(256, dtype=np.bool_)
        for t in range(min(256, int(mask).bit_length())):
            if mask & (1 << t):
                lut[t] = True
        return lut

    def blocks_movement_lut(self) -> np.ndarray:
        lut = np.zeros(256, dtype=np.bool_)
        lut[self.WALL] = True
        lut[self.GLASS] = True
        return lut

    def in_bounds(self, ix: int, iy: int, iz: int) -> bool:
        return 0 <= ix < self.size_x and 0 <= iy < self.size_y and 0 <= iz < self.size_z

    def cell_of(self, pos: np.ndarray) -> tuple[int, int]:
        """Floor cell (iz, ix) containing a world position."""
        ix = int(np.floor(float(pos[0]) / self.voxel_size))
        iz = int(np.floor(float(pos[2]) / self.voxel_size))
        return iz, ix

    def cell_center(self, iz: int, ix: int) -> np.ndarray:
        return np.array([(ix + 0.5) * self.voxel_size, 0.0, (iz + 0.5) * self.voxel_size], dtype=np.float32)

    def set_box(
        self,
        min_ix: int,
        min_iz: int,
        max_ix_excl: int,
        max_iz_excl: int,
        height: int,
        value: int,
    ) -> None:
        min_ix = max(min_ix, 0)
        min_iz = max(min_iz, 0)
        max_ix_excl = min(max_ix_excl, self.size_x)
        max_iz_excl = min(max_iz_excl, self.size_z)
        height = min(max(height, 0), self.size_y)
        if min_ix >= max_ix_excl or min_iz >= max_iz_excl or height == 0:
            return
        self.voxels[0:height, min_iz:max_iz_excl, min_ix:max_ix_excl] = np.uint8(value)

    def blocked_columns(self, clearance_cells: int) -> np.ndarray:
        """bool[sz, sx]: floor cells with a movement blocker within the headroom."""
        top = min(max(1, clearance_cells), self.size_y)
        lut = self.blocks_movement_lut()
        return np.any(lut[self.voxels[0:top]], axis=0)

    @classmethod
    def empty(cls, config: WorldConfig) -> ArenaWorld:
        sx = max(1, int(round(config.size_x / config.voxel_size)))
        sy = max(1, int(round(config.size_y / config.voxel_size)))
        sz = max(1, int(round(config.size_z / config.voxel_size)))
        return cls(voxels=np.zeros((sy, sz, sx), dtype=np.uint8), voxel_size=config.voxel_size)

    @classmethod
    def generate(cls, config: WorldConfig, rng: np.random.Generator) -> ArenaWorld:
        """Open floor with scattered 2x2 pillars covering ~obstacle_fill of the area."""
        world = cls.empty(config)
        if config.obstacle_fill <= 0.0:
            return world

        height = max(1, int(round(config.pillar_height / config.voxel_size)))
        target = int(config.obstacle_fill * world.size_x * world.size_z)
        placed = 0
        attempts = 0
        while placed < target and attempts < target * 10 + 10:
            attempts += 1
            ix = int(rng.integers(1, max(2, world.size_x - 2)))
            iz = int(rng.integers(1, max(2, world.size_z - 2)))
            kind = cls.FOLIAGE if rng.random() < 0.2 else cls.WALL
            world.set_box(ix, iz, ix + 2, iz + 2, height, kind)
            placed += 4
        return world
