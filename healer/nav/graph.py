from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.ndimage import minimum_filter

from ..sim.world import ArenaWorld

# Type alias for a node ID: (iz, ix) floor cell
NodeID = Tuple[int, int]

# Edge weight of a diagonal step, in cells.
DIAGONAL_STEP = 1.414

@dataclass
class NavNode:
    id: NodeID
    pos: Tuple[float, float, float]  # World center of the walkable cell (y = floor)
    edges: List[Tuple[NodeID, float]] = field(default_factory=list) # List of (neighbor_id, cost)

class NavGrid:
    """
    Walkable floor cells of an ArenaWorld as a graph.

    - A floor cell is walkable if no movement blocker sits within `clearance` above it
    - The walkable mask is eroded by `radius_cells` so the agent footprint fits
    - 8-connected, diagonal moves never cut blocked corners
    """
    def __init__(self, cell_size: float = 0.5):
        self.nodes: Dict[NodeID, NavNode] = {}
        self.cell_size = cell_size
        self.walkable: np.ndarray = np.zeros((0, 0), dtype=np.bool_)

    @classmethod
    def build(cls, world: ArenaWorld, clearance: float = 2.0, radius_cells: int = 0) -> NavGrid:
        grid = cls(cell_size=world.voxel_size)

        clearance_cells = max(1, int(math.ceil(clearance / world.voxel_size)))
        walkable = ~world.blocked_columns(clearance_cells)

        if radius_cells > 0:
            footprint = np.ones((2*radius_cells+1, 2*radius_cells+1), dtype=np.bool_)
            walkable = minimum_filter(walkable.astype(np.uint8), footprint=footprint, mode='constant', cval=0).astype(np.bool_)

        grid.walkable = walkable

        for coord in np.argwhere(walkable):
            iz, ix = int(coord[0]), int(coord[1])
            grid._add_node((iz, ix))

        # Neighbor offsets (dz, dx, cost_mult)
        neighbors = [
            (0, 1, 1.0), (0, -1, 1.0), (1, 0, 1.0), (-1, 0, 1.0),
            (1, 1, DIAGONAL_STEP), (1, -1, DIAGONAL_STEP), (-1, 1, DIAGONAL_STEP), (-1, -1, DIAGONAL_STEP)
        ]

        for (iz, ix), node in grid.nodes.items():
            for dz, dx, dist_mult in neighbors:
                nid = (iz + dz, ix + dx)
                if nid not in grid.nodes:
                    continue
                if dz != 0 and dx != 0:
                    if (iz + dz, ix) not in grid.nodes or (iz, ix + dx) not in grid.nodes:
                        continue
                node.edges.append((nid, grid.cell_size * dist_mult))

        return grid

    def _add_node(self, nid: NodeID) -> None:
        iz, ix = nid
        wx = (ix + 0.5) * self.cell_size
        wz = (iz + 0.5) * self.cell_size
        self.nodes[nid] = NavNode(nid, (wx, 0.0, wz))

    def cell_of(self, pos: Tuple[float, float, float] | np.ndarray) -> NodeID:
        return (int(math.floor(float(pos[2]) / self.cell_size)), int(math.floor(float(pos[0]) / self.cell_size)))

    def nearest_node(self, pos: Tuple[float, float, float] | np.ndarray, max_distance: float = math.inf) -> Optional[NodeID]:
        """Nearest walkable cell center within `max_distance` (horizontal)."""
        iz, ix = self.cell_of(pos)
        if (iz, ix) in self.nodes:
            return (iz, ix)

        px, pz = float(pos[0]), float(pos[2])
        best_node: Optional[NodeID] = None
        best_dist_sq = max_distance * max_distance

        if math.isinf(max_distance):
            search_r = max(self.walkable.shape) if self.walkable.size else 0
        else:
            search_r = int(math.ceil(max_distance / self.cell_size)) + 1

        # Expanding rings; stop once a ring cannot beat the best found.
        for r in range(1, search_r + 1):
            if best_node is not None and (r - 1) * self.cell_size > math.sqrt(best_dist_sq):
                break
            for dz in range(-r, r + 1):
                for dx in range(-r, r + 1):
                    if max(abs(dz), abs(dx)) != r:
                        continue
                    node = self.nodes.get((iz + dz, ix + dx))
                    if node is None:
                        continue
                    d_sq = (node.pos[0] - px)**2 + (node.pos[2] - pz)**2
                    if d_sq <= best_dist_sq:
                        best_dist_sq = d_sq
                        best_node = node.id

        return best_node

    def sample_position(self, pos: np.ndarray, max_distance: float) -> Optional[np.ndarray]:
        """Snap a point onto the walkable floor; None if nothing walkable is close enough."""
        nid = self.cell_of(pos)
        if nid in self.nodes:
            return np.array([float(pos[0]), 0.0, float(pos[2])], dtype=np.float32)
        near = self.nearest_node(pos, max_distance=max_distance)
        if near is None:
            return None
        return np.asarray(self.nodes[near].pos, dtype=np.float32)

    def random_walkable(self, rng: np.random.Generator) -> Optional[np.ndarray]:
        if not self.nodes:
            return None
        ids = list(self.nodes.keys())
        nid = ids[int(rng.integers(0, len(ids)))]
        return np.asarray(self.nodes[nid].pos, dtype=np.float32)
