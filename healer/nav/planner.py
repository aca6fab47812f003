"""A* over NavGrid floor cells."""

from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .graph import DIAGONAL_STEP

if TYPE_CHECKING:
    from .graph import NavGrid, NodeID


def octile_distance(a: NodeID, b: NodeID, cell_size: float) -> float:
    """Cheapest unobstructed 8-connected cost between two (iz, ix) cells."""
    dz = abs(a[0] - b[0])
    dx = abs(a[1] - b[1])
    return cell_size * (max(dz, dx) + (DIAGONAL_STEP - 1.0) * min(dz, dx))


@dataclass
class SearchResult:
    path: list[NodeID] = field(default_factory=list)  # start..goal inclusive, empty if unreachable
    cost: float = 0.0
    expanded: int = 0

    @property
    def found(self) -> bool:
        return bool(self.path)


class Planner:
    """
    Shortest cell paths on a NavGrid.

    The octile heuristic uses the grid's own step weights, so it never
    overestimates and each cell is expanded at most once. Equal-priority
    entries pop newest first, which keeps the search running along
    straight corridors instead of fanning out.
    """

    def __init__(self, grid: NavGrid, max_expansions: int = 20000):
        self.grid = grid
        self.max_expansions = int(max_expansions)

    def find_path(self, start: NodeID, goal: NodeID) -> SearchResult:
        nodes = self.grid.nodes
        if start not in nodes or goal not in nodes:
            return SearchResult()
        if start == goal:
            return SearchResult(path=[start])

        cell = self.grid.cell_size
        order = itertools.count()
        heap = [(octile_distance(start, goal, cell), 0, start)]
        best = {start: 0.0}
        parent: dict[NodeID, NodeID] = {}
        closed: set[NodeID] = set()

        while heap and len(closed) < self.max_expansions:
            _, _, cur = heapq.heappop(heap)
            if cur in closed:
                continue
            if cur == goal:
                return SearchResult(path=self._unwind(parent, goal), cost=best[goal], expanded=len(closed))
            closed.add(cur)

            g = best[cur]
            for nxt, step in nodes[cur].edges:
                if nxt in closed:
                    continue
                cand = g + step
                if cand < best.get(nxt, math.inf):
                    best[nxt] = cand
                    parent[nxt] = cur
                    heapq.heappush(heap, (cand + octile_distance(nxt, goal, cell), -next(order), nxt))

        return SearchResult(expanded=len(closed))

    @staticmethod
    def _unwind(parent: dict[NodeID, NodeID], goal: NodeID) -> list[NodeID]:
        path = [goal]
        while path[-1] in parent:
            path.append(parent[path[-1]])
        path.reverse()
        return path
