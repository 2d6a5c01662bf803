# =============================================================================
# L4 Planning - D* Lite (moving start)
# =============================================================================
# Incremental replanning. The search runs from the destination toward the
# vehicle so that it keeps a fixed root while the vehicle moves; every call
# only repairs the part of the search invalidated by grid changes.
#
# Role names follow the algorithm, not the vehicle:
#   start - algorithmic start = the destination tile (rhs = 0)
#   goal  - algorithmic goal  = the vehicle tile
# =============================================================================

import heapq
import itertools
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger

from ..base import IncrementalPlanner
from ..types import INF, InvariantViolation, Path, Waypoint
from ..config import ORTHOGONAL_COST, DIAGONAL_COST

Tile = Tuple[int, int]
Key = Tuple[float, float]

NEIGHBOUR_OFFSETS = [(-1, -1), (0, -1), (1, -1),
                     (-1, 0), (1, 0),
                     (-1, 1), (0, 1), (1, 1)]


@dataclass(eq=False)
class IncrementalNode:
    """Persistent search state of one tile."""
    x: int
    y: int
    sequence: int                           # creation order, queue tie-break only
    g: float = INF                          # settled cost to the destination
    rhs: float = INF                        # one-step lookahead cost
    key: Key = (INF, INF)
    queued: bool = False
    predecessors: Set[Tile] = field(default_factory=set)

    @property
    def tile(self) -> Tile:
        return self.x, self.y

    @property
    def consistent(self) -> bool:
        return self.g == self.rhs


class DStarLite(IncrementalPlanner):
    """
    D* Lite with a moving vehicle and a fixed destination.

    The first call builds the node cache and plans from scratch. Later calls
    add the heuristic offset ``km`` for the vehicle's movement, diff the grid
    against the cached copy, update the affected vertices and repair the
    search. A new destination or grid shape resets the planner.

    The vehicle's own tile and the destination tile are always treated as
    clear. Edges touching an obstructed tile cost infinity.
    """

    name = 'DStarLite'

    def __init__(self):
        self._sequence = itertools.count()
        self.reset()

    def reset(self):
        self._nodes: Dict[Tile, IncrementalNode] = {}
        self._queue: List[Tuple[float, float, int, int, int]] = []
        self._grid: Optional[np.ndarray] = None
        self._start: Optional[Tile] = None
        self._goal: Optional[Tile] = None
        self.km = 0.0
        self.expansions = 0

    @property
    def is_initialized(self) -> bool:
        return self._grid is not None

    @property
    def start_tile(self) -> Optional[Tile]:
        """Algorithmic start (the destination)."""
        return self._start

    @property
    def goal_tile(self) -> Optional[Tile]:
        """Algorithmic goal (the vehicle)."""
        return self._goal

    def node(self, tile: Tile) -> IncrementalNode:
        """Cached node of a tile, created on first use."""
        node = self._nodes.get(tile)
        if node is None:
            node = IncrementalNode(tile[0], tile[1], next(self._sequence))
            self._nodes[tile] = node
        return node

    # =========================================================================
    # Costs and keys
    # =========================================================================

    @staticmethod
    def heuristic(a: Tile, b: Tile) -> float:
        """Octile distance in step-cost units; consistent with 10/14 steps."""
        dx = abs(a[0] - b[0])
        dy = abs(a[1] - b[1])
        return ORTHOGONAL_COST * (dx + dy) + (DIAGONAL_COST - 2 * ORTHOGONAL_COST) * min(dx, dy)

    def _obstructed(self, tile: Tile) -> bool:
        return self._grid[tile[0], tile[1]] > 0

    def cost(self, a: Tile, b: Tile) -> float:
        """Edge cost between adjacent tiles."""
        if self._obstructed(a) or self._obstructed(b):
            return INF
        if a[0] == b[0] or a[1] == b[1]:
            return ORTHOGONAL_COST
        return DIAGONAL_COST

    def _neighbours(self, tile: Tile) -> List[Tile]:
        size_x, size_y = self._grid.shape
        x, y = tile
        return [(x + dx, y + dy) for dx, dy in NEIGHBOUR_OFFSETS
                if 0 <= x + dx < size_x and 0 <= y + dy < size_y]

    def calculate_key(self, node: IncrementalNode) -> Key:
        best = min(node.g, node.rhs)
        if best == INF:
            return INF, INF
        return best + self.heuristic(node.tile, self._goal) + self.km, best

    # =========================================================================
    # Priority queue (lazy deletion)
    # =========================================================================

    def _push(self, node: IncrementalNode, key: Key):
        node.key = key
        node.queued = True
        heapq.heappush(self._queue, (key[0], key[1], node.sequence, node.x, node.y))

    def _remove(self, node: IncrementalNode):
        node.queued = False

    def _top(self) -> Optional[IncrementalNode]:
        """Smallest live entry, discarding stale ones."""
        while self._queue:
            k1, k2, _, x, y = self._queue[0]
            node = self._nodes[(x, y)]
            if node.queued and node.key == (k1, k2):
                return node
            heapq.heappop(self._queue)
        return None

    def _pop(self) -> IncrementalNode:
        node = self._top()
        heapq.heappop(self._queue)
        node.queued = False
        return node

    # =========================================================================
    # Core
    # =========================================================================

    def update_vertex(self, node: IncrementalNode):
        if node.tile != self._start:
            best = INF
            for tile in self._neighbours(node.tile):
                if tile in node.predecessors:
                    pred = self._nodes[tile]
                    best = min(best, pred.g + self.cost(tile, node.tile))
            node.rhs = best
        self._remove(node)
        if not node.consistent:
            self._push(node, self.calculate_key(node))

    def compute_shortest_path(self):
        """Expand inconsistent nodes until the vehicle's node is settled."""
        goal = self.node(self._goal)
        while True:
            top = self._top()
            if top is None:
                break
            if not (top.key < self.calculate_key(goal) or not goal.consistent):
                break

            old_key = top.key
            u = self._pop()
            new_key = self.calculate_key(u)
            if old_key < new_key:
                self._push(u, new_key)
                continue
            if u.consistent:
                raise InvariantViolation(f"Consistent node {u.tile} popped from the queue "
                                         f"(g = rhs = {u.g})")

            self.expansions += 1
            neighbours = self._neighbours(u.tile)
            if u.g > u.rhs:
                u.g = u.rhs
                for tile in neighbours:
                    successor = self.node(tile)
                    successor.predecessors.add(u.tile)
                    if not self._obstructed(tile):
                        self.update_vertex(successor)
            else:
                u.g = INF
                for tile in neighbours:
                    successor = self.node(tile)
                    successor.predecessors.discard(u.tile)
                    self.update_vertex(successor)
                self.update_vertex(u)

    def _initialize(self, grid: np.ndarray, vehicle: Tile, destination: Tile):
        self.reset()
        self._grid = grid
        self._start = destination
        self._goal = vehicle
        start = self.node(destination)
        start.rhs = 0
        self._push(start, self.calculate_key(start))
        logger.debug(f"[{self.name}] Initialized: destination {destination}, "
                     f"vehicle {vehicle}, grid {grid.shape}")

    def _apply_changes(self, grid: np.ndarray, vehicle: Tile):
        if vehicle != self._goal:
            # heuristic still anchored at the previous vehicle tile
            self.km += self.heuristic(self._goal, vehicle)
            self._goal = vehicle

        changed = np.argwhere(grid != self._grid)
        self._grid = grid

        affected = {vehicle}
        for x, y in changed:
            tile = (int(x), int(y))
            affected.add(tile)
            affected.update(self._neighbours(tile))
        if len(changed):
            logger.debug(f"[{self.name}] {len(changed)} grid cells changed, "
                         f"updating {len(affected)} vertices")
        for tile in sorted(affected):
            self.update_vertex(self.node(tile))

    def calculate_path(self, grid, start, destination, start_heading=0.0):
        grid = self.prepare_grid(grid, destination)
        self.check_tile(grid, start, 'Start')
        vehicle = (int(start[0]), int(start[1]))
        destination = (int(destination[0]), int(destination[1]))
        grid[vehicle[0], vehicle[1]] = 0

        if vehicle == destination:
            return []

        if (not self.is_initialized or destination != self._start
                or grid.shape != self._grid.shape):
            self._initialize(grid, vehicle, destination)
        else:
            self._apply_changes(grid, vehicle)

        self.compute_shortest_path()
        return self.extract_path()

    def extract_path(self) -> Optional[Path]:
        """
        Follow the cheapest predecessor from the vehicle to the destination.

        Returns:
            Waypoints after the vehicle tile, or None when the vehicle is cut off
        """
        current = self._goal
        if self.node(current).g == INF:
            logger.debug(f"[{self.name}] No path: vehicle {current} unreachable")
            return None

        path: Path = []
        visited = {current}
        while current != self._start:
            node = self._nodes[current]
            best_tile = None
            best_rank = (INF, 1)
            for tile in self._neighbours(current):
                if tile not in node.predecessors:
                    continue
                pred = self._nodes[tile]
                total = pred.g + self.cost(current, tile)
                # on equal cost prefer a settled, consistent predecessor
                rank = (total, 0 if pred.consistent else 1)
                if total < INF and rank < best_rank:
                    best_rank = rank
                    best_tile = tile
            if best_tile is None or best_tile in visited:
                logger.warning(f"[{self.name}] Path extraction stuck at {current}")
                return None
            visited.add(best_tile)
            path.append(Waypoint(*best_tile))
            current = best_tile
        return path

    # =========================================================================
    # Inspection
    # =========================================================================

    def g(self, tile: Tile) -> float:
        node = self._nodes.get(tuple(tile))
        return INF if node is None else node.g

    def rhs(self, tile: Tile) -> float:
        node = self._nodes.get(tuple(tile))
        return INF if node is None else node.rhs

    def path_cost(self, path: Path) -> float:
        """Total edge cost from the vehicle along ``path``."""
        total = 0.0
        current = self._goal
        for waypoint in path:
            total += self.cost(current, tuple(waypoint))
            current = tuple(waypoint)
        return total
