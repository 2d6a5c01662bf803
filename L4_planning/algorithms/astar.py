# =============================================================================
# L4 Planning - A* Family
# =============================================================================
# Grid A* and its variants:
#   AStar      - 8-neighbour A* with a weighted Manhattan heuristic
#   AStarCS    - corner-safe neighbours + smoothing
#   AStarRR    - obstacle repulsion cost
#   AStarRRSW  - repulsion + width-aware smoothing
#   AStarT     - turn penalty, states keyed by (tile, direction)
# =============================================================================

import numpy as np
from typing import List, Tuple

from loguru import logger

from ..base import SearchStrategy, backtrack, smooth_path, is_walkable, is_walkable_wide
from ..types import Direction, Path, SearchNode
from ..config import (
    ORTHOGONAL_COST,
    DIAGONAL_COST,
    HEURISTIC_WEIGHTING,
    REPULSION_WEIGHTING,
    REPULSION_DIST,
    TURNING_WEIGHTING
)

Tile = Tuple[int, int]

# Left column, right column, then above and below
NEIGHBOUR_OFFSETS = [(-1, 0), (-1, -1), (-1, 1),
                     (1, 0), (1, -1), (1, 1),
                     (0, -1), (0, 1)]


class AStar(SearchStrategy):
    """
    Best-first grid search with f = g + h.

    The open list is scanned linearly and the first node with the minimum f
    wins, so insertion order decides ties. A candidate already in the open
    or closed list is dropped (no re-parenting).

    Subclasses customise the search through three hooks: neighbours(),
    step_cost() and state_key(), plus post_process() for smoothing.
    """

    name = 'AStar'

    def __init__(self, heuristic_weighting: int = HEURISTIC_WEIGHTING):
        self.heuristic_weighting = heuristic_weighting
        self.nodes_expanded = 0

    def heuristic(self, x: int, y: int, destination: Tile) -> int:
        return self.heuristic_weighting * (abs(x - destination[0]) + abs(y - destination[1]))

    # =========================================================================
    # Hooks
    # =========================================================================

    def neighbours(self, grid: np.ndarray, x: int, y: int) -> List[Tile]:
        """In-bounds tiles adjacent to (x, y)."""
        size_x, size_y = grid.shape
        return [(x + dx, y + dy) for dx, dy in NEIGHBOUR_OFFSETS
                if 0 <= x + dx < size_x and 0 <= y + dy < size_y]

    def step_cost(self, grid: np.ndarray, parent: SearchNode, node: SearchNode) -> int:
        """Cost of moving from parent to node."""
        if node.x == parent.x or node.y == parent.y:
            return ORTHOGONAL_COST
        return DIAGONAL_COST

    def start_direction(self, start_heading: float) -> Direction:
        return Direction.NONE

    def state_key(self, node: SearchNode):
        """Identity used by duplicate filtering."""
        return node.x, node.y

    def post_process(self, grid: np.ndarray, start: Tile, path: Path) -> Path:
        return path

    # =========================================================================
    # Search
    # =========================================================================

    def calculate_path(self, grid, start, destination, start_heading=0.0):
        grid = self.prepare_grid(grid, destination)
        self.check_tile(grid, start, 'Start')
        start = (int(start[0]), int(start[1]))
        destination = (int(destination[0]), int(destination[1]))
        self.nodes_expanded = 0

        if start == destination:
            return []

        logger.debug(f"[{self.name}] Calculating path from {start} to {destination}")

        start_node = SearchNode(start[0], start[1],
                                heuristic=self.heuristic(start[0], start[1], destination),
                                direction=self.start_direction(start_heading))
        open_list: List[SearchNode] = [start_node]
        seen = {self.state_key(start_node)}     # everything ever opened

        while open_list:
            chosen = open_list[0]
            for node in open_list:
                if node.f < chosen.f:
                    chosen = node
            open_list.remove(chosen)
            self.nodes_expanded += 1

            if (chosen.x, chosen.y) == destination:
                path = backtrack(chosen)
                logger.debug(f"[{self.name}] Path found: {len(path)} waypoints, "
                             f"cost {chosen.distance}, {self.nodes_expanded} nodes expanded")
                return self.post_process(grid, start, path)

            for x, y in self.neighbours(grid, chosen.x, chosen.y):
                if grid[x, y] > 0:
                    continue
                candidate = SearchNode(x, y, parent=chosen,
                                       direction=Direction.from_delta(x - chosen.x, y - chosen.y))
                key = self.state_key(candidate)
                if key in seen:
                    continue
                seen.add(key)
                candidate.distance = chosen.distance + self.step_cost(grid, chosen, candidate)
                candidate.heuristic = self.heuristic(x, y, destination)
                open_list.append(candidate)

        logger.debug(f"[{self.name}] No path from {start} to {destination} "
                     f"after {self.nodes_expanded} nodes")
        return None


class AStarCS(AStar):
    """
    Corner-safe A* with smoothing.

    Moves orthogonally, and diagonally only when both orthogonal tiles
    flanking the diagonal are clear, so the path never squeezes between two
    diagonally adjacent obstacles.
    """

    name = 'AStarCS'

    def neighbours(self, grid, x, y):
        size_x, size_y = grid.shape

        def clear(tx, ty):
            return 0 <= tx < size_x and 0 <= ty < size_y and grid[tx, ty] == 0

        tiles = [(tx, ty) for tx, ty in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1))
                 if 0 <= tx < size_x and 0 <= ty < size_y]
        for dx in (-1, 1):
            for dy in (-1, 1):
                if clear(x + dx, y) and clear(x, y + dy):
                    tiles.append((x + dx, y + dy))
        return tiles

    def post_process(self, grid, start, path):
        return smooth_path(grid, start, path, is_walkable)


class AStarRR(AStar):
    """A* whose step cost grows near obstacles."""

    name = 'AStarRR'

    def __init__(self, heuristic_weighting: int = HEURISTIC_WEIGHTING,
                 repulsion_weighting: int = REPULSION_WEIGHTING,
                 repulsion_dist: int = REPULSION_DIST):
        super().__init__(heuristic_weighting)
        self.repulsion_weighting = repulsion_weighting
        self.repulsion_dist = repulsion_dist

    def repulsion(self, grid: np.ndarray, x: int, y: int) -> int:
        """
        Repulsion of a tile, lower is a better candidate.

        Sums weighting / (i + j) for obstacle tiles at (x - i, y - j) and
        (x + i, y + j), 0 <= i, j < repulsion_dist. Distances are in tiles, so
        the grid resolution changes how sensitive this is.
        """
        size_x, size_y = grid.shape
        total = 0.0
        for i in range(self.repulsion_dist):
            for j in range(self.repulsion_dist):
                if i + j == 0:
                    continue
                for tx, ty in ((x - i, y - j), (x + i, y + j)):
                    if 0 <= tx < size_x and 0 <= ty < size_y and grid[tx, ty] > 0:
                        total += self.repulsion_weighting / (i + j)
        return int(total)

    def step_cost(self, grid, parent, node):
        return super().step_cost(grid, parent, node) + self.repulsion(grid, node.x, node.y)


class AStarRRSW(AStarRR):
    """Repulsion A* with width-aware smoothing."""

    name = 'AStarRRSW'

    def post_process(self, grid, start, path):
        return smooth_path(grid, start, path, is_walkable_wide)


class AStarT(AStar):
    """
    Turn-penalized A*.

    Each node remembers the direction it was entered from; a step costs an
    extra ``turning_weighting`` per 45 degrees of heading change. The same
    tile reached from a different direction is a different state.
    """

    name = 'AStarT'

    def __init__(self, heuristic_weighting: int = HEURISTIC_WEIGHTING,
                 turning_weighting: int = TURNING_WEIGHTING):
        super().__init__(heuristic_weighting)
        self.turning_weighting = turning_weighting

    def start_direction(self, start_heading):
        return Direction.from_heading(start_heading)

    def step_cost(self, grid, parent, node):
        turning = self.turning_weighting * node.direction.turn_steps(parent.direction)
        return super().step_cost(grid, parent, node) + turning

    def state_key(self, node):
        return node.x, node.y, node.direction
