# =============================================================================
# L4 Planning - Potential Field
# =============================================================================
# Local force-based planning: attraction toward the destination plus
# inverse-square repulsion from nearby obstacle tiles.
# =============================================================================

import math
import numpy as np

from loguru import logger

from ..base import SearchStrategy, smooth_path, is_walkable, is_walkable_wide
from ..types import Waypoint
from ..config import (
    GOAL_FORCE,
    REPULSION_CUTOFF_SQ,
    FIELD_STEPS,
    FIELD_SMOOTHED_STEPS,
    FIELD_MAX_CUT
)


class VectorField(SearchStrategy):
    """
    Potential-field planner.

    At each of ``num_steps`` lookahead steps the resulting force decides one
    orthogonal move, along the axis with the larger magnitude. The field does
    not search: it can stall in local minima and never reports failure, and
    the destination is always appended as the final waypoint.
    """

    name = 'VectorField'

    def __init__(self, num_steps: int = FIELD_STEPS, goal_force: float = GOAL_FORCE,
                 cutoff_sq: float = REPULSION_CUTOFF_SQ):
        self.num_steps = num_steps
        self.goal_force = goal_force
        self.cutoff_sq = cutoff_sq

    def force_at(self, obstacles: np.ndarray, x: int, y: int, destination):
        """
        Resulting force at a tile.

        Args:
            obstacles: (N, 2) array of obstacle tile coordinates
            x, y: Tile the force acts on
            destination: Destination tile

        Returns:
            (force_x, force_y)
        """
        force_x = 0.0
        force_y = 0.0

        if len(obstacles):
            dx = obstacles[:, 0] - x
            dy = obstacles[:, 1] - y
            dist2 = dx * dx + dy * dy
            near = (dist2 > 0) & (dist2 <= self.cutoff_sq)
            if near.any():
                # unit vector / dist^2, pointing away from the obstacle
                dist = np.sqrt(dist2[near])
                force_x -= float(np.sum(dx[near] / dist / dist2[near]))
                force_y -= float(np.sum(dy[near] / dist / dist2[near]))

        gx = destination[0] - x
        gy = destination[1] - y
        if gx != 0 or gy != 0:
            ang = math.atan2(gy, gx)
            force_x += self.goal_force * math.cos(ang)
            force_y += self.goal_force * math.sin(ang)
        return force_x, force_y

    def calculate_path(self, grid, start, destination, start_heading=0.0):
        grid = self.prepare_grid(grid, destination)
        self.check_tile(grid, start, 'Start')
        start = (int(start[0]), int(start[1]))
        destination = (int(destination[0]), int(destination[1]))
        if start == destination:
            return []

        size_x, size_y = grid.shape
        obstacles = np.argwhere(grid > 0)

        path = []
        x, y = start
        for _ in range(self.num_steps):
            force_x, force_y = self.force_at(obstacles, x, y, destination)
            if abs(force_x) > abs(force_y):
                next_x, next_y = x + (1 if force_x > 0 else -1), y
            else:
                next_x, next_y = x, y + (1 if force_y > 0 else -1)

            if not (0 <= next_x < size_x and 0 <= next_y < size_y):
                logger.debug(f"[{self.name}] Field pushes off the grid at {(x, y)}")
                break
            x, y = next_x, next_y
            path.append(Waypoint(x, y))

        path.append(Waypoint(*destination))
        return self.post_process(grid, start, path)

    def post_process(self, grid, start, path):
        return path


class VectorFieldSS(VectorField):
    """Potential field with a longer lookahead and capped smoothing."""

    name = 'VectorFieldSS'

    def __init__(self, num_steps: int = FIELD_SMOOTHED_STEPS, max_cut: int = FIELD_MAX_CUT):
        super().__init__(num_steps=num_steps)
        self.max_cut = max_cut

    def post_process(self, grid, start, path):
        return smooth_path(grid, start, path, is_walkable, max_cut=self.max_cut)


class VectorFieldSSW(VectorFieldSS):
    """VectorFieldSS with width-aware smoothing."""

    name = 'VectorFieldSSW'

    def post_process(self, grid, start, path):
        return smooth_path(grid, start, path, is_walkable_wide, max_cut=self.max_cut)
