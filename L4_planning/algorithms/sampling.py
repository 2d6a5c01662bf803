# =============================================================================
# L4 Planning - Rapidly-Exploring Random Tree
# =============================================================================

import math
import numpy as np
from typing import List, Optional

from loguru import logger

from ..base import SearchStrategy, backtrack, is_walkable_wide
from ..types import SearchNode
from ..config import RRT_STEP, RRT_MAX_SAMPLES, VEHICLE_TILE_WIDTH


class RapidExploringRandomTree(SearchStrategy):
    """
    Single-tree RRT on the tile grid.

    Each iteration draws a uniform random tile, finds the nearest tree node
    (squared Euclidean distance) and steers at most ``step`` tiles toward the
    sample. The new node is kept if the width-aware segment check passes.
    The search ends when an accepted node lands on the destination.

    There is no goal bias, so cluttered layouts can need many samples;
    ``max_samples`` bounds the effort and turns it into a no-path result.
    """

    name = 'RapidExploringRandomTree'

    def __init__(self, step: float = RRT_STEP, max_samples: int = RRT_MAX_SAMPLES,
                 width: float = VEHICLE_TILE_WIDTH,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize the planner.

        Args:
            step: Maximum edge length (tiles)
            max_samples: Samples drawn before giving up
            width: Vehicle width for the segment check (tiles)
            rng: Random generator, seeded for reproducible trees
        """
        self.step = step
        self.max_samples = max_samples
        self.width = width
        self.rng = rng if rng is not None else np.random.default_rng()
        self.tree_size = 0
        self.samples_drawn = 0

    def calculate_path(self, grid, start, destination, start_heading=0.0):
        grid = self.prepare_grid(grid, destination)
        self.check_tile(grid, start, 'Start')
        start = (int(start[0]), int(start[1]))
        destination = (int(destination[0]), int(destination[1]))
        size_x, size_y = grid.shape

        self.tree_size = 1
        self.samples_drawn = 0
        if start == destination:
            return []

        vertices: List[SearchNode] = [SearchNode(start[0], start[1])]
        xs = [start[0]]
        ys = [start[1]]

        while self.samples_drawn < self.max_samples:
            self.samples_drawn += 1
            rand_x = int(self.rng.integers(size_x))
            rand_y = int(self.rng.integers(size_y))

            # Nearest neighbour, first minimum wins
            dist2 = (rand_x - np.asarray(xs)) ** 2 + (rand_y - np.asarray(ys)) ** 2
            nearest_index = int(np.argmin(dist2))
            if dist2[nearest_index] == 0:
                continue
            near = vertices[nearest_index]

            dx = rand_x - near.x
            dy = rand_y - near.y
            dist = math.sqrt(dx * dx + dy * dy)
            if dist > self.step:
                new_x = int(dx / dist * self.step) + near.x
                new_y = int(dy / dist * self.step) + near.y
            else:
                new_x, new_y = rand_x, rand_y

            if not is_walkable_wide((near.x, near.y), (new_x, new_y), grid, self.width):
                continue

            node = SearchNode(new_x, new_y, parent=near)
            vertices.append(node)
            xs.append(new_x)
            ys.append(new_y)
            self.tree_size = len(vertices)

            if (new_x, new_y) == destination:
                path = backtrack(node)
                logger.debug(f"[{self.name}] Path found: {len(path)} waypoints, "
                             f"tree size {self.tree_size}, {self.samples_drawn} samples")
                return path

        logger.warning(f"[{self.name}] Gave up after {self.samples_drawn} samples, "
                       f"tree size {self.tree_size}")
        return None
