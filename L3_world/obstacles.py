# =============================================================================
# L3 World Model - Obstacle Generator
# =============================================================================

import numpy as np
from typing import List, Optional, Sequence, Tuple

from .environment import Ellipse
from .config import (
    MAP_WIDTH,
    MAP_HEIGHT,
    OBSTACLE_SIZE_RANGE,
    OBSTACLE_MIN_DISTANCE,
    OBSTACLE_CLEARANCE,
    OBSTACLE_PLACEMENT_ATTEMPTS
)


class ObstacleGenerator:
    """
    Obstacle generator for simulated environments.
    Produces obstacle ellipses and the straight-line walls built from them.
    """

    @staticmethod
    def generate_random_obstacles(num_obstacles: int,
                                  x_range: Tuple[float, float] = (0.0, MAP_WIDTH),
                                  y_range: Tuple[float, float] = (0.0, MAP_HEIGHT),
                                  size_range: Tuple[float, float] = OBSTACLE_SIZE_RANGE,
                                  min_dist: float = OBSTACLE_MIN_DISTANCE,
                                  keep_clear: Sequence[Tuple[float, float]] = (),
                                  rng: Optional[np.random.Generator] = None) -> List[Ellipse]:
        """
        Generate random circular obstacles without overlapping.

        Args:
            num_obstacles: Number of obstacles to generate
            x_range: X range of the centres (min, max)
            y_range: Y range of the centres (min, max)
            size_range: Diameter range (min, max)
            min_dist: Minimum distance between obstacle centres
            keep_clear: Points (e.g. start and goal) no obstacle may cover
            rng: Random generator, a fresh one is created when omitted

        Returns:
            List of obstacle ellipses
        """
        if rng is None:
            rng = np.random.default_rng()

        centres = []
        obstacles = []
        for _ in range(num_obstacles):
            for attempt in range(OBSTACLE_PLACEMENT_ATTEMPTS):
                x = rng.uniform(x_range[0], x_range[1])
                y = rng.uniform(y_range[0], y_range[1])
                d = rng.uniform(size_range[0], size_range[1])

                valid = all(np.hypot(x - cx, y - cy) >= min_dist for cx, cy in centres)
                if valid:
                    valid = all(np.hypot(x - px, y - py) >= d / 2 + OBSTACLE_CLEARANCE
                                for px, py in keep_clear)

                if valid:
                    centres.append((x, y))
                    obstacles.append(Ellipse.from_centre(x, y, d, d))
                    break
        return obstacles

    @staticmethod
    def create_wall(start: Tuple[float, float], end: Tuple[float, float],
                    thickness: float = 0.1) -> List[Ellipse]:
        """
        Approximate a straight wall with a chain of overlapping circles.

        Args:
            start: Wall start point (m)
            end: Wall end point (m)
            thickness: Diameter of each circle (m)

        Returns:
            List of ellipses covering the wall
        """
        length = np.hypot(end[0] - start[0], end[1] - start[1])
        count = max(int(np.ceil(length / (thickness / 2))), 1) + 1
        xs = np.linspace(start[0], end[0], count)
        ys = np.linspace(start[1], end[1], count)
        return [Ellipse.from_centre(x, y, thickness, thickness) for x, y in zip(xs, ys)]
