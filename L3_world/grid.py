# =============================================================================
# L3 World Model - Occupancy Grid
# =============================================================================
# Discrete obstacle-evidence grid and metre/tile coordinate transforms.
# =============================================================================

import numpy as np
from typing import Optional, Tuple

from loguru import logger


class GridModel:
    """
    Occupancy grid of non-negative obstacle-evidence counts.

    The array is indexed ``confidence[x, y]``. A tile holding 0 is clear and
    any positive value is evidence of an obstacle. Evidence is only ever
    incremented.
    """

    def __init__(self, width: float, height: float,
                 num_tiles_x: int, num_tiles_y: int):
        """
        Initialize an empty grid.

        Args:
            width: Width of the mapped area (m)
            height: Height of the mapped area (m)
            num_tiles_x: Number of columns
            num_tiles_y: Number of rows
        """
        if num_tiles_x <= 0 or num_tiles_y <= 0:
            raise ValueError(f"Grid needs a positive tile count, got "
                             f"{num_tiles_x}x{num_tiles_y}")
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid needs a positive size, got {width}x{height}")

        self.width = width
        self.height = height
        self.num_tiles_x = num_tiles_x
        self.num_tiles_y = num_tiles_y
        self.confidence = np.zeros((num_tiles_x, num_tiles_y), dtype=np.int64)

    @classmethod
    def from_array(cls, array, tile_size: float = 1.0) -> 'GridModel':
        """Build a grid from an existing ``[x, y]`` evidence array."""
        array = np.asarray(array, dtype=np.int64)
        if array.ndim != 2:
            raise ValueError(f"Expected a 2-D array, got shape {array.shape}")
        if (array < 0).any():
            raise ValueError("Obstacle evidence must be non-negative")
        grid = cls(array.shape[0] * tile_size, array.shape[1] * tile_size,
                   array.shape[0], array.shape[1])
        grid.confidence[:, :] = array
        return grid

    @property
    def shape(self) -> Tuple[int, int]:
        return self.confidence.shape

    # =========================================================================
    # Coordinate transforms
    # =========================================================================

    def in_bounds(self, tile_x: int, tile_y: int) -> bool:
        return 0 <= tile_x < self.num_tiles_x and 0 <= tile_y < self.num_tiles_y

    def metres_to_tile(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """
        Convert a metric position to the tile containing it.

        Returns:
            (tile_x, tile_y), or None when the position lies outside the grid
        """
        tile_x = int(x / self.width * self.num_tiles_x)
        tile_y = int(y / self.height * self.num_tiles_y)
        if x < 0 or y < 0 or not self.in_bounds(tile_x, tile_y):
            return None
        return tile_x, tile_y

    def tile_to_metres(self, tile_x: int, tile_y: int) -> Tuple[float, float]:
        """Return the metric centre of a tile."""
        return ((tile_x + 0.5) * self.width / self.num_tiles_x,
                (tile_y + 0.5) * self.height / self.num_tiles_y)

    # =========================================================================
    # Evidence
    # =========================================================================

    def increment(self, tile_x: int, tile_y: int) -> bool:
        """Add one unit of evidence to a tile. Out-of-range writes are rejected."""
        if not self.in_bounds(tile_x, tile_y):
            logger.warning(f"Grid write out of bounds: ({tile_x}, {tile_y}) "
                           f"not in {self.num_tiles_x}x{self.num_tiles_y}")
            return False
        self.confidence[tile_x, tile_y] += 1
        return True

    def evidence(self, tile_x: int, tile_y: int) -> int:
        return int(self.confidence[tile_x, tile_y])

    def is_obstructed(self, tile_x: int, tile_y: int) -> bool:
        return self.confidence[tile_x, tile_y] > 0

    def obstacle_count(self) -> int:
        """Number of tiles currently holding any evidence."""
        return int(np.count_nonzero(self.confidence))

    def snapshot(self) -> np.ndarray:
        """Independent copy of the evidence array for planners."""
        return self.confidence.copy()
