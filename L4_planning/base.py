# =============================================================================
# L4 Planning - Base Strategies
# =============================================================================
# Abstract planner classes with common functionality shared by all
# algorithms: grid preparation, segment walkability checks and greedy
# string-pull smoothing.
# =============================================================================

import math
import numpy as np
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

from .types import Path, Waypoint
from .config import WALK_SAMPLE_STEP, VEHICLE_TILE_WIDTH

Tile = Tuple[int, int]


class SearchStrategy(ABC):
    """
    Abstract base class for all path planners.

    A planner receives a snapshot of the occupancy grid (indexed ``[x, y]``,
    0 = clear) together with the start and destination tiles. It returns the
    tiles to traverse, excluding the start and ending at the destination, or
    None when no path exists.

    Subclasses must implement calculate_path() with their specific algorithm.
    """

    name = 'SearchStrategy'

    @abstractmethod
    def calculate_path(self, grid: np.ndarray, start: Tile, destination: Tile,
                       start_heading: float = 0.0) -> Optional[Path]:
        """
        Plan a path.

        Args:
            grid: Obstacle evidence, ``grid[x, y]``; never modified
            start: Start tile (x, y)
            destination: Destination tile (x, y)
            start_heading: Vehicle heading (deg, CCW from East)

        Returns:
            List of waypoints, [] if start == destination, None if no path
        """

    def __repr__(self):
        return f"{type(self).__name__}()"

    # =========================================================================
    # Utility Methods (shared by all algorithms)
    # =========================================================================

    @staticmethod
    def prepare_grid(grid, destination: Tile) -> np.ndarray:
        """Private copy of the grid with the destination forced clear."""
        work = np.array(grid, dtype=np.int64, copy=True)
        if work.ndim != 2:
            raise ValueError(f"Grid must be 2-D, got shape {work.shape}")
        SearchStrategy.check_tile(work, destination, 'Destination')
        work[destination[0], destination[1]] = 0
        return work

    @staticmethod
    def check_tile(grid: np.ndarray, tile: Tile, label: str):
        """Raise ValueError if a tile lies outside the grid."""
        x, y = tile
        if not (0 <= x < grid.shape[0] and 0 <= y < grid.shape[1]):
            raise ValueError(f"{label} tile {(x, y)} outside grid {grid.shape}")


class IncrementalPlanner(SearchStrategy):
    """
    Planner keeping persistent state across calls.

    Instances are not re-entrant: at most one calculate_path() may run on an
    instance at a time.
    """

    name = 'IncrementalPlanner'

    @abstractmethod
    def reset(self):
        """Forget all state; the next call plans from scratch."""


# =============================================================================
# Segment checks
# =============================================================================

def _round_tile(value: float) -> int:
    return int(math.floor(value + 0.5))


def _segment_samples(start: Tile, end: Tile, step: float = WALK_SAMPLE_STEP):
    """Yield (x, y, angle) every ``step`` tiles from start toward end."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    dist = math.hypot(dx, dy)
    ang = math.atan2(dy, dx)
    inc_x = step * math.cos(ang)
    inc_y = step * math.sin(ang)
    pos_x, pos_y = float(start[0]), float(start[1])
    for _ in range(int(dist / step)):
        pos_x += inc_x
        pos_y += inc_y
        yield pos_x, pos_y, ang


def _blocked(grid: np.ndarray, x: float, y: float) -> bool:
    tile_x = _round_tile(x)
    tile_y = _round_tile(y)
    if not (0 <= tile_x < grid.shape[0] and 0 <= tile_y < grid.shape[1]):
        return True
    return grid[tile_x, tile_y] > 0


def is_walkable(start: Tile, end: Tile, grid: np.ndarray) -> bool:
    """Whether the straight segment from start to end crosses no obstacle."""
    for x, y, _ in _segment_samples(start, end):
        if _blocked(grid, x, y):
            return False
    return True


def is_walkable_wide(start: Tile, end: Tile, grid: np.ndarray,
                     width: float = VEHICLE_TILE_WIDTH) -> bool:
    """
    Width-aware segment check.

    Besides the centre line, samples points offset perpendicular to the
    segment by a quarter and a half of ``width`` on both sides. Any sample on
    an obstacle or outside the grid rejects the segment.
    """
    for x, y, ang in _segment_samples(start, end):
        if _blocked(grid, x, y):
            return False
        side_x = -math.sin(ang)
        side_y = math.cos(ang)
        for offset in (width / 4.0, width / 2.0, -width / 4.0, -width / 2.0):
            if _blocked(grid, x + offset * side_x, y + offset * side_y):
                return False
    return True


Walkable = Callable[[Tile, Tile, np.ndarray], bool]


def smooth_path(grid: np.ndarray, start: Tile, path: Sequence[Waypoint],
                walkable: Walkable = is_walkable,
                max_cut: Optional[int] = None) -> Path:
    """
    Greedy string pulling.

    Walks the path keeping a checkpoint (initially the start tile). A
    waypoint is dropped when the segment from the checkpoint to the waypoint
    after it is walkable; otherwise it becomes the new checkpoint.

    Args:
        grid: Obstacle evidence
        start: Start tile, the first checkpoint
        path: Raw path, head first
        walkable: Segment check
        max_cut: Maximum number of consecutive waypoints removed, None for no cap

    Returns:
        The smoothed path
    """
    if len(path) < 2:
        return list(path)

    keep = [True] * len(path)
    checkpoint = tuple(start)
    cut_count = 0
    for i in range(len(path) - 1):
        current = path[i]
        following = path[i + 1]
        under_cap = max_cut is None or cut_count < max_cut
        if under_cap and walkable(checkpoint, tuple(following), grid):
            keep[i] = False
            cut_count += 1
        else:
            checkpoint = tuple(current)
            cut_count = 0
    return [Waypoint(*p) for p, k in zip(path, keep) if k]


def backtrack(node) -> Path:
    """Follow parent links back to (and excluding) the start node."""
    reversed_path: List[Waypoint] = []
    while node is not None and node.parent is not None:
        reversed_path.append(node.tile)
        node = node.parent
    reversed_path.reverse()
    return reversed_path
