# =============================================================================
# L3 World Model - Discrete World (occupancy grid view)
# =============================================================================
# Wraps the GridModel with vehicle/destination tile tracking, the current
# path and listener notification. Planning is triggered from here.
# =============================================================================

import time
from typing import List, Optional, Tuple

from loguru import logger

from .base import SharedWorld
from .grid import GridModel


class DiscreteWorld(SharedWorld):
    """
    Estimated world state on a discrete grid.

    Sensor hits increment the tile they fall in. The vehicle tile, heading
    and path are guarded by the pose lock; grid writes by the collection lock.
    """

    def __init__(self, width: float, height: float,
                 num_tiles_x: int, num_tiles_y: int):
        """
        Initialize the discrete world.

        Args:
            width: Width of the map (m)
            height: Height of the map (m)
            num_tiles_x: Number of grid columns
            num_tiles_y: Number of grid rows
        """
        super().__init__(width, height)
        self.grid = GridModel(width, height, num_tiles_x, num_tiles_y)

        self._vehicle_tile = (0, 0)
        self._vehicle_ang = 0.0
        self._destination_tile = (0, 0)
        self._path: List[Tuple[int, int]] = []
        self._path_version = 0

        self.last_plan_succeeded = False
        self.last_plan_duration = 0.0

    @property
    def num_tiles_x(self) -> int:
        return self.grid.num_tiles_x

    @property
    def num_tiles_y(self) -> int:
        return self.grid.num_tiles_y

    # =========================================================================
    # Grid
    # =========================================================================

    def add_point(self, x: float, y: float) -> bool:
        """
        Add obstacle evidence at a metric position.

        Returns:
            False if the point falls outside the grid (logged and ignored)
        """
        tile = self.grid.metres_to_tile(x, y)
        if tile is None:
            logger.warning(f"DiscreteWorld point out of bounds: ({x:.3f}, {y:.3f})")
            return False
        with self._collection_lock:
            self.grid.increment(*tile)
        self._alert_listeners()
        return True

    def get_grid_snapshot(self):
        """Copy of the evidence array, safe to hand to a planner."""
        with self._collection_lock:
            return self.grid.snapshot()

    # =========================================================================
    # Planning
    # =========================================================================

    def calculate_path(self, strategy) -> bool:
        """
        Ask a planning strategy for a path from the vehicle to the destination.

        On success the path is recorded and listeners alerted. When the
        strategy finds no path, the previous path is kept.

        Args:
            strategy: Any object with a ``calculate_path(grid, start, dest, heading)``
                      method, see L4_planning

        Returns:
            True if a new path was recorded
        """
        grid = self.get_grid_snapshot()
        start = self.get_vehicle_tile()
        destination = self.get_destination_tile()
        heading = self.get_vehicle_ang()

        t0 = time.perf_counter()
        path = strategy.calculate_path(grid, start, destination, heading)
        self.last_plan_duration = time.perf_counter() - t0

        if path is None:
            logger.debug(f"No path from {start} to {destination}, keeping previous path")
            self.last_plan_succeeded = False
            return False

        with self._pose_lock:
            self._path = [tuple(p) for p in path]
            self._path_version += 1
        self.last_plan_succeeded = True
        self._alert_listeners()
        return True

    # =========================================================================
    # Getters and setters
    # =========================================================================

    def get_destination_tile(self) -> Tuple[int, int]:
        return self._destination_tile

    def set_destination_pos(self, x: float, y: float) -> bool:
        tile = self.grid.metres_to_tile(x, y)
        if tile is None:
            logger.warning(f"DiscreteWorld destination out of bounds: ({x:.3f}, {y:.3f})")
            return False
        self._destination_tile = tile
        self._alert_listeners()
        return True

    def get_vehicle_tile(self) -> Tuple[int, int]:
        with self._pose_lock:
            return self._vehicle_tile

    def get_vehicle_ang(self) -> float:
        with self._pose_lock:
            return self._vehicle_ang

    def set_vehicle_pos(self, x: float, y: float) -> bool:
        tile = self.grid.metres_to_tile(x, y)
        if tile is None:
            logger.warning(f"DiscreteWorld vehicle out of bounds: ({x:.3f}, {y:.3f})")
            return False
        with self._pose_lock:
            self._vehicle_tile = tile
        self._alert_listeners()
        return True

    def set_vehicle_ang(self, ang: float):
        with self._pose_lock:
            self._vehicle_ang = ang
        self._alert_listeners()

    def get_path(self) -> List[Tuple[int, int]]:
        """Copy of the current path, head first."""
        with self._pose_lock:
            return list(self._path)

    def get_versioned_path(self) -> Tuple[int, List[Tuple[int, int]]]:
        """
        Current path together with its plan counter.

        The counter grows by one per recorded plan, so a follower can tell a
        new plan from a repeated notification about the same one.
        """
        with self._pose_lock:
            return self._path_version, list(self._path)
