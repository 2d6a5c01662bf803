# =============================================================================
# L3 World Model - Observed World (noisy sensor view)
# =============================================================================

from typing import List, Tuple

from .base import SharedWorld
from .config import POINT_SCALE


class ObservedWorld(SharedWorld):
    """
    Raw sensor hits and the noisy vehicle pose.

    Points are stored in integer millimetres. A freshly added point is "new"
    until the next refresh, after which it is "old".
    """

    def __init__(self, width: float, height: float):
        super().__init__(width, height)
        self._old_points: List[Tuple[int, int]] = []
        self._new_points: List[Tuple[int, int]] = []

        self._vehicle_x = 0.0
        self._vehicle_y = 0.0
        self._vehicle_ang = 0.0
        self._destination = (0.0, 0.0)

    # =========================================================================
    # Points
    # =========================================================================

    def _add_point(self, x: float, y: float):
        point = (int(x * POINT_SCALE), int(y * POINT_SCALE))
        with self._collection_lock:
            self._new_points.append(point)
        self._alert_listeners()

    def _refresh(self):
        with self._collection_lock:
            if not self._new_points:
                return
            self._old_points.extend(self._new_points)
            self._new_points.clear()
        self._alert_listeners()

    def add_obstacle_point(self, x: float, y: float):
        """Add an obstacle hit (m). It stays new until refresh_obstacle_points()."""
        self._add_point(x, y)

    def add_line_point(self, x: float, y: float):
        """Add a line hit (m). It stays new until refresh_line_points()."""
        self._add_point(x, y)

    def refresh_obstacle_points(self):
        """Age every new point to old."""
        self._refresh()

    def refresh_line_points(self):
        self._refresh()

    @property
    def old_points(self) -> List[Tuple[int, int]]:
        """Live list of aged points (mm). Hold ``collection_lock`` while iterating."""
        return self._old_points

    @property
    def new_points(self) -> List[Tuple[int, int]]:
        """Live list of points since the last refresh (mm)."""
        return self._new_points

    # =========================================================================
    # Getters and setters
    # =========================================================================

    def get_destination_pos(self) -> Tuple[float, float]:
        return self._destination

    def set_destination_pos(self, x: float, y: float):
        self._destination = (x, y)
        self._alert_listeners()

    def get_vehicle_pos(self) -> Tuple[float, float]:
        with self._pose_lock:
            return self._vehicle_x, self._vehicle_y

    def get_vehicle_ang(self) -> float:
        with self._pose_lock:
            return self._vehicle_ang

    def set_vehicle_pos(self, x: float, y: float):
        with self._pose_lock:
            self._vehicle_x = x
            self._vehicle_y = y
        self._alert_listeners()

    def set_vehicle_ang(self, ang: float):
        with self._pose_lock:
            self._vehicle_ang = ang
        self._alert_listeners()
