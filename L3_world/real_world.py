# =============================================================================
# L3 World Model - Real World (ground truth)
# =============================================================================

import math
from typing import List, Optional, Sequence, Tuple

from .base import SharedWorld
from .environment import Ellipse, LaserSegment
from .config import RAY_NUDGE


class RealWorld(SharedWorld):
    """
    Perfect information about the vehicle, obstacles, lines and lasers.

    Obstacle and line geometry is fixed at construction. The true vehicle pose
    is written by the PoseEstimator and read by the perception sweeps.
    """

    def __init__(self, width: float, height: float,
                 obstacles: Sequence[Ellipse] = (),
                 lines: Sequence[Ellipse] = ()):
        """
        Initialize the ground truth.

        Args:
            width: Width of the map (m)
            height: Height of the map (m)
            obstacles: Obstacle ellipses detected by the LIDAR
            lines: Line ellipses detected by the camera
        """
        super().__init__(width, height)
        self._obstacles = tuple(obstacles)
        self._lines = tuple(lines)
        self._lasers: List[LaserSegment] = []

        self._vehicle_x = 0.0
        self._vehicle_y = 0.0
        self._vehicle_ang = 0.0
        self._destination = (0.0, 0.0)

    # =========================================================================
    # Collision detection
    # =========================================================================

    def calculate_obstacle_collision(self, ang: float,
                                     max_dist: float) -> Optional[Tuple[float, float]]:
        """
        Fire a projectile from the vehicle and return where it hits an obstacle.

        Args:
            ang: Angle relative to the vehicle heading (deg, CCW)
            max_dist: Maximum travel distance (m)

        Returns:
            Hit position (m), or None if the range or map boundary is reached
        """
        return self._march(ang, max_dist, self._obstacles)

    def calculate_line_collision(self, ang: float,
                                 max_dist: float) -> Optional[Tuple[float, float]]:
        """Same as calculate_obstacle_collision, against lines."""
        return self._march(ang, max_dist, self._lines)

    def _march(self, ang: float, max_dist: float,
               shapes: Sequence[Ellipse]) -> Optional[Tuple[float, float]]:
        start_x, start_y, heading = self.get_vehicle_pose()
        total = math.radians(heading + ang)
        inc_x = RAY_NUDGE * math.cos(total)
        inc_y = -RAY_NUDGE * math.sin(total)    # pixel coordinates

        pos_x, pos_y = start_x, start_y
        remaining = max_dist
        while True:
            pos_x += inc_x
            pos_y += inc_y
            remaining -= RAY_NUDGE

            if (remaining < 0 or pos_x < 0 or pos_x > self.width
                    or pos_y < 0 or pos_y > self.height):
                self._add_laser(start_x, start_y, pos_x, pos_y)
                return None

            for shape in shapes:
                if shape.contains(pos_x, pos_y):
                    self._add_laser(start_x, start_y, pos_x, pos_y)
                    return pos_x, pos_y

    # =========================================================================
    # Lasers
    # =========================================================================

    def _add_laser(self, x1: float, y1: float, x2: float, y2: float):
        with self._collection_lock:
            self._lasers.append(LaserSegment(x1, y1, x2, y2))
        self._alert_listeners()

    def clear_lasers(self):
        """Empty the collision-ray list."""
        with self._collection_lock:
            if not self._lasers:
                return
            self._lasers.clear()
        self._alert_listeners()

    # =========================================================================
    # Getters and setters
    # =========================================================================

    @property
    def obstacles(self) -> Tuple[Ellipse, ...]:
        return self._obstacles

    @property
    def lines(self) -> Tuple[Ellipse, ...]:
        return self._lines

    @property
    def lasers(self) -> List[LaserSegment]:
        """Live laser list. Hold ``collection_lock`` while iterating it."""
        return self._lasers

    def get_destination_pos(self) -> Tuple[float, float]:
        return self._destination

    def set_destination_pos(self, x: float, y: float):
        self._destination = (x, y)
        self._alert_listeners()

    def get_vehicle_pose(self) -> Tuple[float, float, float]:
        """Return (x, y, heading) of the true pose."""
        with self._pose_lock:
            return self._vehicle_x, self._vehicle_y, self._vehicle_ang

    def get_vehicle_pos(self) -> Tuple[float, float]:
        with self._pose_lock:
            return self._vehicle_x, self._vehicle_y

    def get_vehicle_ang(self) -> float:
        with self._pose_lock:
            return self._vehicle_ang

    def set_vehicle_pos(self, x: float, y: float, ang: float):
        with self._pose_lock:
            self._vehicle_x = x
            self._vehicle_y = y
            self._vehicle_ang = ang
        self._alert_listeners()
