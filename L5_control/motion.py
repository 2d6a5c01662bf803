# =============================================================================
# L5 Control - Motion Controller
# =============================================================================
# Continuously running motor loop. Observes the DiscreteWorld for the noisy
# vehicle tile, heading and current path, and drives the PoseEstimator one
# small step toward the head waypoint every period.
# =============================================================================

import math
import threading
from enum import Enum
from typing import List, Optional, Tuple

from loguru import logger

from L3_world import DiscreteWorld, PoseEstimator

from .config import (
    MOTOR_PERIOD,
    MOTOR_JOIN_TIMEOUT,
    DEST_ACCEPT_DIST,
    DEST_ACCEPT_ANG
)


class MotionCommand(Enum):
    """What one motor step did."""
    IDLE = "IDLE"                   # No path to follow
    WAYPOINT_REACHED = "WAYPOINT_REACHED"
    FORWARD = "FORWARD"
    ROTATE_CCW = "ROTATE_CCW"
    ROTATE_CW = "ROTATE_CW"


class MotionController(threading.Thread):
    """
    Path follower running on its own daemon thread.

    Each step looks only at the head waypoint: when the vehicle tile is close
    enough it is dropped, otherwise the vehicle turns on the spot until its
    heading is within tolerance and then drives straight. The path copy is
    replaced whenever the DiscreteWorld records a new plan.

    The loop ends when ``stop_event`` is set.
    """

    def __init__(self, discrete: DiscreteWorld, pose_estimator: PoseEstimator,
                 linear_velocity: float, rotational_velocity: float,
                 stop_event: Optional[threading.Event] = None,
                 period: float = MOTOR_PERIOD):
        """
        Initialize the motion controller.

        Args:
            discrete: World whose vehicle tile, heading and path are followed
            pose_estimator: Receives the motion commands
            linear_velocity: Forward speed (m/s)
            rotational_velocity: Turning speed (deg/s)
            stop_event: Set by the owner to end the loop
            period: Time between two commands (s)
        """
        super().__init__(name="MotionController", daemon=True)
        self.discrete = discrete
        self.pose_estimator = pose_estimator
        self.period = period
        self.linear_step = linear_velocity * period         # m per cycle
        self.rotational_step = rotational_velocity * period  # deg per cycle
        self.stop_event = stop_event if stop_event is not None else threading.Event()

        self._lock = threading.Lock()
        self._vehicle_tile: Tuple[int, int] = (0, 0)
        self._vehicle_ang = 0.0
        self._path: List[Tuple[int, int]] = []
        self._path_version = 0

        self.steps = 0
        self.waypoints_reached = 0

        discrete.add_listener(self.map_has_changed)
        self.map_has_changed()

    # =========================================================================
    # Listener
    # =========================================================================

    def map_has_changed(self):
        """
        Refresh the snapshot of where the vehicle is and what to follow.

        The path is only replaced when a new plan was recorded; otherwise the
        waypoints already consumed would be handed back on every pose update.
        """
        tile = self.discrete.get_vehicle_tile()
        ang = self.discrete.get_vehicle_ang()
        version, path = self.discrete.get_versioned_path()
        with self._lock:
            self._vehicle_tile = tile
            self._vehicle_ang = ang
            if version != self._path_version:
                self._path_version = version
                self._path = path

    def get_path(self) -> List[Tuple[int, int]]:
        with self._lock:
            return list(self._path)

    # =========================================================================
    # Control
    # =========================================================================

    @staticmethod
    def heading_error(vehicle_tile, vehicle_ang: float, waypoint) -> float:
        """
        Signed heading change to face a waypoint, in (-180, 180] degrees.

        Tile y grows downward, so dy is flipped to get a CCW-from-East angle.
        """
        dx = waypoint[0] - vehicle_tile[0]
        dy = waypoint[1] - vehicle_tile[1]
        desired = math.degrees(math.atan2(-dy, dx))
        change = desired - vehicle_ang
        if change > 180.0:
            change -= 360.0
        if change <= -180.0:
            change += 360.0
        return change

    def step(self) -> MotionCommand:
        """Issue at most one motion command."""
        with self._lock:
            if not self._path:
                return MotionCommand.IDLE
            waypoint = self._path[0]
            tile = self._vehicle_tile
            ang = self._vehicle_ang

            dist_x = waypoint[0] - tile[0]
            dist_y = waypoint[1] - tile[1]
            if dist_x * dist_x + dist_y * dist_y < DEST_ACCEPT_DIST * DEST_ACCEPT_DIST:
                self._path.pop(0)
                self.waypoints_reached += 1
                return MotionCommand.WAYPOINT_REACHED

        self.steps += 1
        change = self.heading_error(tile, ang, waypoint)
        if abs(change) < DEST_ACCEPT_ANG:
            self.pose_estimator.move_forward(self.linear_step)
            return MotionCommand.FORWARD
        if change > 0:
            self.pose_estimator.rotate_ccw(self.rotational_step)
            return MotionCommand.ROTATE_CCW
        self.pose_estimator.rotate_ccw(-self.rotational_step)
        return MotionCommand.ROTATE_CW

    def run(self):
        logger.info(f"Motion controller started (period {self.period * 1000:.1f} ms)")
        try:
            while not self.stop_event.is_set():
                self.step()
                self.stop_event.wait(self.period)
        except Exception:
            logger.exception("Motion controller failed")
            raise
        finally:
            self.discrete.remove_listener(self.map_has_changed)
        logger.info(f"Motion controller stopped after {self.steps} commands, "
                    f"{self.waypoints_reached} waypoints reached")

    def stop(self, timeout: float = MOTOR_JOIN_TIMEOUT):
        """Signal the loop to end and wait for the thread."""
        self.stop_event.set()
        if self.is_alive():
            self.join(timeout)
            if self.is_alive():
                logger.warning("Motion controller did not stop in time")
