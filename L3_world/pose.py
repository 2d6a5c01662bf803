# =============================================================================
# L3 World Model - Pose Estimator
# =============================================================================
# Records the true vehicle pose and publishes it: exactly to the RealWorld,
# and with Gaussian error, rate limited by GPS/IMU timers, to the
# ObservedWorld and DiscreteWorld.
# =============================================================================

import time
import threading
import numpy as np
from typing import Callable, Optional, Tuple

from .real_world import RealWorld
from .observed_world import ObservedWorld
from .discrete_world import DiscreteWorld


class PoseEstimator:
    """
    Fixed-distribution error injector for the vehicle pose.

    The errors are 3-sigma values: each published coordinate is the true one
    plus ``gauss * error / 3``. There is no accumulation and no filtering.
    """

    def __init__(self, real: RealWorld, observed: ObservedWorld,
                 discrete: DiscreteWorld,
                 dist_error: float = 0.0, ang_error: float = 0.0,
                 gps_period: float = 0.5, imu_period: float = 0.01,
                 update_maps: bool = True,
                 clock: Callable[[], float] = time.monotonic,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize the pose estimator.

        Args:
            real: Receives the true pose on every change
            observed: Receives the noisy pose when a timer fires
            discrete: Receives the noisy pose when a timer fires
            dist_error: 3-sigma position error (m)
            ang_error: 3-sigma heading error (deg)
            gps_period: Minimum time between position publications (s)
            imu_period: Minimum time between heading publications (s)
            update_maps: If False, the noisy pose is computed but not published
            clock: Monotonic time source in seconds
            rng: Random generator for the noise
        """
        self.real = real
        self.observed = observed
        self.discrete = discrete
        self.dist_error = dist_error
        self.ang_error = ang_error
        self.gps_period = gps_period
        self.imu_period = imu_period
        self.update_maps = update_maps
        self._clock = clock
        self._rng = rng if rng is not None else np.random.default_rng()

        self._lock = threading.Lock()
        self._x = 0.0
        self._y = 0.0
        self._ang = 0.0
        self._fake_x = 0.0
        self._fake_y = 0.0
        self._fake_ang = 0.0
        self._last_gps: Optional[float] = None
        self._last_imu: Optional[float] = None

        self.gps_updates = 0
        self.imu_updates = 0

    # =========================================================================
    # Motion (called by the MotionController)
    # =========================================================================

    def move_forward(self, dist: float):
        """Advance along the current heading (m)."""
        with self._lock:
            rad = np.deg2rad(self._ang)
            self._x += dist * np.cos(rad)
            self._y -= dist * np.sin(rad)       # pixel coordinates
        self._alert_maps()

    def rotate_ccw(self, ang: float):
        """Rotate on the spot (deg, negative for clockwise)."""
        with self._lock:
            self._ang = self.normalize_angle(self._ang + ang)
        self._alert_maps()

    def set_vehicle_pos(self, x: float, y: float, ang: float):
        """Place the vehicle, e.g. at the start of a run."""
        with self._lock:
            self._x = x
            self._y = y
            self._ang = self.normalize_angle(ang)
        self._alert_maps()

    def get_true_pose(self) -> Tuple[float, float, float]:
        with self._lock:
            return self._x, self._y, self._ang

    def get_noisy_pose(self) -> Tuple[float, float, float]:
        with self._lock:
            return self._fake_x, self._fake_y, self._fake_ang

    @staticmethod
    def normalize_angle(angle: float) -> float:
        """Normalize angle to (-180, 180] degrees."""
        while angle > 180.0:
            angle -= 360.0
        while angle <= -180.0:
            angle += 360.0
        return angle

    # =========================================================================
    # Publication
    # =========================================================================

    def _alert_maps(self):
        alert_pos = False
        alert_ang = False
        now = self._clock()

        with self._lock:
            x, y, ang = self._x, self._y, self._ang

            if self._last_imu is None or now - self._last_imu >= self.imu_period:
                self._fake_ang = ang + self._rng.standard_normal() * self.ang_error / 3.0
                self._last_imu = now
                self.imu_updates += 1
                alert_ang = True

            if self._last_gps is None or now - self._last_gps >= self.gps_period:
                self._fake_x = x + self._rng.standard_normal() * self.dist_error / 3.0
                self._fake_y = y + self._rng.standard_normal() * self.dist_error / 3.0
                self._last_gps = now
                self.gps_updates += 1
                alert_pos = True

            fake_x, fake_y, fake_ang = self._fake_x, self._fake_y, self._fake_ang

        # The real world always gets the true pose
        self.real.set_vehicle_pos(x, y, ang)

        if not self.update_maps:
            return
        if alert_pos:
            self.observed.set_vehicle_pos(fake_x, fake_y)
            self.discrete.set_vehicle_pos(fake_x, fake_y)
        if alert_ang:
            self.observed.set_vehicle_ang(fake_ang)
            self.discrete.set_vehicle_ang(fake_ang)
