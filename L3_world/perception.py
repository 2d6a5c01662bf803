# =============================================================================
# L3 World Model - Perception Simulator
# =============================================================================
# Emulates LIDAR and camera sweeps by ray-marching against the RealWorld,
# writing every hit into the ObservedWorld and DiscreteWorld.
# =============================================================================

import threading
from typing import Optional

from loguru import logger

from .environment import SensorSpec
from .real_world import RealWorld
from .observed_world import ObservedWorld
from .discrete_world import DiscreteWorld


class PerceptionSimulator:
    """
    Bounded-rate sensor emulation.

    A LIDAR sweep spreads its period evenly over the rays; a camera sweep
    casts every ray and waits once for the whole period.
    """

    def __init__(self, real: RealWorld, observed: ObservedWorld,
                 discrete: DiscreteWorld, pace: bool = True,
                 wake_event: Optional[threading.Event] = None):
        """
        Initialize the perception simulator.

        Args:
            real: Ground truth ray-marched against
            observed: Receives raw hit points
            discrete: Receives grid evidence
            pace: If False, sweeps do not wait (tests, fast runs)
            wake_event: Event whose wait() paces sweeps; setting it cuts
                        the remaining waits short
        """
        self.real = real
        self.observed = observed
        self.discrete = discrete
        self.pace = pace
        self._wake = wake_event if wake_event is not None else threading.Event()

        self.total_rays = 0
        self.total_hits = 0

    def _wait(self, seconds: float):
        if not self.pace or seconds <= 0:
            return
        try:
            self._wake.wait(seconds)
        except InterruptedError as e:
            logger.warning(f"Sweep wait interrupted: {e}")

    def lidar_sweep(self, lidar: SensorSpec) -> int:
        """
        Perform a LIDAR sweep against the obstacles.

        Args:
            lidar: Sweep span, increment, range and period

        Returns:
            Number of obstacle hits
        """
        wait_time = lidar.period / lidar.iterations
        hits = 0
        for angle in lidar.ray_angles():
            position = self.real.calculate_obstacle_collision(angle, lidar.distance)
            if position is not None:
                self.observed.add_obstacle_point(*position)
                self.discrete.add_point(*position)
                hits += 1
            self._wait(wait_time)
            self.real.clear_lasers()

        self.total_rays += lidar.iterations
        self.total_hits += hits
        return hits

    def camera_sweep(self, camera: SensorSpec) -> int:
        """Perform a camera sweep against the lines. Returns the number of hits."""
        hits = 0
        for angle in camera.ray_angles():
            position = self.real.calculate_line_collision(angle, camera.distance)
            if position is not None:
                self.observed.add_line_point(*position)
                self.discrete.add_point(*position)
                hits += 1
        self._wait(camera.period)
        self.real.clear_lasers()

        self.total_rays += camera.iterations
        self.total_hits += hits
        return hits

    def perceive(self, lidar: SensorSpec, camera: SensorSpec):
        """One full perception step: LIDAR sweep, age points, camera sweep, age points."""
        obstacle_hits = self.lidar_sweep(lidar)
        self.observed.refresh_obstacle_points()
        line_hits = self.camera_sweep(camera)
        self.observed.refresh_line_points()
        logger.debug(f"Sweep complete: {obstacle_hits} obstacle hits, {line_hits} line hits")
        return obstacle_hits, line_hits
