# =============================================================================
# L3 World Model - Environment and Vehicle Descriptions
# =============================================================================
# Inputs consumed by the simulation core: the obstacle field (ellipses in
# metres, pixel coordinates) and the physical/sensor profile of the vehicle.
# =============================================================================

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .config import (
    DEFAULT_VEHICLE_WIDTH,
    DEFAULT_VEHICLE_HEIGHT,
    DEFAULT_LINEAR_VELOCITY,
    DEFAULT_ROTATIONAL_VELOCITY,
    MAX_LIDAR_RANGE,
    DEFAULT_LIDAR_RANGE,
    DEFAULT_LIDAR_INCREMENT,
    DEFAULT_LIDAR_DISTANCE,
    DEFAULT_LIDAR_PERIOD,
    DEFAULT_CAMERA_RANGE,
    DEFAULT_CAMERA_INCREMENT,
    DEFAULT_CAMERA_DISTANCE,
    DEFAULT_CAMERA_PERIOD,
    DEFAULT_GPS_ERROR,
    DEFAULT_GPS_PERIOD,
    DEFAULT_IMU_ERROR,
    DEFAULT_IMU_PERIOD,
    DEFAULT_START_POSITION,
    DEFAULT_GOAL_POSITION
)


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class Ellipse:
    """Axis-aligned ellipse described by its bounding box."""
    x: float        # Left edge (m)
    y: float        # Top edge (m)
    w: float        # Width (m)
    h: float        # Height (m)

    @classmethod
    def from_centre(cls, cx: float, cy: float, w: float, h: float) -> 'Ellipse':
        return cls(cx - w / 2.0, cy - h / 2.0, w, h)

    @property
    def centre(self) -> Tuple[float, float]:
        return self.x + self.w / 2.0, self.y + self.h / 2.0

    def contains(self, px: float, py: float) -> bool:
        """Whether a point lies inside or on the ellipse."""
        cx, cy = self.centre
        x_bound = (px - cx) ** 2 / (self.w * self.w / 4.0)
        y_bound = (py - cy) ** 2 / (self.h * self.h / 4.0)
        return x_bound + y_bound <= 1.0


@dataclass(frozen=True)
class LaserSegment:
    """Collision ray drawn from the vehicle to where a projectile stopped."""
    x1: float
    y1: float
    x2: float
    y2: float


# =============================================================================
# Environment
# =============================================================================

@dataclass
class Environment:
    """
    Obstacle field and mission endpoints.

    Obstacles are detected by the LIDAR, lines by the camera. Both are
    immutable once a simulation has been built from the environment.
    """
    obstacles: List[Ellipse] = field(default_factory=list)
    lines: List[Ellipse] = field(default_factory=list)
    start: Tuple[float, float] = DEFAULT_START_POSITION     # (m)
    goal: Tuple[float, float] = DEFAULT_GOAL_POSITION       # (m)

    def validate(self):
        """Raise ValueError if the description is unusable."""
        if self.obstacles is None:
            raise ValueError("Environment obstacles must be a list")
        if self.lines is None:
            raise ValueError("Environment lines must be a list")
        if self.start[0] < 0 or self.start[1] < 0:
            raise ValueError(f"Start position must be non-negative, got {self.start}")
        if self.goal[0] < 0 or self.goal[1] < 0:
            raise ValueError(f"Goal position must be non-negative, got {self.goal}")
        for shape in list(self.obstacles) + list(self.lines):
            if shape.w <= 0 or shape.h <= 0:
                raise ValueError(f"Ellipse size must be positive, got {shape}")


# =============================================================================
# Vehicle
# =============================================================================

@dataclass
class SensorSpec:
    """Sweeping range sensor (LIDAR or camera)."""
    range: float        # Angular span of a sweep (deg)
    increment: float    # Angle between two rays (deg)
    distance: float     # Maximum detection distance (m)
    period: float       # Duration of one sweep (s)

    @property
    def iterations(self) -> int:
        """Number of rays per sweep, e.g. 181 for 180 deg at 1 deg."""
        return int(self.range / self.increment) + 1

    def ray_angles(self) -> List[float]:
        """Ray angles relative to the vehicle heading, CCW order."""
        return [i * self.increment - self.range / 2.0 for i in range(self.iterations)]


@dataclass
class Vehicle:
    """
    Physical, kinematic and sensor profile of the simulated vehicle.

    The strategy name is resolved against a StrategyRegistry; it is None until
    the coordinator assigns the registry default.
    """
    width: float = DEFAULT_VEHICLE_WIDTH                    # (m)
    height: float = DEFAULT_VEHICLE_HEIGHT                  # (m)
    linear_velocity: float = DEFAULT_LINEAR_VELOCITY        # (m/s)
    rotational_velocity: float = DEFAULT_ROTATIONAL_VELOCITY  # (deg/s)
    lidar: SensorSpec = field(default_factory=lambda: SensorSpec(
        DEFAULT_LIDAR_RANGE, DEFAULT_LIDAR_INCREMENT,
        DEFAULT_LIDAR_DISTANCE, DEFAULT_LIDAR_PERIOD))
    camera: SensorSpec = field(default_factory=lambda: SensorSpec(
        DEFAULT_CAMERA_RANGE, DEFAULT_CAMERA_INCREMENT,
        DEFAULT_CAMERA_DISTANCE, DEFAULT_CAMERA_PERIOD))
    gps_error: float = DEFAULT_GPS_ERROR                    # 3-sigma (m)
    gps_period: float = DEFAULT_GPS_PERIOD                  # (s)
    imu_error: float = DEFAULT_IMU_ERROR                    # 3-sigma (deg)
    imu_period: float = DEFAULT_IMU_PERIOD                  # (s)
    strategy: Optional[str] = None

    def validate(self, strategy_names: Optional[Iterable[str]] = None):
        """
        Raise ValueError if any parameter is out of range.

        Args:
            strategy_names: Registered strategy names; when given, the
                            vehicle's strategy must be one of them
        """
        positive = {
            'width': self.width,
            'height': self.height,
            'linear_velocity': self.linear_velocity,
            'rotational_velocity': self.rotational_velocity,
            'lidar.range': self.lidar.range,
            'lidar.increment': self.lidar.increment,
            'lidar.distance': self.lidar.distance,
            'lidar.period': self.lidar.period,
            'camera.range': self.camera.range,
            'camera.increment': self.camera.increment,
            'camera.distance': self.camera.distance,
            'camera.period': self.camera.period,
            'gps_period': self.gps_period,
            'imu_period': self.imu_period,
        }
        for name, value in positive.items():
            if value <= 0.0:
                raise ValueError(f"Vehicle {name} must be positive, got {value}")

        if self.lidar.range > MAX_LIDAR_RANGE:
            raise ValueError(f"Vehicle lidar.range must not exceed {MAX_LIDAR_RANGE}, "
                             f"got {self.lidar.range}")
        if self.gps_error < 0.0:
            raise ValueError(f"Vehicle gps_error must be non-negative, got {self.gps_error}")
        if self.imu_error < 0.0:
            raise ValueError(f"Vehicle imu_error must be non-negative, got {self.imu_error}")

        if strategy_names is not None:
            names = list(strategy_names)
            if self.strategy not in names:
                raise ValueError(f"Unknown strategy: {self.strategy} "
                                 f"(available: {', '.join(names)})")
