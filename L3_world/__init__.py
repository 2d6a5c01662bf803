# =============================================================================
# L3 World Model Package
# =============================================================================
# Simulation world layer for grid-based AGV navigation.
#
# Responsibilities:
# - Occupancy grid and metre/tile transforms
# - World triad: RealWorld (ground truth), ObservedWorld (sensor hits),
#   DiscreteWorld (occupancy grid, vehicle/destination tiles, path)
# - LIDAR/camera sweep emulation
# - Rate-limited noisy pose publication
# - Environment/vehicle descriptions and scenario presets
#
# Usage:
#   from L3_world import RealWorld, ObservedWorld, DiscreteWorld, ScenarioPresets
#   env = ScenarioPresets.scattered()
#   real = RealWorld(MAP_WIDTH, MAP_HEIGHT, env.obstacles, env.lines)
# =============================================================================

from .grid import GridModel
from .environment import Ellipse, LaserSegment, Environment, SensorSpec, Vehicle
from .obstacles import ObstacleGenerator
from .scenarios import ScenarioPresets
from .base import SharedWorld
from .real_world import RealWorld
from .observed_world import ObservedWorld
from .discrete_world import DiscreteWorld
from .perception import PerceptionSimulator
from .pose import PoseEstimator

# Re-export config for convenience
from .config import (
    MAP_WIDTH,
    MAP_HEIGHT,
    NUM_TILES_X,
    NUM_TILES_Y,
    GOAL_EPSILON
)

__all__ = [
    # Grid
    'GridModel',

    # Descriptions
    'Ellipse',
    'LaserSegment',
    'Environment',
    'SensorSpec',
    'Vehicle',
    'ObstacleGenerator',
    'ScenarioPresets',

    # Worlds
    'SharedWorld',
    'RealWorld',
    'ObservedWorld',
    'DiscreteWorld',

    # Sensors and pose
    'PerceptionSimulator',
    'PoseEstimator',

    # Config exports
    'MAP_WIDTH',
    'MAP_HEIGHT',
    'NUM_TILES_X',
    'NUM_TILES_Y',
    'GOAL_EPSILON',
]

__version__ = '2.0.0'
