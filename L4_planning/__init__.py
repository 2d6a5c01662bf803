# =============================================================================
# L4 Planning Package
# =============================================================================
# Path planning on occupancy-grid snapshots.
#
# Responsibilities:
# - SearchStrategy / IncrementalPlanner interfaces
# - A* family, RRT, potential fields, D* Lite
# - Path smoothing and segment walkability checks
# - Strategy registry
#
# Usage:
#   from L4_planning import default_registry
#   planner = default_registry().create('AStarCS')
#   path = planner.calculate_path(grid, (1, 1), (35, 35), 0.0)
# =============================================================================

from .types import (
    INF,
    Waypoint,
    Path,
    Direction,
    SearchNode,
    InvariantViolation
)
from .base import (
    SearchStrategy,
    IncrementalPlanner,
    is_walkable,
    is_walkable_wide,
    smooth_path
)
from .algorithms import (
    AStar,
    AStarCS,
    AStarRR,
    AStarRRSW,
    AStarT,
    DStarLite,
    RapidExploringRandomTree,
    VectorField,
    VectorFieldSS,
    VectorFieldSSW
)
from .registry import StrategyRegistry, default_registry

__all__ = [
    # Types
    'INF',
    'Waypoint',
    'Path',
    'Direction',
    'SearchNode',
    'InvariantViolation',

    # Interfaces and helpers
    'SearchStrategy',
    'IncrementalPlanner',
    'is_walkable',
    'is_walkable_wide',
    'smooth_path',

    # Algorithms
    'AStar',
    'AStarCS',
    'AStarRR',
    'AStarRRSW',
    'AStarT',
    'DStarLite',
    'RapidExploringRandomTree',
    'VectorField',
    'VectorFieldSS',
    'VectorFieldSSW',

    # Registry
    'StrategyRegistry',
    'default_registry',
]

__version__ = '2.0.0'
