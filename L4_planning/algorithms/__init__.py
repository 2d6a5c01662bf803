# =============================================================================
# L4 Planning - Algorithms Package Init
# =============================================================================

from .astar import AStar, AStarCS, AStarRR, AStarRRSW, AStarT
from .dstar_lite import DStarLite, IncrementalNode
from .sampling import RapidExploringRandomTree
from .potential_field import VectorField, VectorFieldSS, VectorFieldSSW

__all__ = [
    'AStar',
    'AStarCS',
    'AStarRR',
    'AStarRRSW',
    'AStarT',
    'DStarLite',
    'IncrementalNode',
    'RapidExploringRandomTree',
    'VectorField',
    'VectorFieldSS',
    'VectorFieldSSW',
]
