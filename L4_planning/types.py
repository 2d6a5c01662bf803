# =============================================================================
# L4 Planning - Types and Data Structures
# =============================================================================
# Waypoints, search nodes, the 8-way direction labels and planning errors.
# =============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional

INF = float('inf')


class Waypoint(NamedTuple):
    """Tile coordinate of a path vertex."""
    x: int
    y: int


Path = List[Waypoint]


# =============================================================================
# Directions
# =============================================================================

class Direction(Enum):
    """
    Coarse 8-way heading between two adjacent tiles.

    Values are (index, dx, dy) with the index counting 45 degree steps CCW
    from East. Grid y grows downward, so North is dy = -1.
    """
    E = (0, 1, 0)
    NE = (1, 1, -1)
    N = (2, 0, -1)
    NW = (3, -1, -1)
    W = (4, -1, 0)
    SW = (5, -1, 1)
    S = (6, 0, 1)
    SE = (7, 1, 1)
    NONE = (-1, 0, 0)

    @property
    def index(self) -> int:
        return self.value[0]

    @classmethod
    def from_delta(cls, dx: int, dy: int) -> 'Direction':
        """Direction of a unit step (dx, dy)."""
        sx = (dx > 0) - (dx < 0)
        sy = (dy > 0) - (dy < 0)
        for direction in cls:
            if direction is not cls.NONE and direction.value[1:] == (sx, sy):
                return direction
        return cls.NONE

    @classmethod
    def from_heading(cls, heading: float) -> 'Direction':
        """Nearest direction to a heading in degrees CCW from East."""
        index = int(round(heading / 45.0)) % 8
        for direction in cls:
            if direction.index == index:
                return direction
        return cls.NONE

    def turn_steps(self, other: 'Direction') -> int:
        """Number of 45 degree steps between two directions (0-4)."""
        if self is Direction.NONE or other is Direction.NONE:
            return 0
        diff = abs(self.index - other.index)
        return min(diff, 8 - diff)


# =============================================================================
# Search node
# =============================================================================

@dataclass(eq=False)
class SearchNode:
    """Node of a single A*/RRT search. Owned by that search call."""
    x: int
    y: int
    parent: Optional['SearchNode'] = None
    distance: int = 0                       # Cost from the start
    heuristic: int = 0                      # Weighted estimate to the destination
    direction: Direction = Direction.NONE   # Step direction from the parent

    @property
    def f(self) -> int:
        return self.distance + self.heuristic

    @property
    def tile(self) -> Waypoint:
        return Waypoint(self.x, self.y)


# =============================================================================
# Errors
# =============================================================================

class InvariantViolation(RuntimeError):
    """Raised when an incremental planner finds its internal state corrupted."""
