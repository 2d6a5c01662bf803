# =============================================================================
# L3 World Model - Scenario Presets
# =============================================================================

import numpy as np
from typing import Optional

from .environment import Environment, Ellipse
from .obstacles import ObstacleGenerator
from .config import (
    MAP_WIDTH,
    MAP_HEIGHT,
    DEFAULT_START_POSITION,
    DEFAULT_GOAL_POSITION,
    SCENARIO_RANDOM_NUM_OBSTACLES
)


class ScenarioPresets:
    """Presets for common test scenarios."""

    NAMES = ('empty', 'scattered', 'corridor', 'wall', 'random')

    @staticmethod
    def empty() -> Environment:
        return Environment()

    @staticmethod
    def scattered() -> Environment:
        """A handful of obstacles and a painted line between start and goal."""
        obstacles = [
            Ellipse(0.6, 0.3, 0.3, 0.3),
            Ellipse(1.2, 1.0, 0.4, 0.25),
            Ellipse(0.4, 1.4, 0.25, 0.4),
            Ellipse(1.7, 1.5, 0.2, 0.2),
            Ellipse(2.1, 0.6, 0.3, 0.3),
        ]
        lines = [Ellipse(1.5, 2.3, 0.9, 0.05)]
        return Environment(obstacles=obstacles, lines=lines)

    @staticmethod
    def corridor() -> Environment:
        """Two parallel walls forming a corridor toward the goal."""
        obstacles = (ObstacleGenerator.create_wall((0.5, 0.8), (2.3, 0.8))
                     + ObstacleGenerator.create_wall((0.5, 1.6), (2.3, 1.6)))
        return Environment(obstacles=obstacles, start=(0.2, 1.2), goal=(2.6, 1.2))

    @staticmethod
    def wall() -> Environment:
        """A wall spanning the whole map, the goal is unreachable."""
        obstacles = ObstacleGenerator.create_wall((0.0, 1.4), (MAP_WIDTH, 1.4), thickness=0.15)
        return Environment(obstacles=obstacles)

    @staticmethod
    def random(num_obstacles: int = SCENARIO_RANDOM_NUM_OBSTACLES,
               rng: Optional[np.random.Generator] = None) -> Environment:
        obstacles = ObstacleGenerator.generate_random_obstacles(
            num_obstacles=num_obstacles,
            x_range=(0.2, MAP_WIDTH - 0.2),
            y_range=(0.2, MAP_HEIGHT - 0.2),
            keep_clear=(DEFAULT_START_POSITION, DEFAULT_GOAL_POSITION),
            rng=rng
        )
        return Environment(obstacles=obstacles)

    @classmethod
    def by_name(cls, name: str, rng: Optional[np.random.Generator] = None) -> Environment:
        """Return the preset environment called ``name``."""
        if name == 'empty':
            return cls.empty()
        elif name == 'scattered':
            return cls.scattered()
        elif name == 'corridor':
            return cls.corridor()
        elif name == 'wall':
            return cls.wall()
        elif name == 'random':
            return cls.random(rng=rng)
        else:
            raise ValueError(f"Unknown scenario: {name}")
