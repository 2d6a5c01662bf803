"""
Shared fixtures: grids, world triads and a hand-driven clock.

Run with:
    python -m pytest tests -v
"""

import numpy as np
import pytest

from L3_world import RealWorld, ObservedWorld, DiscreteWorld, MAP_WIDTH, MAP_HEIGHT


class FakeClock:
    """Monotonic time source moved by the test."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float):
        self.now += dt


class FixedPathStrategy:
    """Planner stand-in returning a preset result and recording its calls."""

    name = 'FixedPath'

    def __init__(self, path):
        self.path = path
        self.calls = []

    def calculate_path(self, grid, start, destination, start_heading=0.0):
        self.calls.append((start, destination, start_heading))
        return None if self.path is None else list(self.path)


def make_grid(size_x=10, size_y=10, obstacles=()):
    """Empty ``[x, y]`` evidence array with the given tiles set to 1."""
    grid = np.zeros((size_x, size_y), dtype=np.int64)
    for x, y in obstacles:
        grid[x, y] = 1
    return grid


def wall_grid(size=10, wall_x=5):
    """Grid split by a full-height obstacle column."""
    return make_grid(size, size, [(wall_x, y) for y in range(size)])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def worlds():
    """(real, observed, discrete) on the default 2.8 m, 50x50 map."""
    real = RealWorld(MAP_WIDTH, MAP_HEIGHT)
    observed = ObservedWorld(MAP_WIDTH, MAP_HEIGHT)
    discrete = DiscreteWorld(MAP_WIDTH, MAP_HEIGHT, 50, 50)
    return real, observed, discrete


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
