"""Rapidly-exploring random tree and the potential-field planners."""

import numpy as np
import pytest

from L4_planning import (
    RapidExploringRandomTree,
    VectorField,
    VectorFieldSS,
    VectorFieldSSW,
    Waypoint,
    is_walkable_wide
)

from conftest import make_grid, wall_grid


# =============================================================================
# RapidExploringRandomTree
# =============================================================================

class TestRapidExploringRandomTree:

    def test_start_equals_destination(self):
        planner = RapidExploringRandomTree(rng=np.random.default_rng(0))
        assert planner.calculate_path(make_grid(), (4, 4), (4, 4)) == []

    def test_reaches_destination(self):
        grid = make_grid(16, 16)
        planner = RapidExploringRandomTree(rng=np.random.default_rng(42))
        path = planner.calculate_path(grid, (4, 4), (11, 11))
        assert path is not None
        assert path[-1] == (11, 11)
        assert planner.tree_size >= len(path) + 1

    def test_edges_are_short_and_walkable(self):
        obstacles = [(8, y) for y in range(0, 10)]
        grid = make_grid(16, 16, obstacles=obstacles)
        planner = RapidExploringRandomTree(rng=np.random.default_rng(5))
        path = planner.calculate_path(grid, (4, 4), (12, 4))
        assert path is not None and path[-1] == (12, 4)
        current = (4, 4)
        for waypoint in path:
            assert np.hypot(waypoint[0] - current[0], waypoint[1] - current[1]) <= planner.step
            assert is_walkable_wide(current, waypoint, grid, planner.width)
            current = waypoint

    def test_reproducible_with_seed(self):
        grid = make_grid(16, 16)
        first = RapidExploringRandomTree(rng=np.random.default_rng(9)).calculate_path(
            grid, (4, 4), (11, 10))
        second = RapidExploringRandomTree(rng=np.random.default_rng(9)).calculate_path(
            grid, (4, 4), (11, 10))
        assert first == second

    def test_gives_up_behind_wall(self):
        planner = RapidExploringRandomTree(max_samples=2000, rng=np.random.default_rng(1))
        assert planner.calculate_path(wall_grid(12, 6), (2, 5), (9, 5)) is None
        assert planner.samples_drawn == 2000


# =============================================================================
# VectorField
# =============================================================================

class TestVectorField:

    def test_start_equals_destination(self):
        assert VectorField().calculate_path(make_grid(), (2, 2), (2, 2)) == []

    def test_attraction_only(self):
        fx, fy = VectorField().force_at(np.empty((0, 2), dtype=int), 0, 0, (5, 0))
        assert fx == pytest.approx(0.5)
        assert fy == pytest.approx(0.0)

    def test_repulsion_pushes_away(self):
        obstacles = np.array([[3, 0]])
        fx, _ = VectorField().force_at(obstacles, 2, 0, (2, 0))
        assert fx == pytest.approx(-1.0)
        # outside the cutoff
        fx, fy = VectorField().force_at(obstacles, 9, 9, (9, 9))
        assert (fx, fy) == (0.0, 0.0)

    def test_lookahead_then_destination(self):
        path = VectorField().calculate_path(make_grid(), (0, 0), (9, 9))
        assert len(path) == 6
        assert path[-1] == Waypoint(9, 9)
        current = (0, 0)
        for waypoint in path[:-1]:
            assert abs(waypoint[0] - current[0]) + abs(waypoint[1] - current[1]) == 1
            current = waypoint

    def test_straight_line(self):
        path = VectorField().calculate_path(make_grid(), (0, 3), (9, 3))
        assert path == [Waypoint(x, 3) for x in range(1, 6)] + [Waypoint(9, 3)]

    def test_deflected_by_obstacle(self):
        grid = make_grid(12, 12, obstacles=[(4, 5)])
        path = VectorField().calculate_path(grid, (1, 4), (10, 4))
        assert Waypoint(4, 4) not in path
        assert any(y < 4 for _, y in path)
        assert all(grid[x, y] == 0 for x, y in path)

    def test_never_reports_no_path(self):
        path = VectorField().calculate_path(wall_grid(), (1, 1), (8, 8))
        assert path is not None
        assert path[-1] == (8, 8)

    def test_stops_at_grid_edge(self):
        grid = make_grid(10, 10, obstacles=[(1, 0)])
        path = VectorField().calculate_path(grid, (0, 0), (0, 5))
        assert path[-1] == (0, 5)
        assert all(0 <= x < 10 and 0 <= y < 10 for x, y in path)


class TestSmoothedVectorField:

    def test_ss_smooths_lookahead(self):
        path = VectorFieldSS().calculate_path(make_grid(), (0, 3), (9, 3))
        assert path[-1] == (9, 3)
        assert len(path) < 9

    def test_ss_respects_cut_cap(self):
        path = VectorFieldSS(max_cut=2).calculate_path(make_grid(), (0, 3), (9, 3))
        assert len(path) >= 3

    def test_ssw_uses_wide_check(self):
        grid = make_grid(14, 14, obstacles=[(6, 7)])
        plain = VectorFieldSS().calculate_path(grid, (1, 5), (12, 5))
        wide = VectorFieldSSW().calculate_path(grid, (1, 5), (12, 5))
        assert plain[-1] == wide[-1] == (12, 5)
        assert len(wide) >= len(plain)
