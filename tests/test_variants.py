"""Corner-safe, repulsion and turn-penalized A* variants."""

import pytest

from L4_planning import AStar, AStarCS, AStarRR, AStarRRSW, AStarT, Direction, Waypoint
from L4_planning.types import SearchNode

from conftest import make_grid, wall_grid

VARIANTS = [AStar, AStarCS, AStarRR, AStarRRSW, AStarT]


@pytest.mark.parametrize('planner_cls', VARIANTS)
class TestCommonContract:

    def test_start_equals_destination(self, planner_cls):
        assert planner_cls().calculate_path(make_grid(), (3, 3), (3, 3)) == []

    def test_wall_means_no_path(self, planner_cls):
        assert planner_cls().calculate_path(wall_grid(), (1, 1), (8, 8)) is None

    def test_obstructed_destination(self, planner_cls):
        grid = make_grid(12, 12, obstacles=[(8, 8)])
        path = planner_cls().calculate_path(grid, (3, 3), (8, 8))
        assert path is not None and path[-1] == (8, 8)

    def test_path_avoids_obstacles(self, planner_cls):
        obstacles = [(6, y) for y in range(0, 9)] + [(3, y) for y in range(3, 12)]
        grid = make_grid(12, 12, obstacles=obstacles)
        path = planner_cls().calculate_path(grid, (1, 1), (10, 2))
        assert path is not None
        assert path[-1] == (10, 2)
        assert all(grid[x, y] == 0 for x, y in path)


# =============================================================================
# Corner safety
# =============================================================================

class TestAStarCS:

    def test_no_diagonal_between_blocked_corners(self):
        grid = make_grid(obstacles=[(1, 0), (0, 1)])
        assert AStar().calculate_path(grid, (0, 0), (5, 5)) is not None
        assert AStarCS().calculate_path(grid, (0, 0), (5, 5)) is None

    def test_neighbours(self):
        grid = make_grid(obstacles=[(5, 4)])
        tiles = set(AStarCS().neighbours(grid, 4, 4))
        assert (5, 3) not in tiles and (5, 5) not in tiles
        assert (3, 3) in tiles and (3, 5) in tiles
        assert (5, 4) in tiles      # filtered later by the search

    def test_result_is_smoothed(self):
        path = AStarCS().calculate_path(make_grid(), (0, 0), (9, 4))
        assert path == [Waypoint(9, 4)]


# =============================================================================
# Repulsion
# =============================================================================

class TestAStarRR:

    def test_repulsion_grows_near_obstacles(self):
        grid = make_grid(12, 12, obstacles=[(6, 6)])
        planner = AStarRR()
        assert planner.repulsion(grid, 0, 0) == 0
        near = planner.repulsion(grid, 5, 5)
        far = planner.repulsion(grid, 3, 3)
        assert near == 15
        assert far == 5
        assert planner.repulsion(grid, 9, 9) == 5

    def test_step_cost_includes_repulsion(self):
        grid = make_grid(12, 12, obstacles=[(6, 6)])
        planner = AStarRR()
        parent = SearchNode(4, 5)
        node = SearchNode(5, 5, parent=parent)
        assert planner.step_cost(grid, parent, node) == 10 + 15
        assert AStar().step_cost(grid, parent, node) == 10

    def test_rrsw_smooths_with_width(self):
        path = AStarRRSW().calculate_path(make_grid(14, 14), (3, 3), (10, 10))
        assert path == [Waypoint(10, 10)]


# =============================================================================
# Turn penalty
# =============================================================================

class TestAStarT:

    def test_direction_labels(self):
        assert Direction.from_delta(1, 0) is Direction.E
        assert Direction.from_delta(0, -1) is Direction.N
        assert Direction.from_delta(-1, 1) is Direction.SW
        assert Direction.from_heading(0.0) is Direction.E
        assert Direction.from_heading(90.0) is Direction.N
        assert Direction.from_heading(-135.0) is Direction.SW
        assert Direction.from_heading(180.0) is Direction.W

    def test_turn_steps(self):
        assert Direction.E.turn_steps(Direction.E) == 0
        assert Direction.E.turn_steps(Direction.NE) == 1
        assert Direction.E.turn_steps(Direction.W) == 4
        assert Direction.SE.turn_steps(Direction.NE) == 2
        assert Direction.NONE.turn_steps(Direction.W) == 0

    def test_turning_adds_cost(self):
        planner = AStarT()
        parent = SearchNode(0, 0, direction=Direction.E)
        straight = SearchNode(1, 0, parent=parent, direction=Direction.E)
        turned = SearchNode(0, 1, parent=parent, direction=Direction.S)
        assert planner.step_cost(make_grid(), parent, straight) == 10
        assert planner.step_cost(make_grid(), parent, turned) == 10 + 2 * 10

    def test_same_tile_different_direction_is_new_state(self):
        planner = AStarT()
        a = SearchNode(2, 2, direction=Direction.E)
        b = SearchNode(2, 2, direction=Direction.N)
        assert planner.state_key(a) != planner.state_key(b)
        assert AStar().state_key(a) == AStar().state_key(b)

    def test_start_direction_follows_heading(self):
        assert AStarT().start_direction(-90.0) is Direction.S
        assert AStarT().start_direction(44.0) is Direction.NE
        assert AStar().start_direction(-90.0) is Direction.NONE

    @pytest.mark.parametrize('heading', [0.0, 90.0, 180.0, -90.0])
    def test_plans_from_any_heading(self, heading):
        path = AStarT().calculate_path(make_grid(), (5, 5), (0, 9), start_heading=heading)
        assert path[-1] == (0, 9)
        current = (5, 5)
        for waypoint in path:
            assert max(abs(waypoint[0] - current[0]), abs(waypoint[1] - current[1])) == 1
            current = waypoint
