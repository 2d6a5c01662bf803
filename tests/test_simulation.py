"""Coordinator: simulation loop, run metrics and command line."""

import json
import os

import numpy as np
import pytest

from L3_world import Environment, Vehicle, SensorSpec, ScenarioPresets
from L4_planning import default_registry

from simulation import SimulationLoop, RunMetrics, SimulatedClock, parse_arguments, main


def small_vehicle(**kwargs):
    """Sparse sweeps so a cycle stays cheap; 1.6 s of driving per cycle."""
    params = dict(
        lidar=SensorSpec(range=90.0, increment=10.0, distance=2.0, period=0.8),
        camera=SensorSpec(range=90.0, increment=10.0, distance=1.0, period=0.8),
        gps_period=0.001,
        imu_period=0.001,
        strategy='AStar'
    )
    params.update(kwargs)
    return Vehicle(**params)


# =============================================================================
# Unthreaded runs
# =============================================================================

class TestSimulatedClockRun:

    def test_reaches_goal_on_empty_field(self):
        environment = Environment(start=(0.5, 0.5), goal=(1.0, 1.0))
        simulation = SimulationLoop(small_vehicle(), environment,
                                    max_cycles=40, threaded=False)
        assert simulation.cycle_period == pytest.approx(1.6)
        assert simulation.run()
        assert simulation.goal_reached
        assert simulation.distance_to_goal() < 0.2
        assert simulation.cycles <= 5
        assert not simulation.motion.is_alive()

        metrics = simulation.metrics.compute_metrics()
        assert metrics['cycles'] == simulation.cycles
        assert metrics['planning']['successful'] >= 1
        assert metrics['distance_travelled'] > 0.4

    def test_max_cycles_ends_unreachable_run(self):
        simulation = SimulationLoop(small_vehicle(), ScenarioPresets.wall(),
                                    max_cycles=2, threaded=False)
        assert not simulation.run()
        assert simulation.cycles == 2
        assert len(simulation.metrics.cycles) == 2

    def test_goal_checked_after_first_cycle(self):
        environment = Environment(start=(1.95, 1.95), goal=(2.0, 2.0))
        simulation = SimulationLoop(small_vehicle(), environment, threaded=False)
        assert simulation.at_goal()
        assert simulation.run()
        assert simulation.cycles == 1

    def test_seeded_runs_are_reproducible(self):
        finals = []
        for _ in range(2):
            environment = Environment(start=(0.5, 0.5), goal=(1.5, 0.6))
            simulation = SimulationLoop(small_vehicle(gps_error=0.02, imu_error=2.0),
                                        environment, max_cycles=3, threaded=False,
                                        rng=np.random.default_rng(5))
            simulation.run()
            finals.append(simulation.pose.get_true_pose())
        assert finals[0] == finals[1]

    def test_default_strategy_assigned(self):
        simulation = SimulationLoop(small_vehicle(strategy=None), Environment(), threaded=False)
        assert simulation.vehicle.strategy == 'AStar'
        assert simulation.strategy.name == 'AStar'


# =============================================================================
# Threaded runs
# =============================================================================

class TestThreadedRun:

    def test_motion_thread_stopped_at_goal(self):
        vehicle = small_vehicle(
            lidar=SensorSpec(range=90.0, increment=10.0, distance=2.0, period=0.05),
            camera=SensorSpec(range=90.0, increment=10.0, distance=1.0, period=0.05))
        environment = Environment(start=(1.95, 1.95), goal=(2.0, 2.0))
        simulation = SimulationLoop(vehicle, environment, max_cycles=5, threaded=True)
        assert simulation.run()
        assert simulation.stop_event.is_set()
        assert not simulation.motion.is_alive()


# =============================================================================
# Validation
# =============================================================================

class TestValidation:

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            SimulationLoop(small_vehicle(strategy='Dijkstra'), Environment(), threaded=False)

    def test_start_outside_map(self):
        with pytest.raises(ValueError, match="outside the map"):
            SimulationLoop(small_vehicle(), Environment(start=(3.5, 0.5)), threaded=False)

    def test_goal_outside_map(self):
        with pytest.raises(ValueError, match="outside the map"):
            SimulationLoop(small_vehicle(), Environment(goal=(1.0, 4.0)), threaded=False)

    def test_non_positive_max_cycles(self):
        with pytest.raises(ValueError):
            SimulationLoop(small_vehicle(), Environment(), max_cycles=0, threaded=False)


# =============================================================================
# Run metrics
# =============================================================================

def record_two(metrics):
    metrics.record(1, 1.6, (0.0, 0.0, 0.0), (0.03, 0.04, 0.0), (0, 0),
                   path_length=10, planned=True, plan_time=0.002,
                   obstacle_tiles=3, obstacle_hits=5, line_hits=0)
    metrics.record(2, 3.2, (0.3, 0.4, 0.0), (0.3, 0.4, 0.0), (5, 7),
                   path_length=0, planned=False, plan_time=0.004,
                   obstacle_tiles=8, obstacle_hits=9, line_hits=1)


class TestRunMetrics:

    def test_empty(self):
        assert RunMetrics().compute_metrics() == {'cycles': 0}

    def test_summary(self):
        metrics = RunMetrics()
        record_two(metrics)
        summary = metrics.compute_metrics()
        assert summary['cycles'] == 2
        assert summary['planning']['successful'] == 1
        assert summary['planning']['failed'] == 1
        assert summary['planning']['mean_time'] == pytest.approx(0.003)
        assert summary['planning']['max_time'] == pytest.approx(0.004)
        assert summary['distance_travelled'] == pytest.approx(0.5)
        assert summary['position_error']['mean'] == pytest.approx(0.025)
        assert summary['position_error']['max'] == pytest.approx(0.05)
        assert summary['final_obstacle_tiles'] == 8
        assert summary['duration'] == pytest.approx(3.2)

    def test_export(self, tmp_path):
        metrics = RunMetrics()
        record_two(metrics)
        files = metrics.export('AStar', 'empty', base_log_dir=str(tmp_path))
        assert os.path.dirname(files['csv']) == os.path.join(str(tmp_path), 'run_log')
        assert metrics.to_dataframe().shape == (2, 16)
        with open(files['json'], encoding='utf-8') as f:
            output = json.load(f)
        assert output['strategy'] == 'AStar'
        assert output['scenario'] == 'empty'
        assert output['metrics']['cycles'] == 2

    def test_export_without_cycles_writes_summary_only(self, tmp_path):
        files = RunMetrics().export('AStar', 'empty', base_log_dir=str(tmp_path))
        assert 'csv' not in files
        assert os.path.exists(files['json'])


class TestSimulatedClock:

    def test_advance(self):
        clock = SimulatedClock(1.0)
        clock.advance(0.5)
        assert clock() == 1.5


# =============================================================================
# Command line
# =============================================================================

class TestCommandLine:

    def test_defaults(self):
        args = parse_arguments(default_registry(), [])
        assert args.strategy == 'AStar'
        assert args.scenario == 'scattered'
        assert args.max_cycles is None
        assert args.seed is None
        assert not args.fast
        assert not args.no_export

    def test_strategy_choices(self):
        args = parse_arguments(default_registry(), ['--strategy', 'DStarLite', '--fast'])
        assert args.strategy == 'DStarLite'
        assert args.fast
        with pytest.raises(SystemExit):
            parse_arguments(default_registry(), ['--strategy', 'Dijkstra'])

    def test_main_single_fast_cycle(self):
        code = main(['--fast', '--scenario', 'empty', '--max_cycles', '1',
                     '--no_export', '--log_level', 'WARNING'])
        assert code == 1
