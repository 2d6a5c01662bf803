# =============================================================================
# SIMULATION - Layer Coordinator
# =============================================================================
# Starts the simulation coordinating:
# - L3: World layer (ground truth, observed points, occupancy grid,
#       LIDAR/camera sweeps, noisy pose)
# - L4: Planning layer (search strategy chosen by name)
# - L5: Control layer (motor loop following the path)
# =============================================================================

import os
import sys
import json
import time
import argparse
import threading
import dataclasses
import numpy as np
import pandas as pd
from datetime import datetime
from typing import Optional

from loguru import logger

from L3_world import (
    Environment,
    Vehicle,
    ScenarioPresets,
    RealWorld,
    ObservedWorld,
    DiscreteWorld,
    PerceptionSimulator,
    PoseEstimator,
    MAP_WIDTH,
    MAP_HEIGHT,
    NUM_TILES_X,
    NUM_TILES_Y,
    GOAL_EPSILON
)
from L3_world.config import DEFAULT_START_HEADING
from L4_planning import (
    StrategyRegistry,
    RapidExploringRandomTree,
    default_registry
)
from L5_control import MotionController


# =============================================================================
# Logging
# =============================================================================
def setup_logger(level: str = "INFO", log_dir: Optional[str] = None):
    """
    Route loguru output to a coloured console sink and an optional file.

    Args:
        level: Minimum level for every sink
        log_dir: Directory for a rotating log file, None to disable
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss.SSS}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
        level=level,
        colorize=True
    )

    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            os.path.join(log_dir, "simulation_{time:YYYY-MM-DD}.log"),
            rotation="10 MB",
            retention="7 days",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
        )

    return logger


# =============================================================================
# Simulated Time
# =============================================================================
class SimulatedClock:
    """Manually advanced time source used when the run is not paced."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float):
        self.now += dt


# =============================================================================
# Run Metrics
# =============================================================================
class RunMetrics:
    """Per-cycle record of a run, summarised and exported with pandas."""

    def __init__(self):
        self.cycles = []

    def record(self, cycle: int, sim_time: float, true_pose, noisy_pose, tile,
               path_length: int, planned: bool, plan_time: float,
               obstacle_tiles: int, obstacle_hits: int, line_hits: int):
        self.cycles.append({
            'cycle': cycle,
            'time': sim_time,
            'true_x': true_pose[0],
            'true_y': true_pose[1],
            'true_ang': true_pose[2],
            'noisy_x': noisy_pose[0],
            'noisy_y': noisy_pose[1],
            'noisy_ang': noisy_pose[2],
            'tile_x': tile[0],
            'tile_y': tile[1],
            'path_length': path_length,
            'planned': planned,
            'plan_time': plan_time,
            'obstacle_tiles': obstacle_tiles,
            'obstacle_hits': obstacle_hits,
            'line_hits': line_hits
        })

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.cycles)

    def compute_metrics(self) -> dict:
        metrics = {'cycles': len(self.cycles)}
        if not self.cycles:
            return metrics

        df = self.to_dataframe()
        steps = np.hypot(df['true_x'].diff().fillna(0.0), df['true_y'].diff().fillna(0.0))
        position_error = np.hypot(df['noisy_x'] - df['true_x'], df['noisy_y'] - df['true_y'])

        metrics['planning'] = {
            'successful': int(df['planned'].sum()),
            'failed': int((~df['planned']).sum()),
            'mean_time': float(df['plan_time'].mean()),
            'max_time': float(df['plan_time'].max()),
            'total_time': float(df['plan_time'].sum())
        }
        metrics['distance_travelled'] = float(steps.sum())
        metrics['position_error'] = {
            'mean': float(position_error.mean()),
            'max': float(position_error.max())
        }
        metrics['final_obstacle_tiles'] = int(df['obstacle_tiles'].iloc[-1])
        metrics['duration'] = float(df['time'].iloc[-1])
        return metrics

    def export(self, strategy: str, scenario: str, base_log_dir: str = "log") -> dict:
        """
        Write the cycle log (CSV) and the summary (JSON).

        Returns:
            Mapping of 'csv'/'json' to the written file paths
        """
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        run_log_dir = os.path.join(base_log_dir, "run_log")
        metrics_dir = os.path.join(base_log_dir, "run_metrics")
        for directory in [run_log_dir, metrics_dir]:
            os.makedirs(directory, exist_ok=True)

        files = {}
        if self.cycles:
            csv_file = os.path.join(run_log_dir, f"run_log_{strategy}_{scenario}_{timestamp}.csv")
            self.to_dataframe().to_csv(csv_file, index=False, encoding='utf-8')
            logger.info(f"Run log saved: {csv_file}")
            files['csv'] = csv_file

        json_file = os.path.join(metrics_dir, f"run_metrics_{strategy}_{scenario}_{timestamp}.json")
        output = {
            'timestamp': datetime.now().isoformat(),
            'strategy': strategy,
            'scenario': scenario,
            'metrics': self.compute_metrics()
        }
        with open(json_file, 'w', encoding='utf-8') as f:
            json.dump(output, f, indent=2, ensure_ascii=False, default=str)
        logger.info(f"Metrics saved: {json_file}")
        files['json'] = json_file
        return files


# =============================================================================
# Simulation Loop
# =============================================================================
class SimulationLoop:
    """
    Perceive, plan and act until the vehicle reaches the goal.

    Threaded runs use the wall clock: sweeps are paced by their periods and
    the MotionController drives on its own thread. Unthreaded runs use a
    SimulatedClock and step the motor loop in place for as long as the sweeps
    would have taken, which makes them deterministic for a seeded generator.
    """

    def __init__(self, vehicle: Vehicle, environment: Environment,
                 registry: Optional[StrategyRegistry] = None,
                 max_cycles: Optional[int] = None,
                 threaded: bool = True,
                 pace: Optional[bool] = None,
                 rng: Optional[np.random.Generator] = None,
                 width: float = MAP_WIDTH, height: float = MAP_HEIGHT,
                 num_tiles_x: int = NUM_TILES_X, num_tiles_y: int = NUM_TILES_Y):
        """
        Build the worlds, sensors, pose estimator, planner and motor loop.

        Args:
            vehicle: Vehicle profile; a missing strategy means the registry default
            environment: Obstacle field and mission endpoints
            registry: Strategy lookup, default_registry() if None
            max_cycles: Stop after this many cycles even if the goal is not reached
            threaded: Run the motor loop on its own thread with the wall clock
            pace: Wait out the sweep periods, defaults to ``threaded``
            rng: Generator for the pose noise
            width, height: Map size (m)
            num_tiles_x, num_tiles_y: Occupancy grid size
        """
        self.registry = registry if registry is not None else default_registry()
        if vehicle.strategy is None:
            vehicle = dataclasses.replace(vehicle, strategy=self.registry.default_name())
        vehicle.validate(self.registry.names())
        environment.validate()
        if max_cycles is not None and max_cycles <= 0:
            raise ValueError(f"max_cycles must be positive, got {max_cycles}")

        self.vehicle = vehicle
        self.environment = environment
        self.max_cycles = max_cycles
        self.threaded = threaded
        self.pace = threaded if pace is None else pace

        self.clock = time.monotonic if threaded else SimulatedClock()
        self.stop_event = threading.Event()

        # World triad
        self.real = RealWorld(width, height, environment.obstacles, environment.lines)
        self.observed = ObservedWorld(width, height)
        self.discrete = DiscreteWorld(width, height, num_tiles_x, num_tiles_y)

        if self.discrete.grid.metres_to_tile(*environment.start) is None:
            raise ValueError(f"Start position {environment.start} is outside the map")
        if self.discrete.grid.metres_to_tile(*environment.goal) is None:
            raise ValueError(f"Goal position {environment.goal} is outside the map")

        self.strategy = self.registry.create(vehicle.strategy)
        self.perception = PerceptionSimulator(self.real, self.observed, self.discrete,
                                              pace=self.pace, wake_event=self.stop_event)
        self.pose = PoseEstimator(self.real, self.observed, self.discrete,
                                  dist_error=vehicle.gps_error, ang_error=vehicle.imu_error,
                                  gps_period=vehicle.gps_period, imu_period=vehicle.imu_period,
                                  clock=self.clock, rng=rng)
        self.motion = MotionController(self.discrete, self.pose,
                                       vehicle.linear_velocity, vehicle.rotational_velocity,
                                       stop_event=self.stop_event)

        # Place the vehicle and the goal
        self.pose.set_vehicle_pos(environment.start[0], environment.start[1], DEFAULT_START_HEADING)
        self.real.set_destination_pos(*environment.goal)
        self.observed.set_destination_pos(*environment.goal)
        self.discrete.set_destination_pos(*environment.goal)

        self.metrics = RunMetrics()
        self.cycles = 0
        self.goal_reached = False
        self._start_time = self.clock()

        logger.info(f"Simulation ready: strategy {vehicle.strategy}, "
                    f"start {environment.start}, goal {environment.goal}, "
                    f"{len(environment.obstacles)} obstacles, {len(environment.lines)} lines")

    @property
    def cycle_period(self) -> float:
        """Time one perception step takes (s)."""
        return self.vehicle.lidar.period + self.vehicle.camera.period

    def distance_to_goal(self) -> float:
        """L1 distance from the true position to the goal (m)."""
        x, y = self.real.get_vehicle_pos()
        goal_x, goal_y = self.environment.goal
        return abs(goal_x - x) + abs(goal_y - y)

    def at_goal(self) -> bool:
        return self.distance_to_goal() < GOAL_EPSILON

    # =========================================================================
    # Cycle
    # =========================================================================

    def cycle(self):
        """One perceive, plan and (unthreaded) act step."""
        self.cycles += 1
        obstacle_hits, line_hits = self.perception.perceive(self.vehicle.lidar, self.vehicle.camera)
        planned = self.discrete.calculate_path(self.strategy)
        path = self.discrete.get_path()
        logger.debug(f"Cycle {self.cycles}: plan {'ok' if planned else 'failed'} "
                     f"in {self.discrete.last_plan_duration * 1000:.1f} ms, "
                     f"{len(path)} waypoints")

        if not self.threaded:
            self._drive(self.cycle_period)

        self.metrics.record(
            cycle=self.cycles,
            sim_time=self.clock() - self._start_time,
            true_pose=self.pose.get_true_pose(),
            noisy_pose=self.pose.get_noisy_pose(),
            tile=self.discrete.get_vehicle_tile(),
            path_length=len(path),
            planned=planned,
            plan_time=self.discrete.last_plan_duration,
            obstacle_tiles=self.discrete.grid.obstacle_count(),
            obstacle_hits=obstacle_hits,
            line_hits=line_hits
        )

    def _drive(self, duration: float):
        """Step the motor loop in place on the simulated clock."""
        for _ in range(max(1, int(round(duration / self.motion.period)))):
            self.clock.advance(self.motion.period)
            self.motion.step()
            if self.at_goal():
                break

    def run(self) -> bool:
        """
        Loop until the goal is reached or ``max_cycles`` is exhausted.

        Returns:
            True if the vehicle reached the goal
        """
        logger.info(f"Simulation started ({'threaded' if self.threaded else 'simulated clock'})")
        if self.threaded:
            self.motion.start()
        try:
            while True:
                self.cycle()
                if self.at_goal():
                    self.goal_reached = True
                    break
                if self.threaded and not self.motion.is_alive():
                    raise RuntimeError("Motion controller stopped unexpectedly")
                if self.max_cycles is not None and self.cycles >= self.max_cycles:
                    logger.warning(f"Goal not reached after {self.cycles} cycles, "
                                   f"{self.distance_to_goal():.3f} m away")
                    break
        finally:
            self.motion.stop()

        if self.goal_reached:
            logger.info(f"Goal reached after {self.cycles} cycles")
        return self.goal_reached


# =============================================================================
# Argument Parser
# =============================================================================
def parse_arguments(registry: StrategyRegistry, argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='simulation.py',
        description="""
  AGV NAVIGATION SIMULATOR - LAYERED ARCHITECTURE

  A ground vehicle sweeps a simulated LIDAR and camera over an obstacle
  field, accumulates the hits in an occupancy grid and replans its path
  to the goal after every sweep.

  LAYERS:
    L3: World Layer     - Ground truth, observed points, occupancy grid,
                          sensor sweeps, noisy pose
    L4: Planning Layer  - Grid search strategies
    L5: Control Layer   - Motor loop following the path

  STRATEGIES (--strategy):

    AStar                     - Grid A*, 8-connected
    AStarCS                   - A* without corner cutting, smoothed
    AStarRR                   - A* with obstacle repulsion cost
    AStarRRSW                 - AStarRR with width-aware smoothing
    AStarT                    - A* with turning penalty
    DStarLite                 - Incremental replanning (moving start)
    RapidExploringRandomTree  - Sampling-based tree search
    VectorField               - Potential field lookahead
    VectorFieldSS             - Potential field, smoothed
    VectorFieldSSW            - Potential field, width-aware smoothing

  SCENARIOS (--scenario):

    empty      - No obstacles
    scattered  - A handful of obstacles and a painted line (default)
    corridor   - Two parallel walls
    wall       - A wall across the map, the goal is unreachable
    random     - Randomly placed obstacles (see --seed)
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  python simulation.py                                   # Default strategy, scattered field
  python simulation.py --strategy DStarLite              # Incremental replanning
  python simulation.py --scenario random --seed 7        # Reproducible random field
  python simulation.py --fast --max_cycles 50            # Simulated clock, no waits
  python simulation.py --gps_error 0.05 --imu_error 3    # Noisy pose
"""
    )

    parser.add_argument(
        '--strategy',
        type=str,
        choices=registry.names(),
        default=registry.default_name(),
        metavar='NAME',
        help=f'Planning strategy (default: {registry.default_name()})'
    )

    parser.add_argument(
        '--scenario',
        type=str,
        choices=ScenarioPresets.NAMES,
        default='scattered',
        metavar='NAME',
        help='Obstacle scenario: ' + ', '.join(ScenarioPresets.NAMES) + ' (default: scattered)'
    )

    parser.add_argument(
        '--max_cycles',
        type=int,
        default=None,
        metavar='N',
        help='Stop after N perceive/plan cycles (default: until the goal is reached)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        metavar='N',
        help='Seed for the random scenario, pose noise and sampling planner'
    )

    parser.add_argument(
        '--gps_error',
        type=float,
        default=None,
        metavar='M',
        help='3-sigma GPS position error in metres (default: vehicle default)'
    )

    parser.add_argument(
        '--imu_error',
        type=float,
        default=None,
        metavar='DEG',
        help='3-sigma IMU heading error in degrees (default: vehicle default)'
    )

    parser.add_argument(
        '--fast',
        action='store_true',
        help='Run on a simulated clock without sweep pacing'
    )

    parser.add_argument(
        '--log_level',
        type=str,
        choices=['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        metavar='LEVEL',
        help='Console log level (default: INFO)'
    )

    parser.add_argument(
        '--no_export',
        action='store_true',
        help='Do not write the run log and metrics under log/'
    )

    return parser.parse_args(argv)


# =============================================================================
# Main Entry Point
# =============================================================================
def main(argv=None):
    registry = default_registry()
    args = parse_arguments(registry, argv)
    setup_logger(args.log_level, log_dir=None if args.no_export else "log")

    rng = np.random.default_rng(args.seed)
    if args.seed is not None:
        # seeded tree search, registered late under the same name
        registry.register(RapidExploringRandomTree.name,
                          lambda: RapidExploringRandomTree(rng=rng), replace=True)

    vehicle_args = {'strategy': args.strategy}
    if args.gps_error is not None:
        vehicle_args['gps_error'] = args.gps_error
    if args.imu_error is not None:
        vehicle_args['imu_error'] = args.imu_error
    vehicle = Vehicle(**vehicle_args)
    environment = ScenarioPresets.by_name(args.scenario, rng=rng)

    print("="*60)
    print("AGV NAVIGATION SIMULATOR - LAYERED ARCHITECTURE")
    print("="*60)
    print("LAYERS:")
    print("  L3: World Layer    - Worlds, Sensors, Pose")
    print("  L4: Planning Layer - Search Strategies")
    print("  L5: Control Layer  - Motor Loop")
    print(f"STRATEGY: {vehicle.strategy}")
    print(f"SCENARIO: {args.scenario} ({len(environment.obstacles)} obstacles, "
          f"{len(environment.lines)} lines)")
    print(f"MODE:     {'simulated clock' if args.fast else 'real time'}")
    print("="*60)

    simulation = SimulationLoop(vehicle, environment, registry=registry,
                                max_cycles=args.max_cycles, threaded=not args.fast,
                                rng=rng)
    try:
        reached = simulation.run()
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        reached = False

    metrics = simulation.metrics.compute_metrics()
    if not args.no_export:
        simulation.metrics.export(vehicle.strategy, args.scenario)

    print(f"\n{'='*60}")
    print("RUN SUMMARY")
    print(f"{'='*60}")
    print(f"Goal reached: {'yes' if reached else 'no'}")
    print(f"Cycles: {metrics['cycles']}")
    if 'planning' in metrics:
        plan = metrics['planning']
        print(f"Plans: {plan['successful']} ok, {plan['failed']} failed, "
              f"mean {plan['mean_time'] * 1000:.1f} ms")
        print(f"Distance travelled: {metrics['distance_travelled']:.2f} m")
        print(f"Obstacle tiles: {metrics['final_obstacle_tiles']}")
    print(f"{'='*60}\n")
    return 0 if reached else 1


if __name__ == "__main__":
    sys.exit(main())
