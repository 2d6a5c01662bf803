"""Noisy pose publication and its GPS/IMU rate limiting."""

import numpy as np
import pytest

from L3_world import PoseEstimator

from conftest import FakeClock


def make_estimator(worlds, clock, **kwargs):
    real, observed, discrete = worlds
    return PoseEstimator(real, observed, discrete, clock=clock, **kwargs)


class TestMotion:

    def test_move_forward_follows_heading(self, worlds, clock):
        estimator = make_estimator(worlds, clock)
        estimator.set_vehicle_pos(1.0, 1.0, 0.0)
        estimator.move_forward(0.5)
        assert estimator.get_true_pose() == pytest.approx((1.5, 1.0, 0.0))

        estimator.set_vehicle_pos(1.0, 1.0, 90.0)
        estimator.move_forward(0.5)
        x, y, _ = estimator.get_true_pose()
        assert x == pytest.approx(1.0)
        assert y == pytest.approx(0.5)      # North is toward y = 0

    def test_rotate_normalizes(self, worlds, clock):
        estimator = make_estimator(worlds, clock)
        estimator.set_vehicle_pos(1.0, 1.0, 170.0)
        estimator.rotate_ccw(20.0)
        assert estimator.get_true_pose()[2] == pytest.approx(-170.0)
        estimator.rotate_ccw(-10.0)
        assert estimator.get_true_pose()[2] == pytest.approx(180.0)

    @pytest.mark.parametrize('angle, expected', [
        (190.0, -170.0),
        (-180.0, 180.0),
        (180.0, 180.0),
        (540.0, 180.0),
        (-45.0, -45.0),
    ])
    def test_normalize_angle(self, angle, expected):
        assert PoseEstimator.normalize_angle(angle) == pytest.approx(expected)


class TestPublication:

    def test_real_world_always_gets_true_pose(self, worlds, clock):
        real, _, discrete = worlds
        estimator = make_estimator(worlds, clock, gps_period=10.0, imu_period=10.0)
        estimator.set_vehicle_pos(1.0, 1.0, 0.0)
        for _ in range(5):
            clock.advance(0.01)
            estimator.move_forward(0.1)
            assert real.get_vehicle_pose() == pytest.approx(estimator.get_true_pose())
        # the noisy maps still hold the first publication
        assert discrete.get_vehicle_tile() == discrete.grid.metres_to_tile(1.0, 1.0)

    def test_first_update_publishes(self, worlds, clock):
        _, observed, discrete = worlds
        estimator = make_estimator(worlds, clock)
        estimator.set_vehicle_pos(2.0, 2.0, 30.0)
        assert estimator.gps_updates == 1 and estimator.imu_updates == 1
        assert observed.get_vehicle_pos() == (2.0, 2.0)
        assert observed.get_vehicle_ang() == 30.0
        assert discrete.get_vehicle_tile() == (35, 35)

    @pytest.mark.parametrize('dt', [0.01, 0.05, 0.1])
    def test_gps_rate_independent_of_update_spacing(self, worlds, dt):
        clock = FakeClock()
        estimator = make_estimator(worlds, clock, gps_period=0.5, imu_period=0.01)
        estimator.set_vehicle_pos(0.5, 0.5, 0.0)
        steps = int(round(3.0 / dt))
        for i in range(1, steps + 1):
            clock.now = i * dt
            estimator.move_forward(0.0001)
        # 3 s window, 0.5 s period: floor(3 / 0.5) plus the initial publication
        assert abs(estimator.gps_updates - (6 + 1)) <= 1

    def test_imu_timer_is_independent(self, worlds, clock):
        estimator = make_estimator(worlds, clock, gps_period=0.95, imu_period=0.09)
        estimator.set_vehicle_pos(0.5, 0.5, 0.0)
        for i in range(1, 11):
            clock.now = i * 0.1
            estimator.rotate_ccw(1.0)
        assert estimator.imu_updates == 11
        assert estimator.gps_updates == 2

    def test_update_maps_disabled(self, worlds, clock):
        real, observed, discrete = worlds
        estimator = make_estimator(worlds, clock, update_maps=False)
        estimator.set_vehicle_pos(2.0, 2.0, 30.0)
        assert real.get_vehicle_pos() == (2.0, 2.0)
        assert observed.get_vehicle_pos() == (0.0, 0.0)
        assert discrete.get_vehicle_tile() == (0, 0)


class TestNoise:

    def test_zero_error_is_exact(self, worlds, clock):
        estimator = make_estimator(worlds, clock)
        estimator.set_vehicle_pos(1.2, 0.7, 15.0)
        assert estimator.get_noisy_pose() == pytest.approx(estimator.get_true_pose())

    def test_error_distribution(self, worlds, clock):
        estimator = make_estimator(worlds, clock, dist_error=0.3, ang_error=6.0,
                                   gps_period=0.0, imu_period=0.0,
                                   rng=np.random.default_rng(0))
        estimator.set_vehicle_pos(1.4, 1.4, 0.0)
        xs, angs = [], []
        for _ in range(2000):
            estimator.move_forward(0.0)
            x, _, ang = estimator.get_noisy_pose()
            xs.append(x - 1.4)
            angs.append(ang)
        # 3-sigma errors
        assert np.std(xs) == pytest.approx(0.1, rel=0.1)
        assert np.std(angs) == pytest.approx(2.0, rel=0.1)
        assert abs(np.mean(xs)) < 0.02

    def test_seeded_noise_is_reproducible(self, worlds):
        poses = []
        for _ in range(2):
            estimator = make_estimator(worlds, FakeClock(), dist_error=0.1,
                                       rng=np.random.default_rng(42))
            estimator.set_vehicle_pos(1.0, 1.0, 0.0)
            poses.append(estimator.get_noisy_pose())
        assert poses[0] == poses[1]
