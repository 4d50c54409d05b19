import threading
import unittest

import numpy as np

from _fakes import FakeRobot

from spotgait.hal.motor_bank import MotorBank
from spotgait.hal.robot_interface import TerminationRequested
from spotgait.motion.control.trajectory_interpolator import (
    InvalidDuration, TrajectoryInterpolator, compute_step_count, linear_waypoints,
)


class TestComputeStepCount(unittest.TestCase):
    def test_one_second_at_32ms_is_31_steps(self) -> None:
        self.assertEqual(compute_step_count(1.0, 32.0), 31)

    def test_rounds_to_nearest(self) -> None:
        self.assertEqual(compute_step_count(1.0 / 3.0, 32.0), 10)
        self.assertEqual(compute_step_count(0.05, 32.0), 2)
        self.assertEqual(compute_step_count(1.0, 16.0), 62)

    def test_duration_shorter_than_half_a_step_is_rejected(self) -> None:
        with self.assertRaises(InvalidDuration) as ctx:
            compute_step_count(0.01, 32.0)
        self.assertEqual(ctx.exception.duration, 0.01)
        self.assertEqual(ctx.exception.time_step_ms, 32.0)

    def test_non_positive_or_non_finite_duration_is_rejected(self) -> None:
        for duration in (0.0, -1.0, float("nan"), float("inf")):
            with self.subTest(duration=duration):
                with self.assertRaises(InvalidDuration):
                    compute_step_count(duration, 32.0)

    def test_non_positive_time_step_is_rejected(self) -> None:
        with self.assertRaises(InvalidDuration):
            compute_step_count(1.0, 0.0)

    def test_invalid_duration_is_a_value_error(self) -> None:
        self.assertTrue(issubclass(InvalidDuration, ValueError))


class TestLinearWaypoints(unittest.TestCase):
    def test_waypoints_are_evenly_spaced_and_end_at_goal(self) -> None:
        rng = np.random.RandomState(7)
        start = rng.uniform(-1.0, 1.0, 12)
        goal = rng.uniform(-1.0, 1.0, 12)
        n = 17

        waypoints = list(linear_waypoints(start, goal, n))

        self.assertEqual(len(waypoints), n)
        for i, wp in enumerate(waypoints, start=1):
            expected = start + i * (goal - start) / n
            np.testing.assert_allclose(wp, expected, rtol=0, atol=1e-12)
        np.testing.assert_allclose(waypoints[-1], goal, rtol=0, atol=1e-12)

    def test_identical_start_and_goal_yields_goal_every_step(self) -> None:
        pose = np.linspace(-0.2, 0.2, 12)
        for wp in linear_waypoints(pose, pose.copy(), 9):
            np.testing.assert_array_equal(wp, pose)

    def test_single_step_jumps_to_goal(self) -> None:
        waypoints = list(linear_waypoints(np.zeros(3), np.array([1.0, -2.0, 0.5]), 1))
        self.assertEqual(len(waypoints), 1)
        np.testing.assert_allclose(waypoints[0], [1.0, -2.0, 0.5])

    def test_waypoints_are_independent_copies(self) -> None:
        waypoints = list(linear_waypoints(np.zeros(2), np.ones(2), 2))
        waypoints[0][0] = 99.0
        self.assertEqual(waypoints[1][0], 1.0)

    def test_zero_steps_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            list(linear_waypoints(np.zeros(2), np.ones(2), 0))


class TestTrajectoryInterpolator(unittest.TestCase):
    def _make(self, **kwargs):
        robot = FakeRobot(**kwargs)
        motors = MotorBank.resolve(robot)
        return robot, motors

    def test_commands_one_linear_waypoint_per_tick(self) -> None:
        initial = [0.05 * i for i in range(12)]
        robot, motors = self._make(initial=initial)
        interpolator = TrajectoryInterpolator(robot, motors)
        destination = np.full(12, -0.1)

        interpolator.interpolate(destination, 1.0)

        self.assertEqual(robot.step_calls, 31)
        start = np.array(initial)
        for i, snapshot in enumerate(robot.snapshots, start=1):
            expected = start + i * (destination - start) / 31
            np.testing.assert_allclose(snapshot, expected, rtol=0, atol=1e-12)
        np.testing.assert_allclose(motors.get_target_positions(), destination, atol=1e-12)
        self.assertEqual(interpolator.ticks_executed, 31)
        self.assertEqual(interpolator.interpolations, 1)

    def test_starts_from_last_commanded_targets(self) -> None:
        robot, motors = self._make()
        interpolator = TrajectoryInterpolator(robot, motors)
        interpolator.interpolate(np.full(12, 0.3), 0.064)  # 2 steps
        interpolator.interpolate(np.full(12, 0.5), 0.064)

        np.testing.assert_allclose(robot.snapshots[2], np.full(12, 0.4), atol=1e-12)
        np.testing.assert_allclose(robot.snapshots[3], np.full(12, 0.5), atol=1e-12)

    def test_host_termination_abandons_remaining_steps(self) -> None:
        robot, motors = self._make(max_steps=5)
        interpolator = TrajectoryInterpolator(robot, motors)

        with self.assertRaises(TerminationRequested) as ctx:
            interpolator.interpolate(np.ones(12), 1.0)

        self.assertEqual(ctx.exception.tick, 5)
        self.assertEqual(robot.step_calls, 5)
        for motor in robot.motors:
            self.assertEqual(len(motor.commands), 5)

    def test_cancel_event_stops_after_current_tick(self) -> None:
        robot, motors = self._make()
        cancel = threading.Event()
        cancel.set()
        interpolator = TrajectoryInterpolator(robot, motors, cancel_event=cancel)

        with self.assertRaises(TerminationRequested) as ctx:
            interpolator.interpolate(np.ones(12), 1.0)

        self.assertEqual(robot.step_calls, 1)
        self.assertIn("stop requested", str(ctx.exception))

    def test_invalid_duration_issues_no_commands(self) -> None:
        robot, motors = self._make()
        interpolator = TrajectoryInterpolator(robot, motors)

        with self.assertRaises(InvalidDuration):
            interpolator.interpolate(np.ones(12), 0.001)

        self.assertEqual(robot.step_calls, 0)
        self.assertTrue(all(not m.commands for m in robot.motors))
        self.assertEqual(interpolator.interpolations, 0)

    def test_destination_must_cover_every_joint(self) -> None:
        robot, motors = self._make()
        interpolator = TrajectoryInterpolator(robot, motors)
        with self.assertRaises(ValueError):
            interpolator.interpolate(np.ones(11), 1.0)
        self.assertEqual(robot.step_calls, 0)


if __name__ == "__main__":
    unittest.main()
