"""
Layer 4: Motion - Trajectory Interpolator

Decomposes a move from the current joint targets to a destination pose
into evenly spaced per-tick commands. Each waypoint is sent to every motor
and followed by exactly one host tick.

    GaitSequencer.walk_forward()
        -> TrajectoryInterpolator.interpolate(pose, duration)
            -> MotorBank.set_positions(waypoint) ; RobotInterface.step()
"""

import logging
import math
import threading
from typing import Iterator, Optional

import numpy as np

from spotgait.hal.motor_bank import MotorBank
from spotgait.hal.robot_interface import RobotInterface, TerminationRequested

logger = logging.getLogger(__name__)


class InvalidDuration(ValueError):
    """Requested duration yields fewer than one interpolation step."""

    def __init__(self, duration: float, time_step_ms: float, message: str = ""):
        self.duration = duration
        self.time_step_ms = time_step_ms
        super().__init__(
            message or f"duration {duration!r}s is shorter than one "
                       f"{time_step_ms!r}ms time step")


def compute_step_count(duration: float, time_step_ms: float) -> int:
    """
    Number of ticks for a move: round(duration * 1000 / time_step_ms).

    Raises InvalidDuration if the result would be zero or the inputs are
    not positive finite numbers.
    """
    if not math.isfinite(time_step_ms) or time_step_ms <= 0:
        raise InvalidDuration(duration, time_step_ms,
                              f"time step must be positive, got {time_step_ms!r}ms")
    if not math.isfinite(duration) or duration <= 0:
        raise InvalidDuration(duration, time_step_ms,
                              f"duration must be positive, got {duration!r}s")

    n_steps = int(round(duration * 1000.0 / time_step_ms))
    if n_steps < 1:
        raise InvalidDuration(duration, time_step_ms)
    return n_steps


def linear_waypoints(start: np.ndarray, goal: np.ndarray,
                     n_steps: int) -> Iterator[np.ndarray]:
    """
    Yield n_steps joint vectors from start (exclusive) to goal (inclusive).

    Positions are accumulated one delta at a time, so the last waypoint
    matches goal up to float drift of order n_steps * eps.
    """
    if n_steps < 1:
        raise ValueError(f"n_steps must be >= 1, got {n_steps}")
    start = np.asarray(start, dtype=np.float64)
    goal = np.asarray(goal, dtype=np.float64)
    if start.shape != goal.shape:
        raise ValueError(f"start shape {start.shape} != goal shape {goal.shape}")

    step_difference = (goal - start) / n_steps
    position = start.copy()
    for _ in range(n_steps):
        position += step_difference
        yield position.copy()


class TrajectoryInterpolator:
    """
    Drives the motor bank through a linear joint-space move, one host tick
    per waypoint.

    The start point is always the motors' last commanded targets, never
    the sensed positions. Termination from the host, or a set
    cancellation event, raises TerminationRequested right after the tick
    on which it was observed.
    """

    def __init__(self, robot: RobotInterface, motors: MotorBank,
                 cancel_event: Optional[threading.Event] = None):
        self.robot = robot
        self.motors = motors
        self.cancel_event = cancel_event
        self.time_step_ms = robot.get_basic_time_step()
        self._ticks_executed = 0
        self._interpolations = 0

    def interpolate(self, destination: np.ndarray, duration: float) -> None:
        """Move every joint linearly from its current target to destination."""
        destination = np.asarray(destination, dtype=np.float64)
        if destination.shape != (len(self.motors),):
            raise ValueError(
                f"Destination has shape {destination.shape}, "
                f"expected ({len(self.motors)},)")

        n_steps = compute_step_count(duration, self.time_step_ms)
        current = self.motors.get_target_positions()
        self._interpolations += 1

        for waypoint in linear_waypoints(current, destination, n_steps):
            self.motors.set_positions(waypoint)
            self.tick()

    def tick(self) -> None:
        """Advance the host one step, raising TerminationRequested if asked to stop."""
        keep_running = self.robot.step()
        self._ticks_executed += 1
        if not keep_running:
            raise TerminationRequested("simulation ended", self._ticks_executed)
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise TerminationRequested("stop requested", self._ticks_executed)

    @property
    def ticks_executed(self) -> int:
        return self._ticks_executed

    @property
    def interpolations(self) -> int:
        return self._interpolations
