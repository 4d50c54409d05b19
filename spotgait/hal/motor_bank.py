"""
Layer 1: HAL - Motor Bank

Owns the twelve motor handles for the lifetime of the controller.
Handles are resolved once, all-or-nothing, and never reassigned.
"""

import logging
from typing import Iterator, List, Sequence, Union

import numpy as np

from spotgait.hal.robot_interface import (
    DeviceResolutionFailure, Joint, MotorDevice, RobotInterface, SPOT_MOTOR_NAMES,
)

logger = logging.getLogger(__name__)


class MotorBank:
    """
    Ordered set of motor handles indexed by Joint.

    Usage:
        motors = MotorBank.resolve(robot)
        start = motors.get_target_positions()
        motors.set_positions(start + 0.1)
    """

    def __init__(self, motors: Sequence[MotorDevice]):
        self._motors: List[MotorDevice] = list(motors)

    @classmethod
    def resolve(cls, robot: RobotInterface,
                names: Sequence[str] = SPOT_MOTOR_NAMES) -> "MotorBank":
        """Look up every name once. Raises DeviceResolutionFailure listing all misses."""
        resolved = []
        missing = []
        for name in names:
            device = robot.get_device(name)
            if device is None:
                missing.append(name)
            else:
                resolved.append(device)

        if missing:
            raise DeviceResolutionFailure(missing)

        logger.info(f"MotorBank resolved | motors={len(resolved)}")
        return cls(resolved)

    def get_target_positions(self) -> np.ndarray:
        """Last commanded target of every joint, in Joint order."""
        return np.array([m.get_target_position() for m in self._motors], dtype=np.float64)

    def set_positions(self, positions: Sequence[float]) -> None:
        if len(positions) != len(self._motors):
            raise ValueError(
                f"Joint vector has {len(positions)} entries, "
                f"expected {len(self._motors)}")
        for motor, value in zip(self._motors, positions):
            motor.set_position(float(value))

    @property
    def names(self) -> List[str]:
        return [m.name for m in self._motors]

    def __getitem__(self, joint: Union[Joint, int]) -> MotorDevice:
        return self._motors[int(joint)]

    def __len__(self) -> int:
        return len(self._motors)

    def __iter__(self) -> Iterator[MotorDevice]:
        return iter(self._motors)
