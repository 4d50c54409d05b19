"""Hardware abstraction layer for spotgait."""

from spotgait.hal.robot_interface import (
    NUMBER_OF_JOINTS,
    SPOT_MOTOR_NAMES,
    DeviceResolutionFailure,
    Joint,
    JointConfig,
    MotorDevice,
    RobotConfig,
    RobotInterface,
    TerminationRequested,
    default_robot_config,
)
from spotgait.hal.motor_bank import MotorBank

__all__ = [
    "NUMBER_OF_JOINTS", "SPOT_MOTOR_NAMES", "DeviceResolutionFailure",
    "Joint", "JointConfig", "MotorBank", "MotorDevice", "RobotConfig",
    "RobotInterface", "TerminationRequested", "default_robot_config",
]
