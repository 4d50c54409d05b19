"""
Layer 1: HAL - Webots Platform Driver

Adapts the Webots controller API (controller.Robot / controller.Motor) to
the RobotInterface. The `controller` module ships with Webots and is only
importable from a controller process launched by the simulator, so it is
imported when the platform is constructed rather than at module load.
"""

import logging
from typing import Any, Optional

from spotgait.hal.robot_interface import MotorDevice, RobotConfig, RobotInterface

logger = logging.getLogger(__name__)


class WebotsMotor(MotorDevice):
    """Wraps a controller.Motor."""

    def __init__(self, name: str, motor: Any):
        self._name = name
        self._motor = motor

    @property
    def name(self) -> str:
        return self._name

    def set_position(self, value: float) -> None:
        self._motor.setPosition(float(value))

    def get_target_position(self) -> float:
        return self._motor.getTargetPosition()


class WebotsPlatform(RobotInterface):
    """
    RobotInterface backed by a running Webots simulation.

    Usage (inside a Webots controller script):
        robot = WebotsPlatform(default_robot_config("webots"))
    """

    def __init__(self, config: RobotConfig, robot: Any = None):
        super().__init__(config)
        if robot is None:
            from controller import Robot
            robot = Robot()
        self._robot = robot
        self._time_step = int(self._robot.getBasicTimeStep())
        logger.info(f"WebotsPlatform attached | robot={config.name} | "
                    f"dt={self._time_step}ms")

    def get_basic_time_step(self) -> float:
        return float(self._time_step)

    def step(self) -> bool:
        return self._robot.step(self._time_step) != -1

    def get_device(self, name: str) -> Optional[WebotsMotor]:
        device = self._robot.getDevice(name)
        if device is None:
            return None
        return WebotsMotor(name, device)

    def cleanup(self) -> None:
        # The Python API has no wb_robot_cleanup(); the simulator reclaims
        # the controller when the process exits.
        logger.info("WebotsPlatform cleanup")
