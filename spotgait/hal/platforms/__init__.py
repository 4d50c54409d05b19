"""HAL platform drivers for spotgait."""

from spotgait.hal.platforms.simulation_platform import (
    SimulationPlatform,
    SimMotor,
    JointDynamics,
    load_platform_config,
    robot_config_from_dict,
)
from spotgait.hal.platforms.webots_platform import WebotsPlatform

__all__ = [
    "SimulationPlatform", "SimMotor", "JointDynamics",
    "load_platform_config", "robot_config_from_dict", "WebotsPlatform",
]
