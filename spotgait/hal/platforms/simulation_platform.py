"""
Layer 1: HAL - Simulation Platform Driver

Implements the RobotInterface for a simulated quadruped with no external
simulator. This is the primary development and testing host for spotgait;
drop-in replacement with Webots is provided by WebotsPlatform.

The built-in simulator provides:
  - A fixed basic time step and a simulation clock
  - Position-controlled joints that track their target under a velocity limit
  - An optional end-of-simulation signal after a fixed duration
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import yaml

from spotgait.hal.robot_interface import (
    JointConfig, MotorDevice, RobotConfig, RobotInterface, SPOT_MOTOR_NAMES,
    config_float, config_section,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Joint Simulation
# ============================================================================

@dataclass
class SimJoint:
    """Simulated joint state."""
    config: JointConfig
    position: float = 0.0
    velocity: float = 0.0
    target_position: float = 0.0


class SimMotor(MotorDevice):
    """Motor handle returned by SimulationPlatform.get_device()."""

    def __init__(self, joint: SimJoint):
        self._joint = joint

    @property
    def name(self) -> str:
        return self._joint.config.name

    def set_position(self, value: float) -> None:
        self._joint.target_position = float(value)

    def get_target_position(self) -> float:
        return self._joint.target_position

    def get_position(self) -> float:
        """Actual (simulated) joint position."""
        return self._joint.position


class JointDynamics:
    """
    Kinematic joint model: each tick a joint moves toward its target,
    at most velocity_max * dt.
    """

    def __init__(self, dt: float, velocity_max: float = 10.0):
        self.dt = dt
        self.velocity_max = velocity_max
        self.sim_time = 0.0
        self._joints: Dict[str, SimJoint] = {}

    def add_joint(self, config: JointConfig) -> SimJoint:
        joint = SimJoint(
            config=config,
            position=config.default_position,
            target_position=config.default_position,
        )
        self._joints[config.name] = joint
        return joint

    def get_joint(self, name: str) -> Optional[SimJoint]:
        return self._joints.get(name)

    def step(self) -> None:
        """Advance simulation by one timestep."""
        max_delta = self.velocity_max * self.dt
        for joint in self._joints.values():
            delta = np.clip(joint.target_position - joint.position, -max_delta, max_delta)
            joint.position += float(delta)
            joint.velocity = float(delta) / self.dt
        self.sim_time += self.dt

    @property
    def joint_count(self) -> int:
        return len(self._joints)


# ============================================================================
# Simulation Platform Driver
# ============================================================================

class SimulationPlatform(RobotInterface):
    """
    Built-in simulation host implementing the RobotInterface.

    Usage:
        config = load_platform_config("config/platforms/spot.yaml")
        robot = SimulationPlatform(config)
        motors = MotorBank.resolve(robot)
        while robot.step():
            ...
    """

    def __init__(self, config: RobotConfig):
        super().__init__(config)
        if config.time_step_ms <= 0:
            raise ValueError(f"time_step_ms must be positive, got {config.time_step_ms}")

        self._dynamics = JointDynamics(
            dt=config.time_step_ms / 1000.0,
            velocity_max=config.joint_velocity_max,
        )
        self._devices: Dict[str, SimMotor] = {}
        for joint_config in config.joints:
            self._devices[joint_config.name] = SimMotor(self._dynamics.add_joint(joint_config))

        self._step_count = 0
        self._is_running = True

        logger.info(f"SimulationPlatform created | robot={config.name} | "
                    f"joints={len(self._devices)} | dt={config.time_step_ms:.1f}ms")

    def get_basic_time_step(self) -> float:
        return self.config.time_step_ms

    def step(self) -> bool:
        """Advance one tick; False once the simulation has ended."""
        if not self._is_running:
            return False

        self._dynamics.step()
        self._step_count += 1

        max_duration = self.config.max_duration_s
        # Half-tick slack absorbs float accumulation in sim_time.
        if max_duration > 0 and self._dynamics.sim_time >= max_duration - self._dynamics.dt / 2:
            logger.info(f"SimulationPlatform reached max duration | "
                        f"t={self._dynamics.sim_time:.3f}s | steps={self._step_count}")
            self._is_running = False
            return False
        return True

    def get_device(self, name: str) -> Optional[SimMotor]:
        return self._devices.get(name)

    def cleanup(self) -> None:
        if self._is_running:
            logger.info(f"SimulationPlatform cleanup | steps={self._step_count}")
        self._is_running = False

    # === Simulation-specific methods ===

    def get_sim_time(self) -> float:
        """Get current simulation time in seconds."""
        return self._dynamics.sim_time

    def get_step_count(self) -> int:
        return self._step_count

    @property
    def is_running(self) -> bool:
        return self._is_running


# ============================================================================
# Config Loader Helper
# ============================================================================

def robot_config_from_dict(raw: Dict[str, Any]) -> RobotConfig:
    """Build a RobotConfig from a parsed platform YAML document."""
    robot_data = config_section(raw, "robot")
    platform = config_section(raw, "platform")
    sim = config_section(robot_data, "simulation", "robot.simulation")

    names: List[str] = robot_data.get("motors", SPOT_MOTOR_NAMES)
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ValueError("robot.motors must be a list of device names")
    if len(names) != len(SPOT_MOTOR_NAMES):
        raise ValueError(
            f"robot.motors lists {len(names)} names, expected {len(SPOT_MOTOR_NAMES)}")

    time_step_ms = config_float(robot_data.get("time_step_ms", 32.0), "robot.time_step_ms")
    if time_step_ms <= 0:
        raise ValueError(f"robot.time_step_ms must be positive, got {time_step_ms}")

    max_duration_s = check_max_duration(
        config_float(sim.get("max_duration_s", 0.0), "robot.simulation.max_duration_s"),
        "robot.simulation.max_duration_s")

    return RobotConfig(
        name=platform.get("name", "Spot"),
        platform_type=platform.get("type", "simulation"),
        time_step_ms=time_step_ms,
        joints=[JointConfig(joint_id=i, name=n) for i, n in enumerate(names)],
        max_duration_s=max_duration_s,
        joint_velocity_max=config_float(sim.get("joint_velocity_max", 10.0),
                                        "robot.simulation.joint_velocity_max"),
    )


def check_max_duration(value: float, key: str = "max_duration_s") -> float:
    """A simulation length must be >= 0 (0 runs until stopped)."""
    if value < 0:
        raise ValueError(f"{key} must be >= 0, got {value}")
    return value


def load_platform_config(config_path: str) -> RobotConfig:
    """Load a RobotConfig from a YAML platform configuration file."""
    with open(config_path, 'r') as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{config_path}: top level must be a mapping")
    return robot_config_from_dict(raw)
