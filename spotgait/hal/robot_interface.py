"""
Layer 1: Hardware Abstraction Layer - Abstract Robot Interface

Defines the contract a simulation host must implement so the gait
controller can drive a quadruped through it. The host owns the device
registry, the clock and the process lifecycle; the controller only
resolves motors by name, commands target positions and steps time.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Mapping, Optional, Sequence


NUMBER_OF_JOINTS = 12


class Joint(IntEnum):
    """Fixed joint enumeration. Index i names the same joint in every vector."""
    FRONT_LEFT_SHOULDER_ABDUCTION = 0
    FRONT_LEFT_SHOULDER_ROTATION = 1
    FRONT_LEFT_ELBOW = 2
    FRONT_RIGHT_SHOULDER_ABDUCTION = 3
    FRONT_RIGHT_SHOULDER_ROTATION = 4
    FRONT_RIGHT_ELBOW = 5
    REAR_LEFT_SHOULDER_ABDUCTION = 6
    REAR_LEFT_SHOULDER_ROTATION = 7
    REAR_LEFT_ELBOW = 8
    REAR_RIGHT_SHOULDER_ABDUCTION = 9
    REAR_RIGHT_SHOULDER_ROTATION = 10
    REAR_RIGHT_ELBOW = 11


SPOT_MOTOR_NAMES: List[str] = [
    "front left shoulder abduction motor",
    "front left shoulder rotation motor",
    "front left elbow motor",
    "front right shoulder abduction motor",
    "front right shoulder rotation motor",
    "front right elbow motor",
    "rear left shoulder abduction motor",
    "rear left shoulder rotation motor",
    "rear left elbow motor",
    "rear right shoulder abduction motor",
    "rear right shoulder rotation motor",
    "rear right elbow motor",
]


# ============================================================================
# Conditions
# ============================================================================

class DeviceResolutionFailure(RuntimeError):
    """One or more named devices could not be resolved at startup."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(
            f"Could not resolve {len(self.missing)} device(s): "
            + ", ".join(repr(n) for n in self.missing))


class TerminationRequested(Exception):
    """The host (or a cancellation token) asked the controller to stop."""

    def __init__(self, reason: str = "simulation ended", tick: int = 0):
        self.reason = reason
        self.tick = tick
        super().__init__(f"{reason} (tick {tick})")


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class JointConfig:
    """Configuration for a single robot joint."""
    joint_id: int
    name: str  # device name in the host registry
    default_position: float = 0.0


@dataclass
class RobotConfig:
    """Full robot configuration."""
    name: str
    platform_type: str
    time_step_ms: float = 32.0
    joints: List[JointConfig] = field(default_factory=list)
    max_duration_s: float = 0.0  # 0 = run until the host stops
    joint_velocity_max: float = 10.0  # rad/s, built-in simulator only

    @property
    def num_joints(self) -> int:
        return len(self.joints)

    @property
    def motor_names(self) -> List[str]:
        return [j.name for j in sorted(self.joints, key=lambda j: j.joint_id)]


def config_float(value: Any, key: str) -> float:
    """Convert a raw config value to float, naming the key on failure."""
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number, got {value!r}") from None


def config_section(raw: Mapping[str, Any], key: str,
                   label: Optional[str] = None) -> Mapping[str, Any]:
    """Return raw[key] as a mapping; a missing or null section is empty."""
    section = raw.get(key) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"{label or key} must be a mapping, got {section!r}")
    return section


def default_robot_config(platform_type: str = "simulation") -> RobotConfig:
    """Spot configuration with the stock motor names and a 32ms tick."""
    return RobotConfig(
        name="Spot",
        platform_type=platform_type,
        joints=[JointConfig(joint_id=i, name=n) for i, n in enumerate(SPOT_MOTOR_NAMES)],
    )


# ============================================================================
# Host Contract
# ============================================================================

class MotorDevice(ABC):
    """A single position-controlled actuator owned by the host."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def set_position(self, value: float) -> None:
        """Command a target position, applied on the next tick."""
        ...

    @abstractmethod
    def get_target_position(self) -> float:
        """Last commanded target (not the sensed position)."""
        ...


class RobotInterface(ABC):
    """
    Abstract base class for simulation hosts.

    Every host (the built-in simulator, Webots, test fakes) implements
    this interface. All calls are synchronous; step() is the only call
    that may block, and its return value is the only termination signal.
    """

    def __init__(self, config: RobotConfig):
        self.config = config

    @abstractmethod
    def get_basic_time_step(self) -> float:
        """Fixed tick duration in milliseconds."""
        ...

    @abstractmethod
    def step(self) -> bool:
        """Advance one tick. Returns False when the simulation has ended."""
        ...

    @abstractmethod
    def get_device(self, name: str) -> Optional[MotorDevice]:
        """Resolve a named actuator, or None if the registry has no such device."""
        ...

    def cleanup(self) -> None:
        """Release host resources."""
        pass

    def get_config(self) -> RobotConfig:
        return self.config
