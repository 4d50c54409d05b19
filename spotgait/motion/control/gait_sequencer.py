"""
Layer 4: Motion - Gait Sequencer

Hand-authored quadruped stand-up and walk-forward behaviors built from a
small table of named poses. Each behavior is a fixed sequence of
interpolations; the sequencer keeps no state beyond the active phase.

Walk cycle (diagonal gait):
    shift -> gait_phase_1 (FL + RR swing) -> shift -> gait_phase_2 (FR + RL swing)
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from spotgait.hal.robot_interface import NUMBER_OF_JOINTS, config_float
from spotgait.motion.control.trajectory_interpolator import TrajectoryInterpolator

logger = logging.getLogger(__name__)


# ============================================================================
# Poses
# ============================================================================

@dataclass(frozen=True, eq=False)
class Pose:
    """A named, read-only target vector for all joints (radians, Joint order)."""
    name: str
    positions: np.ndarray

    def __post_init__(self):
        positions = np.array(self.positions, dtype=np.float64)
        if positions.shape != (NUMBER_OF_JOINTS,):
            raise ValueError(
                f"Pose '{self.name}' has {positions.size} values, "
                f"expected {NUMBER_OF_JOINTS}")
        positions.setflags(write=False)
        object.__setattr__(self, "positions", positions)


STAND = "stand"
SHIFT = "shift"
GAIT_PHASE_1 = "gait_phase_1"
GAIT_PHASE_2 = "gait_phase_2"

REQUIRED_POSES = (STAND, SHIFT, GAIT_PHASE_1, GAIT_PHASE_2)

# Rows: front left, front right, rear left, rear right.
# Columns: shoulder abduction, shoulder rotation, elbow.
DEFAULT_POSES: Dict[str, Pose] = {
    STAND: Pose(STAND, [
        -0.1, 0.0, 0.0,
         0.1, 0.0, 0.0,
        -0.1, 0.0, 0.0,
         0.1, 0.0, 0.0,
    ]),
    SHIFT: Pose(SHIFT, [
        -0.1,  0.1, 0.0,
         0.1, -0.1, 0.0,
        -0.1,  0.1, 0.0,
         0.1, -0.1, 0.0,
    ]),
    GAIT_PHASE_1: Pose(GAIT_PHASE_1, [
        -0.15,  0.2, -0.2,
         0.1,   0.0,  0.0,
        -0.1,   0.0,  0.0,
         0.15, -0.2,  0.2,
    ]),
    GAIT_PHASE_2: Pose(GAIT_PHASE_2, [
         0.1,   0.0,  0.0,
        -0.15, -0.2,  0.2,
         0.15,  0.2, -0.2,
        -0.1,   0.0,  0.0,
    ]),
}


def load_pose_table(raw: Optional[Mapping[str, Sequence[float]]]) -> Dict[str, Pose]:
    """
    Build a pose table from a {name: [12 floats]} mapping, layered over
    DEFAULT_POSES. Raises ValueError on malformed entries.
    """
    if raw is not None and not isinstance(raw, Mapping):
        raise ValueError(f"poses must be a mapping, got {raw!r}")
    table = dict(DEFAULT_POSES)
    for name, values in (raw or {}).items():
        if not isinstance(values, (list, tuple)):
            raise ValueError(f"poses.{name} must be a list of {NUMBER_OF_JOINTS} numbers")
        table[name] = Pose(str(name), [config_float(v, f"poses.{name}[{i}]")
                                       for i, v in enumerate(values)])

    missing = [n for n in REQUIRED_POSES if n not in table]
    if missing:
        raise ValueError(f"Pose table is missing: {', '.join(missing)}")
    return table


# ============================================================================
# Gait Sequencer
# ============================================================================

class GaitPhase(Enum):
    """Pose transition currently being executed."""
    IDLE = auto()
    STANDING_UP = auto()
    SHIFT = auto()
    DIAGONAL_1 = auto()
    DIAGONAL_2 = auto()


WALK_CYCLE: Tuple[Tuple[GaitPhase, str], ...] = (
    (GaitPhase.SHIFT, SHIFT),
    (GaitPhase.DIAGONAL_1, GAIT_PHASE_1),
    (GaitPhase.SHIFT, SHIFT),
    (GaitPhase.DIAGONAL_2, GAIT_PHASE_2),
)


@dataclass
class GaitParameters:
    """Timing for the stand/walk demo loop."""
    stand_duration: float = 1.0   # seconds
    walk_duration: float = 1.0    # seconds, nominal
    # Each of the four walk phases lasts walk_duration / walk_phase_divisor.
    # 3.0 keeps the stock controller's timing (one cycle = 4/3 walk_duration).
    walk_phase_divisor: float = 3.0

    def __post_init__(self):
        if self.walk_phase_divisor <= 0:
            raise ValueError(
                f"walk_phase_divisor must be positive, got {self.walk_phase_divisor}")

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "GaitParameters":
        raw = raw or {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"gait must be a mapping, got {raw!r}")
        defaults = cls()
        return cls(**{
            key: config_float(raw.get(key, getattr(defaults, key)), f"gait.{key}")
            for key in ("stand_duration", "walk_duration", "walk_phase_divisor")
        })


class GaitSequencer:
    """
    Realizes stand_up and walk_forward as fixed pose sequences over the
    TrajectoryInterpolator.

    Usage:
        sequencer = GaitSequencer(interpolator)
        sequencer.stand_up(1.0)
        sequencer.walk_forward(1.0)
    """

    def __init__(self, interpolator: TrajectoryInterpolator,
                 poses: Optional[Mapping[str, Pose]] = None,
                 params: Optional[GaitParameters] = None):
        self.interpolator = interpolator
        self.poses: Dict[str, Pose] = dict(poses) if poses is not None else dict(DEFAULT_POSES)
        self.params = params or GaitParameters()
        self.phase = GaitPhase.IDLE
        self._cycles_completed = 0

        missing = [n for n in REQUIRED_POSES if n not in self.poses]
        if missing:
            raise ValueError(f"Pose table is missing: {', '.join(missing)}")

    def stand_up(self, duration: float) -> None:
        self._move(GaitPhase.STANDING_UP, STAND, duration)

    def walk_forward(self, duration: float) -> None:
        phase_duration = duration / self.params.walk_phase_divisor
        for phase, pose_name in WALK_CYCLE:
            self._move(phase, pose_name, phase_duration)

    def run_cycle(self) -> None:
        """One stand-up followed by one walk cycle."""
        self.stand_up(self.params.stand_duration)
        self.walk_forward(self.params.walk_duration)
        self._cycles_completed += 1

    def _move(self, phase: GaitPhase, pose_name: str, duration: float) -> None:
        self.phase = phase
        logger.debug(f"Gait phase {phase.name} -> pose '{pose_name}' over {duration:.3f}s")
        try:
            self.interpolator.interpolate(self.poses[pose_name].positions, duration)
        finally:
            self.phase = GaitPhase.IDLE

    @property
    def cycles_completed(self) -> int:
        return self._cycles_completed

    def walk_sequence(self) -> List[str]:
        return [pose_name for _, pose_name in WALK_CYCLE]

    def get_status(self) -> Dict[str, Any]:
        return {
            "gait_phase": self.phase.name,
            "cycles_completed": self._cycles_completed,
            "interpolations": self.interpolator.interpolations,
            "ticks": self.interpolator.ticks_executed,
        }
