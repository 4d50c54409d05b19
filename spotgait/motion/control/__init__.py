"""Motion control subsystem for spotgait."""

from spotgait.motion.control.trajectory_interpolator import (
    InvalidDuration,
    TrajectoryInterpolator,
    compute_step_count,
    linear_waypoints,
)
from spotgait.motion.control.gait_sequencer import (
    DEFAULT_POSES,
    REQUIRED_POSES,
    WALK_CYCLE,
    GaitParameters,
    GaitPhase,
    GaitSequencer,
    Pose,
    load_pose_table,
)

__all__ = [
    "InvalidDuration",
    "TrajectoryInterpolator",
    "compute_step_count",
    "linear_waypoints",
    "DEFAULT_POSES",
    "REQUIRED_POSES",
    "WALK_CYCLE",
    "GaitParameters",
    "GaitPhase",
    "GaitSequencer",
    "Pose",
    "load_pose_table",
]
