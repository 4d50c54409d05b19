"""
Layer 5: Orchestration - GaitOrchestrator

The main control loop that brings the quadruped to life inside a host.

Connects all layers into a single running system:
    HAL    -> RobotInterface + MotorBank (device lookup, clock)
    Motion -> TrajectoryInterpolator (per-tick linear moves)
    Gait   -> GaitSequencer (stand up, walk forward)

Control Loop (one host tick per interpolation step):
    1. Stand up over stand_duration
    2. Walk forward: shift, diagonal 1, shift, diagonal 2
    3. Repeat until the host ends the simulation or stop() is called

Lifecycle:
    GaitOrchestrator.create(config_path) -> orchestrator
    orchestrator.start() -> resolves motors, builds the motion stack
    orchestrator.run()   -> loops forever, returns a process exit code
    orchestrator.stop()  -> requests shutdown at the next tick
"""

import logging
import signal
import sys
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from spotgait.hal.motor_bank import MotorBank
from spotgait.hal.robot_interface import (
    DeviceResolutionFailure, RobotInterface, TerminationRequested,
    default_robot_config,
)
from spotgait.hal.platforms.simulation_platform import (
    SimulationPlatform, check_max_duration, robot_config_from_dict,
)
from spotgait.hal.platforms.webots_platform import WebotsPlatform
from spotgait.motion.control.gait_sequencer import (
    GaitParameters, GaitSequencer, Pose, load_pose_table,
)
from spotgait.motion.control.trajectory_interpolator import (
    InvalidDuration, TrajectoryInterpolator,
)

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

DEFAULT_PLATFORM_CONFIG = "config/platforms/spot.yaml"


# ============================================================================
# Orchestrator State
# ============================================================================

class OrchestratorState(Enum):
    """Lifecycle states of the orchestrator."""
    UNINITIALIZED = auto()
    INITIALIZING = auto()
    READY = auto()       # motors resolved, loop not started
    RUNNING = auto()
    STOPPED = auto()
    ERROR = auto()


class Backend(Enum):
    """Which host the controller runs inside."""
    SIMULATION = auto()   # built-in simulator (no external dependencies)
    WEBOTS = auto()       # controller process launched by Webots


@dataclass
class LoopMetrics:
    """Counters for the main loop."""
    cycle_count: int = 0
    ticks: int = 0
    interpolations: int = 0
    total_runtime_s: float = 0.0


# ============================================================================
# GaitOrchestrator
# ============================================================================

class GaitOrchestrator:
    """
    Runs the stand-up / walk-forward demo forever on a RobotInterface.

    Usage:
        orchestrator = GaitOrchestrator.create("config/platforms/spot.yaml")
        exit_code = orchestrator.run()
    """

    def __init__(self, robot: RobotInterface,
                 poses: Optional[Mapping[str, Pose]] = None,
                 gait: Optional[GaitParameters] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.robot = robot
        self.poses = poses
        self.gait = gait or GaitParameters()
        self.state = OrchestratorState.UNINITIALIZED

        self.motors: Optional[MotorBank] = None
        self.interpolator: Optional[TrajectoryInterpolator] = None
        self.sequencer: Optional[GaitSequencer] = None

        self._cancel_event = cancel_event or threading.Event()
        self._start_time: float = 0.0
        self._metrics = LoopMetrics()

    # === Factory ===

    @classmethod
    def create(cls, config_path: str = DEFAULT_PLATFORM_CONFIG,
               backend: Backend = Backend.SIMULATION,
               max_duration_s: Optional[float] = None,
               cancel_event: Optional[threading.Event] = None) -> "GaitOrchestrator":
        """
        Build an orchestrator from a platform YAML file.

        Args:
            config_path: Path to the platform config; defaults are used if missing.
            backend: Host to run inside.
            max_duration_s: Overrides robot.simulation.max_duration_s (simulation only).
            cancel_event: Shared stop flag, e.g. set from a signal handler.
        """
        raw = _load_yaml(config_path)
        if raw:
            robot_config = robot_config_from_dict(raw)
        else:
            robot_config = default_robot_config()
        if max_duration_s is not None:
            robot_config.max_duration_s = check_max_duration(max_duration_s)

        poses = load_pose_table(raw.get("poses"))
        gait = GaitParameters.from_dict(raw.get("gait"))

        if backend == Backend.WEBOTS:
            robot_config.platform_type = "webots"
            robot = WebotsPlatform(robot_config)
        else:
            robot = SimulationPlatform(robot_config)

        return cls(robot, poses=poses, gait=gait, cancel_event=cancel_event)

    # === Lifecycle ===

    def start(self) -> None:
        """Resolve the motor bank and build the motion stack."""
        self.state = OrchestratorState.INITIALIZING
        config = self.robot.get_config()

        try:
            self.motors = MotorBank.resolve(self.robot, config.motor_names)
        except DeviceResolutionFailure:
            self.state = OrchestratorState.ERROR
            raise
        self.interpolator = TrajectoryInterpolator(
            self.robot, self.motors, cancel_event=self._cancel_event)
        self.sequencer = GaitSequencer(self.interpolator, self.poses, self.gait)

        self.state = OrchestratorState.READY
        logger.info(f"GaitOrchestrator ready | robot={config.name} | "
                    f"platform={config.platform_type} | "
                    f"dt={self.robot.get_basic_time_step():.1f}ms | "
                    f"stand={self.gait.stand_duration:.2f}s | "
                    f"walk={self.gait.walk_duration:.2f}s"
                    f"/{self.gait.walk_phase_divisor:g}")

    def run(self) -> int:
        """
        Loop stand_up / walk_forward until the host ends the simulation.

        Returns:
            EXIT_SUCCESS on orderly termination, EXIT_FAILURE if startup
            failed or the loop was left without a termination signal.
        """
        if self.state == OrchestratorState.STOPPED:
            logger.warning("GaitOrchestrator already stopped; not restarting")
            return EXIT_SUCCESS
        if self.state == OrchestratorState.ERROR:
            logger.error("GaitOrchestrator is in ERROR state; not running")
            self.robot.cleanup()
            return EXIT_FAILURE

        if self.state == OrchestratorState.UNINITIALIZED:
            try:
                self.start()
            except DeviceResolutionFailure as e:
                logger.error(f"GaitOrchestrator startup failed: {e}")
                self.state = OrchestratorState.ERROR
                self.robot.cleanup()
                return EXIT_FAILURE

        if self.sequencer is None:
            logger.error(f"GaitOrchestrator not started (state={self.state.name})")
            self.state = OrchestratorState.ERROR
            self.robot.cleanup()
            return EXIT_FAILURE

        self.state = OrchestratorState.RUNNING
        self._start_time = time.time()

        try:
            while True:
                self.sequencer.run_cycle()
                self._metrics.cycle_count += 1
        except TerminationRequested as e:
            logger.info(f"Termination requested: {e}")
            self._shutdown(OrchestratorState.STOPPED)
            return EXIT_SUCCESS
        except InvalidDuration as e:
            logger.error(f"Invalid gait timing: {e}")
            self._shutdown(OrchestratorState.ERROR)
            raise

        self._shutdown(OrchestratorState.ERROR)
        return EXIT_FAILURE

    def stop(self) -> None:
        """Request shutdown; honored after the current tick."""
        self._cancel_event.set()

    def _shutdown(self, final_state: OrchestratorState) -> None:
        self._update_metrics()
        self.robot.cleanup()
        self.state = final_state
        logger.info(f"GaitOrchestrator {final_state.name.lower()} | "
                    f"cycles={self._metrics.cycle_count} | "
                    f"interpolations={self._metrics.interpolations} | "
                    f"ticks={self._metrics.ticks} | "
                    f"runtime={self._metrics.total_runtime_s:.1f}s")

    def _update_metrics(self) -> None:
        if self._start_time:
            self._metrics.total_runtime_s = time.time() - self._start_time
        if self.interpolator:
            self._metrics.ticks = self.interpolator.ticks_executed
            self._metrics.interpolations = self.interpolator.interpolations

    # === Status ===

    @property
    def metrics(self) -> LoopMetrics:
        self._update_metrics()
        return self._metrics

    def get_status(self) -> Dict[str, Any]:
        metrics = self.metrics
        status: Dict[str, Any] = {
            "orchestrator": {
                "state": self.state.name,
                "platform": self.robot.get_config().platform_type,
                "runtime_s": metrics.total_runtime_s,
            },
            "metrics": {
                "cycle_count": metrics.cycle_count,
                "ticks": metrics.ticks,
                "interpolations": metrics.interpolations,
            },
        }
        if self.sequencer:
            status["gait"] = self.sequencer.get_status()
        return status


# ============================================================================
# Utilities
# ============================================================================

def _load_yaml(path: str) -> Dict[str, Any]:
    """Load a YAML configuration file."""
    p = Path(path)
    if not p.exists():
        logger.warning(f"Config not found: {path}, using defaults")
        return {}
    with open(p, 'r') as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(raw).__name__}")
    return raw


# ============================================================================
# CLI Entry Point
# ============================================================================

def main(config_path: str = DEFAULT_PLATFORM_CONFIG,
         backend: Backend = Backend.SIMULATION,
         duration: Optional[float] = None,
         log_level: str = "INFO") -> int:
    """
    Launch the gait demo and return its exit code.

    Usage:
        python -m spotgait.orchestrator.gait_orchestrator --duration 10
        python -m spotgait.orchestrator.gait_orchestrator --backend webots
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    logger.info("Starting spotgait...")

    stop_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info("Shutdown signal received")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, signal_handler)

    orchestrator = GaitOrchestrator.create(
        config_path=config_path,
        backend=backend,
        max_duration_s=duration,
        cancel_event=stop_event,
    )
    return orchestrator.run()


def cli() -> None:
    import argparse
    parser = argparse.ArgumentParser(description="Quadruped stand-up / walk-forward demo")
    parser.add_argument("--platform", default=DEFAULT_PLATFORM_CONFIG,
                        help="Path to platform config YAML")
    parser.add_argument("--backend", choices=["simulation", "webots"], default="simulation",
                        help="Host to run inside")
    parser.add_argument("--duration", type=float, default=None,
                        help="End the built-in simulation after this many seconds")
    parser.add_argument("--log-level", default="INFO",
                        help="Logging level (DEBUG shows every gait phase)")
    args = parser.parse_args()
    sys.exit(main(args.platform, Backend[args.backend.upper()],
                  args.duration, args.log_level))


if __name__ == "__main__":
    cli()
