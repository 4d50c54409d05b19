"""
Layer 5: Orchestration - spotgait control loop

The orchestrator ties all layers together into a running controller:
    HAL -> MotorBank -> TrajectoryInterpolator -> GaitSequencer

Usage:
    from spotgait.orchestrator import GaitOrchestrator

    orchestrator = GaitOrchestrator.create("config/platforms/spot.yaml")
    exit_code = orchestrator.run()
"""

from spotgait.orchestrator.gait_orchestrator import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    Backend,
    GaitOrchestrator,
    LoopMetrics,
    OrchestratorState,
    main,
)

__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "Backend",
    "GaitOrchestrator",
    "LoopMetrics",
    "OrchestratorState",
    "main",
]
