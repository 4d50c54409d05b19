"""
spotgait: stand-up / walk-forward controller for a simulated quadruped

Drives the twelve joints of a Spot-class robot through a hand-authored
diagonal gait, one host tick per interpolation step.

Architecture: 3-Layer Stack
  L5: Orchestration (run loop, lifecycle, CLI)
  L4: Motion (trajectory interpolator, gait sequencer, pose table)
  L1: Hardware Abstraction (robot interface, motor bank, simulation / Webots)
"""

__version__ = "0.1.0"
