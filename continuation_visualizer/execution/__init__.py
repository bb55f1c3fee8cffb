"""
Execution Layer - Trace Replay

Defines the StackMachine (the trace-driven stack state machine) and the
playback scheduler used by animated renderers.
"""

from continuation_visualizer.execution.engine import StackMachine
from continuation_visualizer.execution.playback import autoplay
from continuation_visualizer.execution.schemas.state_machine import StepOutcome


__all__ = [
    "StackMachine",
    "StepOutcome",
    "autoplay",
]
