"""
Continuation Visualizer

Replays the execution trace of a program that uses call/cc or shift/reset
against a simulated call-stack model, one trace line at a time.
"""

from continuation_visualizer.state import (
    Frame,
    HistoryAction,
    HistoryEntry,
    Item,
    MachineState,
    ResetMarker,
    SessionState,
    Tower,
)
from continuation_visualizer.trace import Command, classify_line, split_trace
from continuation_visualizer.execution import StackMachine, StepOutcome, autoplay

__all__ = [
    # State Layer
    "Frame",
    "HistoryAction",
    "HistoryEntry",
    "Item",
    "MachineState",
    "ResetMarker",
    "SessionState",
    "Tower",
    # Trace Layer
    "Command",
    "classify_line",
    "split_trace",
    # Execution Layer
    "StackMachine",
    "StepOutcome",
    "autoplay",
]
