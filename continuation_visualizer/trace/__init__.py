"""
Trace Layer - Line Protocol

Parses the line-oriented log produced by the instrumented evaluator into
typed commands.
"""

from continuation_visualizer.trace.classifier import classify_line, split_trace
from continuation_visualizer.trace.commands import (
    CallCommand,
    CaptureCommand,
    Command,
    FrameOutputCommand,
    InvokeCommand,
    OutputCommand,
    PopCommand,
    PushCommand,
    ResetCommand,
    SetCommand,
    ShiftCommand,
)

__all__ = [
    "classify_line",
    "split_trace",
    "CallCommand",
    "CaptureCommand",
    "Command",
    "FrameOutputCommand",
    "InvokeCommand",
    "OutputCommand",
    "PopCommand",
    "PushCommand",
    "ResetCommand",
    "SetCommand",
    "ShiftCommand",
]
