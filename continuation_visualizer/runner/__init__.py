"""
Runner Layer - External Evaluator

Turns source code into a continuation trace by running an instrumented
evaluator as a subprocess.
"""

from continuation_visualizer.runner.interface import (
    StaticTraceRunner,
    TraceRunner,
    TraceRunnerError,
)

__all__ = [
    "StaticTraceRunner",
    "TraceRunner",
    "TraceRunnerError",
]
