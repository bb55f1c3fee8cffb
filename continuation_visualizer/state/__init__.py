"""
State Layer - Runtime Data Models

Defines the stack model (towers, frames, items), the continuation store
entries, the reset marker and the per-session replay state.
"""

from continuation_visualizer.state.models import (
    Frame,
    HistoryAction,
    HistoryEntry,
    IdAllocator,
    Item,
    MachineState,
    ResetMarker,
    SessionState,
    Tower,
)

__all__ = [
    "Frame",
    "HistoryAction",
    "HistoryEntry",
    "IdAllocator",
    "Item",
    "MachineState",
    "ResetMarker",
    "SessionState",
    "Tower",
]
