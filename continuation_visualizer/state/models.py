"""
State Layer - Runtime Data Models

This module defines the simulated stack model that a trace is replayed
against. Towers hold frames, frames hold items. Tower 0 is the live primary
stack; further towers are standing call frames created by binding a
continuation to a name. Captured continuations are stored as named Tower
snapshots.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Literal
from pydantic import BaseModel, Field


CaptureType = Literal["shift"]


class Item(BaseModel):
    """
    One pushed sub-expression (or a value carried in by a continuation).
    """
    id: int
    value: str
    from_continuation: bool = False


class Frame(BaseModel):
    """
    Represents one call activation or one materialized result.

    display_value holds a completed return value waiting to be consumed by
    the enclosing frame. Output frames carry only a display_value.
    """
    id: int
    name: str
    items: List[Item] = Field(default_factory=list)
    display_value: Optional[str] = None
    is_output_frame: bool = False
    capture_type: Optional[CaptureType] = None


class Tower(BaseModel):
    """
    One simulated call stack. Stored continuations are Towers too, named by
    the identifier bound at capture time.
    """
    id: int
    name: Optional[str] = None
    frames: List[Frame] = Field(default_factory=list)
    capture_type: Optional[CaptureType] = None

    @property
    def real_frames(self) -> List[Frame]:
        return [f for f in self.frames if not f.is_output_frame]

    @property
    def output_frames(self) -> List[Frame]:
        return [f for f in self.frames if f.is_output_frame]

    @property
    def top_frame(self) -> Optional[Frame]:
        if not self.frames:
            return None
        return self.frames[-1]

    @property
    def top_real_frame(self) -> Optional[Frame]:
        real = self.real_frames
        if not real:
            return None
        return real[-1]


class ResetMarker(BaseModel):
    """
    Position of the nearest enclosing reset on tower 0.

    Items from item_index onward in the marked frame, plus every frame above
    it, form the delimited region a shift captures.
    """
    frame_index: int
    item_index: int


class HistoryAction(str, Enum):
    CAPTURE = "capture"
    INVOKE = "invoke"
    SET = "set"
    RESET = "reset"
    SHIFT = "shift"


class HistoryEntry(BaseModel):
    action: HistoryAction
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    snapshot: str = ""


class IdAllocator(BaseModel):
    """
    Single session-wide id counter shared by towers, frames and items.
    Ids are never reused.
    """
    next_id: int = 0

    def allocate(self) -> int:
        allocated = self.next_id
        self.next_id += 1
        return allocated


class MachineState(BaseModel):
    """
    The complete mutable state of one replay session.
    """
    lines: List[str] = Field(default_factory=list)
    cursor: int = 0
    finished: bool = False
    current_line: str = ""

    towers: List[Tower] = Field(default_factory=list)
    continuations: List[Tower] = Field(default_factory=list)
    reset_marker: Optional[ResetMarker] = None
    history: List[HistoryEntry] = Field(default_factory=list)
    output: List[str] = Field(default_factory=list)

    # Frames emphasised by call deduplication during the last step
    highlighted_frame_ids: List[int] = Field(default_factory=list)

    allocator: IdAllocator = Field(default_factory=IdAllocator)

    @property
    def primary_tower(self) -> Optional[Tower]:
        if not self.towers:
            return None
        return self.towers[0]


class SessionState(BaseModel):
    """
    The state for a single visualizer session.
    """
    session_id: str
    machine: MachineState = Field(default_factory=MachineState)
    source: Optional[str] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
