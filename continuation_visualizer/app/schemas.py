"""
API Layer - Request/Response Schemas

Pydantic models for API request and response validation.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel

from ..state.models import HistoryEntry, ResetMarker, Tower


class CreateSessionResponse(BaseModel):
    session_id: str


class TraceUpload(BaseModel):
    text: str


class SourceCode(BaseModel):
    code: str


class SessionRead(BaseModel):
    """Read-only projection of one replay session."""
    session_id: str
    cursor: int
    line_count: int
    finished: bool
    current_line: str
    towers: List[Tower]
    continuations: List[Tower]
    reset_marker: Optional[ResetMarker] = None
    history: List[HistoryEntry]
    output: List[str]
    highlighted_frame_ids: List[int]
    source: Optional[str] = None
    updated_at: datetime


class StepResponse(BaseModel):
    outcome: str
    session: SessionRead


class ExecuteResponse(BaseModel):
    success: bool
    line_count: int
    error: Optional[str] = None
    session: SessionRead


class TraceRead(BaseModel):
    source: str
    trace: str
    created_at: datetime


class SampleProgramRead(BaseModel):
    id: str
    title: str
    code: str
