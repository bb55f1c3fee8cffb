from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.responses import Response

from .dependencies import get_visualizer_service
from ..data.sample_programs import SAMPLE_PROGRAMS
from ..services.exceptions import SessionNotFoundError
from ..services.visualizer import VisualizerService
from ..state.models import SessionState
from .schemas import (
    CreateSessionResponse,
    ExecuteResponse,
    SampleProgramRead,
    SessionRead,
    SourceCode,
    StepResponse,
    TraceRead,
    TraceUpload,
)

app = FastAPI(title="Continuation Visualizer")


def to_session_read(session: SessionState) -> SessionRead:
    """
    Maps the internal SessionState onto the public read-only projection.
    """
    machine = session.machine
    return SessionRead(
        session_id=session.session_id,
        cursor=machine.cursor,
        line_count=len(machine.lines),
        finished=machine.finished,
        current_line=machine.current_line,
        towers=machine.towers,
        continuations=machine.continuations,
        reset_marker=machine.reset_marker,
        history=machine.history,
        output=machine.output,
        highlighted_frame_ids=machine.highlighted_frame_ids,
        source=session.source,
        updated_at=session.updated_at,
    )

# --- Sessions ---

@app.post(
    "/sessions",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED
)
def create_session(
    service: VisualizerService = Depends(get_visualizer_service)
):
    """Starts a new empty session."""
    session = service.create_session()
    return CreateSessionResponse(session_id=session.session_id)


@app.get("/sessions/{session_id}", response_model=SessionRead)
def get_session(
    session_id: str,
    service: VisualizerService = Depends(get_visualizer_service)
):
    session = service.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return to_session_read(session)


@app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session_id: str,
    service: VisualizerService = Depends(get_visualizer_service)
):
    """
    Deletes a session. Returns 204 No Content on success.
    """
    success = service.delete_session(session_id)
    if not success:
        raise HTTPException(status_code=404, detail="Session not found")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Replay ---

@app.post("/sessions/{session_id}/trace", response_model=SessionRead)
def load_trace(
    session_id: str,
    upload: TraceUpload,
    service: VisualizerService = Depends(get_visualizer_service)
):
    """Installs a trace and rewinds the session to its first line."""
    try:
        session = service.load_trace(session_id, upload.text)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return to_session_read(session)


@app.post("/sessions/{session_id}/step", response_model=StepResponse)
def step(
    session_id: str,
    service: VisualizerService = Depends(get_visualizer_service)
):
    try:
        session, outcome = service.step(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return StepResponse(outcome=outcome.name, session=to_session_read(session))


@app.post("/sessions/{session_id}/reset", response_model=SessionRead)
def reset(
    session_id: str,
    service: VisualizerService = Depends(get_visualizer_service)
):
    try:
        session = service.reset(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return to_session_read(session)


@app.post("/sessions/{session_id}/execute", response_model=ExecuteResponse)
async def execute(
    session_id: str,
    source: SourceCode,
    service: VisualizerService = Depends(get_visualizer_service)
):
    """
    Runs the program through the evaluator and installs the resulting trace.
    On evaluator failure the session is left with an empty trace.
    """
    if not source.code.strip():
        raise HTTPException(status_code=400, detail="No source code provided")

    try:
        session, result = await service.execute_source(session_id, source.code)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)

    return ExecuteResponse(
        success=result.success,
        line_count=result.line_count,
        error=result.error,
        session=to_session_read(session),
    )

# --- Traces & samples ---

@app.get("/traces/latest", response_model=TraceRead)
def latest_trace(
    service: VisualizerService = Depends(get_visualizer_service)
):
    stored = service.latest_trace()
    if not stored:
        raise HTTPException(status_code=404, detail="No trace recorded yet")
    return TraceRead(source=stored.source, trace=stored.trace, created_at=stored.created_at)


@app.get("/samples", response_model=list[SampleProgramRead])
def list_samples():
    return [
        SampleProgramRead(id=program.id, title=program.title, code=program.code)
        for program in SAMPLE_PROGRAMS.values()
    ]
