"""
Dependency Injection Wiring (Composition Root).

This module acts as the central "container" for the application's services.
It is responsible for:
1. Instantiating the core Singleton services (Repositories, Runner).
2. Wiring them together into the VisualizerService.
3. Managing the lifecycle of these objects using @lru_cache to ensure
   they are created only once per application process.

Tests override get_visualizer_service through app.dependency_overrides.
"""


from functools import lru_cache
from fastapi import Depends

from ..config import settings
from ..data.sample_programs import SAMPLE_PROGRAMS
from ..runner.interface import TraceRunner, StaticTraceRunner
from ..runner.adapters.racket_adapter import RacketTraceRunner
from ..repositories.session import SessionRepository, InMemorySessionRepository
from ..repositories.trace import TraceRepository, InMemoryTraceRepository, SQLTraceRepository
from ..services.visualizer import VisualizerService

from ..infrastructure.database.connection import init_db

# Trace Runner (Singleton)
@lru_cache()
def get_trace_runner() -> TraceRunner:
    if settings.TRACE_RUNNER == "static":
        return StaticTraceRunner({
            program.code: program.trace
            for program in SAMPLE_PROGRAMS.values()
            if program.trace
        })
    return RacketTraceRunner()

# Session Repository (Singleton)
# Note: In-memory storage must be a singleton so data persists across requests!
@lru_cache()
def get_session_repository() -> SessionRepository:
    return InMemorySessionRepository()

# Trace Repository (Singleton)
@lru_cache()
def get_trace_repository() -> TraceRepository:
    if settings.TRACE_STORE == "memory":
        return InMemoryTraceRepository()
    init_db()
    return SQLTraceRepository()

# The Visualizer Service (Singleton Service)
@lru_cache()
def get_visualizer_service(
    session_repo: SessionRepository = Depends(get_session_repository),
    trace_repo: TraceRepository = Depends(get_trace_repository),
    runner: TraceRunner = Depends(get_trace_runner)
) -> VisualizerService:
    """
    Injects all necessary components into the VisualizerService.
    """
    return VisualizerService(
        session_repository=session_repo,
        trace_repository=trace_repo,
        runner=runner
    )
