"""Shared test fixtures for the continuation visualizer."""
import pytest
from fastapi.testclient import TestClient

from continuation_visualizer.app.dependencies import get_visualizer_service
from continuation_visualizer.app.main import app
from continuation_visualizer.data.sample_programs import SAMPLE_PROGRAMS
from continuation_visualizer.execution.engine import StackMachine
from continuation_visualizer.repositories.session import InMemorySessionRepository
from continuation_visualizer.repositories.trace import InMemoryTraceRepository
from continuation_visualizer.runner.interface import StaticTraceRunner
from continuation_visualizer.services.visualizer import VisualizerService


@pytest.fixture
def replay():
    """Factory fixture: load a trace and step it `steps` times (default: to the end)."""

    def _replay(text: str, steps: int = None) -> StackMachine:
        machine = StackMachine()
        machine.load_trace(text)
        count = machine.line_count if steps is None else steps
        for _ in range(count):
            machine.step()
        return machine

    return _replay


@pytest.fixture
def service():
    runner = StaticTraceRunner({
        program.code: program.trace
        for program in SAMPLE_PROGRAMS.values()
        if program.trace
    })
    return VisualizerService(
        session_repository=InMemorySessionRepository(),
        trace_repository=InMemoryTraceRepository(),
        runner=runner,
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_visualizer_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
