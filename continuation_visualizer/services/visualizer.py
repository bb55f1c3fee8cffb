"""
Visualizer Service - Application Orchestration Layer

This service is the entry point for all replay operations. It loads a
session, wraps its MachineState in a StackMachine, applies the requested
operation and saves the session back. Trace acquisition goes through the
TraceRunner; any evaluator failure leaves the session with an empty trace.

Each session has its own lock. Every load/apply/commit sequence holds it, so
concurrent requests against one session are applied one after another.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from ..execution.engine import StackMachine
from ..execution.schemas.state_machine import StepOutcome
from ..repositories.session import SessionRepository
from ..repositories.trace import StoredTrace, TraceRepository
from ..runner.interface import TraceRunner, TraceRunnerError
from ..state.models import SessionState
from .exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """
    Outcome of running a program through the evaluator.

    Attributes:
        success: False when the evaluator failed; the session then holds an
            empty trace.
        line_count: Number of trace lines installed in the session.
        error: Evaluator failure message, if any.
        stderr: Evaluator stderr, if captured.
    """
    success: bool
    line_count: int = 0
    error: Optional[str] = None
    stderr: Optional[str] = None


class VisualizerService:
    def __init__(
        self,
        session_repository: SessionRepository,
        trace_repository: TraceRepository,
        runner: TraceRunner,
    ):
        self.session_repo = session_repository
        self.trace_repo = trace_repository
        self.runner = runner
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def create_session(self) -> SessionState:
        """Creates a new empty session."""
        session = self.session_repo.create()
        logger.info(f"Created session {session.session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[SessionState]:
        return self.session_repo.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        with self._lock_for(session_id):
            deleted = self.session_repo.delete(session_id)
        with self._locks_guard:
            self._locks.pop(session_id, None)
        return deleted

    def load_trace(self, session_id: str, text: str) -> SessionState:
        """Resets the session and installs `text` as its trace."""
        with self._lock_for(session_id):
            session = self._require(session_id)
            machine = StackMachine(session.machine)
            machine.load_trace(text)
            return self._commit(session, machine)

    def step(self, session_id: str) -> tuple[SessionState, StepOutcome]:
        with self._lock_for(session_id):
            session = self._require(session_id)
            machine = StackMachine(session.machine)
            outcome = machine.step()
            return self._commit(session, machine), outcome

    def reset(self, session_id: str) -> SessionState:
        with self._lock_for(session_id):
            session = self._require(session_id)
            machine = StackMachine(session.machine)
            machine.reset()
            return self._commit(session, machine)

    async def execute_source(self, session_id: str, code: str) -> tuple[SessionState, ExecutionResult]:
        """
        The Acquisition Loop:
        1. Run the evaluator on the source
        2. Archive the trace on success
        3. Install the trace, or an empty one on failure

        The session lock is not held while the evaluator runs; the session is
        looked up again once the trace is in hand.
        """
        self._require(session_id)

        try:
            trace = await self.runner.run(code)
        except TraceRunnerError as e:
            logger.warning(f"Evaluator failed for session {session_id}: {e}")
            session = self._install(session_id, code, "")
            return session, ExecutionResult(success=False, error=str(e), stderr=e.stderr)

        self.trace_repo.save(code, trace)

        session = self._install(session_id, code, trace)
        return session, ExecutionResult(success=True, line_count=len(session.machine.lines))

    def latest_trace(self) -> Optional[StoredTrace]:
        return self.trace_repo.latest()

    def _install(self, session_id: str, code: str, trace: str) -> SessionState:
        with self._lock_for(session_id):
            session = self._require(session_id)
            session.source = code
            machine = StackMachine(session.machine)
            machine.load_trace(trace)
            return self._commit(session, machine)

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(session_id, threading.Lock())

    def _require(self, session_id: str) -> SessionState:
        session = self.session_repo.get(session_id)
        if not session:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def _commit(self, session: SessionState, machine: StackMachine) -> SessionState:
        # reset() swaps in a fresh MachineState, so always write it back
        session.machine = machine.state
        self.session_repo.save(session)
        return session
