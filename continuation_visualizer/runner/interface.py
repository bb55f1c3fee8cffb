"""
Trace Runner Interface.

Defines the contract for the external evaluator: the component that turns a
program's source text into the line-oriented continuation trace the
StackMachine replays.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional


class TraceRunnerError(Exception):
    """
    Raised when the evaluator cannot produce a trace (timeout, crash,
    non-zero exit, missing output).
    """

    def __init__(self, message: str, stdout: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class TraceRunner(ABC):
    @abstractmethod
    async def run(self, source: str) -> str:
        """
        Evaluates `source` with an instrumented evaluator and returns the
        trace text.

        Raises:
            TraceRunnerError: if no complete trace could be produced.
        """
        pass


class StaticTraceRunner(TraceRunner):
    """
    Serves canned traces keyed by source text, for development and tests.
    Unknown sources fail the same way a broken evaluator would.
    """

    def __init__(self, traces: Optional[Dict[str, str]] = None):
        self._traces: Dict[str, str] = {
            source.strip(): trace for source, trace in (traces or {}).items()
        }

    async def run(self, source: str) -> str:
        trace = self._traces.get(source.strip())
        if trace is None:
            raise TraceRunnerError("No canned trace for this program.")
        return trace
