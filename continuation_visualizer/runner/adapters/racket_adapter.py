"""
Racket Trace Runner.

Writes the user's program into the evaluator work directory, runs the
instrumented Racket transformer and reads back the trace it writes.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from ..interface import TraceRunner, TraceRunnerError
from ..loader import render_program
from ...config import settings

logger = logging.getLogger(__name__)


class RacketTraceRunner(TraceRunner):
    def __init__(
        self,
        work_dir: Optional[str] = None,
        executable: str = settings.RACKET_EXECUTABLE,
        timeout_seconds: float = settings.RUNNER_TIMEOUT_SECONDS,
    ):
        self.work_dir = Path(work_dir or settings.RUNNER_WORK_DIR)
        self.executable = executable
        self.timeout_seconds = timeout_seconds

    async def run(self, source: str) -> str:
        if not source or not source.strip():
            raise TraceRunnerError("No source code provided.")

        self.work_dir.mkdir(parents=True, exist_ok=True)
        input_file = self.work_dir / settings.INPUT_FILE
        output_file = self.work_dir / settings.OUTPUT_FILE
        transformer_file = self.work_dir / settings.TRANSFORMER_FILE

        input_file.write_text(render_program(source), encoding="utf-8")

        # A stale trace from an earlier run must never be mistaken for this one
        if output_file.exists():
            output_file.unlink()

        stdout, stderr = await self._execute(transformer_file)

        try:
            trace = output_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise TraceRunnerError(
                f"Evaluator produced no trace at {output_file}", stdout=stdout, stderr=stderr
            )
        except UnicodeDecodeError as e:
            logger.error(f"Evaluator trace is not valid UTF-8: {e}")
            raise TraceRunnerError(
                f"Evaluator trace at {output_file} is not valid UTF-8", stdout=stdout, stderr=stderr
            )

        logger.info(f"Evaluator produced {len(trace.splitlines())} trace lines")
        return trace

    async def _execute(self, transformer_file: Path):
        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                str(transformer_file),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Could not start evaluator: {e}")
            raise TraceRunnerError(f"Could not start evaluator: {e}")

        try:
            raw_stdout, raw_stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.error(f"Evaluator timed out after {self.timeout_seconds}s")
            raise TraceRunnerError(f"Evaluator timed out after {self.timeout_seconds} seconds")

        stdout = raw_stdout.decode("utf-8", errors="replace")
        stderr = raw_stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            logger.error(f"Evaluator exited with status {process.returncode}: {stderr}")
            raise TraceRunnerError(
                f"Evaluator exited with status {process.returncode}",
                stdout=stdout,
                stderr=stderr,
            )

        return stdout, stderr
