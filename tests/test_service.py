"""VisualizerService orchestration."""
import asyncio
import sys
import textwrap
import threading
import time

import pytest

from continuation_visualizer.data.sample_programs import SAMPLE_PROGRAMS
from continuation_visualizer.execution.engine import StackMachine
from continuation_visualizer.execution.schemas.state_machine import StepOutcome
from continuation_visualizer.repositories.session import InMemorySessionRepository
from continuation_visualizer.repositories.trace import InMemoryTraceRepository
from continuation_visualizer.runner.adapters.racket_adapter import RacketTraceRunner
from continuation_visualizer.services.exceptions import SessionNotFoundError
from continuation_visualizer.services.visualizer import VisualizerService


class TestVisualizerService:
    def test_execute_source_installs_and_archives_trace(self, service):
        session = service.create_session()
        program = SAMPLE_PROGRAMS["arithmetic"]

        session, result = asyncio.run(service.execute_source(session.session_id, program.code))

        assert result.success
        assert result.line_count == 7
        assert session.source == program.code
        assert service.latest_trace().trace == program.trace

        for _ in range(result.line_count):
            session, outcome = service.step(session.session_id)
        assert session.machine.output == ["2"]
        assert service.step(session.session_id)[1] == StepOutcome.FINISHED

    def test_evaluator_failure_leaves_empty_trace(self, service):
        session = service.create_session()
        service.load_trace(session.session_id, "push (a)\n1\n")
        service.step(session.session_id)

        session, result = asyncio.run(service.execute_source(session.session_id, "(broken"))

        assert not result.success
        assert result.error
        assert session.machine.lines == []
        assert session.machine.towers == []
        assert service.latest_trace() is None

    def test_reset_rewinds_session(self, service):
        session = service.create_session()
        service.load_trace(session.session_id, "push (a)\n1\n")
        service.step(session.session_id)

        session = service.reset(session.session_id)

        assert session.machine.cursor == 0
        assert session.machine.towers == []
        assert session.machine.lines == ["push (a)", "1"]

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFoundError):
            service.step("missing")

    def test_undecodable_evaluator_output_leaves_empty_trace(self, tmp_path):
        (tmp_path / "transformer.rkt").write_text(textwrap.dedent("""
            from pathlib import Path
            here = Path(__file__).parent
            (here / "output.txt").write_bytes(b"push (a)\\n\\xff\\xfe\\n")
        """))
        service = VisualizerService(
            session_repository=InMemorySessionRepository(),
            trace_repository=InMemoryTraceRepository(),
            runner=RacketTraceRunner(work_dir=str(tmp_path), executable=sys.executable),
        )
        session = service.create_session()
        service.load_trace(session.session_id, "push (a)\n1\n")
        service.step(session.session_id)

        session, result = asyncio.run(service.execute_source(session.session_id, "(+ 1 2)"))

        assert not result.success
        assert session.source == "(+ 1 2)"
        assert session.machine.lines == []
        assert session.machine.cursor == 0
        assert session.machine.towers == []
        assert service.latest_trace() is None


class TestSessionSerialization:
    def test_concurrent_steps_on_one_session_never_overlap(self, service, monkeypatch):
        active = []
        max_active = [0]
        lock = threading.Lock()

        class SlowMachine(StackMachine):
            def step(self):
                with lock:
                    active.append(1)
                    max_active[0] = max(max_active[0], len(active))
                time.sleep(0.01)
                try:
                    return super().step()
                finally:
                    with lock:
                        active.pop()

        monkeypatch.setattr("continuation_visualizer.services.visualizer.StackMachine", SlowMachine)
        session = service.create_session()
        lines = [f"push (f {n})" for n in range(8)]
        service.load_trace(session.session_id, "\n".join(lines))

        threads = [
            threading.Thread(target=service.step, args=(session.session_id,))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert max_active[0] == 1
        session = service.get_session(session.session_id)
        assert session.machine.cursor == 8
        main = session.machine.towers[0].frames[0]
        assert [item.value for item in main.items] == [f"(f {n})" for n in range(8)]

    def test_other_sessions_are_not_blocked(self, service):
        first = service.create_session()
        second = service.create_session()
        service.load_trace(first.session_id, "push (a)")
        service.load_trace(second.session_id, "push (b)")

        with service._lock_for(first.session_id):
            session, outcome = service.step(second.session_id)

        assert outcome == StepOutcome.APPLIED
        assert session.machine.cursor == 1

    def test_delete_drops_session_lock(self, service):
        session = service.create_session()
        service.step(session.session_id)

        assert service.delete_session(session.session_id)
        assert session.session_id not in service._locks
