"""
Trace Replayer.

Replays a trace file (or a bundled sample program run through the
evaluator) and prints the stack after every step.

Usage:
    python -m continuation_visualizer.scripts.replay_trace path/to/output.txt
    python -m continuation_visualizer.scripts.replay_trace --sample shift_reset_basic --delay 0.5
"""

import argparse
import asyncio
import logging
from pathlib import Path

from continuation_visualizer.config import settings
from continuation_visualizer.data.sample_programs import SAMPLE_PROGRAMS
from continuation_visualizer.execution.engine import StackMachine
from continuation_visualizer.execution.playback import autoplay
from continuation_visualizer.runner.adapters.racket_adapter import RacketTraceRunner
from continuation_visualizer.runner.interface import StaticTraceRunner, TraceRunner
from continuation_visualizer.state.models import MachineState


def format_state(state: MachineState) -> str:
    lines = [f"[{state.cursor}/{len(state.lines)}] {state.current_line}"]
    for index, tower in enumerate(state.towers):
        frames = []
        for frame in tower.frames:
            if frame.is_output_frame:
                frames.append(f"<{frame.display_value}>")
            else:
                items = " ".join(item.value for item in frame.items)
                frames.append(f"{frame.name}{{{items}}}")
        lines.append(f"  tower {index}: " + " | ".join(frames))
    for continuation in state.continuations:
        kind = "shift" if continuation.capture_type == "shift" else "call/cc"
        lines.append(f"  continuation {continuation.name} ({kind}): {len(continuation.frames)} frames")
    if state.reset_marker:
        marker = state.reset_marker
        lines.append(f"  reset marker: frame {marker.frame_index}, item {marker.item_index}")
    return "\n".join(lines)


async def acquire_trace(sample_id: str) -> str:
    program = SAMPLE_PROGRAMS[sample_id]
    runner: TraceRunner
    if settings.TRACE_RUNNER == "static":
        runner = StaticTraceRunner({program.code: program.trace or ""})
    else:
        runner = RacketTraceRunner()
    return await runner.run(program.code)


async def replay(text: str, delay: float):
    machine = StackMachine()
    machine.load_trace(text)
    print(f"Replaying {machine.line_count} lines.")

    async for state in autoplay(machine, delay_seconds=delay):
        print(format_state(state))

    print("Output:")
    for line in machine.output:
        print(f"  {line}")


def main():
    parser = argparse.ArgumentParser(description="Replay a continuation trace.")
    parser.add_argument("trace_file", nargs="?", help="Trace file to replay.")
    parser.add_argument("--sample", choices=sorted(SAMPLE_PROGRAMS), help="Run a bundled sample program.")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds between steps.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.sample:
        text = asyncio.run(acquire_trace(args.sample))
    elif args.trace_file:
        text = Path(args.trace_file).read_text(encoding="utf-8")
    else:
        parser.error("Provide a trace file or --sample.")

    asyncio.run(replay(text, args.delay))


if __name__ == "__main__":
    main()
