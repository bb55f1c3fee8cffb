"""
Engine - Trace Replay State Machine

The StackMachine replays a continuation trace against the simulated stack
model, one line per step. It owns a single MachineState and never shares it:
one session, one machine state.
-----------------------------------------------

Each step pulls the line under the cursor, classifies it into a command and
applies that command's handler. The cursor always advances by exactly one,
whether the handler applied its effect or skipped it because a precondition
was not met. Nothing in a trace can make a step fail.

The semantic core is the asymmetry between the two continuation flavours:
1. A continuation captured by `shift:` is delimited. Invoking it pushes a
   frame onto tower 0 (resume inside the current context), and it stays in
   the store so it can be invoked again.
2. A continuation captured by `capture:` (call/cc) is full. Invoking it
   replaces tower 0 entirely (jump and discard), and it is removed from the
   store after that first use.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from ..state.models import (
    Frame,
    HistoryAction,
    HistoryEntry,
    Item,
    MachineState,
    ResetMarker,
    Tower,
)
from ..trace.classifier import classify_line, split_trace
from ..trace.commands import (
    CallCommand,
    CaptureCommand,
    Command,
    FrameOutputCommand,
    InvokeCommand,
    OutputCommand,
    PopCommand,
    PushCommand,
    ResetCommand,
    SetCommand,
    ShiftCommand,
)
from .continuations import ContinuationStore, copy_frame, copy_tower, merge_frames
from .schemas.state_machine import StepOutcome

logger = logging.getLogger(__name__)

MAIN_FRAME_NAME = "(main)"
RESET_KEYWORD = re.compile(r"\breset\b")


class StackMachine:
    def __init__(self, state: Optional[MachineState] = None):
        self.state = state if state is not None else MachineState()
        self._handlers: Dict[type, Callable[[Command], bool]] = {
            ResetCommand: self._handle_reset,
            ShiftCommand: self._handle_shift,
            SetCommand: self._handle_set,
            CallCommand: self._handle_call,
            PushCommand: self._handle_push,
            FrameOutputCommand: self._handle_frame_output,
            PopCommand: self._handle_pop,
            CaptureCommand: self._handle_capture,
            InvokeCommand: self._handle_invoke,
            OutputCommand: self._handle_output,
        }

    # ==========================================================================
    # Session API
    # ==========================================================================

    def load_trace(self, text: str):
        """Discards the current session and installs a new trace."""
        self.reset()
        self.state.lines = split_trace(text)
        logger.info(f"Loaded trace with {len(self.state.lines)} lines")

    def reset(self):
        """
        Returns to the initial empty session.
        Stack, continuations, marker, history, output, cursor and the id
        allocator are all discarded. The loaded lines are kept so the same
        trace can be replayed from the start.
        """
        self.state = MachineState(lines=list(self.state.lines))

    def step(self) -> StepOutcome:
        """
        Applies exactly one trace line.
        """
        state = self.state
        if state.cursor >= len(state.lines):
            state.finished = True
            return StepOutcome.FINISHED

        line = state.lines[state.cursor]
        state.current_line = line
        state.highlighted_frame_ids = []

        command = classify_line(line)
        applied = self._handlers[type(command)](command)

        state.cursor += 1
        if applied:
            logger.debug(f"Line {state.cursor}: applied {type(command).__name__}")
            return StepOutcome.APPLIED

        logger.warning(f"Line {state.cursor}: skipped {type(command).__name__}")
        return StepOutcome.SKIPPED

    # ==========================================================================
    # Read accessors (projection for renderers)
    # ==========================================================================

    @property
    def towers(self) -> Tuple[Tower, ...]:
        return tuple(self.state.towers)

    @property
    def continuations(self) -> Tuple[Tower, ...]:
        return tuple(self.state.continuations)

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self.state.history)

    @property
    def output(self) -> Tuple[str, ...]:
        return tuple(self.state.output)

    @property
    def cursor(self) -> int:
        return self.state.cursor

    @property
    def line_count(self) -> int:
        return len(self.state.lines)

    @property
    def reset_marker(self) -> Optional[ResetMarker]:
        return self.state.reset_marker

    @property
    def finished(self) -> bool:
        return self.state.finished

    def snapshot(self) -> MachineState:
        """Deep copy of the current state, safe to hand to a renderer."""
        return self.state.model_copy(deep=True)

    # ==========================================================================
    # Delimiters: reset / shift
    # ==========================================================================

    def _handle_reset(self, command: ResetCommand) -> bool:
        snapshot = RESET_KEYWORD.sub("", command.expr).strip()
        self._record(HistoryAction.RESET, snapshot)
        self._mark_top_of_primary()
        return True

    def _handle_shift(self, command: ShiftCommand) -> bool:
        state = self.state
        marker = state.reset_marker
        primary = state.primary_tower
        if marker is None or primary is None:
            return False

        real_frames = primary.real_frames
        if marker.frame_index >= len(real_frames):
            logger.warning(f"Stale reset marker at frame {marker.frame_index}; shift skipped")
            return False

        marked_frame = real_frames[marker.frame_index]
        frames_above = real_frames[marker.frame_index + 1:]
        captured_items = marked_frame.items[marker.item_index:]

        allocator = state.allocator
        captured_frames: List[Frame] = []
        if captured_items:
            captured_frames.append(
                copy_frame(marked_frame, allocator, items=captured_items, capture_type="shift")
            )
        for frame in frames_above:
            captured_frames.append(copy_frame(frame, allocator, capture_type="shift"))

        continuation = Tower(
            id=allocator.allocate(),
            name=command.name,
            frames=captured_frames,
            capture_type="shift",
        )
        ContinuationStore(state.continuations).add(continuation)
        self._record(HistoryAction.SHIFT, command.expr)

        # Everything below the marker stays as-is; the marked frame keeps
        # only the items in front of the delimiter.
        marked_frame.items = marked_frame.items[: marker.item_index]
        primary.frames = real_frames[: marker.frame_index + 1] + primary.output_frames

        self._mark_top_of_primary()
        logger.info(f"Shift captured '{command.name}' ({len(captured_frames)} frames)")
        return True

    def _mark_top_of_primary(self):
        # With no real frame to mark, an earlier marker is kept as it was;
        # shift re-checks it against the current tower before using it.
        primary = self.state.primary_tower
        if primary is None:
            return
        real_frames = primary.real_frames
        if not real_frames:
            return
        self.state.reset_marker = ResetMarker(
            frame_index=len(real_frames) - 1,
            item_index=len(real_frames[-1].items),
        )

    # ==========================================================================
    # Binding: set / call entries
    # ==========================================================================

    def _handle_set(self, command: SetCommand) -> bool:
        state = self.state
        continuation = ContinuationStore(state.continuations).latest()
        if continuation is None:
            return False

        allocator = state.allocator
        frames = [
            copy_frame(frame, allocator, from_continuation=True)
            for frame in continuation.frames
        ]
        frames.append(Frame(id=allocator.allocate(), name=f"({command.name})"))

        state.towers.append(Tower(id=allocator.allocate(), frames=frames))
        self._record(HistoryAction.SET, f"{command.name} => {command.expr}")
        return True

    def _bound_names(self) -> set:
        """Names that were the target of a set: entry."""
        return {
            entry.snapshot.split(" => ", 1)[0]
            for entry in self.state.history
            if entry.action == HistoryAction.SET
        }

    def _handle_call(self, command: CallCommand) -> bool:
        state = self.state
        allocator = state.allocator
        bound_names = self._bound_names()

        for call in command.calls:
            parts = call.split(None, 1)
            name = f"({call})"

            if len(parts) == 2 and parts[0] in bound_names:
                identifier, argument = parts
                target = state.towers[-1] if state.towers else None
                top = target.top_frame if target is not None else None

                if top is not None and top.name == f"({identifier})":
                    # The bound continuation is called like a function: its
                    # standing frame closes and surfaces the argument.
                    target.frames[-1] = Frame(
                        id=allocator.allocate(),
                        name="",
                        display_value=argument,
                        is_output_frame=True,
                    )
                    continue
                name = argument

            if not state.towers:
                state.towers.append(Tower(id=allocator.allocate()))
            target = state.towers[-1]

            existing = next((f for f in target.frames if f.name == name), None)
            if existing is not None:
                if existing.id not in state.highlighted_frame_ids:
                    state.highlighted_frame_ids.append(existing.id)
                continue

            target.frames.append(Frame(id=allocator.allocate(), name=name))

        return True

    # ==========================================================================
    # Plain evaluation: push / frame output / pop
    # ==========================================================================

    def _handle_push(self, command: PushCommand) -> bool:
        state = self.state
        allocator = state.allocator
        value = f"({command.expr})"

        primary = state.primary_tower
        if primary is None:
            primary = Tower(id=allocator.allocate())
            state.towers.append(primary)

        if not primary.frames:
            frame = Frame(id=allocator.allocate(), name=MAIN_FRAME_NAME)
            frame.items.append(Item(id=allocator.allocate(), value=value))
            primary.frames.append(frame)
            return True

        top = primary.top_real_frame
        if top is None:
            # Only output frames remain; they are cleared by the next output line.
            return False

        top.items.append(Item(id=allocator.allocate(), value=value))
        return True

    def _handle_frame_output(self, command: FrameOutputCommand) -> bool:
        primary = self.state.primary_tower
        if primary is None:
            return False
        real_frames = primary.real_frames
        if not real_frames:
            return False

        value = real_frames[-1].display_value or ""
        remaining = real_frames[:-1]
        if value:
            remaining.append(
                Frame(
                    id=self.state.allocator.allocate(),
                    name="",
                    display_value=value,
                    is_output_frame=True,
                )
            )
        primary.frames = remaining
        return True

    def _handle_pop(self, command: PopCommand) -> bool:
        primary = self.state.primary_tower
        if primary is None:
            return False
        real_frames = primary.real_frames
        if not real_frames or not real_frames[-1].items:
            return False

        top = real_frames[-1]
        top.items = top.items[:-1]
        top.display_value = command.result
        primary.frames = real_frames
        return True

    # ==========================================================================
    # Full continuations: capture / invoke
    # ==========================================================================

    def _handle_capture(self, command: CaptureCommand) -> bool:
        state = self.state
        if not state.towers:
            return False

        continuation = copy_tower(state.towers[-1], state.allocator, name=command.name)
        ContinuationStore(state.continuations).add(continuation)
        self._record(HistoryAction.CAPTURE, f"{command.name} => {command.expr}")
        logger.info(f"Captured continuation '{command.name}' ({len(continuation.frames)} frames)")
        return True

    def _handle_invoke(self, command: InvokeCommand) -> bool:
        state = self.state
        store = ContinuationStore(state.continuations)
        continuation = store.find_latest(command.name)
        if continuation is None:
            logger.warning(f"No continuation named '{command.name}'; invoke skipped")
            return False

        self._record(
            HistoryAction.INVOKE,
            f"value:{command.value} {command.name} => {command.marks}",
        )

        allocator = state.allocator
        frame = merge_frames(f"({command.name} {command.value})", continuation.frames, allocator)

        if continuation.capture_type == "shift":
            primary = state.primary_tower
            if primary is None:
                state.towers.append(Tower(id=allocator.allocate(), frames=[frame]))
            else:
                primary.frames = primary.real_frames + [frame] + primary.output_frames
            return True

        replacement = Tower(id=allocator.allocate(), frames=[frame])
        if state.towers:
            state.towers[0] = replacement
        else:
            state.towers.append(replacement)
        store.remove(continuation)
        return True

    # ==========================================================================
    # Results
    # ==========================================================================

    def _handle_output(self, command: OutputCommand) -> bool:
        state = self.state
        state.output.append(command.line)

        primary = state.primary_tower
        if primary is None:
            return True

        remaining = [f for f in primary.real_frames if f.items]
        if remaining:
            primary.frames = remaining
        else:
            state.towers.pop(0)
        return True

    def _record(self, action: HistoryAction, snapshot: str):
        self.state.history.append(HistoryEntry(action=action, snapshot=snapshot))
