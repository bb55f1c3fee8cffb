"""
Line Classifier.

Matches one trace line against the command grammar. Matchers are tried in a
fixed priority order and the first hit wins, so an earlier pattern shadows a
later one even when a line could match both. Nothing here ever fails: a line
that matches no pattern is an OutputCommand.
"""

import re
from typing import Callable, List, Optional, Tuple

from .commands import (
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

RESET_PATTERN = re.compile(r"^reset:\s*\((.+)\)")
SHIFT_PATTERN = re.compile(r"^shift:\s*(\w+)\s*\((.+)\)")
SET_PATTERN = re.compile(r"^set:\s*(\S+)\s*=>\s*(.+)")
CALL_PATTERN = re.compile(r">\s*\(([^)]+)\)")
PUSH_PATTERN = re.compile(r"^push\s+\((.*)")
POP_PATTERN = re.compile(r"^pop\s+(.+?)\s*=>\s*(.+)")
CAPTURE_PATTERN = re.compile(r"capture:\s*(\w+)\s*\((.+)\)")
INVOKE_PATTERN = re.compile(r"call:\s*(\w+)\s*\(value:([^,]+),marks:(.*)")

Matcher = Callable[[str], Optional[Command]]


def split_trace(text: str) -> List[str]:
    """Split raw trace text into trimmed, non-blank lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def find_unmatched_close(text: str) -> int:
    """
    Index of the first `)` that closes a paren opened before `text` began,
    or -1 when every `)` is balanced.
    """
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return index
    return -1


def take_balanced(text: str) -> str:
    """
    Cut `text` at the `)` matching its leading `(`.

    Text that does not start with `(`, or never closes, is returned unchanged.
    """
    if not text.startswith("("):
        return text
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return text[: index + 1]
    return text


# ==========================================================================
# Matchers (priority order is the order of MATCHERS below)
# ==========================================================================


def _match_reset(line: str) -> Optional[Command]:
    match = RESET_PATTERN.match(line)
    if not match:
        return None
    return ResetCommand(expr=match.group(1))


def _match_shift(line: str) -> Optional[Command]:
    match = SHIFT_PATTERN.match(line)
    if not match:
        return None
    return ShiftCommand(name=match.group(1), expr=match.group(2))


def _match_set(line: str) -> Optional[Command]:
    match = SET_PATTERN.match(line)
    if not match:
        return None
    return SetCommand(name=match.group(1), expr=match.group(2).strip())


def _match_call(line: str) -> Optional[Command]:
    if not line.startswith(">"):
        return None
    calls = CALL_PATTERN.findall(line)
    if not calls:
        return None
    return CallCommand(calls=tuple(calls))


def _match_push(line: str) -> Optional[Command]:
    match = PUSH_PATTERN.match(line)
    if not match:
        return None
    body = match.group(1)
    end = find_unmatched_close(body)
    if end < 0:
        return None
    return PushCommand(expr=body[:end])


def _match_frame_output(line: str) -> Optional[Command]:
    if "<" not in line:
        return None
    return FrameOutputCommand(line=line)


def _match_pop(line: str) -> Optional[Command]:
    match = POP_PATTERN.match(line)
    if not match:
        return None
    return PopCommand(expr=match.group(1), result=match.group(2).strip())


def _match_capture(line: str) -> Optional[Command]:
    match = CAPTURE_PATTERN.search(line)
    if not match:
        return None
    return CaptureCommand(name=match.group(1), expr=match.group(2))


def _match_invoke(line: str) -> Optional[Command]:
    match = INVOKE_PATTERN.search(line)
    if not match:
        return None
    marks = match.group(3)
    if marks.startswith("("):
        marks = take_balanced(marks)
    else:
        marks = marks.rstrip(")").strip()
    return InvokeCommand(name=match.group(1), value=match.group(2).strip(), marks=marks)


MATCHERS: Tuple[Matcher, ...] = (
    _match_reset,
    _match_shift,
    _match_set,
    _match_call,
    _match_push,
    _match_frame_output,
    _match_pop,
    _match_capture,
    _match_invoke,
)


def classify_line(line: str) -> Command:
    """
    Classify one trimmed trace line.

    Args:
        line: A single non-blank line of the trace.

    Returns:
        The command of the first matcher that accepts the line, or an
        OutputCommand carrying the raw line.
    """
    for matcher in MATCHERS:
        command = matcher(line)
        if command is not None:
            return command
    return OutputCommand(line=line)
