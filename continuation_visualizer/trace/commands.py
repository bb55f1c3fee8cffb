"""
Trace Commands - Typed Line Protocol

Each non-blank trace line emitted by the instrumented evaluator is classified
into exactly one of these commands. Lines that match nothing become an
OutputCommand (a finalized result).
"""

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class ResetCommand:
    """`reset: (<expr>)` - a delimiter is installed."""
    expr: str


@dataclass(frozen=True)
class ShiftCommand:
    """`shift: <name> (<expr>)` - delimited capture up to the reset marker."""
    name: str
    expr: str


@dataclass(frozen=True)
class SetCommand:
    """`set: <name> => <expr>` - the latest continuation is bound to a name."""
    name: str
    expr: str


@dataclass(frozen=True)
class CallCommand:
    """
    `> (<call-expr>) > (<call-expr>) ...` - one or more call entries.

    Attributes:
        calls: The text inside each `> (...)` occurrence, in line order.
    """
    calls: Tuple[str, ...]


@dataclass(frozen=True)
class PushCommand:
    """`push (<expr>)` - a sub-expression is pushed onto the top frame."""
    expr: str


@dataclass(frozen=True)
class FrameOutputCommand:
    """A line containing `<` - the top frame surfaces its display value."""
    line: str


@dataclass(frozen=True)
class PopCommand:
    """`pop <expr> => <result>` - the top item is reduced to a value."""
    expr: str
    result: str


@dataclass(frozen=True)
class CaptureCommand:
    """`capture: <name> (<expr>)` - full (call/cc) capture of the last tower."""
    name: str
    expr: str


@dataclass(frozen=True)
class InvokeCommand:
    """`call: <name> (value:<v>,marks:<expr>)` - a stored continuation is resumed."""
    name: str
    value: str
    marks: str


@dataclass(frozen=True)
class OutputCommand:
    """Any other line: a finalized result printed by the program."""
    line: str


Command = Union[
    ResetCommand,
    ShiftCommand,
    SetCommand,
    CallCommand,
    PushCommand,
    FrameOutputCommand,
    PopCommand,
    CaptureCommand,
    InvokeCommand,
    OutputCommand,
]
