"""
Step Outcomes - Replay Transition Definitions

Describes what a single step did to the session, independent of which
command was on the line.
"""

from enum import Enum, auto


class StepOutcome(Enum):
    """
    Result of one StackMachine.step() call.
    """

    APPLIED = auto()  # The command's effect was applied.
    SKIPPED = auto()  # A precondition was not met; only the cursor moved.
    FINISHED = auto()  # The cursor was already past the last line.
