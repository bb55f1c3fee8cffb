"""
Playback - Timed Replay for Presentation Layers

Renderers that animate transitions step the machine through autoplay()
instead of calling step() themselves. The delay only spaces out the
snapshots; the sequence of states is the same with or without it.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional

from ..state.models import MachineState
from .engine import StackMachine
from .schemas.state_machine import StepOutcome

logger = logging.getLogger(__name__)


async def autoplay(
    machine: StackMachine,
    delay_seconds: float = 0.0,
    max_steps: Optional[int] = None,
) -> AsyncIterator[MachineState]:
    """
    Step the machine until the trace is exhausted, yielding a snapshot after
    every applied or skipped line.

    Args:
        machine: The machine to drive. It is stepped in place.
        delay_seconds: Pause between steps.
        max_steps: Stop after this many steps even if lines remain.
    """
    steps = 0
    while max_steps is None or steps < max_steps:
        outcome = machine.step()
        if outcome == StepOutcome.FINISHED:
            break
        steps += 1
        yield machine.snapshot()
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)

    logger.debug(f"Autoplay stopped after {steps} steps")
