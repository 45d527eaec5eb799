"""Exception hierarchy for bf_machine.

Structural errors (unbalanced loops) are raised before execution starts.
Runtime errors (pointer underflow, opt-in cycle limits) halt the machine
at the offending instruction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class MachineError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class UnbalancedLoopError(MachineError):
    """A `[` or `]` without a matching partner.

    Attributes:
        kind: "unmatched_open" or "unmatched_close"
        position: Instruction index of the (first) offending bracket
        positions: Every offending index (several `[` may be left open)
    """
    kind: str
    position: int
    positions: Tuple[int, ...] = field(default_factory=tuple)


@dataclass
class PointerUnderflowError(MachineError):
    position: int


@dataclass
class CycleLimitExceeded(MachineError, RuntimeError):
    limit: int


def unmatched_close(position: int) -> UnbalancedLoopError:
    return UnbalancedLoopError(
        message=f"Unmatched `]` at instruction {position}",
        kind="unmatched_close",
        position=position,
        positions=(position,),
    )


def unmatched_open(positions: Tuple[int, ...]) -> UnbalancedLoopError:
    listed = ", ".join(str(p) for p in positions)
    return UnbalancedLoopError(
        message=f"Unmatched `[` at instruction {positions[0]} (open: {listed})",
        kind="unmatched_open",
        position=positions[0],
        positions=positions,
    )
